from datetime import date, datetime
from typing import List, Literal, Optional

from pydantic import BaseModel, ConfigDict, Field, condecimal


DecimalValue = condecimal(max_digits=14, decimal_places=2)
InvoiceStatus = Literal["draft", "sent", "paid", "overdue", "cancelled"]


class DocumentLineCreate(BaseModel):
    description: str = Field(..., min_length=1)
    quantity: DecimalValue = Field(..., ge=0)
    unit_price: DecimalValue
    tax_code_id: Optional[int] = None


class InvoiceCreate(BaseModel):
    customer_id: int
    date: date
    due_date: Optional[date] = None
    notes: Optional[str] = None
    lines: List[DocumentLineCreate] = Field(..., min_length=1)
    subtotal: Optional[DecimalValue] = None
    vat_amount: Optional[DecimalValue] = None
    total: Optional[DecimalValue] = None


class InvoiceStatusUpdate(BaseModel):
    status: InvoiceStatus
    posting_date: Optional[date] = None


class DocumentLineResponse(BaseModel):
    id: int
    description: str
    quantity: DecimalValue
    unit_price: DecimalValue
    tax_code_id: Optional[int] = None
    line_total: DecimalValue
    vat_amount: DecimalValue
    gross_total: DecimalValue

    model_config = ConfigDict(from_attributes=True)


class InvoiceResponse(BaseModel):
    id: int
    invoice_number: str
    customer_id: int
    customer_name: Optional[str] = None
    date: date
    due_date: Optional[date] = None
    status: str
    notes: Optional[str] = None
    subtotal: DecimalValue
    vat_amount: DecimalValue
    total: DecimalValue
    journal_id: Optional[int] = None
    created_at: datetime
    lines: List[DocumentLineResponse]

    model_config = ConfigDict(from_attributes=True)
