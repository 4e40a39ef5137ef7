from datetime import date, datetime
from typing import List, Literal, Optional

from pydantic import BaseModel, ConfigDict, Field

from ledgerbooks.sales.schemas import DecimalValue, DocumentLineCreate, DocumentLineResponse


BillStatus = Literal["draft", "awaiting_approval", "approved", "paid", "cancelled"]


class BillCreate(BaseModel):
    supplier_id: int
    bill_number: Optional[str] = Field(None, max_length=50)
    date: date
    due_date: Optional[date] = None
    notes: Optional[str] = None
    lines: List[DocumentLineCreate] = Field(..., min_length=1)
    subtotal: Optional[DecimalValue] = None
    vat_amount: Optional[DecimalValue] = None
    total: Optional[DecimalValue] = None


class BillStatusUpdate(BaseModel):
    status: BillStatus
    posting_date: Optional[date] = None


class BillResponse(BaseModel):
    id: int
    bill_number: str
    supplier_id: int
    supplier_name: Optional[str] = None
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
