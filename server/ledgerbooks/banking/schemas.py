from datetime import date, datetime
from typing import List, Literal, Optional

from pydantic import BaseModel, ConfigDict, Field, condecimal


DecimalValue = condecimal(max_digits=14, decimal_places=2)


class BankTransactionCreate(BaseModel):
    date: date
    description: str = Field(..., min_length=1)
    amount: DecimalValue
    reference: Optional[str] = Field(None, max_length=100)


class BankImportRequest(BaseModel):
    transactions: List[BankTransactionCreate] = Field(..., min_length=1)


class BankCsvImportRequest(BaseModel):
    csv_data: str = Field(..., min_length=1)


class BankImportResponse(BaseModel):
    imported: int
    transactions: List["BankTransactionResponse"]


class BankTransactionResponse(BaseModel):
    id: int
    date: date
    description: str
    amount: DecimalValue
    reference: Optional[str] = None
    reconciled: bool
    invoice_id: Optional[int] = None
    bill_id: Optional[int] = None
    reconciled_at: Optional[datetime] = None

    model_config = ConfigDict(from_attributes=True)


class MatchSuggestion(BaseModel):
    type: Literal["invoice", "bill"]
    id: int
    number: str
    party_name: Optional[str] = None
    total: DecimalValue
    reasons: List[str]

    model_config = ConfigDict(from_attributes=True)


class MatchCommit(BaseModel):
    type: Literal["invoice", "bill"]
    id: int


BankImportResponse.model_rebuild()
