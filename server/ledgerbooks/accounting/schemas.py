from datetime import date, datetime
from decimal import Decimal
from typing import List, Optional

from pydantic import BaseModel, ConfigDict, Field, condecimal


DecimalValue = condecimal(max_digits=14, decimal_places=2)


class JournalLineCreate(BaseModel):
    account_id: int
    debit: DecimalValue = Decimal("0.00")
    credit: DecimalValue = Decimal("0.00")
    description: Optional[str] = Field(None, max_length=255)


class JournalCreate(BaseModel):
    date: date
    reference: str = Field(..., min_length=1, max_length=100)
    description: Optional[str] = Field(None, max_length=255)
    lines: List[JournalLineCreate]


class JournalReverse(BaseModel):
    reversal_date: Optional[date] = None


class JournalLineResponse(BaseModel):
    id: int
    account_id: int
    description: Optional[str] = None
    debit: DecimalValue
    credit: DecimalValue

    model_config = ConfigDict(from_attributes=True)


class JournalResponse(BaseModel):
    id: int
    date: date
    reference: str
    description: Optional[str] = None
    source_type: str
    source_id: Optional[int] = None
    reverses_journal_id: Optional[int] = None
    posted_at: datetime
    lines: List[JournalLineResponse]

    model_config = ConfigDict(from_attributes=True)
