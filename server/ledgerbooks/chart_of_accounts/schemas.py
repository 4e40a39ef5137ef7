from datetime import datetime
from decimal import Decimal
from typing import Literal, Optional

from pydantic import BaseModel, ConfigDict, Field, condecimal


AccountType = Literal["asset", "liability", "equity", "income", "expense"]
RateValue = condecimal(max_digits=5, decimal_places=2, ge=0)


class ChartAccountBase(BaseModel):
    name: str = Field(..., max_length=200)
    code: Optional[str] = Field(None, max_length=20)
    account_type: AccountType
    description: Optional[str] = None
    is_active: bool = True


class ChartAccountCreate(ChartAccountBase):
    pass


class ChartAccountUpdate(BaseModel):
    name: Optional[str] = Field(None, max_length=200)
    code: Optional[str] = Field(None, max_length=20)
    account_type: Optional[AccountType] = None
    description: Optional[str] = None
    is_active: Optional[bool] = None


class ChartAccountResponse(ChartAccountBase):
    id: int
    created_at: datetime

    model_config = ConfigDict(from_attributes=True)


class SeedDefaultsResponse(BaseModel):
    accounts_created: int
    tax_codes_created: int


class TaxCodeCreate(BaseModel):
    name: str = Field(..., max_length=100)
    rate: RateValue = Decimal("0.00")


class TaxCodeResponse(BaseModel):
    id: int
    name: str
    rate: Decimal
    is_active: bool

    model_config = ConfigDict(from_attributes=True)
