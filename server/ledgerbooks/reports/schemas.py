from datetime import date
from typing import List, Optional

from pydantic import BaseModel, ConfigDict, condecimal


DecimalValue = condecimal(max_digits=16, decimal_places=2)


class TrialBalanceRowResponse(BaseModel):
    account_id: int
    account_name: str
    account_code: Optional[str] = None
    account_type: str
    debit: DecimalValue
    credit: DecimalValue

    model_config = ConfigDict(from_attributes=True)


class TrialBalanceResponse(BaseModel):
    date_from: Optional[date] = None
    date_to: Optional[date] = None
    accounts: List[TrialBalanceRowResponse]
    total_debits: DecimalValue
    total_credits: DecimalValue
    balanced: bool
    difference: DecimalValue

    model_config = ConfigDict(from_attributes=True)


class BalanceRowResponse(BaseModel):
    account_id: int
    account_name: str
    account_code: Optional[str] = None
    balance: DecimalValue

    model_config = ConfigDict(from_attributes=True)


class ProfitAndLossResponse(BaseModel):
    date_from: Optional[date] = None
    date_to: Optional[date] = None
    income: List[BalanceRowResponse]
    expenses: List[BalanceRowResponse]
    total_income: DecimalValue
    total_expenses: DecimalValue
    net_profit: DecimalValue

    model_config = ConfigDict(from_attributes=True)


class BalanceSheetResponse(BaseModel):
    as_of: Optional[date] = None
    assets: List[BalanceRowResponse]
    liabilities: List[BalanceRowResponse]
    equity: List[BalanceRowResponse]
    total_assets: DecimalValue
    total_liabilities: DecimalValue
    total_equity: DecimalValue
    current_earnings: DecimalValue
    balanced: bool

    model_config = ConfigDict(from_attributes=True)
