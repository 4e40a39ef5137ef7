from datetime import date, datetime
from typing import Literal, Optional

from pydantic import BaseModel, ConfigDict, Field, condecimal


MoneyValue = condecimal(max_digits=16, decimal_places=2)


class VatReturnPreview(BaseModel):
    date_from: date
    date_to: date
    box1: MoneyValue
    box2: MoneyValue
    box3: MoneyValue
    box4: MoneyValue
    box5: MoneyValue
    box6: MoneyValue
    box7: MoneyValue
    box8: MoneyValue
    box9: MoneyValue


class ObligationSyncRequest(BaseModel):
    vrn: str = Field(..., min_length=9, max_length=9, pattern=r"^\d{9}$")
    date_from: date
    date_to: date
    status: Optional[Literal["O", "F"]] = None


class VatObligationResponse(BaseModel):
    id: int
    period_key: str
    start_date: date
    end_date: date
    due_date: date
    status: str
    received_date: Optional[datetime] = None

    model_config = ConfigDict(from_attributes=True)


class VatSubmitRequest(BaseModel):
    vrn: str = Field(..., min_length=9, max_length=9, pattern=r"^\d{9}$")
    period_key: str = Field(..., min_length=1, max_length=10)


class VatReturnResponse(BaseModel):
    id: int
    period_key: str
    vat_due_sales: MoneyValue
    vat_due_acquisitions: MoneyValue
    total_vat_due: MoneyValue
    vat_reclaimed_curr_period: MoneyValue
    net_vat_due: MoneyValue
    total_value_sales_ex_vat: MoneyValue
    total_value_purchases_ex_vat: MoneyValue
    total_value_goods_supplied_ex_vat: MoneyValue
    total_acquisitions_ex_vat: MoneyValue
    submitted_at: datetime
    hmrc_processing_date: Optional[str] = None
    hmrc_form_bundle_number: Optional[str] = None

    model_config = ConfigDict(from_attributes=True)
