from dataclasses import asdict, dataclass
from datetime import date
from decimal import Decimal, ROUND_DOWN
from typing import Iterable, Optional

from ledgerbooks.utils import ZERO, quantize_money, to_decimal


@dataclass(frozen=True)
class VatDocument:
    """The slice of an invoice or bill the VAT return needs."""

    date: date
    vat_amount: Decimal
    total: Decimal


@dataclass(frozen=True)
class VatReturnBoxes:
    box1: Decimal  # VAT due on sales
    box2: Decimal  # VAT due on acquisitions
    box3: Decimal  # total VAT due
    box4: Decimal  # VAT reclaimed on purchases
    box5: Decimal  # net VAT due (negative means a reclaim)
    box6: Decimal  # total sales ex VAT
    box7: Decimal  # total purchases ex VAT
    box8: Decimal  # supplies of goods to EU
    box9: Decimal  # acquisitions of goods from EU

    def as_dict(self) -> dict:
        return asdict(self)


def _within(document: VatDocument, date_from: Optional[date], date_to: Optional[date]) -> bool:
    if date_from is not None and document.date < date_from:
        return False
    if date_to is not None and document.date > date_to:
        return False
    return True


def calculate_vat_return(
    invoices: Iterable[VatDocument],
    bills: Iterable[VatDocument],
    date_from: Optional[date] = None,
    date_to: Optional[date] = None,
) -> VatReturnBoxes:
    """The nine UK VAT boxes for documents dated within the inclusive range.

    Cross-border acquisitions and EU supplies are not tracked, so boxes 2, 8
    and 9 are always zero.
    """
    sales = [doc for doc in invoices if _within(doc, date_from, date_to)]
    purchases = [doc for doc in bills if _within(doc, date_from, date_to)]

    box1 = sum((to_decimal(doc.vat_amount) for doc in sales), ZERO)
    box2 = ZERO
    box3 = box1 + box2
    box4 = sum((to_decimal(doc.vat_amount) for doc in purchases), ZERO)
    box5 = box3 - box4
    box6 = sum((to_decimal(doc.total) - to_decimal(doc.vat_amount) for doc in sales), ZERO)
    box7 = sum((to_decimal(doc.total) - to_decimal(doc.vat_amount) for doc in purchases), ZERO)
    return VatReturnBoxes(
        box1=box1,
        box2=box2,
        box3=box3,
        box4=box4,
        box5=box5,
        box6=box6,
        box7=box7,
        box8=ZERO,
        box9=ZERO,
    )


def _whole_pounds(value: Decimal) -> Decimal:
    return to_decimal(value).quantize(Decimal("1"), rounding=ROUND_DOWN)


def to_submission_payload(period_key: str, boxes: VatReturnBoxes, finalised: bool = True) -> dict:
    """HMRC MTD return body. Boxes 6-9 are whole pounds; the rest are pence."""
    return {
        "periodKey": period_key,
        "vatDueSales": float(quantize_money(boxes.box1)),
        "vatDueAcquisitions": float(quantize_money(boxes.box2)),
        "totalVatDue": float(quantize_money(boxes.box3)),
        "vatReclaimedCurrPeriod": float(quantize_money(boxes.box4)),
        "netVatDue": float(abs(quantize_money(boxes.box5))),
        "totalValueSalesExVAT": int(_whole_pounds(boxes.box6)),
        "totalValuePurchasesExVAT": int(_whole_pounds(boxes.box7)),
        "totalValueGoodsSuppliedExVAT": int(_whole_pounds(boxes.box8)),
        "totalAcquisitionsExVAT": int(_whole_pounds(boxes.box9)),
        "finalised": finalised,
    }
