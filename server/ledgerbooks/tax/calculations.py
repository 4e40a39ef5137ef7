from dataclasses import dataclass
from decimal import Decimal
from typing import Iterable, Optional

from ledgerbooks.exceptions import TotalsMismatchError
from ledgerbooks.utils import ZERO, quantize_money, within_tolerance

HUNDRED = Decimal("100")


@dataclass(frozen=True)
class LineInput:
    quantity: Decimal
    unit_price: Decimal
    tax_rate: Optional[Decimal] = None  # percentage, e.g. 20.00


@dataclass(frozen=True)
class LineAmounts:
    net: Decimal
    vat: Decimal
    gross: Decimal


@dataclass(frozen=True)
class DocumentTotals:
    subtotal: Decimal
    vat_amount: Decimal
    total: Decimal


def calculate_line_amounts(line: LineInput) -> LineAmounts:
    """Net, VAT and gross for one invoice or bill line. A missing rate is 0%."""
    rate = Decimal(line.tax_rate) if line.tax_rate is not None else ZERO
    net = quantize_money(Decimal(line.quantity) * Decimal(line.unit_price))
    vat = quantize_money(net * rate / HUNDRED)
    return LineAmounts(net=net, vat=vat, gross=net + vat)


def calculate_document_totals(lines: Iterable[LineAmounts]) -> DocumentTotals:
    subtotal = ZERO
    vat_amount = ZERO
    for line in lines:
        subtotal += line.net
        vat_amount += line.vat
    return DocumentTotals(subtotal=subtotal, vat_amount=vat_amount, total=subtotal + vat_amount)


def validate_header_totals(
    *,
    subtotal: Optional[Decimal],
    vat_amount: Optional[Decimal],
    total: Optional[Decimal],
    lines: Iterable[LineAmounts],
) -> DocumentTotals:
    """Recompute header totals from lines; any supplied value must agree within a penny."""
    expected = calculate_document_totals(lines)
    for field, supplied in (("subtotal", subtotal), ("vat_amount", vat_amount), ("total", total)):
        if supplied is None:
            continue
        if not within_tolerance(supplied, getattr(expected, field)):
            raise TotalsMismatchError(field, Decimal(supplied), getattr(expected, field))
    return expected
