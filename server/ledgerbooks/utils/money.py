from decimal import Decimal, ROUND_HALF_UP
from typing import Iterable

CENT = Decimal("0.01")
ZERO = Decimal("0.00")
MONEY_TOLERANCE = Decimal("0.01")


def to_decimal(value: Decimal | float | int | str | None) -> Decimal:
    if value is None:
        return ZERO
    if isinstance(value, Decimal):
        return value
    return Decimal(str(value))


def quantize_money(value: Decimal | float | int | str | None) -> Decimal | None:
    """Round to whole pennies, ties away from zero."""
    if value is None:
        return None
    return Decimal(str(value)).quantize(CENT, rounding=ROUND_HALF_UP)


def sum_money(values: Iterable[Decimal | float | int | str | None]) -> Decimal:
    return sum((to_decimal(value) for value in values), ZERO)


def within_tolerance(left: Decimal | float | int | str | None, right: Decimal | float | int | str | None) -> bool:
    return abs(to_decimal(left) - to_decimal(right)) <= MONEY_TOLERANCE
