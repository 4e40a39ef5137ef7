from .money import CENT, MONEY_TOLERANCE, ZERO, quantize_money, sum_money, to_decimal, within_tolerance

__all__ = [
    "CENT",
    "MONEY_TOLERANCE",
    "ZERO",
    "quantize_money",
    "sum_money",
    "to_decimal",
    "within_tolerance",
]
