from decimal import Decimal

from ledgerbooks.utils import quantize_money, sum_money, within_tolerance


def test_quantize_money_rounds_half_away_from_zero():
    assert quantize_money(Decimal("137.423")) == Decimal("137.42")
    assert quantize_money(Decimal("137.425")) == Decimal("137.43")
    assert quantize_money(Decimal("-137.425")) == Decimal("-137.43")


def test_quantize_money_accepts_common_types_and_none():
    assert quantize_money(12) == Decimal("12.00")
    assert quantize_money(12.3) == Decimal("12.30")
    assert quantize_money("12.345") == Decimal("12.35")
    assert quantize_money(None) is None


def test_sum_money_treats_none_as_zero():
    assert sum_money([Decimal("1.10"), None, "2.20"]) == Decimal("3.30")


def test_within_tolerance_allows_a_single_penny():
    assert within_tolerance(Decimal("100.00"), Decimal("100.01"))
    assert not within_tolerance(Decimal("100.00"), Decimal("100.02"))
