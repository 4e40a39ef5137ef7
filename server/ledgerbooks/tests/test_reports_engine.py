from datetime import date
from decimal import Decimal

from ledgerbooks.reports.engine import LedgerRow, balance_sheet, profit_and_loss, trial_balance

BANK = (1, "Bank", "asset", "1200")
CAPITAL = (2, "Owner's Capital", "equity", "3000")
SALES = (3, "Sales", "income", "4000")
EXPENSES = (4, "General Expenses", "expense", "6000")


def _row(account, day, debit="0", credit="0"):
    account_id, name, account_type, code = account
    return LedgerRow(
        journal_date=day,
        account_id=account_id,
        account_name=name,
        account_type=account_type,
        account_code=code,
        debit=Decimal(debit),
        credit=Decimal(credit),
    )


ROWS = [
    _row(BANK, date(2024, 1, 1), debit="1000"),
    _row(CAPITAL, date(2024, 1, 1), credit="1000"),
    _row(BANK, date(2024, 2, 10), debit="500"),
    _row(SALES, date(2024, 2, 10), credit="500"),
    _row(EXPENSES, date(2024, 3, 5), debit="100"),
    _row(BANK, date(2024, 3, 5), credit="100"),
]


def test_trial_balance_totals_each_account():
    report = trial_balance([_row(EXPENSES, date(2024, 1, 1), debit="100"), _row(BANK, date(2024, 1, 1), credit="100")])
    assert report.balanced is True
    assert report.difference == Decimal("0")
    assert [(row.account_name, row.debit, row.credit) for row in report.accounts] == [
        ("Bank", Decimal("0"), Decimal("100")),
        ("General Expenses", Decimal("100"), Decimal("0")),
    ]


def test_trial_balance_reports_imbalance_instead_of_raising():
    report = trial_balance([_row(BANK, date(2024, 1, 1), debit="100"), _row(SALES, date(2024, 1, 1), credit="90")])
    assert report.balanced is False
    assert report.difference == Decimal("10")


def test_trial_balance_respects_date_range():
    report = trial_balance(ROWS, date(2024, 2, 1), date(2024, 2, 28))
    assert report.total_debits == report.total_credits == Decimal("500")
    assert {row.account_name for row in report.accounts} == {"Bank", "Sales"}


def test_profit_and_loss_is_period_flow():
    report = profit_and_loss(ROWS, date(2024, 1, 1), date(2024, 3, 31))
    assert report.total_income == Decimal("500")
    assert report.total_expenses == Decimal("100")
    assert report.net_profit == Decimal("400")

    march = profit_and_loss(ROWS, date(2024, 3, 1), date(2024, 3, 31))
    assert march.income == []
    assert march.net_profit == Decimal("-100")


def test_profit_and_loss_is_idempotent():
    assert profit_and_loss(ROWS, date(2024, 1, 1), date(2024, 12, 31)) == profit_and_loss(
        ROWS, date(2024, 1, 1), date(2024, 12, 31)
    )


def test_balance_sheet_is_cumulative_to_as_of():
    report = balance_sheet(ROWS, date(2024, 2, 28))
    assert report.total_assets == Decimal("1500")
    assert report.total_equity == Decimal("1000")
    assert report.current_earnings == Decimal("500")
    assert report.balanced is True

    later = balance_sheet(ROWS, date(2024, 12, 31))
    assert later.total_assets == Decimal("1400")
    assert later.current_earnings == Decimal("400")
    assert later.balanced is True


def test_balance_sheet_ignores_rows_after_as_of():
    report = balance_sheet(ROWS, date(2024, 1, 31))
    assert [row.balance for row in report.assets] == [Decimal("1000")]
    assert report.current_earnings == Decimal("0")
