"""Pure folds from ledger rows to Trial Balance, Profit & Loss and Balance Sheet.

Every function here takes a flat iterable of `LedgerRow` (one per journal line,
already joined to its account and journal date) and recomputes the report from
scratch. Nothing is cached and nothing is written, so running a report twice
over the same rows always yields the same numbers.

Sign conventions follow each account type's natural balance: assets and
expenses grow with debits, liabilities, equity and income with credits.
"""

from __future__ import annotations

from dataclasses import dataclass, field
from datetime import date
from decimal import Decimal
from typing import Dict, Iterable, List, Optional, Tuple

from ledgerbooks.utils import ZERO, to_decimal, within_tolerance

DEBIT_NORMAL_TYPES = {"asset", "expense"}
PROFIT_AND_LOSS_TYPES = ("income", "expense")
BALANCE_SHEET_TYPES = ("asset", "liability", "equity")


@dataclass(frozen=True)
class LedgerRow:
    journal_date: date
    account_id: int
    account_name: str
    account_type: str
    debit: Decimal
    credit: Decimal
    account_code: Optional[str] = None


@dataclass
class TrialBalanceRow:
    account_id: int
    account_name: str
    account_code: Optional[str]
    account_type: str
    debit: Decimal
    credit: Decimal


@dataclass
class TrialBalance:
    date_from: Optional[date]
    date_to: Optional[date]
    accounts: List[TrialBalanceRow]
    total_debits: Decimal
    total_credits: Decimal
    balanced: bool
    difference: Decimal


@dataclass
class BalanceRow:
    account_id: int
    account_name: str
    account_code: Optional[str]
    balance: Decimal


@dataclass
class ProfitAndLoss:
    date_from: Optional[date]
    date_to: Optional[date]
    income: List[BalanceRow] = field(default_factory=list)
    expenses: List[BalanceRow] = field(default_factory=list)
    total_income: Decimal = ZERO
    total_expenses: Decimal = ZERO
    net_profit: Decimal = ZERO


@dataclass
class BalanceSheet:
    as_of: Optional[date]
    assets: List[BalanceRow] = field(default_factory=list)
    liabilities: List[BalanceRow] = field(default_factory=list)
    equity: List[BalanceRow] = field(default_factory=list)
    total_assets: Decimal = ZERO
    total_liabilities: Decimal = ZERO
    total_equity: Decimal = ZERO
    current_earnings: Decimal = ZERO
    balanced: bool = True


def natural_balance(account_type: str, debit: Decimal, credit: Decimal) -> Decimal:
    if (account_type or "").lower() in DEBIT_NORMAL_TYPES:
        return debit - credit
    return credit - debit


def _in_range(row: LedgerRow, date_from: Optional[date], date_to: Optional[date]) -> bool:
    if date_from is not None and row.journal_date < date_from:
        return False
    if date_to is not None and row.journal_date > date_to:
        return False
    return True


def _accumulate(
    rows: Iterable[LedgerRow],
    date_from: Optional[date],
    date_to: Optional[date],
    account_types: Optional[Tuple[str, ...]] = None,
) -> Dict[int, TrialBalanceRow]:
    totals: Dict[int, TrialBalanceRow] = {}
    for row in rows:
        if not _in_range(row, date_from, date_to):
            continue
        if account_types is not None and row.account_type not in account_types:
            continue
        entry = totals.get(row.account_id)
        if entry is None:
            entry = TrialBalanceRow(
                account_id=row.account_id,
                account_name=row.account_name,
                account_code=row.account_code,
                account_type=row.account_type,
                debit=ZERO,
                credit=ZERO,
            )
            totals[row.account_id] = entry
        entry.debit += to_decimal(row.debit)
        entry.credit += to_decimal(row.credit)
    return totals


def _sort_key(row) -> tuple:
    return (row.account_code or "", row.account_name, row.account_id)


def trial_balance(
    rows: Iterable[LedgerRow],
    date_from: Optional[date] = None,
    date_to: Optional[date] = None,
) -> TrialBalance:
    """Per-account debit/credit totals over the inclusive range.

    An imbalance is reported through `balanced` and `difference`, not raised.
    """
    totals = _accumulate(rows, date_from, date_to)
    accounts = sorted(
        (entry for entry in totals.values() if entry.debit != 0 or entry.credit != 0),
        key=_sort_key,
    )
    total_debits = sum((entry.debit for entry in accounts), ZERO)
    total_credits = sum((entry.credit for entry in accounts), ZERO)
    return TrialBalance(
        date_from=date_from,
        date_to=date_to,
        accounts=accounts,
        total_debits=total_debits,
        total_credits=total_credits,
        balanced=within_tolerance(total_debits, total_credits),
        difference=total_debits - total_credits,
    )


def _balances(totals: Dict[int, TrialBalanceRow], account_type: str) -> List[BalanceRow]:
    result = []
    for entry in totals.values():
        if entry.account_type != account_type:
            continue
        balance = natural_balance(entry.account_type, entry.debit, entry.credit)
        if balance == 0:
            continue
        result.append(
            BalanceRow(
                account_id=entry.account_id,
                account_name=entry.account_name,
                account_code=entry.account_code,
                balance=balance,
            )
        )
    return sorted(result, key=_sort_key)


def profit_and_loss(
    rows: Iterable[LedgerRow],
    date_from: Optional[date] = None,
    date_to: Optional[date] = None,
) -> ProfitAndLoss:
    """Income and expense flow within the period."""
    totals = _accumulate(rows, date_from, date_to, PROFIT_AND_LOSS_TYPES)
    income = _balances(totals, "income")
    expenses = _balances(totals, "expense")
    total_income = sum((row.balance for row in income), ZERO)
    total_expenses = sum((row.balance for row in expenses), ZERO)
    return ProfitAndLoss(
        date_from=date_from,
        date_to=date_to,
        income=income,
        expenses=expenses,
        total_income=total_income,
        total_expenses=total_expenses,
        net_profit=total_income - total_expenses,
    )


def balance_sheet(rows: Iterable[LedgerRow], as_of: Optional[date] = None) -> BalanceSheet:
    """Cumulative asset, liability and equity balances up to and including `as_of`.

    There is no lower date bound: balance-sheet accounts carry forward across
    periods. `current_earnings` is the cumulative income less expenses to the
    same date; it is reported separately and never folded into equity rows.
    """
    rows = list(rows)
    totals = _accumulate(rows, None, as_of, BALANCE_SHEET_TYPES)
    assets = _balances(totals, "asset")
    liabilities = _balances(totals, "liability")
    equity = _balances(totals, "equity")
    total_assets = sum((row.balance for row in assets), ZERO)
    total_liabilities = sum((row.balance for row in liabilities), ZERO)
    total_equity = sum((row.balance for row in equity), ZERO)
    current_earnings = profit_and_loss(rows, None, as_of).net_profit
    return BalanceSheet(
        as_of=as_of,
        assets=assets,
        liabilities=liabilities,
        equity=equity,
        total_assets=total_assets,
        total_liabilities=total_liabilities,
        total_equity=total_equity,
        current_earnings=current_earnings,
        balanced=within_tolerance(total_assets, total_liabilities + total_equity + current_earnings),
    )
