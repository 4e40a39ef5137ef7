from datetime import date
import logging
from decimal import Decimal
from typing import List, Optional

from sqlalchemy.orm import Session

from ledgerbooks.models import Account, Journal, JournalLine
from ledgerbooks.reports.engine import (
    BalanceSheet,
    LedgerRow,
    ProfitAndLoss,
    TrialBalance,
    balance_sheet,
    profit_and_loss,
    trial_balance,
)

logger = logging.getLogger(__name__)


def load_ledger_rows(
    db: Session,
    user_id: str,
    date_from: Optional[date] = None,
    date_to: Optional[date] = None,
) -> List[LedgerRow]:
    """Flat snapshot of journal lines joined to account and journal date."""
    query = (
        db.query(
            Journal.date,
            JournalLine.account_id,
            Account.name,
            Account.code,
            Account.account_type,
            JournalLine.debit,
            JournalLine.credit,
        )
        .join(Journal, Journal.id == JournalLine.journal_id)
        .join(Account, Account.id == JournalLine.account_id)
        .filter(Journal.user_id == user_id)
    )
    if date_from:
        query = query.filter(Journal.date >= date_from)
    if date_to:
        query = query.filter(Journal.date <= date_to)

    return [
        LedgerRow(
            journal_date=journal_date,
            account_id=account_id,
            account_name=name,
            account_code=code,
            account_type=account_type,
            debit=Decimal(debit or 0),
            credit=Decimal(credit or 0),
        )
        for journal_date, account_id, name, code, account_type, debit, credit in query.all()
    ]


def get_trial_balance(
    db: Session, user_id: str, date_from: Optional[date] = None, date_to: Optional[date] = None
) -> TrialBalance:
    report = trial_balance(load_ledger_rows(db, user_id, date_from, date_to), date_from, date_to)
    if not report.balanced:
        logger.warning(
            "Trial balance for user=%s is out by %s (debits=%s credits=%s)",
            user_id,
            report.difference,
            report.total_debits,
            report.total_credits,
        )
    return report


def get_profit_and_loss(
    db: Session, user_id: str, date_from: Optional[date] = None, date_to: Optional[date] = None
) -> ProfitAndLoss:
    return profit_and_loss(load_ledger_rows(db, user_id, date_from, date_to), date_from, date_to)


def get_balance_sheet(db: Session, user_id: str, as_of: Optional[date] = None) -> BalanceSheet:
    as_of = as_of or date.today()
    report = balance_sheet(load_ledger_rows(db, user_id, None, as_of), as_of)
    if not report.balanced:
        logger.warning("Balance sheet for user=%s as of %s does not balance", user_id, as_of)
    return report
