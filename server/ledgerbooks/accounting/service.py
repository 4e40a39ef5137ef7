from datetime import date
import logging
from typing import List, Optional, Sequence

from sqlalchemy.orm import Session, selectinload

from ledgerbooks.accounting.posting import (
    JournalEntryInput,
    JournalLineInput,
    build_reversal_entry,
    validate_journal,
)
from ledgerbooks.exceptions import JournalAlreadyReversedError
from ledgerbooks.models import Account, Journal, JournalLine

logger = logging.getLogger(__name__)


def create_journal(db: Session, user_id: str, entry: JournalEntryInput) -> Journal:
    """Validate and stage a journal with its lines; the caller commits.

    Header and lines are added in one flush so a partially written journal is
    never visible outside the caller's transaction.
    """
    lines = validate_journal(entry.lines)

    account_ids = {line.account_id for line in lines}
    found = (
        db.query(Account.id)
        .filter(Account.user_id == user_id, Account.id.in_(account_ids))
        .all()
    )
    missing = account_ids - {account_id for (account_id,) in found}
    if missing:
        raise ValueError(f"Account(s) not found: {', '.join(str(i) for i in sorted(missing))}.")

    journal = Journal(
        user_id=user_id,
        date=entry.date,
        reference=entry.reference,
        description=entry.description,
        source_type=entry.source_type,
        source_id=entry.source_id,
    )
    journal.lines = [
        JournalLine(
            account_id=line.account_id,
            description=line.description,
            debit=line.debit,
            credit=line.credit,
        )
        for line in lines
    ]
    db.add(journal)
    db.flush()
    logger.info(
        "Posted journal id=%s reference=%s source=%s lines=%s",
        journal.id,
        journal.reference,
        journal.source_type,
        len(journal.lines),
    )
    return journal


def get_journal(db: Session, user_id: str, journal_id: int) -> Optional[Journal]:
    return (
        db.query(Journal)
        .options(selectinload(Journal.lines))
        .filter(Journal.user_id == user_id, Journal.id == journal_id)
        .first()
    )


def list_journals(
    db: Session,
    user_id: str,
    date_from: Optional[date] = None,
    date_to: Optional[date] = None,
    limit: int = 100,
) -> Sequence[Journal]:
    query = db.query(Journal).options(selectinload(Journal.lines)).filter(Journal.user_id == user_id)
    if date_from:
        query = query.filter(Journal.date >= date_from)
    if date_to:
        query = query.filter(Journal.date <= date_to)
    return query.order_by(Journal.date.desc(), Journal.id.desc()).limit(limit).all()


def reverse_journal(db: Session, user_id: str, journal: Journal, reversal_date: date) -> Journal:
    """Append a journal that cancels `journal`. Posted lines are never edited."""
    if journal.source_type == "reversal":
        raise ValueError("A reversal journal cannot itself be reversed.")
    already = db.query(Journal.id).filter(Journal.reverses_journal_id == journal.id).first()
    if already is not None:
        raise JournalAlreadyReversedError(journal.id)

    original_lines: List[JournalLineInput] = [
        JournalLineInput(
            account_id=line.account_id,
            debit=line.debit,
            credit=line.credit,
            description=line.description,
        )
        for line in journal.lines
    ]
    entry = build_reversal_entry(
        original_reference=journal.reference,
        original_lines=original_lines,
        txn_date=reversal_date,
        source_id=journal.id,
    )
    reversal = create_journal(db, user_id, entry)
    reversal.reverses_journal_id = journal.id
    db.flush()
    logger.info("Reversed journal id=%s with journal id=%s", journal.id, reversal.id)
    return reversal
