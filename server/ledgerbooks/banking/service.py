import logging
from typing import Iterable, List, Optional, Sequence

from sqlalchemy.orm import Session

from ledgerbooks.banking.importer import StatementRecord
from ledgerbooks.banking.matching import MatchCandidate, OpenDocument, suggest_matches
from ledgerbooks.exceptions import AlreadyReconciledError
from ledgerbooks.models import BankTransaction, Bill, Invoice, utcnow
from ledgerbooks.purchasing.service import OPEN_BILL_STATUSES, list_open_bills
from ledgerbooks.sales.service import OPEN_INVOICE_STATUSES, list_open_invoices
from ledgerbooks.utils import quantize_money

logger = logging.getLogger(__name__)


def import_transactions(db: Session, user_id: str, records: Iterable[StatementRecord]) -> List[BankTransaction]:
    transactions = [
        BankTransaction(
            user_id=user_id,
            date=record.date,
            description=record.description,
            amount=quantize_money(record.amount),
            reference=record.reference,
            reconciled=False,
        )
        for record in records
    ]
    db.add_all(transactions)
    db.flush()
    logger.info("Imported %s bank transactions", len(transactions))
    return transactions


def get_transaction(db: Session, user_id: str, transaction_id: int) -> Optional[BankTransaction]:
    return (
        db.query(BankTransaction)
        .filter(BankTransaction.user_id == user_id, BankTransaction.id == transaction_id)
        .first()
    )


def list_transactions(db: Session, user_id: str, reconciled: Optional[bool] = None) -> Sequence[BankTransaction]:
    query = db.query(BankTransaction).filter(BankTransaction.user_id == user_id)
    if reconciled is not None:
        query = query.filter(BankTransaction.reconciled == reconciled)
    return query.order_by(BankTransaction.date.desc(), BankTransaction.id.desc()).all()


def suggestions_for(db: Session, user_id: str, transaction: BankTransaction) -> List[MatchCandidate]:
    if transaction.reconciled:
        return []
    invoices = [
        OpenDocument(
            id=invoice.id,
            number=invoice.invoice_number,
            party_name=invoice.customer.name if invoice.customer else None,
            total=invoice.total,
        )
        for invoice in list_open_invoices(db, user_id)
    ]
    bills = [
        OpenDocument(
            id=bill.id,
            number=bill.bill_number,
            party_name=bill.supplier.name if bill.supplier else None,
            total=bill.total,
        )
        for bill in list_open_bills(db, user_id)
    ]
    matches = suggest_matches(transaction.amount, transaction.description, invoices, bills)
    logger.debug("Transaction id=%s has %s match suggestions", transaction.id, len(matches))
    return matches


def _open_target(db: Session, user_id: str, target_type: str, target_id: int):
    if target_type == "invoice":
        target = (
            db.query(Invoice)
            .filter(Invoice.user_id == user_id, Invoice.id == target_id, Invoice.status.in_(OPEN_INVOICE_STATUSES))
            .first()
        )
    elif target_type == "bill":
        target = (
            db.query(Bill)
            .filter(Bill.user_id == user_id, Bill.id == target_id, Bill.status.in_(OPEN_BILL_STATUSES))
            .first()
        )
    else:
        raise ValueError(f"Unknown match target type '{target_type}'.")
    if target is None:
        raise ValueError(f"Open {target_type} {target_id} not found.")
    return target


def commit_match(
    db: Session,
    user_id: str,
    transaction: BankTransaction,
    target_type: str,
    target_id: int,
) -> BankTransaction:
    """Link a bank transaction to one open invoice or bill, once.

    The update is conditional on the row still being unreconciled, so of two
    concurrent commits only the first changes a row; the other gets
    AlreadyReconciledError.
    """
    if transaction.reconciled:
        raise AlreadyReconciledError(transaction.id)
    _open_target(db, user_id, target_type, target_id)
    if target_type == "invoice" and transaction.amount <= 0:
        raise ValueError("Only money received can be matched to an invoice.")
    if target_type == "bill" and transaction.amount >= 0:
        raise ValueError("Only money paid out can be matched to a bill.")

    values = {
        BankTransaction.reconciled: True,
        BankTransaction.reconciled_at: utcnow(),
        BankTransaction.invoice_id if target_type == "invoice" else BankTransaction.bill_id: target_id,
    }
    updated = (
        db.query(BankTransaction)
        .filter(
            BankTransaction.id == transaction.id,
            BankTransaction.user_id == user_id,
            BankTransaction.reconciled.is_(False),
        )
        .update(values, synchronize_session=False)
    )
    if updated == 0:
        raise AlreadyReconciledError(transaction.id)
    db.flush()
    db.refresh(transaction)
    logger.info("Matched bank transaction id=%s to %s id=%s", transaction.id, target_type, target_id)
    return transaction
