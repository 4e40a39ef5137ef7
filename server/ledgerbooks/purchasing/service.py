from datetime import date
import logging
from typing import Iterable, List, Optional, Sequence

from sqlalchemy import func
from sqlalchemy.orm import Session, selectinload

from ledgerbooks.accounting.posting import build_bill_entry
from ledgerbooks.accounting.service import create_journal, get_journal, reverse_journal
from ledgerbooks.chart_of_accounts.service import (
    ACCOUNTS_PAYABLE_CODE,
    PURCHASES_CODE,
    VAT_CONTROL_CODE,
    get_system_account,
)
from ledgerbooks.models import Bill, BillLine, Supplier
from ledgerbooks.tax.calculations import LineAmounts, LineInput, calculate_line_amounts, validate_header_totals
from ledgerbooks.tax.service import resolve_tax_rates
from ledgerbooks.utils.status import ensure_transition

logger = logging.getLogger(__name__)

OPEN_BILL_STATUSES = ("awaiting_approval", "approved")
BILL_TRANSITIONS = {
    "draft": frozenset({"awaiting_approval", "approved", "cancelled"}),
    "awaiting_approval": frozenset({"approved", "cancelled"}),
    "approved": frozenset({"paid", "cancelled"}),
    "paid": frozenset(),
    "cancelled": frozenset(),
}


def _next_bill_number(db: Session, user_id: str) -> str:
    count = db.query(func.count(Bill.id)).filter(Bill.user_id == user_id).scalar() or 0
    return f"BILL-{count + 1:06d}"


def build_bill_lines(db: Session, user_id: str, lines_data: Iterable[dict]) -> List[BillLine]:
    lines_data = list(lines_data)
    rates = resolve_tax_rates(db, user_id, (line.get("tax_code_id") for line in lines_data))
    lines: List[BillLine] = []
    for line in lines_data:
        amounts = calculate_line_amounts(
            LineInput(
                quantity=line["quantity"],
                unit_price=line["unit_price"],
                tax_rate=rates.get(line.get("tax_code_id")),
            )
        )
        lines.append(
            BillLine(
                description=line["description"],
                quantity=line["quantity"],
                unit_price=line["unit_price"],
                tax_code_id=line.get("tax_code_id"),
                line_total=amounts.net,
                vat_amount=amounts.vat,
            )
        )
    return lines


def create_bill(db: Session, user_id: str, payload: dict) -> Bill:
    supplier = (
        db.query(Supplier)
        .filter(Supplier.user_id == user_id, Supplier.id == payload["supplier_id"])
        .first()
    )
    if not supplier:
        raise ValueError("Supplier not found.")
    if not payload.get("lines"):
        raise ValueError("Bill must include at least one line.")

    bill = Bill(
        user_id=user_id,
        supplier_id=supplier.id,
        bill_number=payload.get("bill_number") or _next_bill_number(db, user_id),
        date=payload["date"],
        due_date=payload.get("due_date"),
        notes=payload.get("notes"),
        status="draft",
    )
    bill.lines = build_bill_lines(db, user_id, payload["lines"])
    totals = validate_header_totals(
        subtotal=payload.get("subtotal"),
        vat_amount=payload.get("vat_amount"),
        total=payload.get("total"),
        lines=[LineAmounts(net=line.line_total, vat=line.vat_amount, gross=line.line_total + line.vat_amount) for line in bill.lines],
    )
    bill.subtotal = totals.subtotal
    bill.vat_amount = totals.vat_amount
    bill.total = totals.total
    db.add(bill)
    db.flush()
    logger.info("Created bill id=%s number=%s total=%s", bill.id, bill.bill_number, bill.total)
    return bill


def get_bill(db: Session, user_id: str, bill_id: int) -> Optional[Bill]:
    return (
        db.query(Bill)
        .options(selectinload(Bill.lines), selectinload(Bill.supplier))
        .filter(Bill.user_id == user_id, Bill.id == bill_id)
        .first()
    )


def list_bills(
    db: Session,
    user_id: str,
    status: Optional[str] = None,
    date_from: Optional[date] = None,
    date_to: Optional[date] = None,
) -> Sequence[Bill]:
    query = db.query(Bill).options(selectinload(Bill.lines), selectinload(Bill.supplier)).filter(Bill.user_id == user_id)
    if status:
        query = query.filter(Bill.status == status)
    if date_from:
        query = query.filter(Bill.date >= date_from)
    if date_to:
        query = query.filter(Bill.date <= date_to)
    return query.order_by(Bill.date.desc(), Bill.id.desc()).all()


def list_open_bills(db: Session, user_id: str) -> Sequence[Bill]:
    return (
        db.query(Bill)
        .options(selectinload(Bill.supplier))
        .filter(Bill.user_id == user_id, Bill.status.in_(OPEN_BILL_STATUSES))
        .order_by(Bill.date.asc(), Bill.id.asc())
        .all()
    )


def post_bill_to_ledger(db: Session, user_id: str, bill: Bill, posting_date: Optional[date] = None) -> None:
    if bill.journal_id is not None:
        raise ValueError("Bill has already been posted to the ledger.")
    if bill.total == 0 and bill.vat_amount == 0:
        return
    entry = build_bill_entry(
        txn_date=posting_date or bill.date,
        reference=bill.bill_number,
        accounts_payable_id=get_system_account(db, user_id, ACCOUNTS_PAYABLE_CODE).id,
        purchases_account_id=get_system_account(db, user_id, PURCHASES_CODE).id,
        vat_account_id=get_system_account(db, user_id, VAT_CONTROL_CODE).id,
        subtotal=bill.subtotal,
        vat_amount=bill.vat_amount,
        description=f"Bill {bill.bill_number}",
        source_id=bill.id,
    )
    journal = create_journal(db, user_id, entry)
    bill.journal_id = journal.id


def change_bill_status(
    db: Session,
    user_id: str,
    bill: Bill,
    status: str,
    posting_date: Optional[date] = None,
) -> Bill:
    ensure_transition("bill", BILL_TRANSITIONS, bill.status, status)
    if status == "approved":
        post_bill_to_ledger(db, user_id, bill, posting_date)
    elif status == "cancelled" and bill.journal_id is not None:
        posted = get_journal(db, user_id, bill.journal_id)
        reverse_journal(db, user_id, posted, posting_date or date.today())
    previous = bill.status
    bill.status = status
    db.flush()
    logger.info("Bill id=%s status %s -> %s", bill.id, previous, status)
    return bill


def delete_bill(db: Session, bill: Bill) -> None:
    if bill.status != "draft" or bill.journal_id is not None:
        raise ValueError("Only draft bills can be deleted.")
    db.delete(bill)
    db.flush()
