from datetime import date
import logging
from typing import Iterable, List, Optional, Sequence

from sqlalchemy import func
from sqlalchemy.orm import Session, selectinload

from ledgerbooks.accounting.posting import build_invoice_entry
from ledgerbooks.accounting.service import create_journal, get_journal, reverse_journal
from ledgerbooks.chart_of_accounts.service import (
    ACCOUNTS_RECEIVABLE_CODE,
    SALES_CODE,
    VAT_CONTROL_CODE,
    get_system_account,
)
from ledgerbooks.models import Customer, Invoice, InvoiceLine
from ledgerbooks.tax.calculations import LineAmounts, LineInput, calculate_line_amounts, validate_header_totals
from ledgerbooks.tax.service import resolve_tax_rates
from ledgerbooks.utils.status import ensure_transition

logger = logging.getLogger(__name__)

OPEN_INVOICE_STATUSES = ("sent", "overdue")
INVOICE_TRANSITIONS = {
    "draft": frozenset({"sent", "cancelled"}),
    "sent": frozenset({"paid", "overdue", "cancelled"}),
    "overdue": frozenset({"paid", "cancelled"}),
    "paid": frozenset(),
    "cancelled": frozenset(),
}


def _next_invoice_number(db: Session, user_id: str) -> str:
    count = db.query(func.count(Invoice.id)).filter(Invoice.user_id == user_id).scalar() or 0
    candidate = count + 1
    while True:
        number = f"INV-{candidate:06d}"
        taken = (
            db.query(Invoice.id)
            .filter(Invoice.user_id == user_id, Invoice.invoice_number == number)
            .first()
        )
        if taken is None:
            return number
        candidate += 1


def build_invoice_lines(db: Session, user_id: str, lines_data: Iterable[dict]) -> List[InvoiceLine]:
    lines_data = list(lines_data)
    rates = resolve_tax_rates(db, user_id, (line.get("tax_code_id") for line in lines_data))
    lines: List[InvoiceLine] = []
    for line in lines_data:
        amounts = calculate_line_amounts(
            LineInput(
                quantity=line["quantity"],
                unit_price=line["unit_price"],
                tax_rate=rates.get(line.get("tax_code_id")),
            )
        )
        lines.append(
            InvoiceLine(
                description=line["description"],
                quantity=line["quantity"],
                unit_price=line["unit_price"],
                tax_code_id=line.get("tax_code_id"),
                line_total=amounts.net,
                vat_amount=amounts.vat,
            )
        )
    return lines


def _line_amounts(lines: Iterable) -> List[LineAmounts]:
    return [LineAmounts(net=line.line_total, vat=line.vat_amount, gross=line.line_total + line.vat_amount) for line in lines]


def create_invoice(db: Session, user_id: str, payload: dict) -> Invoice:
    customer = (
        db.query(Customer)
        .filter(Customer.user_id == user_id, Customer.id == payload["customer_id"])
        .first()
    )
    if not customer:
        raise ValueError("Customer not found.")
    if not payload.get("lines"):
        raise ValueError("Invoice must include at least one line.")

    invoice = Invoice(
        user_id=user_id,
        customer_id=customer.id,
        invoice_number=_next_invoice_number(db, user_id),
        date=payload["date"],
        due_date=payload.get("due_date"),
        notes=payload.get("notes"),
        status="draft",
    )
    invoice.lines = build_invoice_lines(db, user_id, payload["lines"])
    totals = validate_header_totals(
        subtotal=payload.get("subtotal"),
        vat_amount=payload.get("vat_amount"),
        total=payload.get("total"),
        lines=_line_amounts(invoice.lines),
    )
    invoice.subtotal = totals.subtotal
    invoice.vat_amount = totals.vat_amount
    invoice.total = totals.total
    db.add(invoice)
    db.flush()
    logger.info("Created invoice id=%s number=%s total=%s", invoice.id, invoice.invoice_number, invoice.total)
    return invoice


def get_invoice(db: Session, user_id: str, invoice_id: int) -> Optional[Invoice]:
    return (
        db.query(Invoice)
        .options(selectinload(Invoice.lines), selectinload(Invoice.customer))
        .filter(Invoice.user_id == user_id, Invoice.id == invoice_id)
        .first()
    )


def list_invoices(
    db: Session,
    user_id: str,
    status: Optional[str] = None,
    date_from: Optional[date] = None,
    date_to: Optional[date] = None,
) -> Sequence[Invoice]:
    query = (
        db.query(Invoice)
        .options(selectinload(Invoice.lines), selectinload(Invoice.customer))
        .filter(Invoice.user_id == user_id)
    )
    if status:
        query = query.filter(Invoice.status == status)
    if date_from:
        query = query.filter(Invoice.date >= date_from)
    if date_to:
        query = query.filter(Invoice.date <= date_to)
    return query.order_by(Invoice.date.desc(), Invoice.id.desc()).all()


def list_open_invoices(db: Session, user_id: str) -> Sequence[Invoice]:
    return (
        db.query(Invoice)
        .options(selectinload(Invoice.customer))
        .filter(Invoice.user_id == user_id, Invoice.status.in_(OPEN_INVOICE_STATUSES))
        .order_by(Invoice.date.asc(), Invoice.id.asc())
        .all()
    )


def post_invoice_to_ledger(db: Session, user_id: str, invoice: Invoice, posting_date: Optional[date] = None) -> None:
    if invoice.journal_id is not None:
        raise ValueError("Invoice has already been posted to the ledger.")
    if invoice.total == 0 and invoice.vat_amount == 0:
        return
    entry = build_invoice_entry(
        txn_date=posting_date or invoice.date,
        reference=invoice.invoice_number,
        accounts_receivable_id=get_system_account(db, user_id, ACCOUNTS_RECEIVABLE_CODE).id,
        sales_account_id=get_system_account(db, user_id, SALES_CODE).id,
        vat_account_id=get_system_account(db, user_id, VAT_CONTROL_CODE).id,
        subtotal=invoice.subtotal,
        vat_amount=invoice.vat_amount,
        description=f"Invoice {invoice.invoice_number}",
        source_id=invoice.id,
    )
    journal = create_journal(db, user_id, entry)
    invoice.journal_id = journal.id


def change_invoice_status(
    db: Session,
    user_id: str,
    invoice: Invoice,
    status: str,
    posting_date: Optional[date] = None,
) -> Invoice:
    ensure_transition("invoice", INVOICE_TRANSITIONS, invoice.status, status)
    if status == "sent":
        post_invoice_to_ledger(db, user_id, invoice, posting_date)
    elif status == "cancelled" and invoice.journal_id is not None:
        posted = get_journal(db, user_id, invoice.journal_id)
        reverse_journal(db, user_id, posted, posting_date or date.today())
    previous = invoice.status
    invoice.status = status
    db.flush()
    logger.info("Invoice id=%s status %s -> %s", invoice.id, previous, status)
    return invoice


def delete_invoice(db: Session, invoice: Invoice) -> None:
    if invoice.status != "draft" or invoice.journal_id is not None:
        raise ValueError("Only draft invoices can be deleted.")
    db.delete(invoice)
    db.flush()
