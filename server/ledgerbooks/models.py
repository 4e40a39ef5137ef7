from datetime import datetime, timezone
from decimal import Decimal

from sqlalchemy import (
    Boolean,
    CheckConstraint,
    Column,
    Date,
    DateTime,
    Enum,
    ForeignKey,
    Integer,
    Numeric,
    String,
    Text,
    UniqueConstraint,
)
from sqlalchemy.orm import relationship

from .db import Base

ACCOUNT_TYPES = ("asset", "liability", "equity", "income", "expense")
INVOICE_STATUSES = ("draft", "sent", "paid", "overdue", "cancelled")
BILL_STATUSES = ("draft", "awaiting_approval", "approved", "paid", "cancelled")


def utcnow() -> datetime:
    """Naive UTC timestamp, as stored in DateTime columns."""
    return datetime.now(timezone.utc).replace(tzinfo=None)


class Account(Base):
    __tablename__ = "accounts"

    id = Column(Integer, primary_key=True)
    user_id = Column(String(64), nullable=False, index=True)
    code = Column(String(20), nullable=True)
    name = Column(String(200), nullable=False)
    account_type = Column(Enum(*ACCOUNT_TYPES, name="account_type"), nullable=False)
    description = Column(Text, nullable=True)
    is_active = Column(Boolean, default=True, nullable=False)
    created_at = Column(DateTime, default=utcnow, nullable=False)

    __table_args__ = (
        UniqueConstraint("user_id", "code", name="uq_account_user_code"),
    )


class TaxCode(Base):
    __tablename__ = "tax_codes"

    id = Column(Integer, primary_key=True)
    user_id = Column(String(64), nullable=False, index=True)
    name = Column(String(100), nullable=False)
    rate = Column(Numeric(5, 2), nullable=False, default=0)
    is_active = Column(Boolean, default=True, nullable=False)

    __table_args__ = (
        UniqueConstraint("user_id", "name", name="uq_tax_code_user_name"),
    )


class Customer(Base):
    __tablename__ = "customers"

    id = Column(Integer, primary_key=True)
    user_id = Column(String(64), nullable=False, index=True)
    name = Column(String(200), nullable=False)
    email = Column(String(255), nullable=True)
    phone = Column(String(50), nullable=True)
    address = Column(Text, nullable=True)
    created_at = Column(DateTime, default=utcnow, nullable=False)

    invoices = relationship("Invoice", back_populates="customer")


class Supplier(Base):
    __tablename__ = "suppliers"

    id = Column(Integer, primary_key=True)
    user_id = Column(String(64), nullable=False, index=True)
    name = Column(String(200), nullable=False)
    email = Column(String(255), nullable=True)
    phone = Column(String(50), nullable=True)
    address = Column(Text, nullable=True)
    created_at = Column(DateTime, default=utcnow, nullable=False)

    bills = relationship("Bill", back_populates="supplier")


class Journal(Base):
    __tablename__ = "journals"

    id = Column(Integer, primary_key=True)
    user_id = Column(String(64), nullable=False, index=True)
    date = Column(Date, nullable=False, index=True)
    reference = Column(String(100), nullable=False)
    description = Column(String(255), nullable=True)
    source_type = Column(String(50), nullable=False, default="manual")
    source_id = Column(Integer, nullable=True)
    reverses_journal_id = Column(Integer, ForeignKey("journals.id"), nullable=True, unique=True)
    posted_at = Column(DateTime, default=utcnow, nullable=False)

    lines = relationship("JournalLine", back_populates="journal", cascade="all, delete-orphan")


class JournalLine(Base):
    __tablename__ = "journal_lines"

    id = Column(Integer, primary_key=True)
    journal_id = Column(Integer, ForeignKey("journals.id", ondelete="CASCADE"), nullable=False, index=True)
    account_id = Column(Integer, ForeignKey("accounts.id"), nullable=False, index=True)
    description = Column(String(255), nullable=True)
    debit = Column(Numeric(14, 2), nullable=False, default=0)
    credit = Column(Numeric(14, 2), nullable=False, default=0)

    journal = relationship("Journal", back_populates="lines")
    account = relationship("Account")

    __table_args__ = (
        CheckConstraint(
            "(debit > 0 AND credit = 0) OR (credit > 0 AND debit = 0)",
            name="ck_journal_line_one_side",
        ),
    )


class Invoice(Base):
    __tablename__ = "invoices"

    id = Column(Integer, primary_key=True)
    user_id = Column(String(64), nullable=False, index=True)
    customer_id = Column(Integer, ForeignKey("customers.id"), nullable=False)
    invoice_number = Column(String(30), nullable=False)
    date = Column(Date, nullable=False, index=True)
    due_date = Column(Date, nullable=True)
    status = Column(Enum(*INVOICE_STATUSES, name="invoice_status"), nullable=False, default="draft")
    notes = Column(Text, nullable=True)
    subtotal = Column(Numeric(14, 2), nullable=False, default=0)
    vat_amount = Column(Numeric(14, 2), nullable=False, default=0)
    total = Column(Numeric(14, 2), nullable=False, default=0)
    journal_id = Column(Integer, ForeignKey("journals.id"), nullable=True)
    created_at = Column(DateTime, default=utcnow, nullable=False)
    updated_at = Column(DateTime, default=utcnow, onupdate=utcnow, nullable=False)

    customer = relationship("Customer", back_populates="invoices")
    lines = relationship("InvoiceLine", back_populates="invoice", cascade="all, delete-orphan")

    __table_args__ = (
        UniqueConstraint("user_id", "invoice_number", name="uq_invoice_user_number"),
    )


class InvoiceLine(Base):
    __tablename__ = "invoice_lines"

    id = Column(Integer, primary_key=True)
    invoice_id = Column(Integer, ForeignKey("invoices.id", ondelete="CASCADE"), nullable=False)
    description = Column(Text, nullable=False)
    quantity = Column(Numeric(14, 2), nullable=False, default=1)
    unit_price = Column(Numeric(14, 2), nullable=False)
    tax_code_id = Column(Integer, ForeignKey("tax_codes.id"), nullable=True)
    line_total = Column(Numeric(14, 2), nullable=False, default=0)
    vat_amount = Column(Numeric(14, 2), nullable=False, default=0)

    invoice = relationship("Invoice", back_populates="lines")
    tax_code = relationship("TaxCode")

    @property
    def gross_total(self):
        return Decimal(self.line_total or 0) + Decimal(self.vat_amount or 0)


class Bill(Base):
    __tablename__ = "bills"

    id = Column(Integer, primary_key=True)
    user_id = Column(String(64), nullable=False, index=True)
    supplier_id = Column(Integer, ForeignKey("suppliers.id"), nullable=False)
    bill_number = Column(String(50), nullable=False)
    date = Column(Date, nullable=False, index=True)
    due_date = Column(Date, nullable=True)
    status = Column(Enum(*BILL_STATUSES, name="bill_status"), nullable=False, default="draft")
    notes = Column(Text, nullable=True)
    subtotal = Column(Numeric(14, 2), nullable=False, default=0)
    vat_amount = Column(Numeric(14, 2), nullable=False, default=0)
    total = Column(Numeric(14, 2), nullable=False, default=0)
    journal_id = Column(Integer, ForeignKey("journals.id"), nullable=True)
    created_at = Column(DateTime, default=utcnow, nullable=False)
    updated_at = Column(DateTime, default=utcnow, onupdate=utcnow, nullable=False)

    supplier = relationship("Supplier", back_populates="bills")
    lines = relationship("BillLine", back_populates="bill", cascade="all, delete-orphan")


class BillLine(Base):
    __tablename__ = "bill_lines"

    id = Column(Integer, primary_key=True)
    bill_id = Column(Integer, ForeignKey("bills.id", ondelete="CASCADE"), nullable=False)
    description = Column(Text, nullable=False)
    quantity = Column(Numeric(14, 2), nullable=False, default=1)
    unit_price = Column(Numeric(14, 2), nullable=False)
    tax_code_id = Column(Integer, ForeignKey("tax_codes.id"), nullable=True)
    line_total = Column(Numeric(14, 2), nullable=False, default=0)
    vat_amount = Column(Numeric(14, 2), nullable=False, default=0)

    bill = relationship("Bill", back_populates="lines")
    tax_code = relationship("TaxCode")

    @property
    def gross_total(self):
        return Decimal(self.line_total or 0) + Decimal(self.vat_amount or 0)


class BankTransaction(Base):
    __tablename__ = "bank_transactions"

    id = Column(Integer, primary_key=True)
    user_id = Column(String(64), nullable=False, index=True)
    date = Column(Date, nullable=False)
    description = Column(Text, nullable=False)
    amount = Column(Numeric(14, 2), nullable=False)
    reference = Column(String(100), nullable=True)
    reconciled = Column(Boolean, default=False, nullable=False)
    invoice_id = Column(Integer, ForeignKey("invoices.id"), nullable=True)
    bill_id = Column(Integer, ForeignKey("bills.id"), nullable=True)
    reconciled_at = Column(DateTime, nullable=True)
    created_at = Column(DateTime, default=utcnow, nullable=False)

    invoice = relationship("Invoice")
    bill = relationship("Bill")

    __table_args__ = (
        CheckConstraint("invoice_id IS NULL OR bill_id IS NULL", name="ck_bank_txn_single_target"),
    )


class VatObligation(Base):
    __tablename__ = "vat_obligations"

    id = Column(Integer, primary_key=True)
    user_id = Column(String(64), nullable=False, index=True)
    period_key = Column(String(10), nullable=False)
    start_date = Column(Date, nullable=False)
    end_date = Column(Date, nullable=False)
    due_date = Column(Date, nullable=False)
    status = Column(Enum("O", "F", name="vat_obligation_status"), nullable=False, default="O")
    received_date = Column(DateTime, nullable=True)
    created_at = Column(DateTime, default=utcnow, nullable=False)
    updated_at = Column(DateTime, default=utcnow, onupdate=utcnow, nullable=False)

    __table_args__ = (
        UniqueConstraint("user_id", "period_key", name="uq_vat_obligation_user_period"),
    )


class VatReturn(Base):
    __tablename__ = "vat_returns"

    id = Column(Integer, primary_key=True)
    user_id = Column(String(64), nullable=False, index=True)
    obligation_id = Column(Integer, ForeignKey("vat_obligations.id", ondelete="CASCADE"), nullable=True)
    period_key = Column(String(10), nullable=False)
    vat_due_sales = Column(Numeric(14, 2), nullable=False, default=0)
    vat_due_acquisitions = Column(Numeric(14, 2), nullable=False, default=0)
    total_vat_due = Column(Numeric(14, 2), nullable=False, default=0)
    vat_reclaimed_curr_period = Column(Numeric(14, 2), nullable=False, default=0)
    net_vat_due = Column(Numeric(14, 2), nullable=False, default=0)
    total_value_sales_ex_vat = Column(Numeric(14, 2), nullable=False, default=0)
    total_value_purchases_ex_vat = Column(Numeric(14, 2), nullable=False, default=0)
    total_value_goods_supplied_ex_vat = Column(Numeric(14, 2), nullable=False, default=0)
    total_acquisitions_ex_vat = Column(Numeric(14, 2), nullable=False, default=0)
    submitted_at = Column(DateTime, default=utcnow, nullable=False)
    hmrc_processing_date = Column(String(40), nullable=True)
    hmrc_form_bundle_number = Column(String(40), nullable=True)

    obligation = relationship("VatObligation")

    __table_args__ = (
        UniqueConstraint("user_id", "period_key", name="uq_vat_return_user_period"),
    )


class HmrcToken(Base):
    __tablename__ = "hmrc_oauth_tokens"

    id = Column(Integer, primary_key=True)
    user_id = Column(String(64), nullable=False, unique=True)
    access_token = Column(Text, nullable=False)
    expires_at = Column(DateTime, nullable=False)
