"""initial ledger schema

Revision ID: 0001_initial
Revises:
Create Date: 2026-10-17 00:00:00.000000
"""
from alembic import op
import sqlalchemy as sa

revision = "0001_initial"
down_revision = None
branch_labels = None
depends_on = None


ACCOUNT_TYPE = sa.Enum("asset", "liability", "equity", "income", "expense", name="account_type")
INVOICE_STATUS = sa.Enum("draft", "sent", "paid", "overdue", "cancelled", name="invoice_status")
BILL_STATUS = sa.Enum("draft", "awaiting_approval", "approved", "paid", "cancelled", name="bill_status")
OBLIGATION_STATUS = sa.Enum("O", "F", name="vat_obligation_status")


def upgrade() -> None:
    op.create_table(
        "accounts",
        sa.Column("id", sa.Integer(), primary_key=True),
        sa.Column("user_id", sa.String(length=64), nullable=False),
        sa.Column("code", sa.String(length=20)),
        sa.Column("name", sa.String(length=200), nullable=False),
        sa.Column("account_type", ACCOUNT_TYPE, nullable=False),
        sa.Column("description", sa.Text()),
        sa.Column("is_active", sa.Boolean(), nullable=False, server_default=sa.true()),
        sa.Column("created_at", sa.DateTime(), nullable=False),
        sa.UniqueConstraint("user_id", "code", name="uq_account_user_code"),
    )
    op.create_index("ix_accounts_user_id", "accounts", ["user_id"])

    op.create_table(
        "tax_codes",
        sa.Column("id", sa.Integer(), primary_key=True),
        sa.Column("user_id", sa.String(length=64), nullable=False),
        sa.Column("name", sa.String(length=100), nullable=False),
        sa.Column("rate", sa.Numeric(5, 2), nullable=False, server_default="0"),
        sa.Column("is_active", sa.Boolean(), nullable=False, server_default=sa.true()),
        sa.UniqueConstraint("user_id", "name", name="uq_tax_code_user_name"),
    )
    op.create_index("ix_tax_codes_user_id", "tax_codes", ["user_id"])

    for table in ("customers", "suppliers"):
        op.create_table(
            table,
            sa.Column("id", sa.Integer(), primary_key=True),
            sa.Column("user_id", sa.String(length=64), nullable=False),
            sa.Column("name", sa.String(length=200), nullable=False),
            sa.Column("email", sa.String(length=255)),
            sa.Column("phone", sa.String(length=50)),
            sa.Column("address", sa.Text()),
            sa.Column("created_at", sa.DateTime(), nullable=False),
        )
        op.create_index(f"ix_{table}_user_id", table, ["user_id"])

    op.create_table(
        "journals",
        sa.Column("id", sa.Integer(), primary_key=True),
        sa.Column("user_id", sa.String(length=64), nullable=False),
        sa.Column("date", sa.Date(), nullable=False),
        sa.Column("reference", sa.String(length=100), nullable=False),
        sa.Column("description", sa.String(length=255)),
        sa.Column("source_type", sa.String(length=50), nullable=False, server_default="manual"),
        sa.Column("source_id", sa.Integer()),
        sa.Column("reverses_journal_id", sa.Integer(), sa.ForeignKey("journals.id"), unique=True),
        sa.Column("posted_at", sa.DateTime(), nullable=False),
    )
    op.create_index("ix_journals_user_id", "journals", ["user_id"])
    op.create_index("ix_journals_date", "journals", ["date"])

    op.create_table(
        "journal_lines",
        sa.Column("id", sa.Integer(), primary_key=True),
        sa.Column("journal_id", sa.Integer(), sa.ForeignKey("journals.id", ondelete="CASCADE"), nullable=False),
        sa.Column("account_id", sa.Integer(), sa.ForeignKey("accounts.id"), nullable=False),
        sa.Column("description", sa.String(length=255)),
        sa.Column("debit", sa.Numeric(14, 2), nullable=False, server_default="0"),
        sa.Column("credit", sa.Numeric(14, 2), nullable=False, server_default="0"),
        sa.CheckConstraint(
            "(debit > 0 AND credit = 0) OR (credit > 0 AND debit = 0)",
            name="ck_journal_line_one_side",
        ),
    )
    op.create_index("ix_journal_lines_journal_id", "journal_lines", ["journal_id"])
    op.create_index("ix_journal_lines_account_id", "journal_lines", ["account_id"])

    op.create_table(
        "invoices",
        sa.Column("id", sa.Integer(), primary_key=True),
        sa.Column("user_id", sa.String(length=64), nullable=False),
        sa.Column("customer_id", sa.Integer(), sa.ForeignKey("customers.id"), nullable=False),
        sa.Column("invoice_number", sa.String(length=30), nullable=False),
        sa.Column("date", sa.Date(), nullable=False),
        sa.Column("due_date", sa.Date()),
        sa.Column("status", INVOICE_STATUS, nullable=False, server_default="draft"),
        sa.Column("notes", sa.Text()),
        sa.Column("subtotal", sa.Numeric(14, 2), nullable=False, server_default="0"),
        sa.Column("vat_amount", sa.Numeric(14, 2), nullable=False, server_default="0"),
        sa.Column("total", sa.Numeric(14, 2), nullable=False, server_default="0"),
        sa.Column("journal_id", sa.Integer(), sa.ForeignKey("journals.id")),
        sa.Column("created_at", sa.DateTime(), nullable=False),
        sa.Column("updated_at", sa.DateTime(), nullable=False),
        sa.UniqueConstraint("user_id", "invoice_number", name="uq_invoice_user_number"),
    )
    op.create_index("ix_invoices_user_id", "invoices", ["user_id"])
    op.create_index("ix_invoices_date", "invoices", ["date"])

    op.create_table(
        "invoice_lines",
        sa.Column("id", sa.Integer(), primary_key=True),
        sa.Column("invoice_id", sa.Integer(), sa.ForeignKey("invoices.id", ondelete="CASCADE"), nullable=False),
        sa.Column("description", sa.Text(), nullable=False),
        sa.Column("quantity", sa.Numeric(14, 2), nullable=False, server_default="1"),
        sa.Column("unit_price", sa.Numeric(14, 2), nullable=False),
        sa.Column("tax_code_id", sa.Integer(), sa.ForeignKey("tax_codes.id")),
        sa.Column("line_total", sa.Numeric(14, 2), nullable=False, server_default="0"),
        sa.Column("vat_amount", sa.Numeric(14, 2), nullable=False, server_default="0"),
    )

    op.create_table(
        "bills",
        sa.Column("id", sa.Integer(), primary_key=True),
        sa.Column("user_id", sa.String(length=64), nullable=False),
        sa.Column("supplier_id", sa.Integer(), sa.ForeignKey("suppliers.id"), nullable=False),
        sa.Column("bill_number", sa.String(length=50), nullable=False),
        sa.Column("date", sa.Date(), nullable=False),
        sa.Column("due_date", sa.Date()),
        sa.Column("status", BILL_STATUS, nullable=False, server_default="draft"),
        sa.Column("notes", sa.Text()),
        sa.Column("subtotal", sa.Numeric(14, 2), nullable=False, server_default="0"),
        sa.Column("vat_amount", sa.Numeric(14, 2), nullable=False, server_default="0"),
        sa.Column("total", sa.Numeric(14, 2), nullable=False, server_default="0"),
        sa.Column("journal_id", sa.Integer(), sa.ForeignKey("journals.id")),
        sa.Column("created_at", sa.DateTime(), nullable=False),
        sa.Column("updated_at", sa.DateTime(), nullable=False),
    )
    op.create_index("ix_bills_user_id", "bills", ["user_id"])
    op.create_index("ix_bills_date", "bills", ["date"])

    op.create_table(
        "bill_lines",
        sa.Column("id", sa.Integer(), primary_key=True),
        sa.Column("bill_id", sa.Integer(), sa.ForeignKey("bills.id", ondelete="CASCADE"), nullable=False),
        sa.Column("description", sa.Text(), nullable=False),
        sa.Column("quantity", sa.Numeric(14, 2), nullable=False, server_default="1"),
        sa.Column("unit_price", sa.Numeric(14, 2), nullable=False),
        sa.Column("tax_code_id", sa.Integer(), sa.ForeignKey("tax_codes.id")),
        sa.Column("line_total", sa.Numeric(14, 2), nullable=False, server_default="0"),
        sa.Column("vat_amount", sa.Numeric(14, 2), nullable=False, server_default="0"),
    )

    op.create_table(
        "bank_transactions",
        sa.Column("id", sa.Integer(), primary_key=True),
        sa.Column("user_id", sa.String(length=64), nullable=False),
        sa.Column("date", sa.Date(), nullable=False),
        sa.Column("description", sa.Text(), nullable=False),
        sa.Column("amount", sa.Numeric(14, 2), nullable=False),
        sa.Column("reference", sa.String(length=100)),
        sa.Column("reconciled", sa.Boolean(), nullable=False, server_default=sa.false()),
        sa.Column("invoice_id", sa.Integer(), sa.ForeignKey("invoices.id")),
        sa.Column("bill_id", sa.Integer(), sa.ForeignKey("bills.id")),
        sa.Column("reconciled_at", sa.DateTime()),
        sa.Column("created_at", sa.DateTime(), nullable=False),
        sa.CheckConstraint("invoice_id IS NULL OR bill_id IS NULL", name="ck_bank_txn_single_target"),
    )
    op.create_index("ix_bank_transactions_user_id", "bank_transactions", ["user_id"])

    op.create_table(
        "vat_obligations",
        sa.Column("id", sa.Integer(), primary_key=True),
        sa.Column("user_id", sa.String(length=64), nullable=False),
        sa.Column("period_key", sa.String(length=10), nullable=False),
        sa.Column("start_date", sa.Date(), nullable=False),
        sa.Column("end_date", sa.Date(), nullable=False),
        sa.Column("due_date", sa.Date(), nullable=False),
        sa.Column("status", OBLIGATION_STATUS, nullable=False, server_default="O"),
        sa.Column("received_date", sa.DateTime()),
        sa.Column("created_at", sa.DateTime(), nullable=False),
        sa.Column("updated_at", sa.DateTime(), nullable=False),
        sa.UniqueConstraint("user_id", "period_key", name="uq_vat_obligation_user_period"),
    )
    op.create_index("ix_vat_obligations_user_id", "vat_obligations", ["user_id"])

    op.create_table(
        "vat_returns",
        sa.Column("id", sa.Integer(), primary_key=True),
        sa.Column("user_id", sa.String(length=64), nullable=False),
        sa.Column("obligation_id", sa.Integer(), sa.ForeignKey("vat_obligations.id", ondelete="CASCADE")),
        sa.Column("period_key", sa.String(length=10), nullable=False),
        sa.Column("vat_due_sales", sa.Numeric(14, 2), nullable=False, server_default="0"),
        sa.Column("vat_due_acquisitions", sa.Numeric(14, 2), nullable=False, server_default="0"),
        sa.Column("total_vat_due", sa.Numeric(14, 2), nullable=False, server_default="0"),
        sa.Column("vat_reclaimed_curr_period", sa.Numeric(14, 2), nullable=False, server_default="0"),
        sa.Column("net_vat_due", sa.Numeric(14, 2), nullable=False, server_default="0"),
        sa.Column("total_value_sales_ex_vat", sa.Numeric(14, 2), nullable=False, server_default="0"),
        sa.Column("total_value_purchases_ex_vat", sa.Numeric(14, 2), nullable=False, server_default="0"),
        sa.Column("total_value_goods_supplied_ex_vat", sa.Numeric(14, 2), nullable=False, server_default="0"),
        sa.Column("total_acquisitions_ex_vat", sa.Numeric(14, 2), nullable=False, server_default="0"),
        sa.Column("submitted_at", sa.DateTime(), nullable=False),
        sa.Column("hmrc_processing_date", sa.String(length=40)),
        sa.Column("hmrc_form_bundle_number", sa.String(length=40)),
        sa.UniqueConstraint("user_id", "period_key", name="uq_vat_return_user_period"),
    )
    op.create_index("ix_vat_returns_user_id", "vat_returns", ["user_id"])

    op.create_table(
        "hmrc_oauth_tokens",
        sa.Column("id", sa.Integer(), primary_key=True),
        sa.Column("user_id", sa.String(length=64), nullable=False, unique=True),
        sa.Column("access_token", sa.Text(), nullable=False),
        sa.Column("expires_at", sa.DateTime(), nullable=False),
    )


def downgrade() -> None:
    op.drop_table("hmrc_oauth_tokens")
    op.drop_index("ix_vat_returns_user_id", table_name="vat_returns")
    op.drop_table("vat_returns")
    op.drop_index("ix_vat_obligations_user_id", table_name="vat_obligations")
    op.drop_table("vat_obligations")
    op.drop_index("ix_bank_transactions_user_id", table_name="bank_transactions")
    op.drop_table("bank_transactions")
    op.drop_table("bill_lines")
    op.drop_index("ix_bills_date", table_name="bills")
    op.drop_index("ix_bills_user_id", table_name="bills")
    op.drop_table("bills")
    op.drop_table("invoice_lines")
    op.drop_index("ix_invoices_date", table_name="invoices")
    op.drop_index("ix_invoices_user_id", table_name="invoices")
    op.drop_table("invoices")
    op.drop_index("ix_journal_lines_account_id", table_name="journal_lines")
    op.drop_index("ix_journal_lines_journal_id", table_name="journal_lines")
    op.drop_table("journal_lines")
    op.drop_index("ix_journals_date", table_name="journals")
    op.drop_index("ix_journals_user_id", table_name="journals")
    op.drop_table("journals")
    for table in ("suppliers", "customers"):
        op.drop_index(f"ix_{table}_user_id", table_name=table)
        op.drop_table(table)
    op.drop_index("ix_tax_codes_user_id", table_name="tax_codes")
    op.drop_table("tax_codes")
    op.drop_index("ix_accounts_user_id", table_name="accounts")
    op.drop_table("accounts")

    bind = op.get_bind()
    for enum in (OBLIGATION_STATUS, BILL_STATUS, INVOICE_STATUS, ACCOUNT_TYPE):
        enum.drop(bind, checkfirst=True)
