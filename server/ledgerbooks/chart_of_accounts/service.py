from decimal import Decimal
import logging

from sqlalchemy.orm import Session

from ledgerbooks.models import Account, JournalLine, TaxCode

logger = logging.getLogger(__name__)

BANK_CODE = "1200"
ACCOUNTS_RECEIVABLE_CODE = "1100"
ACCOUNTS_PAYABLE_CODE = "2100"
VAT_CONTROL_CODE = "2200"
SALES_CODE = "4000"
PURCHASES_CODE = "5000"

DEFAULT_ACCOUNTS = [
    (ACCOUNTS_RECEIVABLE_CODE, "Accounts Receivable", "asset"),
    (BANK_CODE, "Bank", "asset"),
    (ACCOUNTS_PAYABLE_CODE, "Accounts Payable", "liability"),
    (VAT_CONTROL_CODE, "VAT Control", "liability"),
    ("3000", "Owner's Capital", "equity"),
    (SALES_CODE, "Sales", "income"),
    (PURCHASES_CODE, "Purchases", "expense"),
    ("6000", "General Expenses", "expense"),
]

DEFAULT_TAX_CODES = [
    ("Standard", Decimal("20.00")),
    ("Reduced", Decimal("5.00")),
    ("Zero Rated", Decimal("0.00")),
    ("Exempt", Decimal("0.00")),
]


def seed_defaults(db: Session, user_id: str) -> tuple[int, int]:
    """Create the default chart and tax codes the owner is missing. Safe to re-run."""
    accounts_created = 0
    existing_codes = {
        code for (code,) in db.query(Account.code).filter(Account.user_id == user_id, Account.code.isnot(None)).all()
    }
    for code, name, account_type in DEFAULT_ACCOUNTS:
        if code in existing_codes:
            continue
        db.add(Account(user_id=user_id, code=code, name=name, account_type=account_type))
        accounts_created += 1

    tax_codes_created = 0
    existing_tax_names = {name for (name,) in db.query(TaxCode.name).filter(TaxCode.user_id == user_id).all()}
    for name, rate in DEFAULT_TAX_CODES:
        if name in existing_tax_names:
            continue
        db.add(TaxCode(user_id=user_id, name=name, rate=rate))
        tax_codes_created += 1

    db.flush()
    logger.info(
        "Seeded defaults for user=%s: accounts=%s tax_codes=%s", user_id, accounts_created, tax_codes_created
    )
    return accounts_created, tax_codes_created


def get_system_account(db: Session, user_id: str, code: str) -> Account:
    account = db.query(Account).filter(Account.user_id == user_id, Account.code == code).first()
    if not account:
        raise ValueError(f"Account with code {code} not found; seed the default chart of accounts first.")
    return account


def account_in_use(db: Session, account_id: int) -> bool:
    return db.query(JournalLine.id).filter(JournalLine.account_id == account_id).first() is not None
