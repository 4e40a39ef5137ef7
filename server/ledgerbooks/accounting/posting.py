from dataclasses import dataclass, field
from datetime import date
from decimal import Decimal
from typing import List, Optional, Sequence

from ledgerbooks.exceptions import EmptyJournalError, InvalidLineError, UnbalancedEntryError
from ledgerbooks.utils import ZERO, quantize_money, to_decimal, within_tolerance


@dataclass(frozen=True)
class JournalLineInput:
    account_id: int
    debit: Decimal = Decimal("0.00")
    credit: Decimal = Decimal("0.00")
    description: str | None = None


@dataclass(frozen=True)
class JournalEntryInput:
    date: date
    reference: str
    description: str | None
    source_type: str
    source_id: int | None
    lines: List[JournalLineInput] = field(default_factory=list)


def ensure_balanced(lines: Sequence[JournalLineInput]) -> None:
    total_debits = sum((to_decimal(line.debit) for line in lines), ZERO)
    total_credits = sum((to_decimal(line.credit) for line in lines), ZERO)
    if not within_tolerance(total_debits, total_credits):
        raise UnbalancedEntryError(total_debits, total_credits)


def validate_journal(lines: Sequence[JournalLineInput]) -> List[JournalLineInput]:
    """Check a journal's lines before they are written.

    Raises EmptyJournalError for no lines, InvalidLineError when a line is not
    strictly one-sided, and UnbalancedEntryError when debits and credits differ
    by more than a penny.
    """
    if not lines:
        raise EmptyJournalError()
    for index, line in enumerate(lines):
        debit = to_decimal(line.debit)
        credit = to_decimal(line.credit)
        if debit < 0 or credit < 0:
            raise InvalidLineError(index, debit, credit)
        if (debit > 0) == (credit > 0):
            raise InvalidLineError(index, debit, credit)
    ensure_balanced(lines)
    return list(lines)


def debit_leg(account_id: int, amount: Decimal, description: str | None = None) -> Optional[JournalLineInput]:
    """A debit of `amount`; negative amounts become a credit, zero yields no line."""
    amount = quantize_money(amount)
    if amount == 0:
        return None
    if amount > 0:
        return JournalLineInput(account_id=account_id, debit=amount, description=description)
    return JournalLineInput(account_id=account_id, credit=-amount, description=description)


def credit_leg(account_id: int, amount: Decimal, description: str | None = None) -> Optional[JournalLineInput]:
    return debit_leg(account_id, -quantize_money(amount), description)


def _legs(*legs: Optional[JournalLineInput]) -> List[JournalLineInput]:
    return [leg for leg in legs if leg is not None]


def build_invoice_entry(
    *,
    txn_date: date,
    reference: str,
    accounts_receivable_id: int,
    sales_account_id: int,
    vat_account_id: int,
    subtotal: Decimal,
    vat_amount: Decimal,
    description: str,
    source_id: int | None = None,
) -> JournalEntryInput:
    lines = _legs(
        debit_leg(accounts_receivable_id, subtotal + vat_amount),
        credit_leg(sales_account_id, subtotal),
        credit_leg(vat_account_id, vat_amount),
    )
    validate_journal(lines)
    return JournalEntryInput(
        date=txn_date,
        reference=reference,
        description=description,
        source_type="invoice",
        source_id=source_id,
        lines=lines,
    )


def build_bill_entry(
    *,
    txn_date: date,
    reference: str,
    accounts_payable_id: int,
    purchases_account_id: int,
    vat_account_id: int,
    subtotal: Decimal,
    vat_amount: Decimal,
    description: str,
    source_id: int | None = None,
) -> JournalEntryInput:
    lines = _legs(
        debit_leg(purchases_account_id, subtotal),
        debit_leg(vat_account_id, vat_amount),
        credit_leg(accounts_payable_id, subtotal + vat_amount),
    )
    validate_journal(lines)
    return JournalEntryInput(
        date=txn_date,
        reference=reference,
        description=description,
        source_type="bill",
        source_id=source_id,
        lines=lines,
    )


def build_reversal_entry(
    *,
    original_reference: str,
    original_lines: Sequence[JournalLineInput],
    txn_date: date,
    source_id: int | None = None,
) -> JournalEntryInput:
    lines = [
        JournalLineInput(
            account_id=line.account_id,
            debit=to_decimal(line.credit),
            credit=to_decimal(line.debit),
            description=line.description,
        )
        for line in original_lines
    ]
    validate_journal(lines)
    return JournalEntryInput(
        date=txn_date,
        reference=f"REV-{original_reference}",
        description=f"Reversal of {original_reference}",
        source_type="reversal",
        source_id=source_id,
        lines=lines,
    )
