from decimal import Decimal
from typing import Optional


class LedgerError(ValueError):
    """Base class for writes the ledger refuses to accept."""


class EmptyJournalError(LedgerError):
    def __init__(self) -> None:
        super().__init__("Journal must contain at least one line.")


class InvalidLineError(LedgerError):
    def __init__(self, index: int, debit: Decimal, credit: Decimal) -> None:
        self.index = index
        super().__init__(
            f"Journal line {index + 1} must have exactly one positive side: debit={debit} credit={credit}"
        )


class UnbalancedEntryError(LedgerError):
    def __init__(self, total_debits: Decimal, total_credits: Decimal) -> None:
        self.total_debits = total_debits
        self.total_credits = total_credits
        super().__init__(f"Journal entry is unbalanced: debits={total_debits} credits={total_credits}")


class TotalsMismatchError(LedgerError):
    def __init__(self, field: str, supplied: Decimal, expected: Decimal) -> None:
        self.field = field
        super().__init__(f"Header {field} {supplied} does not match lines ({expected}).")


class AlreadyReconciledError(LedgerError):
    def __init__(self, transaction_id: int) -> None:
        self.transaction_id = transaction_id
        super().__init__(f"Bank transaction {transaction_id} is already reconciled.")


class InvalidStatusTransitionError(LedgerError):
    def __init__(self, document: str, current: str, requested: str) -> None:
        super().__init__(f"Cannot move {document} from '{current}' to '{requested}'.")


class TaxAuthorityError(Exception):
    """Raised when HMRC rejects or fails a request. Never retried locally."""

    def __init__(self, message: str, status_code: Optional[int] = None, body: Optional[str] = None) -> None:
        self.status_code = status_code
        self.body = body
        super().__init__(message)


class DuplicateVatReturnError(ValueError):
    def __init__(self, period_key: str) -> None:
        self.period_key = period_key
        super().__init__(f"A VAT return for period {period_key} has already been submitted.")


class JournalAlreadyReversedError(LedgerError):
    def __init__(self, journal_id: int) -> None:
        self.journal_id = journal_id
        super().__init__(f"Journal {journal_id} has already been reversed.")
