import csv
from dataclasses import dataclass
from datetime import date, datetime
from decimal import Decimal, InvalidOperation
from io import StringIO
from typing import List, Optional

DATE_FORMATS = ("%Y-%m-%d", "%d/%m/%Y", "%d-%m-%Y")


@dataclass(frozen=True)
class StatementRecord:
    date: date
    description: str
    amount: Decimal
    reference: Optional[str] = None


def _parse_date(value: str) -> Optional[date]:
    value = value.strip()
    for fmt in DATE_FORMATS:
        try:
            return datetime.strptime(value, fmt).date()
        except ValueError:
            continue
    return None


def _parse_amount(value: str) -> Optional[Decimal]:
    cleaned = value.strip().replace(",", "").replace("£", "")
    if not cleaned:
        return None
    try:
        amount = Decimal(cleaned)
    except InvalidOperation:
        return None
    if not amount.is_finite():
        return None
    return amount


def parse_statement_csv(csv_data: str) -> List[StatementRecord]:
    """Rows of Date, Description, Amount[, Reference] after a header line.

    Rows missing a usable date, description or amount are skipped rather than
    failing the whole statement.
    """
    rows = list(csv.reader(StringIO(csv_data.strip())))
    records: List[StatementRecord] = []
    for row in rows[1:]:
        if len(row) < 3:
            continue
        txn_date = _parse_date(row[0])
        description = row[1].strip()
        amount = _parse_amount(row[2])
        if txn_date is None or not description or amount is None:
            continue
        reference = row[3].strip() if len(row) > 3 and row[3].strip() else None
        records.append(StatementRecord(date=txn_date, description=description, amount=amount, reference=reference))
    return records
