from datetime import date
from decimal import Decimal

from ledgerbooks.banking.importer import parse_statement_csv


def test_parses_rows_after_header():
    records = parse_statement_csv(
        "Date,Description,Amount,Reference\n"
        "2024-01-05,Payment INV-1001,120.00,BACS1\n"
        "06/01/2024,\"Paper Co, stationery\",-45.00,\n"
    )
    assert len(records) == 2
    assert records[0].date == date(2024, 1, 5)
    assert records[0].amount == Decimal("120.00")
    assert records[0].reference == "BACS1"
    assert records[1].date == date(2024, 1, 6)
    assert records[1].description == "Paper Co, stationery"
    assert records[1].reference is None


def test_skips_rows_without_usable_fields():
    records = parse_statement_csv(
        "Date,Description,Amount\n"
        "not a date,Coffee,-3.50\n"
        "2024-01-07,,10.00\n"
        "2024-01-08,Refund,abc\n"
        "2024-01-09,Interest,0.12\n"
        "2024-01-10,Too short\n"
    )
    assert [(record.description, record.amount) for record in records] == [("Interest", Decimal("0.12"))]


def test_header_only_yields_nothing():
    assert parse_statement_csv("Date,Description,Amount\n") == []
