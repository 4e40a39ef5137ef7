from datetime import date
from decimal import Decimal

from ledgerbooks.vat.calculations import VatDocument, calculate_vat_return, to_submission_payload


def _doc(day, vat, total):
    return VatDocument(date=day, vat_amount=Decimal(vat), total=Decimal(total))


def test_boxes_for_a_quarter():
    invoices = [_doc(date(2024, 1, 15), "200.00", "1200.00"), _doc(date(2024, 2, 20), "40.00", "240.00")]
    bills = [_doc(date(2024, 3, 1), "90.00", "540.00")]

    boxes = calculate_vat_return(invoices, bills, date(2024, 1, 1), date(2024, 3, 31))

    assert boxes.box1 == Decimal("240.00")
    assert boxes.box2 == Decimal("0.00")
    assert boxes.box3 == Decimal("240.00")
    assert boxes.box4 == Decimal("90.00")
    assert boxes.box5 == Decimal("150.00")
    assert boxes.box6 == Decimal("1200.00")
    assert boxes.box7 == Decimal("450.00")
    assert boxes.box8 == boxes.box9 == Decimal("0.00")


def test_documents_outside_the_period_are_ignored():
    invoices = [_doc(date(2023, 12, 31), "20.00", "120.00"), _doc(date(2024, 1, 1), "10.00", "60.00")]
    boxes = calculate_vat_return(invoices, [], date(2024, 1, 1), date(2024, 3, 31))
    assert boxes.box1 == Decimal("10.00")


def test_reclaim_gives_negative_box5():
    boxes = calculate_vat_return(
        [_doc(date(2024, 1, 5), "10.00", "60.00")],
        [_doc(date(2024, 1, 6), "35.50", "213.00")],
        date(2024, 1, 1),
        date(2024, 3, 31),
    )
    assert boxes.box5 == Decimal("-25.50")
    assert boxes.box5 == boxes.box3 - boxes.box4


def test_submission_payload_truncates_value_boxes_to_whole_pounds():
    boxes = calculate_vat_return(
        [_doc(date(2024, 1, 5), "20.33", "122.32")],
        [_doc(date(2024, 1, 6), "50.00", "300.99")],
        date(2024, 1, 1),
        date(2024, 3, 31),
    )
    payload = to_submission_payload("24A1", boxes)

    assert payload["periodKey"] == "24A1"
    assert payload["vatDueSales"] == 20.33
    assert payload["netVatDue"] == 29.67
    assert payload["totalValueSalesExVAT"] == 101
    assert payload["totalValuePurchasesExVAT"] == 250
    assert payload["finalised"] is True
