from datetime import date, timedelta
from decimal import Decimal
import json

from fastapi.testclient import TestClient
import httpx
import pytest
import respx

from ledgerbooks.config import settings
from ledgerbooks.exceptions import TaxAuthorityError
from ledgerbooks.models import Bill, Customer, HmrcToken, Invoice, Supplier, VatObligation, VatReturn, utcnow
from ledgerbooks.tests.conftest import TEST_USER_ID
from ledgerbooks.vat.service import get_access_token, get_vat_return

VRN = "123456789"
RETURNS_PATH = f"/organisations/vat/{VRN}/returns"


def _seed_documents(db, user_id=TEST_USER_ID):
    customer = Customer(user_id=user_id, name="Acme Ltd")
    supplier = Supplier(user_id=user_id, name="Paper Co")
    db.add_all([customer, supplier])
    db.flush()
    db.add_all(
        [
            Invoice(user_id=user_id, customer_id=customer.id, invoice_number="INV-1", date=date(2024, 1, 10), status="sent",
                    subtotal=Decimal("1200.00"), vat_amount=Decimal("240.00"), total=Decimal("1440.00")),
            Invoice(user_id=user_id, customer_id=customer.id, invoice_number="INV-2", date=date(2024, 2, 10), status="cancelled",
                    subtotal=Decimal("500.00"), vat_amount=Decimal("100.00"), total=Decimal("600.00")),
            Invoice(user_id=user_id, customer_id=customer.id, invoice_number="INV-3", date=date(2024, 4, 2), status="sent",
                    subtotal=Decimal("10.00"), vat_amount=Decimal("2.00"), total=Decimal("12.00")),
            Bill(user_id=user_id, supplier_id=supplier.id, bill_number="PC-1", date=date(2024, 3, 5), status="approved",
                 subtotal=Decimal("450.00"), vat_amount=Decimal("90.00"), total=Decimal("540.00")),
        ]
    )
    db.add(
        VatObligation(user_id=user_id, period_key="24A1", start_date=date(2024, 1, 1), end_date=date(2024, 3, 31),
                      due_date=date(2024, 5, 7), status="O")
    )
    db.add(HmrcToken(user_id=user_id, access_token="token-abc", expires_at=utcnow() + timedelta(hours=1)))
    db.commit()


def test_vat_return_excludes_cancelled_and_out_of_period_documents(db):
    _seed_documents(db)
    boxes = get_vat_return(db, TEST_USER_ID, date(2024, 1, 1), date(2024, 3, 31))
    assert boxes.box1 == Decimal("240.00")
    assert boxes.box4 == Decimal("90.00")
    assert boxes.box5 == Decimal("150.00")
    assert boxes.box6 == Decimal("1200.00")
    assert boxes.box7 == Decimal("450.00")


def test_missing_or_expired_token_is_an_authority_error(db):
    with pytest.raises(TaxAuthorityError):
        get_access_token(db, "nobody")
    db.add(HmrcToken(user_id="expired", access_token="old", expires_at=utcnow() - timedelta(minutes=1)))
    db.commit()
    with pytest.raises(TaxAuthorityError):
        get_access_token(db, "expired")


def test_preview_endpoint(client: TestClient, session_local):
    with session_local() as db:
        _seed_documents(db)
    response = client.get("/api/vat/return", params={"date_from": "2024-01-01", "date_to": "2024-03-31"})
    assert response.status_code == 200
    assert response.json()["box5"] == "150.00"


def test_submit_return_records_receipt_and_fulfils_obligation(client: TestClient, session_local):
    with session_local() as db:
        _seed_documents(db)

    with respx.mock(base_url=settings.hmrc_base_url) as mock:
        route = mock.post(RETURNS_PATH).mock(
            return_value=httpx.Response(
                201,
                json={"processingDate": "2024-05-01T12:00:00.000Z", "formBundleNumber": "256660290587"},
            )
        )
        response = client.post("/api/vat/returns", json={"vrn": VRN, "period_key": "24A1"})

    assert response.status_code == 201
    body = response.json()
    assert body["hmrc_form_bundle_number"] == "256660290587"
    assert body["net_vat_due"] == "150.00"

    sent = json.loads(route.calls.last.request.content)
    assert sent["periodKey"] == "24A1"
    assert sent["vatDueSales"] == 240.0
    assert sent["totalValueSalesExVAT"] == 1200
    assert sent["finalised"] is True
    assert route.calls.last.request.headers["Authorization"] == "Bearer token-abc"

    obligations = client.get("/api/vat/obligations").json()
    assert obligations[0]["status"] == "F"


def test_duplicate_submission_is_refused_without_calling_hmrc(client: TestClient, session_local):
    with session_local() as db:
        _seed_documents(db)
        db.add(VatReturn(user_id=TEST_USER_ID, period_key="24A1"))
        db.commit()

    with respx.mock(base_url=settings.hmrc_base_url, assert_all_called=False) as mock:
        route = mock.post(RETURNS_PATH)
        response = client.post("/api/vat/returns", json={"vrn": VRN, "period_key": "24A1"})

    assert response.status_code == 409
    assert not route.called


def test_rejected_submission_is_reported_and_not_stored(client: TestClient, session_local):
    with session_local() as db:
        _seed_documents(db)

    with respx.mock(base_url=settings.hmrc_base_url) as mock:
        mock.post(RETURNS_PATH).mock(
            return_value=httpx.Response(400, json={"code": "INVALID_REQUEST", "message": "Invalid request"})
        )
        response = client.post("/api/vat/returns", json={"vrn": VRN, "period_key": "24A1"})

    assert response.status_code == 502
    assert response.json()["detail"] == "Invalid request"
    assert client.get("/api/vat/returns").json() == []
    assert client.get("/api/vat/obligations").json()[0]["status"] == "O"


def test_sync_obligations_upserts(client: TestClient, session_local):
    with session_local() as db:
        _seed_documents(db)

    with respx.mock(base_url=settings.hmrc_base_url) as mock:
        mock.get(f"/organisations/vat/{VRN}/obligations").mock(
            return_value=httpx.Response(
                200,
                json={
                    "obligations": [
                        {"periodKey": "24A1", "start": "2024-01-01", "end": "2024-03-31", "due": "2024-05-07",
                         "status": "F", "received": "2024-04-20"},
                        {"periodKey": "24A2", "start": "2024-04-01", "end": "2024-06-30", "due": "2024-08-07", "status": "O"},
                    ]
                },
            )
        )
        response = client.post(
            "/api/vat/obligations/sync",
            json={"vrn": VRN, "date_from": "2024-01-01", "date_to": "2024-12-31"},
        )

    assert response.status_code == 200
    assert [(o["period_key"], o["status"]) for o in response.json()] == [("24A1", "F"), ("24A2", "O")]
    assert len(client.get("/api/vat/obligations").json()) == 2
