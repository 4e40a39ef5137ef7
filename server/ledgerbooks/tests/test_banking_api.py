from datetime import date
from decimal import Decimal

from fastapi.testclient import TestClient
import pytest

from ledgerbooks.banking.service import commit_match
from ledgerbooks.exceptions import AlreadyReconciledError
from ledgerbooks.models import BankTransaction, Customer, Invoice


@pytest.fixture()
def open_invoice(client: TestClient):
    client.post("/api/chart-of-accounts/seed-defaults")
    standard = next(code for code in client.get("/api/tax-codes").json() if code["name"] == "Standard")
    customer = client.post("/api/customers", json={"name": "Acme Ltd"}).json()
    invoice = client.post(
        "/api/invoices",
        json={
            "customer_id": customer["id"],
            "date": "2024-01-15",
            "lines": [{"description": "Consulting", "quantity": "1", "unit_price": "100.00", "tax_code_id": standard["id"]}],
        },
    ).json()
    client.post(f"/api/invoices/{invoice['id']}/status", json={"status": "sent"})
    return invoice


def _import(client: TestClient, amount: str, description: str):
    response = client.post(
        "/api/bank-transactions/import",
        json={"transactions": [{"date": "2024-01-20", "description": description, "amount": amount}]},
    )
    assert response.status_code == 201
    return response.json()["transactions"][0]


def test_import_csv_statement(client: TestClient):
    response = client.post(
        "/api/bank-transactions/import-csv",
        json={"csv_data": "Date,Description,Amount\n2024-01-20,Payment,120.00\nbad,row,1\n2024-01-21,Fee,-2.50\n"},
    )
    assert response.status_code == 201
    assert response.json()["imported"] == 2
    listed = client.get("/api/bank-transactions", params={"reconciled": False}).json()
    assert sorted(txn["amount"] for txn in listed) == ["-2.50", "120.00"]


def test_csv_without_valid_rows_is_rejected(client: TestClient):
    response = client.post("/api/bank-transactions/import-csv", json={"csv_data": "Date,Description,Amount\nx,y,z\n"})
    assert response.status_code == 400


def test_suggest_and_commit_match(client: TestClient, open_invoice):
    txn = _import(client, "120.00", f"Payment {open_invoice['invoice_number']}")

    suggestions = client.get(f"/api/bank-transactions/{txn['id']}/suggestions").json()
    assert [(s["type"], s["id"]) for s in suggestions] == [("invoice", open_invoice["id"])]
    assert suggestions[0]["reasons"] == ["amount", "number"]

    matched = client.post(f"/api/bank-transactions/{txn['id']}/match", json={"type": "invoice", "id": open_invoice["id"]})
    assert matched.status_code == 200
    assert matched.json()["reconciled"] is True
    assert matched.json()["invoice_id"] == open_invoice["id"]

    again = client.post(f"/api/bank-transactions/{txn['id']}/match", json={"type": "invoice", "id": open_invoice["id"]})
    assert again.status_code == 409
    assert client.get(f"/api/bank-transactions/{txn['id']}/suggestions").json() == []


def test_draft_invoice_is_not_a_match_target(client: TestClient, open_invoice):
    customer_id = open_invoice["customer_id"]
    draft = client.post(
        "/api/invoices",
        json={"customer_id": customer_id, "date": "2024-01-16", "lines": [{"description": "X", "quantity": "1", "unit_price": "120.00"}]},
    ).json()
    txn = _import(client, "120.00", "Payment")

    suggestions = client.get(f"/api/bank-transactions/{txn['id']}/suggestions").json()
    assert draft["id"] not in [s["id"] for s in suggestions]

    response = client.post(f"/api/bank-transactions/{txn['id']}/match", json={"type": "invoice", "id": draft["id"]})
    assert response.status_code == 400


def test_money_out_cannot_settle_an_invoice(client: TestClient, open_invoice):
    txn = _import(client, "-120.00", "Refund")
    response = client.post(f"/api/bank-transactions/{txn['id']}/match", json={"type": "invoice", "id": open_invoice["id"]})
    assert response.status_code == 400


def test_second_commit_on_stale_row_loses(db):
    customer = Customer(user_id="owner", name="Acme Ltd")
    db.add(customer)
    db.flush()
    invoice = Invoice(
        user_id="owner",
        customer_id=customer.id,
        invoice_number="INV-1001",
        date=date(2024, 1, 1),
        status="sent",
        subtotal=Decimal("100.00"),
        vat_amount=Decimal("20.00"),
        total=Decimal("120.00"),
    )
    txn = BankTransaction(user_id="owner", date=date(2024, 1, 2), description="Payment INV-1001", amount=Decimal("120.00"))
    db.add_all([invoice, txn])
    db.commit()

    commit_match(db, "owner", txn, "invoice", invoice.id)
    db.commit()

    # A second request that loaded the row before the first commit.
    stale = BankTransaction(id=txn.id, user_id="owner", amount=Decimal("120.00"), reconciled=False)
    with pytest.raises(AlreadyReconciledError):
        commit_match(db, "owner", stale, "invoice", invoice.id)


@pytest.fixture()
def approved_bill(client: TestClient):
    client.post("/api/chart-of-accounts/seed-defaults")
    standard = next(code for code in client.get("/api/tax-codes").json() if code["name"] == "Standard")
    supplier = client.post("/api/suppliers", json={"name": "Paper Co"}).json()
    bill = client.post(
        "/api/bills",
        json={
            "supplier_id": supplier["id"],
            "bill_number": "PC-881",
            "date": "2024-01-15",
            "lines": [{"description": "Paper", "quantity": "3", "unit_price": "25.00", "tax_code_id": standard["id"]}],
        },
    ).json()
    client.post(f"/api/bills/{bill['id']}/status", json={"status": "approved"})
    return bill


def test_payment_out_settles_bill_once(client: TestClient, approved_bill):
    txn = _import(client, "-90.00", "PC-881 PAPER CO")

    suggestions = client.get(f"/api/bank-transactions/{txn['id']}/suggestions").json()
    assert [(s["type"], s["id"]) for s in suggestions] == [("bill", approved_bill["id"])]
    assert suggestions[0]["reasons"] == ["amount", "number", "name"]

    matched = client.post(f"/api/bank-transactions/{txn['id']}/match", json={"type": "bill", "id": approved_bill["id"]})
    assert matched.status_code == 200
    body = matched.json()
    assert body["reconciled"] is True
    assert body["bill_id"] == approved_bill["id"]
    assert body["invoice_id"] is None

    again = client.post(f"/api/bank-transactions/{txn['id']}/match", json={"type": "bill", "id": approved_bill["id"]})
    assert again.status_code == 409
    stored = next(row for row in client.get("/api/bank-transactions").json() if row["id"] == txn["id"])
    assert stored == body


def test_money_in_cannot_settle_a_bill(client: TestClient, approved_bill):
    txn = _import(client, "90.00", "Refund PC-881")
    assert client.get(f"/api/bank-transactions/{txn['id']}/suggestions").json() == []

    response = client.post(f"/api/bank-transactions/{txn['id']}/match", json={"type": "bill", "id": approved_bill["id"]})
    assert response.status_code == 400
    stored = next(row for row in client.get("/api/bank-transactions").json() if row["id"] == txn["id"])
    assert stored["reconciled"] is False
    assert stored["bill_id"] is None
