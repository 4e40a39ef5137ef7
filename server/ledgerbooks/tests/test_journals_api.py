from fastapi.testclient import TestClient
import pytest


@pytest.fixture()
def accounts(client: TestClient):
    client.post("/api/chart-of-accounts/seed-defaults")
    return {account["code"]: account["id"] for account in client.get("/api/chart-of-accounts").json()}


def _journal(accounts, debit="100.00", credit="100.00"):
    return {
        "date": "2024-01-10",
        "reference": "J-1",
        "description": "Stationery",
        "lines": [
            {"account_id": accounts["6000"], "debit": debit},
            {"account_id": accounts["1200"], "credit": credit},
        ],
    }


def test_post_and_fetch_journal(client: TestClient, accounts):
    created = client.post("/api/journals", json=_journal(accounts))
    assert created.status_code == 201
    body = created.json()
    assert body["source_type"] == "manual"
    assert len(body["lines"]) == 2

    fetched = client.get(f"/api/journals/{body['id']}")
    assert fetched.status_code == 200
    assert client.get("/api/journals", params={"date_from": "2024-01-01", "date_to": "2024-01-31"}).json()[0]["id"] == body["id"]


def test_unbalanced_journal_is_rejected(client: TestClient, accounts):
    response = client.post("/api/journals", json=_journal(accounts, credit="90.00"))
    assert response.status_code == 400
    assert "unbalanced" in response.json()["detail"]
    assert client.get("/api/journals").json() == []


def test_empty_journal_is_rejected(client: TestClient, accounts):
    payload = _journal(accounts)
    payload["lines"] = []
    assert client.post("/api/journals", json=payload).status_code == 400


def test_unknown_account_is_rejected(client: TestClient, accounts):
    payload = _journal(accounts)
    payload["lines"][0]["account_id"] = 9999
    assert client.post("/api/journals", json=payload).status_code == 400


def test_journal_can_be_reversed_once(client: TestClient, accounts):
    journal_id = client.post("/api/journals", json=_journal(accounts)).json()["id"]

    reversed_ = client.post(f"/api/journals/{journal_id}/reverse", json={"reversal_date": "2024-01-31"})
    assert reversed_.status_code == 201
    body = reversed_.json()
    assert body["reverses_journal_id"] == journal_id
    assert body["reference"] == "REV-J-1"

    again = client.post(f"/api/journals/{journal_id}/reverse", json={"reversal_date": "2024-02-01"})
    assert again.status_code == 409

    trial_balance = client.get("/api/reports/trial-balance").json()
    assert trial_balance["balanced"] is True


def test_missing_journal_returns_404(client: TestClient):
    assert client.get("/api/journals/42").status_code == 404
