from fastapi.testclient import TestClient
import pytest


@pytest.fixture()
def ledger(client: TestClient):
    client.post("/api/chart-of-accounts/seed-defaults")
    accounts = {account["code"]: account["id"] for account in client.get("/api/chart-of-accounts").json()}

    def post(day, reference, debit_code, credit_code, amount):
        response = client.post(
            "/api/journals",
            json={
                "date": day,
                "reference": reference,
                "lines": [
                    {"account_id": accounts[debit_code], "debit": amount},
                    {"account_id": accounts[credit_code], "credit": amount},
                ],
            },
        )
        assert response.status_code == 201

    post("2024-01-01", "CAPITAL", "1200", "3000", "5000.00")
    post("2024-02-01", "SALE", "1200", "4000", "1200.00")
    post("2024-03-01", "RENT", "6000", "1200", "300.00")
    return accounts


def test_trial_balance(client: TestClient, ledger):
    report = client.get("/api/reports/trial-balance").json()
    assert report["balanced"] is True
    assert report["total_debits"] == report["total_credits"] == "6500.00"
    assert report["difference"] == "0.00"


def test_profit_and_loss_for_period(client: TestClient, ledger):
    report = client.get("/api/reports/profit-and-loss", params={"date_from": "2024-02-01", "date_to": "2024-02-29"}).json()
    assert report["total_income"] == "1200.00"
    assert report["total_expenses"] == "0.00"
    assert report["net_profit"] == "1200.00"


def test_balance_sheet_as_of(client: TestClient, ledger):
    report = client.get("/api/reports/balance-sheet", params={"as_of": "2024-03-31"}).json()
    assert report["total_assets"] == "5900.00"
    assert report["total_equity"] == "5000.00"
    assert report["current_earnings"] == "900.00"
    assert report["balanced"] is True


def test_inverted_range_is_rejected(client: TestClient):
    response = client.get("/api/reports/trial-balance", params={"date_from": "2024-03-01", "date_to": "2024-01-01"})
    assert response.status_code == 400
