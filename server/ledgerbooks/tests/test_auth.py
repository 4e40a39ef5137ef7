from fastapi.testclient import TestClient
from jose import jwt
import pytest

from ledgerbooks.config import settings


def _token(claims: dict, secret: str = None) -> str:
    return jwt.encode(claims, secret or settings.jwt_secret_key, algorithm=settings.jwt_algorithm)


@pytest.mark.real_auth
def test_token_subject_scopes_rows(client: TestClient):
    alice = {"Authorization": f"Bearer {_token({'sub': 'alice'})}"}
    bob = {"Authorization": f"Bearer {_token({'sub': 'bob'})}"}

    created = client.post("/api/customers", json={"name": "Acme Ltd"}, headers=alice)
    assert created.status_code == 201

    assert [c["name"] for c in client.get("/api/customers", headers=alice).json()] == ["Acme Ltd"]
    assert client.get("/api/customers", headers=bob).json() == []
    assert client.get(f"/api/customers/{created.json()['id']}", headers=bob).status_code == 404


@pytest.mark.real_auth
def test_token_signed_with_another_key_is_rejected(client: TestClient):
    headers = {"Authorization": f"Bearer {_token({'sub': 'alice'}, secret='not-the-key')}"}
    assert client.get("/api/customers", headers=headers).status_code == 401


@pytest.mark.real_auth
def test_token_without_subject_is_rejected(client: TestClient):
    headers = {"Authorization": f"Bearer {_token({'scope': 'read'})}"}
    assert client.get("/api/customers", headers=headers).status_code == 401
