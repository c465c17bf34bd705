from __future__ import annotations

from uuid import UUID

import pytest
from sqlmodel import Session

from whatsapp_hub.core.db.models import User
from whatsapp_hub.users import verify_password

pytestmark = pytest.mark.unit

HEADERS = {"X-Client-Id": "acme"}
ANA = {"email": "Ana@Acme.test", "password": "secret1", "fullName": "Ana"}


def _create(client, body=ANA, headers=HEADERS) -> dict:
    response = client.post("/api/v1/user", json=body, headers=headers)
    assert response.status_code == 201
    return response.json()


def test_create_user(client, tenant) -> None:
    user = _create(client)

    assert user["email"] == "ana@acme.test"
    assert user["fullName"] == "Ana"
    assert user["role"] == "User"
    assert user["isActive"] is True
    assert user["tenantId"] == str(tenant.id)
    assert "password" not in user
    assert "passwordHash" not in user


def test_update_user(client) -> None:
    user = _create(client)

    response = client.put(
        f"/api/v1/user/{user['id']}",
        json={"fullName": "Ana Souza", "role": "Admin"},
        headers=HEADERS,
    )

    assert response.status_code == 200
    assert response.json()["fullName"] == "Ana Souza"
    assert response.json()["role"] == "Admin"


def test_update_password(client, engine) -> None:
    user = _create(client)

    response = client.put(
        f"/api/v1/user/{user['id']}/password", json={"newPassword": "secret2"}, headers=HEADERS
    )

    assert response.status_code == 204
    with Session(engine) as db:
        stored = db.get(User, UUID(user["id"]))
        assert verify_password("secret2", stored.password_hash)
        assert not verify_password("secret1", stored.password_hash)


def test_short_password_is_rejected(client) -> None:
    user = _create(client)

    response = client.put(
        f"/api/v1/user/{user['id']}/password", json={"newPassword": "123"}, headers=HEADERS
    )

    assert response.status_code == 422


def test_deactivate_and_delete_user(client) -> None:
    user = _create(client)
    user_url = f"/api/v1/user/{user['id']}"

    assert client.post(f"{user_url}/deactivate", headers=HEADERS).status_code == 204
    assert client.get(user_url, headers=HEADERS).json()["isActive"] is False
    assert [row["id"] for row in client.get("/api/v1/user", headers=HEADERS).json()] == [
        user["id"]
    ]

    assert client.delete(user_url, headers=HEADERS).status_code == 204
    missing = client.get(user_url, headers=HEADERS)
    assert missing.status_code == 404
    assert missing.json()["error"] == "User not found"
    assert client.delete(user_url, headers=HEADERS).status_code == 404
    assert client.get("/api/v1/user", headers=HEADERS).json() == []


def test_duplicate_email_conflicts(client) -> None:
    _create(client)

    duplicate = client.post(
        "/api/v1/user", json={**ANA, "email": "ana@ACME.test"}, headers=HEADERS
    )

    assert duplicate.status_code == 409
    assert duplicate.json()["code"] == "conflict"


def test_invalid_role_is_rejected(client) -> None:
    response = client.post(
        "/api/v1/user", json={**ANA, "role": "Owner"}, headers=HEADERS
    )

    assert response.status_code == 400
    assert response.json()["error"] == "Invalid role 'Owner'. Must be 'Admin' or 'User'"


def test_users_are_tenant_scoped(client, other_tenant) -> None:
    user = _create(client)
    foreign = {"X-Client-Id": "globex"}
    user_url = f"/api/v1/user/{user['id']}"

    assert client.get(user_url, headers=foreign).status_code == 404
    assert client.put(user_url, json={"role": "Admin"}, headers=foreign).status_code == 404
    assert (
        client.put(f"{user_url}/password", json={"newPassword": "hijack1"}, headers=foreign)
    ).status_code == 404
    assert client.post(f"{user_url}/deactivate", headers=foreign).status_code == 404
    assert client.delete(user_url, headers=foreign).status_code == 404
    assert client.get("/api/v1/user", headers=foreign).json() == []
    assert client.get(user_url, headers=HEADERS).json()["isActive"] is True
