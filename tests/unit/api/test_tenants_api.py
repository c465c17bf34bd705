from __future__ import annotations

import pytest

pytestmark = pytest.mark.unit

HEADERS = {"X-Client-Id": "acme"}


def test_create_tenant(client) -> None:
    response = client.post(
        "/api/v1/tenant",
        json={"clientId": " initech ", "name": "Initech", "settings": {"plan": "pro"}},
    )

    assert response.status_code == 201
    body = response.json()
    assert body["clientId"] == "initech"
    assert body["settings"] == {"plan": "pro"}
    assert {row["clientId"] for row in client.get("/api/v1/tenant").json()} == {
        "acme",
        "initech",
    }


def test_create_tenant_rejects_blank_values(client) -> None:
    response = client.post("/api/v1/tenant", json={"clientId": "   ", "name": "X"})

    assert response.status_code == 400
    assert response.json()["error"] == "ClientId and Name are required"


def test_duplicate_tenant_conflicts(client) -> None:
    response = client.post("/api/v1/tenant", json={"clientId": "acme", "name": "Again"})

    assert response.status_code == 409


def test_settings_roundtrip(client) -> None:
    updated = client.put(
        "/api/v1/tenant/settings",
        json={"settings": {"webhook_url": "https://hooks.acme.test"}},
        headers=HEADERS,
    )
    current = client.get("/api/v1/tenant/settings", headers=HEADERS)

    assert updated.status_code == 200
    assert current.json()["settings"] == {"webhook_url": "https://hooks.acme.test"}
