from __future__ import annotations

import pytest

from whatsapp_hub.providers.baileys import session_id_for

pytestmark = pytest.mark.unit

HEADERS = {"X-Client-Id": "acme"}
PHONE = "5511999998888"


def _initialize(client, phone: str = "+55 11 99999 8888"):
    return client.post(
        "/api/v1/session/initialize", json={"phoneNumber": phone}, headers=HEADERS
    )


def test_initialize_returns_qr_code(client, spawned) -> None:
    response = _initialize(client)

    assert response.status_code == 200
    body = response.json()
    assert body["status"] == "qr_ready"
    assert body["qrCode"] == "QR-DATA"
    assert body["phoneNumber"] == PHONE
    assert body["isConnected"] is False
    assert spawned == []


def test_initialize_notifies_tenant_webhook(client, spawned) -> None:
    client.put(
        "/api/v1/tenant/settings",
        json={"settings": {"webhook_url": "https://hooks.acme.test"}},
        headers=HEADERS,
    )

    _initialize(client)

    assert len(spawned) == 1
    assert spawned[0].startswith("session-event-")


def test_status_requires_phone_number(client) -> None:
    response = client.get("/api/v1/session/status", headers=HEADERS)

    assert response.status_code == 400
    assert response.json()["error"] == "Phone number is required"


def test_status_of_unknown_session(client) -> None:
    response = client.get(
        "/api/v1/session/status", params={"phoneNumber": PHONE}, headers=HEADERS
    )

    assert response.status_code == 404
    assert response.json()["error"] == "Session not found"


def test_status_reads_live_bridge_state(client, tenant, bridge_stub) -> None:
    _initialize(client)
    bridge_stub.set_status(session_id_for(tenant.id, PHONE), "connected")

    response = client.get(
        "/api/v1/session/status", params={"phoneNumber": f"+{PHONE}"}, headers=HEADERS
    )

    assert response.status_code == 200
    assert response.json()["isConnected"] is True
    listed = client.get("/api/v1/session", headers=HEADERS).json()
    assert [(row["phoneNumber"], row["isActive"]) for row in listed] == [(PHONE, True)]


def test_qrcode_and_disconnect(client, tenant, bridge_stub) -> None:
    _initialize(client)

    qr = client.get("/api/v1/session/qrcode", params={"phoneNumber": PHONE}, headers=HEADERS)
    assert qr.status_code == 200
    assert qr.json() == {"qrCode": "QR-DATA"}

    response = client.delete(
        "/api/v1/session/disconnect", params={"phoneNumber": PHONE}, headers=HEADERS
    )
    assert response.status_code == 200
    assert response.json() == {"message": "Session disconnected successfully"}
    assert bridge_stub.deleted == [session_id_for(tenant.id, PHONE)]


def test_disconnect_and_qrcode_of_unknown_session(client) -> None:
    params = {"phoneNumber": PHONE}

    assert (
        client.delete("/api/v1/session/disconnect", params=params, headers=HEADERS).status_code
        == 404
    )
    assert client.get("/api/v1/session/qrcode", params=params, headers=HEADERS).status_code == 404


def test_sessions_are_isolated_between_tenants(client, other_tenant) -> None:
    _initialize(client)

    response = client.get("/api/v1/session", headers={"X-Client-Id": "globex"})

    assert response.status_code == 200
    assert response.json() == []
