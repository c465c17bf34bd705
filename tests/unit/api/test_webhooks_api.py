from __future__ import annotations

import json

import pytest

from whatsapp_hub.api import dependencies
from whatsapp_hub.core.config import AppSettings, WebhookSettings
from whatsapp_hub.webhooks import SIGNATURE_HEADER, sign_payload

pytestmark = pytest.mark.unit

HEADERS = {"X-Client-Id": "acme"}
OWN_PHONE = "5511999998888"
CONTACT = "5511888887777"


def _incoming(**overrides):
    payload = {
        "messageId": "wamid-in-1",
        "from": f"+{CONTACT}",
        "to": OWN_PHONE,
        "type": "text",
        "textContent": "Oi, tudo bem?",
        "timestamp": "2026-10-19T12:00:00Z",
    }
    payload.update(overrides)
    return payload


@pytest.fixture()
def session(client) -> None:
    client.post("/api/v1/session/initialize", json={"phoneNumber": OWN_PHONE}, headers=HEADERS)


def test_incoming_message_for_unknown_recipient(client) -> None:
    response = client.post(
        "/api/v1/webhook/incoming-message", json=_incoming(), headers=HEADERS
    )

    assert response.status_code == 400
    assert response.json() == {"error": "Session not found for recipient phone number"}


def test_incoming_message_is_stored(client, session, spawned) -> None:
    response = client.post(
        "/api/v1/webhook/incoming-message", json=_incoming(), headers=HEADERS
    )

    assert response.status_code == 200
    assert response.json() == {"message": "Webhook received and processed successfully"}
    assert spawned == []

    history = client.get(
        "/api/v1/message/history", params={"phoneNumber": CONTACT}, headers=HEADERS
    ).json()
    assert len(history) == 1
    stored = history[0]
    assert stored["fromNumber"] == CONTACT
    assert stored["toNumber"] == OWN_PHONE
    assert stored["status"] == "received"
    assert stored["content"]["text"] == "Oi, tudo bem?"


def test_incoming_message_is_forwarded_and_answered(client, session, spawned) -> None:
    agent = client.post("/api/v1/aiagent", json={"name": "Atendente"}, headers=HEADERS).json()
    client.put(
        "/api/v1/tenant/settings",
        json={
            "settings": {
                "webhook_url": "https://hooks.acme.test",
                "ai_agent_id": agent["id"],
            }
        },
        headers=HEADERS,
    )

    client.post("/api/v1/webhook/incoming-message", json=_incoming(), headers=HEADERS)
    client.post(
        "/api/v1/webhook/incoming-message",
        json=_incoming(
            messageId="wamid-in-2",
            type="image",
            textContent=None,
            mediaUrl="https://cdn.test/a.jpg",
        ),
        headers=HEADERS,
    )

    assert spawned == [
        "forward-incoming-wamid-in-1",
        "agent-reply-wamid-in-1",
        "forward-incoming-wamid-in-2",
    ]


def test_status_update_flow(client, session, bridge_stub, spawned, other_tenant) -> None:
    bridge_stub.init_response = {"status": "connected"}
    client.post("/api/v1/session/initialize", json={"phoneNumber": OWN_PHONE}, headers=HEADERS)
    message_id = client.post(
        "/api/v1/message/text", json={"to": CONTACT, "content": "oi"}, headers=HEADERS
    ).json()["messageId"]
    update = {"messageId": message_id, "status": "failed", "timestamp": "2026-10-19T12:05:00Z"}

    unknown = client.post(
        "/api/v1/webhook/status-update",
        json={**update, "messageId": "missing"},
        headers=HEADERS,
    )
    foreign = client.post(
        "/api/v1/webhook/status-update", json=update, headers={"X-Client-Id": "globex"}
    )
    ok = client.post(
        "/api/v1/webhook/status-update",
        json={**update, "error": "recipient blocked"},
        headers=HEADERS,
    )

    assert unknown.status_code == 404
    assert foreign.status_code == 401
    assert foreign.json()["error"] == "Unauthorized to update this message"
    assert ok.status_code == 200
    assert ok.json() == {"message": "Status update processed successfully"}

    stored = client.get(f"/api/v1/message/{message_id}/status", headers=HEADERS).json()
    assert stored["status"] == "failed"
    assert stored["content"] == {"text": "oi", "error": "recipient blocked"}


def test_verify_without_configured_token(client) -> None:
    response = client.get(
        "/api/v1/webhook/verify",
        params={"hub.mode": "subscribe", "hub.verify_token": "x", "hub.challenge": "c"},
    )

    assert response.status_code == 500
    assert response.json()["error"] == "Webhook verification not configured"


def test_verify_handshake(app, client) -> None:
    settings = AppSettings(webhook=WebhookSettings(_env_file=None, verify_token="s3cret"))
    app.dependency_overrides[dependencies.get_settings] = lambda: settings

    accepted = client.get(
        "/api/v1/webhook/verify",
        params={"hub.mode": "subscribe", "hub.verify_token": "s3cret", "hub.challenge": "42"},
    )
    rejected = client.get(
        "/api/v1/webhook/verify",
        params={"hub.mode": "subscribe", "hub.verify_token": "nope", "hub.challenge": "42"},
    )

    assert accepted.status_code == 200
    assert accepted.text == "42"
    assert rejected.status_code == 403


def test_signed_bridge_webhooks(app, client, session) -> None:
    settings = AppSettings(webhook=WebhookSettings(_env_file=None, inbound_secret="bridge-key"))
    app.dependency_overrides[dependencies.get_settings] = lambda: settings
    body = json.dumps(_incoming()).encode("utf-8")
    headers = {**HEADERS, "Content-Type": "application/json"}

    unsigned = client.post("/api/v1/webhook/incoming-message", content=body, headers=headers)
    forged = client.post(
        "/api/v1/webhook/incoming-message",
        content=body,
        headers={**headers, SIGNATURE_HEADER: sign_payload("other-key", body)},
    )
    signed = client.post(
        "/api/v1/webhook/incoming-message",
        content=body,
        headers={**headers, SIGNATURE_HEADER: sign_payload("bridge-key", body)},
    )

    assert unsigned.status_code == 401
    assert forged.status_code == 401
    assert forged.json()["error"] == "Invalid webhook signature"
    assert signed.status_code == 200
