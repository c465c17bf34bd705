from __future__ import annotations

import base64

import pytest

from whatsapp_hub.messaging import NO_SESSION_ERROR

pytestmark = pytest.mark.unit

HEADERS = {"X-Client-Id": "acme"}
OWN_PHONE = "5511999998888"
CONTACT = "5511888887777"


@pytest.fixture()
def connected(client, bridge_stub) -> None:
    bridge_stub.init_response = {"status": "connected"}
    response = client.post(
        "/api/v1/session/initialize", json={"phoneNumber": OWN_PHONE}, headers=HEADERS
    )
    assert response.json()["isConnected"] is True


def test_send_without_session_is_a_bad_request(client) -> None:
    response = client.post(
        "/api/v1/message/text", json={"to": CONTACT, "content": "oi"}, headers=HEADERS
    )

    assert response.status_code == 400
    body = response.json()
    assert body["status"] == "failed"
    assert body["provider"] == "none"
    assert body["error"] == NO_SESSION_ERROR


def test_send_text_then_read_history_and_status(client, connected, bridge_stub) -> None:
    response = client.post(
        "/api/v1/message/text", json={"to": f"+{CONTACT}", "content": "oi"}, headers=HEADERS
    )

    assert response.status_code == 200
    body = response.json()
    assert body["status"] == "sent"
    assert body["provider"] == "baileys"
    message_id = body["messageId"]
    assert bridge_stub.sent[-1][1]["content"] == "oi"

    history = client.get(
        "/api/v1/message/history", params={"phoneNumber": CONTACT}, headers=HEADERS
    ).json()
    assert [(row["messageId"], row["content"]) for row in history] == [
        (message_id, {"text": "oi"})
    ]

    status = client.get(f"/api/v1/message/{message_id}/status", headers=HEADERS)
    assert status.status_code == 200
    assert status.json()["toNumber"] == CONTACT

    conversations = client.get("/api/v1/message/conversations", headers=HEADERS).json()
    assert conversations[0]["contact"] == CONTACT
    assert conversations[0]["direction"] == "outbound"


def test_message_status_is_hidden_from_other_tenants(client, connected, other_tenant) -> None:
    message_id = client.post(
        "/api/v1/message/text", json={"to": CONTACT, "content": "oi"}, headers=HEADERS
    ).json()["messageId"]

    response = client.get(
        f"/api/v1/message/{message_id}/status", headers={"X-Client-Id": "globex"}
    )

    assert response.status_code == 404
    assert response.json()["error"] == "Message not found"


def test_send_media_and_audio(client, connected, bridge_stub) -> None:
    media = client.post(
        "/api/v1/message/media",
        json={
            "to": CONTACT,
            "mediaBase64": base64.b64encode(b"img").decode(),
            "mediaType": "Image",
            "caption": "foto",
        },
        headers=HEADERS,
    )
    audio = client.post(
        "/api/v1/message/audio",
        json={"to": CONTACT, "audioBase64": base64.b64encode(b"ogg").decode()},
        headers=HEADERS,
    )

    assert media.status_code == 200
    assert audio.status_code == 200
    kinds = [kind for kind, _ in bridge_stub.sent]
    assert kinds == ["media", "audio"]
    assert bridge_stub.sent[0][1]["mediaType"] == "image"


def test_invalid_base64_is_rejected(client, connected) -> None:
    media = client.post(
        "/api/v1/message/media",
        json={"to": CONTACT, "mediaBase64": "not base64!", "mediaType": "image"},
        headers=HEADERS,
    )
    audio = client.post(
        "/api/v1/message/audio",
        json={"to": CONTACT, "audioBase64": "%%%"},
        headers=HEADERS,
    )

    assert media.status_code == 400
    assert media.json()["error"] == "Invalid base64 media data"
    assert audio.status_code == 400
    assert audio.json()["error"] == "Invalid base64 audio data"


def test_send_location_validates_coordinates(client, connected) -> None:
    ok = client.post(
        "/api/v1/message/location",
        json={"to": CONTACT, "latitude": -23.55, "longitude": -46.63},
        headers=HEADERS,
    )
    bad = client.post(
        "/api/v1/message/location",
        json={"to": CONTACT, "latitude": 91, "longitude": 0},
        headers=HEADERS,
    )

    assert ok.status_code == 200
    assert bad.status_code == 422


def test_failed_provider_send_returns_400(client, connected, bridge_stub) -> None:
    bridge_stub.send_status_code = 500

    response = client.post(
        "/api/v1/message/text", json={"to": CONTACT, "content": "oi"}, headers=HEADERS
    )

    assert response.status_code == 400
    assert response.json()["error"] == "send rejected"
