from __future__ import annotations

import json
from uuid import uuid4

import httpx
import pytest

from whatsapp_hub.core.config import WebhookSettings
from whatsapp_hub.webhooks import (
    EVENT_HEADER,
    SIGNATURE_HEADER,
    WebhookDeliveryService,
    WebhookTarget,
    agent_id_from_settings,
    validate_signature,
)

pytestmark = pytest.mark.unit


class Target:
    """Scripted webhook receiver: answers with ``statuses`` in order, then 200."""

    def __init__(self, *statuses: int, error: Exception | None = None) -> None:
        self.statuses = list(statuses)
        self.error = error
        self.requests: list[httpx.Request] = []

    def __call__(self, request: httpx.Request) -> httpx.Response:
        self.requests.append(request)
        if self.error is not None:
            raise self.error
        status = self.statuses.pop(0) if self.statuses else 200
        return httpx.Response(status, text="ok" if status < 400 else "nope")


class Sleeps:
    def __init__(self) -> None:
        self.delays: list[float] = []

    async def __call__(self, delay: float) -> None:
        self.delays.append(delay)


def _service(target: Target, sleeps: Sleeps, max_retries: int = 3) -> WebhookDeliveryService:
    settings = WebhookSettings(_env_file=None, max_retries=max_retries)
    return WebhookDeliveryService(
        settings, transport=httpx.MockTransport(target), sleep=sleeps
    )


@pytest.mark.asyncio
async def test_first_success_stops_retrying() -> None:
    target, sleeps = Target(200), Sleeps()

    result = await _service(target, sleeps).deliver(
        "https://tenant.test/hook", "message.received", {"messageId": "m1"}
    )

    assert result.success
    assert result.status_code == 200
    assert result.attempts == 1
    assert sleeps.delays == []


@pytest.mark.asyncio
async def test_persistent_failure_attempts_max_retries_plus_one() -> None:
    target, sleeps = Target(500, 500, 500, 500, 500), Sleeps()

    result = await _service(target, sleeps, max_retries=3).deliver(
        "https://tenant.test/hook", "message.status", {"messageId": "m1"}
    )

    assert not result.success
    assert result.attempts == 4
    assert len(target.requests) == 4
    assert result.error == "HTTP 500"
    assert sleeps.delays == [1.0, 2.0, 4.0]


@pytest.mark.asyncio
async def test_recovers_after_transient_failures() -> None:
    target, sleeps = Target(502, 503), Sleeps()

    result = await _service(target, sleeps).deliver(
        "https://tenant.test/hook", "message.status", {}
    )

    assert result.success
    assert result.attempts == 3
    assert result.error is None


@pytest.mark.asyncio
async def test_timeouts_are_reported() -> None:
    target, sleeps = Target(error=httpx.ReadTimeout("slow")), Sleeps()

    result = await _service(target, sleeps, max_retries=1).deliver(
        "https://tenant.test/hook", "message.status", {}
    )

    assert not result.success
    assert result.attempts == 2
    assert result.error == "Request timeout"


@pytest.mark.asyncio
async def test_envelope_and_signature_headers() -> None:
    target, sleeps = Target(200), Sleeps()

    await _service(target, sleeps).deliver_incoming_message(
        uuid4(), "https://tenant.test/hook", {"messageId": "m1"}, secret="s3cr3t"
    )

    (request,) = target.requests
    body = request.content
    envelope = json.loads(body)
    assert envelope["event"] == "message.received"
    assert envelope["data"] == {"messageId": "m1"}
    assert "timestamp" in envelope
    assert request.headers[EVENT_HEADER] == "message.received"
    validate_signature("s3cr3t", body, request.headers[SIGNATURE_HEADER])


@pytest.mark.asyncio
async def test_unsigned_without_secret_and_session_event_name() -> None:
    target, sleeps = Target(200), Sleeps()

    await _service(target, sleeps).deliver_session_event(
        uuid4(), "https://tenant.test/hook", "initialized", {"status": "qr_ready"}
    )

    (request,) = target.requests
    assert SIGNATURE_HEADER not in request.headers
    assert request.headers[EVENT_HEADER] == "session.initialized"


def test_webhook_target_from_settings() -> None:
    assert WebhookTarget.from_settings({}) is None
    assert WebhookTarget.from_settings(None) is None

    target = WebhookTarget.from_settings(
        {"webhook_url": "https://tenant.test/hook", "webhook_secret": "abc"}
    )

    assert target == WebhookTarget(url="https://tenant.test/hook", secret="abc")


def test_agent_id_from_settings() -> None:
    agent_id = uuid4()

    assert agent_id_from_settings({"ai_agent_id": str(agent_id)}) == agent_id
    assert agent_id_from_settings({"ai_agent_id": "not-a-uuid"}) is None
    assert agent_id_from_settings({}) is None
