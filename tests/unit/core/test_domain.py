from __future__ import annotations

from uuid import uuid4

import pytest

from whatsapp_hub.core.domain import (
    MessageResult,
    MessageStatus,
    ProviderType,
    SessionRecord,
    SessionStatus,
    normalize_phone,
    utcnow,
)
from whatsapp_hub.core.errors import ConflictError, NotFoundError, UnauthorizedError

pytestmark = pytest.mark.unit


@pytest.mark.parametrize(
    ("raw", "expected"),
    [
        ("+55 11 99999-8888", "551199999-8888"),
        ("+5511999998888", "5511999998888"),
        (" 55 11 9999 8888 ", "551199998888"),
        ("5511999998888", "5511999998888"),
    ],
)
def test_normalize_phone_strips_plus_and_whitespace(raw: str, expected: str) -> None:
    assert normalize_phone(raw) == expected


@pytest.mark.parametrize("raw", ["+55 11 99999 8888", "++1 (555) 010", "\t+44\n20 7946 0000"])
def test_normalize_phone_is_idempotent(raw: str) -> None:
    once = normalize_phone(raw)
    assert normalize_phone(once) == once
    assert "+" not in once
    assert not any(ch.isspace() for ch in once)


def test_session_status_survives_json_roundtrip() -> None:
    status = SessionStatus(
        is_connected=True,
        status="connected",
        phone_number="5511999998888",
        connected_at=utcnow(),
        metadata={"sessionId": "session-1"},
    )

    assert SessionStatus.from_dict(status.to_dict()) == status


def test_session_record_from_dict() -> None:
    record = SessionRecord(
        id=uuid4(),
        tenant_id=uuid4(),
        phone_number="5511999998888",
        provider_type=ProviderType.BAILEYS,
        is_active=False,
        status="qr_ready",
        created_at=utcnow(),
        updated_at=utcnow(),
    )

    assert SessionRecord.from_dict(record.to_dict()) == record


def test_message_result_failure() -> None:
    result = MessageResult.failure("none", "boom")

    assert result.status is MessageStatus.FAILED
    assert not result.succeeded
    assert result.to_dict()["error"] == "boom"


def test_core_errors_render_error_body() -> None:
    assert NotFoundError("Session not found").to_dict()["error"] == "Session not found"
    assert UnauthorizedError().status_code == 401
    assert ConflictError("dup").status_code == 409
