"""Domain data structures shared across services."""

from __future__ import annotations

from collections.abc import Mapping
from dataclasses import dataclass, field
from datetime import UTC, datetime
from enum import Enum
from typing import Any
from uuid import UUID


def utcnow() -> datetime:
    return datetime.now(tz=UTC)


class ProviderType(str, Enum):
    """Backends able to drive a WhatsApp session."""

    BAILEYS = "baileys"
    META_API = "meta_api"


class MessageType(str, Enum):
    TEXT = "text"
    IMAGE = "image"
    AUDIO = "audio"
    VIDEO = "video"
    DOCUMENT = "document"
    LOCATION = "location"
    CONTACT = "contact"
    STICKER = "sticker"


class MessageStatus(str, Enum):
    """Lifecycle of an outbound or inbound message."""

    PENDING = "pending"
    SENT = "sent"
    DELIVERED = "delivered"
    READ = "read"
    FAILED = "failed"
    RECEIVED = "received"


# Status strings reported by providers and the session service.
CONNECTED_STATES = frozenset({"connected", "already_connected"})
STATUS_NOT_FOUND = "not_found"
STATUS_CRITICAL = "critical_error"


def normalize_phone(phone: str) -> str:
    """Strip ``+`` signs and whitespace; applying it twice changes nothing."""

    return "".join(phone.replace("+", "").split())


@dataclass(slots=True)
class SessionStatus:
    """Connection state of a WhatsApp session as seen by a provider."""

    is_connected: bool = False
    status: str = "disconnected"
    phone_number: str | None = None
    qr_code: str | None = None
    connected_at: datetime | None = None
    metadata: dict[str, Any] = field(default_factory=dict)

    def to_dict(self) -> dict[str, Any]:
        return {
            "is_connected": self.is_connected,
            "status": self.status,
            "phone_number": self.phone_number,
            "qr_code": self.qr_code,
            "connected_at": self.connected_at.isoformat() if self.connected_at else None,
            "metadata": dict(self.metadata),
        }

    @classmethod
    def from_dict(cls, payload: Mapping[str, Any]) -> SessionStatus:
        connected_at = payload.get("connected_at")
        return cls(
            is_connected=bool(payload.get("is_connected", False)),
            status=str(payload.get("status", "disconnected")),
            phone_number=payload.get("phone_number"),
            qr_code=payload.get("qr_code"),
            connected_at=datetime.fromisoformat(connected_at) if connected_at else None,
            metadata=dict(payload.get("metadata") or {}),
        )


@dataclass(slots=True)
class MessageResult:
    """Outcome of a provider send call; failures are reported, never raised."""

    message_id: str
    status: MessageStatus
    provider: str
    timestamp: datetime = field(default_factory=utcnow)
    error: str | None = None
    metadata: dict[str, Any] = field(default_factory=dict)

    @property
    def succeeded(self) -> bool:
        return self.status is not MessageStatus.FAILED

    @classmethod
    def failure(
        cls, provider: str, error: str, *, message_id: str = ""
    ) -> MessageResult:
        return cls(
            message_id=message_id,
            status=MessageStatus.FAILED,
            provider=provider,
            error=error,
        )

    def to_dict(self) -> dict[str, Any]:
        return {
            "message_id": self.message_id,
            "status": self.status.value,
            "provider": self.provider,
            "timestamp": self.timestamp.isoformat(),
            "error": self.error,
            "metadata": dict(self.metadata),
        }


@dataclass(slots=True)
class TenantConfig:
    """Per-tenant provider configuration handed to ``initialize``."""

    tenant_id: UUID
    client_id: str
    preferred_provider: ProviderType = ProviderType.BAILEYS
    settings: Mapping[str, Any] = field(default_factory=dict)


@dataclass(slots=True)
class IncomingMessage:
    """Message received from WhatsApp, normalized for storage and forwarding."""

    message_id: str
    from_number: str
    to_number: str
    type: MessageType = MessageType.TEXT
    text_content: str | None = None
    media_url: str | None = None
    media_mime_type: str | None = None
    timestamp: datetime = field(default_factory=utcnow)
    metadata: Mapping[str, Any] | None = None


@dataclass(slots=True)
class SessionRecord:
    """Snapshot of a stored session that can be cached as JSON."""

    id: UUID
    tenant_id: UUID
    phone_number: str
    provider_type: ProviderType
    is_active: bool
    status: str
    created_at: datetime
    updated_at: datetime

    def to_dict(self) -> dict[str, Any]:
        return {
            "id": str(self.id),
            "tenant_id": str(self.tenant_id),
            "phone_number": self.phone_number,
            "provider_type": self.provider_type.value,
            "is_active": self.is_active,
            "status": self.status,
            "created_at": self.created_at.isoformat(),
            "updated_at": self.updated_at.isoformat(),
        }

    @classmethod
    def from_dict(cls, payload: Mapping[str, Any]) -> SessionRecord:
        return cls(
            id=UUID(str(payload["id"])),
            tenant_id=UUID(str(payload["tenant_id"])),
            phone_number=str(payload["phone_number"]),
            provider_type=ProviderType(payload["provider_type"]),
            is_active=bool(payload["is_active"]),
            status=str(payload["status"]),
            created_at=datetime.fromisoformat(payload["created_at"]),
            updated_at=datetime.fromisoformat(payload["updated_at"]),
        )


@dataclass(slots=True)
class ProviderStats:
    """Health and usage summary for one provider type."""

    provider_type: ProviderType
    is_healthy: bool
    total_sessions: int = 0
    active_sessions: int = 0
    messages_sent_today: int = 0
    last_health_check: datetime = field(default_factory=utcnow)
    average_response_time_ms: float = 0.0
    success_rate: float = 0.0

    def to_dict(self) -> dict[str, Any]:
        return {
            "provider_type": self.provider_type.value,
            "is_healthy": self.is_healthy,
            "total_sessions": self.total_sessions,
            "active_sessions": self.active_sessions,
            "messages_sent_today": self.messages_sent_today,
            "last_health_check": self.last_health_check.isoformat(),
            "average_response_time_ms": self.average_response_time_ms,
            "success_rate": self.success_rate,
        }
