"""Pydantic request and response bodies for the REST API.

Bodies use camelCase on the wire (``phoneNumber``, ``qrCode``) because the
Baileys bridge and existing dashboards speak that dialect.
"""

from __future__ import annotations

from datetime import datetime
from typing import Any
from uuid import UUID

from pydantic import BaseModel, ConfigDict, Field
from pydantic.alias_generators import to_camel

from whatsapp_hub.core.domain import (
    MessageResult,
    MessageStatus,
    MessageType,
    ProviderStats,
    ProviderType,
    SessionRecord,
    SessionStatus,
)


class CamelModel(BaseModel):
    model_config = ConfigDict(alias_generator=to_camel, populate_by_name=True)


class InfoResponse(BaseModel):
    message: str


# Sessions ---------------------------------------------------------------


class InitializeSessionRequest(CamelModel):
    phone_number: str = Field(min_length=1)
    provider_type: ProviderType = ProviderType.BAILEYS


class SessionStatusResponse(CamelModel):
    is_connected: bool
    status: str
    phone_number: str | None = None
    qr_code: str | None = None
    connected_at: datetime | None = None
    metadata: dict[str, Any] = Field(default_factory=dict)

    @classmethod
    def from_status(cls, status: SessionStatus) -> SessionStatusResponse:
        return cls(
            is_connected=status.is_connected,
            status=status.status,
            phone_number=status.phone_number,
            qr_code=status.qr_code,
            connected_at=status.connected_at,
            metadata=dict(status.metadata),
        )


class SessionResponse(CamelModel):
    id: UUID
    phone_number: str
    provider_type: ProviderType
    is_active: bool
    status: str
    created_at: datetime
    updated_at: datetime

    @classmethod
    def from_record(cls, record: SessionRecord) -> SessionResponse:
        return cls(
            id=record.id,
            phone_number=record.phone_number,
            provider_type=record.provider_type,
            is_active=record.is_active,
            status=record.status,
            created_at=record.created_at,
            updated_at=record.updated_at,
        )


class QrCodeResponse(CamelModel):
    qr_code: str


# Messages ---------------------------------------------------------------


class SendTextRequest(CamelModel):
    to: str = Field(min_length=1)
    content: str = Field(min_length=1)


class SendMediaRequest(CamelModel):
    to: str = Field(min_length=1)
    media_base64: str = Field(min_length=1)
    media_type: str = Field(min_length=1)
    caption: str | None = None


class SendLocationRequest(CamelModel):
    to: str = Field(min_length=1)
    latitude: float = Field(ge=-90, le=90)
    longitude: float = Field(ge=-180, le=180)


class SendAudioRequest(CamelModel):
    to: str = Field(min_length=1)
    audio_base64: str = Field(min_length=1)


class MessageResultResponse(CamelModel):
    message_id: str
    status: MessageStatus
    provider: str
    timestamp: datetime
    error: str | None = None
    metadata: dict[str, Any] = Field(default_factory=dict)

    @classmethod
    def from_result(cls, result: MessageResult) -> MessageResultResponse:
        return cls(
            message_id=result.message_id,
            status=result.status,
            provider=result.provider,
            timestamp=result.timestamp,
            error=result.error,
            metadata=dict(result.metadata),
        )


class MessageResponse(CamelModel):
    model_config = ConfigDict(
        alias_generator=to_camel, populate_by_name=True, from_attributes=True
    )

    id: UUID
    message_id: str | None = None
    session_id: UUID
    from_number: str
    to_number: str
    message_type: MessageType
    content: dict[str, Any] = Field(default_factory=dict)
    status: MessageStatus
    ai_processed: bool = False
    created_at: datetime
    updated_at: datetime


class ConversationResponse(CamelModel):
    contact: str
    last_message: dict[str, Any]
    message_type: MessageType
    status: MessageStatus
    direction: str
    timestamp: datetime


# Providers --------------------------------------------------------------


class ProviderStatsResponse(CamelModel):
    provider_type: ProviderType
    is_healthy: bool
    total_sessions: int
    active_sessions: int
    messages_sent_today: int
    last_health_check: datetime
    average_response_time_ms: float
    success_rate: float

    @classmethod
    def from_stats(cls, stats: ProviderStats) -> ProviderStatsResponse:
        return cls(
            provider_type=stats.provider_type,
            is_healthy=stats.is_healthy,
            total_sessions=stats.total_sessions,
            active_sessions=stats.active_sessions,
            messages_sent_today=stats.messages_sent_today,
            last_health_check=stats.last_health_check,
            average_response_time_ms=stats.average_response_time_ms,
            success_rate=stats.success_rate,
        )


class ProviderHealthResponse(CamelModel):
    provider_type: ProviderType
    is_healthy: bool
    checked_at: datetime
    message: str


class RecommendedProviderResponse(CamelModel):
    provider_type: ProviderType
    is_healthy: bool
    reason: str


# Inbound webhooks -------------------------------------------------------


class IncomingMessageWebhook(CamelModel):
    message_id: str = Field(min_length=1)
    from_number: str = Field(alias="from", min_length=1)
    to: str = Field(min_length=1)
    type: MessageType = MessageType.TEXT
    text_content: str | None = None
    media_url: str | None = None
    media_mime_type: str | None = None
    timestamp: datetime
    metadata: dict[str, Any] | None = None


class MessageStatusWebhook(CamelModel):
    message_id: str = Field(min_length=1)
    status: MessageStatus
    timestamp: datetime
    error: str | None = None


# Tenants ----------------------------------------------------------------


class TenantCreateRequest(CamelModel):
    client_id: str = Field(min_length=1, max_length=100)
    name: str = Field(min_length=1, max_length=200)
    settings: dict[str, Any] | None = None


class TenantSettingsRequest(CamelModel):
    settings: dict[str, Any]


class TenantResponse(CamelModel):
    model_config = ConfigDict(
        alias_generator=to_camel, populate_by_name=True, from_attributes=True
    )

    id: UUID
    client_id: str
    name: str
    settings: dict[str, Any] = Field(default_factory=dict)
    created_at: datetime
    updated_at: datetime


# Users ------------------------------------------------------------------


class UserCreateRequest(CamelModel):
    email: str = Field(min_length=3, max_length=255)
    password: str = Field(min_length=6)
    full_name: str = Field(min_length=1, max_length=200)
    role: str = "User"


class UserUpdateRequest(CamelModel):
    full_name: str | None = None
    role: str | None = None
    is_active: bool | None = None


class PasswordUpdateRequest(CamelModel):
    new_password: str = Field(min_length=6)


class UserResponse(CamelModel):
    model_config = ConfigDict(
        alias_generator=to_camel, populate_by_name=True, from_attributes=True
    )

    id: UUID
    tenant_id: UUID
    email: str
    full_name: str
    role: str
    is_active: bool
    created_at: datetime
    updated_at: datetime
    last_login_at: datetime | None = None


# Agents -----------------------------------------------------------------


class AgentCreateRequest(CamelModel):
    name: str = Field(min_length=1, max_length=200)
    type: str | None = None
    configuration: dict[str, Any] | None = None
    is_active: bool = True


class AgentUpdateRequest(CamelModel):
    name: str | None = None
    type: str | None = None
    configuration: dict[str, Any] | None = None
    is_active: bool | None = None


class AgentFromTemplateRequest(CamelModel):
    name: str | None = None


class AgentResponse(CamelModel):
    model_config = ConfigDict(
        alias_generator=to_camel, populate_by_name=True, from_attributes=True
    )

    id: UUID
    tenant_id: UUID
    name: str
    type: str
    configuration: dict[str, Any] = Field(default_factory=dict)
    is_active: bool
    created_at: datetime
    updated_at: datetime


class AgentTemplateResponse(CamelModel):
    id: str
    name: str
    type: str
    description: str
    icon: str
    configuration: dict[str, Any]
    use_cases: list[str]
