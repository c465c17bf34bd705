"""Placeholder for the Meta WhatsApp Business API."""

from __future__ import annotations

from whatsapp_hub.core.domain import (
    MessageResult,
    ProviderType,
    SessionStatus,
    TenantConfig,
)
from whatsapp_hub.core.logging import get_logger

from .base import WhatsAppProvider

logger = get_logger(__name__)

PROVIDER_NAME = "meta_api"
NOT_IMPLEMENTED = "Meta API Provider not implemented yet. Please use Baileys provider."


class MetaApiProvider(WhatsAppProvider):
    provider_type = ProviderType.META_API

    def __init__(self) -> None:
        self._status = SessionStatus(
            status="not_configured",
            metadata={"provider": PROVIDER_NAME, "implementation": "stub"},
        )

    def attach(self, phone_number: str, config: TenantConfig) -> None:
        self._status.phone_number = phone_number

    async def initialize(self, phone_number: str, config: TenantConfig) -> SessionStatus:
        logger.warning("meta_api.initialize_unsupported", tenant_id=str(config.tenant_id))
        return SessionStatus(
            status="not_implemented",
            phone_number=phone_number,
            metadata={"provider": PROVIDER_NAME, "error": NOT_IMPLEMENTED},
        )

    async def send_text(self, to: str, content: str) -> MessageResult:
        return MessageResult.failure(PROVIDER_NAME, NOT_IMPLEMENTED)

    async def send_media(
        self, to: str, media: bytes, media_type: str, caption: str | None = None
    ) -> MessageResult:
        return MessageResult.failure(PROVIDER_NAME, NOT_IMPLEMENTED)

    async def send_location(self, to: str, latitude: float, longitude: float) -> MessageResult:
        return MessageResult.failure(PROVIDER_NAME, NOT_IMPLEMENTED)

    async def send_audio(self, to: str, audio: bytes) -> MessageResult:
        return MessageResult.failure(PROVIDER_NAME, NOT_IMPLEMENTED)

    async def get_status(self) -> SessionStatus:
        return self._status

    async def disconnect(self) -> None:
        self._status.is_connected = False
        self._status.status = "disconnected"
