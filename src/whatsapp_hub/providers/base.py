"""Provider interface every WhatsApp backend implements."""

from __future__ import annotations

from abc import ABC, abstractmethod

from whatsapp_hub.core.domain import MessageResult, ProviderType, SessionStatus, TenantConfig


class WhatsAppProvider(ABC):
    """Drives one WhatsApp session for one tenant phone number.

    Send operations report failures through ``MessageResult.status`` instead of
    raising; ``initialize`` reports them through ``SessionStatus.status``.
    """

    provider_type: ProviderType

    @abstractmethod
    def attach(self, phone_number: str, config: TenantConfig) -> None:
        """Bind to an existing session without contacting the backend."""

    @abstractmethod
    async def initialize(self, phone_number: str, config: TenantConfig) -> SessionStatus:
        ...

    @abstractmethod
    async def send_text(self, to: str, content: str) -> MessageResult:
        ...

    @abstractmethod
    async def send_media(
        self, to: str, media: bytes, media_type: str, caption: str | None = None
    ) -> MessageResult:
        ...

    @abstractmethod
    async def send_location(self, to: str, latitude: float, longitude: float) -> MessageResult:
        ...

    @abstractmethod
    async def send_audio(self, to: str, audio: bytes) -> MessageResult:
        ...

    @abstractmethod
    async def get_status(self) -> SessionStatus:
        ...

    @abstractmethod
    async def disconnect(self) -> None:
        ...
