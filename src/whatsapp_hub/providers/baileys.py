"""Provider backed by the self-hosted Baileys bridge."""

from __future__ import annotations

import asyncio
import base64
from typing import Any
from uuid import UUID

from prometheus_client import Counter

from whatsapp_hub.core.domain import (
    CONNECTED_STATES,
    MessageResult,
    MessageStatus,
    ProviderType,
    SessionStatus,
    TenantConfig,
    utcnow,
)
from whatsapp_hub.core.logging import get_logger

from .base import WhatsAppProvider
from .bridge import BaileysBridgeClient, BridgeError

logger = get_logger(__name__)

PROVIDER_NAME = "baileys"

PROVIDER_SENDS = Counter(
    "whatsapp_provider_sends_total",
    "Messages handed to a WhatsApp provider.",
    ["provider", "kind", "result"],
)


def session_id_for(tenant_id: UUID, phone_number: str) -> str:
    return f"session-{tenant_id}-{phone_number.replace('+', '')}"


class BaileysProvider(WhatsAppProvider):
    """Talks to one bridge session; the session id is derived from tenant and phone."""

    provider_type = ProviderType.BAILEYS

    def __init__(self, bridge: BaileysBridgeClient) -> None:
        self._bridge = bridge
        self._session_id: str | None = None
        self._phone_number: str | None = None
        self._tenant_id: UUID | None = None
        self._status = SessionStatus()

    @property
    def session_id(self) -> str | None:
        return self._session_id

    def attach(self, phone_number: str, config: TenantConfig) -> None:
        self._phone_number = phone_number
        self._tenant_id = config.tenant_id
        self._session_id = session_id_for(config.tenant_id, phone_number)
        self._status.phone_number = phone_number

    async def initialize(self, phone_number: str, config: TenantConfig) -> SessionStatus:
        self.attach(phone_number, config)
        session_id = self._session_id
        assert session_id is not None

        try:
            data = await self._bridge.initialize_session(session_id, phone_number)
        except BridgeError as exc:
            if exc.status_code is None:
                return self._remember(self._error_status("error", str(exc)))
            logger.warning(
                "baileys.initialize_rejected",
                session_id=session_id,
                status_code=exc.status_code,
            )
            return self._remember(self._error_status("failed", exc.body or str(exc)))
        except ValueError as exc:
            return self._remember(self._error_status("error", str(exc)))

        status = str(data.get("status") or "disconnected")
        qr_code = data.get("qrCode")
        if status not in CONNECTED_STATES:
            status, qr_code = await self._poll_for_qr(session_id, status, qr_code)

        is_connected = status in CONNECTED_STATES
        metadata: dict[str, Any] = {
            "provider": PROVIDER_NAME,
            "sessionId": session_id,
            "tenantId": str(config.tenant_id),
        }
        if qr_code:
            metadata["qrCode"] = qr_code

        logger.info(
            "baileys.initialized",
            session_id=session_id,
            status=status,
            has_qr=bool(qr_code),
        )
        return self._remember(
            SessionStatus(
                is_connected=is_connected,
                status=status,
                phone_number=phone_number,
                qr_code=qr_code,
                connected_at=utcnow() if is_connected else None,
                metadata=metadata,
            )
        )

    async def _poll_for_qr(
        self, session_id: str, status: str, qr_code: str | None
    ) -> tuple[str, str | None]:
        """QR generation is asynchronous on the bridge; poll briefly for the latest QR.

        The status endpoint is read at least once, so a fresher QR replaces the one
        returned by the initialize call.
        """

        settings = self._bridge.settings
        for attempt in range(settings.qr_poll_attempts):
            if attempt > 0:
                await asyncio.sleep(settings.qr_poll_delay_seconds)
            try:
                data = await self._bridge.get_session_status(session_id)
            except (BridgeError, ValueError) as exc:
                logger.warning(
                    "baileys.qr_poll_failed",
                    session_id=session_id,
                    attempt=attempt + 1,
                    error=str(exc),
                )
                continue
            qr_code = data.get("qrCode") or qr_code
            status = str(data.get("status") or status)
            if qr_code or status in CONNECTED_STATES:
                break
        return status, qr_code

    def _error_status(self, status: str, error: str) -> SessionStatus:
        return SessionStatus(
            is_connected=False,
            status=status,
            phone_number=self._phone_number,
            metadata={"error": error},
        )

    def _remember(self, status: SessionStatus) -> SessionStatus:
        self._status = status
        return status

    async def _send(self, kind: str, to: str, payload: dict[str, Any]) -> MessageResult:
        if not self._session_id:
            PROVIDER_SENDS.labels(PROVIDER_NAME, kind, "failed").inc()
            return MessageResult.failure(PROVIDER_NAME, "Session not initialized")

        body = {"sessionId": self._session_id, "to": to.lstrip("+"), **payload}
        try:
            data = await self._bridge.send_message(kind, body)
        except BridgeError as exc:
            logger.warning(
                "baileys.send_failed",
                kind=kind,
                session_id=self._session_id,
                status_code=exc.status_code,
            )
            PROVIDER_SENDS.labels(PROVIDER_NAME, kind, "failed").inc()
            return MessageResult.failure(PROVIDER_NAME, exc.body or str(exc))
        except ValueError as exc:
            PROVIDER_SENDS.labels(PROVIDER_NAME, kind, "failed").inc()
            return MessageResult.failure(PROVIDER_NAME, str(exc))

        PROVIDER_SENDS.labels(PROVIDER_NAME, kind, "sent").inc()
        return MessageResult(
            message_id=str(data.get("messageId") or ""),
            status=MessageStatus.SENT,
            provider=PROVIDER_NAME,
            metadata={"sessionId": self._session_id, "kind": kind},
        )

    async def send_text(self, to: str, content: str) -> MessageResult:
        return await self._send("text", to, {"content": content})

    async def send_media(
        self, to: str, media: bytes, media_type: str, caption: str | None = None
    ) -> MessageResult:
        return await self._send(
            "media",
            to,
            {
                "mediaBase64": base64.b64encode(media).decode("ascii"),
                "mediaType": media_type.lower(),
                "caption": caption,
            },
        )

    async def send_location(self, to: str, latitude: float, longitude: float) -> MessageResult:
        return await self._send("location", to, {"latitude": latitude, "longitude": longitude})

    async def send_audio(self, to: str, audio: bytes) -> MessageResult:
        return await self._send(
            "audio", to, {"audioBase64": base64.b64encode(audio).decode("ascii")}
        )

    async def get_status(self) -> SessionStatus:
        if not self._session_id:
            return self._status
        try:
            data = await self._bridge.get_session_status(self._session_id)
        except (BridgeError, ValueError) as exc:
            logger.warning("baileys.status_failed", session_id=self._session_id, error=str(exc))
            return self._status

        status = str(data.get("status") or self._status.status)
        self._status.status = status
        self._status.is_connected = status in CONNECTED_STATES
        if data.get("qrCode"):
            self._status.qr_code = data["qrCode"]
        return self._status

    async def disconnect(self) -> None:
        if self._session_id:
            try:
                await self._bridge.delete_session(self._session_id)
            except BridgeError as exc:
                logger.warning(
                    "baileys.disconnect_failed", session_id=self._session_id, error=str(exc)
                )
        self._status.is_connected = False
        self._status.status = "disconnected"
