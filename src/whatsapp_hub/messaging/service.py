"""Outbound sends and message history for a tenant."""

from __future__ import annotations

import asyncio
from collections.abc import Awaitable, Callable
from typing import Any
from uuid import UUID

from sqlmodel import Session

from whatsapp_hub.core.db.models import Message, WhatsAppSession
from whatsapp_hub.core.db.repositories import MessageRepository
from whatsapp_hub.core.domain import (
    MessageResult,
    MessageType,
    ProviderType,
    normalize_phone,
)
from whatsapp_hub.core.logging import get_logger
from whatsapp_hub.providers import WhatsAppProvider
from whatsapp_hub.sessions import SessionService, tenant_config

logger = get_logger(__name__)

NO_SESSION_ERROR = "No WhatsApp session available. Please scan QR code to reconnect."

SendCall = Callable[[WhatsAppProvider], Awaitable[MessageResult]]


def media_message_type(media_type: str) -> MessageType:
    try:
        return MessageType(media_type.lower())
    except ValueError:
        return MessageType.DOCUMENT


class MessageService:
    def __init__(self, db: Session, sessions: SessionService) -> None:
        self._db = db
        self._sessions = sessions
        self._messages = MessageRepository(db)

    async def _get_or_reactivate_session(self, tenant_id: UUID) -> WhatsAppSession | None:
        """First active session, else re-initialize the most recent one."""

        repository = self._sessions.repository
        active = await asyncio.to_thread(repository.first_active, tenant_id)
        if active is not None:
            return active

        latest = await asyncio.to_thread(repository.most_recent, tenant_id)
        if latest is None:
            return None

        phone = latest.phone_number
        try:
            status = await self._sessions.initialize_session(
                tenant_id, phone, ProviderType(latest.provider_type)
            )
        except Exception as exc:  # noqa: BLE001 - reported as "no session"
            logger.warning(
                "message.session_reactivation_failed",
                tenant_id=str(tenant_id),
                phone_number=phone,
                error=str(exc),
            )
            return None
        if not status.is_connected:
            logger.info(
                "message.session_not_connected",
                tenant_id=str(tenant_id),
                phone_number=phone,
                status=status.status,
            )
            return None
        return await asyncio.to_thread(repository.get, tenant_id, phone)

    async def _send(
        self,
        tenant_id: UUID,
        to: str,
        message_type: MessageType,
        content: dict[str, Any],
        call: SendCall,
    ) -> MessageResult:
        session = await self._get_or_reactivate_session(tenant_id)
        if session is None:
            return MessageResult.failure("none", NO_SESSION_ERROR)

        provider = self._sessions.provider_for(session)
        await provider.initialize(
            session.phone_number, tenant_config(tenant_id, session.provider_type)
        )
        result = await call(provider)

        await asyncio.to_thread(
            self._messages.add,
            Message(
                tenant_id=tenant_id,
                session_id=session.id,
                message_id=result.message_id or None,
                from_number=session.phone_number,
                to_number=normalize_phone(to),
                message_type=message_type.value,
                content=content,
                status=result.status.value,
            ),
        )
        log = logger.info if result.succeeded else logger.warning
        log(
            "message.sent" if result.succeeded else "message.send_failed",
            tenant_id=str(tenant_id),
            to=to,
            message_type=message_type.value,
            provider=result.provider,
            error=result.error,
        )
        return result

    async def send_text(self, tenant_id: UUID, to: str, content: str) -> MessageResult:
        return await self._send(
            tenant_id,
            to,
            MessageType.TEXT,
            {"text": content},
            lambda provider: provider.send_text(to, content),
        )

    async def send_media(
        self,
        tenant_id: UUID,
        to: str,
        media: bytes,
        media_type: str,
        caption: str | None = None,
    ) -> MessageResult:
        return await self._send(
            tenant_id,
            to,
            media_message_type(media_type),
            {"mediaType": media_type, "caption": caption, "size": len(media)},
            lambda provider: provider.send_media(to, media, media_type, caption),
        )

    async def send_location(
        self, tenant_id: UUID, to: str, latitude: float, longitude: float
    ) -> MessageResult:
        return await self._send(
            tenant_id,
            to,
            MessageType.LOCATION,
            {"latitude": latitude, "longitude": longitude},
            lambda provider: provider.send_location(to, latitude, longitude),
        )

    async def send_audio(self, tenant_id: UUID, to: str, audio: bytes) -> MessageResult:
        return await self._send(
            tenant_id,
            to,
            MessageType.AUDIO,
            {"size": len(audio)},
            lambda provider: provider.send_audio(to, audio),
        )

    def get_message_status(self, tenant_id: UUID, message_id: str) -> Message | None:
        return self._messages.get_for_tenant(tenant_id, message_id)

    def get_message_history(
        self, tenant_id: UUID, phone_number: str, *, limit: int = 50
    ) -> list[Message]:
        return self._messages.history(tenant_id, normalize_phone(phone_number), limit=limit)

    def get_conversations(self, tenant_id: UUID) -> list[dict[str, Any]]:
        """Latest message per contact, newest conversation first."""

        own_numbers = {
            row.phone_number for row in self._sessions.repository.list_for_tenant(tenant_id)
        }
        conversations: dict[str, dict[str, Any]] = {}
        for message in self._messages.recent_for_tenant(tenant_id):
            outbound = message.from_number in own_numbers
            contact = message.to_number if outbound else message.from_number
            if contact in conversations:
                continue
            conversations[contact] = {
                "contact": contact,
                "last_message": message.content,
                "message_type": message.message_type,
                "status": message.status,
                "direction": "outbound" if outbound else "inbound",
                "timestamp": message.created_at,
            }
        return list(conversations.values())
