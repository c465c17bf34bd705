"""Tenant-scoped query helpers.

Every lookup that can leak data across tenants takes the tenant id as its first
argument and filters on it; the two exceptions (``get_by_message_id`` and
``counts_by_provider``) are used only where the caller checks ownership itself
or needs platform-wide numbers.
"""

from __future__ import annotations

from collections.abc import Sequence
from uuid import UUID

from sqlalchemy import case, func, or_
from sqlmodel import Session, col, select

from whatsapp_hub.core.domain import ProviderType, SessionRecord

from .models import Message, WhatsAppSession


def derive_session_status(row: WhatsAppSession) -> str:
    """Stored bridge status, else the active flag mapped to connected/disconnected."""

    status = (row.session_data or {}).get("status")
    if status:
        return str(status)
    return "connected" if row.is_active else "disconnected"


def to_session_record(row: WhatsAppSession) -> SessionRecord:
    return SessionRecord(
        id=row.id,
        tenant_id=row.tenant_id,
        phone_number=row.phone_number,
        provider_type=ProviderType(row.provider_type),
        is_active=row.is_active,
        status=derive_session_status(row),
        created_at=row.created_at,
        updated_at=row.updated_at,
    )


class SessionRepository:
    def __init__(self, session: Session) -> None:
        self._session = session

    def get(self, tenant_id: UUID, phone_number: str) -> WhatsAppSession | None:
        statement = select(WhatsAppSession).where(
            WhatsAppSession.tenant_id == tenant_id,
            WhatsAppSession.phone_number == phone_number,
        )
        return self._session.exec(statement).first()

    def get_by_id(self, tenant_id: UUID, session_id: UUID) -> WhatsAppSession | None:
        row = self._session.get(WhatsAppSession, session_id)
        if row is None or row.tenant_id != tenant_id:
            return None
        return row

    def list_for_tenant(self, tenant_id: UUID) -> list[WhatsAppSession]:
        statement = (
            select(WhatsAppSession)
            .where(WhatsAppSession.tenant_id == tenant_id)
            .order_by(col(WhatsAppSession.created_at))
        )
        return list(self._session.exec(statement))

    def first_active(self, tenant_id: UUID) -> WhatsAppSession | None:
        statement = (
            select(WhatsAppSession)
            .where(
                WhatsAppSession.tenant_id == tenant_id,
                col(WhatsAppSession.is_active).is_(True),
            )
            .order_by(col(WhatsAppSession.created_at))
        )
        return self._session.exec(statement).first()

    def most_recent(self, tenant_id: UUID) -> WhatsAppSession | None:
        statement = (
            select(WhatsAppSession)
            .where(WhatsAppSession.tenant_id == tenant_id)
            .order_by(col(WhatsAppSession.updated_at).desc())
        )
        return self._session.exec(statement).first()

    def add(self, row: WhatsAppSession) -> WhatsAppSession:
        self._session.add(row)
        self._session.flush()
        return row

    def delete(self, row: WhatsAppSession) -> None:
        self._session.delete(row)
        self._session.flush()

    def counts_by_provider(self) -> dict[ProviderType, tuple[int, int]]:
        """Total and active session counts per provider across all tenants."""

        active = func.sum(case((col(WhatsAppSession.is_active).is_(True), 1), else_=0))
        statement = select(
            WhatsAppSession.provider_type,
            func.count(),
            active,
        ).group_by(WhatsAppSession.provider_type)
        counts: dict[ProviderType, tuple[int, int]] = {}
        for provider_type, total, active_count in self._session.exec(statement):
            counts[ProviderType(provider_type)] = (int(total or 0), int(active_count or 0))
        return counts


class MessageRepository:
    def __init__(self, session: Session) -> None:
        self._session = session

    def add(self, row: Message) -> Message:
        self._session.add(row)
        self._session.flush()
        return row

    def get_by_message_id(self, message_id: str) -> Message | None:
        statement = select(Message).where(Message.message_id == message_id)
        return self._session.exec(statement).first()

    def get_for_tenant(self, tenant_id: UUID, message_id: str) -> Message | None:
        row = self.get_by_message_id(message_id)
        if row is None or row.tenant_id != tenant_id:
            return None
        return row

    def history(self, tenant_id: UUID, phone_number: str, *, limit: int = 50) -> list[Message]:
        statement = (
            select(Message)
            .where(
                Message.tenant_id == tenant_id,
                or_(Message.from_number == phone_number, Message.to_number == phone_number),
            )
            .order_by(col(Message.created_at).desc())
            .limit(limit)
        )
        return list(self._session.exec(statement))

    def recent_for_tenant(self, tenant_id: UUID) -> Sequence[Message]:
        statement = (
            select(Message)
            .where(Message.tenant_id == tenant_id)
            .order_by(col(Message.created_at).desc())
        )
        return list(self._session.exec(statement))
