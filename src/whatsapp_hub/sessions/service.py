"""Session lifecycle: creation, status lookups, QR retrieval and disconnects."""

from __future__ import annotations

import asyncio
from typing import Any
from uuid import UUID

from sqlalchemy.exc import SQLAlchemyError
from sqlmodel import Session

from whatsapp_hub.core.db.models import WhatsAppSession
from whatsapp_hub.core.db.repositories import SessionRepository, to_session_record
from whatsapp_hub.core.domain import (
    CONNECTED_STATES,
    STATUS_NOT_FOUND,
    ProviderType,
    SessionRecord,
    SessionStatus,
    TenantConfig,
    normalize_phone,
    utcnow,
)
from whatsapp_hub.core.logging import get_logger
from whatsapp_hub.providers import BridgeError, ProviderFactory, WhatsAppProvider

from .cache import SessionCacheService

logger = get_logger(__name__)


def tenant_config(tenant_id: UUID, provider_type: ProviderType | str) -> TenantConfig:
    return TenantConfig(
        tenant_id=tenant_id,
        client_id=f"tenant-{tenant_id}",
        preferred_provider=ProviderType(provider_type),
    )


class SessionService:
    """Keeps exactly one session row per (tenant, normalized phone).

    Reads go cache first, then the database, then the live bridge; every
    mutation invalidates the affected cache keys.
    Database work runs in a worker thread so the event loop stays free while
    the bridge and Redis are awaited.
    """

    def __init__(
        self,
        db: Session,
        factory: ProviderFactory,
        cache: SessionCacheService,
    ) -> None:
        self._db = db
        self._sessions = SessionRepository(db)
        self._factory = factory
        self._cache = cache

    @property
    def repository(self) -> SessionRepository:
        return self._sessions

    def provider_for(self, row: WhatsAppSession) -> WhatsAppProvider:
        """Provider instance bound to an existing session row."""

        provider = self._factory.get_provider(row.provider_type)
        provider.attach(row.phone_number, tenant_config(row.tenant_id, row.provider_type))
        return provider

    async def initialize_session(
        self,
        tenant_id: UUID,
        phone_number: str,
        provider_type: ProviderType = ProviderType.BAILEYS,
    ) -> SessionStatus:
        phone = normalize_phone(phone_number)
        existing = await asyncio.to_thread(self._sessions.get, tenant_id, phone)
        if existing is not None:
            await self._retire(existing)

        provider = self._factory.get_provider_for_tenant(tenant_id, provider_type)
        status = await provider.initialize(phone, tenant_config(tenant_id, provider.provider_type))
        status.phone_number = phone

        row = WhatsAppSession(
            tenant_id=tenant_id,
            phone_number=phone,
            provider_type=provider.provider_type.value,
            session_data={**status.metadata, "status": status.status},
            is_active=status.is_connected,
        )
        await asyncio.to_thread(self._sessions.add, row)
        await self._cache.invalidate_session(tenant_id, phone)

        logger.info(
            "session.initialized",
            tenant_id=str(tenant_id),
            phone_number=phone,
            provider=provider.provider_type.value,
            status=status.status,
        )
        return status

    async def _save(self, row: WhatsAppSession) -> None:
        await asyncio.to_thread(self._save_sync, row)

    def _save_sync(self, row: WhatsAppSession) -> None:
        self._db.add(row)
        self._db.flush()

    async def _retire(self, row: WhatsAppSession) -> None:
        if row.is_active:
            try:
                await self.provider_for(row).disconnect()
            except Exception as exc:  # noqa: BLE001 - the row is replaced regardless
                logger.warning(
                    "session.disconnect_before_reinit_failed",
                    tenant_id=str(row.tenant_id),
                    phone_number=row.phone_number,
                    error=str(exc),
                )
        try:
            await asyncio.to_thread(self._sessions.delete, row)
        except SQLAlchemyError:
            logger.exception(
                "session.delete_failed",
                tenant_id=str(row.tenant_id),
                phone_number=row.phone_number,
            )
            raise

    async def get_session_status(self, tenant_id: UUID, phone_number: str) -> SessionStatus:
        phone = normalize_phone(phone_number)
        cached = await self._cache.get_session_status(tenant_id, phone)
        if cached is not None:
            return cached

        row = await asyncio.to_thread(self._sessions.get, tenant_id, phone)
        if row is None:
            return SessionStatus(status=STATUS_NOT_FOUND, phone_number=phone)

        session_id = (row.session_data or {}).get("sessionId")
        if session_id:
            live = await self._query_bridge(row, session_id)
            if live is not None:
                await self._cache.set_session_status(tenant_id, phone, live)
                return live

        status = await self.provider_for(row).get_status()
        status.phone_number = phone
        if status.is_connected != row.is_active:
            row.is_active = status.is_connected
            await self._save(row)
        await self._cache.set_session_status(tenant_id, phone, status)
        return status

    async def _query_bridge(self, row: WhatsAppSession, session_id: str) -> SessionStatus | None:
        """Live status from the bridge, written back to the row; ``None`` on failure."""

        try:
            data = await self._factory.bridge.get_session_status(session_id)
        except (BridgeError, ValueError) as exc:
            logger.warning(
                "session.live_status_failed",
                tenant_id=str(row.tenant_id),
                session_id=session_id,
                error=str(exc),
            )
            return None

        live_status = str(data.get("status") or "disconnected")
        qr_code = data.get("qrCode")
        is_connected = live_status in CONNECTED_STATES
        self._store_bridge_state(row, session_id, live_status, qr_code)
        row.is_active = is_connected
        await self._save(row)

        return SessionStatus(
            is_connected=is_connected,
            status=live_status,
            phone_number=row.phone_number,
            qr_code=qr_code,
            connected_at=utcnow() if is_connected else None,
            metadata=dict(row.session_data),
        )

    @staticmethod
    def _store_bridge_state(
        row: WhatsAppSession, session_id: str, status: str, qr_code: str | None
    ) -> None:
        session_data: dict[str, Any] = {
            **(row.session_data or {}),
            "status": status,
            "sessionId": session_id,
        }
        if qr_code:
            session_data["qrCode"] = qr_code
        # Reassign so the JSON column is flagged dirty.
        row.session_data = session_data

    async def get_tenant_sessions(self, tenant_id: UUID) -> list[SessionRecord]:
        cached = await self._cache.get_tenant_sessions(tenant_id)
        if cached is not None:
            return cached

        rows = await asyncio.to_thread(self._sessions.list_for_tenant, tenant_id)
        records = [to_session_record(row) for row in rows]
        await self._cache.set_tenant_sessions(tenant_id, records)
        return records

    async def disconnect_session(self, tenant_id: UUID, phone_number: str) -> bool:
        phone = normalize_phone(phone_number)
        row = await asyncio.to_thread(self._sessions.get, tenant_id, phone)
        if row is None:
            return False

        await self.provider_for(row).disconnect()
        row.is_active = False
        row.session_data = {**(row.session_data or {}), "status": "disconnected"}
        await self._save(row)
        await self._cache.invalidate_session(tenant_id, phone)
        logger.info("session.disconnected", tenant_id=str(tenant_id), phone_number=phone)
        return True

    async def get_qr_code(self, tenant_id: UUID, phone_number: str) -> str | None:
        phone = normalize_phone(phone_number)
        cached = await self._cache.get_qr_code(tenant_id, phone)
        if cached:
            return cached

        row = await asyncio.to_thread(self._sessions.get, tenant_id, phone)
        if row is None:
            return None

        session_data = row.session_data or {}
        qr_code = session_data.get("qrCode")
        if qr_code:
            await self._cache.set_qr_code(tenant_id, phone, qr_code)
            return str(qr_code)

        session_id = session_data.get("sessionId")
        if not session_id:
            return None
        try:
            data = await self._factory.bridge.get_session_status(session_id)
        except (BridgeError, ValueError) as exc:
            logger.warning(
                "session.qr_lookup_failed",
                tenant_id=str(tenant_id),
                session_id=session_id,
                error=str(exc),
            )
            return None

        qr_code = data.get("qrCode")
        if not qr_code:
            return None
        status = str(data.get("status") or session_data.get("status") or "qr_ready")
        self._store_bridge_state(row, session_id, status, qr_code)
        await self._save(row)
        await self._cache.set_qr_code(tenant_id, phone, qr_code)
        return str(qr_code)
