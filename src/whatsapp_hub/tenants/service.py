"""Tenant registry and per-tenant settings."""

from __future__ import annotations

from collections.abc import Mapping
from typing import Any
from uuid import UUID

from sqlmodel import Session, col, select

from whatsapp_hub.core.db.models import Tenant
from whatsapp_hub.core.errors import ConflictError, NotFoundError
from whatsapp_hub.core.logging import get_logger

logger = get_logger(__name__)


class TenantService:
    def __init__(self, session: Session) -> None:
        self._session = session

    def get_by_client_id(self, client_id: str) -> Tenant | None:
        tenant = self._session.exec(select(Tenant).where(Tenant.client_id == client_id)).first()
        if tenant is None:
            logger.warning("tenant.unknown_client", client_id=client_id)
        return tenant

    def get_by_id(self, tenant_id: UUID) -> Tenant | None:
        return self._session.get(Tenant, tenant_id)

    def list_all(self) -> list[Tenant]:
        return list(self._session.exec(select(Tenant).order_by(col(Tenant.created_at))))

    def create(
        self, client_id: str, name: str, settings: Mapping[str, Any] | None = None
    ) -> Tenant:
        if self._session.exec(select(Tenant).where(Tenant.client_id == client_id)).first():
            raise ConflictError(f"Tenant with client ID '{client_id}' already exists")

        tenant = Tenant(client_id=client_id, name=name, settings=dict(settings or {}))
        self._session.add(tenant)
        self._session.flush()
        logger.info("tenant.created", tenant_id=str(tenant.id), client_id=client_id)
        return tenant

    def update_settings(self, tenant_id: UUID, settings: Mapping[str, Any]) -> Tenant:
        tenant = self.get_by_id(tenant_id)
        if tenant is None:
            raise NotFoundError(f"Tenant with ID '{tenant_id}' not found")
        tenant.settings = dict(settings)
        self._session.add(tenant)
        self._session.flush()
        logger.info("tenant.settings_updated", tenant_id=str(tenant_id))
        return tenant
