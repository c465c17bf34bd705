"""Resolve the calling tenant from the ``X-Client-Id`` header."""

from __future__ import annotations

from typing import Annotated

from fastapi import Depends, Header

from whatsapp_hub.core.db.models import Tenant
from whatsapp_hub.core.errors import UnauthorizedError, ValidationError
from whatsapp_hub.core.logging import get_logger

from .dependencies import TenantServiceDep

logger = get_logger(__name__)


def get_current_tenant(
    tenants: TenantServiceDep,
    client_id: Annotated[str | None, Header(alias="X-Client-Id")] = None,
) -> Tenant:
    if not client_id:
        logger.warning("tenant.missing_client_id")
        raise ValidationError("X-Client-Id header is required")

    tenant = tenants.get_by_client_id(client_id)
    if tenant is None:
        raise UnauthorizedError()
    return tenant


CurrentTenant = Annotated[Tenant, Depends(get_current_tenant)]
