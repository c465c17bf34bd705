"""Tenant registration and settings routes."""

from __future__ import annotations

from fastapi import APIRouter, status

from whatsapp_hub.core.errors import ValidationError

from .. import schemas
from ..dependencies import TenantServiceDep
from ..tenancy import CurrentTenant

router = APIRouter(prefix="/api/v1/tenant", tags=["tenants"])


@router.post("", response_model=schemas.TenantResponse, status_code=status.HTTP_201_CREATED)
def create_tenant(
    payload: schemas.TenantCreateRequest,
    tenants: TenantServiceDep,
) -> schemas.TenantResponse:
    client_id, name = payload.client_id.strip(), payload.name.strip()
    if not client_id or not name:
        raise ValidationError("ClientId and Name are required")
    tenant = tenants.create(client_id, name, payload.settings)
    return schemas.TenantResponse.model_validate(tenant)


@router.get("", response_model=list[schemas.TenantResponse])
def list_tenants(tenants: TenantServiceDep) -> list[schemas.TenantResponse]:
    return [schemas.TenantResponse.model_validate(tenant) for tenant in tenants.list_all()]


@router.get("/settings", response_model=schemas.TenantResponse)
def get_tenant_settings(tenant: CurrentTenant) -> schemas.TenantResponse:
    return schemas.TenantResponse.model_validate(tenant)


@router.put("/settings", response_model=schemas.TenantResponse)
def update_tenant_settings(
    payload: schemas.TenantSettingsRequest,
    tenant: CurrentTenant,
    tenants: TenantServiceDep,
) -> schemas.TenantResponse:
    updated = tenants.update_settings(tenant.id, payload.settings)
    return schemas.TenantResponse.model_validate(updated)
