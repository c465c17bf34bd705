"""Provider health, status and selection routes."""

from __future__ import annotations

from typing import Annotated

from fastapi import APIRouter, Query

from whatsapp_hub.core.db.repositories import SessionRepository
from whatsapp_hub.core.domain import STATUS_CRITICAL, ProviderType, utcnow

from .. import schemas
from ..dependencies import ProviderFactoryDep, SessionDep
from ..tenancy import CurrentTenant

router = APIRouter(prefix="/api/v1/provider", tags=["providers"])


@router.get("/stats", response_model=list[schemas.ProviderStatsResponse])
async def get_provider_stats(
    _: CurrentTenant,
    session: SessionDep,
    factory: ProviderFactoryDep,
) -> list[schemas.ProviderStatsResponse]:
    stats = await factory.get_provider_stats(SessionRepository(session))
    return [schemas.ProviderStatsResponse.from_stats(entry) for entry in stats]


@router.get("/recommended", response_model=schemas.RecommendedProviderResponse)
async def get_recommended_provider(
    tenant: CurrentTenant,
    factory: ProviderFactoryDep,
    preferred: Annotated[ProviderType | None, Query(alias="preferredProvider")] = None,
) -> schemas.RecommendedProviderResponse:
    provider = factory.get_provider_for_tenant(tenant.id, preferred)
    status = await provider.get_status()
    if preferred is not None and provider.provider_type is preferred:
        reason = f"Using preferred provider: {preferred.value}"
    else:
        reason = "Using default provider: Baileys"
    return schemas.RecommendedProviderResponse(
        provider_type=provider.provider_type,
        is_healthy=status.is_connected or status.status != STATUS_CRITICAL,
        reason=reason,
    )


@router.get("/{provider_type}/health", response_model=schemas.ProviderHealthResponse)
async def get_provider_health(
    provider_type: ProviderType,
    _: CurrentTenant,
    factory: ProviderFactoryDep,
) -> schemas.ProviderHealthResponse:
    healthy = await factory.is_provider_healthy(provider_type)
    if healthy:
        message = f"Provider {provider_type.value} is healthy and operational"
    else:
        message = f"Provider {provider_type.value} is not healthy or not available"
    return schemas.ProviderHealthResponse(
        provider_type=provider_type,
        is_healthy=healthy,
        checked_at=utcnow(),
        message=message,
    )


@router.get("/{provider_type}/status", response_model=schemas.SessionStatusResponse)
async def get_provider_status(
    provider_type: ProviderType,
    _: CurrentTenant,
    factory: ProviderFactoryDep,
) -> schemas.SessionStatusResponse:
    status = await factory.get_provider(provider_type).get_status()
    return schemas.SessionStatusResponse.from_status(status)
