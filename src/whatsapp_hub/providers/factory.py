"""Provider selection with cached health checks and Baileys fallback."""

from __future__ import annotations

import asyncio
from collections.abc import Callable
from datetime import datetime, timedelta
from uuid import UUID

from whatsapp_hub.core.db.repositories import SessionRepository
from whatsapp_hub.core.domain import STATUS_CRITICAL, ProviderStats, ProviderType, utcnow
from whatsapp_hub.core.errors import UnsupportedProviderError
from whatsapp_hub.core.logging import get_logger

from .baileys import BaileysProvider
from .base import WhatsAppProvider
from .bridge import BaileysBridgeClient
from .meta_api import MetaApiProvider

logger = get_logger(__name__)

HEALTH_CHECK_TTL = timedelta(minutes=5)


class ProviderFactory:
    """Builds provider instances and tracks per-type health.

    Instances are cheap: a new one is built for every call and they share the
    bridge client. Health flags start optimistic for Baileys and pessimistic for
    the Meta API stub.
    """

    def __init__(
        self,
        bridge: BaileysBridgeClient,
        *,
        health_ttl: timedelta = HEALTH_CHECK_TTL,
        clock: Callable[[], datetime] = utcnow,
    ) -> None:
        self._bridge = bridge
        self._health_ttl = health_ttl
        self._clock = clock
        self._builders: dict[ProviderType, Callable[[], WhatsAppProvider]] = {
            ProviderType.BAILEYS: lambda: BaileysProvider(bridge),
            ProviderType.META_API: MetaApiProvider,
        }
        self._health: dict[ProviderType, bool] = {
            ProviderType.BAILEYS: True,
            ProviderType.META_API: False,
        }
        self._checked_at: dict[ProviderType, datetime] = {}

    @property
    def bridge(self) -> BaileysBridgeClient:
        return self._bridge

    def _resolve(self, provider_type: ProviderType | str) -> ProviderType:
        try:
            resolved = ProviderType(provider_type)
        except ValueError as exc:
            raise UnsupportedProviderError(provider_type) from exc
        if resolved not in self._builders:
            raise UnsupportedProviderError(provider_type)
        return resolved

    def get_provider(self, provider_type: ProviderType | str) -> WhatsAppProvider:
        return self._builders[self._resolve(provider_type)]()

    def get_provider_for_tenant(
        self, tenant_id: UUID, preferred: ProviderType | None = None
    ) -> WhatsAppProvider:
        """Preferred provider when its cached health is good, otherwise Baileys."""

        if preferred is not None:
            resolved = self._resolve(preferred)
            if self.cached_health(resolved):
                return self.get_provider(resolved)
            logger.info("provider.fallback", tenant_id=str(tenant_id), preferred=resolved.value)
        return self.get_provider(ProviderType.BAILEYS)

    def cached_health(self, provider_type: ProviderType) -> bool:
        return self._health.get(provider_type, False)

    def last_checked(self, provider_type: ProviderType) -> datetime | None:
        return self._checked_at.get(provider_type)

    async def is_provider_healthy(self, provider_type: ProviderType | str) -> bool:
        resolved = self._resolve(provider_type)
        now = self._clock()
        checked_at = self._checked_at.get(resolved)
        if checked_at is not None and now - checked_at < self._health_ttl:
            return self._health.get(resolved, False)

        provider = self.get_provider(resolved)
        try:
            status = await provider.get_status()
            healthy = status.status != STATUS_CRITICAL
        except Exception as exc:  # noqa: BLE001 - any failure means unhealthy
            logger.warning("provider.health_check_failed", provider=resolved.value, error=str(exc))
            healthy = False

        self._health[resolved] = healthy
        self._checked_at[resolved] = now
        return healthy

    async def get_provider_stats(self, sessions: SessionRepository) -> list[ProviderStats]:
        counts = await asyncio.to_thread(sessions.counts_by_provider)
        stats: list[ProviderStats] = []
        for provider_type in ProviderType:
            try:
                healthy = await self.is_provider_healthy(provider_type)
                total, active = counts.get(provider_type, (0, 0))
                stats.append(
                    ProviderStats(
                        provider_type=provider_type,
                        is_healthy=healthy,
                        total_sessions=total,
                        active_sessions=active,
                        last_health_check=self.last_checked(provider_type) or self._clock(),
                        success_rate=1.0 if healthy else 0.0,
                    )
                )
            except Exception as exc:  # noqa: BLE001 - stats must cover every provider
                logger.warning("provider.stats_failed", provider=provider_type.value, error=str(exc))
                stats.append(ProviderStats(provider_type=provider_type, is_healthy=False))
        return stats
