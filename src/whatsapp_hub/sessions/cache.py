"""Redis read-through cache for session status, QR codes and tenant session lists.

The cache is strictly optional: when Redis is not configured or misbehaves every
read is a miss, every write is dropped, and a warning is logged.
"""

from __future__ import annotations

import json
from collections.abc import Sequence
from datetime import timedelta
from uuid import UUID

from redis.asyncio import Redis
from redis.exceptions import RedisError

from whatsapp_hub.core.config import RedisSettings
from whatsapp_hub.core.domain import SessionRecord, SessionStatus
from whatsapp_hub.core.logging import get_logger

logger = get_logger(__name__)

STATUS_TTL = timedelta(minutes=5)
QR_TTL = timedelta(minutes=2)
TENANT_SESSIONS_TTL = timedelta(minutes=10)


def status_key(tenant_id: UUID, phone_number: str) -> str:
    return f"session:status:{tenant_id}:{phone_number}"


def qr_key(tenant_id: UUID, phone_number: str) -> str:
    return f"session:qr:{tenant_id}:{phone_number}"


def tenant_sessions_key(tenant_id: UUID) -> str:
    return f"tenant:sessions:{tenant_id}"


class SessionCacheService:
    def __init__(self, redis: Redis | None) -> None:
        self._redis = redis

    @property
    def enabled(self) -> bool:
        return self._redis is not None

    async def _get(self, key: str) -> str | None:
        if self._redis is None:
            return None
        try:
            return await self._redis.get(key)
        except RedisError as exc:
            logger.warning("cache.read_failed", key=key, error=str(exc))
            return None

    async def _set(self, key: str, value: str, ttl: timedelta) -> None:
        if self._redis is None:
            return
        try:
            await self._redis.set(key, value, ex=ttl)
        except RedisError as exc:
            logger.warning("cache.write_failed", key=key, error=str(exc))

    async def _delete(self, *keys: str) -> None:
        if self._redis is None or not keys:
            return
        try:
            await self._redis.delete(*keys)
        except RedisError as exc:
            logger.warning("cache.delete_failed", keys=list(keys), error=str(exc))

    async def get_session_status(self, tenant_id: UUID, phone_number: str) -> SessionStatus | None:
        raw = await self._get(status_key(tenant_id, phone_number))
        if raw is None:
            return None
        try:
            return SessionStatus.from_dict(json.loads(raw))
        except (ValueError, TypeError) as exc:
            logger.warning("cache.decode_failed", kind="status", error=str(exc))
            return None

    async def set_session_status(
        self, tenant_id: UUID, phone_number: str, status: SessionStatus
    ) -> None:
        await self._set(
            status_key(tenant_id, phone_number), json.dumps(status.to_dict()), STATUS_TTL
        )

    async def get_qr_code(self, tenant_id: UUID, phone_number: str) -> str | None:
        return await self._get(qr_key(tenant_id, phone_number))

    async def set_qr_code(self, tenant_id: UUID, phone_number: str, qr_code: str) -> None:
        await self._set(qr_key(tenant_id, phone_number), qr_code, QR_TTL)

    async def get_tenant_sessions(self, tenant_id: UUID) -> list[SessionRecord] | None:
        raw = await self._get(tenant_sessions_key(tenant_id))
        if raw is None:
            return None
        try:
            return [SessionRecord.from_dict(item) for item in json.loads(raw)]
        except (ValueError, TypeError, KeyError) as exc:
            logger.warning("cache.decode_failed", kind="tenant_sessions", error=str(exc))
            return None

    async def set_tenant_sessions(
        self, tenant_id: UUID, sessions: Sequence[SessionRecord]
    ) -> None:
        payload = json.dumps([record.to_dict() for record in sessions])
        await self._set(tenant_sessions_key(tenant_id), payload, TENANT_SESSIONS_TTL)

    async def invalidate_session(self, tenant_id: UUID, phone_number: str) -> None:
        await self._delete(
            status_key(tenant_id, phone_number),
            qr_key(tenant_id, phone_number),
            tenant_sessions_key(tenant_id),
        )

    async def invalidate_tenant(self, tenant_id: UUID) -> None:
        if self._redis is None:
            return
        keys: list[str] = []
        try:
            for pattern in (f"session:status:{tenant_id}:*", f"session:qr:{tenant_id}:*"):
                keys.extend([key async for key in self._redis.scan_iter(match=pattern)])
        except RedisError as exc:
            logger.warning("cache.scan_failed", tenant_id=str(tenant_id), error=str(exc))
        keys.append(tenant_sessions_key(tenant_id))
        await self._delete(*keys)

    async def is_healthy(self) -> bool:
        if self._redis is None:
            return False
        try:
            return bool(await self._redis.ping())
        except RedisError as exc:
            logger.warning("cache.ping_failed", error=str(exc))
            return False

    async def close(self) -> None:
        if self._redis is not None:
            await self._redis.aclose()


async def create_session_cache(settings: RedisSettings) -> SessionCacheService:
    """Connect to Redis, or return a disabled cache when that is not possible."""

    if not settings.enabled or not settings.url:
        logger.info("cache.disabled", reason="not_configured")
        return SessionCacheService(None)

    client = Redis.from_url(settings.url, decode_responses=True)
    try:
        await client.ping()
    except (RedisError, OSError) as exc:
        logger.warning("cache.disabled", reason="unreachable", error=str(exc))
        await client.aclose()
        return SessionCacheService(None)
    return SessionCacheService(client)
