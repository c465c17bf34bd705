"""Signed outbound webhook delivery with exponential backoff."""

from __future__ import annotations

import asyncio
import json
import logging
import time
from collections.abc import Awaitable, Callable, Mapping
from dataclasses import dataclass
from typing import Any
from uuid import UUID

import httpx
from prometheus_client import Counter, Histogram

from whatsapp_hub.core.config import WebhookSettings
from whatsapp_hub.core.domain import utcnow
from whatsapp_hub.utils.retry import RetryConfig, backoff_delays

from .signing import EVENT_HEADER, SIGNATURE_HEADER, sign_payload

logger = logging.getLogger(__name__)

WEBHOOK_DELIVERIES = Counter(
    "webhook_deliveries_total",
    "Outbound tenant webhook deliveries by final outcome.",
    ["event", "result"],
)
WEBHOOK_ATTEMPTS = Histogram(
    "webhook_delivery_attempts",
    "Attempts needed per webhook delivery.",
    buckets=(1, 2, 3, 4, 5, 8),
)


@dataclass(slots=True)
class WebhookDeliveryResult:
    success: bool = False
    status_code: int | None = None
    response_body: str | None = None
    error: str | None = None
    attempts: int = 0
    total_duration: float = 0.0


class WebhookDeliveryService:
    """POSTs ``{"event", "timestamp", "data"}`` envelopes to tenant endpoints.

    ``deliver`` never raises: transport errors, timeouts and non-2xx answers
    are retried ``max_retries`` times and then reported in the result.
    """

    def __init__(
        self,
        settings: WebhookSettings,
        *,
        transport: httpx.AsyncBaseTransport | None = None,
        sleep: Callable[[float], Awaitable[None]] = asyncio.sleep,
    ) -> None:
        self._settings = settings
        self._transport = transport
        self._sleep = sleep
        self._client: httpx.AsyncClient | None = None

    def _get_client(self) -> httpx.AsyncClient:
        if self._client is None or self._client.is_closed:
            self._client = httpx.AsyncClient(
                timeout=self._settings.timeout_seconds,
                transport=self._transport,
            )
        return self._client

    async def close(self) -> None:
        if self._client is not None and not self._client.is_closed:
            await self._client.aclose()

    async def deliver(
        self,
        url: str,
        event_type: str,
        payload: Mapping[str, Any],
        *,
        secret: str | None = None,
        max_retries: int | None = None,
    ) -> WebhookDeliveryResult:
        retries = self._settings.max_retries if max_retries is None else max_retries
        config = RetryConfig.from_max_retries(retries)
        envelope = {
            "event": event_type,
            "timestamp": utcnow().isoformat(),
            "data": dict(payload),
        }
        # Signed bytes must be exactly the bytes sent.
        body = json.dumps(envelope, default=str).encode("utf-8")
        headers = {"Content-Type": "application/json", EVENT_HEADER: event_type}
        if secret:
            headers[SIGNATURE_HEADER] = sign_payload(secret, body)

        result = WebhookDeliveryResult()
        delays = backoff_delays(config)
        client = self._get_client()
        start = time.perf_counter()

        for attempt in range(1, config.attempts + 1):
            result.attempts = attempt
            result.status_code = None
            result.response_body = None
            try:
                response = await client.post(url, content=body, headers=headers)
                result.status_code = response.status_code
                result.response_body = response.text
                if response.is_success:
                    result.success = True
                    result.error = None
                    break
                result.error = f"HTTP {response.status_code}"
            except httpx.TimeoutException:
                result.error = "Request timeout"
            except httpx.HTTPError as exc:
                result.error = f"HTTP request error: {exc}"
            except Exception as exc:  # noqa: BLE001 - delivery reports, never raises
                result.error = f"Unexpected error: {exc}"

            logger.warning(
                "webhook delivery attempt failed",
                extra={"url": url, "event": event_type, "attempt": attempt, "error": result.error},
            )
            if attempt < config.attempts:
                await self._sleep(next(delays))

        result.total_duration = time.perf_counter() - start
        WEBHOOK_DELIVERIES.labels(event_type, "success" if result.success else "failed").inc()
        WEBHOOK_ATTEMPTS.observe(result.attempts)
        if result.success:
            logger.info(
                "webhook delivered",
                extra={"url": url, "event": event_type, "attempts": result.attempts},
            )
        else:
            logger.error(
                "webhook delivery exhausted retries",
                extra={"url": url, "event": event_type, "attempts": result.attempts},
            )
        return result

    async def deliver_incoming_message(
        self,
        tenant_id: UUID,
        url: str,
        payload: Mapping[str, Any],
        *,
        secret: str | None = None,
    ) -> WebhookDeliveryResult:
        logger.info("delivering incoming message webhook", extra={"tenant_id": str(tenant_id)})
        return await self.deliver(url, "message.received", payload, secret=secret)

    async def deliver_message_status(
        self,
        tenant_id: UUID,
        url: str,
        payload: Mapping[str, Any],
        *,
        secret: str | None = None,
    ) -> WebhookDeliveryResult:
        logger.info("delivering message status webhook", extra={"tenant_id": str(tenant_id)})
        return await self.deliver(url, "message.status", payload, secret=secret)

    async def deliver_session_event(
        self,
        tenant_id: UUID,
        url: str,
        event: str,
        payload: Mapping[str, Any],
        *,
        secret: str | None = None,
    ) -> WebhookDeliveryResult:
        logger.info(
            "delivering session event webhook",
            extra={"tenant_id": str(tenant_id), "event": event},
        )
        return await self.deliver(url, f"session.{event}", payload, secret=secret)
