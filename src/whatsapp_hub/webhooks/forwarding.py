"""Tenant-configured webhook targets and background forwarding."""

from __future__ import annotations

from collections.abc import Mapping
from dataclasses import dataclass
from typing import Any
from uuid import UUID

from whatsapp_hub.core.logging import get_logger

from .delivery import WebhookDeliveryService

logger = get_logger(__name__)

WEBHOOK_URL_SETTING = "webhook_url"
WEBHOOK_SECRET_SETTING = "webhook_secret"
AI_AGENT_SETTING = "ai_agent_id"


@dataclass(slots=True, frozen=True)
class WebhookTarget:
    url: str
    secret: str | None = None

    @classmethod
    def from_settings(cls, settings: Mapping[str, Any] | None) -> WebhookTarget | None:
        """Target from tenant settings; ``None`` when no ``webhook_url`` is configured."""

        settings = settings or {}
        url = settings.get(WEBHOOK_URL_SETTING)
        if not url:
            return None
        secret = settings.get(WEBHOOK_SECRET_SETTING)
        return cls(url=str(url), secret=str(secret) if secret else None)


def agent_id_from_settings(settings: Mapping[str, Any] | None) -> UUID | None:
    raw = (settings or {}).get(AI_AGENT_SETTING)
    if not raw:
        return None
    try:
        return UUID(str(raw))
    except ValueError:
        logger.warning("webhook.invalid_agent_id", value=str(raw))
        return None


async def forward_incoming_message(
    delivery: WebhookDeliveryService,
    tenant_id: UUID,
    target: WebhookTarget,
    payload: Mapping[str, Any],
) -> None:
    result = await delivery.deliver_incoming_message(
        tenant_id, target.url, payload, secret=target.secret
    )
    if not result.success:
        logger.warning("webhook.forward_failed", tenant_id=str(tenant_id), error=result.error)


async def forward_message_status(
    delivery: WebhookDeliveryService,
    tenant_id: UUID,
    target: WebhookTarget,
    payload: Mapping[str, Any],
) -> None:
    result = await delivery.deliver_message_status(
        tenant_id, target.url, payload, secret=target.secret
    )
    if not result.success:
        logger.warning("webhook.forward_failed", tenant_id=str(tenant_id), error=result.error)


async def forward_session_event(
    delivery: WebhookDeliveryService,
    tenant_id: UUID,
    target: WebhookTarget,
    event: str,
    payload: Mapping[str, Any],
) -> None:
    result = await delivery.deliver_session_event(
        tenant_id, target.url, event, payload, secret=target.secret
    )
    if not result.success:
        logger.warning(
            "webhook.forward_failed", tenant_id=str(tenant_id), event=event, error=result.error
        )
