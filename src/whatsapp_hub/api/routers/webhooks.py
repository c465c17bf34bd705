"""Inbound webhooks posted by the Baileys bridge and the Meta verification handshake."""

from __future__ import annotations

import asyncio
from typing import Annotated, Any
from uuid import UUID

from fastapi import APIRouter, Depends, Query, Request, status
from fastapi.responses import JSONResponse, PlainTextResponse
from sqlmodel import Session

from whatsapp_hub.core.background import spawn
from whatsapp_hub.core.db.models import Message
from whatsapp_hub.core.db.repositories import MessageRepository, SessionRepository
from whatsapp_hub.core.domain import MessageStatus, normalize_phone
from whatsapp_hub.core.errors import CoreError, NotFoundError, UnauthorizedError
from whatsapp_hub.core.logging import get_logger
from whatsapp_hub.webhooks import (
    SIGNATURE_HEADER,
    SignatureVerificationError,
    WebhookTarget,
    agent_id_from_settings,
    forward_incoming_message,
    forward_message_status,
    validate_signature,
)
from whatsapp_hub.webhooks.inbound import respond_with_agent

from .. import schemas
from ..dependencies import (
    EngineDep,
    ProviderFactoryDep,
    SessionCacheDep,
    SessionDep,
    SettingsDep,
    WebhookDeliveryDep,
)
from ..tenancy import CurrentTenant

logger = get_logger(__name__)

router = APIRouter(prefix="/api/v1/webhook", tags=["webhooks"])


async def verify_bridge_signature(request: Request, settings: SettingsDep) -> None:
    """Require a valid body signature when an inbound secret is configured."""

    secret = settings.webhook.inbound_secret
    if not secret:
        return
    raw_body = await request.body()
    try:
        validate_signature(secret, raw_body, request.headers.get(SIGNATURE_HEADER))
    except SignatureVerificationError as exc:
        logger.warning("webhook.signature_rejected", path=request.url.path, reason=str(exc))
        raise UnauthorizedError("Invalid webhook signature") from exc


SignedBridge = Depends(verify_bridge_signature)


def _store_incoming_message(
    db: Session,
    tenant_id: UUID,
    payload: schemas.IncomingMessageWebhook,
    sender: str,
    recipient: str,
) -> tuple[UUID, UUID] | None:
    """Persist a received message; returns ``(session id, message row id)``."""

    session_row = SessionRepository(db).get(tenant_id, recipient)
    if session_row is None:
        return None
    message = MessageRepository(db).add(
        Message(
            tenant_id=tenant_id,
            session_id=session_row.id,
            message_id=payload.message_id,
            from_number=sender,
            to_number=recipient,
            message_type=payload.type.value,
            content={
                "text": payload.text_content,
                "mediaUrl": payload.media_url,
                "mediaMimeType": payload.media_mime_type,
                "metadata": payload.metadata,
            },
            status=MessageStatus.RECEIVED.value,
            created_at=payload.timestamp,
        )
    )
    stored = (session_row.id, message.id)
    # Background work reads these rows through its own session.
    db.commit()
    return stored


def _apply_status_update(
    db: Session, tenant_id: UUID, payload: schemas.MessageStatusWebhook
) -> None:
    message = MessageRepository(db).get_by_message_id(payload.message_id)
    if message is None:
        raise NotFoundError("Message not found")
    if message.tenant_id != tenant_id:
        raise UnauthorizedError("Unauthorized to update this message")

    message.status = payload.status.value
    message.updated_at = payload.timestamp
    if payload.error:
        message.content = {**(message.content or {}), "error": payload.error}
    db.add(message)
    db.commit()


@router.post(
    "/incoming-message", response_model=schemas.InfoResponse, dependencies=[SignedBridge]
)
async def incoming_message(
    payload: schemas.IncomingMessageWebhook,
    tenant: CurrentTenant,
    db: SessionDep,
    engine: EngineDep,
    factory: ProviderFactoryDep,
    cache: SessionCacheDep,
    delivery: WebhookDeliveryDep,
) -> Any:
    tenant_id, tenant_settings = tenant.id, dict(tenant.settings or {})
    recipient = normalize_phone(payload.to)
    sender = normalize_phone(payload.from_number)
    stored = await asyncio.to_thread(
        _store_incoming_message, db, tenant_id, payload, sender, recipient
    )
    if stored is None:
        logger.warning(
            "webhook.session_not_found", tenant_id=str(tenant_id), phone_number=recipient
        )
        return JSONResponse(
            status_code=status.HTTP_400_BAD_REQUEST,
            content={"error": "Session not found for recipient phone number"},
        )

    session_id, message_row_id = stored
    logger.info(
        "webhook.message_received",
        tenant_id=str(tenant_id),
        message_id=payload.message_id,
        from_number=sender,
    )

    target = WebhookTarget.from_settings(tenant_settings)
    if target is not None:
        spawn(
            forward_incoming_message(
                delivery,
                tenant_id,
                target,
                payload.model_dump(mode="json", by_alias=True),
            ),
            name=f"forward-incoming-{payload.message_id}",
        )

    agent_id = agent_id_from_settings(tenant_settings)
    if agent_id is not None and payload.text_content:
        spawn(
            respond_with_agent(
                engine,
                factory,
                cache,
                tenant_id=tenant_id,
                agent_id=agent_id,
                session_id=session_id,
                message_row_id=message_row_id,
                from_number=sender,
                text=payload.text_content,
            ),
            name=f"agent-reply-{payload.message_id}",
        )

    return schemas.InfoResponse(message="Webhook received and processed successfully")


@router.post(
    "/status-update", response_model=schemas.InfoResponse, dependencies=[SignedBridge]
)
async def status_update(
    payload: schemas.MessageStatusWebhook,
    tenant: CurrentTenant,
    db: SessionDep,
    delivery: WebhookDeliveryDep,
) -> schemas.InfoResponse:
    tenant_id, tenant_settings = tenant.id, dict(tenant.settings or {})
    await asyncio.to_thread(_apply_status_update, db, tenant_id, payload)
    logger.info(
        "webhook.status_updated",
        tenant_id=str(tenant_id),
        message_id=payload.message_id,
        status=payload.status.value,
    )

    target = WebhookTarget.from_settings(tenant_settings)
    if target is not None:
        spawn(
            forward_message_status(
                delivery,
                tenant_id,
                target,
                payload.model_dump(mode="json", by_alias=True),
            ),
            name=f"forward-status-{payload.message_id}",
        )
    return schemas.InfoResponse(message="Status update processed successfully")


@router.get("/verify", response_class=PlainTextResponse)
def verify_webhook(
    settings: SettingsDep,
    mode: Annotated[str | None, Query(alias="hub.mode")] = None,
    token: Annotated[str | None, Query(alias="hub.verify_token")] = None,
    challenge: Annotated[str | None, Query(alias="hub.challenge")] = None,
) -> PlainTextResponse:
    expected = settings.webhook.verify_token
    if not expected:
        logger.error("webhook.verify_token_missing")
        raise CoreError("Webhook verification not configured")
    if mode == "subscribe" and token == expected:
        return PlainTextResponse(challenge or "")
    logger.warning("webhook.verification_failed", mode=mode)
    raise CoreError("Verification failed", status_code=status.HTTP_403_FORBIDDEN, code="forbidden")
