"""WhatsApp session lifecycle routes."""

from __future__ import annotations

from typing import Annotated

from fastapi import APIRouter, Query

from whatsapp_hub.core.background import spawn
from whatsapp_hub.core.domain import STATUS_NOT_FOUND
from whatsapp_hub.core.errors import NotFoundError, ValidationError
from whatsapp_hub.core.logging import get_logger
from whatsapp_hub.webhooks import WebhookTarget, forward_session_event

from .. import schemas
from ..dependencies import SessionServiceDep, WebhookDeliveryDep
from ..tenancy import CurrentTenant

logger = get_logger(__name__)

router = APIRouter(prefix="/api/v1/session", tags=["sessions"])

PhoneQuery = Annotated[str | None, Query(alias="phoneNumber")]


def _require_phone(phone_number: str | None) -> str:
    if not phone_number or not phone_number.strip():
        raise ValidationError("Phone number is required")
    return phone_number


@router.post("/initialize", response_model=schemas.SessionStatusResponse)
async def initialize_session(
    payload: schemas.InitializeSessionRequest,
    tenant: CurrentTenant,
    sessions: SessionServiceDep,
    delivery: WebhookDeliveryDep,
) -> schemas.SessionStatusResponse:
    logger.info(
        "session.initialize_requested",
        tenant_id=str(tenant.id),
        phone_number=payload.phone_number,
        provider=payload.provider_type.value,
    )
    status = await sessions.initialize_session(
        tenant.id, payload.phone_number, payload.provider_type
    )

    target = WebhookTarget.from_settings(tenant.settings)
    if target is not None:
        spawn(
            forward_session_event(
                delivery,
                tenant.id,
                target,
                "initialized",
                {
                    "phoneNumber": status.phone_number,
                    "status": status.status,
                    "qrCode": status.qr_code,
                },
            ),
            name=f"session-event-{tenant.id}",
        )
    return schemas.SessionStatusResponse.from_status(status)


@router.get("/status", response_model=schemas.SessionStatusResponse)
async def get_session_status(
    tenant: CurrentTenant,
    sessions: SessionServiceDep,
    phone_number: PhoneQuery = None,
) -> schemas.SessionStatusResponse:
    status = await sessions.get_session_status(tenant.id, _require_phone(phone_number))
    if status.status == STATUS_NOT_FOUND:
        raise NotFoundError("Session not found")
    return schemas.SessionStatusResponse.from_status(status)


@router.get("", response_model=list[schemas.SessionResponse])
async def list_sessions(
    tenant: CurrentTenant,
    sessions: SessionServiceDep,
) -> list[schemas.SessionResponse]:
    records = await sessions.get_tenant_sessions(tenant.id)
    return [schemas.SessionResponse.from_record(record) for record in records]


@router.delete("/disconnect", response_model=schemas.InfoResponse)
async def disconnect_session(
    tenant: CurrentTenant,
    sessions: SessionServiceDep,
    phone_number: PhoneQuery = None,
) -> schemas.InfoResponse:
    disconnected = await sessions.disconnect_session(tenant.id, _require_phone(phone_number))
    if not disconnected:
        raise NotFoundError("Session not found")
    return schemas.InfoResponse(message="Session disconnected successfully")


@router.get("/qrcode", response_model=schemas.QrCodeResponse)
async def get_qr_code(
    tenant: CurrentTenant,
    sessions: SessionServiceDep,
    phone_number: PhoneQuery = None,
) -> schemas.QrCodeResponse:
    qr_code = await sessions.get_qr_code(tenant.id, _require_phone(phone_number))
    if not qr_code:
        raise NotFoundError("Session not found")
    return schemas.QrCodeResponse(qr_code=qr_code)
