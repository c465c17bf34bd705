"""Outbound message routes and message history."""

from __future__ import annotations

import base64
import binascii
from typing import Annotated

from fastapi import APIRouter, Query, status
from fastapi.responses import JSONResponse

from whatsapp_hub.core.domain import MessageResult
from whatsapp_hub.core.errors import NotFoundError, ValidationError

from .. import schemas
from ..dependencies import MessageServiceDep
from ..tenancy import CurrentTenant

router = APIRouter(prefix="/api/v1/message", tags=["messages"])


def _decode(data: str, error: str) -> bytes:
    try:
        return base64.b64decode(data, validate=True)
    except (binascii.Error, ValueError) as exc:
        raise ValidationError(error) from exc


def _result_response(result: MessageResult) -> JSONResponse:
    """200 with the send result, or 400 carrying the same body when it failed."""

    body = schemas.MessageResultResponse.from_result(result).model_dump(mode="json", by_alias=True)
    code = status.HTTP_200_OK if result.succeeded else status.HTTP_400_BAD_REQUEST
    return JSONResponse(status_code=code, content=body)


@router.post("/text", response_model=schemas.MessageResultResponse)
async def send_text(
    payload: schemas.SendTextRequest,
    tenant: CurrentTenant,
    messages: MessageServiceDep,
) -> JSONResponse:
    result = await messages.send_text(tenant.id, payload.to, payload.content)
    return _result_response(result)


@router.post("/media", response_model=schemas.MessageResultResponse)
async def send_media(
    payload: schemas.SendMediaRequest,
    tenant: CurrentTenant,
    messages: MessageServiceDep,
) -> JSONResponse:
    media = _decode(payload.media_base64, "Invalid base64 media data")
    result = await messages.send_media(
        tenant.id, payload.to, media, payload.media_type, payload.caption
    )
    return _result_response(result)


@router.post("/location", response_model=schemas.MessageResultResponse)
async def send_location(
    payload: schemas.SendLocationRequest,
    tenant: CurrentTenant,
    messages: MessageServiceDep,
) -> JSONResponse:
    result = await messages.send_location(
        tenant.id, payload.to, payload.latitude, payload.longitude
    )
    return _result_response(result)


@router.post("/audio", response_model=schemas.MessageResultResponse)
async def send_audio(
    payload: schemas.SendAudioRequest,
    tenant: CurrentTenant,
    messages: MessageServiceDep,
) -> JSONResponse:
    audio = _decode(payload.audio_base64, "Invalid base64 audio data")
    result = await messages.send_audio(tenant.id, payload.to, audio)
    return _result_response(result)


@router.get("/history", response_model=list[schemas.MessageResponse])
def get_message_history(
    tenant: CurrentTenant,
    messages: MessageServiceDep,
    phone_number: Annotated[str, Query(alias="phoneNumber", min_length=1)],
    limit: Annotated[int, Query(ge=1, le=500)] = 50,
) -> list[schemas.MessageResponse]:
    rows = messages.get_message_history(tenant.id, phone_number, limit=limit)
    return [schemas.MessageResponse.model_validate(row) for row in rows]


@router.get("/conversations", response_model=list[schemas.ConversationResponse])
def get_conversations(
    tenant: CurrentTenant,
    messages: MessageServiceDep,
) -> list[schemas.ConversationResponse]:
    return [
        schemas.ConversationResponse.model_validate(entry)
        for entry in messages.get_conversations(tenant.id)
    ]


@router.get("/{message_id}/status", response_model=schemas.MessageResponse)
def get_message_status(
    message_id: str,
    tenant: CurrentTenant,
    messages: MessageServiceDep,
) -> schemas.MessageResponse:
    message = messages.get_message_status(tenant.id, message_id)
    if message is None:
        raise NotFoundError("Message not found")
    return schemas.MessageResponse.model_validate(message)
