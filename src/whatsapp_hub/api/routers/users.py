"""Tenant user management routes."""

from __future__ import annotations

from uuid import UUID

from fastapi import APIRouter, Response, status

from whatsapp_hub.core.errors import NotFoundError

from .. import schemas
from ..dependencies import UserServiceDep
from ..tenancy import CurrentTenant

router = APIRouter(prefix="/api/v1/user", tags=["users"])


@router.get("", response_model=list[schemas.UserResponse])
def list_users(tenant: CurrentTenant, users: UserServiceDep) -> list[schemas.UserResponse]:
    return [schemas.UserResponse.model_validate(user) for user in users.list_for_tenant(tenant.id)]


@router.get("/{user_id}", response_model=schemas.UserResponse)
def get_user(user_id: UUID, tenant: CurrentTenant, users: UserServiceDep) -> schemas.UserResponse:
    user = users.get(tenant.id, user_id)
    if user is None:
        raise NotFoundError("User not found")
    return schemas.UserResponse.model_validate(user)


@router.post("", response_model=schemas.UserResponse, status_code=status.HTTP_201_CREATED)
def create_user(
    payload: schemas.UserCreateRequest,
    tenant: CurrentTenant,
    users: UserServiceDep,
) -> schemas.UserResponse:
    user = users.create(
        tenant.id,
        email=payload.email,
        password=payload.password,
        full_name=payload.full_name,
        role=payload.role,
    )
    return schemas.UserResponse.model_validate(user)


@router.put("/{user_id}", response_model=schemas.UserResponse)
def update_user(
    user_id: UUID,
    payload: schemas.UserUpdateRequest,
    tenant: CurrentTenant,
    users: UserServiceDep,
) -> schemas.UserResponse:
    user = users.update(
        tenant.id,
        user_id,
        full_name=payload.full_name,
        role=payload.role,
        is_active=payload.is_active,
    )
    return schemas.UserResponse.model_validate(user)


@router.put("/{user_id}/password", status_code=status.HTTP_204_NO_CONTENT)
def update_password(
    user_id: UUID,
    payload: schemas.PasswordUpdateRequest,
    tenant: CurrentTenant,
    users: UserServiceDep,
) -> Response:
    users.update_password(tenant.id, user_id, payload.new_password)
    return Response(status_code=status.HTTP_204_NO_CONTENT)


@router.post("/{user_id}/deactivate", status_code=status.HTTP_204_NO_CONTENT)
def deactivate_user(user_id: UUID, tenant: CurrentTenant, users: UserServiceDep) -> Response:
    users.deactivate(tenant.id, user_id)
    return Response(status_code=status.HTTP_204_NO_CONTENT)


@router.delete("/{user_id}", status_code=status.HTTP_204_NO_CONTENT)
def delete_user(user_id: UUID, tenant: CurrentTenant, users: UserServiceDep) -> Response:
    if not users.delete(tenant.id, user_id):
        raise NotFoundError("User not found")
    return Response(status_code=status.HTTP_204_NO_CONTENT)
