"""Tenant users with bcrypt-hashed passwords."""

from __future__ import annotations

import logging
from uuid import UUID

import bcrypt
from sqlmodel import Session, col, select

from whatsapp_hub.core.db.models import User
from whatsapp_hub.core.errors import ConflictError, NotFoundError, ValidationError

logger = logging.getLogger(__name__)

ROLES = frozenset({"Admin", "User"})


def hash_password(password: str) -> str:
    return bcrypt.hashpw(password.encode("utf-8"), bcrypt.gensalt(rounds=12)).decode("utf-8")


def verify_password(password: str, password_hash: str) -> bool:
    return bcrypt.checkpw(password.encode("utf-8"), password_hash.encode("utf-8"))


def _check_role(role: str) -> None:
    if role not in ROLES:
        raise ValidationError(f"Invalid role '{role}'. Must be 'Admin' or 'User'")


class UserService:
    """Users are always addressed through their tenant."""

    def __init__(self, session: Session) -> None:
        self._session = session

    def get(self, tenant_id: UUID, user_id: UUID) -> User | None:
        user = self._session.get(User, user_id)
        if user is None or user.tenant_id != tenant_id:
            return None
        return user

    def _require(self, tenant_id: UUID, user_id: UUID) -> User:
        user = self.get(tenant_id, user_id)
        if user is None:
            raise NotFoundError(f"User with ID '{user_id}' not found")
        return user

    def list_for_tenant(self, tenant_id: UUID) -> list[User]:
        statement = select(User).where(User.tenant_id == tenant_id).order_by(col(User.created_at))
        return list(self._session.exec(statement))

    def create(
        self,
        tenant_id: UUID,
        *,
        email: str,
        password: str,
        full_name: str,
        role: str = "User",
    ) -> User:
        email = email.strip().lower()
        if self._session.exec(select(User).where(User.email == email)).first():
            raise ConflictError(f"User with email '{email}' already exists")
        _check_role(role)

        user = User(
            tenant_id=tenant_id,
            email=email,
            password_hash=hash_password(password),
            full_name=full_name,
            role=role,
        )
        self._session.add(user)
        self._session.flush()
        logger.info("user created", extra={"tenant_id": str(tenant_id), "user_id": str(user.id)})
        return user

    def update(
        self,
        tenant_id: UUID,
        user_id: UUID,
        *,
        full_name: str | None = None,
        role: str | None = None,
        is_active: bool | None = None,
    ) -> User:
        user = self._require(tenant_id, user_id)
        if full_name:
            user.full_name = full_name
        if role:
            _check_role(role)
            user.role = role
        if is_active is not None:
            user.is_active = is_active
        self._session.add(user)
        self._session.flush()
        return user

    def update_password(self, tenant_id: UUID, user_id: UUID, new_password: str) -> None:
        user = self._require(tenant_id, user_id)
        user.password_hash = hash_password(new_password)
        self._session.add(user)
        self._session.flush()

    def delete(self, tenant_id: UUID, user_id: UUID) -> bool:
        user = self.get(tenant_id, user_id)
        if user is None:
            return False
        self._session.delete(user)
        self._session.flush()
        return True

    def deactivate(self, tenant_id: UUID, user_id: UUID) -> User:
        user = self._require(tenant_id, user_id)
        user.is_active = False
        self._session.add(user)
        self._session.flush()
        return user
