from uuid import uuid4

import pytest

from whatsapp_hub.core.errors import ConflictError, NotFoundError, ValidationError
from whatsapp_hub.users import UserService, hash_password, verify_password

pytestmark = pytest.mark.unit


@pytest.fixture()
def users(db) -> UserService:
    return UserService(db)


def test_password_hashing() -> None:
    hashed = hash_password("s3cret")

    assert hashed != "s3cret"
    assert hashed.startswith("$2")
    assert verify_password("s3cret", hashed)
    assert not verify_password("wrong", hashed)


def test_create_normalizes_email_and_hashes(users, tenant) -> None:
    user = users.create(tenant.id, email="  Ana@Example.COM ", password="pw", full_name="Ana")

    assert user.email == "ana@example.com"
    assert user.role == "User"
    assert user.is_active is True
    assert verify_password("pw", user.password_hash)


def test_email_is_unique_across_tenants(users, tenant, other_tenant) -> None:
    users.create(tenant.id, email="ana@example.com", password="pw", full_name="Ana")

    with pytest.raises(ConflictError):
        users.create(other_tenant.id, email="ANA@example.com", password="pw", full_name="Ana")


def test_invalid_role_is_rejected(users, tenant) -> None:
    with pytest.raises(ValidationError):
        users.create(tenant.id, email="a@b.c", password="pw", full_name="A", role="Owner")

    user = users.create(tenant.id, email="a@b.c", password="pw", full_name="A", role="Admin")
    with pytest.raises(ValidationError):
        users.update(tenant.id, user.id, role="root")


def test_update_password_and_deactivate(users, tenant) -> None:
    user = users.create(tenant.id, email="a@b.c", password="old", full_name="A")

    users.update(tenant.id, user.id, full_name="Alice", role="Admin")
    users.update_password(tenant.id, user.id, "new")
    users.deactivate(tenant.id, user.id)

    assert user.full_name == "Alice"
    assert user.role == "Admin"
    assert verify_password("new", user.password_hash)
    assert user.is_active is False


def test_users_are_tenant_scoped(users, tenant, other_tenant) -> None:
    user = users.create(tenant.id, email="a@b.c", password="pw", full_name="A")

    assert users.get(other_tenant.id, user.id) is None
    assert users.list_for_tenant(other_tenant.id) == []
    assert users.delete(other_tenant.id, user.id) is False
    with pytest.raises(NotFoundError):
        users.update(other_tenant.id, user.id, full_name="B")

    assert users.delete(tenant.id, user.id) is True
    assert users.get(tenant.id, uuid4()) is None
