from uuid import uuid4

import pytest

from whatsapp_hub.core.errors import ConflictError, NotFoundError
from whatsapp_hub.tenants import TenantService

pytestmark = pytest.mark.unit


@pytest.fixture()
def tenants(db) -> TenantService:
    return TenantService(db)


def test_create_and_lookup(tenants) -> None:
    tenant = tenants.create("initech", "Initech", {"webhook_url": "https://hooks.test"})

    assert tenants.get_by_client_id("initech") is tenant
    assert tenants.get_by_id(tenant.id) is tenant
    assert tenant.settings == {"webhook_url": "https://hooks.test"}
    assert tenants.get_by_client_id("unknown") is None


def test_duplicate_client_id_conflicts(tenants, tenant) -> None:
    with pytest.raises(ConflictError):
        tenants.create(tenant.client_id, "Again")


def test_list_all(tenants, tenant, other_tenant) -> None:
    assert {row.client_id for row in tenants.list_all()} == {"acme", "globex"}


def test_update_settings_replaces_the_mapping(tenants, tenant) -> None:
    tenants.update_settings(tenant.id, {"ai_agent_id": "abc"})

    assert tenants.get_by_id(tenant.id).settings == {"ai_agent_id": "abc"}


def test_update_settings_unknown_tenant(tenants) -> None:
    with pytest.raises(NotFoundError):
        tenants.update_settings(uuid4(), {})
