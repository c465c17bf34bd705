"""Shared stubs for unit tests: in-memory database, Baileys bridge and Redis."""

from __future__ import annotations

import fnmatch
import json
from collections.abc import AsyncIterator, Generator
from typing import Any

import httpx
import pytest
from sqlalchemy.engine import Engine
from sqlalchemy.pool import StaticPool
from sqlmodel import Session, SQLModel, create_engine

from whatsapp_hub.core.config import BaileysSettings
from whatsapp_hub.core.db.models import Tenant
from whatsapp_hub.providers import BaileysBridgeClient, ProviderFactory
from whatsapp_hub.sessions import SessionCacheService, SessionService


class BridgeStub:
    """In-memory stand-in for the Baileys Node bridge, served through ``httpx.MockTransport``."""

    def __init__(self) -> None:
        self.init_response: dict[str, Any] = {"status": "qr_ready", "qrCode": "QR-DATA"}
        self.init_status_code = 200
        self.status_responses: dict[str, dict[str, Any]] = {}
        self.send_status_code = 200
        self.requests: list[httpx.Request] = []
        self.sent: list[tuple[str, dict[str, Any]]] = []
        self.deleted: list[str] = []
        self.unreachable = False
        self._counter = 0

    def set_status(self, session_id: str, status: str, qr_code: str | None = None) -> None:
        payload: dict[str, Any] = {"status": status}
        if qr_code:
            payload["qrCode"] = qr_code
        self.status_responses[session_id] = payload

    def requests_to(self, method: str, prefix: str) -> list[httpx.Request]:
        return [
            request
            for request in self.requests
            if request.method == method and request.url.path.startswith(prefix)
        ]

    def handler(self, request: httpx.Request) -> httpx.Response:
        self.requests.append(request)
        if self.unreachable:
            raise httpx.ConnectError("bridge down", request=request)

        path = request.url.path
        if request.method == "POST" and path == "/api/sessions/initialize":
            if self.init_status_code >= 400:
                return httpx.Response(self.init_status_code, text="bridge rejected")
            session_id = json.loads(request.content)["sessionId"]
            self.status_responses.setdefault(session_id, dict(self.init_response))
            return httpx.Response(200, json=self.init_response)
        if request.method == "GET" and path.startswith("/api/sessions/"):
            session_id = path.split("/")[3]
            return httpx.Response(
                200, json=self.status_responses.get(session_id, {"status": "disconnected"})
            )
        if request.method == "DELETE" and path.startswith("/api/sessions/"):
            session_id = path.split("/")[3]
            self.deleted.append(session_id)
            self.status_responses.pop(session_id, None)
            return httpx.Response(200, json={"success": True})
        if request.method == "POST" and path.startswith("/api/messages/"):
            if self.send_status_code >= 400:
                return httpx.Response(self.send_status_code, text="send rejected")
            self._counter += 1
            self.sent.append((path.rsplit("/", 1)[-1], json.loads(request.content)))
            return httpx.Response(200, json={"messageId": f"wamid-{self._counter}"})
        return httpx.Response(404)


class FakeRedis:
    """Subset of ``redis.asyncio.Redis`` used by the session cache."""

    def __init__(self) -> None:
        self.values: dict[str, str] = {}
        self.ttls: dict[str, Any] = {}
        self.closed = False

    async def get(self, key: str) -> str | None:
        return self.values.get(key)

    async def set(self, key: str, value: str, ex: Any = None) -> None:
        self.values[key] = value
        self.ttls[key] = ex

    async def delete(self, *keys: str) -> int:
        removed = 0
        for key in keys:
            if self.values.pop(key, None) is not None:
                removed += 1
        return removed

    async def scan_iter(self, match: str = "*") -> AsyncIterator[str]:
        for key in list(self.values):
            if fnmatch.fnmatch(key, match):
                yield key

    async def ping(self) -> bool:
        return True

    async def aclose(self) -> None:
        self.closed = True


@pytest.fixture()
def engine() -> Engine:
    engine = create_engine(
        "sqlite://",
        connect_args={"check_same_thread": False},
        poolclass=StaticPool,
    )
    SQLModel.metadata.create_all(engine)
    return engine


@pytest.fixture()
def db(engine: Engine) -> Generator[Session, None, None]:
    with Session(engine) as session:
        yield session


@pytest.fixture()
def tenant(db: Session) -> Tenant:
    tenant = Tenant(client_id="acme", name="Acme Ltda", settings={})
    db.add(tenant)
    db.commit()
    db.refresh(tenant)
    return tenant


@pytest.fixture()
def other_tenant(db: Session) -> Tenant:
    tenant = Tenant(client_id="globex", name="Globex", settings={})
    db.add(tenant)
    db.commit()
    db.refresh(tenant)
    return tenant


@pytest.fixture()
def bridge_stub() -> BridgeStub:
    return BridgeStub()


@pytest.fixture()
def bridge(bridge_stub: BridgeStub) -> BaileysBridgeClient:
    settings = BaileysSettings(
        _env_file=None,
        url="http://bridge.test",
        qr_poll_attempts=3,
        qr_poll_delay_seconds=0.0,
    )
    return BaileysBridgeClient(settings, transport=httpx.MockTransport(bridge_stub.handler))


@pytest.fixture()
def factory(bridge: BaileysBridgeClient) -> ProviderFactory:
    return ProviderFactory(bridge)


@pytest.fixture()
def fake_redis() -> FakeRedis:
    return FakeRedis()


@pytest.fixture()
def cache(fake_redis: FakeRedis) -> SessionCacheService:
    return SessionCacheService(fake_redis)  # type: ignore[arg-type]


@pytest.fixture()
def session_service(
    db: Session, factory: ProviderFactory, cache: SessionCacheService
) -> SessionService:
    return SessionService(db, factory, cache)
