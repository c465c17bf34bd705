"""App fixtures: the real application wired to the in-memory database and bridge stub."""

from __future__ import annotations

from collections.abc import Generator
from typing import Any

import pytest
from fastapi import FastAPI
from fastapi.testclient import TestClient

from whatsapp_hub.api import create_app, dependencies
from whatsapp_hub.api.routers import sessions as sessions_router
from whatsapp_hub.api.routers import webhooks as webhooks_router


@pytest.fixture()
def app(monkeypatch: pytest.MonkeyPatch, engine, factory) -> Generator[FastAPI, None, None]:
    monkeypatch.setenv("REDIS_ENABLED", "false")
    monkeypatch.delenv("WEBHOOK_VERIFY_TOKEN", raising=False)
    dependencies.get_settings.cache_clear()

    app = create_app()
    app.dependency_overrides[dependencies.get_engine] = lambda: engine
    app.dependency_overrides[dependencies.get_provider_factory] = lambda: factory

    yield app

    app.dependency_overrides.clear()
    dependencies.get_settings.cache_clear()


@pytest.fixture()
def spawned(monkeypatch: pytest.MonkeyPatch) -> list[str]:
    """Records the names of background tasks instead of running them."""

    calls: list[str] = []

    def fake_spawn(coro: Any, *, name: str) -> None:
        calls.append(name)
        coro.close()

    monkeypatch.setattr(sessions_router, "spawn", fake_spawn)
    monkeypatch.setattr(webhooks_router, "spawn", fake_spawn)
    return calls


@pytest.fixture()
def client(app: FastAPI, spawned, tenant) -> Generator[TestClient, None, None]:
    with TestClient(app) as test_client:
        yield test_client
