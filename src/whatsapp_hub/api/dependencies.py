"""Dependency wiring for the WhatsApp hub FastAPI application."""

from __future__ import annotations

from collections.abc import Iterator
from functools import lru_cache
from typing import Annotated

from fastapi import Depends, Request
from sqlalchemy.engine import Engine
from sqlmodel import Session

from whatsapp_hub.agents import AIAgentService, AgentTemplateService
from whatsapp_hub.core.config import AppSettings
from whatsapp_hub.core.db.session import create_engine_from_settings, init_db
from whatsapp_hub.messaging import MessageService
from whatsapp_hub.providers import BaileysBridgeClient, ProviderFactory
from whatsapp_hub.sessions import SessionCacheService, SessionService
from whatsapp_hub.tenants import TenantService
from whatsapp_hub.users import UserService
from whatsapp_hub.webhooks import WebhookDeliveryService


@lru_cache
def get_settings() -> AppSettings:
    """Return cached ``AppSettings`` instance."""

    return AppSettings.load()


@lru_cache
def get_engine() -> Engine:
    """Create (or reuse) the SQLModel engine."""

    settings = get_settings()
    engine = create_engine_from_settings(settings)
    init_db(engine)
    return engine


def get_session(engine: Annotated[Engine, Depends(get_engine)]) -> Iterator[Session]:
    """Provide a SQLModel session per-request."""

    with Session(engine) as session:
        try:
            yield session
            session.commit()
        except Exception:
            session.rollback()
            raise


@lru_cache
def get_bridge_client() -> BaileysBridgeClient:
    return BaileysBridgeClient(get_settings().baileys)


@lru_cache
def get_provider_factory() -> ProviderFactory:
    """Process-wide factory so provider health survives across requests."""

    return ProviderFactory(get_bridge_client())


@lru_cache
def get_webhook_delivery() -> WebhookDeliveryService:
    return WebhookDeliveryService(get_settings().webhook)


@lru_cache
def get_template_service() -> AgentTemplateService:
    return AgentTemplateService()


def get_session_cache(request: Request) -> SessionCacheService:
    """The cache opened at startup, or a disabled one when startup did not run."""

    cache = getattr(request.app.state, "session_cache", None)
    if cache is None:
        return SessionCacheService(None)
    return cache


SettingsDep = Annotated[AppSettings, Depends(get_settings)]
EngineDep = Annotated[Engine, Depends(get_engine)]
SessionDep = Annotated[Session, Depends(get_session)]
ProviderFactoryDep = Annotated[ProviderFactory, Depends(get_provider_factory)]
SessionCacheDep = Annotated[SessionCacheService, Depends(get_session_cache)]
WebhookDeliveryDep = Annotated[WebhookDeliveryService, Depends(get_webhook_delivery)]
TemplateServiceDep = Annotated[AgentTemplateService, Depends(get_template_service)]


def get_tenant_service(session: SessionDep) -> TenantService:
    return TenantService(session)


def get_session_service(
    session: SessionDep,
    factory: ProviderFactoryDep,
    cache: SessionCacheDep,
) -> SessionService:
    """Build a session service bound to the active DB session."""

    return SessionService(session, factory, cache)


SessionServiceDep = Annotated[SessionService, Depends(get_session_service)]


def get_message_service(session: SessionDep, sessions: SessionServiceDep) -> MessageService:
    return MessageService(session, sessions)


def get_user_service(session: SessionDep) -> UserService:
    return UserService(session)


def get_agent_service(session: SessionDep, templates: TemplateServiceDep) -> AIAgentService:
    return AIAgentService(session, templates)


TenantServiceDep = Annotated[TenantService, Depends(get_tenant_service)]
MessageServiceDep = Annotated[MessageService, Depends(get_message_service)]
UserServiceDep = Annotated[UserService, Depends(get_user_service)]
AgentServiceDep = Annotated[AIAgentService, Depends(get_agent_service)]
