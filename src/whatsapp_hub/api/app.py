"""FastAPI application factory for the WhatsApp hub API."""

from __future__ import annotations

from collections.abc import AsyncIterator
from contextlib import asynccontextmanager

from fastapi import FastAPI, Request, Response
from fastapi.responses import JSONResponse

from whatsapp_hub.core import background
from whatsapp_hub.core.errors import CoreError
from whatsapp_hub.core.http import HealthResponse
from whatsapp_hub.core.logging import configure_logging, get_logger
from whatsapp_hub.core.middleware import RequestContextMiddleware, metrics_response
from whatsapp_hub.core.telemetry import init_tracing, instrument_fastapi_app
from whatsapp_hub.sessions import create_session_cache

from .dependencies import (
    SessionCacheDep,
    get_bridge_client,
    get_settings,
    get_webhook_delivery,
)
from .routers import agents, messages, providers, sessions, tenants, users, webhooks

logger = get_logger(__name__)

SHUTDOWN_DRAIN_SECONDS = 10.0


@asynccontextmanager
async def lifespan(app: FastAPI) -> AsyncIterator[None]:
    settings = get_settings()
    app.state.session_cache = await create_session_cache(settings.redis)
    try:
        yield
    finally:
        await background.drain(timeout=SHUTDOWN_DRAIN_SECONDS)
        await app.state.session_cache.close()
        await get_bridge_client().close()
        await get_webhook_delivery().close()


async def core_error_handler(request: Request, exc: CoreError) -> JSONResponse:
    if exc.status_code >= 500:
        logger.error("http.core_error", path=request.url.path, error=exc.message, code=exc.code)
    return JSONResponse(status_code=exc.status_code, content=exc.to_dict())


async def unhandled_error_handler(request: Request, exc: Exception) -> JSONResponse:
    logger.exception("http.unhandled_error", path=request.url.path)
    return JSONResponse(status_code=500, content={"error": "Internal server error"})


def create_app() -> FastAPI:
    """Create and configure the FastAPI application."""

    settings = get_settings()
    configure_logging(settings.log_level, force=True)
    init_tracing(settings.service_name, settings.telemetry)

    app = FastAPI(
        title="WhatsApp Hub API",
        version=settings.app_version,
        lifespan=lifespan,
    )

    instrument_fastapi_app(app)
    app.add_middleware(RequestContextMiddleware, service_name=settings.service_name)
    app.add_exception_handler(CoreError, core_error_handler)
    app.add_exception_handler(Exception, unhandled_error_handler)

    @app.get("/health", response_model=HealthResponse, tags=["health"])
    async def health(cache: SessionCacheDep) -> HealthResponse:
        if not cache.enabled:
            cache_state = "disabled"
        elif await cache.is_healthy():
            cache_state = "up"
        else:
            cache_state = "down"
        return HealthResponse(version=settings.app_version, cache=cache_state)

    @app.get("/metrics")
    async def metrics() -> Response:
        return metrics_response()

    app.include_router(sessions.router)
    app.include_router(messages.router)
    app.include_router(providers.router)
    app.include_router(webhooks.router)
    app.include_router(tenants.router)
    app.include_router(users.router)
    app.include_router(agents.router)

    return app
