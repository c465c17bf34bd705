"""OpenTelemetry wiring for the API process and the outbound HTTP clients."""

from __future__ import annotations

import os

from fastapi import FastAPI
from opentelemetry import trace
from opentelemetry.exporter.otlp.proto.http.trace_exporter import OTLPSpanExporter
from opentelemetry.instrumentation.fastapi import FastAPIInstrumentor
from opentelemetry.instrumentation.httpx import HTTPXClientInstrumentor
from opentelemetry.sdk.resources import Resource
from opentelemetry.sdk.trace import TracerProvider
from opentelemetry.sdk.trace.export import BatchSpanProcessor

from .config import TelemetrySettings
from .logging import get_logger

logger = get_logger(__name__)

_TRACING_INITIALISED = False


def init_tracing(service_name: str, settings: TelemetrySettings) -> bool:
    """Install an OTLP-exporting tracer provider; returns whether tracing is active.

    Outbound httpx calls (Baileys bridge, tenant webhooks) are instrumented as
    soon as an exporter exists.
    """

    global _TRACING_INITIALISED
    if _TRACING_INITIALISED:
        return True

    endpoint = (
        settings.exporter_endpoint
        or os.getenv("OTEL_EXPORTER_OTLP_ENDPOINT")
        or os.getenv("OTEL_EXPORTER_OTLP_TRACES_ENDPOINT")
    )
    if not endpoint:
        logger.warning("tracing.disabled", service_name=service_name, reason="no_endpoint")
        return False

    try:
        exporter = OTLPSpanExporter(
            endpoint=endpoint,
            headers=parse_exporter_headers(settings.exporter_headers),
        )
    except Exception:  # pragma: no cover - exporter misconfiguration
        logger.exception("tracing.exporter_failed", service_name=service_name)
        return False

    tracer_provider = TracerProvider(resource=Resource.create({"service.name": service_name}))
    tracer_provider.add_span_processor(BatchSpanProcessor(exporter))
    trace.set_tracer_provider(tracer_provider)
    HTTPXClientInstrumentor().instrument()
    _TRACING_INITIALISED = True
    logger.info("tracing.enabled", service_name=service_name, endpoint=endpoint)
    return True


def is_tracing_enabled() -> bool:
    return _TRACING_INITIALISED


def instrument_fastapi_app(app: FastAPI) -> None:
    """Attach OpenTelemetry instrumentation to a FastAPI application."""

    tracer_provider = trace.get_tracer_provider()
    if isinstance(tracer_provider, TracerProvider):
        FastAPIInstrumentor.instrument_app(app, tracer_provider=tracer_provider)
    else:
        FastAPIInstrumentor.instrument_app(app)


def parse_exporter_headers(header_value: str | None) -> dict[str, str] | None:
    """Parse ``key=value,key2=value2`` into a dict for OTLP exporters."""

    if not header_value:
        return None

    headers: dict[str, str] = {}
    for part in (segment.strip() for segment in header_value.split(",")):
        if not part:
            continue
        if "=" not in part:
            logger.warning("tracing.header_ignored", segment=part)
            continue
        key, value = part.split("=", 1)
        headers[key.strip()] = value.strip()
    return headers or None
