"""Structlog configuration with trace enrichment and phone number masking."""

from __future__ import annotations

import logging
from collections.abc import MutableMapping
from typing import Any

import structlog

from whatsapp_hub.utils.tracing import TraceContext, get_current_trace_ids

_CONFIGURED = False

# Event keys that carry subscriber phone numbers.
PHONE_FIELDS = frozenset({"phone", "phone_number", "to", "from_number", "to_number"})


def mask_phone(value: str) -> str:
    """Keep the last four digits of a phone number visible."""

    digits = value.strip()
    if len(digits) <= 4:
        return "*" * len(digits)
    return "*" * (len(digits) - 4) + digits[-4:]


def _otel_enricher(
    _: Any,
    __: str,
    event_dict: MutableMapping[str, Any],
) -> MutableMapping[str, Any]:
    trace_context: TraceContext = get_current_trace_ids()
    if trace_context.get("trace_id"):
        event_dict.setdefault("trace_id", trace_context["trace_id"])
    if trace_context.get("span_id"):
        event_dict.setdefault("span_id", trace_context["span_id"])
    return event_dict


def _phone_masker(
    _: Any,
    __: str,
    event_dict: MutableMapping[str, Any],
) -> MutableMapping[str, Any]:
    for key in PHONE_FIELDS.intersection(event_dict):
        value = event_dict[key]
        if isinstance(value, str):
            event_dict[key] = mask_phone(value)
    return event_dict


def _coerce_level(level: int | str) -> int:
    if isinstance(level, int):
        return level
    resolved = logging.getLevelName(level.upper())
    return resolved if isinstance(resolved, int) else logging.INFO


def configure_logging(level: int | str = logging.INFO, *, force: bool = False) -> None:
    """Configure structlog with JSON output, OTEL context and masked phone numbers.

    Safe to call repeatedly; only the first call takes effect unless ``force``
    is set, which the app factory uses to apply the configured level.
    """

    global _CONFIGURED
    if _CONFIGURED and not force:
        return

    numeric_level = _coerce_level(level)
    logging.basicConfig(format="%(message)s", level=numeric_level, force=force)

    structlog.configure(
        processors=[
            structlog.contextvars.merge_contextvars,
            structlog.processors.add_log_level,
            structlog.processors.TimeStamper(fmt="iso", key="timestamp"),
            _otel_enricher,
            _phone_masker,
            structlog.processors.StackInfoRenderer(),
            structlog.processors.format_exc_info,
            structlog.processors.JSONRenderer(),
        ],
        wrapper_class=structlog.make_filtering_bound_logger(numeric_level),
        logger_factory=structlog.PrintLoggerFactory(),
        cache_logger_on_first_use=True,
    )

    _CONFIGURED = True


def get_logger(name: str | None = None, **initial_values: Any) -> structlog.stdlib.BoundLogger:
    """Return a structlog logger bound to ``name`` and any initial context."""

    configure_logging()
    if name is None:
        return structlog.get_logger(**initial_values)
    return structlog.get_logger(name, **initial_values)
