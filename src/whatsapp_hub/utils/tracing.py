"""Helpers for reading the active OpenTelemetry span."""

from __future__ import annotations

from typing import TypedDict

from opentelemetry.trace import Span, get_current_span


class TraceContext(TypedDict, total=False):
    trace_id: str
    span_id: str


def _format_span_ids(span: Span) -> TraceContext:
    span_context = span.get_span_context()
    if not span_context.is_valid:
        return TraceContext()
    return TraceContext(
        trace_id=f"{span_context.trace_id:032x}",
        span_id=f"{span_context.span_id:016x}",
    )


def get_current_trace_ids() -> TraceContext:
    """Return the active trace/span identifiers if present."""

    return _format_span_ids(get_current_span())
