"""Utility helpers shared across services."""

from .retry import RetryConfig, backoff_delays, exponential_backoff
from .tracing import TraceContext, get_current_trace_ids

__all__ = [
    "RetryConfig",
    "TraceContext",
    "backoff_delays",
    "exponential_backoff",
    "get_current_trace_ids",
]
