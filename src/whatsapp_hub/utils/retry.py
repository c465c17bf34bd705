"""Retry helpers for IO-bound operations."""

from __future__ import annotations

import random
from collections.abc import Iterator
from dataclasses import dataclass


@dataclass(frozen=True)
class RetryConfig:
    """Configuration controlling retry behaviour.

    ``attempts`` counts every try, including the first one.
    """

    attempts: int = 4
    base_delay: float = 1.0
    backoff: float = 2.0
    max_delay: float = 60.0
    jitter: float = 0.0

    @classmethod
    def from_max_retries(cls, max_retries: int, **kwargs: float) -> RetryConfig:
        return cls(attempts=max(max_retries, 0) + 1, **kwargs)


def exponential_backoff(
    attempt: int,
    *,
    base: float = 1.0,
    factor: float = 2.0,
    max_delay: float = 60.0,
    jitter: float = 0.0,
) -> float:
    """Delay before the retry following zero-based ``attempt``: 1, 2, 4, ... seconds."""

    delay = min(base * (factor ** max(attempt, 0)), max_delay)
    if jitter:
        delay += random.uniform(0, jitter)
    return delay


def backoff_delays(config: RetryConfig) -> Iterator[float]:
    """Yield the sleep that follows each failed attempt except the last."""

    for attempt in range(config.attempts - 1):
        yield exponential_backoff(
            attempt,
            base=config.base_delay,
            factor=config.backoff,
            max_delay=config.max_delay,
            jitter=config.jitter,
        )
