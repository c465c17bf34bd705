"""Fire-and-forget task spawning for work that must not delay a response."""

from __future__ import annotations

import asyncio
from collections.abc import Coroutine
from typing import Any

from .logging import get_logger

logger = get_logger(__name__)

# Strong references; the event loop only keeps weak ones.
_background_tasks: set[asyncio.Task[Any]] = set()


def spawn(coro: Coroutine[Any, Any, Any], *, name: str) -> asyncio.Task[Any]:
    """Schedule ``coro`` detached from the caller; failures are only logged."""

    task = asyncio.create_task(coro, name=name)
    _background_tasks.add(task)
    task.add_done_callback(_on_done)
    return task


def _on_done(task: asyncio.Task[Any]) -> None:
    _background_tasks.discard(task)
    if task.cancelled():
        return
    exc = task.exception()
    if exc is not None:
        logger.error(
            "background.task_failed",
            task=task.get_name(),
            error=str(exc),
            exc_info=exc,
        )


def pending_tasks() -> set[asyncio.Task[Any]]:
    return set(_background_tasks)


async def drain(timeout: float | None = None) -> None:
    """Wait for outstanding background tasks, e.g. on shutdown or in tests."""

    tasks = pending_tasks()
    if tasks:
        await asyncio.wait(tasks, timeout=timeout)
