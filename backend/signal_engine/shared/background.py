"""Detached (fire-and-forget) tasks.

Everything spawned here is best-effort: the caller never awaits it and its
failure is logged, never propagated.
"""

from __future__ import annotations

import asyncio
import logging
from typing import Any, Awaitable, Set

logger = logging.getLogger(__name__)

# The event loop only keeps weak references to tasks.
_running: Set[asyncio.Task] = set()


def _on_done(task: asyncio.Task) -> None:
    _running.discard(task)
    if task.cancelled():
        logger.warning("Detached task cancelled: %s", task.get_name())
        return
    exc = task.exception()
    if exc is not None:
        logger.error(
            "Detached task failed: %s: %s",
            task.get_name(),
            exc,
            exc_info=(type(exc), exc, exc.__traceback__),
        )


def spawn_detached(coro: Awaitable[Any], *, name: str) -> asyncio.Task:
    """Schedule ``coro`` on the running loop without awaiting it."""
    task = asyncio.ensure_future(coro)
    task.set_name(name)
    _running.add(task)
    task.add_done_callback(_on_done)
    return task


def pending_detached_tasks() -> Set[asyncio.Task]:
    return set(_running)


async def drain_detached_tasks() -> None:
    """Wait for all currently detached tasks (used at shutdown and in tests)."""
    while _running:
        await asyncio.gather(*list(_running), return_exceptions=True)
