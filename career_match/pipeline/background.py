"""Detached background writes whose failures only reach the log."""

import asyncio
import functools
import logging
from collections.abc import Coroutine
from typing import Any

logger = logging.getLogger(__name__)


class BackgroundWriter:
    """Runs fire-and-forget coroutines next to the request path.

    Usage::

        writer = BackgroundWriter()
        writer.submit(store.update(record_id, fields), "talent status update")
        ...
        await writer.drain()  # at shutdown, never on the request path
    """

    def __init__(self) -> None:
        self._tasks: set[asyncio.Task[Any]] = set()

    @property
    def pending(self) -> int:
        return len(self._tasks)

    def submit(self, coro: Coroutine[Any, Any, Any], description: str) -> asyncio.Task[Any]:
        task = asyncio.create_task(coro)
        self._tasks.add(task)
        task.add_done_callback(functools.partial(self._on_done, description))
        return task

    def _on_done(self, description: str, task: asyncio.Task[Any]) -> None:
        self._tasks.discard(task)
        if task.cancelled():
            logger.warning("Background %s was cancelled", description)
            return
        exc = task.exception()
        if exc is not None:
            logger.warning("Background %s failed: %s", description, exc, exc_info=exc)
        else:
            logger.debug("Background %s done", description)

    async def drain(self, timeout: float | None = None) -> None:
        """Wait for outstanding writes (up to ``timeout`` seconds)."""
        if self._tasks:
            await asyncio.wait(set(self._tasks), timeout=timeout)
