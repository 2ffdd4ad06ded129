"""
Detached background tasks.

Work spawned here is never awaited by the request that triggered it and is
not tied to that request's cancellation: each task runs in its own asyncio
task under its own timeout. Failures are logged and dropped.
"""

from __future__ import annotations

import asyncio
import logging
from collections.abc import Coroutine
from typing import Any

logger = logging.getLogger(__name__)


class DetachedTasks:
    def __init__(self, *, timeout_s: float | None = None) -> None:
        self._timeout_s = timeout_s if timeout_s and timeout_s > 0 else None
        # The event loop only keeps weak references to tasks.
        self._tasks: set[asyncio.Task[None]] = set()

    @property
    def pending(self) -> int:
        return len(self._tasks)

    def spawn(self, name: str, coro: Coroutine[Any, Any, Any]) -> asyncio.Task[None]:
        task = asyncio.create_task(self._run(name, coro), name=name)
        self._tasks.add(task)
        task.add_done_callback(self._tasks.discard)
        return task

    async def _run(self, name: str, coro: Coroutine[Any, Any, Any]) -> None:
        try:
            async with asyncio.timeout(self._timeout_s):
                await coro
        except asyncio.CancelledError:
            logger.warning("detached_task_cancelled name=%s", name)
            raise
        except Exception:
            logger.exception("detached_task_failed name=%s", name)
        else:
            logger.debug("detached_task_done name=%s", name)

    async def wait_idle(self) -> None:
        """
        Wait for every task in flight, including ones spawned while waiting.
        """
        while self._tasks:
            # asyncio.wait does not cancel the tasks if this waiter is cancelled.
            await asyncio.wait(list(self._tasks))

    async def aclose(self, timeout_s: float = 5.0) -> None:
        try:
            await asyncio.wait_for(self.wait_idle(), timeout=timeout_s)
        except TimeoutError:
            leftovers = list(self._tasks)
            logger.warning("detached_tasks_cancelling count=%s", len(leftovers))
            for task in leftovers:
                task.cancel()
            await asyncio.gather(*leftovers, return_exceptions=True)
