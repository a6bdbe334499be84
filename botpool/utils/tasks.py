"""Retention of fire-and-forget asyncio tasks."""

from __future__ import annotations

import asyncio
import logging
from collections.abc import Coroutine
from typing import Any

from ..logs.logger import logger


class BackgroundTasks:
    """Keeps strong references to detached tasks until they finish.

    Tasks are never cancelled by this class; ``wait`` only observes them so a
    shutdown can let in-flight sends complete.
    """

    def __init__(self, name: str) -> None:
        self.name = name
        self._tasks: set[asyncio.Task[Any]] = set()

    def __len__(self) -> int:
        return len(self._tasks)

    def spawn(self, coro: Coroutine[Any, Any, Any], *, label: str) -> asyncio.Task[Any]:
        task = asyncio.create_task(coro, name=f"{self.name}:{label}")
        self._tasks.add(task)
        task.add_done_callback(self._tasks.discard)
        return task

    async def wait(self, timeout: float | None = None) -> bool:
        """Wait for every pending task; False if ``timeout`` elapsed first."""
        if not self._tasks:
            return True
        pending = set(self._tasks)
        done, still_pending = await asyncio.wait(pending, timeout=timeout)
        for task in done:
            if not task.cancelled() and task.exception() is not None:
                logger.log_event(
                    "tasks",
                    "task_exception",
                    level=logging.WARNING,
                    task=task.get_name(),
                    error=str(task.exception()),
                )
        if still_pending:
            logger.log_event(
                "tasks",
                "wait_timeout",
                level=logging.WARNING,
                group=self.name,
                pending=len(still_pending),
            )
            return False
        return True
