"""Tracking of fire-and-forget asyncio tasks."""

from __future__ import annotations

import asyncio
from typing import TYPE_CHECKING, Any, TypeVar

from editor_tracker.errors import log_unexpected_error
from editor_tracker.log import get_logger


if TYPE_CHECKING:
    from collections.abc import Coroutine

    from editor_tracker.errors import ErrorSink


logger = get_logger(__name__)

T = TypeVar("T")


class TaskManager:
    """Keeps background tasks alive and routes their failures to an error sink."""

    def __init__(self, on_error: ErrorSink | None = None):
        self._pending: set[asyncio.Task[Any]] = set()
        self._on_error = on_error or log_unexpected_error

    @property
    def pending(self) -> int:
        """Number of tasks not finished yet."""
        return len(self._pending)

    def create_task(
        self,
        coro: Coroutine[Any, Any, T],
        *,
        name: str | None = None,
    ) -> asyncio.Task[T]:
        """Schedule ``coro`` on the running loop and track it."""
        task = asyncio.get_running_loop().create_task(coro, name=name)
        self._pending.add(task)
        task.add_done_callback(self._on_done)
        return task

    def _on_done(self, task: asyncio.Task[Any]) -> None:
        self._pending.discard(task)
        if task.cancelled():
            return
        if (exc := task.exception()) is not None:
            logger.debug("Task failed", task=task.get_name(), error=str(exc))
            self._on_error(exc)

    async def complete_tasks(self) -> None:
        """Wait until all tasks, including ones spawned meanwhile, are done."""
        while self._pending:
            await asyncio.gather(*self._pending, return_exceptions=True)

    async def cleanup_tasks(self) -> None:
        """Cancel and await all pending tasks."""
        pending = list(self._pending)
        for task in pending:
            task.cancel()
        await asyncio.gather(*pending, return_exceptions=True)
        self._pending.clear()
