"""Feed change batches from watchfiles into `ChangeSources`."""

from __future__ import annotations

import asyncio
from collections.abc import Set as AbstractSet
import contextlib
from dataclasses import dataclass, field
from pathlib import Path
from typing import TYPE_CHECKING, Self

from watchfiles import Change, awatch

from editor_tracker.events import ChangeEvent, FileChangesBatch
from editor_tracker.log import get_logger
from editor_tracker.paths import DEFAULT_COMPARER, PathComparer


if TYPE_CHECKING:
    from editor_tracker.events import ChangeSources


logger = get_logger(__name__)

_CHANGE_FACTORIES = {
    Change.added: ChangeEvent.added,
    Change.modified: ChangeEvent.updated,
    Change.deleted: ChangeEvent.deleted,
}


def batch_from_watchfiles(
    changes: AbstractSet[tuple[Change, str]],
    comparer: PathComparer = DEFAULT_COMPARER,
) -> FileChangesBatch:
    """Convert a watchfiles change set into a `FileChangesBatch`."""
    return FileChangesBatch.of(
        (_CHANGE_FACTORIES[change](path) for change, path in changes),
        comparer,
    )


@dataclass
class FileChangeWatcher:
    """Async file watcher publishing change batches.

    Example:
        ```python
        sources = ChangeSources()
        async with FileChangeWatcher(paths=["/path/to/project"], sources=sources):
            await asyncio.sleep(60)
        ```
    """

    paths: list[str | Path]
    """Paths to watch (files or directories)."""

    sources: ChangeSources
    """Hub receiving each batch on its ``file_changes`` signal."""

    debounce: int = 100
    """Debounce time of the watcher itself, in milliseconds."""

    _task: asyncio.Task[None] | None = field(default=None, repr=False)
    """Background watch task."""

    _stop_event: asyncio.Event = field(default_factory=asyncio.Event, repr=False)
    """Event to signal stop."""

    @property
    def is_running(self) -> bool:
        return self._task is not None and not self._task.done()

    async def start(self) -> None:
        """Start watching for file changes."""
        if self._task is not None:
            return  # Already running

        self._stop_event.clear()
        self._task = asyncio.create_task(self._watch_loop())

    async def stop(self) -> None:
        """Stop watching for file changes."""
        if self._task is None:
            return

        self._stop_event.set()
        self._task.cancel()
        with contextlib.suppress(asyncio.CancelledError):
            await self._task
        self._task = None

    async def _watch_loop(self) -> None:
        existing_paths = [str(p) for p in self.paths if Path(p).exists()]
        if not existing_paths:
            logger.warning("No existing paths to watch", paths=[str(p) for p in self.paths])
            return

        async for changes in awatch(
            *existing_paths,
            debounce=self.debounce,
            stop_event=self._stop_event,
        ):
            try:
                self.sources.report_batch(batch_from_watchfiles(changes, self.sources.comparer))
            except Exception:
                # A failing subscriber must not kill the watcher
                logger.exception("Failed to deliver file changes", count=len(changes))

    async def __aenter__(self) -> Self:
        """Start watcher on context enter."""
        await self.start()
        return self

    async def __aexit__(self, *args: object) -> None:
        """Stop watcher on context exit."""
        await self.stop()
