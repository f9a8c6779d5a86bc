"""Tests for the watchfiles adapter."""

from __future__ import annotations

import asyncio
from typing import TYPE_CHECKING

from watchfiles import Change

from editor_tracker import CASE_SENSITIVE, ChangeKind, ChangeSources, FileChangesBatch
from editor_tracker.watcher import FileChangeWatcher, batch_from_watchfiles


if TYPE_CHECKING:
    from pathlib import Path


def test_batch_from_watchfiles_maps_change_kinds():
    batch = batch_from_watchfiles(
        {
            (Change.added, "/proj/new.txt"),
            (Change.modified, "/proj/a.txt"),
            (Change.deleted, "/proj/old"),
        },
        CASE_SENSITIVE,
    )

    assert len(batch) == 3
    assert batch.contains("/proj/new.txt", ChangeKind.ADDED)
    assert batch.contains("/proj/a.txt", ChangeKind.UPDATED)
    assert batch.contains("/proj/old/nested.txt", ChangeKind.DELETED)
    assert batch.got_deleted()
    assert not batch.got_moved()


def test_empty_change_set_gives_empty_batch():
    assert len(batch_from_watchfiles(set(), CASE_SENSITIVE)) == 0


async def test_missing_paths_stop_the_loop(tmp_path: Path):
    watcher = FileChangeWatcher(paths=[tmp_path / "missing"], sources=ChangeSources())

    async with watcher:
        await asyncio.wait_for(watcher._task, timeout=1)  # type: ignore[arg-type]
        assert not watcher.is_running

    assert watcher._task is None


async def test_start_is_idempotent(tmp_path: Path):
    watcher = FileChangeWatcher(paths=[tmp_path], sources=ChangeSources())
    await watcher.start()
    task = watcher._task
    await watcher.start()

    assert watcher._task is task
    await watcher.stop()
    assert not watcher.is_running


async def test_real_changes_are_published(tmp_path: Path):
    sources = ChangeSources(comparer=CASE_SENSITIVE)
    received = asyncio.Queue[FileChangesBatch]()

    @sources.file_changes.connect
    def on_batch(batch: FileChangesBatch) -> None:
        received.put_nowait(batch)

    async with FileChangeWatcher(paths=[tmp_path], sources=sources, debounce=50):
        await asyncio.sleep(0.2)
        (tmp_path / "a.txt").write_text("hello")
        batch = await asyncio.wait_for(received.get(), timeout=5)

    assert any(change.resource.name == "a.txt" for change in batch.changes)
