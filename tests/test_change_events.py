"""Tests for change batches, local events and the ingestion hub."""

from __future__ import annotations

from pathlib import PurePosixPath

from editor_tracker import (
    CASE_INSENSITIVE,
    CASE_SENSITIVE,
    ChangeEvent,
    ChangeKind,
    ChangeSources,
    FileChangesBatch,
    FileState,
    LocalChangeEvent,
)


def test_batch_contains_exact_update():
    batch = FileChangesBatch.of([ChangeEvent.updated("/proj/a.txt")], CASE_SENSITIVE)
    assert batch.contains("/proj/a.txt", ChangeKind.UPDATED)
    assert not batch.contains("/proj/a.txt", ChangeKind.ADDED)
    assert not batch.contains("/proj/a.txt/child", ChangeKind.UPDATED)
    assert not batch.contains("/proj/b.txt", ChangeKind.UPDATED)


def test_batch_delete_of_folder_covers_children():
    batch = FileChangesBatch.of([ChangeEvent.deleted("/proj/src")], CASE_SENSITIVE)
    assert batch.contains("/proj/src", ChangeKind.DELETED)
    assert batch.contains("/proj/src/deep/x.ts", ChangeKind.DELETED)
    assert not batch.contains("/proj/srcx/x.ts", ChangeKind.DELETED)
    assert not batch.contains("/proj", ChangeKind.DELETED)


def test_batch_move_counts_as_delete_and_add():
    batch = FileChangesBatch.of([ChangeEvent.moved("/proj/src", "/proj/lib")], CASE_SENSITIVE)
    assert batch.contains("/proj/src/x.ts", ChangeKind.DELETED)
    assert batch.contains("/proj/src/x.ts", ChangeKind.MOVED)
    assert batch.contains("/proj/lib/x.ts", ChangeKind.ADDED)
    assert not batch.contains("/proj/lib/x.ts", ChangeKind.DELETED)
    assert batch.got_deleted()
    assert batch.got_added()
    assert batch.got_moved()
    assert not batch.got_updated()


def test_batch_respects_case_policy():
    changes = [ChangeEvent.updated("/Proj/A.txt")]
    assert FileChangesBatch.of(changes, CASE_INSENSITIVE).contains("/proj/a.txt", ChangeKind.UPDATED)
    assert not FileChangesBatch.of(changes, CASE_SENSITIVE).contains(
        "/proj/a.txt", ChangeKind.UPDATED
    )


def test_with_comparer_swaps_case_policy():
    batch = FileChangesBatch.of([ChangeEvent.deleted("/Proj")], CASE_SENSITIVE)

    assert batch.with_comparer(CASE_SENSITIVE) is batch
    relaxed = batch.with_comparer(CASE_INSENSITIVE)
    assert relaxed.changes == batch.changes
    assert relaxed.contains("/proj/a.txt", ChangeKind.DELETED)
    assert not batch.contains("/proj/a.txt", ChangeKind.DELETED)


def test_batch_accessors():
    batch = FileChangesBatch.of([
        ChangeEvent.added("/a"),
        ChangeEvent.updated("/b"),
        ChangeEvent.deleted("/c"),
        ChangeEvent.updated("/d"),
    ])
    assert [c.resource for c in batch.updated] == [PurePosixPath("/b"), PurePosixPath("/d")]
    assert [c.resource for c in batch.added] == [PurePosixPath("/a")]
    assert [c.resource for c in batch.deleted] == [PurePosixPath("/c")]
    assert len(batch) == 4


def test_local_move_classification():
    event = LocalChangeEvent.moved("/old.txt", "/new.txt")
    assert event.moved_to == PurePosixPath("/new.txt")
    [change] = event.classify()
    assert change.kind is ChangeKind.MOVED
    assert change.moved_from == PurePosixPath("/old.txt")
    assert change.moved_to == PurePosixPath("/new.txt")


def test_local_delete_and_save_classification():
    assert LocalChangeEvent.deleted("/gone.txt").classify() == [ChangeEvent.deleted("/gone.txt")]
    assert LocalChangeEvent.saved("/kept.txt").classify() == [ChangeEvent.updated("/kept.txt")]


def test_malformed_local_events_classify_to_nothing():
    assert LocalChangeEvent(was_moved=True).classify() == []
    assert LocalChangeEvent(was_deleted=True).classify() == []
    # A move without its target is not a move
    only_before = LocalChangeEvent(before=FileState(PurePosixPath("/x")), was_moved=True)
    assert only_before.moved_to is None


def test_sources_emit_batches():
    sources = ChangeSources(comparer=CASE_INSENSITIVE)
    received: list[FileChangesBatch] = []
    @sources.file_changes.connect
    def on_batch(batch: FileChangesBatch):
        received.append(batch)

    sources.report_batch([ChangeEvent.updated("/A.txt")])
    sources.report_batch([])

    assert len(received) == 1
    assert received[0].comparer is CASE_INSENSITIVE
    assert received[0].contains("/a.txt", ChangeKind.UPDATED)


def test_sources_emit_local_events():
    sources = ChangeSources()
    received: list[LocalChangeEvent] = []
    @sources.local_change.connect
    def on_local(event: LocalChangeEvent):
        received.append(event)

    event = LocalChangeEvent.deleted("/gone.txt")
    sources.report_local(event)

    assert received == [event]
