"""Change notifications and the ingestion hub that publishes them.

Two independent streams feed the tracker:

- local lifecycle events, one resource at a time, emitted by the save and move
  operations the application performs itself
- batches of external file changes reported by a filesystem watcher

Either stream may report the same real-world change, in any order, and either
may miss changes on some hosts.
"""

from __future__ import annotations

from dataclasses import dataclass, replace
from enum import Enum
from typing import TYPE_CHECKING

from psygnal import Signal

from editor_tracker.log import get_logger
from editor_tracker.paths import DEFAULT_COMPARER, PathComparer, as_resource


if TYPE_CHECKING:
    from collections.abc import Iterable
    from datetime import datetime

    from editor_tracker.paths import ResourceLike, ResourcePath


logger = get_logger(__name__)


class ChangeKind(Enum):
    """Kind of a single change record."""

    ADDED = "added"
    UPDATED = "updated"
    DELETED = "deleted"
    MOVED = "moved"


@dataclass(frozen=True, slots=True)
class ChangeEvent:
    """A single classified change.

    For moves, ``resource`` is the source path and both ``moved_from`` and
    ``moved_to`` are set.
    """

    kind: ChangeKind
    resource: ResourcePath
    moved_from: ResourcePath | None = None
    moved_to: ResourcePath | None = None

    @classmethod
    def added(cls, resource: ResourceLike) -> ChangeEvent:
        return cls(ChangeKind.ADDED, as_resource(resource))

    @classmethod
    def updated(cls, resource: ResourceLike) -> ChangeEvent:
        return cls(ChangeKind.UPDATED, as_resource(resource))

    @classmethod
    def deleted(cls, resource: ResourceLike) -> ChangeEvent:
        return cls(ChangeKind.DELETED, as_resource(resource))

    @classmethod
    def moved(cls, source: ResourceLike, target: ResourceLike) -> ChangeEvent:
        source = as_resource(source)
        return cls(ChangeKind.MOVED, source, moved_from=source, moved_to=as_resource(target))


@dataclass(frozen=True)
class FileChangesBatch:
    """A batch of external changes reported together.

    Order inside the batch carries no meaning.
    """

    changes: tuple[ChangeEvent, ...] = ()
    comparer: PathComparer = DEFAULT_COMPARER

    @classmethod
    def of(
        cls,
        changes: Iterable[ChangeEvent],
        comparer: PathComparer = DEFAULT_COMPARER,
    ) -> FileChangesBatch:
        return cls(tuple(changes), comparer)

    def __len__(self) -> int:
        return len(self.changes)

    def with_comparer(self, comparer: PathComparer) -> FileChangesBatch:
        """Return this batch matching with ``comparer`` instead of its own."""
        if comparer == self.comparer:
            return self
        return replace(self, comparer=comparer)

    def contains(self, resource: ResourceLike, kind: ChangeKind) -> bool:
        """Check whether the batch reports a change of ``kind`` for ``resource``.

        Deletes also match resources below a deleted folder. A move counts as
        a delete of its source and an add of its target.
        """
        cmp = self.comparer
        for change in self.changes:
            match change.kind, kind:
                case ChangeKind.DELETED, ChangeKind.DELETED:
                    if cmp.is_equal_or_ancestor(change.resource, resource):
                        return True
                case ChangeKind.MOVED, ChangeKind.DELETED | ChangeKind.MOVED:
                    if change.moved_from and cmp.is_equal_or_ancestor(change.moved_from, resource):
                        return True
                case ChangeKind.MOVED, ChangeKind.ADDED:
                    if change.moved_to and cmp.is_equal_or_ancestor(change.moved_to, resource):
                        return True
                case actual, wanted if actual is wanted:
                    if cmp.is_equal(change.resource, resource):
                        return True
        return False

    def _of_kind(self, kind: ChangeKind) -> list[ChangeEvent]:
        return [change for change in self.changes if change.kind is kind]

    @property
    def added(self) -> list[ChangeEvent]:
        return self._of_kind(ChangeKind.ADDED)

    @property
    def updated(self) -> list[ChangeEvent]:
        return self._of_kind(ChangeKind.UPDATED)

    @property
    def deleted(self) -> list[ChangeEvent]:
        return self._of_kind(ChangeKind.DELETED)

    @property
    def moves(self) -> list[ChangeEvent]:
        return self._of_kind(ChangeKind.MOVED)

    def got_added(self) -> bool:
        return bool(self.added) or bool(self.moves)

    def got_updated(self) -> bool:
        return bool(self.updated)

    def got_deleted(self) -> bool:
        return bool(self.deleted) or bool(self.moves)

    def got_moved(self) -> bool:
        return bool(self.moves)


@dataclass(frozen=True, slots=True)
class FileState:
    """Snapshot of a resource before or after a local operation."""

    resource: ResourcePath
    modified_time: datetime | None = None


@dataclass(frozen=True)
class LocalChangeEvent:
    """Lifecycle event for one resource, emitted by the application itself.

    ``before`` and ``after`` are optional: some hosts omit them, in which case
    the affected part of the event is ignored.
    """

    before: FileState | None = None
    after: FileState | None = None
    was_deleted: bool = False
    was_moved: bool = False

    @classmethod
    def saved(
        cls, resource: ResourceLike, modified_time: datetime | None = None
    ) -> LocalChangeEvent:
        state = FileState(as_resource(resource), modified_time)
        return cls(before=state, after=state)

    @classmethod
    def deleted(cls, resource: ResourceLike) -> LocalChangeEvent:
        return cls(before=FileState(as_resource(resource)), was_deleted=True)

    @classmethod
    def moved(cls, source: ResourceLike, target: ResourceLike) -> LocalChangeEvent:
        return cls(
            before=FileState(as_resource(source)),
            after=FileState(as_resource(target)),
            was_moved=True,
        )

    @property
    def moved_to(self) -> ResourcePath | None:
        """Move destination, if this is a move carrying its target."""
        if self.was_moved and self.after is not None:
            return self.after.resource
        return None

    def classify(self) -> list[ChangeEvent]:
        """Translate the event into change records."""
        before = self.before.resource if self.before else None
        if (target := self.moved_to) is not None:
            return [ChangeEvent.moved(before, target)] if before is not None else []
        if self.was_deleted:
            return [ChangeEvent.deleted(before)] if before is not None else []
        if self.after is not None:
            return [ChangeEvent.updated(self.after.resource)]
        return []


class ChangeSources:
    """Ingestion hub: publishes both change streams as psygnal signals.

    Example:
        ```python
        sources = ChangeSources()
        sources.file_changes.connect(on_batch)
        sources.report_batch([ChangeEvent.updated("/src/app.py")])
        ```
    """

    local_change = Signal(LocalChangeEvent)
    """Emitted for save / move / delete operations performed locally."""

    file_changes = Signal(FileChangesBatch)
    """Emitted for each batch of changes reported by a watcher."""

    def __init__(self, comparer: PathComparer = DEFAULT_COMPARER):
        """Initialize the hub.

        Args:
            comparer: Comparer attached to batches created by `report_batch`
        """
        self.comparer = comparer

    def report_local(self, event: LocalChangeEvent) -> None:
        """Publish a local lifecycle event."""
        logger.debug("Local change", changes=event.classify())
        self.local_change.emit(event)

    def report_batch(self, changes: FileChangesBatch | Iterable[ChangeEvent]) -> None:
        """Publish a batch of external changes. Empty batches are dropped."""
        batch = (
            changes
            if isinstance(changes, FileChangesBatch)
            else FileChangesBatch.of(changes, self.comparer)
        )
        if not batch.changes:
            return
        logger.debug("External changes", count=len(batch))
        self.file_changes.emit(batch)
