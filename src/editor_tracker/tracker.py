"""Reconciliation of open editors with file changes."""

from __future__ import annotations

from datetime import UTC, datetime, timedelta
from typing import TYPE_CHECKING, Any, Self

from editor_tracker.collaborators import ModelState, OpenOptions
from editor_tracker.config import TrackerConfig
from editor_tracker.errors import log_unexpected_error
from editor_tracker.events import ChangeKind, FileChangesBatch
from editor_tracker.handles import HandleKind, primary_leaf, unwrap
from editor_tracker.log import get_logger
from editor_tracker.paths import CASE_SENSITIVE, as_resource
from editor_tracker.tasks import TaskManager


if TYPE_CHECKING:
    from collections.abc import Callable, Coroutine, Iterable
    from types import TracebackType

    from editor_tracker.collaborators import (
        EditorService,
        HandleRegistry,
        Lifecycle,
        ModelRegistry,
        TextModel,
        ViewState,
        VisibleEditor,
    )
    from editor_tracker.errors import ErrorSink
    from editor_tracker.events import ChangeSources, LocalChangeEvent
    from editor_tracker.handles import EditorInput, OpenHandle
    from editor_tracker.paths import ResourceLike, ResourcePath


logger = get_logger(__name__)

_MS = timedelta(milliseconds=1)


def utc_now() -> datetime:
    return datetime.now(UTC)


class FileEditorTracker:
    """Keeps open editors in agreement with the files they show.

    Listens to local save / move / delete events and to external change
    batches, then disposes, reopens or reloads open editors. Both streams are
    treated as equally authoritative: either one is enough to trigger a
    dispose, and handling the same change twice is harmless.

    Editors with unsaved edits are never disposed.

    Example:
        ```python
        sources = ChangeSources()
        async with FileEditorTracker(sources, registry, editors, models) as tracker:
            sources.report_batch([ChangeEvent.deleted("/proj/old.txt")])
            await tracker.wait_idle()
        ```
    """

    def __init__(
        self,
        sources: ChangeSources,
        registry: HandleRegistry,
        editors: EditorService,
        models: ModelRegistry,
        lifecycle: Lifecycle | None = None,
        *,
        config: TrackerConfig | None = None,
        clock: Callable[[], datetime] = utc_now,
        on_error: ErrorSink | None = None,
    ):
        """Initialize the tracker and subscribe to both change streams.

        Args:
            sources: Hub publishing local and external change events
            registry: Read access to the open editor groups
            editors: Editing surface executing dispose / open commands
            models: Lookup for text models backing text editors
            lifecycle: Optional lifecycle, the tracker unsubscribes on shutdown
            config: Tracker settings (debounce window, case policy)
            clock: Returns the current time, timezone-aware
            on_error: Sink for failures of asynchronous reopen / reload calls
        """
        self.config = config or TrackerConfig()
        self.comparer = self.config.comparer
        self.registry = registry
        self.editors = editors
        self.models = models
        self._clock = clock
        self._on_error = on_error or log_unexpected_error
        self.task_manager = TaskManager(self._on_error)
        # Destinations of recent local moves, guarded against late delete batches.
        self._recent_destinations: dict[ResourcePath, datetime] = {}
        self._subscriptions = [
            (sources.local_change, self.on_local_change),
            (sources.file_changes, self.on_file_changes),
        ]
        for signal, slot in self._subscriptions:
            signal.connect(slot)
        if lifecycle is not None:
            lifecycle.on_shutdown(self.dispose)

    async def __aenter__(self) -> Self:
        return self

    async def __aexit__(
        self,
        exc_type: type[BaseException] | None,
        exc_val: BaseException | None,
        exc_tb: TracebackType | None,
    ) -> None:
        self.dispose()
        await self.task_manager.cleanup_tasks()

    @property
    def is_disposed(self) -> bool:
        return not self._subscriptions

    def dispose(self) -> None:
        """Release all listener subscriptions. Safe to call repeatedly."""
        if not self._subscriptions:
            return
        for signal, slot in self._subscriptions:
            signal.disconnect(slot, missing_ok=True)
        self._subscriptions = []
        logger.debug("Tracker disposed")

    async def wait_idle(self) -> None:
        """Wait for all reopen / reload operations issued so far."""
        await self.task_manager.complete_tasks()

    # === Event entry points ===

    def on_local_change(self, event: LocalChangeEvent) -> None:
        """Handle a save, move or delete performed by the application.

        Moves are only acted upon when both sides are known; an event missing
        the data a step needs skips that step.
        """
        before = event.before.resource if event.before is not None else None
        moved_to = event.moved_to
        self._prune_destinations()
        if moved_to is not None:
            self._recent_destinations[moved_to] = self._clock()
            if before is not None:
                self.handle_move(before, moved_to)
        if event.was_deleted or moved_to is not None:
            if before is None:
                logger.debug("Ignoring local delete without source resource")
                return
            guards = [moved_to] if moved_to is not None else []
            self.handle_deletes(before, moved_to=guards)

    def on_file_changes(self, batch: FileChangesBatch) -> None:
        """Handle a batch of changes reported by the file watcher."""
        batch = batch.with_comparer(self.comparer)
        self.handle_updates(batch)
        for move in batch.moves:
            if move.moved_from is None or move.moved_to is None:
                continue
            self.handle_move(move.moved_from, move.moved_to)
        if batch.got_deleted():
            # Paths re-created or moved into within the same batch still exist.
            present = [c.moved_to for c in batch.moves if c.moved_to is not None]
            present.extend(c.resource for c in batch.added)
            self.handle_deletes(batch, moved_to=self._live_destinations(), present=present)

    # === Queries ===

    def open_handles(self) -> list[OpenHandle]:
        """All open leaf handles, in group and display order."""
        return [
            handle
            for group in self.registry.groups()
            for editor_input in group.handles()
            for handle in unwrap(editor_input)
        ]

    def is_editor_showing(self, editor: VisibleEditor, resource: ResourceLike) -> bool:
        """Check whether ``editor`` is still visible and bound to ``resource``."""
        if not editor.is_visible:
            return False
        handle = primary_leaf(editor.input)
        return handle is not None and handle.resource == as_resource(resource)

    # === Deletes ===

    def handle_deletes(
        self,
        deleted: FileChangesBatch | ResourceLike,
        *,
        moved_to: Iterable[ResourcePath] = (),
        present: Iterable[ResourcePath] = (),
    ) -> list[OpenHandle]:
        """Dispose clean handles whose resource got deleted.

        Args:
            deleted: A change batch, or a single deleted resource whose whole
                subtree counts as deleted
            moved_to: Move destinations. Handles at (or below) one of them
                are kept when only another spelling of their path got deleted,
                e.g. the old name of a case-only rename
            present: Paths known to exist despite the delete. Handles at (or
                below) one of them are always kept

        Returns:
            The handles that were disposed
        """
        if isinstance(deleted, FileChangesBatch):
            deleted = deleted.with_comparer(self.comparer)
            exact = [c.resource for c in deleted.deleted]
            exact.extend(c.moved_from for c in deleted.moves if c.moved_from is not None)
        else:
            exact = [as_resource(deleted)]
        destinations = list(moved_to)
        kept = list(present)
        disposed: list[OpenHandle] = []
        for handle in self.open_handles():
            resource = handle.resource
            if handle.is_dirty:
                continue
            if _covers(kept, resource):
                continue
            if _covers(destinations, resource) and not _covers(exact, resource):
                continue
            if isinstance(deleted, FileChangesBatch):
                matches = deleted.contains(resource, ChangeKind.DELETED)
            else:
                matches = self.comparer.is_equal_or_ancestor(deleted, resource)
            if matches:
                logger.debug("Disposing deleted handle", resource=str(resource))
                self.editors.dispose_handle(handle)
                disposed.append(handle)
        return disposed

    def _prune_destinations(self) -> None:
        now = self._clock()
        window = self.config.debounce_window
        self._recent_destinations = {
            path: at for path, at in self._recent_destinations.items() if now - at <= window
        }

    def _live_destinations(self) -> list[ResourcePath]:
        self._prune_destinations()
        return list(self._recent_destinations)

    # === Moves ===

    def handle_move(self, old: ResourceLike, new: ResourceLike) -> int:
        """Reopen every handle at or below ``old`` at its location below ``new``.

        Presentation state (pinned, index, active) is forwarded from the
        group. Reopen failures go to the error sink.

        Returns:
            Number of reopen commands issued
        """
        issued = 0
        for group in self.registry.groups():
            for editor_input in list(group.handles()):
                for handle in unwrap(editor_input):
                    if not self.comparer.is_equal_or_ancestor(old, handle.resource):
                        continue
                    target = self.comparer.rewrite(old, new, handle.resource)
                    options = OpenOptions(
                        preserve_focus=True,
                        pinned=group.is_pinned(editor_input),
                        index=group.index_of(editor_input),
                        inactive=not group.is_active(editor_input),
                    )
                    logger.debug(
                        "Reopening moved handle",
                        resource=str(handle.resource),
                        target=str(target),
                    )
                    self._spawn(
                        self.editors.open_editor(target, options, group.position),
                        name=f"reopen:{target}",
                    )
                    issued += 1
        return issued

    # === Updates ===

    def handle_updates(self, batch: FileChangesBatch) -> None:
        """Refresh visible editors whose file was updated (or re-added)."""
        batch = batch.with_comparer(self.comparer)
        for editor in self.editors.visible_editors():
            handle = self._updated_leaf(editor.input, batch)
            if handle is None:
                continue
            match handle.kind:
                case HandleKind.TEXT:
                    model = self.models.get(handle.resource)
                    if model is not None:
                        self._reload_text(editor, handle, model)
                case HandleKind.BINARY if self.config.reopen_binary_on_update:
                    options = OpenOptions(preserve_focus=True, force_open=True)
                    self._spawn(
                        self.editors.open_editor(editor.input, options, editor.position),
                        name=f"reopen-binary:{handle.resource}",
                    )

    def _updated_leaf(
        self, editor_input: EditorInput | None, batch: FileChangesBatch
    ) -> OpenHandle | None:
        # Added counts too: an add followed by an update may arrive as one record.
        for handle in unwrap(editor_input):
            if batch.contains(handle.resource, ChangeKind.UPDATED) or batch.contains(
                handle.resource, ChangeKind.ADDED
            ):
                return handle
        return None

    def _reload_text(self, editor: VisibleEditor, handle: OpenHandle, model: TextModel) -> bool:
        log = logger.bind(resource=str(model.resource))
        if model.state is not ModelState.CLEAN:
            log.debug("Skipping reload of unsaved model", state=model.state.value)
            return False
        last_save = model.last_save_attempt_time or handle.last_save_attempt_time
        if last_save is not None:
            elapsed = self._clock() - last_save
            if elapsed <= self.config.debounce_window:
                # Most likely the notification for our own save.
                log.debug("Skipping reload after recent save", elapsed_ms=elapsed / _MS)
                return False
        view_state = editor.save_view_state()
        self._spawn(
            self._reload(editor, model, view_state, model.last_modified_time),
            name=f"reload:{model.resource}",
        )
        return True

    async def _reload(
        self,
        editor: VisibleEditor,
        model: TextModel,
        view_state: ViewState,
        previous_mtime: datetime | None,
    ) -> None:
        await model.load()
        if model.state is not ModelState.CLEAN:
            # Edits typed during the reload win; the view stays where the user is.
            logger.info("Model changed during reload", resource=str(model.resource))
            return
        if model.last_modified_time == previous_mtime:
            return
        if not self.config.restore_view_state:
            return
        if self.is_editor_showing(editor, model.resource):
            editor.restore_view_state(view_state)

    def _spawn(self, coro: Coroutine[Any, Any, Any], *, name: str) -> None:
        self.task_manager.create_task(coro, name=name)


def _covers(paths: Iterable[ResourcePath], resource: ResourcePath) -> bool:
    """Check whether one of ``paths`` is ``resource`` or an ancestor, spelled exactly."""
    return any(CASE_SENSITIVE.is_equal_or_ancestor(path, resource) for path in paths)
