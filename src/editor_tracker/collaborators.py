"""Protocols for the services the tracker reads from and sends commands to."""

from __future__ import annotations

from dataclasses import dataclass
from enum import Enum
from typing import TYPE_CHECKING, Any, Protocol


if TYPE_CHECKING:
    from collections.abc import Callable, Sequence
    from datetime import datetime

    from editor_tracker.handles import EditorInput, OpenHandle
    from editor_tracker.paths import ResourcePath


ViewState = Any
"""Opaque scroll / selection state captured from an editor control."""


@dataclass(frozen=True, slots=True)
class OpenOptions:
    """Options forwarded unchanged to `EditorService.open_editor`."""

    preserve_focus: bool = False
    pinned: bool | None = None
    index: int | None = None
    inactive: bool = False
    force_open: bool = False


class EditorGroup(Protocol):
    """A group of editors as exposed by the handle registry."""

    @property
    def position(self) -> int:
        """Position of the group in the layout."""
        ...

    def handles(self) -> Sequence[EditorInput]:
        """Inputs open in this group, in display order."""
        ...

    def is_pinned(self, editor_input: EditorInput) -> bool: ...

    def index_of(self, editor_input: EditorInput) -> int: ...

    def is_active(self, editor_input: EditorInput) -> bool: ...


class HandleRegistry(Protocol):
    """Read-only access to every open editor."""

    def groups(self) -> Sequence[EditorGroup]:
        """Editor groups in layout order."""
        ...


class VisibleEditor(Protocol):
    """An editor control currently shown to the user."""

    @property
    def input(self) -> EditorInput | None: ...

    @property
    def position(self) -> int: ...

    @property
    def is_visible(self) -> bool: ...

    def save_view_state(self) -> ViewState: ...

    def restore_view_state(self, state: ViewState) -> None: ...


class EditorService(Protocol):
    """The editing surface. Owns handles and executes tracker commands."""

    async def open_editor(
        self,
        target: ResourcePath | EditorInput,
        options: OpenOptions,
        position: int,
    ) -> Any:
        """Open or reopen ``target`` in the group at ``position``."""
        ...

    def visible_editors(self) -> Sequence[VisibleEditor]: ...

    def dispose_handle(self, handle: OpenHandle) -> None:
        """Dispose a handle. Disposing an already disposed handle is a no-op."""
        ...


class ModelState(Enum):
    """Save state of a text model."""

    CLEAN = "clean"
    DIRTY = "dirty"
    SAVING = "saving"
    CONFLICT = "conflict"
    ERROR = "error"


class TextModel(Protocol):
    """In-memory content of a text resource."""

    @property
    def resource(self) -> ResourcePath: ...

    @property
    def state(self) -> ModelState: ...

    @property
    def last_save_attempt_time(self) -> datetime | None: ...

    @property
    def last_modified_time(self) -> datetime | None: ...

    async def load(self) -> None:
        """Reload content from disk. Resolves once the content is refreshed."""
        ...


class ModelRegistry(Protocol):
    """Lookup of loaded text models."""

    def get(self, resource: ResourcePath) -> TextModel | None: ...


class Lifecycle(Protocol):
    """Process lifecycle hook."""

    def on_shutdown(self, callback: Callable[[], Any]) -> None:
        """Register ``callback`` to run once at shutdown."""
        ...
