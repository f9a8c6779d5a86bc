"""Open editor handles and the composite wrapper around them."""

from __future__ import annotations

from dataclasses import dataclass
from enum import Enum
from typing import TYPE_CHECKING


if TYPE_CHECKING:
    from datetime import datetime

    from editor_tracker.paths import ResourcePath


class HandleKind(Enum):
    """How the content of a handle is edited."""

    TEXT = "text"
    """Backed by a text model that can be reloaded in place."""

    BINARY = "binary"
    """Opaque content, can only be refreshed by reopening the editor."""


@dataclass(eq=False)
class OpenHandle:
    """An open editable resource.

    Owned and mutated by the editing surface. The tracker only reads it and
    asks the editing surface to dispose or reopen it.
    """

    resource: ResourcePath
    """Resource this handle is bound to."""

    kind: HandleKind = HandleKind.TEXT
    """Content kind, decides between reload and reopen on updates."""

    is_dirty: bool = False
    """Whether the handle holds unsaved edits."""

    last_save_attempt_time: datetime | None = None
    """When the editing surface last tried to save this handle."""

    last_known_modified_time: datetime | None = None
    """Modification time of the resource as last seen by the editing surface."""

    def __repr__(self) -> str:
        dirty = " dirty" if self.is_dirty else ""
        return f"OpenHandle({str(self.resource)!r}, {self.kind.value}{dirty})"


@dataclass(eq=False)
class CompositeHandle:
    """Two handles shown together, e.g. a side-by-side view.

    A side holding something that is not a file editor is ``None``.
    """

    primary: OpenHandle | None
    secondary: OpenHandle | None = None


EditorInput = OpenHandle | CompositeHandle


def unwrap(editor_input: EditorInput | None) -> list[OpenHandle]:
    """Return the leaf handles of an input, primary first."""
    match editor_input:
        case OpenHandle():
            return [editor_input]
        case CompositeHandle(primary=primary, secondary=secondary):
            return [leaf for leaf in (primary, secondary) if leaf is not None]
        case _:
            return []


def primary_leaf(editor_input: EditorInput | None) -> OpenHandle | None:
    """Return the leaf an input is considered to be showing."""
    match editor_input:
        case OpenHandle():
            return editor_input
        case CompositeHandle(primary=primary):
            return primary
        case _:
            return None
