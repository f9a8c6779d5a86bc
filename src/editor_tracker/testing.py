"""In-memory editing surface for tests and simulations.

Implements every collaborator protocol the tracker consumes and records the
commands it receives:

    ```python
    group = MemoryGroup(position=0)
    handle = group.open(OpenHandle(as_resource("/proj/a.txt")), pinned=True)
    registry = MemoryRegistry([group])
    editors = MemoryEditorService(registry)
    tracker = FileEditorTracker(ChangeSources(), registry, editors, MemoryModelRegistry())
    ```
"""

from __future__ import annotations

import asyncio
from dataclasses import dataclass, field
from typing import TYPE_CHECKING, Any, TypeVar

from editor_tracker.collaborators import ModelState, OpenOptions
from editor_tracker.handles import CompositeHandle, OpenHandle, unwrap
from editor_tracker.paths import ResourcePath, as_resource


if TYPE_CHECKING:
    from collections.abc import Callable
    from datetime import datetime

    from editor_tracker.collaborators import ViewState
    from editor_tracker.handles import EditorInput
    from editor_tracker.paths import ResourceLike


T = TypeVar("T", OpenHandle, CompositeHandle)


@dataclass
class MemoryGroup:
    """A group of editors kept in a plain list."""

    position: int = 0
    inputs: list[EditorInput] = field(default_factory=list)
    pinned: set[int] = field(default_factory=set)
    active: EditorInput | None = None

    def open(
        self,
        editor_input: T,
        *,
        pinned: bool = False,
        active: bool = False,
        index: int | None = None,
    ) -> T:
        """Add an input to the group and return it."""
        if index is None or index > len(self.inputs):
            index = len(self.inputs)
        self.inputs.insert(index, editor_input)
        if pinned:
            self.pinned.add(id(editor_input))
        if active or self.active is None:
            self.active = editor_input
        return editor_input

    def close(self, editor_input: EditorInput) -> bool:
        """Remove an input. Returns False if it was not open."""
        for i, candidate in enumerate(self.inputs):
            if candidate is editor_input:
                del self.inputs[i]
                self.pinned.discard(id(editor_input))
                if self.active is editor_input:
                    self.active = self.inputs[0] if self.inputs else None
                return True
        return False

    def handles(self) -> list[EditorInput]:
        return list(self.inputs)

    def is_pinned(self, editor_input: EditorInput) -> bool:
        return id(editor_input) in self.pinned

    def index_of(self, editor_input: EditorInput) -> int:
        for i, candidate in enumerate(self.inputs):
            if candidate is editor_input:
                return i
        return -1

    def is_active(self, editor_input: EditorInput) -> bool:
        return self.active is editor_input

    def find(self, resource: ResourceLike) -> OpenHandle | None:
        """First top-level handle bound exactly to ``resource``."""
        path = as_resource(resource)
        for candidate in self.inputs:
            if isinstance(candidate, OpenHandle) and candidate.resource == path:
                return candidate
        return None


@dataclass
class MemoryRegistry:
    """Registry over a list of `MemoryGroup`."""

    group_list: list[MemoryGroup] = field(default_factory=list)

    def groups(self) -> list[MemoryGroup]:
        return list(self.group_list)

    def group_at(self, position: int) -> MemoryGroup:
        for group in self.group_list:
            if group.position == position:
                return group
        group = MemoryGroup(position=position)
        self.group_list.append(group)
        return group

    def resources(self) -> list[str]:
        """Resources of all open leaf handles, in order."""
        return [
            str(handle.resource)
            for group in self.group_list
            for editor_input in group.inputs
            for handle in unwrap(editor_input)
        ]


@dataclass
class MemoryEditor:
    """A visible editor control showing one input."""

    input: EditorInput | None
    position: int = 0
    is_visible: bool = True
    view_state: Any = None
    restored: list[Any] = field(default_factory=list)

    def save_view_state(self) -> ViewState:
        return self.view_state

    def restore_view_state(self, state: ViewState) -> None:
        self.restored.append(state)
        self.view_state = state


@dataclass
class OpenCall:
    """A recorded `open_editor` command."""

    target: ResourcePath | EditorInput
    options: OpenOptions
    position: int


@dataclass
class MemoryEditorService:
    """Editing surface applying tracker commands to a `MemoryRegistry`."""

    registry: MemoryRegistry
    editors: list[MemoryEditor] = field(default_factory=list)
    opened: list[OpenCall] = field(default_factory=list)
    disposed: list[OpenHandle] = field(default_factory=list)
    fail_open: set[ResourcePath] = field(default_factory=set)
    """Resources whose reopen raises `OSError`."""

    def show(self, editor_input: EditorInput, position: int = 0, **kwargs: Any) -> MemoryEditor:
        """Make an input visible in a new editor control."""
        editor = MemoryEditor(editor_input, position=position, **kwargs)
        self.editors.append(editor)
        return editor

    def visible_editors(self) -> list[MemoryEditor]:
        return [editor for editor in self.editors if editor.is_visible]

    async def open_editor(
        self,
        target: ResourcePath | EditorInput,
        options: OpenOptions,
        position: int,
    ) -> EditorInput:
        self.opened.append(OpenCall(target, options, position))
        await asyncio.sleep(0)
        if not isinstance(target, ResourcePath):
            return target
        if target in self.fail_open:
            msg = f"Cannot open {target}"
            raise OSError(msg)
        group = self.registry.group_at(position)
        existing = group.find(target)
        if existing is None:
            existing = group.open(
                OpenHandle(target),
                pinned=bool(options.pinned),
                index=options.index,
            )
        if not options.inactive:
            group.active = existing
        return existing

    def dispose_handle(self, handle: OpenHandle) -> None:
        for group in self.registry.group_list:
            for editor_input in group.handles():
                if editor_input is handle:
                    group.close(editor_input)
                    self.disposed.append(handle)
                elif isinstance(editor_input, CompositeHandle) and handle in unwrap(editor_input):
                    group.close(editor_input)
                    self.disposed.append(handle)
        for editor in self.editors:
            if handle in unwrap(editor.input):
                editor.input = None
                editor.is_visible = False


@dataclass
class MemoryTextModel:
    """Text model whose ``load`` simulates reading the file again."""

    resource: ResourcePath
    state: ModelState = ModelState.CLEAN
    last_save_attempt_time: datetime | None = None
    last_modified_time: datetime | None = None
    disk_modified_time: datetime | None = None
    """Modification time ``load`` will pick up."""
    exists: bool = True
    load_count: int = 0
    on_load: Callable[[MemoryTextModel], Any] | None = None
    """Called while a load is in flight, e.g. to simulate a user edit."""

    async def load(self) -> None:
        self.load_count += 1
        await asyncio.sleep(0)
        if not self.exists:
            msg = f"No such file: {self.resource}"
            raise FileNotFoundError(msg)
        if self.on_load is not None:
            self.on_load(self)
        if self.disk_modified_time is not None:
            self.last_modified_time = self.disk_modified_time


@dataclass
class MemoryModelRegistry:
    """Text models keyed by resource."""

    models: dict[ResourcePath, MemoryTextModel] = field(default_factory=dict)

    def add(self, model: MemoryTextModel) -> MemoryTextModel:
        self.models[model.resource] = model
        return model

    def get(self, resource: ResourcePath) -> MemoryTextModel | None:
        return self.models.get(resource)
