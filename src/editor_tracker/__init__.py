"""Reconcile open editors with changes to the files they show.

This package provides:
- Ingestion of local save / move / delete events and external change batches
- Segment-wise path identity (equality, ancestry, prefix rewriting)
- A tracker disposing, reopening or reloading open editors accordingly,
  without ever discarding unsaved edits
- A watchfiles adapter feeding change batches into the tracker
"""

from __future__ import annotations

from editor_tracker.collaborators import (
    EditorGroup,
    EditorService,
    HandleRegistry,
    Lifecycle,
    ModelRegistry,
    ModelState,
    OpenOptions,
    TextModel,
    VisibleEditor,
)
from editor_tracker.config import DEFAULT_DEBOUNCE_WINDOW, TrackerConfig
from editor_tracker.errors import ConfigError, ErrorSink, TrackerError, log_unexpected_error
from editor_tracker.events import (
    ChangeEvent,
    ChangeKind,
    ChangeSources,
    FileChangesBatch,
    FileState,
    LocalChangeEvent,
)
from editor_tracker.handles import (
    CompositeHandle,
    EditorInput,
    HandleKind,
    OpenHandle,
    primary_leaf,
    unwrap,
)
from editor_tracker.lifecycle import ShutdownLifecycle
from editor_tracker.log import configure_logging, get_logger
from editor_tracker.paths import (
    CASE_INSENSITIVE,
    CASE_SENSITIVE,
    DEFAULT_COMPARER,
    PathComparer,
    ResourcePath,
    as_resource,
    is_equal_or_ancestor,
    rewrite,
)
from editor_tracker.tracker import FileEditorTracker
from editor_tracker.watcher import FileChangeWatcher, batch_from_watchfiles

__version__ = "0.1.0"

__all__ = [
    # Paths
    "CASE_INSENSITIVE",
    "CASE_SENSITIVE",
    "DEFAULT_COMPARER",
    # Config
    "DEFAULT_DEBOUNCE_WINDOW",
    # Events
    "ChangeEvent",
    "ChangeKind",
    "ChangeSources",
    # Handles
    "CompositeHandle",
    # Errors
    "ConfigError",
    # Collaborators
    "EditorGroup",
    "EditorInput",
    "EditorService",
    "ErrorSink",
    "FileChangeWatcher",
    "FileChangesBatch",
    # Core
    "FileEditorTracker",
    "FileState",
    "HandleKind",
    "HandleRegistry",
    "Lifecycle",
    "LocalChangeEvent",
    "ModelRegistry",
    "ModelState",
    "OpenHandle",
    "OpenOptions",
    "PathComparer",
    "ResourcePath",
    # Lifecycle
    "ShutdownLifecycle",
    "TextModel",
    "TrackerConfig",
    "TrackerError",
    "VisibleEditor",
    "__version__",
    "as_resource",
    "batch_from_watchfiles",
    # Logging
    "configure_logging",
    "get_logger",
    "is_equal_or_ancestor",
    "log_unexpected_error",
    "primary_leaf",
    "rewrite",
    "unwrap",
]
