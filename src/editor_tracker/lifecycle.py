"""Shutdown hook used to release tracker subscriptions."""

from __future__ import annotations

from typing import TYPE_CHECKING, Any

from psygnal import Signal

from editor_tracker.log import get_logger


if TYPE_CHECKING:
    from collections.abc import Callable


logger = get_logger(__name__)


class ShutdownLifecycle:
    """Lifecycle whose shutdown signal fires exactly once."""

    shutdown_requested = Signal()
    """Emitted when the process shuts down."""

    def __init__(self) -> None:
        self._shut_down = False

    @property
    def is_shut_down(self) -> bool:
        return self._shut_down

    def on_shutdown(self, callback: Callable[[], Any]) -> None:
        """Register a teardown callback."""
        self.shutdown_requested.connect(callback)

    def shutdown(self) -> None:
        """Run all teardown callbacks. Later calls do nothing."""
        if self._shut_down:
            return
        self._shut_down = True
        logger.debug("Shutting down", callbacks=len(self.shutdown_requested))
        self.shutdown_requested.emit()
        self.shutdown_requested.disconnect()
