"""Exceptions and the unexpected-error sink."""

from __future__ import annotations

from collections.abc import Callable

from editor_tracker.log import get_logger


logger = get_logger(__name__)

ErrorSink = Callable[[BaseException], None]
"""Callable receiving failures of asynchronous reconciliation sub-operations."""


class TrackerError(Exception):
    """Base exception for editor_tracker."""


class ConfigError(TrackerError):
    """Raised when a tracker configuration cannot be loaded or validated."""


def log_unexpected_error(error: BaseException) -> None:
    """Default sink: log the failure and carry on."""
    logger.error(
        "Unexpected error during reconciliation",
        error_type=type(error).__name__,
        exc_info=error,
    )
