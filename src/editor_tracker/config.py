"""Configuration model for the editor tracker.

Can be built in code or loaded standalone from YAML:

    # tracker.yml
    tracker:
      debounce_window: 2000  # milliseconds
      ignore_case: false
"""

from __future__ import annotations

from datetime import timedelta
from typing import TYPE_CHECKING, Any, Self

from pydantic import BaseModel, ConfigDict, field_validator

from editor_tracker.errors import ConfigError
from editor_tracker.paths import DEFAULT_COMPARER, PathComparer


if TYPE_CHECKING:
    import os


DEFAULT_DEBOUNCE_WINDOW = timedelta(milliseconds=2000)


class TrackerConfig(BaseModel):
    """Settings for reconciling open editors with file changes."""

    model_config = ConfigDict(frozen=True, extra="forbid")

    debounce_window: timedelta = DEFAULT_DEBOUNCE_WINDOW
    """Minimum age of the last save before an external update is trusted.

    Plain numbers are read as milliseconds.
    """

    ignore_case: bool | None = None
    """Compare paths case-insensitively. None uses the host filesystem default."""

    restore_view_state: bool = True
    """Restore scroll / cursor state after a text reload changed the content."""

    reopen_binary_on_update: bool = True
    """Force-reopen visible binary editors when their file is updated."""

    @field_validator("debounce_window", mode="before")
    @classmethod
    def parse_milliseconds(cls, value: Any) -> Any:
        if isinstance(value, int | float) and not isinstance(value, bool):
            return timedelta(milliseconds=value)
        return value

    @field_validator("debounce_window")
    @classmethod
    def check_non_negative(cls, value: timedelta) -> timedelta:
        if value < timedelta(0):
            msg = "debounce_window must not be negative"
            raise ValueError(msg)
        return value

    @property
    def comparer(self) -> PathComparer:
        """Path comparer matching the configured case policy."""
        if self.ignore_case is None:
            return DEFAULT_COMPARER
        return PathComparer(ignore_case=self.ignore_case)

    @classmethod
    def from_file(cls, path: str | os.PathLike[str]) -> Self:
        """Load tracker configuration from a YAML file.

        The settings may sit at the top level or below a ``tracker`` key.

        Raises:
            ConfigError: If loading or validation fails
        """
        import yamling

        try:
            data = yamling.load_yaml_file(str(path)) or {}
            if isinstance(data, dict) and "tracker" in data:
                data = data["tracker"] or {}
            return cls.model_validate(data)
        except Exception as exc:
            msg = f"Failed to load tracker config from {path}"
            raise ConfigError(msg) from exc
