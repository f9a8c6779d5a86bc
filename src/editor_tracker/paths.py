"""Path identity: equality, ancestry and prefix rewriting for resources.

Resources are hierarchical POSIX-style paths. Matching always works on whole
segments, so ``/foo/bar`` is never considered to live under ``/foo/ba``.
Case sensitivity follows the host filesystem and is carried by a
`PathComparer` instance rather than being baked into the paths themselves.
"""

from __future__ import annotations

from dataclasses import dataclass
import os
from pathlib import PurePosixPath, PureWindowsPath
import sys


ResourcePath = PurePosixPath
"""Identity of a resource. Comparison rules live in `PathComparer`."""

ResourceLike = str | os.PathLike[str]


def as_resource(value: ResourceLike) -> ResourcePath:
    """Coerce a string or path-like object to a `ResourcePath`.

    Backslashes are separators only in paths carrying a Windows drive or UNC
    share. Elsewhere they are ordinary filename characters.
    """
    if isinstance(value, PurePosixPath):
        return value
    text = os.fspath(value)
    windows = PureWindowsPath(text)
    if windows.drive:
        return PurePosixPath(windows.as_posix())
    return PurePosixPath(text)


@dataclass(frozen=True, slots=True)
class PathComparer:
    """Segment-wise path comparison with a fixed case policy."""

    ignore_case: bool = False
    """Compare segments case-insensitively (macOS / Windows filesystems)."""

    def key(self, path: ResourceLike) -> tuple[str, ...]:
        """Return the comparable segment tuple for ``path``."""
        parts = as_resource(path).parts
        if self.ignore_case:
            return tuple(part.casefold() for part in parts)
        return parts

    def is_equal(self, a: ResourceLike, b: ResourceLike) -> bool:
        """Check whether two resources denote the same path."""
        return self.key(a) == self.key(b)

    def is_equal_or_ancestor(self, a: ResourceLike, b: ResourceLike) -> bool:
        """Check whether ``b`` equals ``a`` or is nested somewhere below it."""
        ancestor = self.key(a)
        candidate = self.key(b)
        return candidate[: len(ancestor)] == ancestor

    def rewrite(
        self,
        old_ancestor: ResourceLike,
        new_ancestor: ResourceLike,
        descendant: ResourceLike,
    ) -> ResourcePath:
        """Re-root ``descendant`` from ``old_ancestor`` onto ``new_ancestor``.

        Trailing segments are kept verbatim, including their original casing.

        Raises:
            ValueError: If ``descendant`` is not under ``old_ancestor``
        """
        new_root = as_resource(new_ancestor)
        if self.is_equal(old_ancestor, descendant):
            return new_root
        if not self.is_equal_or_ancestor(old_ancestor, descendant):
            msg = f"{descendant} is not located under {old_ancestor}"
            raise ValueError(msg)
        depth = len(as_resource(old_ancestor).parts)
        trailing = as_resource(descendant).parts[depth:]
        return new_root.joinpath(*trailing)


CASE_SENSITIVE = PathComparer(ignore_case=False)
CASE_INSENSITIVE = PathComparer(ignore_case=True)

# Linux filesystems are case-sensitive, the macOS and Windows defaults are not.
DEFAULT_COMPARER = CASE_SENSITIVE if sys.platform.startswith("linux") else CASE_INSENSITIVE


def is_equal_or_ancestor(a: ResourceLike, b: ResourceLike) -> bool:
    """Case-sensitive `PathComparer.is_equal_or_ancestor`."""
    return CASE_SENSITIVE.is_equal_or_ancestor(a, b)


def rewrite(
    old_ancestor: ResourceLike,
    new_ancestor: ResourceLike,
    descendant: ResourceLike,
) -> ResourcePath:
    """Case-sensitive `PathComparer.rewrite`."""
    return CASE_SENSITIVE.rewrite(old_ancestor, new_ancestor, descendant)
