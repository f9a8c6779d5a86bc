"""Tests for path identity and rewriting."""

from __future__ import annotations

from pathlib import PurePosixPath

import pytest

from editor_tracker import (
    CASE_INSENSITIVE,
    CASE_SENSITIVE,
    PathComparer,
    as_resource,
    is_equal_or_ancestor,
    rewrite,
)


@pytest.mark.parametrize(
    ("ancestor", "candidate", "expected"),
    [
        ("/foo", "/foo", True),
        ("/foo", "/foo/bar", True),
        ("/foo", "/foo/bar/baz.txt", True),
        ("/foo/ba", "/foo/bar", False),
        ("/foo/bar", "/foo", False),
        ("/foo/bar", "/foo/baz", False),
        ("/", "/anything/below", True),
        ("/foo/", "/foo/bar", True),
    ],
)
def test_is_equal_or_ancestor(ancestor: str, candidate: str, expected: bool):
    assert is_equal_or_ancestor(ancestor, candidate) is expected


def test_case_policy():
    assert not CASE_SENSITIVE.is_equal("/A/file.txt", "/a/file.txt")
    assert CASE_INSENSITIVE.is_equal("/A/file.txt", "/a/file.txt")
    assert CASE_INSENSITIVE.is_equal_or_ancestor("/Proj", "/proj/src/x.ts")
    assert not CASE_SENSITIVE.is_equal_or_ancestor("/Proj", "/proj/src/x.ts")


def test_rewrite_nested_resource():
    assert rewrite("/proj/src", "/proj/lib", "/proj/src/x.ts") == PurePosixPath("/proj/lib/x.ts")
    assert rewrite("/a", "/b/c", "/a/d/e/f.txt") == PurePosixPath("/b/c/d/e/f.txt")


def test_rewrite_identical_returns_new_ancestor():
    assert rewrite("/proj/a.txt", "/other/b.txt", "/proj/a.txt") == PurePosixPath("/other/b.txt")


def test_rewrite_keeps_trailing_segments_verbatim():
    comparer = PathComparer(ignore_case=True)
    result = comparer.rewrite("/PROJ/src", "/proj/lib", "/proj/SRC/Deep/File.TS")
    assert result == PurePosixPath("/proj/lib/Deep/File.TS")


def test_rewrite_case_only_rename():
    assert CASE_INSENSITIVE.rewrite("/A/file.txt", "/a/file.txt", "/A/file.txt") == PurePosixPath(
        "/a/file.txt"
    )


def test_rewrite_rejects_unrelated_path():
    with pytest.raises(ValueError, match="not located under"):
        rewrite("/foo/ba", "/x", "/foo/bar/baz")


def test_as_resource_normalizes_separators():
    assert as_resource("C:\\work\\file.txt") == PurePosixPath("C:/work/file.txt")
    assert as_resource("\\\\server\\share\\a.txt") == PurePosixPath("//server/share/a.txt")
    path = PurePosixPath("/already/a/path")
    assert as_resource(path) is path


def test_backslash_is_a_filename_character_on_posix_paths():
    odd = as_resource("/proj/a\\b")

    assert odd.parts == ("/", "proj", "a\\b")
    assert not is_equal_or_ancestor("/proj/a", odd)
