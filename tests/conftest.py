"""Test configuration and shared fixtures."""

from __future__ import annotations

from datetime import UTC, datetime, timedelta

import pytest

from editor_tracker import (
    CASE_SENSITIVE,
    ChangeSources,
    FileEditorTracker,
    ShutdownLifecycle,
    TrackerConfig,
)
from editor_tracker.testing import (
    MemoryEditorService,
    MemoryGroup,
    MemoryModelRegistry,
    MemoryRegistry,
)


class FakeClock:
    """Manually advanced clock."""

    def __init__(self, start: datetime):
        self.now = start

    def __call__(self) -> datetime:
        return self.now

    def advance(self, milliseconds: float) -> None:
        self.now += timedelta(milliseconds=milliseconds)

    def ago(self, milliseconds: float) -> datetime:
        return self.now - timedelta(milliseconds=milliseconds)


@pytest.fixture
def clock() -> FakeClock:
    return FakeClock(datetime(2024, 1, 1, 12, 0, tzinfo=UTC))


@pytest.fixture
def sources() -> ChangeSources:
    return ChangeSources(comparer=CASE_SENSITIVE)


@pytest.fixture
def group() -> MemoryGroup:
    return MemoryGroup(position=0)


@pytest.fixture
def registry(group: MemoryGroup) -> MemoryRegistry:
    return MemoryRegistry([group])


@pytest.fixture
def editors(registry: MemoryRegistry) -> MemoryEditorService:
    return MemoryEditorService(registry)


@pytest.fixture
def models() -> MemoryModelRegistry:
    return MemoryModelRegistry()


@pytest.fixture
def lifecycle() -> ShutdownLifecycle:
    return ShutdownLifecycle()


@pytest.fixture
def errors() -> list[BaseException]:
    """Collects everything routed to the tracker's error sink."""
    return []


@pytest.fixture
def config() -> TrackerConfig:
    return TrackerConfig(ignore_case=False)


@pytest.fixture
def tracker(
    sources: ChangeSources,
    registry: MemoryRegistry,
    editors: MemoryEditorService,
    models: MemoryModelRegistry,
    lifecycle: ShutdownLifecycle,
    config: TrackerConfig,
    clock: FakeClock,
    errors: list[BaseException],
):
    tracker = FileEditorTracker(
        sources,
        registry,
        editors,
        models,
        lifecycle,
        config=config,
        clock=clock,
        on_error=errors.append,
    )
    yield tracker
    tracker.dispose()
