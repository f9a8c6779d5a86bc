"""Command line entry point for watching paths and logging change batches."""

from __future__ import annotations

import asyncio
from pathlib import Path  # noqa: TC003
from typing import TYPE_CHECKING, Annotated

import typer as t

from editor_tracker.config import TrackerConfig
from editor_tracker.errors import ConfigError
from editor_tracker.events import ChangeSources
from editor_tracker.log import configure_logging, get_logger
from editor_tracker.watcher import FileChangeWatcher


if TYPE_CHECKING:
    from editor_tracker.events import FileChangesBatch


logger = get_logger(__name__)

cli = t.Typer(
    name="editor-tracker",
    help="Reconcile open editors with file system changes.",
    no_args_is_help=True,
)


@cli.callback()
def main() -> None:
    """Editor tracker command line interface."""


def log_batch(batch: FileChangesBatch) -> None:
    logger.info(
        "File changes",
        added=[str(c.resource) for c in batch.added],
        updated=[str(c.resource) for c in batch.updated],
        deleted=[str(c.resource) for c in batch.deleted],
    )


async def _watch(paths: list[Path], sources: ChangeSources, duration: float | None) -> None:
    async with FileChangeWatcher(paths=list(paths), sources=sources):
        if duration is None:
            await asyncio.Event().wait()
        else:
            await asyncio.sleep(duration)


@cli.command("watch")
def watch_command(
    paths: Annotated[list[Path], t.Argument(help="Files or directories to watch")],
    config: Annotated[
        Path | None,
        t.Option("--config", "-c", help="YAML file with tracker settings"),
    ] = None,
    log_level: Annotated[
        str,
        t.Option("--log-level", "-l", help="Logging level"),
    ] = "INFO",
    json_logs: Annotated[
        bool,
        t.Option("--json-logs", help="Emit JSON log lines"),
    ] = False,
    duration: Annotated[
        float | None,
        t.Option("--duration", help="Stop after this many seconds (default: run until killed)"),
    ] = None,
) -> None:
    """Watch paths and log every change batch the tracker would receive.

    The case policy of the configuration decides how batch paths are matched.

    Examples:
        # Watch a project with debug output
        editor-tracker watch ./src --log-level debug

        # Use settings from a YAML file
        editor-tracker watch ./src --config tracker.yml
    """
    configure_logging(log_level, json_logs=json_logs)
    try:
        tracker_config = TrackerConfig.from_file(config) if config else TrackerConfig()
    except ConfigError as exc:
        logger.error("Invalid configuration", error=str(exc))  # noqa: TRY400
        raise t.Exit(1) from exc

    sources = ChangeSources(comparer=tracker_config.comparer)
    sources.file_changes.connect(log_batch)
    logger.info("Watching paths", paths=[str(p) for p in paths])
    asyncio.run(_watch(paths, sources, duration))


if __name__ == "__main__":
    cli()
