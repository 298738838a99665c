from __future__ import annotations

import asyncio
import contextlib
import logging
from pathlib import Path

from watchfiles import Change, awatch

from gql_harvest.core.discovery import is_ignored_path
from gql_harvest.core.languages import is_supported_file
from gql_harvest.core.ports.watcher import ChangeCallback

logger = logging.getLogger(__name__)


def _is_watched_file(path: Path, root: Path) -> bool:
    if not is_supported_file(path):
        return False
    try:
        relative = path.relative_to(root)
    except ValueError:
        relative = path
    return not is_ignored_path(relative)


class WatchfilesWatcher:
    """Watch a directory for source-file saves and hand the changed paths to a callback.

    Deleted files are not reported; there is nothing left to extract from them.
    Implements the ``FileWatcherPort`` protocol.
    """

    def __init__(self, directory: str | Path, on_change: ChangeCallback) -> None:
        self._directory = Path(directory)
        self._on_change = on_change
        self._task: asyncio.Task[None] | None = None

    async def start(self) -> None:
        if self._task is not None:
            return
        self._task = asyncio.create_task(self._watch())
        logger.info("Watching %s for query changes", self._directory)

    async def stop(self) -> None:
        if self._task is None:
            return
        self._task.cancel()
        with contextlib.suppress(asyncio.CancelledError):
            await self._task
        self._task = None
        logger.info("Stopped watching %s", self._directory)

    async def wait(self) -> None:
        if self._task is not None:
            await self._task

    async def _watch(self) -> None:
        async for changes in awatch(self._directory):
            paths = {
                Path(p)
                for change, p in changes
                if change != Change.deleted and _is_watched_file(Path(p), self._directory)
            }
            if paths:
                logger.info("Detected changes in %d file(s)", len(paths))
                try:
                    await self._on_change(paths)
                except Exception:
                    logger.exception("Error re-extracting changed files")
