from __future__ import annotations

import asyncio
import contextlib
import logging
from collections.abc import Callable, Coroutine
from pathlib import Path
from typing import Any

from watchfiles import Change, DefaultFilter, awatch

from gql_extract.core.languages import is_component_path

logger = logging.getLogger(__name__)


class ComponentFilter(DefaultFilter):
    """Let through component files only, on top of watchfiles' default ignores."""

    def __call__(self, change: Change, path: str) -> bool:
        return super().__call__(change, path) and is_component_path(Path(path))


class WatchfilesWatcher:
    """Re-extract component files when they are added or edited.

    Deletions are logged and dropped: there is nothing left to extract.
    Implements the ``FileWatcherPort`` protocol.
    """

    def __init__(
        self,
        directory: str | Path,
        on_change: Callable[[set[Path]], Coroutine[Any, Any, None]],
    ) -> None:
        self._directory = Path(directory)
        self._on_change = on_change
        self._filter = ComponentFilter()
        self._task: asyncio.Task[None] | None = None

    @property
    def running(self) -> bool:
        return self._task is not None

    async def start(self) -> None:
        if self._task is not None:
            return
        self._task = asyncio.create_task(self._watch())
        logger.info("Watching %s for component changes", self._directory)

    async def stop(self) -> None:
        if self._task is None:
            return
        self._task.cancel()
        with contextlib.suppress(asyncio.CancelledError):
            await self._task
        self._task = None
        logger.info("Stopped watching %s", self._directory)

    async def _watch(self) -> None:
        async for changes in awatch(self._directory, watch_filter=self._filter):
            changed: set[Path] = set()
            for change, raw_path in changes:
                path = Path(raw_path)
                if not is_component_path(path):
                    continue
                if change == Change.deleted:
                    logger.debug("Component removed: %s", path)
                    continue
                changed.add(path)
            if not changed:
                continue
            logger.info("Re-extracting %d changed component(s)", len(changed))
            try:
                await self._on_change(changed)
            except Exception:
                logger.exception("Re-extraction after a change failed")
