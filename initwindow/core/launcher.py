# initwindow/core/launcher.py

"""
Collection launcher.
Replays a stored collection: existence check, already-running check, launch,
with a short pause after every real launch so Windows is not hit with a
dozen cold starts at once.
"""

from __future__ import annotations

import asyncio
import logging
import os
from typing import Awaitable, Callable, Optional, Protocol

from .models import Collection, RunResult, RunResultItem
from .process_backend import ProcessBackend

DEFAULT_LAUNCH_DELAY = 0.5


def format_run_result(result: RunResult) -> str:
    """One short human-readable summary, used for tray notifications."""
    parts = []
    if result.launched:
        parts.append(f"Launched: {', '.join(result.launched)}")
    if result.skipped:
        parts.append("Skipped: " + ", ".join(f"{i.app} ({i.reason})" for i in result.skipped))
    if result.failed:
        parts.append("Failed: " + ", ".join(f"{i.app} ({i.reason})" for i in result.failed))
    return "\n".join(parts) or "Nothing to launch."


class CollectionReader(Protocol):
    def get(self, collection_id: str) -> Optional[Collection]: ...


class LaunchOrchestrator:
    """
    Launches every app of a collection, in stored order, one after another.

    The loop is sequential on purpose: order is preserved exactly and the
    delay after each successful launch is the throttle.
    """

    def __init__(
        self,
        collections: CollectionReader,
        backend: ProcessBackend,
        launch_delay: float = DEFAULT_LAUNCH_DELAY,
        path_exists: Callable[[str], bool] = os.path.exists,
        sleep: Callable[[float], Awaitable[None]] = asyncio.sleep,
        logger: Optional[logging.Logger] = None,
    ):
        self.collections = collections
        self.backend = backend
        self.launch_delay = launch_delay
        self.path_exists = path_exists
        self.sleep = sleep
        self.logger = logger or logging.getLogger("initwindow.Launcher")

    async def is_process_running(self, path: str) -> bool:
        """Running check that never raises; a failing check counts as not running."""
        try:
            return bool(await asyncio.to_thread(self.backend.is_running, path))
        except Exception as e:
            self.logger.warning(f"Running check failed for {path}: {e}")
            return False

    async def run(self, collection_id: str) -> RunResult:
        try:
            collection = self.collections.get(collection_id)
        except Exception as e:
            self.logger.error(f"Collection lookup failed for {collection_id}: {e}", exc_info=True)
            collection = None

        if collection is None:
            self.logger.warning(f"Run requested for unknown collection {collection_id}")
            return RunResult.not_found()

        self.logger.info(f"Running collection '{collection.name}' ({len(collection.apps)} apps)")
        result = RunResult()

        for app in collection.apps:
            if not self._exists(app.path):
                result.failed.append(RunResultItem(app=app.name, reason="Executable not found"))
                continue

            if await self.is_process_running(app.path):
                result.skipped.append(RunResultItem(app=app.name, reason="Already running"))
                continue

            try:
                await asyncio.to_thread(self.backend.start_process, app.path)
            except Exception as e:
                reason = str(e) or "Unknown error"
                self.logger.error(f"Failed to launch {app.name} ({app.path}): {reason}")
                result.failed.append(RunResultItem(app=app.name, reason=reason))
                continue

            result.launched.append(app.name)
            await self.sleep(self.launch_delay)

        self.logger.info(
            f"Collection '{collection.name}' done: "
            f"{len(result.launched)} launched, {len(result.skipped)} skipped, "
            f"{len(result.failed)} failed"
        )
        return result

    def _exists(self, path: str) -> bool:
        try:
            return bool(path) and self.path_exists(path)
        except (OSError, ValueError):
            return False
