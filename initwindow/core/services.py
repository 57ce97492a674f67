# initwindow/core/services.py

"""
Wires the engine together. Every component gets its collaborators passed in;
tests build the same graph with a fake ProcessBackend.
"""

from __future__ import annotations

import logging
from dataclasses import dataclass
from pathlib import Path
from typing import List, Optional

from .autostart import AutoStartService
from .collection_service import CollectionService
from .config import Settings, default_data_dir
from .discovery import ProcessDiscovery
from .icon_resolver import IconResolver
from .launcher import LaunchOrchestrator
from .models import App, RunResult
from .process_backend import ProcessBackend, PsutilProcessBackend
from .storage import StorageService

DATA_FILE_NAME = "data.json"
ICON_DIR_NAME = "icons"


@dataclass
class Services:
    storage: StorageService
    collections: CollectionService
    backend: ProcessBackend
    icons: IconResolver
    discovery: ProcessDiscovery
    launcher: LaunchOrchestrator
    autostart: AutoStartService

    # The three operations the presentation layer calls.

    async def scan_running_processes(self) -> List[App]:
        # Settings may have changed since startup
        self.icons.timeout = self.storage.get_settings().icon_timeout
        return await self.discovery.scan()

    async def run_collection(self, collection_id: str) -> RunResult:
        # Settings may have changed since startup
        self.launcher.launch_delay = self.storage.get_settings().launch_delay
        return await self.launcher.run(collection_id)

    async def is_process_running(self, path: str) -> bool:
        return await self.launcher.is_process_running(path)

    def settings(self) -> Settings:
        return self.storage.get_settings()

    # Run-at-login toggle shown in the tray menu.

    def run_at_login(self) -> bool:
        return self.autostart.is_enabled()

    def set_run_at_login(self, enabled: bool) -> bool:
        """Raises AutoStartError when the registry refuses the change."""
        if enabled:
            self.autostart.enable()
        else:
            self.autostart.disable()
        return self.autostart.is_enabled()


def build_services(
    data_dir: Optional[Path] = None,
    backend: Optional[ProcessBackend] = None,
    logger: Optional[logging.Logger] = None,
) -> Services:
    data_dir = Path(data_dir) if data_dir is not None else default_data_dir()
    logger = logger or logging.getLogger("initwindow")

    storage = StorageService(data_dir / DATA_FILE_NAME, logger=logger.getChild("Storage"))
    settings = storage.get_settings()
    backend = backend or PsutilProcessBackend(logger=logger.getChild("ProcessBackend"))
    collections = CollectionService(storage, logger=logger.getChild("Collections"))

    icons = IconResolver(
        data_dir / ICON_DIR_NAME,
        backend.extract_icon,
        timeout=settings.icon_timeout,
        logger=logger.getChild("IconResolver"),
    )
    discovery = ProcessDiscovery(
        backend,
        storage.get_settings,
        icon_resolver=icons,
        logger=logger.getChild("Discovery"),
    )
    launcher = LaunchOrchestrator(
        collections,
        backend,
        launch_delay=settings.launch_delay,
        logger=logger.getChild("Launcher"),
    )

    return Services(
        storage=storage,
        collections=collections,
        backend=backend,
        icons=icons,
        discovery=discovery,
        launcher=launcher,
        autostart=AutoStartService(logger=logger.getChild("AutoStart")),
    )
