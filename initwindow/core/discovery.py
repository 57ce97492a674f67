# initwindow/core/discovery.py

"""
Process discovery: one-shot scan of running processes reduced to a clean,
deduplicated, name-sorted list of Apps.

    discovery = ProcessDiscovery(backend, settings_provider, icon_resolver)
    apps = await discovery.scan()
"""

from __future__ import annotations

import asyncio
import locale
import logging
import ntpath
import os
import uuid
from dataclasses import dataclass
from typing import Callable, Dict, List, Optional

from .config import DEDUPE_PATH, Settings
from .exclusion import ExclusionPolicy
from .icon_resolver import IconResolver
from .models import App, RawProcess
from .process_backend import ProcessBackend

# Substrings that mark a process as a helper of some bigger app.
HELPER_INDICATORS = (
    "helper",
    "updater",
    "update",
    "broker",
    "renderer",
    "background",
    "service",
    "worker",
    "daemon",
    "installer",
    "setup",
    "agent",
    "crash",
    "plugin",
    "host",
)

EXECUTABLE_EXTENSIONS = (".exe", ".com", ".bat", ".cmd")


def is_helper_name(name: str) -> bool:
    lowered = name.lower()
    return any(indicator in lowered for indicator in HELPER_INDICATORS)


def display_name(process_name: str, path: str) -> str:
    name = (process_name or "").strip() or ntpath.basename(path)
    root, ext = ntpath.splitext(name)
    if ext.lower() in EXECUTABLE_EXTENSIONS and root:
        return root
    return name


def use_system_collation(logger: Optional[logging.Logger] = None) -> bool:
    """
    Switch LC_COLLATE to the user's locale so sort_key orders names the way
    the user reads them. Python starts in the C locale (codepoint order).
    """
    logger = logger or logging.getLogger("initwindow.Discovery")
    try:
        locale.setlocale(locale.LC_COLLATE, "")
    except locale.Error as e:
        logger.warning(f"Could not use the system collation, names sort by codepoint: {e}")
        return False
    return True


def sort_key(app: App):
    return (locale.strxfrm(app.name.casefold()), app.path.lower())


@dataclass
class _Candidate:
    name: str
    path: str
    helper: bool


class ProcessDiscovery:
    """
    Turns the raw OS process listing into the App list shown to the user.

    Steps: filter (missing path / excluded) -> dedupe -> name -> sort -> icons.
    `scan()` never raises; a failing process listing yields [].
    """

    def __init__(
        self,
        backend: ProcessBackend,
        settings_provider: Callable[[], Settings],
        icon_resolver: Optional[IconResolver] = None,
        policy: Optional[ExclusionPolicy] = None,
        path_exists: Callable[[str], bool] = os.path.exists,
        logger: Optional[logging.Logger] = None,
    ):
        self.backend = backend
        self.settings_provider = settings_provider
        self.icon_resolver = icon_resolver
        self.policy = policy or ExclusionPolicy()
        self.path_exists = path_exists
        self.logger = logger or logging.getLogger("initwindow.Discovery")

    # ------------------------------------------------------------------ #
    # Public API
    # ------------------------------------------------------------------ #

    async def scan(self) -> List[App]:
        try:
            settings = self.settings_provider()
            raw = await asyncio.to_thread(self.backend.list_processes)
        except Exception as e:
            self.logger.error(f"Failed to scan processes: {e}", exc_info=True)
            return []

        candidates = self._filter(raw, settings)
        if settings.dedupe_mode == DEDUPE_PATH:
            kept = self._dedupe_by_path(candidates)
        else:
            kept = self._dedupe_by_directory(candidates)

        apps = [
            App(id=str(uuid.uuid4()), name=display_name(c.name, c.path), path=c.path)
            for c in kept
        ]
        apps.sort(key=sort_key)

        if settings.extract_icons and self.icon_resolver is not None:
            await self._attach_icons(apps)

        self.logger.info(f"Scan found {len(apps)} apps ({len(raw)} processes listed)")
        return apps

    # ------------------------------------------------------------------ #
    # Internal helpers
    # ------------------------------------------------------------------ #

    def _filter(self, raw: List[RawProcess], settings: Settings) -> List[_Candidate]:
        exclusion = settings.exclusion
        candidates: List[_Candidate] = []

        for proc in raw:
            path = (proc.path or "").strip()
            if not path:
                continue
            try:
                if not self.path_exists(path):
                    continue
            except (OSError, ValueError):
                continue
            if self.policy.should_exclude(proc.name, path, exclusion):
                continue
            candidates.append(_Candidate(name=proc.name, path=path, helper=is_helper_name(proc.name)))

        return candidates

    def _dedupe_by_directory(self, candidates: List[_Candidate]) -> List[_Candidate]:
        """
        One app per install directory. A main-looking process replaces a
        helper-looking one seen earlier; otherwise the first one seen stays.
        """
        groups: Dict[str, _Candidate] = {}
        for c in candidates:
            key = ntpath.dirname(c.path).lower()
            current = groups.get(key)
            if current is None or (current.helper and not c.helper):
                groups[key] = c
        return list(groups.values())

    def _dedupe_by_path(self, candidates: List[_Candidate]) -> List[_Candidate]:
        seen: Dict[str, _Candidate] = {}
        for c in candidates:
            seen.setdefault(c.path.lower(), c)
        return list(seen.values())

    async def _attach_icons(self, apps: List[App]):
        results = await asyncio.gather(
            *(self.icon_resolver.resolve(app.path) for app in apps),
            return_exceptions=True,
        )
        for app, icon in zip(apps, results):
            if isinstance(icon, BaseException):
                self.logger.warning(f"Icon lookup failed for {app.path}: {icon}")
                app.icon = None
            else:
                app.icon = icon
