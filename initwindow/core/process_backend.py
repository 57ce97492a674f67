# initwindow/core/process_backend.py

"""
OS collaborator for discovery and launching.

Everything that touches the operating system goes through a ProcessBackend,
so discovery and launching can be tested with a fake one. All methods are
blocking; async callers run them with asyncio.to_thread.
"""

from __future__ import annotations

import logging
import ntpath
import os
import subprocess
from typing import List, Optional, Protocol

import psutil

from .models import RawProcess


class ProcessBackend(Protocol):
    def list_processes(self) -> List[RawProcess]: ...

    def start_process(self, path: str) -> None: ...

    def is_running(self, path: str) -> bool: ...

    def extract_icon(self, path: str) -> Optional[bytes]: ...


def same_path(a: str, b: str) -> bool:
    """Windows path equality: case-insensitive, either slash."""
    return ntpath.normcase(ntpath.normpath(a)) == ntpath.normcase(ntpath.normpath(b))


class PsutilProcessBackend:
    """
    ProcessBackend for Windows built on psutil (listing / running check),
    subprocess (launch) and pywin32 (icons).
    """

    def __init__(self, logger: Optional[logging.Logger] = None):
        self.logger = logger or logging.getLogger("initwindow.ProcessBackend")
        self._win = None

    # ------------------------------------------------------------------ #
    # Listing
    # ------------------------------------------------------------------ #

    def list_processes(self) -> List[RawProcess]:
        processes: List[RawProcess] = []
        for proc in psutil.process_iter(attrs=["name", "exe"]):
            try:
                name = proc.info.get("name") or ""
                exe = proc.info.get("exe") or ""
            except (psutil.NoSuchProcess, psutil.AccessDenied, psutil.ZombieProcess):
                continue
            processes.append(RawProcess(name=name, path=exe))

        self.logger.debug(f"Listed {len(processes)} processes")
        return processes

    def is_running(self, path: str) -> bool:
        target = ntpath.basename(path).lower()
        for proc in psutil.process_iter(attrs=["name", "exe"]):
            try:
                name = (proc.info.get("name") or "").lower()
                # Cheap name filter before comparing full paths
                if name != target:
                    continue
                exe = proc.info.get("exe")
                if exe and same_path(exe, path):
                    return True
            except (psutil.NoSuchProcess, psutil.AccessDenied, psutil.ZombieProcess):
                continue
        return False

    # ------------------------------------------------------------------ #
    # Launching
    # ------------------------------------------------------------------ #

    def start_process(self, path: str) -> None:
        """
        Start the executable detached from us, working directory = its folder.
        Raises OSError if Windows refuses to start it.
        """
        flags = getattr(subprocess, "DETACHED_PROCESS", 0) | getattr(
            subprocess, "CREATE_NEW_PROCESS_GROUP", 0
        )
        subprocess.Popen(
            [path],
            cwd=os.path.dirname(path) or None,
            shell=False,
            close_fds=True,
            creationflags=flags,
        )
        self.logger.info(f"Started process: {path}")

    # ------------------------------------------------------------------ #
    # Icons
    # ------------------------------------------------------------------ #

    def extract_icon(self, path: str) -> Optional[bytes]:
        if self._win is None:
            # pywin32 only exists on Windows
            from .windows_integration import WindowsIntegration

            self._win = WindowsIntegration(logger=self.logger)
        return self._win.extract_icon_png(path)
