# initwindow/core/autostart.py

"""
Windows run-at-login registration.
Writes InitWindow into HKCU\\...\\Run so it starts with --auto-start on login.
"""

from __future__ import annotations

import logging
import sys
from pathlib import Path
from typing import Optional

RUN_KEY_PATH = r"Software\Microsoft\Windows\CurrentVersion\Run"
VALUE_NAME = "InitWindow"
AUTO_START_FLAG = "--auto-start"


class AutoStartError(Exception):
    """Registry write failed."""


def launch_command() -> str:
    """
    Command line stored in the Run key.

    Frozen builds point at the executable itself; source checkouts run
    main.py with the current interpreter.
    """
    if getattr(sys, "frozen", False):
        return f'"{sys.executable}" {AUTO_START_FLAG}'

    main_py = Path(__file__).resolve().parents[2] / "main.py"
    return f'"{sys.executable}" "{main_py}" {AUTO_START_FLAG}'


def _winreg():
    try:
        import winreg
    except ImportError as e:
        raise AutoStartError("Run at login is only available on Windows") from e
    return winreg


class AutoStartService:
    """Manage the InitWindow entry in the current user's Run key."""

    def __init__(self, value_name: str = VALUE_NAME, logger: Optional[logging.Logger] = None):
        self.value_name = value_name
        self.logger = logger or logging.getLogger("initwindow.AutoStart")

    def enable(self, command: Optional[str] = None):
        winreg = _winreg()

        command = command or launch_command()
        try:
            key = winreg.OpenKey(winreg.HKEY_CURRENT_USER, RUN_KEY_PATH, 0, winreg.KEY_SET_VALUE)
            try:
                winreg.SetValueEx(key, self.value_name, 0, winreg.REG_SZ, command)
            finally:
                winreg.CloseKey(key)
        except OSError as e:
            self.logger.error(f"Error adding to registry: {e}", exc_info=True)
            raise AutoStartError(str(e)) from e

        self.logger.info(f"Added InitWindow to registry startup: {command}")

    def disable(self):
        winreg = _winreg()

        try:
            key = winreg.OpenKey(winreg.HKEY_CURRENT_USER, RUN_KEY_PATH, 0, winreg.KEY_SET_VALUE)
            try:
                winreg.DeleteValue(key, self.value_name)
            finally:
                winreg.CloseKey(key)
        except FileNotFoundError:
            # Already disabled
            self.logger.info("InitWindow not found in registry startup")
            return
        except OSError as e:
            self.logger.error(f"Error removing from registry: {e}", exc_info=True)
            raise AutoStartError(str(e)) from e

        self.logger.info("Removed InitWindow from registry startup")

    def is_enabled(self) -> bool:
        try:
            import winreg

            key = winreg.OpenKey(winreg.HKEY_CURRENT_USER, RUN_KEY_PATH, 0, winreg.KEY_READ)
            try:
                value, _ = winreg.QueryValueEx(key, self.value_name)
            finally:
                winreg.CloseKey(key)
        except (ImportError, OSError):
            return False

        return bool(value)
