# initwindow/core/config.py

"""
Configuration for InitWindow.

Settings live inside the storage document (see storage.py) as a plain dict.
`merge_with_defaults` turns whatever was stored (possibly written by an older
version, possibly hand-edited) into a complete, typed Settings object.
"""

from __future__ import annotations

import os
import sys
from dataclasses import dataclass, field, fields
from pathlib import Path
from typing import Any, Dict, FrozenSet, List, Optional, Tuple

DEDUPE_DIRECTORY = "directory"
DEDUPE_PATH = "path"
DEDUPE_MODES = (DEDUPE_DIRECTORY, DEDUPE_PATH)

APP_DIR_NAME = "InitWindow"
DATA_DIR_ENV = "INITWINDOW_DATA_DIR"


@dataclass(frozen=True)
class ExclusionSettings:
    """User-extensible part of the exclusion rules (read-only to the core)."""

    excluded_process_names: FrozenSet[str] = frozenset()
    excluded_paths: Tuple[str, ...] = ()


@dataclass
class Settings:
    auto_start_delay: int = 15
    show_notifications: bool = True
    minimize_to_tray: bool = True
    excluded_process_names: List[str] = field(default_factory=list)
    excluded_paths: List[str] = field(default_factory=list)
    extract_icons: bool = True
    dedupe_mode: str = DEDUPE_DIRECTORY
    launch_delay: float = 0.5
    icon_timeout: float = 5.0

    @property
    def exclusion(self) -> ExclusionSettings:
        return ExclusionSettings(
            excluded_process_names=frozenset(n.lower() for n in self.excluded_process_names),
            excluded_paths=tuple(self.excluded_paths),
        )

    def to_dict(self) -> Dict[str, Any]:
        return {
            f.name: list(getattr(self, f.name))
            if isinstance(getattr(self, f.name), list)
            else getattr(self, f.name)
            for f in fields(self)
        }


DEFAULT_SETTINGS = Settings()


# ------------------------------------------------------------------ #
# Defaults merge
# ------------------------------------------------------------------ #

def _as_bool(value: Any, default: bool) -> bool:
    return value if isinstance(value, bool) else default


def _as_number(value: Any, default, cast):
    # bool is an int subclass; "true" is not a delay
    if isinstance(value, bool) or not isinstance(value, (int, float)):
        return default
    if value < 0:
        return default
    return cast(value)


def _as_str_list(value: Any, default: List[str], lower: bool = False) -> List[str]:
    if not isinstance(value, (list, tuple)):
        return list(default)
    items: List[str] = []
    for v in value:
        if not isinstance(v, str):
            continue
        v = v.strip()
        if not v:
            continue
        items.append(v.lower() if lower else v)
    return items


def merge_with_defaults(partial: Optional[Dict[str, Any]]) -> Settings:
    """
    Build a complete Settings object from a (possibly partial) stored dict.

    Unknown keys are ignored and values of the wrong type fall back to the
    default for that key. Pure: the input dict is not modified.
    """
    raw = partial if isinstance(partial, dict) else {}
    d = DEFAULT_SETTINGS

    dedupe_mode = raw.get("dedupe_mode", d.dedupe_mode)
    if dedupe_mode not in DEDUPE_MODES:
        dedupe_mode = d.dedupe_mode

    return Settings(
        auto_start_delay=_as_number(raw.get("auto_start_delay"), d.auto_start_delay, int),
        show_notifications=_as_bool(raw.get("show_notifications"), d.show_notifications),
        minimize_to_tray=_as_bool(raw.get("minimize_to_tray"), d.minimize_to_tray),
        excluded_process_names=_as_str_list(
            raw.get("excluded_process_names"), d.excluded_process_names, lower=True
        ),
        excluded_paths=_as_str_list(raw.get("excluded_paths"), d.excluded_paths),
        extract_icons=_as_bool(raw.get("extract_icons"), d.extract_icons),
        dedupe_mode=dedupe_mode,
        launch_delay=_as_number(raw.get("launch_delay"), d.launch_delay, float),
        icon_timeout=_as_number(raw.get("icon_timeout"), d.icon_timeout, float),
    )


# ------------------------------------------------------------------ #
# Locations
# ------------------------------------------------------------------ #

def default_data_dir() -> Path:
    """
    Where data.json, the icon cache and logs live.

    INITWINDOW_DATA_DIR wins; otherwise %APPDATA%\\InitWindow on Windows and
    the XDG config dir elsewhere.
    """
    override = os.environ.get(DATA_DIR_ENV)
    if override:
        return Path(override)

    if sys.platform == "win32":
        base = os.environ.get("APPDATA") or os.environ.get("LOCALAPPDATA") or str(Path.home())
        return Path(base) / APP_DIR_NAME

    base = os.environ.get("XDG_CONFIG_HOME") or str(Path.home() / ".config")
    return Path(base) / APP_DIR_NAME.lower()
