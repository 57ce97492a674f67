# initwindow/core/storage.py

"""
Persistent storage for InitWindow.

A single JSON document:

    {
      "collections": [ {...Collection.to_dict()...}, ... ],
      "settings": { ...Settings.to_dict()... }
    }

Settings are always read back through merge_with_defaults, so new options
show up with their default value in old files.
"""

from __future__ import annotations

import json
import logging
import os
import tempfile
from pathlib import Path
from typing import Any, Dict, List, Optional, Union

from .config import Settings, merge_with_defaults
from .models import Collection


class StorageService:
    def __init__(self, path: Path, logger: Optional[logging.Logger] = None):
        self.path = Path(path)
        self.logger = logger or logging.getLogger("initwindow.Storage")
        self._data: Dict[str, Any] = {"collections": [], "settings": {}}
        self.load()

    # ------------------------------------------------------------------ internal

    def load(self) -> bool:
        """
        Read the document from disk.

        Returns:
            True if a file was read, False if defaults are in use
        """
        if not self.path.exists():
            self.logger.info(f"Data file not found at {self.path}, starting empty.")
            self._data = {"collections": [], "settings": {}}
            return False

        try:
            with self.path.open("r", encoding="utf-8") as f:
                raw = json.load(f)
        except (OSError, ValueError) as e:
            self.logger.error(f"Failed to load data file {self.path}: {e}")
            self._data = {"collections": [], "settings": {}}
            return False

        if not isinstance(raw, dict):
            self.logger.error(f"Data file {self.path} is not a JSON object, ignoring it.")
            raw = {}

        collections = raw.get("collections")
        settings = raw.get("settings")
        self._data = {
            "collections": collections if isinstance(collections, list) else [],
            "settings": settings if isinstance(settings, dict) else {},
        }
        self.logger.info(f"Loaded {len(self._data['collections'])} collections from disk.")
        return True

    def save(self) -> bool:
        try:
            self.path.parent.mkdir(parents=True, exist_ok=True)
            fd, tmp = tempfile.mkstemp(dir=self.path.parent, suffix=".tmp")
            with os.fdopen(fd, "w", encoding="utf-8") as f:
                json.dump(self._data, f, ensure_ascii=False, indent=2)
            os.replace(tmp, self.path)
            return True
        except OSError as e:
            self.logger.error(f"Failed to save data file {self.path}: {e}", exc_info=True)
            return False

    # ------------------------------------------------------------------ public

    def get_collections(self) -> List[Collection]:
        items: List[Collection] = []
        for raw in self._data["collections"]:
            if not isinstance(raw, dict):
                continue
            items.append(Collection.from_dict(raw))
        return items

    def save_collections(self, collections: List[Collection]) -> bool:
        self._data["collections"] = [c.to_dict() for c in collections]
        return self.save()

    def get_settings(self) -> Settings:
        return merge_with_defaults(self._data["settings"])

    def save_settings(self, settings: Union[Settings, Dict[str, Any]]) -> Settings:
        if isinstance(settings, Settings):
            settings = settings.to_dict()
        merged = merge_with_defaults({**self._data["settings"], **settings})
        self._data["settings"] = merged.to_dict()
        self.save()
        return merged

    def get_all(self) -> Dict[str, Any]:
        return {
            "collections": self.get_collections(),
            "settings": self.get_settings(),
        }
