# initwindow/core/collection_service.py

"""
CRUD for collections on top of StorageService.

Collections own copies of their apps: whatever list is passed in is copied,
so editing one collection never touches another one (or the scan result).
"""

from __future__ import annotations

import logging
import uuid
from typing import List, Optional

from .models import App, Collection, utc_timestamp
from .process_backend import same_path
from .storage import StorageService


def apps_not_in(collection: Collection, apps: List[App]) -> List[App]:
    """Apps whose path is neither in the collection nor earlier in `apps`."""
    result: List[App] = []
    for app in apps:
        if any(same_path(a.path, app.path) for a in collection.apps + result):
            continue
        result.append(app)
    return result


class CollectionService:
    def __init__(self, storage: StorageService, logger: Optional[logging.Logger] = None):
        self.storage = storage
        self.logger = logger or logging.getLogger("initwindow.Collections")

    # ---------- read ----------

    def list(self) -> List[Collection]:
        return self.storage.get_collections()

    def get(self, collection_id: str) -> Optional[Collection]:
        for c in self.list():
            if c.id == collection_id:
                return c
        return None

    def get_auto_start_collection(self) -> Optional[Collection]:
        for c in self.list():
            if c.is_auto_start:
                return c
        return None

    # ---------- write ----------

    def create(self, name: str, apps: List[App]) -> Collection:
        collections = self.list()
        name = (name or "").strip() or f"Collection {len(collections) + 1}"

        now = utc_timestamp()
        collection = Collection(
            id=str(uuid.uuid4()),
            name=name,
            apps=[a.copy() for a in apps],
            created_at=now,
            updated_at=now,
        )
        collections.append(collection)
        self.storage.save_collections(collections)
        self.logger.info(f"Created collection '{name}' with {len(apps)} apps")
        return collection

    def update(
        self,
        collection_id: str,
        name: Optional[str] = None,
        apps: Optional[List[App]] = None,
    ) -> Optional[Collection]:
        collections = self.list()
        target = self._find(collections, collection_id)
        if target is None:
            return None

        if name is not None and name.strip():
            target.name = name.strip()
        if apps is not None:
            target.apps = [a.copy() for a in apps]
        target.touch()

        self.storage.save_collections(collections)
        return target

    def rename(self, collection_id: str, name: str) -> Optional[Collection]:
        return self.update(collection_id, name=name)

    def add_app(self, collection_id: str, app: App) -> Optional[Collection]:
        collections = self.list()
        target = self._find(collections, collection_id)
        if target is None:
            return None

        if any(same_path(a.path, app.path) for a in target.apps):
            self.logger.info(f"'{app.name}' already in collection '{target.name}'")
            return target

        target.apps.append(app.copy())
        target.touch()
        self.storage.save_collections(collections)
        return target

    def add_apps(self, collection_id: str, apps: List[App]) -> Optional[Collection]:
        """Append every app whose path is not in the collection yet, in order."""
        collections = self.list()
        target = self._find(collections, collection_id)
        if target is None:
            return None

        new_apps = apps_not_in(target, apps)
        if new_apps:
            target.apps.extend(a.copy() for a in new_apps)
            target.touch()
            self.storage.save_collections(collections)
            self.logger.info(f"Added {len(new_apps)} apps to collection '{target.name}'")
        return target

    def remove_app(self, collection_id: str, path: str) -> Optional[Collection]:
        collections = self.list()
        target = self._find(collections, collection_id)
        if target is None:
            return None

        remaining = [a for a in target.apps if not same_path(a.path, path)]
        if len(remaining) != len(target.apps):
            target.apps = remaining
            target.touch()
            self.storage.save_collections(collections)
        return target

    def delete(self, collection_id: str) -> bool:
        collections = self.list()
        remaining = [c for c in collections if c.id != collection_id]
        if len(remaining) == len(collections):
            return False

        self.storage.save_collections(remaining)
        self.logger.info(f"Deleted collection {collection_id}")
        return True

    def set_auto_start(self, collection_id: str) -> Optional[Collection]:
        """Make this the only auto-start collection."""
        collections = self.list()
        target = self._find(collections, collection_id)
        if target is None:
            return None

        now = utc_timestamp()
        for c in collections:
            c.is_auto_start = c is target
            c.updated_at = now

        self.storage.save_collections(collections)
        self.logger.info(f"Auto-start collection is now '{target.name}'")
        return target

    def clear_auto_start(self):
        collections = self.list()
        for c in collections:
            c.is_auto_start = False
        self.storage.save_collections(collections)

    # ---------- helpers ----------

    @staticmethod
    def _find(collections: List[Collection], collection_id: str) -> Optional[Collection]:
        for c in collections:
            if c.id == collection_id:
                return c
        return None
