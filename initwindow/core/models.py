# initwindow/core/models.py

from __future__ import annotations

from dataclasses import dataclass, field, asdict, replace
from datetime import datetime, timezone
from typing import Any, Dict, List, Optional


def utc_timestamp() -> str:
    return datetime.now(timezone.utc).isoformat(timespec="seconds")


@dataclass
class App:
    """
    One launchable executable, either freshly discovered or stored in a collection.

    `id` is regenerated on every scan; anything persisted must be keyed by `path`.
    `icon` is the path of a cached PNG (see IconResolver), or None.
    """

    id: str
    name: str
    path: str
    icon: Optional[str] = None

    def to_dict(self) -> Dict[str, Any]:
        return asdict(self)

    @classmethod
    def from_dict(cls, raw: Dict[str, Any]) -> "App":
        return cls(
            id=str(raw.get("id", "")),
            name=str(raw.get("name", "")),
            path=str(raw.get("path", "")),
            icon=raw.get("icon") or None,
        )

    def copy(self) -> "App":
        return replace(self)


@dataclass
class Collection:
    id: str
    name: str
    apps: List[App] = field(default_factory=list)
    is_auto_start: bool = False
    created_at: str = field(default_factory=utc_timestamp)
    updated_at: str = field(default_factory=utc_timestamp)

    def to_dict(self) -> Dict[str, Any]:
        return {
            "id": self.id,
            "name": self.name,
            "apps": [a.to_dict() for a in self.apps],
            "is_auto_start": self.is_auto_start,
            "created_at": self.created_at,
            "updated_at": self.updated_at,
        }

    @classmethod
    def from_dict(cls, raw: Dict[str, Any]) -> "Collection":
        apps = [App.from_dict(a) for a in raw.get("apps", []) if isinstance(a, dict)]
        created = raw.get("created_at") or utc_timestamp()
        return cls(
            id=str(raw.get("id", "")),
            name=str(raw.get("name", "")),
            apps=apps,
            is_auto_start=bool(raw.get("is_auto_start", False)),
            created_at=created,
            updated_at=raw.get("updated_at") or created,
        )

    def touch(self):
        self.updated_at = utc_timestamp()


@dataclass
class RawProcess:
    """What the OS listing gives us: process image name + full executable path."""

    name: str
    path: str


@dataclass
class RunResultItem:
    app: str
    reason: str


@dataclass
class RunResult:
    launched: List[str] = field(default_factory=list)
    skipped: List[RunResultItem] = field(default_factory=list)
    failed: List[RunResultItem] = field(default_factory=list)

    @classmethod
    def not_found(cls) -> "RunResult":
        return cls(failed=[RunResultItem(app="Unknown", reason="Collection not found")])

    def to_dict(self) -> Dict[str, Any]:
        return asdict(self)
