# initwindow/core/icon_resolver.py

"""
IconResolver - executable path -> cached PNG icon file.

Cache layout: <cache_dir>/<sha256 hex of the path string>.png

The key is the path, not the file contents: two installs of the same binary
get two entries, and an updated executable keeps its old icon until the
cache file is deleted.
"""

from __future__ import annotations

import asyncio
import hashlib
import logging
import os
import tempfile
from pathlib import Path
from typing import Callable, Optional

IconExtractor = Callable[[str], Optional[bytes]]

DEFAULT_TIMEOUT = 5.0


def cache_key(executable_path: str) -> str:
    return hashlib.sha256(executable_path.encode("utf-8")).hexdigest()


class IconResolver:
    """
    Usage:
        resolver = IconResolver(cache_dir, backend.extract_icon)
        icon_path = await resolver.resolve(r"C:\\Program Files\\App\\app.exe")
        # -> ".../icons/3f1c...png" or None
    """

    def __init__(
        self,
        cache_dir: Path,
        extractor: IconExtractor,
        timeout: float = DEFAULT_TIMEOUT,
        logger: Optional[logging.Logger] = None,
    ):
        self.cache_dir = Path(cache_dir)
        self.extractor = extractor
        self.timeout = timeout
        self.logger = logger or logging.getLogger("initwindow.IconResolver")

    def cache_path(self, executable_path: str) -> Path:
        return self.cache_dir / f"{cache_key(executable_path)}.png"

    async def resolve(self, executable_path: str) -> Optional[str]:
        """Return the cached icon file for this executable, extracting it on a miss."""
        target = self.cache_path(executable_path)
        if target.exists():
            return str(target)

        try:
            data = await asyncio.wait_for(
                asyncio.to_thread(self.extractor, executable_path),
                timeout=self.timeout,
            )
        except asyncio.TimeoutError:
            self.logger.warning(
                f"Icon extraction timed out after {self.timeout}s: {executable_path}"
            )
            return None
        except Exception as e:
            self.logger.warning(f"Icon extraction failed for {executable_path}: {e}")
            return None

        if not data:
            self.logger.debug(f"No icon for {executable_path}")
            return None

        try:
            await asyncio.to_thread(self._write_atomic, target, data)
        except OSError as e:
            self.logger.warning(f"Could not cache icon for {executable_path}: {e}")
            return None

        return str(target)

    def _write_atomic(self, target: Path, data: bytes):
        # Concurrent writers for the same path each use their own temp file;
        # os.replace makes the last one win without a torn file.
        self.cache_dir.mkdir(parents=True, exist_ok=True)
        fd, tmp = tempfile.mkstemp(dir=self.cache_dir, suffix=".tmp")
        try:
            with os.fdopen(fd, "wb") as f:
                f.write(data)
            os.replace(tmp, target)
        except BaseException:
            try:
                os.unlink(tmp)
            except OSError:
                pass
            raise
