# src/cache/json_store.py — v2
"""JSON file-based cache store (default CACHE_BACKEND=json).

Stores each key as an individual JSON file under CACHE_ROOT. Writes go
to a temporary file in the same directory and are moved into place
with os.replace, so a reader never sees a half-written blob.
"""

from __future__ import annotations

import logging
import os
import tempfile
from pathlib import Path

from clincerta.cache.base_cache_store import BaseCacheStore
from clincerta.core.errors import CacheIoError

logger = logging.getLogger(__name__)


class JsonCacheStore(BaseCacheStore):
    """File-based cache store using JSON files."""

    def __init__(self, cache_root: Path | str) -> None:
        self._root = Path(cache_root).expanduser()

    async def get(self, key: str) -> str | None:
        path = self._entry_path(key)
        if not path.exists():
            return None
        try:
            return path.read_text(encoding="utf-8")
        except OSError as e:
            raise CacheIoError(f"Failed to read cache blob {key}: {e}") from e

    async def put(self, key: str, value: str) -> None:
        path = self._entry_path(key)
        try:
            path.parent.mkdir(parents=True, exist_ok=True)
            fd, tmp_name = tempfile.mkstemp(
                dir=path.parent, prefix=f".{path.stem}-", suffix=".tmp"
            )
            try:
                with os.fdopen(fd, "w", encoding="utf-8") as fh:
                    fh.write(value)
                os.replace(tmp_name, path)
            except BaseException:
                Path(tmp_name).unlink(missing_ok=True)
                raise
        except OSError as e:
            raise CacheIoError(f"Failed to write cache blob {key}: {e}") from e
        logger.debug("Wrote cache blob %s (%d chars)", key, len(value))

    async def delete(self, key: str) -> None:
        try:
            self._entry_path(key).unlink(missing_ok=True)
        except OSError as e:
            raise CacheIoError(f"Failed to delete cache blob {key}: {e}") from e

    def _entry_path(self, key: str) -> Path:
        """Return file path for a cache key."""
        safe_key = key.replace("/", "_").replace("\\", "_")
        return self._root / f"{safe_key}.json"
