# src/cache/memory_store.py — v1
"""In-process cache store (CACHE_BACKEND=memory).

An optional byte quota mimics the storage limit of a browser key/value
store: a write that would exceed it raises CacheIoError.
"""

from __future__ import annotations

from clincerta.cache.base_cache_store import BaseCacheStore
from clincerta.core.errors import CacheIoError


class MemoryCacheStore(BaseCacheStore):
    """Dict-backed cache store."""

    def __init__(self, quota_bytes: int | None = None) -> None:
        self._data: dict[str, str] = {}
        self._quota = quota_bytes

    async def get(self, key: str) -> str | None:
        return self._data.get(key)

    async def put(self, key: str, value: str) -> None:
        if self._quota is not None:
            others = sum(
                len(v.encode("utf-8")) for k, v in self._data.items() if k != key
            )
            if others + len(value.encode("utf-8")) > self._quota:
                raise CacheIoError(
                    f"Quota of {self._quota} bytes exceeded writing {key}"
                )
        self._data[key] = value

    async def delete(self, key: str) -> None:
        self._data.pop(key, None)

    def __len__(self) -> int:
        return len(self._data)
