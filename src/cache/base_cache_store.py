# src/cache/base_cache_store.py — v2
"""Abstract cache store interface.

A store is a flat key/value space of string blobs. The document cache
keeps its whole collection under a single key and rewrites it on
every change.
"""

from __future__ import annotations

from abc import ABC, abstractmethod


class BaseCacheStore(ABC):
    """Unified interface for cache storage backends.

    Implementations raise CacheIoError on any read or write failure.
    """

    @abstractmethod
    async def get(self, key: str) -> str | None:
        """Return the blob stored under key, or None when absent."""

    @abstractmethod
    async def put(self, key: str, value: str) -> None:
        """Store a blob, replacing any previous value."""

    @abstractmethod
    async def delete(self, key: str) -> None:
        """Remove a blob; absent keys are ignored."""
