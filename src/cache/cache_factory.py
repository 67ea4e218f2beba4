# src/cache/cache_factory.py — v3
"""Factory for cache store instantiation."""

from __future__ import annotations

from pathlib import Path

from clincerta.cache.base_cache_store import BaseCacheStore
from clincerta.config.settings import Settings

_DEFAULT_CACHE_ROOT = Path("~/.clincerta/cache")


def create_cache_store(settings: Settings | None = None) -> BaseCacheStore:
    """Instantiate the configured cache backend.

    Args:
        settings: Application settings. Defaults to JSON backend.

    Returns:
        Configured BaseCacheStore implementation.
    """
    backend = "json" if settings is None else settings.cache_backend
    cache_root = _DEFAULT_CACHE_ROOT if settings is None else settings.cache_root

    if backend == "json":
        from clincerta.cache.json_store import JsonCacheStore
        return JsonCacheStore(cache_root=cache_root)

    if backend == "sqlite":
        from clincerta.cache.sqlite_store import SqliteCacheStore
        return SqliteCacheStore(db_path=Path(cache_root) / "clincerta_cache.db")

    if backend == "memory":
        from clincerta.cache.memory_store import MemoryCacheStore
        return MemoryCacheStore()

    raise ValueError(f"Unsupported cache backend: {backend!r}")
