# src/cache/document_cache.py — v1
"""Extracted-text cache keyed by document fingerprint.

The whole collection lives as one JSON array under STORAGE_KEY in a
BaseCacheStore and is rewritten on every change. Entries are kept
most-recently-used first; a hit refreshes the entry timestamp and
moves it to the front. Writes enforce the max-size bound (oldest
dropped) and reads ignore entries older than max-age.

Store failures never reach callers: a failed read is a miss and a
failed write clears the collection.

Usage:
    async with DocumentCache.from_settings(settings) as cache:
        text = await cache.get_cached_text(document)
"""

from __future__ import annotations

import asyncio
import contextlib
import logging
import re
import time
from datetime import datetime, timezone
from typing import Callable

from pydantic import TypeAdapter, ValidationError

from clincerta.cache.base_cache_store import BaseCacheStore
from clincerta.cache.cache_factory import create_cache_store
from clincerta.cache.fingerprint import compute_fingerprint
from clincerta.cache.models import CacheEntry, CacheStats
from clincerta.config.settings import Settings
from clincerta.core.errors import CacheIoError
from clincerta.core.models import SourceDocument

logger = logging.getLogger(__name__)

STORAGE_KEY = "clincerta_document_cache"
DEFAULT_MAX_SIZE = 50
DEFAULT_MAX_AGE_SECONDS = 24 * 60 * 60
DEFAULT_COMPRESSION_THRESHOLD = 100_000
DEFAULT_CLEANUP_INTERVAL_SECONDS = 60 * 60

_ENTRIES_ADAPTER = TypeAdapter(list[CacheEntry])
_BLANK_LINE_RUNS = re.compile(r"\n\s*\n")
_INLINE_WHITESPACE = re.compile(r"[^\S\n]+")


def _now_ms() -> int:
    return int(time.time() * 1000)


def compress_text(
    text: str,
    threshold: int = DEFAULT_COMPRESSION_THRESHOLD,
    enabled: bool = True,
) -> str:
    """Whitespace normalization applied to large texts before storage.

    Below the threshold the text is returned verbatim. Above it, blank
    line runs collapse to one newline and other whitespace runs to one
    space. Not reversible.
    """
    if not enabled or len(text) < threshold:
        return text
    collapsed = _BLANK_LINE_RUNS.sub("\n", text)
    return _INLINE_WHITESPACE.sub(" ", collapsed).strip()


class DocumentCache:
    """LRU-ordered, age-bounded cache of extracted document text."""

    def __init__(
        self,
        store: BaseCacheStore,
        max_size: int = DEFAULT_MAX_SIZE,
        max_age_seconds: float = DEFAULT_MAX_AGE_SECONDS,
        enable_compression: bool = True,
        compression_threshold: int = DEFAULT_COMPRESSION_THRESHOLD,
        cleanup_interval_seconds: float = DEFAULT_CLEANUP_INTERVAL_SECONDS,
        clock: Callable[[], int] | None = None,
    ) -> None:
        if max_size < 1:
            raise ValueError("max_size must be >= 1")
        self._store = store
        self._max_size = max_size
        self._max_age_ms = int(max_age_seconds * 1000)
        self._enable_compression = enable_compression
        self._compression_threshold = compression_threshold
        self._cleanup_interval = cleanup_interval_seconds
        self._clock = clock or _now_ms
        self._lock = asyncio.Lock()
        self._cleanup_task: asyncio.Task[None] | None = None

    @classmethod
    def from_settings(
        cls,
        settings: Settings | None = None,
        store: BaseCacheStore | None = None,
    ) -> DocumentCache:
        """Build a cache from settings, creating the configured store."""
        s = settings or Settings()
        return cls(
            store=store or create_cache_store(s),
            max_size=s.cache_max_size,
            max_age_seconds=s.cache_max_age_seconds,
            enable_compression=s.cache_compression_enabled,
            compression_threshold=s.cache_compression_threshold,
            cleanup_interval_seconds=s.cache_cleanup_interval_seconds,
        )

    # --- Public operations ---

    async def is_cached(self, document: SourceDocument) -> bool:
        key = compute_fingerprint(document)
        async with self._lock:
            entries = self._live(await self._load())
        return any(e.hash == key for e in entries)

    async def get_cached_text(self, document: SourceDocument) -> str | None:
        """Return the cached text and mark the entry most recently used."""
        entry = await self.get_cached_entry(document)
        return None if entry is None else entry.text

    async def get_cached_entry(self, document: SourceDocument) -> CacheEntry | None:
        """Like get_cached_text, but returns the whole refreshed entry."""
        key = compute_fingerprint(document)
        async with self._lock:
            entries = self._live(await self._load())
            for index, entry in enumerate(entries):
                if entry.hash == key:
                    break
            else:
                logger.debug("Cache miss for %s (%s)", document.file_name, key)
                return None

            touched = entry.model_copy(update={"timestamp": self._clock()})
            del entries[index]
            entries.insert(0, touched)
            await self._save(entries)

        logger.debug("Cache hit for %s (%s)", document.file_name, key)
        return touched

    async def cache_document(
        self,
        document: SourceDocument,
        text: str,
        is_scanned: bool = False,
        ocr_applied: bool = False,
    ) -> None:
        """Insert or replace the entry of a document at the front."""
        key = compute_fingerprint(document)
        entry = CacheEntry(
            id=key,
            file_name=document.file_name,
            text=compress_text(
                text, self._compression_threshold, self._enable_compression
            ),
            file_type=document.media_type,
            file_size=document.size,
            is_scanned=is_scanned,
            ocr_applied=ocr_applied,
            timestamp=self._clock(),
            hash=key,
        )
        async with self._lock:
            entries = [e for e in self._live(await self._load()) if e.hash != key]
            entries.insert(0, entry)
            await self._save(entries)
        logger.info("Document %r cached (%s)", document.file_name, key)

    async def remove_from_cache(self, document: SourceDocument) -> None:
        key = compute_fingerprint(document)
        async with self._lock:
            entries = self._live(await self._load())
            remaining = [e for e in entries if e.hash != key]
            if len(remaining) != len(entries):
                await self._save(remaining)
                logger.info("Document %r removed from cache", document.file_name)

    async def clear_cache(self) -> None:
        async with self._lock:
            await self._clear()

    async def get_stats(self) -> CacheStats:
        async with self._lock:
            entries = self._live(await self._load())
        if not entries:
            return CacheStats()
        timestamps = [e.timestamp for e in entries]
        return CacheStats(
            total_documents=len(entries),
            total_size=sum(len(e.text) for e in entries),
            oldest_document=_to_datetime(min(timestamps)),
            newest_document=_to_datetime(max(timestamps)),
        )

    async def cleanup(self) -> int:
        """Remove expired entries from the store; returns how many."""
        async with self._lock:
            entries = await self._load()
            live = self._live(entries)
            removed = len(entries) - len(live)
            if removed:
                await self._save(live)
                logger.info("Cleaned up %d expired documents", removed)
        return removed

    # --- Lifecycle ---

    def start(self) -> None:
        """Start the periodic cleanup sweep on the running event loop."""
        if self._cleanup_task is not None and not self._cleanup_task.done():
            return
        self._cleanup_task = asyncio.create_task(
            self._cleanup_loop(), name="clincerta-cache-cleanup"
        )

    async def stop(self) -> None:
        """Cancel the periodic cleanup sweep and wait for it to finish."""
        task, self._cleanup_task = self._cleanup_task, None
        if task is None:
            return
        task.cancel()
        with contextlib.suppress(asyncio.CancelledError):
            await task

    @property
    def running(self) -> bool:
        return self._cleanup_task is not None and not self._cleanup_task.done()

    async def __aenter__(self) -> DocumentCache:
        self.start()
        return self

    async def __aexit__(self, *exc_info: object) -> None:
        await self.stop()

    async def _cleanup_loop(self) -> None:
        while True:
            await asyncio.sleep(self._cleanup_interval)
            await self.cleanup()

    # --- Collection persistence (call with the lock held) ---

    def _live(self, entries: list[CacheEntry]) -> list[CacheEntry]:
        now = self._clock()
        return [e for e in entries if now - e.timestamp < self._max_age_ms]

    async def _load(self) -> list[CacheEntry]:
        try:
            blob = await self._store.get(STORAGE_KEY)
        except CacheIoError as e:
            logger.warning("Error reading document cache: %s", e)
            return []
        if not blob:
            return []
        try:
            return _ENTRIES_ADAPTER.validate_json(blob)
        except ValidationError as e:
            logger.warning("Discarding unreadable document cache: %s", e.error_count())
            return []

    async def _save(self, entries: list[CacheEntry]) -> None:
        if len(entries) > self._max_size:
            entries = sorted(entries, key=lambda e: e.timestamp, reverse=True)
            entries = entries[: self._max_size]
        blob = _ENTRIES_ADAPTER.dump_json(entries, by_alias=True).decode("utf-8")
        try:
            await self._store.put(STORAGE_KEY, blob)
        except CacheIoError as e:
            logger.warning("Error saving document cache, clearing it: %s", e)
            await self._clear()

    async def _clear(self) -> None:
        try:
            await self._store.delete(STORAGE_KEY)
        except CacheIoError as e:
            logger.warning("Error clearing document cache: %s", e)
            return
        logger.info("Document cache cleared")


def _to_datetime(timestamp_ms: int) -> datetime:
    return datetime.fromtimestamp(timestamp_ms / 1000, tz=timezone.utc)
