# src/cache/models.py — v2
"""Cache domain models: CacheEntry, CacheStats.

CacheEntry serializes with the camelCase keys of the persisted cache
collection (``fileName``, ``isScanned``, ...) so that a collection
written by another client can be read back unchanged.
"""

from __future__ import annotations

from datetime import datetime

from pydantic import BaseModel, ConfigDict
from pydantic.alias_generators import to_camel


class CacheEntry(BaseModel):
    """One cached extraction. ``timestamp`` is the last-touched time in
    epoch milliseconds; ``id`` and ``hash`` both hold the fingerprint."""

    model_config = ConfigDict(alias_generator=to_camel, populate_by_name=True)

    id: str
    file_name: str
    text: str
    file_type: str = ""
    file_size: int = 0
    is_scanned: bool = False
    ocr_applied: bool = False
    timestamp: int
    hash: str


class CacheStats(BaseModel):
    """Snapshot of the live (non-expired) cache content."""

    total_documents: int = 0
    total_size: int = 0
    oldest_document: datetime | None = None
    newest_document: datetime | None = None
