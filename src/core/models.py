# src/core/models.py — v1
"""Shared Pydantic domain models used across modules.

No module redefines these types — all imports come from core.models.
Analysis reports live in analysis.models and cache records in
cache.models.
"""

from __future__ import annotations

import mimetypes
from pathlib import Path
from typing import Annotated, Literal, Union

from pydantic import BaseModel, ConfigDict, Field


# === SOURCE DOCUMENT ===


class SourceDocument(BaseModel):
    """Input document: raw bytes plus the identity attributes of the file.

    ``last_modified`` is expressed in epoch milliseconds so that cache
    fingerprints stay stable across platforms.
    """

    model_config = ConfigDict(frozen=True)

    content: bytes
    file_name: str
    media_type: str = ""
    size: int = 0
    last_modified: int = 0

    @property
    def extension(self) -> str:
        """Lower-cased extension including the dot, or '' when absent."""
        return Path(self.file_name).suffix.lower()

    @classmethod
    def from_path(cls, path: Path | str) -> SourceDocument:
        """Read a file from disk and capture its size and mtime."""
        p = Path(path).expanduser()
        content = p.read_bytes()
        stat = p.stat()
        media_type, _ = mimetypes.guess_type(p.name)
        return cls(
            content=content,
            file_name=p.name,
            media_type=media_type or "",
            size=stat.st_size,
            last_modified=int(stat.st_mtime * 1000),
        )

    @classmethod
    def from_bytes(
        cls,
        content: bytes,
        file_name: str,
        media_type: str = "",
        last_modified: int = 0,
    ) -> SourceDocument:
        """Build a document from an in-memory upload."""
        return cls(
            content=content,
            file_name=file_name,
            media_type=media_type or (mimetypes.guess_type(file_name)[0] or ""),
            size=len(content),
            last_modified=last_modified,
        )


# === PDF PAGE CONTENT ===


class TextItem(BaseModel):
    """A text run reported by the PDF adapter."""

    kind: Literal["text"] = "text"
    value: str


class UnknownItem(BaseModel):
    """A page item without text (image, vector drawing, ...)."""

    kind: Literal["unknown"] = "unknown"


PageTextItem = Annotated[Union[TextItem, UnknownItem], Field(discriminator="kind")]


# === EXTRACTION RESULT ===


class ExtractionResult(BaseModel):
    """Output of a single extraction call. Never mutated after creation."""

    model_config = ConfigDict(frozen=True)

    text: str
    page_count: int | None = None
    is_scanned: bool = False
    ocr_applied: bool = False
    processing_time_ms: float = 0.0
    error: str | None = None
    from_cache: bool = False

    def as_response(self) -> dict[str, object]:
        """JSON payload using the camelCase keys of the extraction contract."""
        payload: dict[str, object] = {
            "text": self.text,
            "isScanned": self.is_scanned,
            "ocrApplied": self.ocr_applied,
            "processingTime": round(self.processing_time_ms, 2),
        }
        if self.page_count is not None:
            payload["pageCount"] = self.page_count
        if self.error is not None:
            payload["error"] = self.error
        return payload
