# src/extraction/txt_extractor.py — v2
"""Plain text extractor — passthrough with minimal processing."""

from __future__ import annotations

from clincerta.core.models import ExtractionResult, SourceDocument
from clincerta.extraction.base_extractor import BaseExtractor

EMPTY_TEXT_PLACEHOLDER = "[Empty text file]"


class TxtExtractor(BaseExtractor):
    """Extractor for plain text files (.txt)."""

    @property
    def supported_extensions(self) -> list[str]:
        return [".txt"]

    async def extract(self, document: SourceDocument) -> ExtractionResult:
        """Decode the document as UTF-8 text."""
        text = decode_text(document.content)
        return ExtractionResult(text=text or EMPTY_TEXT_PLACEHOLDER)


def decode_text(content: bytes) -> str:
    """Decode bytes as UTF-8, tolerating a BOM and invalid sequences."""
    return content.decode("utf-8-sig", errors="replace")
