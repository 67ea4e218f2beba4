# src/extraction/extractor_factory.py — v3
"""Factory: instantiate extractor from document format/extension."""

from __future__ import annotations

from typing import TYPE_CHECKING

from clincerta.core.errors import UnsupportedFormatError
from clincerta.extraction.base_extractor import BaseExtractor
from clincerta.extraction.doc_extractor import DocExtractor
from clincerta.extraction.docx_extractor import DocxExtractor
from clincerta.extraction.pdf_extractor import PdfExtractor
from clincerta.extraction.txt_extractor import TxtExtractor

if TYPE_CHECKING:
    from clincerta.config.settings import Settings

# Registry maps extension → extractor class.
_EXTRACTOR_REGISTRY: dict[str, type[BaseExtractor]] = {
    ".pdf": PdfExtractor,
    ".docx": DocxExtractor,
    ".doc": DocExtractor,
    ".txt": TxtExtractor,
}


def _normalize(extension: str) -> str:
    ext = extension.lower()
    if ext and not ext.startswith("."):
        ext = f".{ext}"
    return ext


def create_extractor(extension: str, settings: Settings | None = None) -> BaseExtractor:
    """Create an extractor for the given file extension.

    Args:
        extension: File extension with or without dot (e.g. ".pdf", "docx").
        settings: Application settings passed to the extractor.

    Returns:
        BaseExtractor instance.

    Raises:
        UnsupportedFormatError: If no extractor is registered.
    """
    ext = _normalize(extension)
    cls = _EXTRACTOR_REGISTRY.get(ext)
    if cls is None:
        raise UnsupportedFormatError(
            f"No extractor for format {ext or '(none)'!r}. "
            f"Supported: {', '.join(sorted(_EXTRACTOR_REGISTRY))}"
        )
    return cls(settings=settings)


def register_extractor(extension: str, cls: type[BaseExtractor]) -> None:
    """Register a custom extractor for an extension."""
    _EXTRACTOR_REGISTRY[_normalize(extension)] = cls


def supported_extensions() -> list[str]:
    """Return list of supported file extensions."""
    return sorted(_EXTRACTOR_REGISTRY.keys())


def unsupported_placeholder(extension: str) -> str:
    """Placeholder text returned for files no extractor handles."""
    ext = _normalize(extension) or "(none)"
    return f"[Unsupported file type: {ext} - please use PDF, DOCX, DOC, or TXT]"
