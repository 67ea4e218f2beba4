# src/core/errors.py — v1
"""Error taxonomy shared by extraction, OCR, cache and analysis modules.

Only ExtractionError and InvalidInputError ever reach callers of the
public API. OcrError and CacheIoError are absorbed by the orchestrator
and the document cache respectively; UnsupportedFormatError is turned
into a placeholder result by the orchestrator.
"""

from __future__ import annotations


class ClincertaError(Exception):
    """Base class for all package errors."""


class ExtractionError(ClincertaError):
    """The document could not be parsed at all in its claimed format."""


class OcrError(ClincertaError):
    """OCR engine failed to initialize or to recognize a page."""


class CacheIoError(ClincertaError):
    """Backing store read/write failed (quota, corruption, I/O)."""


class InvalidInputError(ClincertaError, ValueError):
    """An analysis request carried a missing or non-string ``text``."""


class UnsupportedFormatError(ClincertaError, ValueError):
    """No extractor is registered for the file extension."""
