# src/ocr/ocr_factory.py — v1
"""Factory for OCR engine instantiation."""

from __future__ import annotations

from typing import TYPE_CHECKING

from clincerta.ocr.base_ocr_engine import BaseOcrEngine

if TYPE_CHECKING:
    from clincerta.config.settings import Settings


def create_ocr_engine(settings: Settings | None = None) -> BaseOcrEngine | None:
    """Instantiate the configured OCR engine, or None when OCR is disabled."""
    if settings is not None and not settings.ocr_enabled:
        return None

    from clincerta.ocr.tesseract_engine import TesseractOcrEngine

    if settings is None:
        return TesseractOcrEngine()
    return TesseractOcrEngine(
        dpi=settings.ocr_dpi,
        language=settings.ocr_language,
        preprocess=settings.ocr_preprocess,
        page_timeout=settings.ocr_page_timeout_seconds,
        timeout=settings.ocr_timeout_seconds,
    )
