# src/ocr/tesseract_engine.py — v2
"""Tesseract OCR engine for scanned PDFs.

Each page is rasterized with PyMuPDF at a fixed DPI into a scoped
temporary directory, optionally pre-processed with Pillow (grayscale,
autocontrast, sharpen) and recognized with pytesseract. Pages are
recognized one at a time in a single worker thread; a failed page is
skipped and the others are kept. The whole invocation is bounded by a
timeout, after which no further page is started.
Requires 'pymupdf', 'Pillow', 'pytesseract' and the tesseract binary.
"""

from __future__ import annotations

import asyncio
import logging
import tempfile
import threading
from pathlib import Path
from typing import Any

from clincerta.core.errors import OcrError
from clincerta.ocr.base_ocr_engine import BaseOcrEngine, OcrResult

logger = logging.getLogger(__name__)


def preprocess_image(image: Any) -> Any:
    """Grayscale, stretch contrast and sharpen a page image."""
    from PIL import ImageFilter, ImageOps

    gray = ImageOps.grayscale(image)
    normalized = ImageOps.autocontrast(gray)
    return normalized.filter(ImageFilter.SHARPEN)


class _OcrWorker:
    """Scoped OCR resources for one document.

    Owns the opened PDF and the temp directory holding page rasters;
    both are released on exit, whatever the outcome.
    """

    def __init__(
        self,
        content: bytes,
        dpi: int,
        language: str,
        preprocess: bool,
        page_timeout: float,
    ) -> None:
        self._content = content
        self._dpi = dpi
        self._language = language
        self._preprocess = preprocess
        self._page_timeout = page_timeout
        self._doc: Any = None
        self._tmp: tempfile.TemporaryDirectory[str] | None = None

    def __enter__(self) -> _OcrWorker:
        try:
            import fitz  # PyMuPDF
        except ImportError as e:
            raise OcrError("pymupdf package required for OCR rasterization") from e
        try:
            self._doc = fitz.open(stream=self._content, filetype="pdf")
        except Exception as e:
            raise OcrError(f"Unable to open PDF for OCR: {e}") from e
        self._tmp = tempfile.TemporaryDirectory(
            prefix="clincerta-ocr-", ignore_cleanup_errors=True
        )
        return self

    def __exit__(self, *exc_info: object) -> None:
        if self._doc is not None:
            self._doc.close()
            self._doc = None
        if self._tmp is not None:
            self._tmp.cleanup()
            self._tmp = None
        logger.debug("OCR worker released")

    @property
    def page_count(self) -> int:
        return len(self._doc)

    def recognize_page(self, page_number: int) -> str:
        """Rasterize and recognize a 1-based page (blocking)."""
        try:
            import pytesseract
            from PIL import Image
        except ImportError as e:
            raise OcrError("pytesseract and Pillow packages required for OCR") from e

        if self._doc is None or self._tmp is None:
            raise OcrError("OCR worker used outside of its context")
        raster_path = Path(self._tmp.name) / f"page-{page_number:04d}.png"
        try:
            pix = self._doc.load_page(page_number - 1).get_pixmap(dpi=self._dpi)
            pix.save(str(raster_path))
            with Image.open(raster_path) as image:
                prepared = preprocess_image(image) if self._preprocess else image
                return pytesseract.image_to_string(
                    prepared, lang=self._language, timeout=self._page_timeout,
                )
        except (RuntimeError, OSError, ValueError, pytesseract.TesseractError) as e:
            raise OcrError(f"OCR failed on page {page_number}: {e}") from e


class TesseractOcrEngine(BaseOcrEngine):
    """OCR engine backed by the tesseract CLI through pytesseract."""

    def __init__(
        self,
        dpi: int = 300,
        language: str = "eng",
        preprocess: bool = True,
        page_timeout: float = 30.0,
        timeout: float = 60.0,
    ) -> None:
        self._dpi = dpi
        self._language = language
        self._preprocess = preprocess
        self._page_timeout = page_timeout
        self._timeout = timeout
        self._available: bool | None = None

    def is_available(self) -> bool:
        if self._available is None:
            try:
                import pytesseract

                pytesseract.get_tesseract_version()
                self._available = True
            except (ImportError, OSError) as e:
                logger.info("Tesseract not available: %s", e)
                self._available = False
        return self._available

    def _open_worker(self, content: bytes) -> _OcrWorker:
        return _OcrWorker(
            content,
            dpi=self._dpi,
            language=self._language,
            preprocess=self._preprocess,
            page_timeout=self._page_timeout,
        )

    async def recognize_pdf(
        self, content: bytes, page_count: int | None = None
    ) -> OcrResult:
        try:
            with self._open_worker(content) as worker:
                return await self._recognize(worker, page_count)
        except OcrError as e:
            logger.warning("OCR failed: %s", e)
            return OcrResult.failed(str(e))

    async def _recognize(self, worker: _OcrWorker, page_count: int | None) -> OcrResult:
        """Run the page loop in one worker thread, bounded by the timeout.

        The worker must outlive its thread: on timeout or cancellation no
        new page is started, and the page in flight is awaited before the
        caller releases the worker.
        """
        total = worker.page_count if page_count is None else min(
            page_count, worker.page_count
        )
        stop = threading.Event()
        job = asyncio.ensure_future(
            asyncio.to_thread(self._recognize_pages, worker, total, stop)
        )
        try:
            return await asyncio.wait_for(asyncio.shield(job), timeout=self._timeout)
        except asyncio.TimeoutError:
            logger.warning("OCR timed out after %.0fs", self._timeout)
            return OcrResult.failed(
                f"OCR timed out after {self._timeout:.0f}s", pages_attempted=total,
            )
        finally:
            if not job.done():
                stop.set()
                await asyncio.wait({job})
            if not job.cancelled():
                job.exception()

    def _recognize_pages(
        self, worker: _OcrWorker, total: int, stop: threading.Event
    ) -> OcrResult:
        texts: list[str] = []
        failed_pages: list[int] = []

        for page_number in range(1, total + 1):
            if stop.is_set():
                logger.debug("OCR stopped before page %d", page_number)
                break
            try:
                text = worker.recognize_page(page_number)
            except OcrError as e:
                logger.warning("%s", e)
                failed_pages.append(page_number)
                continue
            if text.strip():
                texts.append(text.strip())
            logger.debug("OCR page %d/%d done", page_number, total)

        if not texts:
            result = OcrResult.failed("OCR produced no text", pages_attempted=total)
            return result.model_copy(update={"failed_pages": failed_pages})

        return OcrResult(
            text="\n\n".join(texts),
            pages_attempted=total,
            pages_recognized=len(texts),
            failed_pages=failed_pages,
        )
