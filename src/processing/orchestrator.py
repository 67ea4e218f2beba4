# src/processing/orchestrator.py — v2
"""Document processing orchestrator.

Coordinates format dispatch, progress reporting, two-phase PDF
extraction, scanned-document detection with OCR escalation, and the
degraded raw-text fallback used when an extractor fails outright.

Usage:
    processor = DocumentProcessor(settings)
    result = await processor.process(document, on_progress=print)
"""

from __future__ import annotations

import asyncio
import logging
import time
from typing import TYPE_CHECKING, Mapping

from pydantic import BaseModel

from clincerta.config.settings import Settings
from clincerta.core.errors import ExtractionError, UnsupportedFormatError
from clincerta.core.models import ExtractionResult, SourceDocument
from clincerta.extraction.doc_extractor import raw_bytes_as_text
from clincerta.extraction.extractor_factory import create_extractor, unsupported_placeholder
from clincerta.extraction.pdf_extractor import PdfExtractor, PdfPageSource
from clincerta.extraction.scan_detector import is_likely_scanned
from clincerta.logging.context import stage
from clincerta.ocr.ocr_factory import create_ocr_engine
from clincerta.processing.progress import ProgressCallback, report_progress

if TYPE_CHECKING:
    from typing import Callable

    from clincerta.extraction.base_extractor import BaseExtractor
    from clincerta.ocr.base_ocr_engine import BaseOcrEngine

logger = logging.getLogger(__name__)

# Minimum share of printable characters for the raw-text fallback.
_MIN_PRINTABLE_RATIO = 0.85


class ProcessingOptions(BaseModel):
    """Effective processing options of a DocumentProcessor."""

    max_concurrent_pages: int
    enable_fast_mode: bool
    fast_mode_page_threshold: int
    quick_pages: int
    enable_fallback: bool
    fallback_min_chars: int
    ocr_enabled: bool


class DocumentProcessor:
    """Turns a SourceDocument into an ExtractionResult."""

    def __init__(
        self,
        settings: Settings | None = None,
        ocr_engine: BaseOcrEngine | None = None,
        pdf_opener: Callable[[bytes], PdfPageSource] | None = None,
        extractors: Mapping[str, BaseExtractor] | None = None,
    ) -> None:
        self._settings = settings or Settings()
        self._ocr_engine = (
            ocr_engine if ocr_engine is not None else create_ocr_engine(self._settings)
        )
        if not self._settings.ocr_enabled:
            self._ocr_engine = None
        self._pdf = PdfExtractor(self._settings, opener=pdf_opener)
        self._extractors = {k.lower(): v for k, v in (extractors or {}).items()}

    @property
    def options(self) -> ProcessingOptions:
        s = self._settings
        return ProcessingOptions(
            max_concurrent_pages=s.max_concurrent_pages,
            enable_fast_mode=s.fast_mode_enabled,
            fast_mode_page_threshold=s.fast_mode_page_threshold,
            quick_pages=s.quick_pages,
            enable_fallback=s.fallback_enabled,
            fallback_min_chars=s.fallback_min_chars,
            ocr_enabled=self._ocr_engine is not None,
        )

    async def process(
        self,
        document: SourceDocument,
        on_progress: ProgressCallback | None = None,
    ) -> ExtractionResult:
        """Extract the text of a document.

        Raises:
            ExtractionError: If both extraction and the fallback fail, or
                the overall processing timeout elapses.
        """
        start = time.perf_counter()
        timeout = self._settings.processing_timeout_seconds

        with stage("extraction"):
            try:
                result = await asyncio.wait_for(
                    self._dispatch(document, on_progress), timeout=timeout
                )
            except asyncio.TimeoutError as e:
                raise ExtractionError(
                    f"Processing {document.file_name} timed out after {timeout:.0f}s"
                ) from e

        elapsed_ms = (time.perf_counter() - start) * 1000
        report_progress(on_progress, 100, "Processing complete")
        logger.info(
            "Processed %s: %d chars, pages=%s, scanned=%s, ocr=%s, %.0fms",
            document.file_name,
            len(result.text),
            result.page_count,
            result.is_scanned,
            result.ocr_applied,
            elapsed_ms,
        )
        return result.model_copy(update={"processing_time_ms": elapsed_ms})

    async def _dispatch(
        self, document: SourceDocument, on_progress: ProgressCallback | None
    ) -> ExtractionResult:
        report_progress(on_progress, 10, "Analyzing document...")
        ext = document.extension

        if ext == ".pdf" and ext not in self._extractors:
            return await self._process_pdf(document, on_progress)

        try:
            extractor = self._extractors.get(ext) or create_extractor(ext, self._settings)
        except UnsupportedFormatError:
            logger.warning("Unsupported file type %r for %s", ext, document.file_name)
            report_progress(on_progress, 90, "Unsupported file type")
            return ExtractionResult(text=unsupported_placeholder(ext))

        report_progress(on_progress, 50, f"Extracting {ext.lstrip('.').upper()} text...")
        try:
            return await extractor.extract(document)
        except ExtractionError as e:
            return self._fallback(document, e, on_progress)

    async def _process_pdf(
        self, document: SourceDocument, on_progress: ProgressCallback | None
    ) -> ExtractionResult:
        report_progress(on_progress, 20, "Loading PDF...")
        try:
            source = self._pdf.open(document.content)
        except ExtractionError as e:
            logger.warning("PDF parser failed for %s: %s", document.file_name, e)
            return self._fallback(document, e, on_progress)

        try:
            page_count = source.page_count
            report_progress(on_progress, 30, f"Processing {page_count} pages...")
            text = await self._extract_pdf_text(source, page_count, on_progress)
        finally:
            source.close()

        s = self._settings
        is_scanned = is_likely_scanned(
            text,
            page_count=page_count,
            policy=s.scan_detection_policy,
            threshold=s.scan_chars_threshold,
        )
        result = ExtractionResult(text=text, page_count=page_count, is_scanned=is_scanned)
        if is_scanned:
            result = await self._apply_ocr(document, result, on_progress)
        return result

    async def _extract_pdf_text(
        self,
        source: PdfPageSource,
        page_count: int,
        on_progress: ProgressCallback | None,
    ) -> str:
        """Read the PDF text, mapping the quick pass to 30-50 and the
        remaining chunks to the rest of the span up to 80.
        """
        progress_floor = 50 if self._pdf.uses_quick_pass(page_count) else 30

        def on_quick(done: int, total: int) -> None:
            if done < total:
                report_progress(
                    on_progress,
                    30 + (done * 20) // total,
                    f"Quick extraction: page {done} of {total}",
                )
            else:
                report_progress(
                    on_progress, 50, "Quick extraction complete, processing remaining pages...",
                )

        def on_chunk(done: int, total: int) -> None:
            span = 80 - progress_floor
            report_progress(
                on_progress,
                progress_floor + (done * span) // total,
                f"Processed {done} of {total} pages",
            )

        return await self._pdf.read_text(source, on_quick=on_quick, on_chunk=on_chunk)

    async def _apply_ocr(
        self,
        document: SourceDocument,
        result: ExtractionResult,
        on_progress: ProgressCallback | None,
    ) -> ExtractionResult:
        """Escalate a scanned PDF to OCR; never raises."""
        engine = self._ocr_engine
        if engine is None:
            logger.info("Scanned document %s detected, OCR disabled", document.file_name)
            return result
        if not engine.is_available():
            logger.warning("Scanned document %s detected, OCR engine unavailable", document.file_name)
            return result.model_copy(
                update={"error": "Scanned document detected but OCR engine is unavailable"}
            )

        report_progress(on_progress, 85, "Detected scanned PDF, running OCR...")
        with stage("ocr"):
            ocr = await engine.recognize_pdf(document.content, result.page_count)

        if ocr.succeeded:
            caveat = None
            if ocr.failed_pages:
                caveat = f"OCR failed on pages {', '.join(map(str, ocr.failed_pages))}"
            logger.info(
                "OCR applied to %s: %d/%d pages recognized",
                document.file_name, ocr.pages_recognized, ocr.pages_attempted,
            )
            return result.model_copy(
                update={"text": ocr.text, "ocr_applied": True, "error": caveat}
            )

        logger.warning("OCR failed for %s: %s", document.file_name, ocr.error)
        text = result.text if result.text.strip() else ocr.text
        return result.model_copy(update={"text": text, "error": f"OCR failed: {ocr.error}"})

    def _fallback(
        self,
        document: SourceDocument,
        cause: ExtractionError,
        on_progress: ProgressCallback | None,
    ) -> ExtractionResult:
        """Read the raw bytes as text when the extractor failed outright."""
        if not self._settings.fallback_enabled:
            raise cause

        report_progress(on_progress, 60, "Extraction failed, trying raw text fallback...")
        text = raw_bytes_as_text(document.content)
        if (
            len(text.strip()) > self._settings.fallback_min_chars
            and _printable_ratio(text) >= _MIN_PRINTABLE_RATIO
        ):
            logger.warning("Using raw text fallback for %s: %s", document.file_name, cause)
            return ExtractionResult(text=text, error=f"{cause}; used raw text fallback")

        raise ExtractionError(
            f"Unable to process {document.file_name} with available methods: {cause}"
        ) from cause


def _printable_ratio(text: str) -> float:
    if not text:
        return 0.0
    printable = sum(
        1 for ch in text if ch != "\ufffd" and (ch.isprintable() or ch in "\n\r\t")
    )
    return printable / len(text)
