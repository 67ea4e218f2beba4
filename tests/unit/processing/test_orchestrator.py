# tests/unit/processing/test_orchestrator.py — v2
"""Tests for processing/orchestrator.py with fake PDF sources and OCR engines."""

from __future__ import annotations

import asyncio

import pytest

from clincerta.config.settings import Settings
from clincerta.core.errors import ExtractionError
from clincerta.core.models import ExtractionResult, SourceDocument
from clincerta.extraction.base_extractor import BaseExtractor
from clincerta.extraction.pdf_extractor import PdfExtractor
from clincerta.ocr.base_ocr_engine import OCR_FAILED_TEXT, OcrResult
from clincerta.processing.orchestrator import DocumentProcessor

PAGE_TEXT = "Progress note " * 12


class FailingExtractor(BaseExtractor):
    @property
    def supported_extensions(self) -> list[str]:
        return [".docx"]

    async def extract(self, document: SourceDocument) -> ExtractionResult:
        raise ExtractionError("Failed to process DOCX: not a zip file")


class SlowExtractor(BaseExtractor):
    @property
    def supported_extensions(self) -> list[str]:
        return [".txt"]

    async def extract(self, document: SourceDocument) -> ExtractionResult:
        await asyncio.sleep(1)
        return ExtractionResult(text="late")


@pytest.fixture
def ocr_settings() -> Settings:
    return Settings(_env_file=None, ocr_enabled=True, cache_backend="memory")


@pytest.fixture
def progress() -> list[tuple[int, str]]:
    return []


def _record(events: list[tuple[int, str]]):
    return lambda percent, label: events.append((percent, label))


class TestPdfProcessing:
    @pytest.mark.asyncio
    async def test_large_pdf_pages_in_order(self, settings, page_source_cls, make_document, progress):
        texts = [f"{PAGE_TEXT}page {i}" for i in range(1, 11)]
        source = page_source_cls.from_texts(texts)
        processor = DocumentProcessor(settings, pdf_opener=lambda content: source)

        result = await processor.process(make_document(b"%PDF", "long.pdf"), _record(progress))

        assert result.text.split("\n") == [t.strip() for t in texts]
        assert result.page_count == 10
        assert not result.is_scanned
        assert sorted(source.requested) == list(range(1, 11))
        assert source.closed

    @pytest.mark.asyncio
    async def test_progress_monotonic(self, settings, page_source_cls, make_document, progress):
        source = page_source_cls.from_texts([PAGE_TEXT] * 10)
        processor = DocumentProcessor(settings, pdf_opener=lambda content: source)

        await processor.process(make_document(b"%PDF", "long.pdf"), _record(progress))

        percents = [p for p, _ in progress]
        assert percents == sorted(percents)
        assert percents[0] == 10
        assert percents[-1] == 100
        assert 50 in percents and 80 in percents

    @pytest.mark.asyncio
    async def test_quick_pass_requests_first_pages_first(
        self, settings, page_source_cls, make_document
    ):
        source = page_source_cls.from_texts([PAGE_TEXT] * 8)
        processor = DocumentProcessor(settings, pdf_opener=lambda content: source)
        await processor.process(make_document(b"%PDF", "long.pdf"))
        assert source.requested[:3] == [1, 2, 3]
        assert len(source.requested) == 8

    @pytest.mark.asyncio
    async def test_small_pdf_skips_quick_pass(self, settings, page_source_cls, make_document, progress):
        source = page_source_cls.from_texts([PAGE_TEXT] * 2)
        processor = DocumentProcessor(settings, pdf_opener=lambda content: source)
        await processor.process(make_document(b"%PDF", "short.pdf"), _record(progress))
        assert not any(label.startswith("Quick extraction") for _, label in progress)

    @pytest.mark.asyncio
    async def test_quick_pass_complete_at_fifty(
        self, settings, page_source_cls, make_document, progress
    ):
        source = page_source_cls.from_texts([PAGE_TEXT] * 8)
        processor = DocumentProcessor(settings, pdf_opener=lambda content: source)
        await processor.process(make_document(b"%PDF", "long.pdf"), _record(progress))
        assert (50, "Quick extraction complete, processing remaining pages...") in progress
        assert [p for p, label in progress if label.startswith("Quick extraction: page")] == [36, 43]

    @pytest.mark.asyncio
    async def test_text_matches_pdf_extractor(self, settings, page_source_cls, make_document):
        texts = [f"{PAGE_TEXT}{i}" for i in range(1, 9)]
        document = make_document(b"%PDF", "long.pdf")

        processed = await DocumentProcessor(
            settings, pdf_opener=lambda content: page_source_cls.from_texts(texts),
        ).process(document)
        extracted = await PdfExtractor(
            settings, opener=lambda content: page_source_cls.from_texts(texts),
        ).extract(document)

        assert processed.text == extracted.text
        assert processed.page_count == extracted.page_count == 8

    @pytest.mark.asyncio
    async def test_broken_page_keeps_others(self, settings, page_source_cls, make_document):
        source = page_source_cls.from_texts([PAGE_TEXT, None, PAGE_TEXT])
        processor = DocumentProcessor(settings, pdf_opener=lambda content: source)
        result = await processor.process(make_document(b"%PDF", "doc.pdf"))
        assert result.text.split("\n")[1] == "[Error extracting page 2]"

    @pytest.mark.asyncio
    async def test_processing_time_recorded(self, settings, page_source_cls, make_document):
        source = page_source_cls.from_texts([PAGE_TEXT])
        processor = DocumentProcessor(settings, pdf_opener=lambda content: source)
        result = await processor.process(make_document(b"%PDF", "doc.pdf"))
        assert result.processing_time_ms >= 0
        assert result.as_response()["pageCount"] == 1


class TestScannedPdf:
    @pytest.mark.asyncio
    async def test_scanned_escalates_to_ocr(
        self, ocr_settings, page_source_cls, ocr_engine_cls, make_document
    ):
        source = page_source_cls.from_texts(["", "", ""])
        engine = ocr_engine_cls()
        processor = DocumentProcessor(ocr_settings, ocr_engine=engine, pdf_opener=lambda c: source)

        result = await processor.process(make_document(b"%PDF-scan", "scan.pdf"))

        assert result.is_scanned
        assert result.ocr_applied
        assert result.text == "Recognized scanned text"
        assert result.error is None
        assert engine.calls == [(b"%PDF-scan", 3)]

    @pytest.mark.asyncio
    async def test_text_pdf_never_calls_ocr(
        self, ocr_settings, page_source_cls, ocr_engine_cls, make_document
    ):
        engine = ocr_engine_cls()
        source = page_source_cls.from_texts([PAGE_TEXT])
        processor = DocumentProcessor(ocr_settings, ocr_engine=engine, pdf_opener=lambda c: source)
        result = await processor.process(make_document(b"%PDF", "text.pdf"))
        assert not result.ocr_applied
        assert engine.calls == []

    @pytest.mark.asyncio
    async def test_ocr_disabled(self, settings, page_source_cls, ocr_engine_cls, make_document):
        engine = ocr_engine_cls()
        source = page_source_cls.from_texts(["short"])
        processor = DocumentProcessor(settings, ocr_engine=engine, pdf_opener=lambda c: source)

        result = await processor.process(make_document(b"%PDF", "scan.pdf"))

        assert result.is_scanned
        assert not result.ocr_applied
        assert result.text == "short"
        assert engine.calls == []
        assert not processor.options.ocr_enabled

    @pytest.mark.asyncio
    async def test_ocr_unavailable(self, ocr_settings, page_source_cls, ocr_engine_cls, make_document):
        source = page_source_cls.from_texts(["short"])
        processor = DocumentProcessor(
            ocr_settings,
            ocr_engine=ocr_engine_cls(available=False),
            pdf_opener=lambda c: source,
        )
        result = await processor.process(make_document(b"%PDF", "scan.pdf"))
        assert result.error == "Scanned document detected but OCR engine is unavailable"
        assert result.text == "short"
        assert not result.ocr_applied

    @pytest.mark.asyncio
    async def test_ocr_partial_failure_caveat(
        self, ocr_settings, page_source_cls, ocr_engine_cls, make_document
    ):
        engine = ocr_engine_cls(
            OcrResult(text="page one", pages_attempted=3, pages_recognized=1, failed_pages=[2, 3])
        )
        source = page_source_cls.from_texts(["", "", ""])
        processor = DocumentProcessor(ocr_settings, ocr_engine=engine, pdf_opener=lambda c: source)
        result = await processor.process(make_document(b"%PDF", "scan.pdf"))
        assert result.ocr_applied
        assert result.error == "OCR failed on pages 2, 3"

    @pytest.mark.asyncio
    async def test_ocr_total_failure(self, ocr_settings, page_source_cls, ocr_engine_cls, make_document):
        engine = ocr_engine_cls(OcrResult.failed("tesseract crashed", pages_attempted=2))
        source = page_source_cls.from_texts(["", ""])
        processor = DocumentProcessor(ocr_settings, ocr_engine=engine, pdf_opener=lambda c: source)

        result = await processor.process(make_document(b"%PDF", "scan.pdf"))

        assert result.text == OCR_FAILED_TEXT
        assert result.error == "OCR failed: tesseract crashed"
        assert not result.ocr_applied

    @pytest.mark.asyncio
    async def test_ocr_failure_keeps_sparse_text(
        self, ocr_settings, page_source_cls, ocr_engine_cls, make_document
    ):
        engine = ocr_engine_cls(OcrResult.failed("boom"))
        source = page_source_cls.from_texts(["Signed"])
        processor = DocumentProcessor(ocr_settings, ocr_engine=engine, pdf_opener=lambda c: source)
        result = await processor.process(make_document(b"%PDF", "scan.pdf"))
        assert result.text == "Signed"


class TestDispatch:
    @pytest.mark.asyncio
    async def test_txt(self, settings, make_document):
        result = await DocumentProcessor(settings).process(make_document("Plain note", "a.txt"))
        assert result.text == "Plain note"
        assert result.page_count is None

    @pytest.mark.asyncio
    async def test_unsupported_extension(self, settings, make_document, progress):
        result = await DocumentProcessor(settings).process(
            make_document(b"\x89PNG", "photo.png"), _record(progress)
        )
        assert result.text.startswith("[Unsupported file type: .png")
        assert [p for p, _ in progress] == [10, 90, 100]

    @pytest.mark.asyncio
    async def test_extension_case_insensitive(self, settings, make_document):
        result = await DocumentProcessor(settings).process(make_document("Upper", "NOTE.TXT"))
        assert result.text == "Upper"

    @pytest.mark.asyncio
    async def test_timeout(self, make_document):
        settings = Settings(_env_file=None, ocr_enabled=False, processing_timeout_seconds=0.05)
        processor = DocumentProcessor(settings, extractors={".txt": SlowExtractor()})
        with pytest.raises(ExtractionError, match="timed out"):
            await processor.process(make_document("x", "slow.txt"))


class TestFallback:
    @pytest.mark.asyncio
    async def test_printable_content_recovered(self, settings, make_document):
        content = "Chief complaint: productive cough for three days. " * 5
        processor = DocumentProcessor(settings, extractors={".docx": FailingExtractor()})

        result = await processor.process(make_document(content, "broken.docx"))

        assert result.text == content
        assert result.error == "Failed to process DOCX: not a zip file; used raw text fallback"

    @pytest.mark.asyncio
    async def test_binary_content_fails(self, settings, make_document):
        processor = DocumentProcessor(settings, extractors={".docx": FailingExtractor()})
        content = bytes(range(256)) * 4
        with pytest.raises(ExtractionError, match="Unable to process broken.docx with available methods"):
            await processor.process(make_document(content, "broken.docx"))

    @pytest.mark.asyncio
    async def test_short_content_fails(self, settings, make_document):
        processor = DocumentProcessor(settings, extractors={".docx": FailingExtractor()})
        with pytest.raises(ExtractionError, match="Unable to process"):
            await processor.process(make_document("tiny", "broken.docx"))

    @pytest.mark.asyncio
    async def test_disabled_propagates_cause(self, make_document):
        settings = Settings(_env_file=None, ocr_enabled=False, fallback_enabled=False)
        processor = DocumentProcessor(settings, extractors={".docx": FailingExtractor()})
        with pytest.raises(ExtractionError, match="^Failed to process DOCX"):
            await processor.process(make_document("x" * 500, "broken.docx"))

    @pytest.mark.asyncio
    async def test_unopenable_pdf(self, settings, make_document):
        def opener(content: bytes):
            raise ExtractionError("Unable to open PDF: no objects found")

        content = "Discharge summary written as plain text. " * 5
        processor = DocumentProcessor(settings, pdf_opener=opener)
        result = await processor.process(make_document(content, "fake.pdf"))
        assert result.text == content
        assert result.error.startswith("Unable to open PDF")


class TestOptions:
    def test_reflects_settings(self):
        settings = Settings(
            _env_file=None, ocr_enabled=False, max_concurrent_pages=8,
            fast_mode_page_threshold=10, quick_pages=4, fallback_min_chars=50,
        )
        options = DocumentProcessor(settings).options
        assert options.max_concurrent_pages == 8
        assert options.fast_mode_page_threshold == 10
        assert options.quick_pages == 4
        assert options.fallback_min_chars == 50
        assert options.enable_fast_mode
        assert options.enable_fallback
        assert not options.ocr_enabled
