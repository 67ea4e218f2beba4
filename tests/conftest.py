# tests/conftest.py — v2
"""Shared test fixtures for all unit and integration tests.

Provides settings isolated from any .env file, SourceDocument builders,
an in-memory PDF page source, a scripted OCR engine and a memory-backed
document cache. No external tools are required.
"""

from __future__ import annotations

from typing import Callable

import pytest

from clincerta.cache.document_cache import DocumentCache
from clincerta.cache.memory_store import MemoryCacheStore
from clincerta.config.settings import Settings
from clincerta.core.models import PageTextItem, SourceDocument, TextItem, UnknownItem
from clincerta.ocr.base_ocr_engine import BaseOcrEngine, OcrResult


# === FAKES ===


class FakePageSource:
    """PdfPageSource serving predefined pages; None pages raise."""

    def __init__(self, pages: list[list[PageTextItem] | None]) -> None:
        self._pages = pages
        self.requested: list[int] = []
        self.closed = False

    @property
    def page_count(self) -> int:
        return len(self._pages)

    async def page_items(self, page_number: int) -> list[PageTextItem]:
        self.requested.append(page_number)
        items = self._pages[page_number - 1]
        if items is None:
            raise RuntimeError(f"broken page {page_number}")
        return items

    def close(self) -> None:
        self.closed = True

    @classmethod
    def from_texts(cls, texts: list[str | None]) -> FakePageSource:
        pages: list[list[PageTextItem] | None] = []
        for text in texts:
            if text is None:
                pages.append(None)
            elif text == "":
                pages.append([UnknownItem()])
            else:
                pages.append([TextItem(value=part) for part in text.split("|")])
        return cls(pages)


class FakeOcrEngine(BaseOcrEngine):
    """OCR engine returning a scripted result."""

    def __init__(self, result: OcrResult | None = None, available: bool = True) -> None:
        self._result = result or OcrResult(
            text="Recognized scanned text", pages_attempted=1, pages_recognized=1,
        )
        self._available = available
        self.calls: list[tuple[bytes, int | None]] = []

    def is_available(self) -> bool:
        return self._available

    async def recognize_pdf(self, content: bytes, page_count: int | None = None) -> OcrResult:
        self.calls.append((content, page_count))
        return self._result


# === FIXTURES ===


@pytest.fixture
def settings() -> Settings:
    """Defaults without .env, OCR off and an in-memory cache backend."""
    return Settings(_env_file=None, ocr_enabled=False, cache_backend="memory")


@pytest.fixture
def make_document() -> Callable[..., SourceDocument]:
    def _make(
        content: bytes | str = b"content",
        file_name: str = "note.txt",
        last_modified: int = 1_700_000_000_000,
    ) -> SourceDocument:
        raw = content.encode("utf-8") if isinstance(content, str) else content
        return SourceDocument.from_bytes(raw, file_name, last_modified=last_modified)

    return _make


@pytest.fixture
def clock() -> list[int]:
    """Mutable epoch-ms clock: tests advance clock[0]."""
    return [1_700_000_000_000]


@pytest.fixture
def memory_cache(clock: list[int]) -> DocumentCache:
    return DocumentCache(MemoryCacheStore(), clock=lambda: clock[0])


@pytest.fixture
def clinical_note() -> str:
    return (
        "Patient ID: MRN-4471. Date: 2024-03-12. Age: 67 years. Gender: female.\n\n"
        "Chief complaint: chest pain radiating to the left arm for two hours.\n\n"
        "History: hypertension and type 2 diabetes. Past medical history of angina. "
        "Allergies: penicillin.\n\n"
        "Examination: vital signs recorded, blood pressure 160/95, heart rate 102, "
        "temperature 37.1. Clinical findings of diaphoresis.\n\n"
        "Assessment: chest pain likely acute coronary syndrome, consistent with "
        "unstable angina. Diagnosis of possible myocardial infarction pending labs.\n\n"
        "Plan: admit to cardiology. Care plan agreed with the patient. Start aspirin "
        "and monitor troponin. Follow-up ECG in six hours per chest pain protocol and "
        "guideline. Risk of deterioration discussed, consent obtained.\n\n"
        "Interventions: aspirin medication administered 300 mg, chest pain treatment "
        "started, intervention documented.\n\n"
        "Outcomes: chest pain improved after treatment; response reviewed. Outcome "
        "goals set. Patient education provided. Documentation signed by the clinician."
    )


@pytest.fixture
def page_source_cls() -> type[FakePageSource]:
    return FakePageSource


@pytest.fixture
def ocr_engine_cls() -> type[FakeOcrEngine]:
    return FakeOcrEngine
