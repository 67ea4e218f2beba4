# src/ocr/base_ocr_engine.py — v1
"""Abstract OCR engine interface and result model."""

from __future__ import annotations

from abc import ABC, abstractmethod

from pydantic import BaseModel, Field

OCR_FAILED_TEXT = "OCR FAILED: Unable to extract text from scanned document."


class OcrResult(BaseModel):
    """Outcome of one OCR invocation over a whole document."""

    text: str
    pages_attempted: int = 0
    pages_recognized: int = 0
    failed_pages: list[int] = Field(default_factory=list)
    error: str | None = None

    @property
    def succeeded(self) -> bool:
        """True when at least one page produced text."""
        return self.pages_recognized > 0 and bool(self.text.strip())

    @classmethod
    def failed(cls, error: str, pages_attempted: int = 0) -> OcrResult:
        return cls(text=OCR_FAILED_TEXT, pages_attempted=pages_attempted, error=error)


class BaseOcrEngine(ABC):
    """Unified interface for OCR backends."""

    @abstractmethod
    def is_available(self) -> bool:
        """Whether the engine can run in this environment."""

    @abstractmethod
    async def recognize_pdf(
        self, content: bytes, page_count: int | None = None
    ) -> OcrResult:
        """Recognize the text of every page of a PDF.

        Never raises: failures are reported through OcrResult.error.
        """
