# src/extraction/base_extractor.py — v1
"""Abstract extractor interface for document formats."""

from __future__ import annotations

from abc import ABC, abstractmethod
from typing import TYPE_CHECKING

from clincerta.core.models import ExtractionResult, SourceDocument

if TYPE_CHECKING:
    from clincerta.config.settings import Settings


class BaseExtractor(ABC):
    """Unified interface for document format extractors."""

    def __init__(self, settings: Settings | None = None) -> None:
        self._settings = settings

    @property
    @abstractmethod
    def supported_extensions(self) -> list[str]:
        """File extensions this extractor handles (e.g., ['.pdf'])."""

    @abstractmethod
    async def extract(self, document: SourceDocument) -> ExtractionResult:
        """Extract raw text from the document.

        Raises:
            ExtractionError: If the document cannot be parsed at all.
        """
