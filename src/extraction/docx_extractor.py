# src/extraction/docx_extractor.py — v2
"""DOCX extractor using python-docx.

Returns plain text only: paragraph text separated by blank lines,
followed by table rows. Formatting, headers and footers are dropped.
Requires the 'python-docx' package.
"""

from __future__ import annotations

import io
import logging

from clincerta.core.errors import ExtractionError
from clincerta.core.models import ExtractionResult, SourceDocument
from clincerta.extraction.base_extractor import BaseExtractor

logger = logging.getLogger(__name__)

EMPTY_DOCX_PLACEHOLDER = "[No text could be extracted from this DOCX file]"


class DocxExtractor(BaseExtractor):
    """Extractor for Word documents (.docx)."""

    @property
    def supported_extensions(self) -> list[str]:
        return [".docx"]

    async def extract(self, document: SourceDocument) -> ExtractionResult:
        """Extract raw text from a DOCX document."""
        try:
            import docx
        except ImportError as e:
            raise ImportError(
                "python-docx package required for DOCX extraction: "
                "pip install python-docx"
            ) from e

        try:
            doc = docx.Document(io.BytesIO(document.content))
        except Exception as e:
            raise ExtractionError(f"Failed to process DOCX: {e}") from e

        text_parts = [para.text for para in doc.paragraphs if para.text.strip()]

        for table in doc.tables:
            rows = [[cell.text.strip() for cell in row.cells] for row in table.rows]
            table_text = self._rows_to_text(rows)
            if table_text:
                text_parts.append(table_text)

        raw_text = "\n\n".join(text_parts)
        logger.debug(
            "Extracted %d paragraphs/tables from %s", len(text_parts), document.file_name,
        )
        return ExtractionResult(text=raw_text or EMPTY_DOCX_PLACEHOLDER)

    @staticmethod
    def _rows_to_text(rows: list[list[str]]) -> str:
        """Flatten table rows to one line per row, cells joined by ' | '."""
        lines = [" | ".join(cells) for cells in rows if any(cells)]
        return "\n".join(lines)
