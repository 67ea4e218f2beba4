# src/extraction/doc_extractor.py — v2
"""Legacy binary Word (.doc) extractor.

Uses an external converter when one is available. Otherwise, or when
the conversion fails, the raw bytes are read as text: the output may
be garbled, which is accepted rather than treated as an error.
"""

from __future__ import annotations

import logging
import re
import tempfile
from pathlib import Path
from typing import TYPE_CHECKING

from clincerta.core.errors import ExtractionError
from clincerta.core.models import ExtractionResult, SourceDocument
from clincerta.extraction.base_extractor import BaseExtractor
from clincerta.extraction.doc_converter import DocConverter, create_doc_converter
from clincerta.extraction.txt_extractor import decode_text

if TYPE_CHECKING:
    from clincerta.config.settings import Settings

logger = logging.getLogger(__name__)

EMPTY_DOC_PLACEHOLDER = "[Unable to extract text from this DOC file]"

# Control characters other than tab, newline and carriage return.
_CONTROL_CHARS = re.compile(r"[\x00-\x08\x0b\x0c\x0e-\x1f\x7f]")

_UNSET = object()


class DocExtractor(BaseExtractor):
    """Extractor for legacy Word documents (.doc)."""

    def __init__(
        self,
        settings: Settings | None = None,
        converter: DocConverter | None | object = _UNSET,
    ) -> None:
        super().__init__(settings)
        if converter is _UNSET:
            converter = create_doc_converter(settings)
        self._converter: DocConverter | None = converter  # type: ignore[assignment]

    @property
    def supported_extensions(self) -> list[str]:
        return [".doc"]

    async def extract(self, document: SourceDocument) -> ExtractionResult:
        """Convert with the external tool, falling back to raw bytes."""
        text: str | None = None

        if self._converter is not None and self._converter.is_available():
            text = await self._convert(self._converter, document)
        elif self._converter is not None:
            logger.info(
                "DOC converter %s not available, reading raw bytes", self._converter.name,
            )

        if text is None:
            text = raw_bytes_as_text(document.content)

        return ExtractionResult(text=text.strip() or EMPTY_DOC_PLACEHOLDER)

    async def _convert(
        self, converter: DocConverter, document: SourceDocument
    ) -> str | None:
        """Run the converter on a scoped temp copy of the document."""
        with tempfile.TemporaryDirectory(prefix="clincerta-doc-") as tmp_dir:
            path = Path(tmp_dir) / (Path(document.file_name).name or "document.doc")
            path.write_bytes(document.content)
            try:
                return await converter.convert(path)
            except ExtractionError as e:
                logger.warning(
                    "DOC conversion with %s failed, reading raw bytes: %s",
                    converter.name, e,
                )
                return None


def raw_bytes_as_text(content: bytes) -> str:
    """Best-effort decode of binary content as text."""
    return _CONTROL_CHARS.sub("", decode_text(content))
