# src/extraction/pdf_extractor.py — v3
"""PDF extractor using PyMuPDF (fitz).

Pages are walked in order 1..N. Each page is reduced to a list of
PageTextItem values by the PyMuPdfPageSource adapter, text items are
joined with single spaces, and pages are joined with newlines.
Pages may be extracted concurrently in fixed-size chunks; PyMuPDF calls
run in worker threads, serialized per document since a fitz.Document
is not thread-safe. The assembled output always follows the original
page order.
Requires the 'pymupdf' package.
"""

from __future__ import annotations

import asyncio
import logging
import re
import threading
from typing import TYPE_CHECKING, Callable, Protocol, Sequence

from pydantic import TypeAdapter

from clincerta.core.errors import ExtractionError
from clincerta.core.models import ExtractionResult, PageTextItem, SourceDocument, TextItem
from clincerta.extraction.base_extractor import BaseExtractor

if TYPE_CHECKING:
    from clincerta.config.settings import Settings

logger = logging.getLogger(__name__)

DEFAULT_CHUNK_SIZE = 4

_WHITESPACE = re.compile(r"\s+")
_ITEMS_ADAPTER = TypeAdapter(list[PageTextItem])

# Called after each chunk with (pages_done, page_count).
ChunkCallback = Callable[[int, int], None]


class PdfPageSource(Protocol):
    """Page-level access to an opened PDF."""

    @property
    def page_count(self) -> int: ...

    async def page_items(self, page_number: int) -> list[PageTextItem]:
        """Return the content items of a 1-based page."""
        ...

    def close(self) -> None: ...


class PyMuPdfPageSource:
    """PdfPageSource backed by a PyMuPDF document."""

    def __init__(self, doc: object, fast_mode: bool = True) -> None:
        import fitz  # PyMuPDF

        self._doc = doc
        self._lock = threading.Lock()
        if fast_mode:
            # Image blocks are not needed for text extraction.
            self._flags = fitz.TEXTFLAGS_BLOCKS & ~fitz.TEXT_PRESERVE_IMAGES
        else:
            self._flags = fitz.TEXTFLAGS_BLOCKS | fitz.TEXT_PRESERVE_IMAGES

    @classmethod
    def open(cls, content: bytes, fast_mode: bool = True) -> PyMuPdfPageSource:
        """Open a PDF from bytes.

        Raises:
            ExtractionError: If the bytes are not a readable PDF.
        """
        try:
            import fitz  # PyMuPDF
        except ImportError as e:
            raise ImportError(
                "pymupdf package required for PDF extraction: pip install pymupdf"
            ) from e

        if fast_mode:
            fitz.TOOLS.mupdf_display_errors(False)

        try:
            doc = fitz.open(stream=content, filetype="pdf")
        except Exception as e:
            raise ExtractionError(f"Unable to open PDF: {e}") from e

        if doc.needs_pass:
            doc.close()
            raise ExtractionError("Unable to open PDF: document is password protected")

        return cls(doc, fast_mode=fast_mode)

    @property
    def page_count(self) -> int:
        return len(self._doc)  # type: ignore[arg-type]

    async def page_items(self, page_number: int) -> list[PageTextItem]:
        blocks = await asyncio.to_thread(self._read_blocks, page_number)
        raw_items: list[dict[str, str]] = []
        for block in blocks:
            # (x0, y0, x1, y1, text, block_no, block_type); block_type 0 = text
            if block[6] == 0:
                raw_items.append({"kind": "text", "value": block[4]})
            else:
                raw_items.append({"kind": "unknown"})
        return _ITEMS_ADAPTER.validate_python(raw_items)

    def _read_blocks(self, page_number: int) -> list[tuple]:
        with self._lock:
            page = self._doc.load_page(page_number - 1)  # type: ignore[attr-defined]
            return page.get_text("blocks", flags=self._flags)

    def close(self) -> None:
        with self._lock:
            self._doc.close()  # type: ignore[attr-defined]

    def __enter__(self) -> PyMuPdfPageSource:
        return self

    def __exit__(self, *exc_info: object) -> None:
        self.close()


def page_text_from_items(items: Sequence[PageTextItem]) -> str:
    """Join text items with single spaces and normalize whitespace."""
    joined = " ".join(item.value for item in items if isinstance(item, TextItem))
    return _WHITESPACE.sub(" ", joined).strip()


async def extract_page_text(source: PdfPageSource, page_number: int) -> str:
    """Extract one page, replacing any failure by an inline marker."""
    try:
        items = await source.page_items(page_number)
        return page_text_from_items(items)
    except Exception:
        logger.warning("Error extracting page %d", page_number, exc_info=True)
        return f"[Error extracting page {page_number}]"


async def extract_pages(
    source: PdfPageSource,
    first_page: int,
    last_page: int,
    chunk_size: int = DEFAULT_CHUNK_SIZE,
    on_chunk: ChunkCallback | None = None,
) -> list[str]:
    """Extract pages first_page..last_page (inclusive, 1-based).

    Pages are grouped into chunks of ``chunk_size``; all pages of a
    chunk are started together and awaited together, chunks run one
    after the other. The returned list is in page order.
    """
    if chunk_size < 1:
        raise ValueError("chunk_size must be >= 1")

    texts: list[str] = []
    for start in range(first_page, last_page + 1, chunk_size):
        end = min(start + chunk_size - 1, last_page)
        chunk = await asyncio.gather(
            *(extract_page_text(source, n) for n in range(start, end + 1))
        )
        texts.extend(chunk)
        if on_chunk is not None:
            on_chunk(end, last_page)
    return texts


class PdfExtractor(BaseExtractor):
    """Extractor for PDF files using PyMuPDF.

    Large documents get a quick pass: the first ``quick_pages`` pages are
    read one at a time before the rest are read in concurrent chunks.
    """

    def __init__(
        self,
        settings: Settings | None = None,
        opener: Callable[[bytes], PdfPageSource] | None = None,
    ) -> None:
        super().__init__(settings)
        if settings is None:
            fast_mode, threshold, quick_pages = True, 5, 3
            chunk_size = DEFAULT_CHUNK_SIZE
        else:
            fast_mode = settings.fast_mode_enabled
            threshold = settings.fast_mode_page_threshold
            quick_pages = settings.quick_pages
            chunk_size = settings.max_concurrent_pages
        self._fast_mode = fast_mode
        self._quick_threshold = threshold
        self._quick_pages = quick_pages
        self._chunk_size = chunk_size
        self._opener = opener or (
            lambda content: PyMuPdfPageSource.open(content, fast_mode=fast_mode)
        )

    @property
    def supported_extensions(self) -> list[str]:
        return [".pdf"]

    def open(self, content: bytes) -> PdfPageSource:
        """Open the PDF through the configured adapter."""
        return self._opener(content)

    def uses_quick_pass(self, page_count: int) -> bool:
        return self._fast_mode and page_count > self._quick_threshold

    async def read_text(
        self,
        source: PdfPageSource,
        on_quick: ChunkCallback | None = None,
        on_chunk: ChunkCallback | None = None,
    ) -> str:
        """Read every page of an opened PDF, quick pass first when enabled.

        ``on_quick`` is called after each quick-pass page, ``on_chunk``
        after each chunk of the remaining pages.
        """
        page_count = source.page_count
        pages: list[str] = []
        first_remaining = 1

        if self.uses_quick_pass(page_count):
            quick_count = min(self._quick_pages, page_count)
            pages = await extract_pages(
                source, 1, quick_count, chunk_size=1, on_chunk=on_quick,
            )
            logger.debug(
                "Quick pass extracted %d chars from %d pages",
                sum(len(p) for p in pages), quick_count,
            )
            first_remaining = quick_count + 1

        if first_remaining <= page_count:
            pages += await extract_pages(
                source,
                first_remaining,
                page_count,
                chunk_size=self._chunk_size,
                on_chunk=on_chunk,
            )
        return "\n".join(pages)

    async def extract(self, document: SourceDocument) -> ExtractionResult:
        """Extract the text layer of a PDF, without scan detection or OCR."""
        source = self.open(document.content)
        try:
            page_count = source.page_count
            text = await self.read_text(source)
        finally:
            source.close()

        logger.debug("Extracted %d pages from %s", page_count, document.file_name)
        return ExtractionResult(text=text, page_count=page_count)
