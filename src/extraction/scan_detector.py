# src/extraction/scan_detector.py — v1
"""Scanned-document heuristic based on extracted-text density.

Two policies are supported and selected by configuration:
- per_page: characters per page below the threshold
- total: non-whitespace characters in the whole text below the threshold
"""

from __future__ import annotations

import re
from typing import Literal

DEFAULT_CHARS_THRESHOLD = 100

_WHITESPACE = re.compile(r"\s+")

ScanPolicy = Literal["per_page", "total"]


def is_likely_scanned(
    text: str,
    page_count: int | None = None,
    policy: ScanPolicy = "per_page",
    threshold: int = DEFAULT_CHARS_THRESHOLD,
) -> bool:
    """Classify a document as scanned (image-only) from its extracted text.

    The per_page policy needs a page count; without one it behaves
    like the total policy.
    """
    if policy == "per_page" and page_count:
        return len(text.strip()) / page_count < threshold
    return len(_WHITESPACE.sub("", text)) < threshold
