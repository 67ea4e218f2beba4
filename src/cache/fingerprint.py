# src/cache/fingerprint.py — v3
"""Document fingerprinting for the extracted-text cache.

The fingerprint is an identity proxy, not a content hash: it is derived
from the file name, byte size and last-modified time only, so two
uploads of the same file map to the same cache entry without reading
their bytes. The 32-bit rolling hash reproduces the browser cache keys
(``h = h * 31 + code_unit`` over UTF-16 code units, wrapped to a signed
32-bit integer, absolute value, base-36), which keeps keys stable
across implementations sharing one store.
"""

from __future__ import annotations

from clincerta.core.models import SourceDocument

_BASE36_DIGITS = "0123456789abcdefghijklmnopqrstuvwxyz"


def rolling_hash(value: str) -> str:
    """32-bit rolling hash of a string, base-36 encoded."""
    h = 0
    data = value.encode("utf-16-le")
    for i in range(0, len(data), 2):
        code_unit = data[i] | (data[i + 1] << 8)
        h = ((h << 5) - h + code_unit) & 0xFFFFFFFF

    if h >= 0x80000000:
        h -= 0x100000000
    return _to_base36(abs(h))


def compute_fingerprint(document: SourceDocument) -> str:
    """Cache key of a document from (file name, size, last-modified ms)."""
    return rolling_hash(
        f"{document.file_name}-{document.size}-{document.last_modified}"
    )


def _to_base36(number: int) -> str:
    if number == 0:
        return "0"
    digits: list[str] = []
    while number:
        number, remainder = divmod(number, 36)
        digits.append(_BASE36_DIGITS[remainder])
    return "".join(reversed(digits))
