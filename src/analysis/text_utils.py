# src/analysis/text_utils.py — v1
"""Tokenization and keyword matching shared by the analysis passes.

All matching is case-insensitive. Keywords match on word boundaries so
that "plan" does not fire inside "explanation"; multi-word keywords
tolerate any run of whitespace between their words.
"""

from __future__ import annotations

import re
from functools import lru_cache
from typing import Iterable

from clincerta.core.errors import InvalidInputError

INVALID_TEXT_MESSAGE = "Missing or invalid text"

_WORD_SPLIT = re.compile(r"\W+")
_SENTENCE_SPLIT = re.compile(r"[.!?]+")
_PARAGRAPH_SPLIT = re.compile(r"\r?\n[^\S\r\n]*\r?\n")

# Words with more than this many characters are "significant".
SIGNIFICANT_WORD_MIN_EXCLUSIVE = 3


def require_text(text: object) -> str:
    """Return text unchanged, or raise InvalidInputError when it is not
    a non-blank string."""
    if not isinstance(text, str) or not text.strip():
        raise InvalidInputError(INVALID_TEXT_MESSAGE)
    return text


def tokenize(text: str) -> list[str]:
    """Lower-cased words split on non-word characters."""
    return [w for w in _WORD_SPLIT.split(text.lower()) if w]


def split_sentences(text: str) -> list[str]:
    """Sentences split on '.', '!' and '?', stripped, empties dropped."""
    return [s.strip() for s in _SENTENCE_SPLIT.split(text) if s.strip()]


def split_paragraphs(text: str) -> list[str]:
    """Paragraphs separated by blank lines."""
    return [p.strip() for p in _PARAGRAPH_SPLIT.split(text) if p.strip()]


def significant_words(text: str) -> set[str]:
    return {w for w in tokenize(text) if len(w) > SIGNIFICANT_WORD_MIN_EXCLUSIVE}


@lru_cache(maxsize=2048)
def _keyword_pattern(keyword: str) -> re.Pattern[str]:
    parts = [re.escape(p) for p in keyword.lower().split()]
    return re.compile(r"(?<!\w)" + r"\s+".join(parts) + r"(?!\w)", re.IGNORECASE)


def contains_keyword(text: str, keyword: str) -> bool:
    """Whole-word, case-insensitive keyword test."""
    return _keyword_pattern(keyword).search(text) is not None


def find_keywords(text: str, keywords: Iterable[str]) -> list[str]:
    """Keywords present in text, in the order given."""
    return [k for k in keywords if contains_keyword(text, k)]
