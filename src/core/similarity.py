# src/core/similarity.py — v2
"""String similarity measures used by the clonability pass.

Four measures, each returning a value in [0, 1]:
- word-set Jaccard
- term-frequency cosine (numpy vectors)
- word-level longest-common-subsequence ratio
- character trigram Jaccard

SimilarityBreakdown.combined blends them 30/30/20/20.
"""

from __future__ import annotations

import re
from collections import Counter
from dataclasses import dataclass

import numpy as np

_WORD_SPLIT = re.compile(r"\W+")

# LCS is quadratic; longer inputs are truncated to this many tokens.
LCS_MAX_TOKENS = 400

WEIGHT_JACCARD = 0.3
WEIGHT_COSINE = 0.3
WEIGHT_LCS = 0.2
WEIGHT_TRIGRAM = 0.2


@dataclass(frozen=True)
class SimilarityBreakdown:
    """Per-measure similarity between two texts."""

    jaccard: float
    cosine: float
    lcs: float
    trigram: float

    @property
    def combined(self) -> float:
        return (
            WEIGHT_JACCARD * self.jaccard
            + WEIGHT_COSINE * self.cosine
            + WEIGHT_LCS * self.lcs
            + WEIGHT_TRIGRAM * self.trigram
        )

    def as_dict(self) -> dict[str, float]:
        return {
            "jaccard": round(self.jaccard, 3),
            "cosine": round(self.cosine, 3),
            "lcs": round(self.lcs, 3),
            "trigram": round(self.trigram, 3),
            "combined": round(self.combined, 3),
        }


def _words(text: str) -> list[str]:
    return [w for w in _WORD_SPLIT.split(text.lower()) if w]


def jaccard_similarity(text_a: str, text_b: str) -> float:
    """Jaccard index over lower-cased word sets."""
    set_a = set(_words(text_a))
    set_b = set(_words(text_b))
    union = set_a | set_b
    if not union:
        return 0.0
    return len(set_a & set_b) / len(union)


def cosine_tf_similarity(text_a: str, text_b: str) -> float:
    """Cosine similarity of raw term-frequency vectors."""
    tf_a = Counter(_words(text_a))
    tf_b = Counter(_words(text_b))
    if not tf_a or not tf_b:
        return 0.0
    vocabulary = sorted(set(tf_a) | set(tf_b))
    vec_a = np.array([tf_a.get(term, 0) for term in vocabulary], dtype=np.float64)
    vec_b = np.array([tf_b.get(term, 0) for term in vocabulary], dtype=np.float64)
    norm = np.linalg.norm(vec_a) * np.linalg.norm(vec_b)
    if norm < 1e-10:
        return 0.0
    return float(np.clip(vec_a @ vec_b / norm, 0.0, 1.0))


def lcs_ratio(text_a: str, text_b: str, max_tokens: int = LCS_MAX_TOKENS) -> float:
    """Longest common word subsequence divided by the longer sequence."""
    seq_a = _words(text_a)[:max_tokens]
    seq_b = _words(text_b)[:max_tokens]
    if not seq_a or not seq_b:
        return 0.0

    previous = [0] * (len(seq_b) + 1)
    for word_a in seq_a:
        current = [0] * (len(seq_b) + 1)
        for j, word_b in enumerate(seq_b, start=1):
            if word_a == word_b:
                current[j] = previous[j - 1] + 1
            else:
                current[j] = max(previous[j], current[j - 1])
        previous = current

    return previous[-1] / max(len(seq_a), len(seq_b))


def _trigrams(text: str) -> set[str]:
    normalized = re.sub(r"\s+", " ", text.lower()).strip()
    if len(normalized) < 3:
        return {normalized} if normalized else set()
    return {normalized[i : i + 3] for i in range(len(normalized) - 2)}


def trigram_similarity(text_a: str, text_b: str) -> float:
    """Jaccard index over character trigrams."""
    grams_a = _trigrams(text_a)
    grams_b = _trigrams(text_b)
    union = grams_a | grams_b
    if not union:
        return 0.0
    return len(grams_a & grams_b) / len(union)


def compare_texts(text_a: str, text_b: str) -> SimilarityBreakdown:
    """Compute all four measures between two texts."""
    return SimilarityBreakdown(
        jaccard=jaccard_similarity(text_a, text_b),
        cosine=cosine_tf_similarity(text_a, text_b),
        lcs=lcs_ratio(text_a, text_b),
        trigram=trigram_similarity(text_a, text_b),
    )

