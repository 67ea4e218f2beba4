# tests/unit/core/test_similarity.py — v2
"""Tests for core/similarity.py."""

from __future__ import annotations

import pytest

from clincerta.core.similarity import (
    compare_texts,
    cosine_tf_similarity,
    jaccard_similarity,
    lcs_ratio,
    trigram_similarity,
)


class TestJaccard:
    def test_identical(self):
        assert jaccard_similarity("chest pain today", "Chest pain today") == 1.0

    def test_partial(self):
        # {a, b} vs {b, c} -> 1 / 3
        assert jaccard_similarity("a b", "b c") == pytest.approx(1 / 3)

    def test_empty(self):
        assert jaccard_similarity("", "!!!") == 0.0


class TestCosine:
    def test_identical(self):
        assert cosine_tf_similarity("fever cough fever", "fever cough fever") == pytest.approx(1.0)

    def test_disjoint(self):
        assert cosine_tf_similarity("fever", "cough") == 0.0

    def test_empty(self):
        assert cosine_tf_similarity("", "cough") == 0.0


class TestLcs:
    def test_identical(self):
        assert lcs_ratio("a b c d", "a b c d") == 1.0

    def test_subsequence(self):
        # LCS(a b c d, a c d) = 3, longer = 4
        assert lcs_ratio("a b c d", "a c d") == pytest.approx(0.75)

    def test_truncation(self):
        long_a = " ".join(["x"] * 1000)
        long_b = " ".join(["x"] * 1000)
        assert lcs_ratio(long_a, long_b, max_tokens=50) == 1.0


class TestTrigram:
    def test_identical(self):
        assert trigram_similarity("routine checkup", "routine checkup") == 1.0

    def test_short_strings(self):
        assert trigram_similarity("ab", "ab") == 1.0
        assert trigram_similarity("", "") == 0.0


class TestCombined:
    def test_identical_is_one(self):
        text = "Routine checkup. No abnormal findings."
        assert compare_texts(text, text).combined == pytest.approx(1.0)

    def test_weights(self):
        breakdown = compare_texts("a b", "b c")
        expected = (
            0.3 * breakdown.jaccard
            + 0.3 * breakdown.cosine
            + 0.2 * breakdown.lcs
            + 0.2 * breakdown.trigram
        )
        assert breakdown.combined == pytest.approx(expected)

    def test_as_dict_rounded(self):
        data = compare_texts("fever and cough", "cough and cold").as_dict()
        assert set(data) == {"jaccard", "cosine", "lcs", "trigram", "combined"}
        assert all(0.0 <= v <= 1.0 for v in data.values())
