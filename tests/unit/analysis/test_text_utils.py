# tests/unit/analysis/test_text_utils.py — v1
"""Tests for analysis/text_utils.py and analysis/scoring.py."""

from __future__ import annotations

import pytest

from clincerta.analysis.scoring import (
    KeywordCriterion,
    clamp_score,
    keyword_coverage,
    score_criterion,
)
from clincerta.analysis.text_utils import (
    INVALID_TEXT_MESSAGE,
    contains_keyword,
    find_keywords,
    require_text,
    significant_words,
    split_paragraphs,
    split_sentences,
    tokenize,
)
from clincerta.core.errors import InvalidInputError


class TestRequireText:
    @pytest.mark.parametrize("value", [None, 123, "", "   \n", ["text"]])
    def test_rejects(self, value):
        with pytest.raises(InvalidInputError, match=INVALID_TEXT_MESSAGE):
            require_text(value)

    def test_accepts(self):
        assert require_text(" note ") == " note "


class TestTokenizing:
    def test_tokenize(self):
        assert tokenize("BP 120/80, HR-72.") == ["bp", "120", "80", "hr", "72"]

    def test_split_sentences(self):
        assert split_sentences("Pain. Worse at night!! Any fever? ") == [
            "Pain", "Worse at night", "Any fever",
        ]

    def test_split_paragraphs(self):
        assert split_paragraphs("a\n\nb\n  \nc\nd") == ["a", "b", "c\nd"]

    def test_significant_words(self):
        assert significant_words("The cat sat upon walls") == {"upon", "walls"}


class TestKeywordMatching:
    def test_word_boundaries(self):
        assert contains_keyword("Care plan agreed", "plan")
        assert not contains_keyword("Explanation given", "plan")

    def test_case_insensitive(self):
        assert contains_keyword("ASSESSMENT: stable", "assessment")

    def test_multiword_tolerates_whitespace(self):
        assert contains_keyword("care\n   plan", "care plan")

    def test_hyphenated(self):
        assert contains_keyword("Follow-up in 2 weeks", "follow-up")
        assert not contains_keyword("Follow up in 2 weeks", "follow-up")

    def test_find_keywords_keeps_given_order(self):
        assert find_keywords("plan then assessment", ["assessment", "plan", "exam"]) == [
            "assessment", "plan",
        ]


class TestScoring:
    @pytest.mark.parametrize(
        "found,total,expected",
        [(0, 0, 0.0), (1, 3, 0.5), (2, 4, 1.0), (3, 5, 1.0), (5, 5, 1.0), (1, 5, 1 / 3)],
    )
    def test_keyword_coverage(self, found, total, expected):
        assert keyword_coverage(found, total) == pytest.approx(expected)

    def test_score_criterion_blend(self):
        criterion = KeywordCriterion(
            name="plan", keywords=("plan", "follow-up", "monitor", "refer"),
            required=("plan", "care plan"), max_score=8,
        )
        score = score_criterion("Plan: monitor closely.", criterion)
        assert score.found == ["plan", "monitor"]
        assert score.missing_required == ["care plan"]
        assert score.ratio == pytest.approx(0.6 * 1.0 + 0.4 * 0.5)
        assert score.points == pytest.approx(0.8 * 8)

    def test_no_required_counts_as_covered(self):
        criterion = KeywordCriterion(name="clarity", keywords=("clear", "concise"))
        score = score_criterion("nothing relevant", criterion)
        assert score.percentage == pytest.approx(40.0)

    @pytest.mark.parametrize("value,expected", [(-3, 0), (72.4, 72), (104.6, 100), (0, 0)])
    def test_clamp_score(self, value, expected):
        assert clamp_score(value) == expected
