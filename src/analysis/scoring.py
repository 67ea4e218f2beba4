# src/analysis/scoring.py — v1
"""Keyword-criterion scoring shared by the integrity and audit passes.

A criterion is a keyword list plus an optional subset of required
phrases. Keyword coverage saturates once half of the list (rounded up)
is found; the criterion ratio blends keyword coverage (60%) with
required-phrase coverage (40%).
"""

from __future__ import annotations

from dataclasses import dataclass, field

from clincerta.analysis.text_utils import find_keywords

KEYWORD_WEIGHT = 0.6
REQUIRED_WEIGHT = 0.4


@dataclass(frozen=True)
class KeywordCriterion:
    """A named, keyword-scored rubric item."""

    name: str
    keywords: tuple[str, ...]
    required: tuple[str, ...] = ()
    max_score: int = 10
    suggestion: str = ""


@dataclass
class CriterionScore:
    """Outcome of scoring one criterion against a text."""

    criterion: KeywordCriterion
    keyword_coverage: float
    required_coverage: float
    found: list[str] = field(default_factory=list)
    missing_required: list[str] = field(default_factory=list)

    @property
    def ratio(self) -> float:
        return KEYWORD_WEIGHT * self.keyword_coverage + REQUIRED_WEIGHT * self.required_coverage

    @property
    def percentage(self) -> float:
        return self.ratio * 100

    @property
    def points(self) -> float:
        return self.ratio * self.criterion.max_score


def keyword_coverage(found: int, total: int) -> float:
    """found / ceil(total / 2), capped at 1.0."""
    expected = max(1, (total + 1) // 2)
    return min(1.0, found / expected)


def score_criterion(text: str, criterion: KeywordCriterion) -> CriterionScore:
    found = find_keywords(text, criterion.keywords)
    if criterion.required:
        present = set(find_keywords(text, criterion.required))
        missing = [r for r in criterion.required if r not in present]
        required_coverage = len(present) / len(criterion.required)
    else:
        missing = []
        required_coverage = 1.0
    return CriterionScore(
        criterion=criterion,
        keyword_coverage=keyword_coverage(len(found), len(criterion.keywords)),
        required_coverage=required_coverage,
        found=found,
        missing_required=missing,
    )


def clamp_score(value: float) -> int:
    """Round to an integer score within [0, 100]."""
    return max(0, min(100, round(value)))
