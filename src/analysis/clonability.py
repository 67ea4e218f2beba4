# src/analysis/clonability.py — v1
"""Clonability (originality) pass.

The input is compared against every reference document with four
similarity measures blended 30/30/20/20. The best match drives the
originality score (100 - similarity%) and the risk band. Repeated
sentence-level phrases and basic text-complexity metrics are reported
alongside.
"""

from __future__ import annotations

import logging
from collections import Counter
from typing import Sequence

from clincerta.analysis.models import (
    ClonabilityReport,
    PlagiarismPatterns,
    RiskLevel,
    TextComplexity,
)
from clincerta.analysis.reference_corpus import REFERENCE_DOCUMENTS
from clincerta.analysis.scoring import clamp_score
from clincerta.analysis.text_utils import require_text, split_sentences, tokenize
from clincerta.core.similarity import SimilarityBreakdown, compare_texts

logger = logging.getLogger(__name__)

MIN_PHRASE_LENGTH = 21

_RISK_BANDS: tuple[tuple[float, RiskLevel], ...] = (
    (0.7, "high"),
    (0.4, "medium"),
    (0.2, "low"),
)

_RISK_DESCRIPTIONS: dict[RiskLevel, str] = {
    "high": "High similarity detected. Possible cloned content.",
    "medium": "Moderate similarity to existing documentation. Review for copied passages.",
    "low": "Low similarity to existing documentation.",
    "none": "No significant cloned content detected.",
}

_RISK_RECOMMENDATIONS: dict[RiskLevel, list[str]] = {
    "high": [
        "Rewrite the note in your own words based on the current encounter.",
        "Remove text carried forward from previous notes unless it was re-verified.",
        "Document findings specific to this patient and visit.",
    ],
    "medium": [
        "Review passages that match existing documentation and update them for this encounter.",
        "Add patient-specific details to distinguish this note.",
    ],
    "low": ["Keep documenting encounter-specific observations."],
    "none": [],
}


def risk_level_for(similarity: float) -> RiskLevel:
    for threshold, level in _RISK_BANDS:
        if similarity > threshold:
            return level
    return "none"


def find_repeated_phrases(text: str) -> PlagiarismPatterns:
    """Sentences of at least MIN_PHRASE_LENGTH characters occurring more than once."""
    phrases = Counter(
        " ".join(s.lower().split())
        for s in split_sentences(text)
        if len(s) >= MIN_PHRASE_LENGTH
    )
    repeated = {p: n for p, n in phrases.items() if n > 1}
    return PlagiarismPatterns(
        repeated_phrases=sorted(repeated),
        total_repetitions=sum(n - 1 for n in repeated.values()),
    )


def text_complexity(text: str) -> TextComplexity:
    sentences = split_sentences(text)
    words = tokenize(text)
    unique = set(words)
    return TextComplexity(
        sentence_count=len(sentences),
        word_count=len(words),
        unique_words=len(unique),
        vocabulary_diversity=round(len(unique) / len(words), 3) if words else 0.0,
        average_sentence_length=round(len(words) / len(sentences), 2) if sentences else 0.0,
    )


def analyze_clonability(
    text: str,
    references: Sequence[str] = REFERENCE_DOCUMENTS,
) -> ClonabilityReport:
    """Score the originality of a text against reference documents."""
    require_text(text)

    best: SimilarityBreakdown | None = None
    best_document = ""
    for reference in references:
        breakdown = compare_texts(text, reference)
        if best is None or breakdown.combined > best.combined:
            best = breakdown
            best_document = reference

    similarity = min(1.0, best.combined) if best is not None else 0.0
    risk = risk_level_for(similarity)
    patterns = find_repeated_phrases(text)

    recommendations = list(_RISK_RECOMMENDATIONS[risk])
    if patterns.repeated_phrases:
        recommendations.append(
            f"Remove {patterns.total_repetitions} repeated phrase(s) duplicated within the note."
        )

    logger.debug("Clonability: similarity=%.3f risk=%s", similarity, risk)
    return ClonabilityReport(
        score=clamp_score(100 - round(similarity * 100)),
        feedback=_RISK_DESCRIPTIONS[risk],
        recommendations=recommendations,
        breakdown=best.as_dict() if best is not None else {},
        risk_level=risk,
        risk_description=_RISK_DESCRIPTIONS[risk],
        overall_similarity=similarity,
        most_similar_document=best_document if similarity > 0 else "",
        plagiarism_patterns=patterns,
        text_complexity=text_complexity(text),
    )
