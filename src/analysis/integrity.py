# src/analysis/integrity.py — v1
"""Clinical integrity pass.

Four weighted categories: SOAP structure (35, mean of its subjective,
objective, assessment and plan criteria), documentation standards (20),
safety standards (25) and quality indicators (20). Each category score
is the mean ratio of its criteria, scaled to 0-100.
"""

from __future__ import annotations

import logging
from dataclasses import dataclass

from clincerta.analysis.models import IntegrityReport
from clincerta.analysis.scoring import (
    CriterionScore,
    KeywordCriterion,
    clamp_score,
    score_criterion,
)
from clincerta.analysis.text_utils import require_text

logger = logging.getLogger(__name__)

RECOMMENDATION_THRESHOLD = 75


@dataclass(frozen=True)
class IntegrityCategory:
    key: str
    label: str
    weight: int
    criteria: tuple[KeywordCriterion, ...]
    recommendation: str


SOAP = IntegrityCategory(
    key="soap_structure",
    label="SOAP",
    weight=35,
    criteria=(
        KeywordCriterion(
            name="subjective",
            keywords=(
                "chief complaint", "complains of", "reports", "states", "history",
                "symptoms", "pain", "denies", "presenting complaint",
            ),
            required=("chief complaint",),
        ),
        KeywordCriterion(
            name="objective",
            keywords=(
                "vital signs", "blood pressure", "heart rate", "temperature",
                "examination", "exam", "observed", "findings", "labs", "oxygen saturation",
            ),
            required=("vital signs",),
        ),
        KeywordCriterion(
            name="assessment",
            keywords=(
                "assessment", "diagnosis", "impression", "differential",
                "likely", "consistent with", "condition",
            ),
            required=("assessment", "diagnosis"),
        ),
        KeywordCriterion(
            name="plan",
            keywords=(
                "plan", "care plan", "treatment", "medication", "follow-up",
                "refer", "monitor", "intervention", "outcome",
            ),
            required=("care plan", "follow-up"),
        ),
    ),
    recommendation=(
        "Structure the note with clear Subjective, Objective, Assessment and Plan sections."
    ),
)

CATEGORIES: tuple[IntegrityCategory, ...] = (
    SOAP,
    IntegrityCategory(
        key="documentation_standards",
        label="Documentation standards",
        weight=20,
        criteria=(
            KeywordCriterion(
                name="identification",
                keywords=("patient", "date", "time", "dob", "mrn", "patient id"),
                required=("date",),
            ),
            KeywordCriterion(
                name="authorship",
                keywords=("signed", "signature", "documented by", "clinician", "documentation"),
                required=("documentation",),
            ),
        ),
        recommendation=(
            "Record the date, time, patient identifiers and the documenting clinician."
        ),
    ),
    IntegrityCategory(
        key="safety_standards",
        label="Safety standards",
        weight=25,
        criteria=(
            KeywordCriterion(
                name="medication_safety",
                keywords=("allergies", "allergy", "medication", "dose", "adverse", "contraindication"),
                required=("allergies", "medication"),
            ),
            KeywordCriterion(
                name="risk_assessment",
                keywords=("risk", "fall risk", "safety", "red flags", "escalate", "warning signs"),
                required=("risk",),
            ),
        ),
        recommendation=(
            "Document allergies, medication doses and any identified risks with safety-netting advice."
        ),
    ),
    IntegrityCategory(
        key="quality_indicators",
        label="Quality indicators",
        weight=20,
        criteria=(
            KeywordCriterion(
                name="patient_involvement",
                keywords=("patient education", "consent", "discussed", "understands", "agreed"),
                required=("patient education",),
            ),
            KeywordCriterion(
                name="continuity",
                keywords=("outcome", "follow-up", "review", "goals", "response to treatment"),
                required=("outcome",),
            ),
        ),
        recommendation=(
            "Show patient involvement and record expected outcomes and follow-up arrangements."
        ),
    ),
)


def _category_score(scores: list[CriterionScore]) -> float:
    return 100 * sum(s.ratio for s in scores) / len(scores)


def _feedback(score: int, missing_count: int) -> str:
    if score >= 90:
        return "Excellent clinical documentation integrity. The note meets nearly all standards."
    if score >= 75:
        return (
            f"Good documentation integrity. Consider adding the {missing_count} "
            "missing element(s) to strengthen the record."
        )
    if score >= 60:
        return (
            f"Moderate documentation integrity. {missing_count} required element(s) "
            "are missing and several categories need attention."
        )
    return (
        f"Weak documentation integrity. The note is missing {missing_count} key "
        "clinical element(s); review the recommendations below."
    )


def analyze_integrity(text: str) -> IntegrityReport:
    """Score adherence to SOAP structure and documentation standards."""
    require_text(text)

    breakdown: dict[str, float] = {}
    soap_breakdown: dict[str, float] = {}
    missing: list[str] = []
    recommendations: list[str] = []
    weighted = 0.0

    for category in CATEGORIES:
        scores = [score_criterion(text, c) for c in category.criteria]
        category_score = _category_score(scores)
        breakdown[category.key] = round(category_score, 1)
        weighted += category.weight * category_score

        if category is SOAP:
            soap_breakdown = {s.criterion.name: round(s.percentage, 1) for s in scores}
        for s in scores:
            missing.extend(f"{category.label}: {phrase}" for phrase in s.missing_required)
        if category_score < RECOMMENDATION_THRESHOLD:
            recommendations.append(category.recommendation)

    total_weight = sum(c.weight for c in CATEGORIES)
    score = clamp_score(weighted / total_weight)
    logger.debug("Integrity: score=%d missing=%d", score, len(missing))

    return IntegrityReport(
        score=score,
        feedback=_feedback(score, len(missing)),
        missing_elements=missing,
        recommendations=recommendations,
        breakdown=breakdown,
        soap_breakdown=soap_breakdown,
    )
