# src/analysis/audit.py — v2
"""Documentation audit pass.

Five weighted categories (completeness 25, clinical accuracy 25,
quality 20, compliance 15, professional standards 15), each made of
named criteria with a max score. A category score is the share of its
max points earned; the overall score is the weighted sum.

Improvement suggestions come from the lowest-scoring criteria under
70%, capped at 10. A category whose weakest criterion is under 70%
gets training resources, two at Beginner level (<= 40%), otherwise one.
"""

from __future__ import annotations

import logging
from dataclasses import dataclass
from typing import Any

from clincerta.analysis.models import AuditReport, TrainingRecommendation
from clincerta.analysis.scoring import (
    CriterionScore,
    KeywordCriterion,
    clamp_score,
    score_criterion,
)
from clincerta.analysis.text_utils import require_text
from clincerta.analysis.training_resources import level_for_score, select_resources

logger = logging.getLogger(__name__)

SUGGESTION_THRESHOLD = 70
MAX_SUGGESTIONS = 10


@dataclass(frozen=True)
class AuditCategory:
    key: str
    label: str
    weight: int
    criteria: tuple[KeywordCriterion, ...]


CATEGORIES: tuple[AuditCategory, ...] = (
    AuditCategory(
        key="documentation_completeness",
        label="Documentation completeness",
        weight=25,
        criteria=(
            KeywordCriterion(
                name="required_sections",
                keywords=("assessment", "diagnosis", "intervention", "plan", "history", "examination"),
                required=("assessment", "diagnosis", "intervention"),
                max_score=10,
                suggestion="Ensure assessment, diagnosis, and intervention sections are included.",
            ),
            KeywordCriterion(
                name="care_plan_link",
                keywords=("care plan", "intervention", "goals", "outcome", "follow-up"),
                required=("care plan", "intervention"),
                max_score=8,
                suggestion="Connect care plans with interventions for golden thread compliance.",
            ),
            KeywordCriterion(
                name="patient_details",
                keywords=("patient", "dob", "mrn", "age", "allergies"),
                max_score=7,
                suggestion="Record patient identifiers, age and allergies.",
            ),
        ),
    ),
    AuditCategory(
        key="clinical_accuracy",
        label="Clinical accuracy",
        weight=25,
        criteria=(
            KeywordCriterion(
                name="clinical_findings",
                keywords=("vital signs", "blood pressure", "heart rate", "temperature", "findings", "labs"),
                required=("vital signs",),
                max_score=10,
                suggestion="Document vital signs and objective clinical findings.",
            ),
            KeywordCriterion(
                name="clinical_reasoning",
                keywords=("diagnosis", "differential", "likely", "consistent with", "impression"),
                required=("diagnosis",),
                max_score=8,
                suggestion="Explain the clinical reasoning behind the diagnosis.",
            ),
            KeywordCriterion(
                name="medication_accuracy",
                keywords=("medication", "dose", "mg", "route", "frequency"),
                required=("medication",),
                max_score=7,
                suggestion="Record medication names with dose, route and frequency.",
            ),
        ),
    ),
    AuditCategory(
        key="documentation_quality",
        label="Documentation quality",
        weight=20,
        criteria=(
            KeywordCriterion(
                name="clarity",
                keywords=("clear", "unambiguous", "specific", "concise"),
                max_score=10,
                suggestion="Use precise language and avoid ambiguity.",
            ),
            KeywordCriterion(
                name="timeliness",
                keywords=("date", "time", "timely", "documented at"),
                required=("date",),
                max_score=10,
                suggestion="Include dates and ensure documentation is timely.",
            ),
        ),
    ),
    AuditCategory(
        key="compliance_standards",
        label="Compliance standards",
        weight=15,
        criteria=(
            KeywordCriterion(
                name="guidelines",
                keywords=("guideline", "guidelines", "protocol", "policy", "pathway"),
                max_score=10,
                suggestion="Reference clinical guidelines or protocols where appropriate.",
            ),
            KeywordCriterion(
                name="consent",
                keywords=("consent", "capacity", "agreed", "discussed"),
                required=("consent",),
                max_score=5,
                suggestion="Record consent and the discussion held with the patient.",
            ),
        ),
    ),
    AuditCategory(
        key="professional_standards",
        label="Professional standards",
        weight=15,
        criteria=(
            KeywordCriterion(
                name="accountability",
                keywords=("signed", "signature", "documented by", "clinician", "reviewed by"),
                max_score=10,
                suggestion="Sign the entry and identify the responsible clinician.",
            ),
            KeywordCriterion(
                name="communication",
                keywords=("patient education", "informed", "handover", "referred", "communicated"),
                max_score=5,
                suggestion="Document communication with the patient and other professionals.",
            ),
        ),
    ),
)


@dataclass
class _CategoryResult:
    category: AuditCategory
    scores: list[CriterionScore]

    @property
    def percentage(self) -> float:
        earned = sum(s.points for s in self.scores)
        available = sum(s.criterion.max_score for s in self.scores)
        return 100 * earned / available if available else 0.0

    @property
    def weakest(self) -> CriterionScore:
        return min(self.scores, key=lambda s: s.percentage)


def _feedback(score: int, results: list[_CategoryResult]) -> list[str]:
    if score >= 90:
        items = ["Excellent documentation meeting audit standards."]
    elif score >= 75:
        items = ["Good documentation with minor areas for improvement."]
    elif score >= 60:
        items = ["Documentation is adequate but several areas need improvement."]
    else:
        items = ["Documentation falls below audit standards and needs significant improvement."]
    for r in results:
        if r.percentage < 60:
            items.append(f"{r.category.label} needs attention ({round(r.percentage)}%).")
    return items


def _training(results: list[_CategoryResult]) -> list[TrainingRecommendation]:
    recommendations: list[TrainingRecommendation] = []
    for r in results:
        weakest = r.weakest
        if weakest.percentage >= SUGGESTION_THRESHOLD:
            continue
        level = level_for_score(weakest.percentage)
        count = 2 if weakest.percentage <= 40 else 1
        recommendations.append(
            TrainingRecommendation(
                category=r.category.key,
                level=level,
                score=round(weakest.percentage, 1),
                reason=f"Lowest criterion '{weakest.criterion.name}' scored {round(weakest.percentage)}%.",
                resources=select_resources(r.category.key, level, count),
            )
        )
    return recommendations


def analyze_audit(text: str, document_id: Any = None) -> AuditReport:
    """Audit a clinical note and recommend training."""
    require_text(text)

    results = [
        _CategoryResult(category, [score_criterion(text, c) for c in category.criteria])
        for category in CATEGORIES
    ]
    total_weight = sum(c.weight for c in CATEGORIES)
    score = clamp_score(sum(r.category.weight * r.percentage for r in results) / total_weight)

    weak = sorted(
        (s for r in results for s in r.scores if s.percentage < SUGGESTION_THRESHOLD),
        key=lambda s: s.percentage,
    )
    suggestions = [s.criterion.suggestion for s in weak if s.criterion.suggestion]
    suggestions = list(dict.fromkeys(suggestions))[:MAX_SUGGESTIONS]

    feedback_items = _feedback(score, results)
    missing = [
        f"{r.category.label}: {phrase}" for r in results for s in r.scores
        for phrase in s.missing_required
    ]
    logger.debug("Audit: score=%d suggestions=%d", score, len(suggestions))

    return AuditReport(
        score=score,
        feedback=" ".join(feedback_items),
        missing_elements=missing,
        recommendations=suggestions,
        breakdown={r.category.key: round(r.percentage, 1) for r in results},
        feedback_items=feedback_items,
        suggestions=suggestions,
        training_recommendations=_training(results),
        document_id=document_id,
    )
