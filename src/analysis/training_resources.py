# src/analysis/training_resources.py — v1
"""Static training resource catalogue used by the audit pass.

Resources are listed per audit category and level. select_resources()
prefers the requested level and tops up from the other levels of the
same category when the level has too few entries.
"""

from __future__ import annotations

from clincerta.analysis.models import TrainingLevel, TrainingResource

CLARITY_URL = "https://www.clinicaldocumentation.com/clarity-training"
COMPLETENESS_URL = "https://www.clinicaldocumentation.com/completeness-training"
TIMELINESS_URL = "https://www.clinicaldocumentation.com/timeliness-training"
GUIDELINES_URL = "https://www.clinicaldocumentation.com/guidelines-training"
GOLDEN_THREAD_URL = "https://www.clinicaldocumentation.com/golden-thread-training"

LEVEL_ORDER: tuple[TrainingLevel, ...] = ("Beginner", "Intermediate", "Advanced")


def _r(title: str, url: str, level: TrainingLevel) -> TrainingResource:
    return TrainingResource(title=title, url=url, level=level)


TRAINING_RESOURCES: dict[str, tuple[TrainingResource, ...]] = {
    "documentation_completeness": (
        _r("Essentials of complete clinical notes", COMPLETENESS_URL, "Beginner"),
        _r("Linking care plans to interventions", GOLDEN_THREAD_URL, "Beginner"),
        _r("Structured documentation for complex cases", COMPLETENESS_URL, "Intermediate"),
        _r("Golden thread auditing for senior clinicians", GOLDEN_THREAD_URL, "Advanced"),
    ),
    "clinical_accuracy": (
        _r("Recording assessments and diagnoses", GUIDELINES_URL, "Beginner"),
        _r("Clear clinical reasoning in notes", CLARITY_URL, "Beginner"),
        _r("Evidence-based documentation", GUIDELINES_URL, "Intermediate"),
        _r("Diagnostic accuracy and differential reasoning", GUIDELINES_URL, "Advanced"),
    ),
    "documentation_quality": (
        _r("Writing clear and unambiguous notes", CLARITY_URL, "Beginner"),
        _r("Timely documentation basics", TIMELINESS_URL, "Beginner"),
        _r("Concise documentation techniques", CLARITY_URL, "Intermediate"),
        _r("Peer review of documentation quality", CLARITY_URL, "Advanced"),
    ),
    "compliance_standards": (
        _r("Introduction to clinical guidelines and protocols", GUIDELINES_URL, "Beginner"),
        _r("Dates, times and record keeping standards", TIMELINESS_URL, "Beginner"),
        _r("Applying protocols in everyday documentation", GUIDELINES_URL, "Intermediate"),
        _r("Regulatory compliance for clinical records", GUIDELINES_URL, "Advanced"),
    ),
    "professional_standards": (
        _r("Professional accountability in records", CLARITY_URL, "Beginner"),
        _r("Consent and patient communication", COMPLETENESS_URL, "Beginner"),
        _r("Professional standards in multidisciplinary notes", CLARITY_URL, "Intermediate"),
        _r("Leading documentation improvement", GOLDEN_THREAD_URL, "Advanced"),
    ),
}


def level_for_score(percentage: float) -> TrainingLevel:
    """Lower scores map to introductory material first."""
    if percentage <= 40:
        return "Beginner"
    if percentage <= 60:
        return "Intermediate"
    return "Advanced"


def select_resources(category: str, level: TrainingLevel, count: int) -> list[TrainingResource]:
    catalogue = TRAINING_RESOURCES.get(category, ())
    preferred = [r for r in catalogue if r.level == level]
    others = [r for r in catalogue if r.level != level]
    return (preferred + others)[:count]
