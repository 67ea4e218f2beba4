# src/analysis/golden_thread.py — v2
"""Golden thread pass.

Detects clinical sections by keyword, then evaluates a fixed list of
weighted, directed connections between them. A connection is linked
when both sections are present and their paragraphs share at least two
significant words (length > 3). Only a linked connection gets a
strength, from the diagnostic, therapeutic or action vocabulary found
in the target section's paragraphs:

    strength = min(1, type_keyword_hits / 2)

and it is strong when that strength reaches the configured threshold.
The score is the weighted share of strong connections.
"""

from __future__ import annotations

import logging
from dataclasses import dataclass
from typing import TYPE_CHECKING

from clincerta.analysis.models import ComplianceLabel, ConnectionResult, ConnectionType, GoldenThreadReport
from clincerta.analysis.scoring import clamp_score
from clincerta.analysis.text_utils import (
    contains_keyword,
    find_keywords,
    require_text,
    significant_words,
    split_paragraphs,
)

if TYPE_CHECKING:
    from clincerta.config.settings import Settings

logger = logging.getLogger(__name__)

MIN_SHARED_WORDS = 2
TYPE_HITS_FOR_FULL_CREDIT = 2

SECTIONS: dict[str, tuple[str, ...]] = {
    "patientInformation": (
        "patient", "name", "patient id", "mrn", "dob", "date of birth", "demographics",
    ),
    "chiefComplaint": (
        "chief complaint", "presenting complaint", "presenting problem",
        "reason for visit", "primary concern", "complains of",
    ),
    "history": (
        "history", "medical history", "past medical", "social history", "family history", "hpi",
    ),
    "examination": (
        "examination", "physical exam", "exam", "clinical findings", "vital signs", "on observation",
    ),
    "assessment": (
        "assessment", "diagnosis", "impression", "differential", "diagnostic",
    ),
    "plan": (
        "plan", "treatment plan", "care plan", "recommendation", "next steps",
    ),
    "interventions": (
        "intervention", "interventions", "medication", "prescribed", "administered",
        "therapy", "procedure", "treatment", "started",
    ),
    "outcomes": (
        "outcome", "outcomes", "response", "improved", "resolved", "follow-up", "goals",
    ),
}

TYPE_KEYWORDS: dict[str, tuple[str, ...]] = {
    "diagnostic": (
        "possible", "likely", "suspected", "probable", "diagnosis", "diagnosed",
        "impression", "rule out", "consistent with", "differential",
    ),
    "therapeutic": (
        "start", "started", "admit", "admitted", "prescribe", "prescribed",
        "administer", "administered", "treat", "treated", "refer", "referred", "medication",
    ),
    "action": (
        "monitor", "review", "evaluate", "follow-up", "reassess", "observe",
        "improved", "resolved", "response",
    ),
}

ACTION_KEYWORDS: tuple[str, ...] = (
    "assessment", "monitor", "observe", "evaluate", "review", "document", "documented",
)
INTERVENTION_KEYWORDS: tuple[str, ...] = (
    "medication", "therapy", "procedure", "treatment", "intervention", "care plan",
)


@dataclass(frozen=True)
class Connection:
    source: str
    target: str
    connection_type: ConnectionType
    weight: float


CONNECTIONS: tuple[Connection, ...] = (
    Connection("chiefComplaint", "assessment", "diagnostic", 1.5),
    Connection("history", "assessment", "diagnostic", 1.0),
    Connection("examination", "assessment", "diagnostic", 1.5),
    Connection("assessment", "plan", "therapeutic", 2.0),
    Connection("plan", "interventions", "action", 2.0),
    Connection("assessment", "interventions", "therapeutic", 1.5),
    Connection("interventions", "outcomes", "action", 1.5),
    Connection("chiefComplaint", "outcomes", "action", 1.0),
)


@dataclass(frozen=True)
class GoldenThreadPolicy:
    """Pass/fail rule of the golden thread pass."""

    name: str = "connections"
    pass_score: int = 70
    min_sections: int = 5
    partial_score: int = 50
    strength_threshold: float = 0.5

    @classmethod
    def from_settings(cls, settings: Settings | None) -> GoldenThreadPolicy:
        if settings is None:
            return cls()
        return cls(
            name=settings.golden_thread_policy,
            pass_score=settings.golden_thread_pass_score,
            min_sections=settings.golden_thread_min_sections,
            partial_score=settings.golden_thread_partial_score,
            strength_threshold=settings.connection_strength_threshold,
        )


def detect_sections(text: str) -> dict[str, bool]:
    return {
        section: any(contains_keyword(text, k) for k in keywords)
        for section, keywords in SECTIONS.items()
    }


def section_paragraphs(paragraphs: list[str], section: str) -> list[str]:
    """Paragraphs mentioning any keyword of the section."""
    keywords = SECTIONS[section]
    return [p for p in paragraphs if any(contains_keyword(p, k) for k in keywords)]


def evaluate_connection(
    connection: Connection,
    paragraphs: list[str],
    coverage: dict[str, bool],
    threshold: float,
) -> ConnectionResult:
    present = coverage[connection.source] and coverage[connection.target]
    if not present:
        return ConnectionResult(
            source=connection.source,
            target=connection.target,
            connection_type=connection.connection_type,
            weight=connection.weight,
            sections_present=False,
        )

    source_text = " ".join(section_paragraphs(paragraphs, connection.source))
    target_text = " ".join(section_paragraphs(paragraphs, connection.target))
    shared = sorted(significant_words(source_text) & significant_words(target_text))
    type_hits = find_keywords(target_text, TYPE_KEYWORDS[connection.connection_type])

    linked = len(shared) >= MIN_SHARED_WORDS
    strength = min(1.0, len(type_hits) / TYPE_HITS_FOR_FULL_CREDIT) if linked else 0.0
    return ConnectionResult(
        source=connection.source,
        target=connection.target,
        connection_type=connection.connection_type,
        weight=connection.weight,
        sections_present=True,
        shared_words=shared,
        type_keywords=type_hits,
        strength=round(strength, 4),
        strong=linked and strength >= threshold,
    )


def _compliance(
    policy: GoldenThreadPolicy,
    score: int,
    sections_covered: int,
    any_strong: bool,
    actions: list[str],
    interventions: list[str],
) -> ComplianceLabel:
    if policy.name == "actions_interventions":
        passed = bool(actions) and bool(interventions)
    else:
        passed = score >= policy.pass_score and sections_covered >= policy.min_sections
    if passed:
        return "Compliant"
    if score >= policy.partial_score or any_strong:
        return "Partially compliant"
    return "Non-compliant"


def _feedback(
    compliance: ComplianceLabel,
    score: int,
    strong: list[str],
    missing_connections: list[str],
    missing_sections: list[str],
    actions: list[str],
    interventions: list[str],
) -> str:
    if compliance == "Compliant":
        text = (
            f"Document maintains a strong golden thread with {score}% of key clinical "
            f"connections. Found connections: {', '.join(strong) or 'none'}."
        )
    elif compliance == "Partially compliant":
        text = (
            f"Document shows partial golden thread compliance ({score}%). "
            f"Missing connections: {', '.join(missing_connections) or 'none'}."
        )
    else:
        text = (
            f"Document lacks a clear golden thread ({score}%). "
            f"Key sections missing: {', '.join(missing_sections) or 'none'}."
        )

    if actions and interventions:
        text += (
            f" Document connects patient actions ({', '.join(actions)}) "
            f"with interventions ({', '.join(interventions)})."
        )
    elif not actions:
        text += " Patient actions missing."
    else:
        text += " Interventions missing."
    return text


def _recommendations(
    missing_sections: list[str], weak: list[ConnectionResult]
) -> list[str]:
    recs = [f"Add a {section} section to the note." for section in missing_sections]
    for c in weak:
        if c.connection_type == "diagnostic":
            recs.append(f"Explain how the {c.source} findings support the {c.target}.")
        elif c.connection_type == "therapeutic":
            recs.append(f"Link the {c.target} explicitly to the {c.source}.")
        else:
            recs.append(f"Show how the {c.source} is followed through in the {c.target}.")
    return recs


def analyze_golden_thread(
    text: str,
    policy: GoldenThreadPolicy | None = None,
) -> GoldenThreadReport:
    """Score the traceability of problem, assessment, plan and interventions."""
    require_text(text)
    policy = policy or GoldenThreadPolicy()

    coverage = detect_sections(text)
    paragraphs = split_paragraphs(text)
    results = [
        evaluate_connection(c, paragraphs, coverage, policy.strength_threshold)
        for c in CONNECTIONS
    ]

    total_weight = sum(c.weight for c in CONNECTIONS)
    strong_weight = sum(r.weight for r in results if r.strong)
    score = clamp_score(100 * strong_weight / total_weight)

    sections_covered = [s for s, present in coverage.items() if present]
    missing_sections = [s for s, present in coverage.items() if not present]
    strong = [r.name for r in results if r.strong]
    # Only connections touching at least one detected section count as missing.
    missing_connections = [
        r.name
        for r in results
        if not r.strong and (coverage[r.source] or coverage[r.target])
    ]
    actions = find_keywords(text, ACTION_KEYWORDS)
    interventions = find_keywords(text, INTERVENTION_KEYWORDS)

    compliance = _compliance(
        policy, score, len(sections_covered), bool(strong), actions, interventions,
    )
    logger.debug(
        "Golden thread: score=%d sections=%d strong=%d -> %s",
        score, len(sections_covered), len(strong), compliance,
    )

    return GoldenThreadReport(
        score=score,
        feedback=_feedback(
            compliance, score, strong, missing_connections, missing_sections,
            actions, interventions,
        ),
        missing_elements=missing_sections,
        recommendations=_recommendations(
            missing_sections, [r for r in results if r.sections_present and not r.strong]
        ),
        breakdown={r.name: round(r.strength * 100, 1) for r in results},
        compliance=compliance,
        policy=policy.name,
        actions_found=actions,
        interventions_found=interventions,
        sections_covered=sections_covered,
        section_coverage=coverage,
        connections=results,
        missing_connections=missing_connections,
    )
