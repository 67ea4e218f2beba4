# src/analysis/models.py — v2
"""Report models of the four analysis passes.

Every pass returns a ScoreReport subclass. as_response() renders the
JSON payload of the matching HTTP endpoint (snake_case keys, integer
scores in [0, 100]).
"""

from __future__ import annotations

from typing import Any, Literal

from pydantic import BaseModel, Field

RiskLevel = Literal["high", "medium", "low", "none"]
ComplianceLabel = Literal["Compliant", "Partially compliant", "Non-compliant"]
ConnectionType = Literal["diagnostic", "therapeutic", "action"]
TrainingLevel = Literal["Beginner", "Intermediate", "Advanced"]


class ScoreReport(BaseModel):
    """Common shape of an analysis result."""

    score: int = Field(ge=0, le=100)
    feedback: str = ""
    missing_elements: list[str] = Field(default_factory=list)
    recommendations: list[str] = Field(default_factory=list)
    breakdown: dict[str, float] = Field(default_factory=dict)

    def as_response(self) -> dict[str, Any]:
        return self.model_dump()


# === CLONABILITY ===


class PlagiarismPatterns(BaseModel):
    repeated_phrases: list[str] = Field(default_factory=list)
    total_repetitions: int = 0


class TextComplexity(BaseModel):
    sentence_count: int = 0
    word_count: int = 0
    unique_words: int = 0
    vocabulary_diversity: float = 0.0
    average_sentence_length: float = 0.0


class ClonabilityReport(ScoreReport):
    risk_level: RiskLevel
    risk_description: str
    overall_similarity: float
    most_similar_document: str = ""
    plagiarism_patterns: PlagiarismPatterns = Field(default_factory=PlagiarismPatterns)
    text_complexity: TextComplexity = Field(default_factory=TextComplexity)

    def as_response(self) -> dict[str, Any]:
        return {
            "originality_score": self.score,
            "risk_level": self.risk_level,
            "risk_description": self.risk_description,
            "overall_similarity": round(self.overall_similarity, 3),
            "similarity": round(self.overall_similarity, 3),
            "most_similar_document": self.most_similar_document,
            "similarity_breakdown": self.breakdown,
            "plagiarism_patterns": self.plagiarism_patterns.model_dump(),
            "text_complexity": self.text_complexity.model_dump(),
            "details": self.feedback,
            "recommendations": self.recommendations,
        }


# === INTEGRITY ===


class IntegrityReport(ScoreReport):
    soap_breakdown: dict[str, float] = Field(default_factory=dict)

    def as_response(self) -> dict[str, Any]:
        return {
            "integrity_score": self.score,
            "missing_elements": self.missing_elements,
            "feedback": self.feedback,
            "recommendations": self.recommendations,
            "category_scores": self.breakdown,
            "soap_breakdown": self.soap_breakdown,
        }


# === GOLDEN THREAD ===


class ConnectionResult(BaseModel):
    """Evaluation of one directed section-to-section connection."""

    source: str
    target: str
    connection_type: ConnectionType
    weight: float
    sections_present: bool
    shared_words: list[str] = Field(default_factory=list)
    type_keywords: list[str] = Field(default_factory=list)
    strength: float = 0.0
    strong: bool = False

    @property
    def name(self) -> str:
        return f"{self.source}-to-{self.target}"


class GoldenThreadReport(ScoreReport):
    compliance: ComplianceLabel
    policy: str
    actions_found: list[str] = Field(default_factory=list)
    interventions_found: list[str] = Field(default_factory=list)
    sections_covered: list[str] = Field(default_factory=list)
    section_coverage: dict[str, bool] = Field(default_factory=dict)
    connections: list[ConnectionResult] = Field(default_factory=list)
    missing_connections: list[str] = Field(default_factory=list)

    def as_response(self) -> dict[str, Any]:
        return {
            "golden_thread_compliance": self.compliance,
            "compliance_score": self.score,
            "feedback": self.feedback,
            "actions_found": self.actions_found,
            "interventions_found": self.interventions_found,
            "sections_covered": self.sections_covered,
            "missing_connections": self.missing_connections,
            "section_coverage": self.section_coverage,
            "connections": [
                {
                    "name": c.name,
                    "type": c.connection_type,
                    "strength": round(c.strength, 3),
                    "strong": c.strong,
                    "shared_words": c.shared_words,
                }
                for c in self.connections
            ],
            "recommendations": self.recommendations,
        }


# === AUDIT ===


class TrainingResource(BaseModel):
    title: str
    url: str
    level: TrainingLevel


class TrainingRecommendation(BaseModel):
    category: str
    level: TrainingLevel
    score: float
    reason: str
    resources: list[TrainingResource] = Field(default_factory=list)


class AuditReport(ScoreReport):
    feedback_items: list[str] = Field(default_factory=list)
    suggestions: list[str] = Field(default_factory=list)
    training_recommendations: list[TrainingRecommendation] = Field(default_factory=list)
    document_id: Any = None

    def as_response(self) -> dict[str, Any]:
        payload: dict[str, Any] = {
            "audit_score": self.score,
            "feedback": self.feedback_items,
            "suggestions": self.suggestions,
            "training_recommendations": [
                t.model_dump() for t in self.training_recommendations
            ],
            "category_scores": self.breakdown,
        }
        if self.document_id is not None:
            payload["document_id"] = self.document_id
        return payload
