# src/api/models.py — v3
"""API-level request models for the analysis endpoints.

``text`` must be a real, non-empty string: StrictStr refuses numbers,
lists and other JSON values that would otherwise be coerced.
"""

from __future__ import annotations

from typing import Annotated, Any, Literal

from pydantic import BaseModel, ConfigDict, Field, StrictStr, StringConstraints

NonEmptyText = Annotated[StrictStr, StringConstraints(min_length=1)]

PassName = Literal["clonability", "integrity", "golden_thread", "audit"]
ALL_PASSES: tuple[PassName, ...] = ("clonability", "integrity", "golden_thread", "audit")


class AnalysisRequest(BaseModel):
    """Body of the clonability, integrity and golden thread requests."""

    model_config = ConfigDict(extra="ignore")

    text: NonEmptyText


class AuditRequest(AnalysisRequest):
    """Audit request; ``documentId`` is opaque and passed through untouched,
    whatever its JSON type."""

    model_config = ConfigDict(extra="ignore", populate_by_name=True)

    document_id: Any = Field(default=None, alias="documentId")
