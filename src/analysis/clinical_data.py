# src/analysis/clinical_data.py — v2
"""Regex extraction of basic patient data from clinical text."""

from __future__ import annotations

import re

from pydantic import BaseModel, ConfigDict
from pydantic.alias_generators import to_camel

_PATIENT_ID = re.compile(r"(?:Patient\s*ID|MRN)\s*[:#]\s*([A-Z0-9-]+)", re.IGNORECASE)
_DATE = re.compile(r"(?:Date|DOB)\s*[:#]\s*(\d{1,4}[-/.]\d{1,2}[-/.]\d{1,4})", re.IGNORECASE)
_AGE = re.compile(r"Age\s*[:#]\s*(\d+)\s*(?:years|yrs)?", re.IGNORECASE)
_GENDER = re.compile(r"(?:Gender|Sex)\s*[:#]\s*(\w+)", re.IGNORECASE)


class ClinicalData(BaseModel):
    model_config = ConfigDict(alias_generator=to_camel, populate_by_name=True)

    patient_id: str | None = None
    date: str | None = None
    age: int | None = None
    gender: str | None = None


def _first_group(pattern: re.Pattern[str], text: str) -> str | None:
    match = pattern.search(text)
    return match.group(1) if match else None


def extract_clinical_data(text: str) -> ClinicalData:
    """First patient ID/MRN, date/DOB, age and gender found in the text."""
    age = _first_group(_AGE, text)
    return ClinicalData(
        patient_id=_first_group(_PATIENT_ID, text),
        date=_first_group(_DATE, text),
        age=int(age) if age is not None else None,
        gender=_first_group(_GENDER, text),
    )
