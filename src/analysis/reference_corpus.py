# src/analysis/reference_corpus.py — v1
"""Reference documents the clonability pass compares against."""

from __future__ import annotations

REFERENCE_DOCUMENTS: tuple[str, ...] = (
    "Patient presented with fever and cough. Prescribed antibiotics.",
    "Patient admitted for chest pain. ECG and labs ordered.",
    "Routine checkup. No abnormal findings.",
)
