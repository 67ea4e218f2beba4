# src/logging/context.py — v1
"""Contextual logging support — attach document fingerprint, file name
and pipeline stage to log records.
"""

from __future__ import annotations

import contextvars
from contextlib import contextmanager
from dataclasses import dataclass
from typing import Any, Iterator

_document_id: contextvars.ContextVar[str | None] = contextvars.ContextVar(
    "document_id", default=None
)
_file_name: contextvars.ContextVar[str | None] = contextvars.ContextVar(
    "file_name", default=None
)
_stage: contextvars.ContextVar[str | None] = contextvars.ContextVar(
    "stage", default=None
)


@dataclass
class LogContext:
    """Immutable snapshot of current logging context."""

    document_id: str | None = None
    file_name: str | None = None
    stage: str | None = None

    def as_dict(self) -> dict[str, Any]:
        """Return non-None fields as dict for JSON log injection."""
        return {k: v for k, v in self.__dict__.items() if v is not None}


def get_context() -> LogContext:
    """Snapshot current context variables."""
    return LogContext(
        document_id=_document_id.get(),
        file_name=_file_name.get(),
        stage=_stage.get(),
    )


def set_document_context(document_id: str, file_name: str | None = None) -> None:
    """Set document-level context (called once per processed document)."""
    _document_id.set(document_id)
    _file_name.set(file_name)


def set_stage_context(stage: str | None) -> None:
    """Set the current pipeline stage (extraction, ocr, cache, analysis pass)."""
    _stage.set(stage)


@contextmanager
def stage(name: str) -> Iterator[None]:
    """Scope a stage name; the previous stage is restored on exit."""
    token = _stage.set(name)
    try:
        yield
    finally:
        _stage.reset(token)


def clear_context() -> None:
    """Reset all context variables."""
    _document_id.set(None)
    _file_name.set(None)
    _stage.set(None)
