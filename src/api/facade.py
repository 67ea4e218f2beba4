# src/api/facade.py — v3
"""Public API facade — entry points for document processing and analysis.

Usage:
    from clincerta.api.facade import process_document, run_analysis
    result = await process_document(document, cache=cache)
    reports = await run_analysis(result.text)

The analyze_* functions take the decoded JSON body of an analysis
request and return the JSON-ready response; an invalid body raises
InvalidInputError before any scoring work.
"""

from __future__ import annotations

import asyncio
import logging
from typing import TYPE_CHECKING, Any, Callable, Iterable, Mapping, TypeVar

from pydantic import ValidationError

from clincerta.analysis.audit import analyze_audit as _audit
from clincerta.analysis.clonability import analyze_clonability as _clonability
from clincerta.analysis.golden_thread import GoldenThreadPolicy
from clincerta.analysis.golden_thread import analyze_golden_thread as _golden_thread
from clincerta.analysis.integrity import analyze_integrity as _integrity
from clincerta.analysis.text_utils import INVALID_TEXT_MESSAGE, require_text
from clincerta.api.models import ALL_PASSES, AnalysisRequest, AuditRequest
from clincerta.cache.fingerprint import compute_fingerprint
from clincerta.config.settings import Settings
from clincerta.core.errors import InvalidInputError
from clincerta.core.models import ExtractionResult, SourceDocument
from clincerta.logging.context import set_document_context, stage
from clincerta.processing.orchestrator import DocumentProcessor
from clincerta.processing.progress import ProgressCallback, report_progress

if TYPE_CHECKING:
    from clincerta.cache.document_cache import DocumentCache

logger = logging.getLogger(__name__)

_RequestT = TypeVar("_RequestT", bound=AnalysisRequest)


async def process_document(
    document: SourceDocument,
    settings: Settings | None = None,
    processor: DocumentProcessor | None = None,
    cache: DocumentCache | None = None,
    on_progress: ProgressCallback | None = None,
) -> ExtractionResult:
    """Extract a document's text, serving and filling the cache.

    Raises:
        ExtractionError: If the document cannot be processed at all.
    """
    settings = settings or Settings()
    set_document_context(compute_fingerprint(document), document.file_name)

    if cache is not None:
        with stage("cache"):
            entry = await cache.get_cached_entry(document)
        if entry is not None:
            logger.info("Serving %s from cache", document.file_name)
            report_progress(on_progress, 100, "Loaded from cache")
            return ExtractionResult(
                text=entry.text,
                is_scanned=entry.is_scanned,
                ocr_applied=entry.ocr_applied,
                from_cache=True,
            )

    processor = processor or DocumentProcessor(settings)
    result = await processor.process(document, on_progress=on_progress)

    if cache is not None and result.error is None:
        with stage("cache"):
            await cache.cache_document(
                document, result.text, result.is_scanned, result.ocr_applied
            )
    return result


def _validate(model: type[_RequestT], payload: object) -> _RequestT:
    if not isinstance(payload, Mapping):
        raise InvalidInputError(INVALID_TEXT_MESSAGE)
    try:
        request = model.model_validate(payload)
    except ValidationError as e:
        raise InvalidInputError(INVALID_TEXT_MESSAGE) from e
    require_text(request.text)
    return request


def analyze_clonability(payload: Mapping[str, Any]) -> dict[str, Any]:
    request = _validate(AnalysisRequest, payload)
    with stage("clonability"):
        return _clonability(request.text).as_response()


def analyze_integrity(payload: Mapping[str, Any]) -> dict[str, Any]:
    request = _validate(AnalysisRequest, payload)
    with stage("integrity"):
        return _integrity(request.text).as_response()


def analyze_golden_thread(
    payload: Mapping[str, Any], settings: Settings | None = None
) -> dict[str, Any]:
    request = _validate(AnalysisRequest, payload)
    with stage("golden_thread"):
        policy = GoldenThreadPolicy.from_settings(settings)
        return _golden_thread(request.text, policy).as_response()


def analyze_audit(payload: Mapping[str, Any]) -> dict[str, Any]:
    request = _validate(AuditRequest, payload)
    with stage("audit"):
        return _audit(request.text, document_id=request.document_id).as_response()


async def run_analysis(
    text: str,
    passes: Iterable[str] | None = None,
    settings: Settings | None = None,
    document_id: Any = None,
) -> dict[str, dict[str, Any]]:
    """Run the selected analysis passes concurrently on one text.

    The passes share no state, so each runs in its own worker thread.

    Returns:
        Mapping of pass name to its JSON-ready response, in the order
        the passes were requested.
    """
    require_text(text)
    selected = list(dict.fromkeys(passes)) if passes is not None else list(ALL_PASSES)
    unknown = [p for p in selected if p not in ALL_PASSES]
    if unknown:
        raise InvalidInputError(f"Unknown analysis pass: {', '.join(unknown)}")

    body: dict[str, Any] = {"text": text}
    runners: dict[str, Callable[[], dict[str, Any]]] = {
        "clonability": lambda: analyze_clonability(body),
        "integrity": lambda: analyze_integrity(body),
        "golden_thread": lambda: analyze_golden_thread(body, settings),
        "audit": lambda: analyze_audit({**body, "documentId": document_id}),
    }

    logger.info("Running analysis passes: %s", ", ".join(selected))
    responses = await asyncio.gather(
        *(asyncio.to_thread(runners[name]) for name in selected)
    )
    return dict(zip(selected, responses))
