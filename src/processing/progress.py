# src/processing/progress.py — v1
"""Progress reporting for document processing.

Progress is advisory: a callback receives (percent, label) at coarse
milestones on a 0-100 scale. A failing callback never interrupts
processing.
"""

from __future__ import annotations

import logging
from typing import Callable

logger = logging.getLogger(__name__)

ProgressCallback = Callable[[int, str], None]


def report_progress(callback: ProgressCallback | None, percent: int, label: str) -> None:
    """Invoke the callback, clamping percent to [0, 100]."""
    if callback is None:
        return
    try:
        callback(max(0, min(100, percent)), label)
    except Exception:
        logger.debug("Progress callback raised, ignoring", exc_info=True)
