# src/extraction/doc_converter.py — v2
"""Optional external converters for legacy binary Word (.doc) files.

A converter is an external CLI tool (antiword, catdoc) wrapped behind
an explicit availability check, so callers can pick the raw-bytes
fallback without relying on a failed subprocess call.
"""

from __future__ import annotations

import asyncio
import logging
import shutil
from abc import ABC, abstractmethod
from pathlib import Path
from typing import TYPE_CHECKING

from clincerta.core.errors import ExtractionError

if TYPE_CHECKING:
    from clincerta.config.settings import Settings

logger = logging.getLogger(__name__)

# Tool name → argv prefix; the input path is appended.
_KNOWN_TOOLS: dict[str, list[str]] = {
    "antiword": ["antiword"],
    "catdoc": ["catdoc", "-w"],
}


class DocConverter(ABC):
    """Converts a .doc file on disk to plain text."""

    @property
    @abstractmethod
    def name(self) -> str:
        """Short converter name for logs."""

    @abstractmethod
    def is_available(self) -> bool:
        """Whether the converter can run in this environment."""

    @abstractmethod
    async def convert(self, path: Path) -> str:
        """Convert the file and return its text.

        Raises:
            ExtractionError: If the conversion fails or times out.
        """


class CliDocConverter(DocConverter):
    """Runs an external conversion tool as a subprocess."""

    def __init__(self, tool: str = "antiword", timeout: float = 30.0) -> None:
        if tool not in _KNOWN_TOOLS:
            raise ValueError(
                f"Unknown DOC converter {tool!r}. Supported: {', '.join(sorted(_KNOWN_TOOLS))}"
            )
        self._tool = tool
        self._argv = _KNOWN_TOOLS[tool]
        self._timeout = timeout

    @property
    def name(self) -> str:
        return self._tool

    def is_available(self) -> bool:
        return shutil.which(self._argv[0]) is not None

    async def convert(self, path: Path) -> str:
        proc = await asyncio.create_subprocess_exec(
            *self._argv,
            str(path),
            stdout=asyncio.subprocess.PIPE,
            stderr=asyncio.subprocess.PIPE,
        )
        try:
            stdout, stderr = await asyncio.wait_for(
                proc.communicate(), timeout=self._timeout
            )
        except asyncio.TimeoutError as e:
            raise ExtractionError(
                f"{self._tool} timed out after {self._timeout:.0f}s"
            ) from e
        finally:
            # The caller deletes the input file as soon as this unwinds.
            if proc.returncode is None:
                proc.kill()
                await proc.wait()

        if proc.returncode != 0:
            message = stderr.decode("utf-8", errors="replace").strip()
            raise ExtractionError(
                f"{self._tool} exited with code {proc.returncode}: {message}"
            )
        return stdout.decode("utf-8", errors="replace")


def create_doc_converter(settings: Settings | None = None) -> DocConverter | None:
    """Build the configured converter, or None when conversion is disabled."""
    tool = "antiword" if settings is None else settings.doc_converter
    if tool == "none":
        return None
    timeout = 30.0 if settings is None else settings.doc_converter_timeout_seconds
    return CliDocConverter(tool=tool, timeout=timeout)
