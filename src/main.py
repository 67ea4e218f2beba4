# src/main.py — v3
"""CLI entry point — process, analyze, cache commands.

Usage:
    clincerta process <file> [--no-cache] [--json]
    clincerta analyze <file> [--pass NAME ...] [--document-id ID] [--no-cache]
    clincerta cache {stats,clear,cleanup}
"""

from __future__ import annotations

import argparse
import asyncio
import json
import logging
import sys
from pathlib import Path
from typing import TYPE_CHECKING

from clincerta.version import __version__

if TYPE_CHECKING:
    from clincerta.core.models import ExtractionResult

logger = logging.getLogger(__name__)


def main(argv: list[str] | None = None) -> int:
    """Main CLI entry point."""
    parser = _build_parser()
    args = parser.parse_args(argv)

    _setup_logging(args.verbose)

    if not hasattr(args, "func"):
        parser.print_help()
        return 1

    try:
        return asyncio.run(args.func(args))
    except KeyboardInterrupt:
        logger.info("Interrupted by user")
        return 130
    except Exception as exc:
        logger.error("Fatal error: %s", exc, exc_info=args.verbose)
        return 1


def _build_parser() -> argparse.ArgumentParser:
    """Build CLI argument parser."""
    from clincerta.api.models import ALL_PASSES

    parser = argparse.ArgumentParser(
        prog="clincerta",
        description=f"Clincerta v{__version__} — clinical document extraction and audit",
    )
    parser.add_argument(
        "--version", action="version", version=f"%(prog)s {__version__}",
    )
    parser.add_argument(
        "-v", "--verbose", action="store_true",
        help="Enable debug logging",
    )

    subparsers = parser.add_subparsers(dest="command")

    # --- process ---
    p_process = subparsers.add_parser(
        "process", help="Extract the text of a document",
    )
    p_process.add_argument("file", type=Path, help="Path to document")
    p_process.add_argument(
        "--no-cache", action="store_true",
        help="Bypass the extracted-text cache",
    )
    p_process.add_argument(
        "--json", action="store_true",
        help="Print the extraction result as JSON instead of plain text",
    )
    p_process.set_defaults(func=_cmd_process)

    # --- analyze ---
    p_analyze = subparsers.add_parser(
        "analyze", help="Extract a document and run the analysis passes",
    )
    p_analyze.add_argument("file", type=Path, help="Path to document")
    p_analyze.add_argument(
        "--pass", dest="passes", action="append", choices=ALL_PASSES, default=None,
        help="Analysis pass to run (repeatable, default: all)",
    )
    p_analyze.add_argument(
        "--document-id", default=None,
        help="Identifier passed through to the audit report",
    )
    p_analyze.add_argument(
        "--no-cache", action="store_true",
        help="Bypass the extracted-text cache",
    )
    p_analyze.set_defaults(func=_cmd_analyze)

    # --- cache ---
    p_cache = subparsers.add_parser(
        "cache", help="Inspect or maintain the extracted-text cache",
    )
    p_cache.add_argument("action", choices=("stats", "clear", "cleanup"))
    p_cache.set_defaults(func=_cmd_cache)

    return parser


async def _extract(file_path: Path, no_cache: bool) -> ExtractionResult:
    """Run process_document on a file, with the cache unless disabled."""
    from clincerta.api.facade import process_document
    from clincerta.cache.document_cache import DocumentCache
    from clincerta.config.settings import Settings
    from clincerta.core.models import SourceDocument

    settings = Settings()
    document = SourceDocument.from_path(file_path)

    def on_progress(percent: int, label: str) -> None:
        logger.debug("[%3d%%] %s", percent, label)

    if no_cache or not settings.cache_enabled:
        return await process_document(document, settings=settings, on_progress=on_progress)

    cache = DocumentCache.from_settings(settings)
    return await process_document(
        document, settings=settings, cache=cache, on_progress=on_progress,
    )


async def _cmd_process(args: argparse.Namespace) -> int:
    """Extract and print the text of a single document."""
    file_path: Path = args.file
    if not file_path.is_file():
        logger.error("File not found: %s", file_path)
        return 1

    result = await _extract(file_path, args.no_cache)
    if args.json:
        from clincerta.analysis.clinical_data import extract_clinical_data

        payload = result.as_response()
        payload["fromCache"] = result.from_cache
        payload["clinicalData"] = extract_clinical_data(result.text).model_dump(by_alias=True)
        print(json.dumps(payload, indent=2, ensure_ascii=False))
    else:
        if result.error:
            logger.warning("%s", result.error)
        print(result.text)
    return 0


async def _cmd_analyze(args: argparse.Namespace) -> int:
    """Extract a document and print the analysis reports as JSON."""
    from clincerta.api.facade import run_analysis
    from clincerta.config.settings import Settings

    file_path: Path = args.file
    if not file_path.is_file():
        logger.error("File not found: %s", file_path)
        return 1

    result = await _extract(file_path, args.no_cache)
    if not result.text.strip():
        logger.error("No text extracted from %s", file_path.name)
        return 1

    reports = await run_analysis(
        result.text,
        passes=args.passes,
        settings=Settings(),
        document_id=args.document_id,
    )
    print(json.dumps(reports, indent=2, ensure_ascii=False))
    return 0


async def _cmd_cache(args: argparse.Namespace) -> int:
    """Run a cache maintenance action."""
    from clincerta.cache.document_cache import DocumentCache
    from clincerta.config.settings import Settings

    cache = DocumentCache.from_settings(Settings())

    if args.action == "clear":
        await cache.clear_cache()
        print("Cache cleared")
    elif args.action == "cleanup":
        removed = await cache.cleanup()
        print(f"Removed {removed} expired document(s)")
    else:
        stats = await cache.get_stats()
        print("\nCache statistics:")
        print(f"  Documents:  {stats.total_documents}")
        print(f"  Total size: {stats.total_size} chars")
        print(f"  Oldest:     {stats.oldest_document or '-'}")
        print(f"  Newest:     {stats.newest_document or '-'}")
    return 0


def _setup_logging(verbose: bool) -> None:
    """Configure logging for CLI usage from the LOG_* settings.

    Console output goes to stderr so stdout stays machine-readable;
    --verbose overrides the configured level.
    """
    from clincerta.config.settings import Settings
    from clincerta.logging.logger import setup_logging

    settings = Settings()
    setup_logging(
        level="DEBUG" if verbose else settings.log_level,
        log_format=settings.log_format,
        log_file=settings.log_file,
        rotation=settings.log_rotation,
        retention=settings.log_retention,
        stream=sys.stderr,
    )
    # Quiet noisy libraries
    logging.getLogger("PIL").setLevel(logging.WARNING)


if __name__ == "__main__":
    sys.exit(main())
