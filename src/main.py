# src/main.py — v2
"""CLI entry point — import, clear commands.

Usage:
    annobatch import <path> --analysis-id N [options]
    annobatch clear --analysis-id N

Exit codes: 0 when the run completes (individual batch failures are only
reported), 1 on configuration, discovery or partitioning errors, 130 on
interrupt.
"""

from __future__ import annotations

import argparse
import asyncio
import logging
import sys
from pathlib import Path
from typing import TYPE_CHECKING

from annobatch.version import __version__

if TYPE_CHECKING:
    from annobatch.config.settings import Settings

logger = logging.getLogger(__name__)


def main(argv: list[str] | None = None) -> int:
    """Main CLI entry point."""
    parser = _build_parser()
    args = parser.parse_args(argv)

    if not hasattr(args, "func"):
        parser.print_help()
        return 1

    from pydantic import ValidationError

    from annobatch.config.settings import ConfigurationError, load_settings
    from annobatch.core.errors import ImportRunError

    try:
        settings = load_settings(**_settings_overrides(args))
    except (ConfigurationError, ValidationError) as exc:
        print(f"Configuration error: {exc}", file=sys.stderr)
        return 1

    _setup_logging(settings, args.verbose)

    try:
        return asyncio.run(args.func(args, settings))
    except KeyboardInterrupt:
        logger.info("Interrupted by user")
        return 130
    except ImportRunError as exc:
        logger.error("%s", exc, exc_info=args.verbose)
        return 1
    except Exception as exc:
        logger.error("Fatal error: %s", exc, exc_info=args.verbose)
        return 1


def _build_parser() -> argparse.ArgumentParser:
    """Build CLI argument parser."""
    parser = argparse.ArgumentParser(
        prog="annobatch",
        description=f"annobatch v{__version__} — parallel annotation file importer",
    )
    parser.add_argument(
        "--version", action="version", version=f"%(prog)s {__version__}",
    )
    parser.add_argument(
        "-v", "--verbose", action="store_true",
        help="Enable debug logging",
    )

    subparsers = parser.add_subparsers(dest="command")

    # --- import ---
    p_import = subparsers.add_parser(
        "import", help="Import a directory of annotation files in parallel",
    )
    p_import.add_argument("path", type=Path, help="Directory containing the annotation files")
    p_import.add_argument(
        "--analysis-id", dest="analysis_id", type=int, default=None,
        help="Analysis id to associate the annotations with",
    )
    p_import.add_argument(
        "--max-jobs", dest="max_jobs", type=int, default=None,
        help="Maximum number of concurrent jobs (default: DEFAULT_MAX_JOBS, 5)",
    )
    p_import.add_argument(
        "--regexp", default=None,
        help="Regular expression matching the record name (default: match anything)",
    )
    p_import.add_argument(
        "--type", dest="record_type", default=None,
        help="Record type of the annotated features (default: mRNA)",
    )
    p_import.add_argument(
        "--importer", default=None,
        help="Importer name or dotted class path (default: IMPORTER setting)",
    )
    p_import.add_argument(
        "--suffix", default=None,
        help="File suffix to import (default: FILE_SUFFIX setting, .xml)",
    )
    p_import.add_argument(
        "--move", action="store_true",
        help="Move files into batch directories instead of copying them",
    )
    p_import.add_argument(
        "--cleanup", action="store_true",
        help="Remove batch directories of successful jobs (copy mode only)",
    )
    p_import.add_argument(
        "--store", type=Path, default=None,
        help="Path of the SQLite annotation store (default: STORE_PATH setting)",
    )
    p_import.set_defaults(func=_cmd_import)

    # --- clear ---
    p_clear = subparsers.add_parser(
        "clear", help="Delete all stored records of an analysis",
    )
    p_clear.add_argument(
        "--analysis-id", dest="analysis_id", type=int, required=True,
        help="Analysis id whose records are removed",
    )
    p_clear.add_argument(
        "--store", type=Path, default=None,
        help="Path of the SQLite annotation store (default: STORE_PATH setting)",
    )
    p_clear.set_defaults(func=_cmd_clear)

    return parser


def _settings_overrides(args: argparse.Namespace) -> dict[str, object]:
    """Map CLI flags onto Settings fields; unset flags keep .env values."""
    overrides: dict[str, object] = {}
    if getattr(args, "store", None) is not None:
        overrides["store_path"] = args.store
    if getattr(args, "importer", None):
        overrides["importer"] = args.importer
    if getattr(args, "suffix", None):
        overrides["file_suffix"] = args.suffix
    if getattr(args, "move", False):
        overrides["relocation_mode"] = "move"
    if getattr(args, "cleanup", False):
        overrides["cleanup_batches"] = True
    if getattr(args, "verbose", False):
        overrides["log_level"] = "DEBUG"
    return overrides


async def _cmd_import(args: argparse.Namespace, settings: Settings) -> int:
    """Execute a parallel import run."""
    from annobatch.api.facade import run_import
    from annobatch.core.models import DEFAULT_NAME_PATTERN, DEFAULT_RECORD_TYPE, ImportRequest
    from annobatch.jobs.aggregator import format_summary

    request = ImportRequest(
        analysis_id=args.analysis_id,
        source_path=args.path,
        max_jobs=args.max_jobs if args.max_jobs is not None else settings.default_max_jobs,
        name_filter_pattern=args.regexp if args.regexp is not None else DEFAULT_NAME_PATTERN,
        record_type=args.record_type or DEFAULT_RECORD_TYPE,
    )

    report = await run_import(request, settings=settings)

    for message in report.messages:
        print(message)
    if report.summary is not None:
        print("\nImport complete:")
        for line in format_summary(report.summary):
            print(f"  {line}")
    return 0


async def _cmd_clear(args: argparse.Namespace, settings: Settings) -> int:
    """Delete stored records of one analysis."""
    from annobatch.core.errors import InvalidConfiguration
    from annobatch.store.store_factory import create_store

    if args.analysis_id < 1:
        raise InvalidConfiguration("Please provide an analysis id using --analysis-id=INTEGER.")

    store = create_store(settings)
    deleted = store.clear_analysis(args.analysis_id)
    print(f"Removed {deleted} records for analysis {args.analysis_id}")
    return 0


def _setup_logging(settings: Settings, verbose: bool) -> None:
    """Configure logging for CLI usage."""
    from annobatch.logging.logger import setup_logging

    setup_logging(
        level="DEBUG" if verbose else settings.log_level,
        log_format=settings.log_format,
        log_file=settings.log_file,
        rotation=settings.log_rotation,
        retention=settings.log_retention,
    )


if __name__ == "__main__":
    sys.exit(main())
