# src/logging/handlers.py — v1
"""Logging handlers: per-job capture, console isolation, file rotation."""

from __future__ import annotations

import logging
import re
from logging.handlers import RotatingFileHandler
from pathlib import Path

from annobatch.logging.context import current_sink

CAPTURE_FORMAT = "%(levelname)s %(name)s: %(message)s"


class JobCaptureHandler(logging.Handler):
    """Copy log records into the output buffer of the job that emitted them.

    Records emitted outside of a job capture are ignored.
    """

    def __init__(self, level: int = logging.NOTSET) -> None:
        super().__init__(level)
        self.setFormatter(logging.Formatter(CAPTURE_FORMAT))

    def emit(self, record: logging.LogRecord) -> None:
        sink = current_sink()
        if sink is None:
            return
        try:
            sink.writeline(self.format(record))
        except Exception:
            self.handleError(record)


class ConsoleIsolationFilter(logging.Filter):
    """Keep records produced inside a job capture off the shared console."""

    def filter(self, record: logging.LogRecord) -> bool:
        return current_sink() is None


def _parse_size(size_str: str) -> int:
    """Parse size string like '10MB' into bytes.

    Supported suffixes: KB, MB, GB (case-insensitive).
    """
    match = re.match(r"^(\d+)\s*(KB|MB|GB)$", size_str.strip(), re.IGNORECASE)
    if not match:
        raise ValueError(f"Invalid size format: {size_str!r}. Use e.g. '10MB'.")
    multipliers = {"KB": 1024, "MB": 1024**2, "GB": 1024**3}
    return int(match.group(1)) * multipliers[match.group(2).upper()]


def create_rotating_handler(
    log_file: str | Path,
    rotation: str = "10MB",
    retention: int = 30,
) -> RotatingFileHandler:
    """Create a rotating file handler for the run log.

    Args:
        log_file: Path to log file.
        rotation: Max file size before rotation (e.g. "10MB").
        retention: Number of backup files to keep.
    """
    path = Path(log_file).expanduser()
    path.parent.mkdir(parents=True, exist_ok=True)
    handler = RotatingFileHandler(
        filename=str(path),
        maxBytes=_parse_size(rotation),
        backupCount=retention,
        encoding="utf-8",
    )
    handler.addFilter(ConsoleIsolationFilter())
    return handler
