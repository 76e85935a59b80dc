# src/logging/context.py — v1
"""Contextual logging support — analysis_id, run_id and batch on log records,
plus the per-job output sink.

Each job runs in its own context (asyncio task or worker thread), so the sink
set by ``capture_output()`` is only visible to code running for that job.
Concurrent jobs never write into each other's buffer.
"""

from __future__ import annotations

import contextvars
import io
import threading
from collections.abc import Iterator
from contextlib import contextmanager
from dataclasses import dataclass
from typing import Any

_analysis_id: contextvars.ContextVar[int | None] = contextvars.ContextVar(
    "analysis_id", default=None
)
_run_id: contextvars.ContextVar[str | None] = contextvars.ContextVar(
    "run_id", default=None
)
_batch: contextvars.ContextVar[str | None] = contextvars.ContextVar(
    "batch", default=None
)
_output_sink: contextvars.ContextVar[OutputBuffer | None] = contextvars.ContextVar(
    "output_sink", default=None
)


class OutputBuffer:
    """In-memory text buffer owned by a single job."""

    def __init__(self) -> None:
        self._buffer = io.StringIO()
        self._lock = threading.Lock()

    def write(self, text: str) -> None:
        with self._lock:
            self._buffer.write(text)

    def writeline(self, line: str) -> None:
        self.write(line if line.endswith("\n") else line + "\n")

    def getvalue(self) -> str:
        with self._lock:
            return self._buffer.getvalue()


@dataclass
class LogContext:
    """Immutable snapshot of current logging context."""

    analysis_id: int | None = None
    run_id: str | None = None
    batch: str | None = None

    def as_dict(self) -> dict[str, Any]:
        """Return non-None fields as dict for JSON log injection."""
        return {k: v for k, v in self.__dict__.items() if v is not None}


def get_context() -> LogContext:
    """Snapshot current context variables."""
    return LogContext(
        analysis_id=_analysis_id.get(),
        run_id=_run_id.get(),
        batch=_batch.get(),
    )


def set_run_context(analysis_id: int, run_id: str) -> None:
    """Set run-level context (called once per import run)."""
    _analysis_id.set(analysis_id)
    _run_id.set(run_id)


def set_batch_context(batch: str | None) -> None:
    """Set batch-level context (called per job)."""
    _batch.set(batch)


def clear_context() -> None:
    """Reset all context variables."""
    _analysis_id.set(None)
    _run_id.set(None)
    _batch.set(None)
    _output_sink.set(None)


def current_sink() -> OutputBuffer | None:
    """Return the output buffer of the job running in this context, if any."""
    return _output_sink.get()


@contextmanager
def capture_output(batch: str | None = None) -> Iterator[OutputBuffer]:
    """Route job output produced in this context into a fresh buffer.

    Nested file-level processing inherits the sink as long as it runs in the
    same context (same thread, or a task/thread started with a copied context).
    """
    buffer = OutputBuffer()
    sink_token = _output_sink.set(buffer)
    batch_token = _batch.set(batch)
    try:
        yield buffer
    finally:
        _batch.reset(batch_token)
        _output_sink.reset(sink_token)


def emit_output(text: str) -> bool:
    """Write ``text`` to the active job buffer.

    Returns:
        False when no capture is active in this context.
    """
    sink = _output_sink.get()
    if sink is None:
        return False
    sink.writeline(text)
    return True
