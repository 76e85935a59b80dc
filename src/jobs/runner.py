# src/jobs/runner.py — v2
"""Job runner — run the importer over one batch and persist its output.

Workflow per batch:
    1. Configure a fresh importer with the run's argument set
    2. Open a backing-store transaction and import the batch path
    3. Capture every diagnostic line into a per-job buffer
    4. Write the buffer to ``<batch directory>.out``
    5. Return a JobResult; importer errors are recorded, never raised
"""

from __future__ import annotations

import logging
import time
from pathlib import Path

from annobatch.batch.models import Batch
from annobatch.core.errors import ImporterFailure
from annobatch.core.models import ImporterArguments, ImportOutcome
from annobatch.importers.importer_factory import ImporterFactory
from annobatch.jobs.models import JobResult
from annobatch.logging.context import OutputBuffer, capture_output
from annobatch.logging.logger import ROOT_LOGGER, install_capture_handler
from annobatch.store.base_store import BaseAnnotationStore

logger = logging.getLogger(__name__)

ROLLBACK_MESSAGE = "FAILED: Rolling back database changes..."
DONE_MESSAGE = "Done"


class JobRunner:
    """Execute the importer for one batch inside its own transaction."""

    def __init__(
        self,
        arguments: ImporterArguments,
        importer_factory: ImporterFactory,
        store: BaseAnnotationStore,
    ) -> None:
        self._arguments = arguments
        self._importer_factory = importer_factory
        self._store = store
        install_capture_handler()
        # Without setup_logging the package logger would inherit root's WARNING
        package_logger = logging.getLogger(ROOT_LOGGER)
        if package_logger.level == logging.NOTSET:
            package_logger.setLevel(logging.INFO)

    def run(self, batch: Batch) -> JobResult:
        """Run one job. Blocking; meant to execute in a worker thread."""
        directory = batch.directory_path
        error: ImporterFailure | None = None
        outcome: ImportOutcome | None = None

        t0 = time.perf_counter()
        with capture_output(batch=directory.name or str(directory)) as buffer:
            try:
                outcome = self._invoke(directory)
            except Exception as exc:
                error = _as_failure(directory, exc)
                buffer.writeline("")
                buffer.writeline(ROLLBACK_MESSAGE)
                buffer.writeline(f"Error: {error.message}")
            buffer.writeline("")
            buffer.writeline(DONE_MESSAGE)
        elapsed = time.perf_counter() - t0

        output_log = buffer.getvalue()
        write_error = self._persist(batch.output_path, buffer)

        if error is not None:
            logger.warning("Job %s failed: %s", directory, error.message)
        messages = [m for m in (error.message if error else None, write_error) if m]

        return JobResult(
            batch_directory=directory,
            output_path=batch.output_path,
            output_log=output_log,
            elapsed_seconds=elapsed,
            error="; ".join(messages) if messages else None,
            outcome=outcome,
        )

    def _invoke(self, directory: Path) -> ImportOutcome:
        importer = self._importer_factory(self._arguments)
        importer.prepare(directory)
        with self._store.transaction() as session:
            return importer.run(directory, session)

    @staticmethod
    def _persist(path: Path, buffer: OutputBuffer) -> str | None:
        """Write the captured output verbatim, replacing any previous artifact."""
        try:
            path.write_text(buffer.getvalue(), encoding="utf-8")
        except OSError as e:
            logger.error("Unable to write job output to %s: %s", path, e)
            return f"unable to write output to {path}: {e}"
        return None


def _as_failure(directory: Path, exc: Exception) -> ImporterFailure:
    if isinstance(exc, ImporterFailure):
        return exc
    return ImporterFailure(str(directory), str(exc) or type(exc).__name__)
