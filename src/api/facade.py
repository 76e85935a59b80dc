# src/api/facade.py — v2
"""Public API facade — single entry point for a parallel import run.

Usage:
    from annobatch.api.facade import run_import
    report = await run_import(ImportRequest(analysis_id=1, source_path="scans/"))
"""

from __future__ import annotations

import asyncio
import logging
import shutil
from pathlib import Path
from typing import TYPE_CHECKING

from annobatch.api.models import ImportReport
from annobatch.batch.partitioner import BatchPartitioner, generate_run_id
from annobatch.batch.scanner import InputDiscoverer
from annobatch.config.settings import Settings
from annobatch.core.models import ImporterArguments, ImportRequest
from annobatch.jobs.aggregator import summarize
from annobatch.jobs.runner import JobRunner
from annobatch.jobs.scheduler import WorkerScheduler
from annobatch.logging.context import set_run_context

if TYPE_CHECKING:
    from annobatch.importers.importer_factory import ImporterFactory
    from annobatch.jobs.models import JobResult
    from annobatch.store.base_store import BaseAnnotationStore

logger = logging.getLogger(__name__)


class ParallelImporter:
    """Orchestrate one import run.

    Order of operations:
      1. Validate the source path and discover the FileSet
      2. Clear records previously stored for the analysis
      3. Partition into batches (relocating files when splitting)
      4. Run one job per batch with bounded concurrency
      5. Aggregate (parallel runs only) and optionally clean up
    """

    def __init__(
        self,
        request: ImportRequest,
        settings: Settings | None = None,
        store: BaseAnnotationStore | None = None,
        importer_factory: ImporterFactory | None = None,
    ) -> None:
        self._request = request
        self._settings = settings or Settings()

        if store is None:
            from annobatch.store.store_factory import create_store
            store = create_store(self._settings)
        if importer_factory is None:
            from annobatch.importers.importer_factory import create_importer_factory
            importer_factory = create_importer_factory(self._settings)

        self._store = store
        self._importer_factory = importer_factory
        self.run_id = generate_run_id()

    async def run(self) -> ImportReport:
        """Execute the run. Fatal errors propagate; job failures are reported."""
        request = self._request
        settings = self._settings
        set_run_context(request.analysis_id, self.run_id)

        files = InputDiscoverer(request, suffix=settings.file_suffix).discover()

        deleted = self._store.clear_analysis(request.analysis_id)
        logger.debug("Removed %d prior records for analysis %d", deleted, request.analysis_id)

        partitioner = BatchPartitioner(
            source_path=request.source_path,
            max_jobs=request.max_jobs,
            run_id=self.run_id,
            inline_threshold=settings.inline_threshold,
            batch_prefix=settings.batch_prefix,
            relocation_mode=settings.relocation_mode,
        )
        batches = partitioner.partition(files)

        runner = JobRunner(
            arguments=ImporterArguments.from_request(request, file_suffix=settings.file_suffix),
            importer_factory=self._importer_factory,
            store=self._store,
        )
        scheduler = WorkerScheduler(runner.run, max_jobs=request.max_jobs)
        results = await scheduler.run(batches)

        if batches[0].inline:
            result = results[0]
            if result.failed:
                message = f"Single job failed: {result.error}. Output printed to {result.output_path}"
            else:
                message = f"Single job completed. Output printed to {result.output_path}"
            return ImportReport(
                run_id=self.run_id, mode="inline", messages=[message], results=results,
            )

        summary = summarize(results)
        if settings.cleanup_batches and settings.relocation_mode == "copy":
            _remove_batch_directories(results)

        return ImportReport(
            run_id=self.run_id,
            mode="parallel",
            messages=[_job_message(r) for r in results],
            results=results,
            summary=summary,
        )

    def run_sync(self) -> ImportReport:
        """Blocking wrapper around ``run``."""
        return asyncio.run(self.run())


async def run_import(
    request: ImportRequest,
    settings: Settings | None = None,
    store: BaseAnnotationStore | None = None,
    importer_factory: ImporterFactory | None = None,
) -> ImportReport:
    """Import ``request.source_path`` in parallel and return the report."""
    importer = ParallelImporter(
        request, settings=settings, store=store, importer_factory=importer_factory,
    )
    return await importer.run()


def _job_message(result: JobResult) -> str:
    if result.failed:
        return f"{result.batch_directory} failed: {result.error}. Output printed to {result.output_path}"
    return f"{result.batch_directory} completed. Output printed to {result.output_path}"


def _remove_batch_directories(results: list[JobResult]) -> None:
    """Delete the copied batch directories of successful jobs."""
    for result in results:
        if result.failed:
            continue
        directory = Path(result.batch_directory)
        try:
            shutil.rmtree(directory)
        except OSError as e:
            logger.warning("Could not remove batch directory %s: %s", directory, e)
        else:
            logger.debug("Removed batch directory %s", directory)
