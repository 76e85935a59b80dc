# src/jobs/scheduler.py — v1
"""Worker scheduler — run batches with bounded concurrency.

At most ``max_jobs`` jobs run at once. Each job runs in a worker thread
because the importer does blocking file and database I/O; an asyncio
semaphore hands a freed slot to the next waiting batch immediately.
``run`` returns only when every batch has a JobResult, whatever failed.
"""

from __future__ import annotations

import asyncio
import contextvars
import logging
import threading
import time
from collections.abc import Callable, Sequence
from concurrent.futures import ThreadPoolExecutor

from annobatch.batch.models import Batch
from annobatch.jobs.models import JobResult

logger = logging.getLogger(__name__)

JobCallable = Callable[[Batch], JobResult]


class WorkerScheduler:
    """Dispatch one job per batch, never more than ``max_jobs`` at a time."""

    def __init__(self, job: JobCallable, max_jobs: int) -> None:
        if max_jobs < 1:
            raise ValueError("max_jobs must be >= 1")
        self._job = job
        self._max_jobs = max_jobs
        self._running = 0
        self._lock = threading.Lock()
        self.peak_concurrency = 0

    async def run(self, batches: Sequence[Batch]) -> list[JobResult]:
        """Run every batch and wait for all of them.

        Returns:
            JobResults in batch order. Completion order is not guaranteed.
        """
        if not batches:
            return []

        workers = 1 if len(batches) == 1 else min(self._max_jobs, len(batches))
        semaphore = asyncio.Semaphore(workers)
        loop = asyncio.get_running_loop()

        logger.info("Dispatching %d jobs with up to %d workers", len(batches), workers)
        with ThreadPoolExecutor(max_workers=workers, thread_name_prefix="annobatch-job") as pool:

            async def _dispatch(batch: Batch) -> JobResult:
                async with semaphore:
                    logger.info("Starting job %s", batch.directory_path)
                    ctx = contextvars.copy_context()
                    return await loop.run_in_executor(pool, ctx.run, self._run_job, batch)

            outcomes = await asyncio.gather(
                *(_dispatch(b) for b in batches), return_exceptions=True,
            )

        results: list[JobResult] = []
        for batch, outcome in zip(batches, outcomes):
            if isinstance(outcome, BaseException):
                logger.error(
                    "Job %s crashed outside the importer: %s", batch.directory_path, outcome,
                )
                results.append(JobResult(
                    batch_directory=batch.directory_path,
                    output_path=batch.output_path,
                    error=str(outcome) or type(outcome).__name__,
                ))
            else:
                results.append(outcome)
        return results

    def run_sync(self, batches: Sequence[Batch]) -> list[JobResult]:
        """Blocking wrapper around ``run`` for callers without an event loop."""
        return asyncio.run(self.run(batches))

    def _run_job(self, batch: Batch) -> JobResult:
        with self._lock:
            self._running += 1
            self.peak_concurrency = max(self.peak_concurrency, self._running)
        t0 = time.perf_counter()
        try:
            result = self._job(batch)
        finally:
            with self._lock:
                self._running -= 1
        status = "failed" if result.failed else "completed"
        logger.info(
            "Job %s %s in %.2fs", batch.directory_path, status, time.perf_counter() - t0,
        )
        return result
