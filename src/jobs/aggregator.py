# src/jobs/aggregator.py — v1
"""Result aggregator — summary statistics over all jobs of a run.

Failed jobs count toward the average like any other job. Nothing is retried.
"""

from __future__ import annotations

from collections.abc import Sequence

from annobatch.jobs.models import JobResult, RunSummary


def summarize(results: Sequence[JobResult]) -> RunSummary:
    """Build the RunSummary for a finished run.

    Raises:
        ValueError: If ``results`` is empty.
    """
    if not results:
        raise ValueError("Cannot summarize a run without job results")

    total = sum(r.elapsed_seconds for r in results)
    return RunSummary(
        total_jobs=len(results),
        average_elapsed_seconds=total / len(results),
        total_elapsed_seconds=total,
        failed_jobs=[r for r in results if r.failed],
    )


def format_summary(summary: RunSummary) -> list[str]:
    """Render the summary as report lines."""
    lines = [
        f"Total jobs: {summary.total_jobs}",
        f"Average job time: {summary.average_elapsed_seconds:.2f}s",
    ]
    if summary.failed_jobs:
        lines.append(f"Failed jobs: {len(summary.failed_jobs)}")
        for job in summary.failed_jobs:
            lines.append(f"  {job.batch_directory}: {job.error} (see {job.output_path})")
    return lines
