# src/jobs/models.py — v1
"""Job models: JobResult, RunSummary."""

from __future__ import annotations

from pathlib import Path

from pydantic import BaseModel, ConfigDict, Field

from annobatch.core.models import ImportOutcome


class JobResult(BaseModel):
    """Outcome of one job. Written once by its worker."""

    model_config = ConfigDict(frozen=True)

    batch_directory: Path
    output_path: Path
    output_log: str = ""
    elapsed_seconds: float = 0.0
    error: str | None = None
    outcome: ImportOutcome | None = None

    @property
    def failed(self) -> bool:
        return self.error is not None


class RunSummary(BaseModel):
    """Aggregated statistics over all jobs of a run."""

    total_jobs: int
    average_elapsed_seconds: float
    total_elapsed_seconds: float
    failed_jobs: list[JobResult] = Field(default_factory=list)

    @property
    def succeeded_jobs(self) -> int:
        return self.total_jobs - len(self.failed_jobs)
