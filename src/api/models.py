# src/api/models.py — v2
"""Public API models: ImportReport."""

from __future__ import annotations

from typing import Literal

from pydantic import BaseModel, Field

from annobatch.jobs.models import JobResult, RunSummary


class ImportReport(BaseModel):
    """Caller-facing result of a complete run.

    ``summary`` is only computed for parallel runs; an inline run reports a
    single completion message.
    """

    run_id: str
    mode: Literal["inline", "parallel"]
    messages: list[str] = Field(default_factory=list)
    results: list[JobResult] = Field(default_factory=list)
    summary: RunSummary | None = None

    @property
    def failed(self) -> list[JobResult]:
        return [r for r in self.results if r.failed]
