# src/batch/models.py — v3
"""Batch models: Batch."""

from __future__ import annotations

from pathlib import Path

from pydantic import BaseModel, ConfigDict


class Batch(BaseModel):
    """A group of input files handed to one job.

    The inline batch points at the source directory itself and owns the
    original files; nothing was relocated for it.
    """

    model_config = ConfigDict(frozen=True)

    index: int
    directory_path: Path
    members: tuple[Path, ...] = ()
    inline: bool = False

    @property
    def output_path(self) -> Path:
        """Location of the captured output artifact: ``<directory>.out``."""
        return Path(f"{self.directory_path}.out")
