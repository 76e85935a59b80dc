# src/batch/partitioner.py — v1
"""Batch partitioner — split a FileSet into at most ``max_jobs`` batches.

Small inputs (count <= inline threshold) are imported in place as a single
inline batch. Larger inputs are chunked in discovery order into chunks of
``ceil(count / max_jobs)`` files; each chunk gets a fresh subdirectory of the
source directory and its files are copied (default) or moved into it.

Relocation is sequential and happens once, before any job starts. A failure
aborts the whole run; chunks relocated before the failure are left as they
are.
"""

from __future__ import annotations

import logging
import math
import shutil
import uuid
from datetime import datetime, timezone
from pathlib import Path
from typing import Literal

from annobatch.batch.models import Batch
from annobatch.core.errors import DirectoryCreateFailed, FileRelocationFailed, InvalidConfiguration

logger = logging.getLogger(__name__)

DEFAULT_INLINE_THRESHOLD = 10
DEFAULT_BATCH_PREFIX = "ipr_batch_"


def generate_run_id(timestamp: datetime | None = None) -> str:
    """Generate a run_id: yyyymmdd_hhmmss_{uuid4_short}.

    Batch directory names embed it, so a new run never collides with batch
    directories left behind by an earlier one.
    """
    ts = timestamp or datetime.now(timezone.utc)
    return f"{ts.strftime('%Y%m%d_%H%M%S')}_{uuid.uuid4().hex[:6]}"


def per_batch_size(count: int, max_jobs: int) -> int:
    """Files per batch: ceil(count / max_jobs)."""
    if max_jobs < 1:
        raise InvalidConfiguration("max_jobs must be a positive integer")
    return max(1, math.ceil(count / max_jobs))


def chunk_files(files: list[Path], size: int) -> list[list[Path]]:
    """Split ``files`` into consecutive chunks of at most ``size`` items."""
    return [files[i:i + size] for i in range(0, len(files), size)]


class BatchPartitioner:
    """Turn a FileSet into batches and materialize their directories."""

    def __init__(
        self,
        source_path: Path,
        max_jobs: int,
        run_id: str | None = None,
        inline_threshold: int = DEFAULT_INLINE_THRESHOLD,
        batch_prefix: str = DEFAULT_BATCH_PREFIX,
        relocation_mode: Literal["copy", "move"] = "copy",
    ) -> None:
        self._source_path = source_path
        self._max_jobs = max_jobs
        self._run_id = run_id or generate_run_id()
        self._inline_threshold = inline_threshold
        self._batch_prefix = batch_prefix
        self._relocation_mode = relocation_mode

    @property
    def run_id(self) -> str:
        return self._run_id

    def is_inline(self, count: int) -> bool:
        return count <= self._inline_threshold

    def batch_directory(self, index: int) -> Path:
        return self._source_path / f"{self._batch_prefix}{self._run_id}_{index}"

    def plan(self, files: list[Path]) -> list[list[Path]]:
        """Compute chunk membership without touching the filesystem."""
        if self.is_inline(len(files)):
            return [list(files)]
        return chunk_files(list(files), per_batch_size(len(files), self._max_jobs))

    def partition(self, files: list[Path]) -> list[Batch]:
        """Produce the batches for ``files``.

        Raises:
            DirectoryCreateFailed: A batch directory could not be created.
            FileRelocationFailed: A file could not be copied or moved.
        """
        if self.is_inline(len(files)):
            logger.info(
                "%d files (<= %d): importing in place from %s",
                len(files), self._inline_threshold, self._source_path,
            )
            return [
                Batch(index=0, directory_path=self._source_path, members=tuple(files), inline=True)
            ]

        chunks = self.plan(files)
        logger.info(
            "Splitting %d files into %d batches of at most %d (%s mode)",
            len(files), len(chunks), len(chunks[0]), self._relocation_mode,
        )

        batches: list[Batch] = []
        for index, chunk in enumerate(chunks):
            directory = self.batch_directory(index)
            try:
                directory.mkdir()
            except OSError as e:
                raise DirectoryCreateFailed(
                    f"Unable to create directory at {directory}. "
                    f"Please verify that you have write permissions. ({e})"
                ) from e

            members = tuple(self._relocate(path, directory) for path in chunk)
            batches.append(Batch(index=index, directory_path=directory, members=members))
            logger.debug("Batch %d: %d files in %s", index, len(members), directory)

        return batches

    def _relocate(self, source: Path, directory: Path) -> Path:
        target = directory / source.name
        try:
            if self._relocation_mode == "move":
                shutil.move(str(source), str(target))
            else:
                shutil.copy2(source, target)
        except OSError as e:
            raise FileRelocationFailed(
                f"Unable to {self._relocation_mode} file to new directory. "
                f"From: {source}. To: {target} ({e})"
            ) from e
        return target
