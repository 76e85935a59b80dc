# src/importers/base_importer.py — v1
"""Abstract importer capability.

An importer is configured once per job with an explicit argument set, then
asked to process either a single file or a directory of files. When given a
directory it enumerates matching files itself. All diagnostic text goes
through ``log_message`` so the job runner can capture it.
"""

from __future__ import annotations

import logging
from abc import ABC, abstractmethod
from pathlib import Path

from annobatch.core.models import ImporterArguments, ImportOutcome
from annobatch.logging.context import emit_output
from annobatch.store.base_store import StoreSession

logger = logging.getLogger(__name__)


class BaseImporter(ABC):
    """Unified interface for annotation importers."""

    def __init__(self, arguments: ImporterArguments) -> None:
        self.arguments = arguments
        self._files: list[Path] = []

    @classmethod
    def configure(cls, arguments: ImporterArguments) -> BaseImporter:
        """Build an importer for one job."""
        return cls(arguments)

    def prepare(self, target: Path) -> list[Path]:
        """Resolve the files ``run`` will process.

        Raises:
            FileNotFoundError: If ``target`` does not exist.
            NotADirectoryError: If ``target`` is neither a file nor a directory.
        """
        if target.is_file():
            self._files = [target]
        elif target.is_dir():
            suffix = self.arguments.file_suffix.lower()
            self._files = sorted(
                p for p in target.iterdir()
                if p.is_file() and p.name.lower().endswith(suffix)
            )
        elif not target.exists():
            raise FileNotFoundError(f"Unable to open {target}")
        else:
            raise NotADirectoryError(f"Unable to open dir {target}")
        return list(self._files)

    def run(self, target: Path, session: StoreSession) -> ImportOutcome:
        """Process every prepared file under ``target``.

        Exceptions from ``import_file`` propagate; the caller owns the
        transaction and rolls it back.
        """
        if not self._files:
            self.prepare(target)

        total = len(self._files)
        outcome = ImportOutcome()
        for index, path in enumerate(self._files):
            self.log_message(f"Parsing file {index + 1} of {total}: {path.name}")
            outcome.records_written += self.import_file(path, session, index, total)
            outcome.files_processed += 1
        return outcome

    @abstractmethod
    def import_file(
        self, path: Path, session: StoreSession, index: int, total: int,
    ) -> int:
        """Import one file. Returns the number of records written."""

    def log_message(self, message: str) -> None:
        """Send diagnostic text to the job output, or to the logger outside a job."""
        if not emit_output(message):
            logger.info(message)
