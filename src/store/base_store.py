# src/store/base_store.py — v1
"""Abstract backing store for annotation records.

The store is a collaborator of the import run: the run clears prior records
for an analysis before partitioning, and each job writes its records inside
one transaction that is rolled back when the importer fails.
"""

from __future__ import annotations

from abc import ABC, abstractmethod
from collections.abc import Iterator
from contextlib import AbstractContextManager
from typing import Any


class StoreSession(ABC):
    """Write handle bound to one open transaction."""

    @abstractmethod
    def add_record(
        self,
        analysis_id: int,
        record_name: str,
        record_type: str,
        source_file: str,
        attributes: dict[str, Any] | None = None,
    ) -> None:
        """Persist one annotation record."""


class BaseAnnotationStore(ABC):
    """Unified interface for annotation storage backends."""

    @abstractmethod
    def clear_analysis(self, analysis_id: int) -> int:
        """Delete all records stored for ``analysis_id``. Returns rows removed."""

    @abstractmethod
    def transaction(self) -> AbstractContextManager[StoreSession]:
        """Open a transaction: commit on success, roll back and re-raise on error."""

    @abstractmethod
    def count_records(self, analysis_id: int) -> int:
        """Number of records stored for ``analysis_id``."""

    @abstractmethod
    def iter_records(self, analysis_id: int) -> Iterator[dict[str, Any]]:
        """Yield stored records for ``analysis_id``."""
