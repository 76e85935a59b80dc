# src/importers/manifest_importer.py — v1
"""Manifest importer (IMPORTER=manifest).

Records one provenance row per annotation file without reading its content:
the record name is derived from the file name through the name filter
pattern (first capture group, or the whole match).
"""

from __future__ import annotations

import re
from pathlib import Path

from annobatch.core.models import ImporterArguments
from annobatch.importers.base_importer import BaseImporter
from annobatch.store.base_store import StoreSession


class ManifestImporter(BaseImporter):
    """Register annotation files as records of the analysis."""

    def __init__(self, arguments: ImporterArguments) -> None:
        super().__init__(arguments)
        self._pattern = re.compile(arguments.name_filter_pattern)

    def record_name(self, path: Path) -> str | None:
        """Apply the name filter pattern to the file stem."""
        match = self._pattern.search(path.stem)
        if match is None:
            return None
        name = match.group(1) if match.groups() else match.group(0)
        return name or path.stem

    def import_file(
        self, path: Path, session: StoreSession, index: int, total: int,
    ) -> int:
        name = self.record_name(path)
        if name is None:
            self.log_message(f"Skipping {path.name}: name does not match filter")
            return 0
        if self.arguments.unique_name and name != self.arguments.unique_name:
            return 0

        session.add_record(
            analysis_id=self.arguments.analysis_id,
            record_name=name,
            record_type=self.arguments.record_type,
            source_file=path.name,
            attributes={
                "size_bytes": path.stat().st_size,
                "parse_go": self.arguments.parse_go,
            },
        )
        return 1
