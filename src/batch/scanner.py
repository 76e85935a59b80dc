# src/batch/scanner.py — v2
"""Input discoverer — precondition checks and annotation file discovery.

Lists files directly under the source directory whose name ends with the
configured suffix. Order is by filename so partitioning is reproducible.
"""

from __future__ import annotations

import logging
from pathlib import Path

from annobatch.core.errors import EmptyInput, InvalidConfiguration, PathNotFound
from annobatch.core.models import ImportRequest

logger = logging.getLogger(__name__)

DEFAULT_SUFFIX = ".xml"


class InputDiscoverer:
    """Validate an import request against the filesystem and list its files."""

    def __init__(self, request: ImportRequest, suffix: str = DEFAULT_SUFFIX) -> None:
        self._request = request
        self._suffix = suffix

    @property
    def source_path(self) -> Path:
        return self._request.source_path

    def validate(self) -> None:
        """Check filesystem preconditions.

        Raises:
            InvalidConfiguration: Empty path or non-positive max jobs.
            PathNotFound: Source path missing or not a directory.
        """
        if not str(self.source_path).strip():
            raise InvalidConfiguration("Please provide a path to the annotation files directory.")
        if self._request.max_jobs < 1:
            raise InvalidConfiguration(
                "Please specify a valid max jobs number. Must be a positive integer."
            )
        if not self.source_path.exists():
            raise PathNotFound(
                f"{self.source_path} does not exist or inaccessible. Please provide a valid path."
            )
        if not self.source_path.is_dir():
            raise PathNotFound(f"{self.source_path} is not a directory.")

    def discover(self) -> list[Path]:
        """Return the FileSet: matching files sorted by name.

        Raises:
            PathNotFound: The directory cannot be listed.
            EmptyInput: No file matches the suffix.
        """
        self.validate()

        try:
            files = sorted(
                path for path in self.source_path.iterdir()
                if path.is_file() and path.name.endswith(self._suffix)
            )
        except OSError as e:
            raise PathNotFound(f"{self.source_path} is inaccessible: {e}") from e

        if not files:
            raise EmptyInput(
                f"Could not find any {self._suffix} files in the specified path {self.source_path}"
            )

        logger.info(
            "Discovered %d %s files in %s", len(files), self._suffix, self.source_path,
        )
        return files
