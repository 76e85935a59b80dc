# src/core/errors.py — v1
"""Error taxonomy for an import run.

Fatal errors (configuration, discovery, partitioning) propagate to the caller
and abort the run before any job starts. ImporterFailure is per-batch: it is
caught at the job runner boundary and only reported.
"""

from __future__ import annotations


class ImportRunError(Exception):
    """Base class for all import run errors."""

    fatal: bool = True


class InvalidConfiguration(ImportRunError):
    """Bad analysis id, bad max jobs, empty path or invalid name pattern."""


class PathNotFound(ImportRunError):
    """The source path does not exist or is not a directory."""


class EmptyInput(ImportRunError):
    """No file under the source path matches the configured suffix."""


class DirectoryCreateFailed(ImportRunError):
    """A batch directory could not be created."""


class FileRelocationFailed(ImportRunError):
    """A file could not be copied or moved into its batch directory."""


class ImporterFailure(ImportRunError):
    """The importer raised while processing one batch."""

    fatal = False

    def __init__(self, batch_directory: str, message: str) -> None:
        self.batch_directory = batch_directory
        self.message = message
        super().__init__(f"{batch_directory}: {message}")
