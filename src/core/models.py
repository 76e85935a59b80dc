# src/core/models.py — v1
"""Core models for an import run: request, importer arguments, importer outcome.

ImportRequest is validated at construction and is immutable afterwards.
Validation never touches the filesystem; path existence is checked by the
input discoverer.
"""

from __future__ import annotations

import re
from pathlib import Path
from typing import Any

from pydantic import BaseModel, ConfigDict, model_validator

from annobatch.core.errors import InvalidConfiguration

DEFAULT_MAX_JOBS = 5
DEFAULT_NAME_PATTERN = r"^(.*)$"
DEFAULT_RECORD_TYPE = "mRNA"


def _is_positive_int(value: Any) -> bool:
    return isinstance(value, int) and not isinstance(value, bool) and value > 0


class ImportRequest(BaseModel):
    """What to import and with which importer arguments."""

    model_config = ConfigDict(frozen=True)

    analysis_id: int
    source_path: Path
    max_jobs: int = DEFAULT_MAX_JOBS
    name_filter_pattern: str = DEFAULT_NAME_PATTERN
    record_type: str = DEFAULT_RECORD_TYPE

    @model_validator(mode="before")
    @classmethod
    def validate_request(cls, data: Any) -> Any:
        """Fail fast with InvalidConfiguration on any missing or malformed field."""
        if not isinstance(data, dict):
            raise InvalidConfiguration("Import request must be built from keyword arguments.")

        path = data.get("source_path")
        if path is None or not str(path).strip():
            raise InvalidConfiguration(
                "Please provide a path to the annotation files directory."
            )

        if not _is_positive_int(data.get("analysis_id")):
            raise InvalidConfiguration("Please provide an analysis id using --analysis-id=INTEGER.")

        max_jobs = data.get("max_jobs", DEFAULT_MAX_JOBS)
        if not _is_positive_int(max_jobs):
            raise InvalidConfiguration(
                "Please specify a valid max jobs number. Must be a positive integer."
            )

        pattern = data.get("name_filter_pattern", DEFAULT_NAME_PATTERN)
        if not isinstance(pattern, str):
            raise InvalidConfiguration("The name filter pattern must be a string.")
        try:
            re.compile(pattern)
        except re.error as e:
            raise InvalidConfiguration(f"Invalid name filter pattern {pattern!r}: {e}") from e

        record_type = data.get("record_type", DEFAULT_RECORD_TYPE)
        if not isinstance(record_type, str) or not record_type.strip():
            raise InvalidConfiguration("Please provide a record type, e.g. --type=mRNA.")

        return data


class ImporterArguments(BaseModel):
    """Explicit argument set handed to an importer at construction."""

    model_config = ConfigDict(frozen=True)

    analysis_id: int
    record_type: str
    name_filter_pattern: str
    unique_name: str | None = None
    parse_go: bool = True
    file_suffix: str = ".xml"

    @classmethod
    def from_request(cls, request: ImportRequest, file_suffix: str = ".xml") -> ImporterArguments:
        return cls(
            analysis_id=request.analysis_id,
            record_type=request.record_type,
            name_filter_pattern=request.name_filter_pattern,
            unique_name=None,
            parse_go=True,
            file_suffix=file_suffix,
        )


class ImportOutcome(BaseModel):
    """What an importer reports back for one invocation."""

    files_processed: int = 0
    records_written: int = 0

