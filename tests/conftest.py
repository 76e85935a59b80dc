# tests/conftest.py — v2
"""Shared test fixtures for all unit and integration tests.

Provides annotation file trees, an isolated SQLite store, settings without
.env lookup and small importer doubles.
"""

from __future__ import annotations

import logging
import threading
import time
from collections.abc import Callable
from pathlib import Path

import pytest

from annobatch.config.settings import Settings
from annobatch.core.models import ImporterArguments
from annobatch.importers.base_importer import BaseImporter
from annobatch.logging.context import clear_context
from annobatch.store.base_store import StoreSession
from annobatch.store.sqlite_store import SqliteAnnotationStore


# === Importer doubles ===


class RecordingImporter(BaseImporter):
    """Writes one record per file and logs each file it sees."""

    delay: float = 0.0

    def import_file(self, path: Path, session: StoreSession, index: int, total: int) -> int:
        self.log_message(f"imported {path.name}")
        if self.delay:
            time.sleep(self.delay)
        session.add_record(
            analysis_id=self.arguments.analysis_id,
            record_name=path.stem,
            record_type=self.arguments.record_type,
            source_file=path.name,
        )
        return 1


class FailingImporter(RecordingImporter):
    """Fails on any file whose name contains 'bad'."""

    def import_file(self, path: Path, session: StoreSession, index: int, total: int) -> int:
        written = super().import_file(path, session, index, total)
        if "bad" in path.name:
            raise RuntimeError(f"malformed annotation file {path.name}")
        return written


class ConcurrencyProbe:
    """Counts simultaneously running calls."""

    def __init__(self) -> None:
        self._lock = threading.Lock()
        self.running = 0
        self.peak = 0

    def __enter__(self) -> ConcurrencyProbe:
        with self._lock:
            self.running += 1
            self.peak = max(self.peak, self.running)
        return self

    def __exit__(self, *exc: object) -> None:
        with self._lock:
            self.running -= 1


# === FIXTURES: filesystem ===


@pytest.fixture
def make_annotation_files(tmp_path: Path) -> Callable[..., Path]:
    """Create ``count`` annotation files in a fresh source directory."""

    def _make(count: int, suffix: str = ".xml", name: str = "scans") -> Path:
        source = tmp_path / name
        source.mkdir(parents=True, exist_ok=True)
        for i in range(count):
            (source / f"seq_{i:03d}{suffix}").write_text(
                f"<protein-matches id='{i}'/>", encoding="utf-8",
            )
        return source

    return _make


# === FIXTURES: store, settings, importers ===


@pytest.fixture
def store(tmp_path: Path) -> SqliteAnnotationStore:
    """Isolated SQLite annotation store."""
    return SqliteAnnotationStore(tmp_path / "db" / "annotations.db")


@pytest.fixture
def settings(tmp_path: Path) -> Settings:
    """Settings that ignore any local .env file."""
    return Settings(_env_file=None, store_path=tmp_path / "db" / "annotations.db")


@pytest.fixture
def importer_arguments() -> ImporterArguments:
    return ImporterArguments(
        analysis_id=7,
        record_type="mRNA",
        name_filter_pattern=r"^(.*)$",
    )


@pytest.fixture
def recording_importer() -> type[RecordingImporter]:
    return RecordingImporter


@pytest.fixture
def failing_importer() -> type[FailingImporter]:
    return FailingImporter


@pytest.fixture
def concurrency_probe() -> ConcurrencyProbe:
    return ConcurrencyProbe()


@pytest.fixture(autouse=True)
def _reset_logging_context():
    clear_context()
    yield
    clear_context()
    logging.getLogger("annobatch").handlers.clear()
    logging.getLogger("annobatch").setLevel(logging.NOTSET)
