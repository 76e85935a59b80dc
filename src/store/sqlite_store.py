# src/store/sqlite_store.py — v2
"""SQLite-based annotation store (STORE_BACKEND=sqlite).

Uses stdlib sqlite3. A transaction buffers its records in memory while the
importer runs and writes them in one short write transaction when the
body succeeds. Writers within the process queue on a lock, so a slow batch
never holds the database write lock while it parses. The busy timeout only
applies to other processes sharing the file. A failed body writes nothing.
"""

from __future__ import annotations

import json
import logging
import sqlite3
import threading
from collections.abc import Iterator
from contextlib import contextmanager
from pathlib import Path
from typing import Any

from annobatch.store.base_store import BaseAnnotationStore, StoreSession

logger = logging.getLogger(__name__)

_SCHEMA = """
CREATE TABLE IF NOT EXISTS analysis_records (
    id INTEGER PRIMARY KEY AUTOINCREMENT,
    analysis_id INTEGER NOT NULL,
    record_name TEXT NOT NULL,
    record_type TEXT NOT NULL,
    source_file TEXT NOT NULL,
    attributes TEXT,
    created_at TEXT DEFAULT CURRENT_TIMESTAMP
);
CREATE INDEX IF NOT EXISTS idx_analysis_id ON analysis_records(analysis_id);
"""


class SqliteSession(StoreSession):
    """Session collecting rows until its transaction commits."""

    def __init__(self) -> None:
        self.rows: list[tuple[int, str, str, str, str]] = []

    def add_record(
        self,
        analysis_id: int,
        record_name: str,
        record_type: str,
        source_file: str,
        attributes: dict[str, Any] | None = None,
    ) -> None:
        self.rows.append((
            analysis_id,
            record_name,
            record_type,
            source_file,
            json.dumps(attributes or {}, sort_keys=True),
        ))


class SqliteAnnotationStore(BaseAnnotationStore):
    """SQLite-backed annotation store."""

    def __init__(self, db_path: Path | str, busy_timeout: float = 30.0) -> None:
        self._db_path = Path(db_path).expanduser()
        self._db_path.parent.mkdir(parents=True, exist_ok=True)
        self._busy_timeout = busy_timeout
        self._write_lock = threading.Lock()
        conn = self._connect()
        try:
            conn.execute("PRAGMA journal_mode=WAL")
            conn.executescript(_SCHEMA)
        finally:
            conn.close()

    @property
    def db_path(self) -> Path:
        return self._db_path

    def _connect(self) -> sqlite3.Connection:
        return sqlite3.connect(
            str(self._db_path), timeout=self._busy_timeout, isolation_level=None
        )

    def clear_analysis(self, analysis_id: int) -> int:
        """Delete every record of ``analysis_id`` (autocommit)."""
        conn = self._connect()
        try:
            cursor = conn.execute(
                "DELETE FROM analysis_records WHERE analysis_id = ?", (analysis_id,)
            )
            deleted = cursor.rowcount
        finally:
            conn.close()
        logger.info("Cleared %d stored records for analysis %d", deleted, analysis_id)
        return deleted

    @contextmanager
    def transaction(self) -> Iterator[SqliteSession]:
        """Collect records, then commit them all at once or not at all."""
        session = SqliteSession()
        try:
            yield session
        except BaseException:
            logger.debug(
                "Rolled back transaction on %s (%d records discarded)",
                self._db_path, len(session.rows),
            )
            raise
        self._write(session.rows)

    def _write(self, rows: list[tuple[int, str, str, str, str]]) -> None:
        if not rows:
            return
        with self._write_lock:
            conn = self._connect()
            try:
                conn.execute("BEGIN IMMEDIATE")
                try:
                    conn.executemany(
                        """INSERT INTO analysis_records
                           (analysis_id, record_name, record_type, source_file, attributes)
                           VALUES (?, ?, ?, ?, ?)""",
                        rows,
                    )
                except BaseException:
                    conn.execute("ROLLBACK")
                    raise
                conn.execute("COMMIT")
            finally:
                conn.close()

    def count_records(self, analysis_id: int) -> int:
        conn = self._connect()
        try:
            row = conn.execute(
                "SELECT COUNT(*) FROM analysis_records WHERE analysis_id = ?",
                (analysis_id,),
            ).fetchone()
        finally:
            conn.close()
        return int(row[0])

    def iter_records(self, analysis_id: int) -> Iterator[dict[str, Any]]:
        conn = self._connect()
        try:
            cursor = conn.execute(
                """SELECT record_name, record_type, source_file, attributes
                   FROM analysis_records WHERE analysis_id = ? ORDER BY id""",
                (analysis_id,),
            )
            for name, rtype, source, attrs in cursor:
                yield {
                    "record_name": name,
                    "record_type": rtype,
                    "source_file": source,
                    "attributes": json.loads(attrs) if attrs else {},
                }
        finally:
            conn.close()
