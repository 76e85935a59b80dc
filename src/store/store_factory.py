# src/store/store_factory.py — v1
"""Factory for annotation store instantiation."""

from __future__ import annotations

from annobatch.config.settings import Settings
from annobatch.store.base_store import BaseAnnotationStore


def create_store(settings: Settings | None = None) -> BaseAnnotationStore:
    """Instantiate the configured annotation store backend.

    Args:
        settings: Application settings. Defaults to the SQLite backend.

    Returns:
        Configured BaseAnnotationStore implementation.
    """
    backend = "sqlite" if settings is None else settings.store_backend

    if backend == "sqlite":
        from annobatch.store.sqlite_store import SqliteAnnotationStore

        db_path = "~/.annobatch/annotations.db" if settings is None else settings.store_path
        busy_timeout = 30.0 if settings is None else settings.store_busy_timeout_seconds
        return SqliteAnnotationStore(db_path=db_path, busy_timeout=busy_timeout)

    raise ValueError(f"Unsupported store backend: {backend!r}")
