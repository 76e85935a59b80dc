# src/config/settings.py — v1
"""Typed configuration loaded from .env via pydantic-settings.

Single source of truth for deployment-specific settings: batching policy,
importer selection, backing store location and logging.
"""

from __future__ import annotations

from pathlib import Path
from typing import Literal

from pydantic import field_validator, model_validator
from pydantic_settings import BaseSettings, SettingsConfigDict


class ConfigurationError(Exception):
    """Raised when configuration is internally inconsistent."""


class Settings(BaseSettings):
    """Application settings loaded from .env file."""

    model_config = SettingsConfigDict(
        env_file=".env",
        env_file_encoding="utf-8",
        extra="ignore",
    )

    # === Batching ===
    default_max_jobs: int = 5
    inline_threshold: int = 10
    file_suffix: str = ".xml"
    batch_prefix: str = "ipr_batch_"
    relocation_mode: Literal["copy", "move"] = "copy"
    cleanup_batches: bool = False

    # === Importer ===
    importer: str = "manifest"

    # === Backing store ===
    store_backend: Literal["sqlite"] = "sqlite"
    store_path: Path = Path("~/.annobatch/annotations.db")
    store_busy_timeout_seconds: float = 30.0

    # === Logging ===
    log_level: Literal["DEBUG", "INFO", "WARNING", "ERROR"] = "INFO"
    log_format: Literal["json", "text"] = "text"
    log_file: Path | None = None
    log_rotation: str = "10MB"
    log_retention: int = 30

    # --- Validators ---

    @field_validator("file_suffix")
    @classmethod
    def validate_file_suffix(cls, v: str) -> str:
        """Suffix must look like an extension, e.g. '.xml'."""
        v = v.strip()
        if not v.startswith(".") or len(v) < 2:
            raise ValueError("file_suffix must start with '.' (e.g. '.xml')")
        return v

    @model_validator(mode="after")
    def validate_config_consistency(self) -> Settings:
        """Validate cross-field consistency rules."""
        errors: list[str] = []

        if self.default_max_jobs < 1:
            errors.append("DEFAULT_MAX_JOBS must be >= 1")

        if self.inline_threshold < 0:
            errors.append("INLINE_THRESHOLD must be >= 0")

        if not self.batch_prefix or "/" in self.batch_prefix:
            errors.append("BATCH_PREFIX must be a non-empty name without '/'")

        if self.cleanup_batches and self.relocation_mode == "move":
            errors.append(
                "CLEANUP_BATCHES requires RELOCATION_MODE=copy; "
                "moved files only exist inside their batch directory"
            )

        if self.store_busy_timeout_seconds <= 0:
            errors.append("STORE_BUSY_TIMEOUT_SECONDS must be > 0")

        if errors:
            raise ConfigurationError("; ".join(errors))

        return self


def load_settings(**overrides: object) -> Settings:
    """Load settings from .env with optional overrides.

    Args:
        **overrides: Field-level overrides (for testing or per-run config).

    Returns:
        Validated Settings instance.

    Raises:
        ConfigurationError: If configuration is internally inconsistent.
    """
    return Settings(**overrides)  # type: ignore[arg-type]
