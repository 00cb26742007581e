"""
Configuration settings for the quadratic tutor.

Uses Pydantic Settings for environment variable management with .env file support.
Variables use the TUTOR_ prefix, e.g. TUTOR_STORAGE_BACKEND=sql.
"""
from __future__ import annotations

from functools import lru_cache
from pathlib import Path
from typing import Literal

from pydantic import Field
from pydantic_settings import BaseSettings, SettingsConfigDict


class Settings(BaseSettings):
    """Application settings loaded from environment variables."""

    model_config = SettingsConfigDict(
        env_prefix="TUTOR_",
        env_file=".env",
        env_file_encoding="utf-8",
        case_sensitive=False,
        extra="ignore",
    )

    # ========================================
    # Storage
    # ========================================
    data_dir: Path = Field(
        default=Path.home() / ".quadratic_tutor",
        description="Directory for learner state",
    )
    storage_backend: Literal["json", "sql"] = Field(
        default="json",
        description="Document store: single JSON file or SQL key/value table",
    )
    state_file: str = Field(
        default="state.json",
        description="JSON state file name inside data_dir",
    )
    database_url: str | None = Field(
        default=None,
        description="SQLAlchemy URL for the sql backend (defaults to SQLite in data_dir)",
    )
    document_key: str = Field(
        default="student",
        description="Key of the learner document in the sql backend",
    )

    # ========================================
    # Student model
    # ========================================
    history_limit: int = Field(
        default=50,
        ge=1,
        description="Attempts kept in the persisted history",
    )
    mistake_limit: int = Field(
        default=5,
        ge=1,
        description="Distinct common mistakes remembered",
    )
    recent_window: int = Field(
        default=10,
        ge=1,
        description="Attempts considered for the preferred difficulty",
    )

    # ========================================
    # Validation & generation
    # ========================================
    answer_tolerance: float = Field(
        default=0.01,
        gt=0,
        description="Absolute tolerance when comparing roots",
    )
    generation_max_attempts: int = Field(
        default=50,
        ge=1,
        description="Rejection-sampling draws before the fallback equation",
    )
    random_seed: int | None = Field(
        default=None,
        description="Seed for equation generation (None for nondeterministic)",
    )

    # ========================================
    # Logging
    # ========================================
    log_level: Literal["DEBUG", "INFO", "WARNING", "ERROR"] = Field(
        default="WARNING",
        description="Logging verbosity level",
    )
    log_file: str | None = Field(
        default=None,
        description="Log file path (None for stderr only)",
    )

    def get_state_path(self) -> Path:
        return self.data_dir / self.state_file

    def get_database_url(self) -> str:
        """SQLAlchemy URL, defaulting to a SQLite file in data_dir."""
        if self.database_url:
            return self.database_url
        return f"sqlite:///{self.data_dir / 'tutor.db'}"


@lru_cache(maxsize=1)
def get_settings() -> Settings:
    """Get cached settings instance."""
    return Settings()
