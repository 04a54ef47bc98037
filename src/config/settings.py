"""
Application settings with Pydantic v2 validation.

Loads configuration from environment variables with sensible defaults.
"""

from datetime import UTC, tzinfo
from pathlib import Path
from typing import Any, Literal
from zoneinfo import ZoneInfo, ZoneInfoNotFoundError

from pydantic import Field, field_validator
from pydantic_settings import BaseSettings, SettingsConfigDict


class StorageSettings(BaseSettings):
    """Document store configuration."""

    model_config = SettingsConfigDict(env_prefix="STORAGE_")

    backend: Literal["sqlite", "memory"] = "sqlite"
    data_dir: Path = Path("data")
    db_name: str = "stockflow.db"

    # SQLite settings
    pool_size: int = 5
    busy_timeout: int = 30000  # ms

    @property
    def db_path(self) -> Path:
        return self.data_dir / self.db_name


class EngineSettings(BaseSettings):
    """Transaction engine configuration."""

    model_config = SettingsConfigDict(env_prefix="ENGINE_")

    # Optimistic-conflict retry for atomic blocks
    max_commit_attempts: int = Field(default=5, ge=1)
    retry_delay: float = 0.05
    retry_max_delay: float = 1.0

    # Transport-level bound on one atomic round trip
    atomic_timeout_seconds: float = 10.0

    # Inventory defaults
    default_low_stock_threshold: int = Field(default=5, ge=0)

    # Reporting
    recent_transactions_limit: int = 5
    top_selling_limit: int = 5
    history_page_size: int = 100
    # IANA zone for "today"/"week"/"month" windows; empty means the system zone
    timezone: str = ""

    @field_validator("timezone")
    @classmethod
    def check_timezone(cls, v: str) -> str:
        if v and v.upper() != "UTC":
            try:
                ZoneInfo(v)
            except (ZoneInfoNotFoundError, ValueError) as e:
                raise ValueError(f"Unknown timezone: {v}") from e
        return v

    @property
    def zone(self) -> tzinfo | None:
        if not self.timezone:
            return None
        if self.timezone.upper() == "UTC":
            return UTC
        return ZoneInfo(self.timezone)


class Settings(BaseSettings):
    """Main application settings."""

    model_config = SettingsConfigDict(
        env_file=".env",
        env_file_encoding="utf-8",
        extra="ignore",
    )

    app_name: str = "Stockflow Inventory Engine"
    app_version: str = "1.0.0"
    environment: Literal["development", "staging", "production"] = "development"
    log_level: Literal["DEBUG", "INFO", "WARNING", "ERROR"] = "INFO"

    # Sub-settings
    storage: StorageSettings = Field(default_factory=StorageSettings)
    engine: EngineSettings = Field(default_factory=EngineSettings)

    @field_validator("storage", mode="before")
    @classmethod
    def ensure_data_dir(cls, v: Any) -> StorageSettings:
        if isinstance(v, dict):
            settings = StorageSettings(**v)
        else:
            settings = v or StorageSettings()
        if settings.backend == "sqlite":
            settings.data_dir.mkdir(parents=True, exist_ok=True)
        return settings


# Global settings instance
_settings: Settings | None = None


def get_settings() -> Settings:
    """Get or create global settings instance."""
    global _settings
    if _settings is None:
        _settings = Settings()
    return _settings


def reset_settings() -> None:
    """Reset settings (for testing)."""
    global _settings
    _settings = None
