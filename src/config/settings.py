# src/config/settings.py — v2
"""Typed configuration loaded from .env via pydantic-settings.

Single source of truth for backend selection, connection coordinates and
logging. Each field maps to the upper-cased env var (CACHE_BACKEND, ...).
"""

from __future__ import annotations

from pathlib import Path
from typing import Literal

from pydantic import field_validator, model_validator
from pydantic_settings import BaseSettings, SettingsConfigDict

from artifactcache.config.units import parse_size


class ConfigurationError(Exception):
    """Raised when configuration is internally inconsistent."""


class Settings(BaseSettings):
    """Application settings loaded from .env file."""

    model_config = SettingsConfigDict(
        env_file=".env",
        env_file_encoding="utf-8",
        extra="ignore",
    )

    # === Cache backend ===
    cache_backend: Literal["disk", "mongodb", "redis"] = "disk"

    # Local disk
    cache_dir: Path = Path("~/.cache/artifactcache")
    cache_max_size: str = "10GB"

    # MongoDB
    cache_mongo_url: str = ""
    cache_mongo_database: str = "artifactcache"
    cache_mongo_collection: str = "entries"

    # Redis
    cache_redis_url: str = ""
    cache_redis_prefix: str = "artifactcache:"

    # === Logging ===
    log_level: Literal["DEBUG", "INFO", "WARNING", "ERROR"] = "INFO"
    log_format: Literal["json", "text"] = "json"
    log_file: Path | None = None
    log_rotation: str = "10MB"
    log_retention: int = 30

    # --- Validators ---

    @field_validator("cache_max_size", "log_rotation")
    @classmethod
    def validate_size(cls, v: str) -> str:  # noqa: N805
        parse_size(v)
        return v

    @field_validator("log_retention")
    @classmethod
    def validate_retention(cls, v: int) -> int:  # noqa: N805
        if v < 0:
            raise ValueError("log_retention must be >= 0")
        return v

    @model_validator(mode="after")
    def validate_config_consistency(self) -> Settings:
        """Cross-field rules for the selected backend."""
        errors: list[str] = []

        if self.cache_backend == "mongodb":
            if not self.cache_mongo_database:
                errors.append("CACHE_MONGO_DATABASE must not be empty")
            if not self.cache_mongo_collection:
                errors.append("CACHE_MONGO_COLLECTION must not be empty")

        if self.cache_backend == "disk" and self.cache_max_size_bytes == 0:
            errors.append("CACHE_MAX_SIZE must be greater than zero")

        if errors:
            raise ConfigurationError("; ".join(errors))

        return self

    # --- Helpers ---

    @property
    def cache_max_size_bytes(self) -> int:
        """CACHE_MAX_SIZE converted to bytes."""
        return parse_size(self.cache_max_size)


def load_settings(**overrides: object) -> Settings:
    """Load settings from .env with optional overrides.

    Raises:
        ConfigurationError: If configuration is internally inconsistent.
    """
    return Settings(**overrides)  # type: ignore[arg-type]
