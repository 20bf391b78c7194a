"""Centralized configuration for index-bloom using Pydantic Settings."""

from pathlib import Path
from typing import Literal

from pydantic import Field, field_validator
from pydantic_settings import BaseSettings, SettingsConfigDict


LogLevel = Literal["debug", "info", "warning", "error", "critical"]


class Settings(BaseSettings):
    """Strictly typed configuration loaded from ``INDEX_BLOOM_*`` environment variables.

    Command-line flags take precedence over anything loaded here.
    """

    model_config = SettingsConfigDict(
        env_prefix="INDEX_BLOOM_",
        env_file=".env",
        env_file_encoding="utf-8",
        case_sensitive=False,
        validate_default=True,
        extra="ignore",
    )

    error_rate: float = Field(
        default=0.0001,
        gt=0.0,
        lt=1.0,
        description="Target false-positive rate for every filter built by new indexes",
    )
    index_file: Path = Field(default=Path("index-bloom.json"), description="Where the persisted index lives")
    recursive: bool = Field(default=False, description="Descend into subdirectories when ingesting a directory")

    # Logging
    log_level: LogLevel = Field(default="info", description="Logging level")
    json_logs: bool = Field(default=False, description="Emit structured JSON logs instead of plain text")

    @field_validator("log_level", mode="before")
    @classmethod
    def _normalize_log_level(cls, value: object) -> object:
        if isinstance(value, str):
            return value.strip().lower()
        return value
