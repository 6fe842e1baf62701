"""Application configuration model using pydantic-settings."""

from __future__ import annotations

import os

from pydantic import Field, field_validator, model_validator
from pydantic_settings import BaseSettings, SettingsConfigDict

from blob_batch_delete.exceptions import ConfigurationError

MAX_BATCH_SIZE = 256
DEFAULT_BATCH_SIZE = 255


def _default_thread_pool_size() -> int:
    """One worker per available CPU."""
    return os.cpu_count() or 1


class Config(BaseSettings):
    """Run configuration loaded from environment variables and an optional .env file.

    Every field can be set as ``BLOB_DELETE_<FIELD_NAME>``.
    """

    model_config = SettingsConfigDict(
        env_prefix="BLOB_DELETE_",
        env_file=".env",
        env_file_encoding="utf-8",
        case_sensitive=False,
        extra="ignore",
    )

    input_file_path: str | None = None
    input_csv_content: str | None = None
    storage_endpoint: str | None = None
    batch_size: int = DEFAULT_BATCH_SIZE
    thread_pool_size: int = Field(default_factory=_default_thread_pool_size)
    csv_separator: str = ","
    csv_has_header: bool = True
    snapshot_enabled: bool = False
    log_level: str = "INFO"

    @field_validator("batch_size")
    @classmethod
    def validate_batch_size(cls, value: int) -> int:
        """Batch size must be between 1 and 256 (the service batch limit)."""
        if value <= 0 or value > MAX_BATCH_SIZE:
            msg = f"batch_size must be between 1 and {MAX_BATCH_SIZE}, but was {value}"
            raise ValueError(msg)
        return value

    @field_validator("thread_pool_size")
    @classmethod
    def validate_thread_pool_size(cls, value: int) -> int:
        """Thread pool size must be positive."""
        if value <= 0:
            msg = "thread_pool_size must be greater than zero"
            raise ValueError(msg)
        return value

    @field_validator("csv_separator")
    @classmethod
    def validate_csv_separator(cls, value: str) -> str:
        """An empty separator falls back to a comma."""
        return value or ","

    @field_validator("input_file_path", "input_csv_content", "storage_endpoint")
    @classmethod
    def validate_optional_text(cls, value: str | None) -> str | None:
        """Blank optional values are treated as unset."""
        if value is not None and not value.strip():
            return None
        return value

    @field_validator("log_level")
    @classmethod
    def validate_log_level(cls, value: str) -> str:
        """Log level must be a valid Python logging level."""
        valid_levels = {"DEBUG", "INFO", "WARNING", "ERROR", "CRITICAL"}
        upper_value = value.upper()
        if upper_value not in valid_levels:
            msg = f"log_level must be one of {', '.join(sorted(valid_levels))}"
            raise ValueError(msg)
        return upper_value

    @model_validator(mode="after")
    def validate_single_input_source(self) -> Config:
        """An input file and inline content cannot both be configured."""
        if self.input_file_path and self.input_csv_content:
            msg = "input_file_path and input_csv_content cannot be used together"
            raise ValueError(msg)
        return self

    def require_input_source(self) -> None:
        """Fail unless an input file or inline content is configured."""
        if not self.input_file_path and not self.input_csv_content:
            msg = "No input source configured: set input_file_path or input_csv_content"
            raise ConfigurationError(msg)
