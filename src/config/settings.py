"""Application settings for the resume pipeline."""

from pathlib import Path

from pydantic import Field, field_validator
from pydantic_settings import BaseSettings, SettingsConfigDict


class Settings(BaseSettings):
    """Application settings loaded from environment variables.

    All settings have sensible defaults and can be overridden via
    environment variables or a .env file.
    """

    model_config = SettingsConfigDict(
        env_file=".env",
        env_file_encoding="utf-8",
        case_sensitive=False,
        extra="ignore",
    )

    # Paths
    store_path: Path = Field(
        default=Path("./data/resume_pipeline.db"),
        description="SQLite file holding the tables and pipeline runs",
    )

    # Table names
    master_table: str = Field(
        default="Master Resume",
        description="Table holding the master resume rows",
    )
    selection_table: str = Field(
        default="Scored Items",
        description="Table holding scored rows and selection flags",
    )

    # Logging
    log_level: str = Field(
        default="INFO",
        description="Logging level: DEBUG, INFO, WARNING, ERROR",
    )
    log_file: Path | None = Field(
        default=None,
        description="Optional file that receives a copy of the log",
    )

    @field_validator("master_table", "selection_table")
    @classmethod
    def validate_table_name(cls, v: str) -> str:
        """Table names must be non-blank."""
        if not v.strip():
            raise ValueError("Table names must not be blank")
        return v.strip()

    @field_validator("log_level", mode="before")
    @classmethod
    def validate_log_level(cls, v: str) -> str:
        """Validate log level is a known level."""
        valid_levels = {"DEBUG", "INFO", "WARNING", "ERROR", "CRITICAL"}
        if v.upper() not in valid_levels:
            raise ValueError(f"Invalid log level: {v}. Must be one of {valid_levels}")
        return v.upper()
