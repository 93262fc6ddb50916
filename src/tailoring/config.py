"""Configuration settings for bullet tailoring."""

from __future__ import annotations

from typing import Annotated

from pydantic import Field
from pydantic_settings import BaseSettings, SettingsConfigDict


class TailoringConfig(BaseSettings):
    """Configuration for the tailoring stage.

    Settings can be overridden via environment variables prefixed with TAILORING_.

    Example: TAILORING_TEMPERATURE=0.6
    """

    model_config = SettingsConfigDict(
        env_prefix="TAILORING_",
        env_file=".env",
        env_file_encoding="utf-8",
        case_sensitive=False,
        extra="ignore",
    )

    model: str | None = Field(
        default=None,
        description="Model override for tailoring calls (defaults to LLM_MODEL)",
    )
    temperature: Annotated[float, Field(ge=0.0, le=2.0)] = Field(
        default=0.4,
        description="Sampling temperature for rewrites",
    )
    max_tokens: Annotated[int, Field(gt=0)] = Field(
        default=512,
        description="Maximum tokens for a rewrite",
    )
    inter_call_delay_seconds: Annotated[float, Field(ge=0.0)] = Field(
        default=1.0,
        description="Pause before each tailoring call",
    )
    retailor_existing: bool = Field(
        default=False,
        description="Rewrite rows that already carry tailored text",
    )
