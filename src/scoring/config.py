"""Configuration settings for relevance scoring."""

from __future__ import annotations

from typing import Annotated

from pydantic import Field
from pydantic_settings import BaseSettings, SettingsConfigDict


class ScoringConfig(BaseSettings):
    """Relevance scoring configuration settings.

    All settings have sensible defaults and can be overridden via
    environment variables with `SCORING_` prefix or a .env file.
    """

    model_config = SettingsConfigDict(
        env_prefix="SCORING_",
        env_file=".env",
        env_file_encoding="utf-8",
        case_sensitive=False,
        extra="ignore",
    )

    model: str | None = Field(
        default=None,
        description="Model override for scoring calls (defaults to LLM_MODEL)",
    )
    temperature: Annotated[float, Field(ge=0.0, le=2.0)] = Field(
        default=0.1,
        description="Sampling temperature for scoring calls",
    )
    max_tokens: Annotated[int, Field(gt=0)] = Field(
        default=512,
        description="Maximum tokens for a scoring response",
    )
    inter_call_delay_seconds: Annotated[float, Field(ge=0.0)] = Field(
        default=1.0,
        description="Pause before each scoring call (self-imposed rate limit)",
    )
