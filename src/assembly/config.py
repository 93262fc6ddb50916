"""Configuration settings for resume assembly."""

from __future__ import annotations

from typing import Annotated

from pydantic import Field
from pydantic_settings import BaseSettings, SettingsConfigDict


class AssemblyConfig(BaseSettings):
    """Assembly configuration settings.

    Override via environment variables with `ASSEMBLY_` prefix.
    """

    model_config = SettingsConfigDict(
        env_prefix="ASSEMBLY_",
        env_file=".env",
        env_file_encoding="utf-8",
        case_sensitive=False,
        extra="ignore",
    )

    inclusion_threshold: Annotated[float, Field(ge=0.0, le=1.0)] = Field(
        default=0.01,
        description="Minimum relevance score for a selected line to be included",
    )
    max_bullets_per_item: Annotated[int, Field(gt=0)] = Field(
        default=4,
        description="Maximum bullets kept per job, project or role",
    )
    max_highlights: Annotated[int, Field(gt=0)] = Field(
        default=5,
        description="Number of bullets fed to summary generation",
    )
    summary_temperature: Annotated[float, Field(ge=0.0, le=2.0)] = Field(
        default=0.5,
        description="Sampling temperature for the regenerated summary",
    )
    summary_max_tokens: Annotated[int, Field(gt=0)] = Field(
        default=400,
        description="Maximum tokens for the regenerated summary",
    )
