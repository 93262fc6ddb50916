"""Configuration settings for master-resume normalization."""

from __future__ import annotations

from typing import Annotated

from pydantic import Field
from pydantic_settings import BaseSettings, SettingsConfigDict


class NormalizerConfig(BaseSettings):
    """Normalization settings.

    Override via environment variables prefixed with NORMALIZER_.
    """

    model_config = SettingsConfigDict(
        env_prefix="NORMALIZER_",
        env_file=".env",
        env_file_encoding="utf-8",
        case_sensitive=False,
        extra="ignore",
    )

    max_bullet_columns: Annotated[int, Field(gt=0)] = Field(
        default=10,
        description="Highest N read from Responsibility1..N / DescriptionBullet1..N columns",
    )
    default_project_group: str = Field(
        default="General Projects",
        description="Subsection name used for PROJECTS rows",
    )
    max_extra_fields: Annotated[int, Field(ge=0)] = Field(
        default=25,
        description="Maximum unrecognized PERSONAL INFO keys kept in the extension map",
    )
