"""Configuration settings for document rendering."""

from __future__ import annotations

from pathlib import Path

from pydantic import Field
from pydantic_settings import BaseSettings, SettingsConfigDict


class RenderConfig(BaseSettings):
    """Rendering configuration settings.

    Override via environment variables with `RENDER_` prefix.
    """

    model_config = SettingsConfigDict(
        env_prefix="RENDER_",
        env_file=".env",
        env_file_encoding="utf-8",
        case_sensitive=False,
        extra="ignore",
    )

    template_path: Path = Field(
        default=Path("templates/resume_template.docx"),
        description="Word template holding the {{...}} placeholders",
    )
    output_dir: Path = Field(
        default=Path("artifacts/docs"),
        description="Directory for rendered resumes",
    )
    link_separator: str = Field(
        default=" | ",
        description="Text placed between profile links",
    )
    contact_separator: str = Field(
        default=" | ",
        description="Text placed between contact line fields",
    )
