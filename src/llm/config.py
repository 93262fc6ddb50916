"""Configuration settings for the LLM transport.

Provider, model and request defaults shared by every stage that talks to
a language model.
"""

from __future__ import annotations

from typing import Annotated

from pydantic import Field, field_validator
from pydantic_settings import BaseSettings, SettingsConfigDict

DEFAULT_SYSTEM_PROMPT = (
    "You are a helpful and meticulous AI assistant. Respond ONLY with the "
    "requested format (e.g., JSON). Do not include any explanatory text or "
    "markdown formatting before or after the JSON output."
)


class LLMConfig(BaseSettings):
    """Configuration for the text completion client.

    Settings can be overridden via environment variables prefixed with LLM_.

    Example: LLM_PROVIDER=gemini LLM_MODEL=gemini-1.5-flash
    """

    model_config = SettingsConfigDict(
        env_prefix="LLM_",
        env_file=".env",
        env_file_encoding="utf-8",
        case_sensitive=False,
        extra="ignore",
    )

    provider: str = Field(
        default="groq",
        description="LLM provider (groq, gemini, openai, anthropic, etc.)",
    )
    model: str = Field(
        default="gemma2-9b-it",
        description="Default model name for the provider",
    )
    api_key: str | None = Field(
        default=None,
        description="API key for the provider (falls back to provider env vars)",
    )
    base_url: str | None = Field(
        default=None,
        description="Base URL for OpenAI-compatible endpoints",
    )
    max_retries: Annotated[int, Field(ge=0)] = Field(
        default=1,
        description="Maximum retry attempts for transport failures",
    )
    timeout: Annotated[float, Field(gt=0)] = Field(
        default=120.0,
        description="Timeout in seconds for a single completion call",
    )
    temperature: Annotated[float, Field(ge=0.0, le=2.0)] = Field(
        default=0.2,
        description="Default sampling temperature",
    )
    max_tokens: Annotated[int, Field(gt=0)] = Field(
        default=2048,
        description="Default completion token limit",
    )
    system_prompt: str = Field(
        default=DEFAULT_SYSTEM_PROMPT,
        description="System message sent when the caller does not supply one",
    )

    @field_validator("provider", mode="before")
    @classmethod
    def normalize_provider(cls, v: str) -> str:
        """Lower-case and trim the provider name."""
        return str(v).strip().lower()
