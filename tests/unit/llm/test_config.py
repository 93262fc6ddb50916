"""Tests for LLMConfig."""

import pytest

from src.llm.config import DEFAULT_SYSTEM_PROMPT, LLMConfig


class TestLLMConfig:
    def test_defaults(self, monkeypatch):
        for var in ("LLM_PROVIDER", "LLM_MODEL", "LLM_TEMPERATURE", "LLM_MAX_TOKENS"):
            monkeypatch.delenv(var, raising=False)

        config = LLMConfig(_env_file=None)  # type: ignore[call-arg]

        assert config.provider == "groq"
        assert config.model == "gemma2-9b-it"
        assert config.temperature == 0.2
        assert config.max_tokens == 2048
        assert config.system_prompt == DEFAULT_SYSTEM_PROMPT

    def test_provider_is_normalized(self):
        config = LLMConfig(_env_file=None, provider="  OpenAI ")  # type: ignore[call-arg]
        assert config.provider == "openai"

    def test_env_override(self, monkeypatch):
        monkeypatch.setenv("LLM_MODEL", "llama-3.1-8b-instant")
        config = LLMConfig(_env_file=None)  # type: ignore[call-arg]
        assert config.model == "llama-3.1-8b-instant"

    def test_rejects_non_positive_max_tokens(self):
        with pytest.raises(ValueError):
            LLMConfig(_env_file=None, max_tokens=0)  # type: ignore[call-arg]
