"""Text completion client.

Wraps LiteLLM so the rest of the pipeline depends only on a plain
"prompt in, text out" contract, whichever provider is configured.
"""

from __future__ import annotations

import asyncio
import logging
import os

from litellm import Timeout, acompletion

from src.llm.config import LLMConfig

logger = logging.getLogger(__name__)

# LiteLLM loads `.env` into the process environment in DEV mode.
os.environ.setdefault("LITELLM_MODE", "PRODUCTION")


class CompletionError(Exception):
    """Raised when the provider call fails or returns no usable text."""

    def __init__(
        self,
        message: str,
        http_status: int | None = None,
        original_error: Exception | None = None,
    ):
        super().__init__(message)
        self.message = message
        self.http_status = http_status
        self.original_error = original_error


class CompletionClient:
    """Provider-agnostic text completion client.

    Provider envelopes (OpenAI-style ``choices``, Gemini ``candidates``,
    Anthropic ``content`` blocks) are normalized by LiteLLM; callers only
    ever see the trimmed message text.
    """

    def __init__(self, config: LLMConfig | None = None):
        """Initialize the client.

        Args:
            config: Optional LLMConfig. Loaded from the environment if not provided.
        """
        self.config = config or LLMConfig()
        self._setup_provider_env()

    def _setup_provider_env(self) -> None:
        """Set up provider-specific environment variables.

        Anthropic reads custom base URLs from the environment rather than
        from call parameters.
        """
        if self.config.base_url and self.config.provider == "anthropic":
            base_url = self.config.base_url.rstrip("/")
            if base_url.endswith("/v1"):
                base_url = base_url[:-3]
            os.environ["ANTHROPIC_BASE_URL"] = base_url
            if self.config.api_key:
                os.environ["ANTHROPIC_API_KEY"] = self.config.api_key

    def _get_model_name(self, model: str | None = None) -> str:
        """Get the model name formatted for LiteLLM routing.

        Args:
            model: Optional per-call model override.

        Returns:
            Model name with provider prefix if needed.
        """
        model = model or self.config.model
        provider = self.config.provider

        if provider == "anthropic":
            if "/" in model:
                return model
            return f"anthropic/{model}"

        # Custom endpoints speak the OpenAI protocol
        if self.config.base_url:
            if "/" in model:
                return model
            return f"openai/{model}"

        if provider == "openai":
            return model

        if model.startswith(f"{provider}/"):
            return model
        return f"{provider}/{model}"

    async def complete(
        self,
        prompt: str,
        *,
        model: str | None = None,
        temperature: float | None = None,
        max_tokens: int | None = None,
        system_prompt: str | None = None,
    ) -> str:
        """Send a prompt and return the generated text.

        Args:
            prompt: The user message.
            model: Optional model override.
            temperature: Optional sampling temperature override.
            max_tokens: Optional completion token limit override.
            system_prompt: Optional system message. The configured default is
                used when None; a blank string sends no system message.

        Returns:
            The trimmed text content of the first choice.

        Raises:
            CompletionError: If the call fails or the response has no content.
        """
        if system_prompt is None:
            system_prompt = self.config.system_prompt

        messages: list[dict[str, str]] = []
        if system_prompt and system_prompt.strip():
            messages.append({"role": "system", "content": system_prompt})
        messages.append({"role": "user", "content": prompt})

        model_name = self._get_model_name(model)
        temperature = self.config.temperature if temperature is None else temperature
        logger.debug(
            "Calling %s (temperature=%s). Prompt length: %d",
            model_name,
            temperature,
            len(prompt),
        )

        last_error: Exception | None = None
        for attempt in range(self.config.max_retries + 1):
            try:
                response = await self._call_completion(
                    messages=messages,
                    model_name=model_name,
                    temperature=temperature,
                    max_tokens=max_tokens or self.config.max_tokens,
                )
                return self._extract_text(response)

            except CompletionError:
                raise

            except Timeout as e:
                raise CompletionError(
                    f"LLM request timed out (timeout={self.config.timeout}s). "
                    "Increase LLM_TIMEOUT or use a faster model.",
                    http_status=getattr(e, "status_code", None),
                    original_error=e,
                ) from e

            except Exception as e:
                last_error = e
                if attempt < self.config.max_retries:
                    is_rate_limit = "rate_limit" in str(e).lower() or "429" in str(e)
                    base_wait = 8 if is_rate_limit else 2
                    wait_time = base_wait * (attempt + 1)
                    logger.warning(
                        f"LLM call failed (attempt {attempt + 1}), retrying in {wait_time}s: {e}"
                    )
                    await asyncio.sleep(wait_time)
                else:
                    raise CompletionError(
                        f"API call failed ({self.config.provider}): {e}",
                        http_status=getattr(e, "status_code", None),
                        original_error=e,
                    ) from e

        raise CompletionError(f"LLM call failed: {last_error}", original_error=last_error)

    async def _call_completion(
        self,
        messages: list[dict[str, str]],
        model_name: str,
        temperature: float,
        max_tokens: int,
    ):
        """Make the actual LLM API call."""
        kwargs = {
            "model": model_name,
            "messages": messages,
            "temperature": temperature,
            "max_tokens": max_tokens,
            "top_p": 1,
            "stream": False,
            "timeout": self.config.timeout,
        }

        if self.config.api_key:
            kwargs["api_key"] = self.config.api_key

        if self.config.base_url and self.config.provider != "anthropic":
            kwargs["base_url"] = self.config.base_url

        return await acompletion(**kwargs)

    def _extract_text(self, response) -> str:
        """Pull the message text out of a completion response."""
        choices = getattr(response, "choices", None) or []
        if not choices:
            raise CompletionError(
                f"Unexpected response structure from {self.config.provider}: no choices"
            )

        message = getattr(choices[0], "message", None)
        content = getattr(message, "content", None)
        if not isinstance(content, str) or not content.strip():
            raise CompletionError(
                f"Unexpected response structure from {self.config.provider}: empty content"
            )

        text = content.strip()
        logger.debug("Completion succeeded. Output length: %d", len(text))
        return text
