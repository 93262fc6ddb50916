"""LLM-backed rewriting of single resume bullets."""

from __future__ import annotations

import json
import logging

from src.analysis.models import JobDescriptionAnalysis
from src.llm.client import CompletionClient
from src.llm.parsing import strip_code_fences
from src.selection.models import NOT_SUITABLE
from src.tailoring.config import TailoringConfig
from src.tailoring.models import NotSuitable, Rewritten, TailorResult
from src.tailoring.prompts import TAILORING_SYSTEM_PROMPT, build_tailoring_prompt

logger = logging.getLogger(__name__)


class TailoringError(Exception):
    """Raised when a bullet cannot be tailored or the answer is unusable."""

    def __init__(self, reason: str, raw_output: str | None = None):
        super().__init__(reason)
        self.reason = reason
        self.raw_output = raw_output


class BulletTailor:
    """Rewrites resume bullets toward a target role."""

    def __init__(self, client: CompletionClient, config: TailoringConfig | None = None):
        """Initialize the tailor.

        Args:
            client: Completion client used for rewrite calls.
            config: Optional TailoringConfig. Uses defaults if not provided.
        """
        self.client = client
        self.config = config or TailoringConfig()

    async def tailor(
        self,
        original_text: str,
        analysis: JobDescriptionAnalysis,
        target_role_title: str,
    ) -> TailorResult:
        """Rewrite one bullet.

        Returns:
            Rewritten with the new text, or NotSuitable when the model declines.

        Raises:
            TailoringError: If the input is blank or the answer is unusable.
            CompletionError: If the transport fails.
        """
        if not original_text or not original_text.strip():
            raise TailoringError("Original bullet is empty")

        raw = await self.client.complete(
            build_tailoring_prompt(original_text, analysis, target_role_title),
            model=self.config.model,
            temperature=self.config.temperature,
            max_tokens=self.config.max_tokens,
            system_prompt=TAILORING_SYSTEM_PROMPT,
        )
        return parse_tailor_response(raw)


def parse_tailor_response(raw: str) -> TailorResult:
    """Interpret a tailoring answer.

    Code fences are stripped first. The answer is then read as JSON (an
    object with ``rewritten_bullet`` or a bare string); if it is not JSON the
    whole trimmed text is the answer. The not-suitable sentinel must match
    exactly.

    Raises:
        TailoringError: If the answer is empty or a JSON object lacks
            ``rewritten_bullet``.
    """
    content = strip_code_fences(raw or "")

    try:
        data = json.loads(content)
    except json.JSONDecodeError:
        text = content
    else:
        if isinstance(data, dict):
            value = data.get("rewritten_bullet")
            if not isinstance(value, str):
                raise TailoringError("JSON answer has no 'rewritten_bullet' string", raw)
            text = value
        elif isinstance(data, str):
            text = data
        else:
            text = content

    text = text.strip()
    if not text:
        raise TailoringError("Tailoring answer is empty", raw)
    if text == NOT_SUITABLE:
        return NotSuitable()
    return Rewritten(text)
