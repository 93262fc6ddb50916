"""LLM-backed relevance scoring for single resume lines."""

from __future__ import annotations

import json
import logging
import math

from src.analysis.models import JobDescriptionAnalysis
from src.llm.client import CompletionClient
from src.llm.parsing import extract_json_block
from src.scoring.config import ScoringConfig
from src.scoring.models import ScoreResult
from src.scoring.prompts import SCORING_SYSTEM_PROMPT, build_scoring_prompt

logger = logging.getLogger(__name__)


class ScoringError(Exception):
    """Raised when the model's answer does not match the scoring contract."""

    def __init__(self, reason: str, raw_output: str | None = None):
        super().__init__(reason)
        self.reason = reason
        self.raw_output = raw_output


class ScoringPreconditionError(ScoringError):
    """Raised when there is nothing to score, before any model call."""


class RelevanceScorer:
    """Scores resume lines against a JobDescriptionAnalysis."""

    def __init__(self, client: CompletionClient, config: ScoringConfig | None = None):
        """Initialize the scorer.

        Args:
            client: Completion client used for scoring calls.
            config: Optional ScoringConfig. Uses defaults if not provided.
        """
        self.client = client
        self.config = config or ScoringConfig()

    async def score(
        self, item_text: str, analysis: JobDescriptionAnalysis
    ) -> ScoreResult:
        """Score one resume line.

        Raises:
            ScoringPreconditionError: If the text or the analysis is empty.
            ScoringError: If the response is not the expected JSON shape.
            CompletionError: If the transport fails.
        """
        if not item_text or not item_text.strip():
            raise ScoringPreconditionError("Item text is empty; nothing to score")
        if analysis is None or analysis.is_empty():
            raise ScoringPreconditionError("Job description analysis is empty")

        raw = await self.client.complete(
            build_scoring_prompt(item_text, analysis),
            model=self.config.model,
            temperature=self.config.temperature,
            max_tokens=self.config.max_tokens,
            system_prompt=SCORING_SYSTEM_PROMPT,
        )
        result = parse_score_response(raw)
        logger.debug(f"Scored {result.relevance_score:.2f}: {item_text[:60]}")
        return result


def parse_score_response(raw: str) -> ScoreResult:
    """Validate a scoring response.

    Raises:
        ScoringError: If any key is missing or has the wrong type, or the
            score falls outside [0, 1].
    """
    try:
        data = json.loads(extract_json_block(raw))
    except json.JSONDecodeError as e:
        raise ScoringError(f"Scoring response is not valid JSON: {e}", raw) from e

    if not isinstance(data, dict):
        raise ScoringError("Scoring response is not a JSON object", raw)

    score = data.get("relevanceScore")
    # bool is an int subclass; reject it explicitly
    if isinstance(score, bool) or not isinstance(score, (int, float)):
        raise ScoringError(f"relevanceScore is not a number: {score!r}", raw)
    if math.isnan(score) or not 0.0 <= score <= 1.0:
        raise ScoringError(f"relevanceScore out of range: {score!r}", raw)

    keywords = data.get("matchingKeywords")
    if not isinstance(keywords, list):
        raise ScoringError(f"matchingKeywords is not a list: {keywords!r}", raw)

    justification = data.get("justification")
    if not isinstance(justification, str):
        raise ScoringError(f"justification is not a string: {justification!r}", raw)

    return ScoreResult(
        relevance_score=float(score),
        matching_keywords=[str(k).strip() for k in keywords if str(k).strip()],
        justification=justification.strip(),
    )
