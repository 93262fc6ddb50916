"""Job description analysis via the completion client."""

from __future__ import annotations

import json
import logging

from pydantic import ValidationError

from src.analysis.models import JobDescriptionAnalysis
from src.analysis.prompts import ANALYSIS_SYSTEM_PROMPT, build_analysis_prompt
from src.llm.client import CompletionClient
from src.llm.parsing import extract_json_block

logger = logging.getLogger(__name__)


class AnalysisError(Exception):
    """Raised when the job description cannot be analyzed."""

    def __init__(self, reason: str, raw_output: str | None = None):
        super().__init__(reason)
        self.reason = reason
        self.raw_output = raw_output


class JobDescriptionAnalyzer:
    """Turns free-text job descriptions into a JobDescriptionAnalysis."""

    def __init__(self, client: CompletionClient, max_tokens: int = 2048):
        self.client = client
        self.max_tokens = max_tokens

    async def analyze(self, jd_text: str) -> JobDescriptionAnalysis:
        """Analyze a job description.

        Args:
            jd_text: The raw job description.

        Returns:
            JobDescriptionAnalysis with every key present.

        Raises:
            AnalysisError: If the text is empty or the response is malformed.
            CompletionError: If the transport fails.
        """
        if not jd_text or not jd_text.strip():
            raise AnalysisError("Job description text is empty")

        raw = await self.client.complete(
            build_analysis_prompt(jd_text),
            system_prompt=ANALYSIS_SYSTEM_PROMPT,
            max_tokens=self.max_tokens,
        )
        analysis = parse_analysis(raw)
        logger.info(
            f"Analyzed job description: {analysis.job_title or 'untitled'} at "
            f"{analysis.company_name or 'unknown company'} "
            f"({len(analysis.primary_keywords)} keywords)"
        )
        return analysis


def parse_analysis(raw: str) -> JobDescriptionAnalysis:
    """Parse a model response into a JobDescriptionAnalysis.

    Raises:
        AnalysisError: If the response is not a JSON object of the expected shape.
    """
    try:
        data = json.loads(extract_json_block(raw))
    except json.JSONDecodeError as e:
        raise AnalysisError(f"Analysis response is not valid JSON: {e}", raw) from e

    if not isinstance(data, dict):
        raise AnalysisError("Analysis response is not a JSON object", raw)

    try:
        analysis = JobDescriptionAnalysis.model_validate(data)
    except ValidationError as e:
        raise AnalysisError(f"Analysis response failed validation: {e}", raw) from e

    if analysis.is_empty():
        raise AnalysisError("Analysis response contained no recognizable fields", raw)
    return analysis
