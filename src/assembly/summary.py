"""Professional summary generation for the assembled resume."""

from __future__ import annotations

import logging

from src.analysis.models import JobDescriptionAnalysis
from src.assembly.config import AssemblyConfig
from src.llm.client import CompletionClient
from src.llm.parsing import strip_code_fences
from src.selection.models import is_error_marker

logger = logging.getLogger(__name__)

SUMMARY_SYSTEM_PROMPT = """You are an expert resume writer.

You must follow these rules:
- Write a 2-3 sentence professional summary in the first person implied (no "I").
- Use ONLY facts present in the highlights. Do NOT invent employers, years, or metrics.
- Output plain text only (no markdown, no quotes, no preamble).
"""


class SummaryError(Exception):
    """Raised when the generated summary is unusable."""

    def __init__(self, reason: str, raw_output: str | None = None):
        super().__init__(reason)
        self.reason = reason
        self.raw_output = raw_output


def build_summary_prompt(
    highlights: str, analysis: JobDescriptionAnalysis, candidate_name: str
) -> str:
    """Build the user prompt for summary generation."""
    keywords = ", ".join(analysis.primary_keywords) or "(none listed)"
    return "\n".join(
        [
            f"Candidate: {candidate_name or '(unnamed)'}",
            f"Target role: {analysis.job_title or '(unknown)'} at {analysis.company_name or '(unknown)'}",
            f"Role keywords: {keywords}",
            "",
            "Highlights from the candidate's resume:",
            highlights,
            "",
            "Write the professional summary.",
        ]
    )


class SummaryGenerator:
    """Generates a job-specific professional summary."""

    def __init__(self, client: CompletionClient, config: AssemblyConfig | None = None):
        self.client = client
        self.config = config or AssemblyConfig()

    async def generate(
        self,
        highlights: str,
        analysis: JobDescriptionAnalysis,
        candidate_name: str,
    ) -> str:
        """Generate a summary from highlight text.

        Raises:
            SummaryError: If the model returns nothing usable.
            CompletionError: If the transport fails.
        """
        raw = await self.client.complete(
            build_summary_prompt(highlights, analysis, candidate_name),
            temperature=self.config.summary_temperature,
            max_tokens=self.config.summary_max_tokens,
            system_prompt=SUMMARY_SYSTEM_PROMPT,
        )
        text = strip_code_fences(raw or "").strip().strip('"').strip()
        if not text:
            raise SummaryError("Summary response is empty", raw)
        if is_error_marker(text):
            raise SummaryError(f"Summary response is an error marker: {text[:80]}", raw)
        return text
