"""Prompt builders for relevance scoring."""

from __future__ import annotations

from src.analysis.models import JobDescriptionAnalysis

SCORING_SYSTEM_PROMPT = """You are an expert resume reviewer who rates how relevant a single resume line is to a job.

You must follow these rules:
- Judge only the text you are given against the job analysis. Do NOT assume experience that is not written.
- relevanceScore is a number from 0.0 (irrelevant) to 1.0 (directly matches the role).
- Output MUST be a single valid JSON object only (no markdown, no commentary).
"""


def _bullet_list(values: list[str]) -> str:
    return ", ".join(values) if values else "(none listed)"


def build_scoring_prompt(item_text: str, analysis: JobDescriptionAnalysis) -> str:
    """Build the user prompt for scoring one resume line."""
    return "\n".join(
        [
            "## Job analysis",
            f"Title: {analysis.job_title or '(unknown)'}",
            f"Company: {analysis.company_name or '(unknown)'}",
            f"Experience level: {analysis.experience_level or '(unspecified)'}",
            f"Key responsibilities: {_bullet_list(analysis.key_responsibilities)}",
            f"Required technical skills: {_bullet_list(analysis.required_technical_skills)}",
            f"Required soft skills: {_bullet_list(analysis.required_soft_skills)}",
            f"Primary keywords: {_bullet_list(analysis.primary_keywords)}",
            "",
            "## Resume line",
            item_text.strip(),
            "",
            "Return a JSON object with exactly these keys:",
            '- "relevanceScore": number between 0.0 and 1.0',
            '- "matchingKeywords": array of job keywords the line demonstrates',
            '- "justification": one sentence explaining the score',
        ]
    )
