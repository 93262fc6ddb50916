"""Prompt builders for bullet tailoring."""

from __future__ import annotations

from src.analysis.models import JobDescriptionAnalysis
from src.selection.models import NOT_SUITABLE

TAILORING_SYSTEM_PROMPT = f"""You are an expert resume writer who rewrites one resume bullet for a specific job.

You must follow these rules:
- NEVER invent experience, employers, metrics, or technologies. Only rephrase what the bullet already says.
- Mirror the job's terminology where the bullet genuinely supports it.
- Keep it to one concise line starting with a strong action verb.
- If the bullet cannot be meaningfully tailored toward the role, answer with exactly:
  {NOT_SUITABLE}
- Output a JSON object {{"rewritten_bullet": "..."}} and nothing else.
"""


def build_tailoring_prompt(
    original_text: str,
    analysis: JobDescriptionAnalysis,
    target_role_title: str,
) -> str:
    """Build the user prompt for rewriting one bullet."""
    keywords = ", ".join(analysis.primary_keywords) or "(none listed)"
    skills = ", ".join(analysis.required_technical_skills) or "(none listed)"
    responsibilities = "\n".join(f"- {r}" for r in analysis.key_responsibilities)

    return "\n".join(
        [
            f"## Target role: {target_role_title or analysis.job_title or '(unknown)'}",
            f"Company: {analysis.company_name or '(unknown)'}",
            f"Primary keywords: {keywords}",
            f"Required technical skills: {skills}",
            "Key responsibilities:",
            responsibilities or "- (none listed)",
            "",
            "## Original bullet",
            original_text.strip(),
            "",
            'Return {"rewritten_bullet": "<rewritten text>"}.',
        ]
    )
