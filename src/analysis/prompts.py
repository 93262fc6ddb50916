"""Prompt builder for job description analysis."""

from __future__ import annotations

ANALYSIS_SYSTEM_PROMPT = """You are an expert technical recruiter who extracts structured data from job postings.

You must follow these rules:
- Only report information stated or clearly implied by the posting. Do NOT invent requirements.
- Use "" for unknown text fields and [] for unknown lists.
- Output MUST be a single valid JSON object only (no markdown, no commentary).
"""


def build_analysis_prompt(jd_text: str) -> str:
    """Build the user prompt for structured job description analysis."""
    return "\n".join(
        [
            "Analyze the job description below and return a JSON object with exactly these keys:",
            '- "jobTitle": string',
            '- "companyName": string',
            '- "location": string',
            '- "keyResponsibilities": array of strings',
            '- "requiredTechnicalSkills": array of strings',
            '- "requiredSoftSkills": array of strings',
            '- "experienceLevel": string',
            '- "educationRequirements": string',
            '- "primaryKeywords": array of 10-15 strings an ATS would match on',
            '- "companyCultureClues": array of strings',
            "",
            "Job description:",
            '"""',
            jd_text.strip(),
            '"""',
        ]
    )
