"""Data model for a structured job description analysis."""

from __future__ import annotations

from typing import Any

from pydantic import BaseModel, ConfigDict, Field, field_validator
from pydantic.alias_generators import to_camel

_LIST_FIELDS = (
    "key_responsibilities",
    "required_technical_skills",
    "required_soft_skills",
    "primary_keywords",
    "company_culture_clues",
)
_TEXT_FIELDS = (
    "job_title",
    "company_name",
    "location",
    "experience_level",
    "education_requirements",
)


class JobDescriptionAnalysis(BaseModel):
    """Structured view of a job description.

    Every key is always present: missing text is "" and missing lists are [].
    """

    model_config = ConfigDict(
        alias_generator=to_camel,
        populate_by_name=True,
        extra="ignore",
    )

    job_title: str = Field(default="", description="Title of the advertised role")
    company_name: str = Field(default="", description="Hiring company")
    location: str = Field(default="", description="Role location")
    key_responsibilities: list[str] = Field(default_factory=list)
    required_technical_skills: list[str] = Field(default_factory=list)
    required_soft_skills: list[str] = Field(default_factory=list)
    experience_level: str = Field(default="", description="Seniority or years required")
    education_requirements: str = Field(default="", description="Degree requirements")
    primary_keywords: list[str] = Field(default_factory=list)
    company_culture_clues: list[str] = Field(default_factory=list)

    @field_validator(*_TEXT_FIELDS, mode="before")
    @classmethod
    def coerce_text(cls, v: object) -> str:
        if v is None:
            return ""
        if isinstance(v, list):
            return ", ".join(str(item).strip() for item in v if str(item).strip())
        return str(v).strip()

    @field_validator(*_LIST_FIELDS, mode="before")
    @classmethod
    def coerce_list(cls, v: object) -> list[str]:
        if v is None:
            return []
        if isinstance(v, str):
            v = [part for part in v.split(",")]
        if not isinstance(v, list):
            v = [v]
        return [str(item).strip() for item in v if item is not None and str(item).strip()]

    def is_empty(self) -> bool:
        """True when the analysis carries no usable content at all."""
        return not any(getattr(self, name) for name in (*_TEXT_FIELDS, *_LIST_FIELDS))

    def to_dict(self) -> dict[str, Any]:
        """Serialize to a camelCase dictionary."""
        return self.model_dump(mode="json", by_alias=True)

    @classmethod
    def from_dict(cls, data: dict[str, Any]) -> JobDescriptionAnalysis:
        """Deserialize from dictionary."""
        return cls.model_validate(data)
