"""Data models for the canonical resume record.

Contains Pydantic models for:
- PersonalInfo: Header/contact fields plus a bounded extension map
- Item variants: Job, EducationEntry, Project, Skill, Certificate,
  LeadershipEntry, Award
- Section / Subsection: Flat or grouped section bodies
- ResumeRecord: The normalized master resume
- FinalResumeRecord: The assembled, job-specific resume
"""

from __future__ import annotations

from datetime import datetime
from enum import Enum
from typing import Annotated, Any, ClassVar, Literal, Union

from pydantic import BaseModel, ConfigDict, Field, field_validator, model_validator
from pydantic.alias_generators import to_camel


class SectionTitle(str, Enum):
    """Canonical section titles recognized in the master resume."""

    PERSONAL_INFO = "PERSONAL INFO"
    SUMMARY = "SUMMARY"
    EDUCATION = "EDUCATION"
    EXPERIENCE = "EXPERIENCE"
    PROJECTS = "PROJECTS"
    TECHNICAL_SKILLS = "TECHNICAL SKILLS & CERTIFICATES"
    LEADERSHIP = "LEADERSHIP & UNIVERSITY INVOLVEMENT"
    HONORS = "HONORS & AWARDS"


# Body sections in the order they appear in a rendered resume.
SECTION_ORDER: tuple[SectionTitle, ...] = (
    SectionTitle.EDUCATION,
    SectionTitle.EXPERIENCE,
    SectionTitle.PROJECTS,
    SectionTitle.TECHNICAL_SKILLS,
    SectionTitle.LEADERSHIP,
    SectionTitle.HONORS,
)

GROUPED_SECTIONS = frozenset({SectionTitle.PROJECTS, SectionTitle.TECHNICAL_SKILLS})


def _clean_text_list(value: object) -> list[str]:
    """Trim every entry and drop the blank ones."""
    if value is None:
        return []
    if isinstance(value, str):
        value = [value]
    cleaned = []
    for entry in value:
        if entry is None:
            continue
        text = str(entry).strip()
        if text:
            cleaned.append(text)
    return cleaned


class ResumeModel(BaseModel):
    """Base model: snake_case attributes, camelCase field names on the wire."""

    model_config = ConfigDict(
        alias_generator=to_camel,
        populate_by_name=True,
        extra="ignore",
    )


class PersonalInfo(ResumeModel):
    """Contact and header fields for the candidate."""

    full_name: str = ""
    email: str = ""
    phone: str = ""
    location: str = ""
    linkedin: str = ""
    github: str = ""
    portfolio: str = ""
    extras: dict[str, str] = Field(
        default_factory=dict, description="Unrecognized keys, camelCased"
    )

    def links(self) -> list[tuple[str, str]]:
        """Return (label, url) pairs for the profile links that are present."""
        pairs = [
            ("LinkedIn", self.linkedin),
            ("GitHub", self.github),
            ("Portfolio", self.portfolio),
        ]
        return [(label, url) for label, url in pairs if url.strip()]


class BaseItem(ResumeModel):
    """Fields and helpers shared by every item variant."""

    extras: dict[str, str] = Field(default_factory=dict)

    # Name of the bullet field, if the variant has one
    bullet_field: ClassVar[str | None] = None

    @field_validator(
        "responsibilities",
        "description_bullets",
        "technologies",
        "relevant_coursework",
        mode="before",
        check_fields=False,
    )
    @classmethod
    def clean_text_lists(cls, v: object) -> list[str]:
        return _clean_text_list(v)

    def natural_key(self) -> str:
        """Human-readable identifier used to correlate scored rows."""
        raise NotImplementedError

    @property
    def bullets(self) -> list[str]:
        if self.bullet_field is None:
            return []
        return list(getattr(self, self.bullet_field))

    def with_bullets(self, bullets: list[str]) -> BaseItem:
        """Return a copy carrying only the given bullets."""
        if self.bullet_field is None:
            return self.model_copy()
        return self.model_copy(update={self.bullet_field: _clean_text_list(bullets)})


class Job(BaseItem):
    """A position in the EXPERIENCE section."""

    kind: Literal["job"] = "job"
    company: str = ""
    job_title: str = ""
    location: str = ""
    start_date: str = ""
    end_date: str = ""
    responsibilities: list[str] = Field(default_factory=list)

    bullet_field: ClassVar[str | None] = "responsibilities"

    def natural_key(self) -> str:
        return self.company


class EducationEntry(BaseItem):
    """A school entry in the EDUCATION section."""

    kind: Literal["education"] = "education"
    institution: str = ""
    degree: str = ""
    field_of_study: str = ""
    location: str = ""
    start_date: str = ""
    end_date: str = ""
    gpa: str = ""
    relevant_coursework: list[str] = Field(default_factory=list)
    description_bullets: list[str] = Field(default_factory=list)

    bullet_field: ClassVar[str | None] = "description_bullets"

    def natural_key(self) -> str:
        return self.institution


class Project(BaseItem):
    """A project in the PROJECTS section."""

    kind: Literal["project"] = "project"
    project_name: str = ""
    role: str = ""
    organization: str = ""
    start_date: str = ""
    end_date: str = ""
    technologies: list[str] = Field(default_factory=list)
    link: str = ""
    description_bullets: list[str] = Field(default_factory=list)

    bullet_field: ClassVar[str | None] = "description_bullets"

    def natural_key(self) -> str:
        return self.project_name


class Skill(BaseItem):
    """A skill row in TECHNICAL SKILLS & CERTIFICATES."""

    kind: Literal["skill"] = "skill"
    skill: str = ""
    details: str = ""

    def natural_key(self) -> str:
        return self.skill

    def display_text(self) -> str:
        if self.details:
            return f"{self.skill} ({self.details})"
        return self.skill


class Certificate(BaseItem):
    """A certificate row in TECHNICAL SKILLS & CERTIFICATES."""

    kind: Literal["certificate"] = "certificate"
    name: str = ""
    issuer: str = ""
    issue_date: str = ""

    def natural_key(self) -> str:
        return self.name

    def display_text(self) -> str:
        parts = [self.name]
        if self.issuer:
            parts.append(self.issuer)
        text = " - ".join(parts)
        if self.issue_date:
            text = f"{text} ({self.issue_date})"
        return text


class LeadershipEntry(BaseItem):
    """A role in LEADERSHIP & UNIVERSITY INVOLVEMENT."""

    kind: Literal["leadership"] = "leadership"
    organization: str = ""
    role: str = ""
    location: str = ""
    start_date: str = ""
    end_date: str = ""
    description_bullets: list[str] = Field(default_factory=list)

    bullet_field: ClassVar[str | None] = "description_bullets"

    def natural_key(self) -> str:
        return self.organization or self.role


class Award(BaseItem):
    """An entry in HONORS & AWARDS."""

    kind: Literal["award"] = "award"
    name: str = ""
    issuer: str = ""
    date: str = ""
    description: str = ""

    def natural_key(self) -> str:
        return self.name


Item = Annotated[
    Union[Job, EducationEntry, Project, Skill, Certificate, LeadershipEntry, Award],
    Field(discriminator="kind"),
]


class Subsection(ResumeModel):
    """A named group of items inside a grouped section."""

    name: str
    items: list[Item] = Field(default_factory=list)


class Section(ResumeModel):
    """A resume section: flat (``items``) or grouped (``subsections``)."""

    title: SectionTitle
    items: list[Item] | None = None
    subsections: list[Subsection] | None = None

    @model_validator(mode="after")
    def check_shape(self) -> Section:
        if self.items is not None and self.subsections is not None:
            raise ValueError(
                f"Section {self.title.value} cannot have both items and subsections"
            )
        if self.items is None and self.subsections is None:
            if self.title in GROUPED_SECTIONS:
                self.subsections = []
            else:
                self.items = []
        return self

    @property
    def is_grouped(self) -> bool:
        return self.subsections is not None

    def all_items(self) -> list[Any]:
        """Items in document order, flattened across subsections."""
        if self.subsections is not None:
            return [item for sub in self.subsections for item in sub.items]
        return list(self.items or [])

    def is_empty(self) -> bool:
        if self.subsections is not None:
            return not any(sub.items for sub in self.subsections)
        return not self.items


class ResumeRecord(ResumeModel):
    """Canonical resume record built from the master table."""

    personal_info: PersonalInfo = Field(default_factory=PersonalInfo)
    summary: str = ""
    sections: list[Section] = Field(default_factory=list)

    @field_validator("sections")
    @classmethod
    def unique_titles(cls, v: list[Section]) -> list[Section]:
        seen: set[SectionTitle] = set()
        for section in v:
            if section.title in seen:
                raise ValueError(f"Duplicate section: {section.title.value}")
            seen.add(section.title)
        return v

    def get_section(self, title: SectionTitle) -> Section | None:
        return next((s for s in self.sections if s.title == title), None)

    def to_dict(self) -> dict[str, Any]:
        """Serialize to dictionary."""
        return self.model_dump(mode="json", by_alias=True)

    @classmethod
    def from_dict(cls, data: dict[str, Any]) -> ResumeRecord:
        """Deserialize from dictionary."""
        return cls.model_validate(data)


class FinalResumeRecord(ResumeRecord):
    """Resume assembled for one job description, consumed by the renderer."""

    target_job_title: str = ""
    target_company: str = ""
    generated_at: datetime = Field(default_factory=datetime.now)
