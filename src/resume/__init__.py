"""Master resume data model and normalization.

Public API:
    - ResumeNormalizer: Builds a ResumeRecord from master-table rows
    - MalformedInputError: Raised for empty or unrecognizable tables
    - ResumeRecord / FinalResumeRecord: Canonical and assembled records
    - SectionTitle: Canonical section titles
"""

from src.resume.config import NormalizerConfig
from src.resume.models import (
    GROUPED_SECTIONS,
    SECTION_ORDER,
    Award,
    Certificate,
    EducationEntry,
    FinalResumeRecord,
    Job,
    LeadershipEntry,
    PersonalInfo,
    Project,
    ResumeRecord,
    Section,
    SectionTitle,
    Skill,
    Subsection,
)
from src.resume.normalizer import MalformedInputError, ResumeNormalizer

__all__ = [
    "ResumeNormalizer",
    "MalformedInputError",
    "NormalizerConfig",
    "ResumeRecord",
    "FinalResumeRecord",
    "PersonalInfo",
    "Section",
    "Subsection",
    "SectionTitle",
    "SECTION_ORDER",
    "GROUPED_SECTIONS",
    "Job",
    "EducationEntry",
    "Project",
    "Skill",
    "Certificate",
    "LeadershipEntry",
    "Award",
]
