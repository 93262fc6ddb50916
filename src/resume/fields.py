"""Lookup tables and cell-level helpers used by the normalizer.

Covers section title detection, header-name synonyms, numbered bullet
columns, camelCase fallback keys, multi-line cells and date display
strings.
"""

from __future__ import annotations

import re
from datetime import date, datetime

from src.resume.models import SectionTitle

# Aliases are matched against the upper-cased first cell of a row, which must
# equal or start with one of them. Longer aliases are listed first.
SECTION_ALIASES: dict[SectionTitle, tuple[str, ...]] = {
    SectionTitle.PERSONAL_INFO: (
        "PERSONAL INFORMATION",
        "PERSONAL INFO",
        "CONTACT INFORMATION",
        "CONTACT INFO",
    ),
    SectionTitle.SUMMARY: ("PROFESSIONAL SUMMARY", "SUMMARY", "OBJECTIVE"),
    SectionTitle.EDUCATION: ("EDUCATION",),
    SectionTitle.EXPERIENCE: (
        "PROFESSIONAL EXPERIENCE",
        "WORK EXPERIENCE",
        "EXPERIENCE",
        "EMPLOYMENT",
    ),
    SectionTitle.PROJECTS: ("PROJECTS",),
    SectionTitle.TECHNICAL_SKILLS: (
        "TECHNICAL SKILLS",
        "SKILLS",
        "CERTIFICATES",
        "CERTIFICATIONS",
    ),
    SectionTitle.LEADERSHIP: (
        "LEADERSHIP",
        "UNIVERSITY INVOLVEMENT",
        "INVOLVEMENT",
        "ACTIVITIES",
    ),
    SectionTitle.HONORS: ("HONORS", "AWARDS"),
}

# Longest section titles stay under this length; longer cells are data.
_MAX_TITLE_CELL_LENGTH = 60

TABULAR_SECTIONS = frozenset(
    {
        SectionTitle.EDUCATION,
        SectionTitle.EXPERIENCE,
        SectionTitle.PROJECTS,
        SectionTitle.TECHNICAL_SKILLS,
        SectionTitle.LEADERSHIP,
        SectionTitle.HONORS,
    }
)

PERSONAL_INFO_SYNONYMS: dict[str, str] = {
    "name": "fullName",
    "fullname": "fullName",
    "candidatename": "fullName",
    "email": "email",
    "emailaddress": "email",
    "phone": "phone",
    "phonenumber": "phone",
    "mobile": "phone",
    "location": "location",
    "address": "location",
    "city": "location",
    "linkedin": "linkedin",
    "linkedinurl": "linkedin",
    "linkedinprofile": "linkedin",
    "github": "github",
    "githuburl": "github",
    "githubprofile": "github",
    "portfolio": "portfolio",
    "portfoliourl": "portfolio",
    "website": "portfolio",
    "personalwebsite": "portfolio",
}

FIELD_SYNONYMS: dict[SectionTitle, dict[str, str]] = {
    SectionTitle.EXPERIENCE: {
        "company": "company",
        "companyname": "company",
        "employer": "company",
        "organization": "company",
        "jobtitle": "jobTitle",
        "title": "jobTitle",
        "role": "jobTitle",
        "position": "jobTitle",
        "location": "location",
        "city": "location",
        "startdate": "startDate",
        "start": "startDate",
        "enddate": "endDate",
        "end": "endDate",
    },
    SectionTitle.EDUCATION: {
        "institution": "institution",
        "school": "institution",
        "university": "institution",
        "college": "institution",
        "degree": "degree",
        "major": "fieldOfStudy",
        "fieldofstudy": "fieldOfStudy",
        "field": "fieldOfStudy",
        "location": "location",
        "startdate": "startDate",
        "enddate": "endDate",
        "graduationdate": "endDate",
        "graddate": "endDate",
        "gpa": "gpa",
        "relevantcoursework": "relevantCoursework",
        "coursework": "relevantCoursework",
    },
    SectionTitle.PROJECTS: {
        "projectname": "projectName",
        "project": "projectName",
        "name": "projectName",
        "title": "projectName",
        "role": "role",
        "organization": "organization",
        "startdate": "startDate",
        "enddate": "endDate",
        "technologies": "technologies",
        "technologiesused": "technologies",
        "techstack": "technologies",
        "tools": "technologies",
        "link": "link",
        "url": "link",
        "githublink": "link",
        "projectlink": "link",
    },
    SectionTitle.TECHNICAL_SKILLS: {
        "category": "category",
        "skillcategory": "category",
        "type": "category",
        "skill": "skill",
        "skillname": "skill",
        "details": "details",
        "proficiency": "details",
        "level": "details",
        "certificatename": "certificateName",
        "certificate": "certificateName",
        "certification": "certificateName",
        "certname": "certificateName",
        "issuer": "issuer",
        "issuingorganization": "issuer",
        "issuedby": "issuer",
        "issuedate": "issueDate",
        "dateissued": "issueDate",
    },
    SectionTitle.LEADERSHIP: {
        "organization": "organization",
        "org": "organization",
        "club": "organization",
        "role": "role",
        "position": "role",
        "title": "role",
        "location": "location",
        "startdate": "startDate",
        "enddate": "endDate",
    },
    SectionTitle.HONORS: {
        "awardname": "name",
        "award": "name",
        "honor": "name",
        "name": "name",
        "title": "name",
        "issuer": "issuer",
        "organization": "issuer",
        "awardedby": "issuer",
        "date": "date",
        "awarddate": "date",
        "description": "description",
        "details": "description",
    },
}

MULTILINE_FIELDS = frozenset({"technologies", "relevantCoursework"})
START_DATE_FIELDS = frozenset({"startDate", "issueDate", "date"})
END_DATE_FIELDS = frozenset({"endDate"})

_BULLET_COLUMN_RE = re.compile(r"^(?:responsibility|descriptionbullet|bullet)(\d+)$")
_MONTH_YEAR_RE = re.compile(
    r"^(jan|feb|mar|apr|may|jun|jul|aug|sep|sept|oct|nov|dec)[a-z]*\.?\s+\d{4}$",
    re.IGNORECASE,
)
_YEAR_RE = re.compile(r"^\d{4}$")
_DATE_FORMATS = (
    "%Y-%m-%d",
    "%Y-%m-%dT%H:%M:%S",
    "%Y-%m-%dT%H:%M:%S.%f",
    "%Y-%m-%d %H:%M:%S",
    "%m/%d/%Y",
    "%Y/%m/%d",
    "%Y-%m",
    "%m/%Y",
)
DISPLAY_DATE_FORMAT = "%B %Y"
PRESENT = "Present"


def cell_text(value: object) -> str:
    """Render a raw cell value as trimmed text."""
    if value is None:
        return ""
    if isinstance(value, float) and value.is_integer():
        return str(int(value))
    return str(value).strip()


def is_blank_row(row: list[object]) -> bool:
    return all(not cell_text(cell) for cell in row)


def match_section_title(row: list[object]) -> SectionTitle | None:
    """Return the canonical section a row's first cell names, if any.

    An exact alias always matches. A prefix match (e.g. "SKILLS & TOOLS")
    only counts when the rest of the row is blank, so a data row whose
    first cell happens to begin with a section word stays data.
    """
    if not row:
        return None
    text = cell_text(row[0]).rstrip(":").strip().upper()
    if not text or len(text) > _MAX_TITLE_CELL_LENGTH:
        return None
    rest_blank = all(not cell_text(cell) for cell in row[1:])
    for section, aliases in SECTION_ALIASES.items():
        for alias in (section.value, *aliases):
            if text == alias:
                return section
            if rest_blank and text.startswith(alias):
                return section
    return None


def normalize_key(value: object) -> str:
    """Lower-case a header/key cell and drop whitespace and punctuation."""
    return re.sub(r"[^a-z0-9]", "", cell_text(value).lower())


def to_camel_key(value: object) -> str:
    """Generic camelCase conversion for unrecognized header names."""
    words = re.findall(r"[A-Za-z0-9]+", cell_text(value))
    if not words:
        return ""
    first, *rest = words
    return first.lower() + "".join(w[:1].upper() + w[1:].lower() for w in rest)


def bullet_column_index(header: object, max_columns: int) -> int | None:
    """Return N for a ``Responsibility<N>``-style header within 1..max_columns."""
    match = _BULLET_COLUMN_RE.match(normalize_key(header))
    if not match:
        return None
    index = int(match.group(1))
    if 1 <= index <= max_columns:
        return index
    return None


def split_multiline(value: object) -> list[str]:
    """Split a multi-line cell into trimmed, non-empty entries."""
    text = cell_text(value).replace("\\n", "\n").replace("\r\n", "\n")
    return [part.strip() for part in text.split("\n") if part.strip()]


def format_date(value: object, *, is_end_date: bool = False) -> str:
    """Format a date cell as ``Month YYYY`` where possible.

    Bare years and strings already shaped like ``Month YYYY`` pass through,
    anything unparseable is returned verbatim, and an empty end date reads
    ``Present``.
    """
    if isinstance(value, datetime | date):
        return value.strftime(DISPLAY_DATE_FORMAT)

    text = cell_text(value)
    if not text:
        return PRESENT if is_end_date else ""

    if _YEAR_RE.match(text) or _MONTH_YEAR_RE.match(text):
        return text

    for fmt in _DATE_FORMATS:
        try:
            return datetime.strptime(text, fmt).strftime(DISPLAY_DATE_FORMAT)
        except ValueError:
            continue

    try:
        return datetime.fromisoformat(text).strftime(DISPLAY_DATE_FORMAT)
    except ValueError:
        return text
