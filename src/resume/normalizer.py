"""Master resume normalizer.

Turns the rows of the master resume table into a canonical ResumeRecord.
Rows are scanned top to bottom: a recognized title row opens a section,
tabular sections read the next non-blank row as their header row, and
body rows are buffered until the next section boundary so each section
is materialized from its complete row set.
"""

from __future__ import annotations

import logging
from collections.abc import Sequence
from dataclasses import dataclass, field

from src.resume.config import NormalizerConfig
from src.resume.fields import (
    END_DATE_FIELDS,
    FIELD_SYNONYMS,
    MULTILINE_FIELDS,
    PERSONAL_INFO_SYNONYMS,
    TABULAR_SECTIONS,
    bullet_column_index,
    cell_text,
    format_date,
    is_blank_row,
    match_section_title,
    normalize_key,
    split_multiline,
    to_camel_key,
)
from src.resume.models import (
    Award,
    Certificate,
    EducationEntry,
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

logger = logging.getLogger(__name__)

DEFAULT_SKILL_CATEGORY = "Technical Skills"
DEFAULT_CERTIFICATE_CATEGORY = "Certificates"


class MalformedInputError(Exception):
    """Raised when the master table is empty or has no recognizable sections."""


@dataclass
class _SectionBuffer:
    """Rows collected for one section before materialization."""

    title: SectionTitle
    header: list[str] | None = None
    awaiting_header: bool = False
    rows: list[Sequence[object]] = field(default_factory=list)


@dataclass
class _RowFields:
    """One data row mapped onto canonical field names."""

    values: dict[str, object]
    bullets: list[str]
    extras: dict[str, str]

    def text(self, key: str) -> str:
        return cell_text(self.values.get(key))

    def date(self, key: str) -> str:
        return format_date(self.values.get(key), is_end_date=key in END_DATE_FIELDS)

    def date_range(self) -> tuple[str, str]:
        """Start/end display strings; ``Present`` only follows a real start."""
        start = self.date("startDate")
        end = self.date("endDate")
        if not start and not self.text("endDate"):
            end = ""
        return start, end

    def is_empty(self) -> bool:
        return not self.bullets and not any(
            value if isinstance(value, list) else cell_text(value)
            for value in self.values.values()
        )


class ResumeNormalizer:
    """Builds a ResumeRecord from raw master-table rows."""

    def __init__(self, config: NormalizerConfig | None = None):
        """Initialize the normalizer.

        Args:
            config: Optional NormalizerConfig. Loaded from the environment if not provided.
        """
        self.config = config or NormalizerConfig()

    def normalize(self, raw_rows: Sequence[Sequence[object]]) -> ResumeRecord:
        """Parse the master table.

        Args:
            raw_rows: Rows of cell values, top to bottom.

        Returns:
            A freshly built ResumeRecord.

        Raises:
            MalformedInputError: If the table is empty or no section title is found.
        """
        rows = [list(row) for row in raw_rows or []]
        if not rows or all(is_blank_row(row) for row in rows):
            raise MalformedInputError("Master resume table is empty")

        personal_info = PersonalInfo()
        summary = ""
        sections: dict[SectionTitle, Section] = {}
        found_any = False

        current: _SectionBuffer | None = None

        def flush(buffer: _SectionBuffer | None) -> None:
            nonlocal personal_info, summary
            if buffer is None:
                return
            if buffer.title == SectionTitle.PERSONAL_INFO:
                personal_info = self._build_personal_info(buffer.rows)
            elif buffer.title == SectionTitle.SUMMARY:
                summary = self._build_summary(buffer.rows)
            else:
                section = self._build_tabular_section(buffer)
                if section is not None:
                    self._merge_section(sections, section)

        for row in rows:
            title = match_section_title(row)
            if title is not None:
                flush(current)
                found_any = True
                current = _SectionBuffer(
                    title=title, awaiting_header=title in TABULAR_SECTIONS
                )
                continue

            if current is None or is_blank_row(row):
                continue

            if current.awaiting_header:
                current.awaiting_header = False
                if self._is_header_row(current.title, row):
                    current.header = [cell_text(cell) for cell in row]
                    continue
                logger.warning(
                    f"No header row found under {current.title.value}; "
                    f"first row was {[cell_text(c) for c in row][:4]}"
                )

            current.rows.append(row)

        flush(current)

        if not found_any:
            raise MalformedInputError(
                "No recognizable section header found in master resume table"
            )

        record = ResumeRecord(
            personal_info=personal_info,
            summary=summary,
            sections=list(sections.values()),
        )
        logger.info(
            f"Normalized master resume: {len(record.sections)} sections, "
            f"{sum(len(s.all_items()) for s in record.sections)} items"
        )
        return record

    # ------------------------------------------------------------------
    # Header detection
    # ------------------------------------------------------------------

    def _is_header_row(self, title: SectionTitle, row: Sequence[object]) -> bool:
        synonyms = FIELD_SYNONYMS[title]
        for cell in row:
            if normalize_key(cell) in synonyms:
                return True
            if bullet_column_index(cell, self.config.max_bullet_columns) is not None:
                return True
        return False

    # ------------------------------------------------------------------
    # Key/value and free-text sections
    # ------------------------------------------------------------------

    def _build_personal_info(self, rows: list[Sequence[object]]) -> PersonalInfo:
        known: dict[str, str] = {}
        extras: dict[str, str] = {}

        for row in rows:
            key = cell_text(row[0]) if row else ""
            value = cell_text(row[1]) if len(row) > 1 else ""
            if not key:
                continue

            canonical = PERSONAL_INFO_SYNONYMS.get(normalize_key(key))
            if canonical is not None:
                if value and not known.get(canonical):
                    known[canonical] = value
                continue

            extra_key = to_camel_key(key)
            if not extra_key or not value:
                continue
            if extra_key not in extras and len(extras) >= self.config.max_extra_fields:
                logger.warning(
                    f"Dropping personal info field '{key}': extension map is full "
                    f"({self.config.max_extra_fields} fields)"
                )
                continue
            extras[extra_key] = value

        return PersonalInfo.model_validate({**known, "extras": extras})

    def _build_summary(self, rows: list[Sequence[object]]) -> str:
        def is_instruction(text: str) -> bool:
            return text.startswith("(") and text.endswith(")")

        lines: list[str] = []
        for row in rows:
            first = cell_text(row[0]) if row else ""
            second = cell_text(row[1]) if len(row) > 1 else ""
            if second and not is_instruction(second):
                lines.append(second)
            elif first and not is_instruction(first):
                lines.append(first)
        return "\n".join(lines)

    # ------------------------------------------------------------------
    # Tabular sections
    # ------------------------------------------------------------------

    def _map_row(
        self, title: SectionTitle, header: list[str], row: Sequence[object]
    ) -> _RowFields:
        synonyms = FIELD_SYNONYMS[title]
        values: dict[str, object] = {}
        numbered: list[tuple[int, str]] = []
        extras: dict[str, str] = {}

        for idx, name in enumerate(header):
            if not name:
                continue
            value = row[idx] if idx < len(row) else None

            number = bullet_column_index(name, self.config.max_bullet_columns)
            if number is not None:
                text = cell_text(value)
                if text:
                    numbered.append((number, text))
                continue

            key = synonyms.get(normalize_key(name))
            if key is None:
                extra_key = to_camel_key(name)
                text = cell_text(value)
                if extra_key and text:
                    extras[extra_key] = text
                continue

            # First non-empty column wins when two headers map to one field
            if cell_text(values.get(key)):
                continue
            values[key] = value

        numbered.sort(key=lambda pair: pair[0])
        bullets = [text for _, text in numbered]

        # Multi-line fields are the only list-valued cells
        for key in MULTILINE_FIELDS:
            if key in values:
                values[key] = split_multiline(values[key])

        return _RowFields(values=values, bullets=bullets, extras=extras)

    def _build_tabular_section(self, buffer: _SectionBuffer) -> Section | None:
        if buffer.header is None:
            if buffer.rows:
                logger.warning(
                    f"Dropping section {buffer.title.value}: {len(buffer.rows)} data "
                    "rows but no header row"
                )
            return None

        mapped = [self._map_row(buffer.title, buffer.header, row) for row in buffer.rows]
        mapped = [fields for fields in mapped if not fields.is_empty()]

        title = buffer.title
        if title == SectionTitle.TECHNICAL_SKILLS:
            return Section(title=title, subsections=self._build_skill_groups(mapped))

        if title == SectionTitle.PROJECTS:
            projects = [self._build_project(fields) for fields in mapped]
            subsections = []
            if projects:
                subsections.append(
                    Subsection(name=self.config.default_project_group, items=projects)
                )
            return Section(title=title, subsections=subsections)

        builders = {
            SectionTitle.EXPERIENCE: self._build_job,
            SectionTitle.EDUCATION: self._build_education,
            SectionTitle.LEADERSHIP: self._build_leadership,
            SectionTitle.HONORS: self._build_award,
        }
        return Section(title=title, items=[builders[title](fields) for fields in mapped])

    def _build_job(self, fields: _RowFields) -> Job:
        start, end = fields.date_range()
        return Job(
            company=fields.text("company"),
            job_title=fields.text("jobTitle"),
            location=fields.text("location"),
            start_date=start,
            end_date=end,
            responsibilities=fields.bullets,
            extras=fields.extras,
        )

    def _build_education(self, fields: _RowFields) -> EducationEntry:
        start, end = fields.date_range()
        return EducationEntry(
            institution=fields.text("institution"),
            degree=fields.text("degree"),
            field_of_study=fields.text("fieldOfStudy"),
            location=fields.text("location"),
            start_date=start,
            end_date=end,
            gpa=fields.text("gpa"),
            relevant_coursework=fields.values.get("relevantCoursework") or [],
            description_bullets=fields.bullets,
            extras=fields.extras,
        )

    def _build_project(self, fields: _RowFields) -> Project:
        start, end = fields.date_range()
        return Project(
            project_name=fields.text("projectName"),
            role=fields.text("role"),
            organization=fields.text("organization"),
            start_date=start,
            end_date=end,
            technologies=fields.values.get("technologies") or [],
            link=fields.text("link"),
            description_bullets=fields.bullets,
            extras=fields.extras,
        )

    def _build_leadership(self, fields: _RowFields) -> LeadershipEntry:
        start, end = fields.date_range()
        return LeadershipEntry(
            organization=fields.text("organization"),
            role=fields.text("role"),
            location=fields.text("location"),
            start_date=start,
            end_date=end,
            description_bullets=fields.bullets,
            extras=fields.extras,
        )

    def _build_award(self, fields: _RowFields) -> Award:
        return Award(
            name=fields.text("name"),
            issuer=fields.text("issuer"),
            date=fields.date("date"),
            description=fields.text("description"),
            extras=fields.extras,
        )

    def _build_skill_groups(self, mapped: list[_RowFields]) -> list[Subsection]:
        groups: dict[str, list[Skill | Certificate]] = {}

        for fields in mapped:
            is_certificate = bool(fields.text("issuer") or fields.text("issueDate"))
            if is_certificate:
                name = fields.text("certificateName") or fields.text("skill")
                if not name:
                    continue
                item: Skill | Certificate = Certificate(
                    name=name,
                    issuer=fields.text("issuer"),
                    issue_date=fields.date("issueDate"),
                    extras=fields.extras,
                )
                default_category = DEFAULT_CERTIFICATE_CATEGORY
            else:
                name = fields.text("skill") or fields.text("certificateName")
                if not name:
                    continue
                item = Skill(skill=name, details=fields.text("details"), extras=fields.extras)
                default_category = DEFAULT_SKILL_CATEGORY

            category = fields.text("category") or default_category
            groups.setdefault(category, []).append(item)

        return [Subsection(name=name, items=items) for name, items in groups.items()]

    def _merge_section(
        self, sections: dict[SectionTitle, Section], section: Section
    ) -> None:
        existing = sections.get(section.title)
        if existing is None:
            sections[section.title] = section
            return

        logger.warning(f"Section {section.title.value} appears twice; merging rows")
        if existing.subsections is not None:
            by_name = {sub.name: sub for sub in existing.subsections}
            for sub in section.subsections or []:
                if sub.name in by_name:
                    by_name[sub.name].items.extend(sub.items)
                else:
                    existing.subsections.append(sub)
                    by_name[sub.name] = sub
        else:
            existing.items = [*(existing.items or []), *(section.items or [])]

