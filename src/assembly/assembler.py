"""Stage 3: join the selection table back onto the master record.

Each master item is matched to its selection rows by (section title,
natural key). Only rows that are selected and at or above the inclusion
threshold survive; the best-scored survivors become the item's bullets and
items without survivors are dropped.
"""

from __future__ import annotations

import logging
from collections import defaultdict
from collections.abc import Sequence

from src.analysis.models import JobDescriptionAnalysis
from src.assembly.config import AssemblyConfig
from src.assembly.summary import SummaryError, SummaryGenerator
from src.llm.client import CompletionError
from src.resume.models import (
    SECTION_ORDER,
    Certificate,
    FinalResumeRecord,
    ResumeRecord,
    Section,
    SectionTitle,
    Skill,
    Subsection,
)
from src.resume.normalizer import DEFAULT_SKILL_CATEGORY
from src.selection.models import ScoredItemEntry
from src.selection.units import CERTIFICATE_CODE, SCORED_SECTIONS

logger = logging.getLogger(__name__)


class ResumeAssembler:
    """Builds a FinalResumeRecord from master data and selections."""

    def __init__(self, config: AssemblyConfig | None = None):
        """Initialize the assembler.

        Args:
            config: Optional AssemblyConfig. Uses defaults if not provided.
        """
        self.config = config or AssemblyConfig()

    def qualifies(self, entry: ScoredItemEntry) -> bool:
        """Whether a selection row may contribute to the final resume."""
        return (
            entry.user_selected
            and not entry.is_error_marker
            and entry.relevance_score >= self.config.inclusion_threshold
        )

    async def assemble(
        self,
        master: ResumeRecord,
        analysis: JobDescriptionAnalysis,
        selections: Sequence[ScoredItemEntry],
        summary_generator: SummaryGenerator | None,
    ) -> FinalResumeRecord:
        """Assemble the job-specific resume.

        Args:
            master: Freshly normalized master record.
            analysis: Analysis of the target job description.
            selections: Every row of the selection table.
            summary_generator: Generator for the new summary; None keeps the
                master summary.

        Returns:
            FinalResumeRecord with sections in display order.
        """
        dynamic_titles = {
            title
            for title in SCORED_SECTIONS
            if any(e.section_title == title.value for e in selections)
        }
        by_key: dict[tuple[str, str], list[ScoredItemEntry]] = defaultdict(list)
        for entry in selections:
            by_key[(entry.section_title, entry.item_identifier)].append(entry)

        sections: list[Section] = []
        highlights: list[str] = []

        for title in SECTION_ORDER:
            master_section = master.get_section(title)

            if title not in dynamic_titles:
                if master_section is not None and not master_section.is_empty():
                    sections.append(master_section.model_copy(deep=True))
                continue

            if title == SectionTitle.TECHNICAL_SKILLS:
                section = self._assemble_skills(master_section, selections)
            elif master_section is None:
                section = None
            else:
                section, texts = self._assemble_bullet_section(master_section, by_key)
                highlights.extend(texts)

            if section is not None and not section.is_empty():
                sections.append(section)

        summary = await self._summarize(master, analysis, highlights, summary_generator)

        final = FinalResumeRecord(
            personal_info=master.personal_info.model_copy(deep=True),
            summary=summary,
            sections=sections,
            target_job_title=analysis.job_title,
            target_company=analysis.company_name,
        )
        logger.info(
            f"Assembled resume with {len(sections)} sections "
            f"({len(highlights)} bullets kept)"
        )
        return final

    def _select_bullets(self, entries: list[ScoredItemEntry]) -> list[str]:
        survivors = [e for e in entries if self.qualifies(e)]
        # sorted() is stable, so equal scores keep table order
        survivors = sorted(survivors, key=lambda e: e.relevance_score, reverse=True)
        return [e.final_text() for e in survivors[: self.config.max_bullets_per_item]]

    def _assemble_bullet_section(
        self,
        master_section: Section,
        by_key: dict[tuple[str, str], list[ScoredItemEntry]],
    ) -> tuple[Section, list[str]]:
        title = master_section.title
        kept_texts: list[str] = []

        def rebuild(items: list) -> list:
            kept = []
            for item in items:
                bullets = self._select_bullets(by_key.get((title.value, item.natural_key()), []))
                if not bullets:
                    logger.debug(f"Dropping {title.value} item '{item.natural_key()}'")
                    continue
                kept_texts.extend(bullets)
                kept.append(item.with_bullets(bullets))
            return kept

        if master_section.is_grouped:
            subsections = []
            for sub in master_section.subsections or []:
                items = rebuild(sub.items)
                if items:
                    subsections.append(Subsection(name=sub.name, items=items))
            return Section(title=title, subsections=subsections), kept_texts

        return Section(title=title, items=rebuild(master_section.items or [])), kept_texts

    def _assemble_skills(
        self, master_section: Section | None, selections: Sequence[ScoredItemEntry]
    ) -> Section:
        title = SectionTitle.TECHNICAL_SKILLS
        survivors = [e for e in selections if e.section_title == title.value and self.qualifies(e)]

        groups: dict[str, list] = {}
        seen: set[int] = set()
        for entry in survivors:
            located = _locate_skill(master_section, entry)
            if located is None:
                logger.warning(
                    f"'{entry.item_identifier}' not found in master skills; "
                    "using the selection text"
                )
                group_name = DEFAULT_SKILL_CATEGORY
                item = Skill(skill=entry.original_text)
            else:
                group_name, item = located
                if id(item) in seen:
                    continue
                seen.add(id(item))
                item = item.model_copy(deep=True)
            groups.setdefault(group_name, []).append(item)

        return Section(
            title=title,
            subsections=[Subsection(name=name, items=items) for name, items in groups.items()],
        )

    async def _summarize(
        self,
        master: ResumeRecord,
        analysis: JobDescriptionAnalysis,
        highlights: list[str],
        summary_generator: SummaryGenerator | None,
    ) -> str:
        if summary_generator is None or not highlights:
            return master.summary

        # Longest bullets first, as a proxy for the most detailed ones
        top = sorted(highlights, key=len, reverse=True)[: self.config.max_highlights]
        try:
            return await summary_generator.generate(
                " ".join(top), analysis, master.personal_info.full_name
            )
        except (SummaryError, CompletionError) as e:
            logger.warning(f"Summary generation failed, keeping master summary: {e}")
            return master.summary


def _locate_skill(
    master_section: Section | None, entry: ScoredItemEntry
) -> tuple[str, Skill | Certificate] | None:
    """Find the master skill or certificate a selection row came from."""
    if master_section is None:
        return None

    wanted = Certificate if entry.unique_id.startswith(f"{CERTIFICATE_CODE}-") else Skill
    candidates = []
    for sub in master_section.subsections or []:
        for item in sub.items:
            if isinstance(item, (Skill, Certificate)) and item.natural_key() == entry.item_identifier:
                candidates.append((sub.name, item))

    for name, item in candidates:
        if isinstance(item, wanted):
            return name, item
    return candidates[0] if candidates else None

