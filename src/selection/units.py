"""Scorable units and the item identity scheme.

A scorable unit is one bullet of a job, project or leadership entry, or
one skill/certificate. Each unit carries the natural key of its parent
item so later stages can find the parent again in a freshly normalized
record.
"""

from __future__ import annotations

from dataclasses import dataclass

from src.resume.models import Certificate, ResumeRecord, SectionTitle, Skill

BULLET_SECTIONS: dict[SectionTitle, str] = {
    SectionTitle.EXPERIENCE: "EXP",
    SectionTitle.PROJECTS: "PRJ",
    SectionTitle.LEADERSHIP: "LDR",
}
SKILL_CODE = "SKL"
CERTIFICATE_CODE = "CRT"

SCORED_SECTIONS = frozenset({*BULLET_SECTIONS, SectionTitle.TECHNICAL_SKILLS})


@dataclass(frozen=True)
class ScorableUnit:
    """One piece of resume text to be scored."""

    unique_id: str
    section_title: SectionTitle
    item_identifier: str
    text: str


def enumerate_scorable_units(record: ResumeRecord) -> list[ScorableUnit]:
    """List every scorable unit of a record in document order.

    Ids are ``<CODE>-<item #>-<bullet #>`` for bullets and ``<CODE>-<item #>``
    for skills and certificates, numbered from 1 within each section.
    """
    units: list[ScorableUnit] = []

    for section in record.sections:
        code = BULLET_SECTIONS.get(section.title)
        if code is not None:
            for item_no, item in enumerate(section.all_items(), start=1):
                identifier = item.natural_key()
                for bullet_no, bullet in enumerate(item.bullets, start=1):
                    units.append(
                        ScorableUnit(
                            unique_id=f"{code}-{item_no}-{bullet_no}",
                            section_title=section.title,
                            item_identifier=identifier,
                            text=bullet,
                        )
                    )

        elif section.title == SectionTitle.TECHNICAL_SKILLS:
            skill_no = 0
            cert_no = 0
            for item in section.all_items():
                if isinstance(item, Certificate):
                    cert_no += 1
                    unique_id = f"{CERTIFICATE_CODE}-{cert_no}"
                elif isinstance(item, Skill):
                    skill_no += 1
                    unique_id = f"{SKILL_CODE}-{skill_no}"
                else:
                    continue
                units.append(
                    ScorableUnit(
                        unique_id=unique_id,
                        section_title=section.title,
                        item_identifier=item.natural_key(),
                        text=item.display_text(),
                    )
                )

    return units
