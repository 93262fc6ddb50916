"""Template-driven resume rendering with python-docx.

The template is an ordinary .docx containing ``{{PLACEHOLDER}}`` tokens in
body paragraphs or table cells. Header tokens are replaced in place; each
block token is replaced by a stack of styled paragraphs inserted after the
paragraph that held it. A final pass removes paragraphs left empty.
"""

from __future__ import annotations

import logging
import re
from copy import deepcopy
from dataclasses import dataclass, field
from pathlib import Path

from docx import Document
from docx.enum.text import WD_ALIGN_PARAGRAPH
from docx.oxml import OxmlElement
from docx.oxml.ns import qn
from docx.shared import Inches, Pt, RGBColor
from docx.text.paragraph import Paragraph
from docx.text.run import Run

from src.rendering.config import RenderConfig
from src.resume.models import (
    Award,
    Certificate,
    EducationEntry,
    FinalResumeRecord,
    Job,
    LeadershipEntry,
    Project,
    Section,
    SectionTitle,
    Skill,
)

logger = logging.getLogger(__name__)

HYPERLINK_REL = (
    "http://schemas.openxmlformats.org/officeDocument/2006/relationships/hyperlink"
)

BLOCK_PLACEHOLDERS: dict[SectionTitle, str] = {
    SectionTitle.EDUCATION: "{{EDUCATION_BLOCK}}",
    SectionTitle.EXPERIENCE: "{{EXPERIENCE_BLOCK}}",
    SectionTitle.PROJECTS: "{{PROJECTS_BLOCK}}",
    SectionTitle.TECHNICAL_SKILLS: "{{SKILLS_BLOCK}}",
    SectionTitle.LEADERSHIP: "{{LEADERSHIP_BLOCK}}",
    SectionTitle.HONORS: "{{HONORS_BLOCK}}",
}
CONTACT_LINKS = "{{CONTACT_LINKS}}"
_LEFTOVER_TOKEN = re.compile(r"\{\{[A-Z_]+\}\}")

# Layout constants (points unless noted)
ITEM_GAP_PT = 6
UNDER_TITLE_PT = 0
LINE_GAP_PT = 0
BULLET_GLYPH = "•"
BULLET_INDENT = Inches(0.25)
BULLET_HANGING = Inches(0.15)
LINK_COLOR = RGBColor(0x05, 0x63, 0xC1)

# Paragraph children that make an otherwise empty paragraph worth keeping
_KEEP_ELEMENTS = ("w:drawing", "w:pict", "w:object", "w:sectPr")


class RenderError(Exception):
    """Raised when the template is missing or the document backend fails."""

    def __init__(self, message: str, original_error: Exception | None = None):
        super().__init__(message)
        self.original_error = original_error


@dataclass
class RenderedDocument:
    """A rendered resume on disk."""

    path: Path
    placeholders_filled: list[str] = field(default_factory=list)
    sections_rendered: list[str] = field(default_factory=list)


def _tight(p: Paragraph, before: float = 0, after: float = 0) -> None:
    p.paragraph_format.space_before = Pt(before)
    p.paragraph_format.space_after = Pt(after)


def _date_range(start: str, end: str) -> str:
    if start and end:
        return f"{start} - {end}"
    return start or end


def _join(parts: list[str], sep: str = " | ") -> str:
    return sep.join(p for p in parts if p)


def _normalize_url(url: str) -> str:
    url = url.strip()
    if not re.match(r"^[a-zA-Z][a-zA-Z0-9+.-]*:", url):
        return f"https://{url}"
    return url


def _slug(text: str) -> str:
    return re.sub(r"[^a-z0-9]+", "_", text.lower()).strip("_") or "resume"


def _iter_paragraphs(doc) -> list[Paragraph]:
    """Body paragraphs plus paragraphs inside (nested) table cells."""
    paragraphs: list[Paragraph] = []
    seen: set[int] = set()

    def visit_tables(tables) -> None:
        for table in tables:
            for row in table.rows:
                for cell in row.cells:
                    # Merged cells are returned once per grid position
                    if id(cell._tc) in seen:
                        continue
                    seen.add(id(cell._tc))
                    paragraphs.extend(cell.paragraphs)
                    visit_tables(cell.tables)

    paragraphs.extend(doc.paragraphs)
    visit_tables(doc.tables)
    return paragraphs


def _collapse_runs(p: Paragraph) -> None:
    """Merge all run text into the first run so a token split across runs is whole."""
    runs = p.runs
    if len(runs) < 2:
        return
    runs[0].text = "".join(r.text for r in runs)
    for run in runs[1:]:
        run._r.getparent().remove(run._r)


def _replace_in_paragraph(p: Paragraph, token: str, value: str) -> bool:
    """Replace every occurrence of token in one pass; the value is never rescanned."""
    if token not in p.text:
        return False
    if sum(run.text.count(token) for run in p.runs) < p.text.count(token):
        _collapse_runs(p)
    for run in p.runs:
        if token in run.text:
            run.text = run.text.replace(token, value)
    return True


def _insert_paragraph_after(anchor: Paragraph, style=None) -> Paragraph:
    new_p = OxmlElement("w:p")
    anchor._p.addnext(new_p)
    paragraph = Paragraph(new_p, anchor._parent)
    if style is not None:
        paragraph.style = style
    return paragraph


def _make_run(paragraph: Paragraph, text: str, base_rpr=None, *, style_link: bool = False):
    r = OxmlElement("w:r")
    if base_rpr is not None:
        r.append(deepcopy(base_rpr))
    t = OxmlElement("w:t")
    t.set(qn("xml:space"), "preserve")
    t.text = text
    r.append(t)
    if style_link:
        r.get_or_add_rPr().style = "Hyperlink"
        run = Run(r, paragraph)
        run.font.color.rgb = LINK_COLOR
        run.font.underline = True
    return r


def _make_hyperlink(paragraph: Paragraph, text: str, url: str, base_rpr=None):
    r_id = paragraph.part.relate_to(url, HYPERLINK_REL, is_external=True)
    hyperlink = OxmlElement("w:hyperlink")
    hyperlink.set(qn("r:id"), r_id)
    hyperlink.append(_make_run(paragraph, text, base_rpr, style_link=True))
    return hyperlink


class _BlockWriter:
    """Appends styled paragraphs after an anchor paragraph."""

    def __init__(self, anchor: Paragraph):
        self.anchor = anchor
        self.style = anchor.style
        first_run = anchor.runs[0] if anchor.runs else None
        self.base_rpr = first_run._r.rPr if first_run is not None else None
        self.items_written = 0

    def line(
        self,
        text: str,
        *,
        bold: bool = False,
        italic: bool = False,
        before: float = LINE_GAP_PT,
        after: float = LINE_GAP_PT,
    ) -> Paragraph:
        p = _insert_paragraph_after(self.anchor, self.style)
        self.anchor = p
        _tight(p, before=before, after=after)
        p.alignment = WD_ALIGN_PARAGRAPH.LEFT
        run = p.add_run(text)
        if self.base_rpr is not None:
            run._r.insert(0, deepcopy(self.base_rpr))
        run.bold = bold
        run.italic = italic
        return p

    def labeled(self, label: str, text: str) -> Paragraph:
        p = self.line(f"{label}: ", bold=True)
        run = p.add_run(text)
        if self.base_rpr is not None:
            run._r.insert(0, deepcopy(self.base_rpr))
        run.bold = False
        return p

    def title(self, text: str) -> Paragraph:
        before = ITEM_GAP_PT if self.items_written else 0
        self.items_written += 1
        return self.line(text, bold=True, before=before, after=UNDER_TITLE_PT)

    def date_line(self, text: str) -> None:
        if text:
            self.line(text, italic=True)

    def bullets(self, bullets: list[str]) -> None:
        for bullet in bullets:
            p = self.line(f"{BULLET_GLYPH} {bullet}")
            p.paragraph_format.left_indent = BULLET_INDENT
            p.paragraph_format.first_line_indent = -BULLET_HANGING


class DocxRenderer:
    """Renders a FinalResumeRecord into a copy of a Word template."""

    def __init__(self, config: RenderConfig | None = None):
        """Initialize the renderer.

        Args:
            config: Optional RenderConfig. Uses defaults if not provided.
        """
        self.config = config or RenderConfig()

    def default_output_path(self, record: FinalResumeRecord) -> Path:
        name = _slug(record.personal_info.full_name)
        company = _slug(record.target_company or "general")
        stamp = record.generated_at.strftime("%Y%m%d_%H%M%S")
        return self.config.output_dir / f"{name}_{company}_{stamp}.docx"

    def render(
        self,
        record: FinalResumeRecord,
        template_path: Path | str | None = None,
        output_path: Path | str | None = None,
    ) -> RenderedDocument:
        """Render the record.

        Raises:
            RenderError: If the template is missing or rendering fails. A
                partially written output file is removed.
        """
        template = Path(template_path or self.config.template_path)
        if not template.is_file():
            raise RenderError(f"Template not found: {template}")

        output = Path(output_path) if output_path else self.default_output_path(record)
        result = RenderedDocument(path=output)

        try:
            doc = Document(str(template))
            paragraphs = _iter_paragraphs(doc)

            result.placeholders_filled.extend(self._fill_simple(paragraphs, record))
            if self._fill_contact_links(paragraphs, record):
                result.placeholders_filled.append(CONTACT_LINKS)

            for title, token in BLOCK_PLACEHOLDERS.items():
                if self._fill_block(paragraphs, token, record.get_section(title)):
                    result.placeholders_filled.append(token)
                    result.sections_rendered.append(title.value)

            removed = _remove_empty_paragraphs(doc)
            logger.debug(f"Removed {removed} empty paragraphs")

            leftovers = set(_LEFTOVER_TOKEN.findall("\n".join(p.text for p in _iter_paragraphs(doc))))
            if leftovers:
                logger.warning(f"Template placeholders left unfilled: {sorted(leftovers)}")

            output.parent.mkdir(parents=True, exist_ok=True)
            doc.save(str(output))
        except Exception as e:
            if output.exists():
                output.unlink()
            raise RenderError(f"Failed to render resume: {e}", original_error=e) from e

        logger.info(f"Rendered resume to {output}")
        return result

    def _simple_values(self, record: FinalResumeRecord) -> dict[str, str]:
        info = record.personal_info
        return {
            "{{FULL_NAME}}": info.full_name,
            "{{EMAIL}}": info.email,
            "{{PHONE}}": info.phone,
            "{{LOCATION}}": info.location,
            "{{CONTACT_LINE}}": _join(
                [info.email, info.phone, info.location], self.config.contact_separator
            ),
            "{{SUMMARY}}": record.summary,
        }

    def _fill_simple(
        self, paragraphs: list[Paragraph], record: FinalResumeRecord
    ) -> list[str]:
        filled = []
        for token, value in self._simple_values(record).items():
            hit = False
            for p in paragraphs:
                if _replace_in_paragraph(p, token, value):
                    hit = True
            if hit:
                filled.append(token)
        return filled

    def _fill_contact_links(
        self, paragraphs: list[Paragraph], record: FinalResumeRecord
    ) -> bool:
        links = record.personal_info.links()
        hit = False
        for p in paragraphs:
            if CONTACT_LINKS not in p.text:
                continue
            hit = True
            _collapse_runs(p)
            run = p.runs[0]
            before, _, after = run.text.partition(CONTACT_LINKS)
            run.text = before
            base_rpr = run._r.rPr

            anchor = run._r
            for idx, (label, url) in enumerate(links):
                if idx:
                    sep = _make_run(p, self.config.link_separator, base_rpr)
                    anchor.addnext(sep)
                    anchor = sep
                link = _make_hyperlink(p, label, _normalize_url(url), base_rpr)
                anchor.addnext(link)
                anchor = link
            if after:
                anchor.addnext(_make_run(p, after, base_rpr))
        return hit

    def _fill_block(
        self, paragraphs: list[Paragraph], token: str, section: Section | None
    ) -> bool:
        anchor = next((p for p in paragraphs if token in p.text), None)
        if anchor is None:
            return False

        writer = _BlockWriter(anchor)
        _replace_in_paragraph(anchor, token, "")
        if section is None or section.is_empty():
            return False

        if section.is_grouped:
            if section.title == SectionTitle.TECHNICAL_SKILLS:
                for sub in section.subsections or []:
                    if sub.items:
                        writer.labeled(sub.name, ", ".join(_skill_text(i) for i in sub.items))
                return True
            show_names = len([s for s in section.subsections or [] if s.items]) > 1
            for sub in section.subsections or []:
                if not sub.items:
                    continue
                if show_names:
                    writer.line(sub.name, bold=True, before=ITEM_GAP_PT)
                for item in sub.items:
                    _write_item(writer, item)
            return True

        for item in section.items or []:
            _write_item(writer, item)
        return True


def _skill_text(item) -> str:
    if isinstance(item, (Skill, Certificate)):
        return item.display_text()
    return item.natural_key()


def _write_item(writer: _BlockWriter, item) -> None:
    if isinstance(item, Job):
        writer.title(_join([item.job_title, item.company], ", "))
        writer.date_line(_join([item.location, _date_range(item.start_date, item.end_date)]))
        writer.bullets(item.responsibilities)

    elif isinstance(item, EducationEntry):
        writer.title(item.institution)
        degree = item.degree
        if item.field_of_study:
            degree = f"{degree} in {item.field_of_study}" if degree else item.field_of_study
        writer.date_line(
            _join([degree, item.location, _date_range(item.start_date, item.end_date)])
        )
        if item.gpa:
            writer.labeled("GPA", item.gpa)
        if item.relevant_coursework:
            writer.labeled("Relevant Coursework", ", ".join(item.relevant_coursework))
        writer.bullets(item.description_bullets)

    elif isinstance(item, Project):
        writer.title(_join([item.project_name, item.role]))
        writer.date_line(
            _join([item.organization, _date_range(item.start_date, item.end_date)])
        )
        if item.technologies:
            writer.labeled("Technologies", ", ".join(item.technologies))
        if item.link:
            writer.line(item.link)
        writer.bullets(item.description_bullets)

    elif isinstance(item, LeadershipEntry):
        writer.title(_join([item.role, item.organization], ", "))
        writer.date_line(_join([item.location, _date_range(item.start_date, item.end_date)]))
        writer.bullets(item.description_bullets)

    elif isinstance(item, Award):
        writer.title(_join([item.name, item.issuer], ", "))
        writer.date_line(item.date)
        if item.description:
            writer.line(item.description)

    else:
        writer.line(_skill_text(item))


def _paragraph_text(p_el) -> str:
    return "".join(t.text or "" for t in p_el.iter(qn("w:t")))


def _remove_empty_paragraphs(doc) -> int:
    """Delete paragraphs with no visible text, keeping drawings and section breaks."""
    removed = 0
    for p_el in list(doc.element.body.iter(qn("w:p"))):
        if _paragraph_text(p_el).strip():
            continue
        if any(next(p_el.iter(qn(tag)), None) is not None for tag in _KEEP_ELEMENTS):
            continue
        parent = p_el.getparent()
        # A table cell must keep at least one paragraph
        if parent.tag == qn("w:tc") and len(parent.findall(qn("w:p"))) == 1:
            continue
        parent.remove(p_el)
        removed += 1
    return removed


def build_default_template(path: Path | str) -> Path:
    """Write a starter template containing the standard placeholders."""
    path = Path(path)
    doc = Document()
    for section in doc.sections:
        section.top_margin = Inches(0.6)
        section.bottom_margin = Inches(0.6)
        section.left_margin = Inches(0.7)
        section.right_margin = Inches(0.7)

    def centered(text: str, size: int, bold: bool = False) -> None:
        p = doc.add_paragraph()
        _tight(p)
        p.alignment = WD_ALIGN_PARAGRAPH.CENTER
        run = p.add_run(text)
        run.font.size = Pt(size)
        run.bold = bold

    def heading(text: str) -> None:
        p = doc.add_paragraph()
        _tight(p, before=8, after=2)
        run = p.add_run(text)
        run.font.size = Pt(11)
        run.bold = True
        run.underline = True

    def body(text: str) -> None:
        p = doc.add_paragraph()
        _tight(p)
        run = p.add_run(text)
        run.font.size = Pt(10.5)

    centered("{{FULL_NAME}}", 20, bold=True)
    centered("{{CONTACT_LINE}}", 10)
    centered(CONTACT_LINKS, 10)

    heading("SUMMARY")
    body("{{SUMMARY}}")
    for title, token in BLOCK_PLACEHOLDERS.items():
        heading(title.value)
        body(token)

    path.parent.mkdir(parents=True, exist_ok=True)
    doc.save(str(path))
    logger.info(f"Wrote default template to {path}")
    return path
