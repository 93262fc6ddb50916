"""Tests for the Word renderer."""

from datetime import datetime

import pytest
from docx import Document

from src.rendering.config import RenderConfig
from src.rendering.renderer import (
    BULLET_GLYPH,
    DocxRenderer,
    RenderError,
    build_default_template,
)
from src.resume.models import FinalResumeRecord, Job, Section, SectionTitle
from src.resume.normalizer import ResumeNormalizer


@pytest.fixture
def final_record(master_rows) -> FinalResumeRecord:
    master = ResumeNormalizer().normalize(master_rows)
    return FinalResumeRecord.model_validate(
        {
            **master.model_dump(),
            "target_job_title": "Data Engineer",
            "target_company": "Initech",
            "generated_at": datetime(2024, 3, 1, 9, 30, 0),
        }
    )


@pytest.fixture
def renderer(tmp_path) -> DocxRenderer:
    return DocxRenderer(
        RenderConfig(
            template_path=tmp_path / "template.docx",
            output_dir=tmp_path / "out",
            _env_file=None,
        )
    )


def _all_text(path) -> list[str]:
    doc = Document(str(path))
    texts = [p.text for p in doc.paragraphs]
    for table in doc.tables:
        for row in table.rows:
            for cell in row.cells:
                texts.extend(p.text for p in cell.paragraphs)
    return texts


class TestBuildDefaultTemplate:
    def test_contains_placeholders(self, tmp_path):
        path = build_default_template(tmp_path / "nested" / "template.docx")

        text = "\n".join(_all_text(path))
        for token in (
            "{{FULL_NAME}}",
            "{{CONTACT_LINE}}",
            "{{CONTACT_LINKS}}",
            "{{SUMMARY}}",
            "{{EDUCATION_BLOCK}}",
            "{{EXPERIENCE_BLOCK}}",
            "{{PROJECTS_BLOCK}}",
            "{{SKILLS_BLOCK}}",
            "{{LEADERSHIP_BLOCK}}",
            "{{HONORS_BLOCK}}",
        ):
            assert token in text


class TestDocxRenderer:
    """Test rendering into the default template."""

    def test_render_fills_placeholders(self, renderer, final_record, tmp_path):
        build_default_template(renderer.config.template_path)

        result = renderer.render(final_record)

        assert result.path == tmp_path / "out" / "ada_lovelace_initech_20240301_093000.docx"
        assert result.path.exists()
        lines = _all_text(result.path)
        text = "\n".join(lines)
        assert "{{" not in text
        assert "Ada Lovelace" in lines
        assert "ada@example.com | 555-0100 | London, UK" in lines
        assert "Analyst with a taste for engines." in lines
        assert "Engineer, Acme Corp" in lines
        assert f"{BULLET_GLYPH} Built X" in lines
        assert "Technologies: Python, NumPy" in lines
        assert "Languages: Python (Advanced), SQL" in lines
        assert SectionTitle.EXPERIENCE.value in result.sections_rendered
        assert SectionTitle.LEADERSHIP.value not in result.sections_rendered

    def test_contact_links_are_hyperlinks(self, renderer, final_record):
        build_default_template(renderer.config.template_path)

        result = renderer.render(final_record)

        doc = Document(str(result.path))
        links = [h for p in doc.paragraphs for h in p.hyperlinks]
        assert [(h.text, h.url) for h in links] == [
            ("LinkedIn", "https://linkedin.com/in/ada"),
            ("GitHub", "https://github.com/ada"),
        ]

    def test_empty_paragraphs_are_removed(self, renderer, final_record):
        build_default_template(renderer.config.template_path)

        result = renderer.render(final_record)

        assert all(line.strip() for line in _all_text(result.path))

    def test_missing_template(self, renderer, final_record):
        with pytest.raises(RenderError, match="Template not found"):
            renderer.render(final_record)

    def test_failed_save_removes_partial_output(self, renderer, final_record, tmp_path, monkeypatch):
        build_default_template(renderer.config.template_path)
        output = tmp_path / "out" / "partial.docx"

        def broken_save(self, path):
            with open(path, "wb") as f:
                f.write(b"partial")
            raise OSError("disk full")

        monkeypatch.setattr("docx.document.Document.save", broken_save)

        with pytest.raises(RenderError) as exc_info:
            renderer.render(final_record, output_path=output)

        assert isinstance(exc_info.value.original_error, OSError)
        assert not output.exists()

    def test_custom_template_tokens_in_tables_and_split_runs(self, renderer, final_record, tmp_path):
        template = tmp_path / "custom.docx"
        doc = Document()
        p = doc.add_paragraph()
        p.add_run("{{FULL")
        p.add_run("_NAME}}")
        table = doc.add_table(rows=1, cols=2)
        table.cell(0, 0).text = "{{EMAIL}}"
        table.cell(0, 1).text = "{{EXPERIENCE_BLOCK}}"
        doc.save(str(template))

        result = renderer.render(final_record, template_path=template, output_path=tmp_path / "r.docx")

        lines = _all_text(result.path)
        assert "Ada Lovelace" in lines
        assert "ada@example.com" in lines
        assert "Analyst, Globex" in lines
        assert "{{EXPERIENCE_BLOCK}}" not in "\n".join(lines)

    def test_value_containing_its_own_token_is_inserted_once(self, renderer, final_record, tmp_path):
        template = tmp_path / "custom.docx"
        doc = Document()
        doc.add_paragraph("{{SUMMARY}}")
        p = doc.add_paragraph()
        p.add_run("{{SUMMARY}} and {{SUMM")
        p.add_run("ARY}}")
        doc.save(str(template))
        record = final_record.model_copy(update={"summary": "Literal {{SUMMARY}} text"})

        result = renderer.render(record, template_path=template, output_path=tmp_path / "r.docx")

        lines = _all_text(result.path)
        assert "Literal {{SUMMARY}} text" in lines
        assert "Literal {{SUMMARY}} text and Literal {{SUMMARY}} text" in lines
        assert "{{SUMMARY}}" in result.placeholders_filled

    def test_flat_section_items_in_order(self, renderer, tmp_path):
        build_default_template(renderer.config.template_path)
        record = FinalResumeRecord(
            sections=[
                Section(
                    title=SectionTitle.EXPERIENCE,
                    items=[
                        Job(company="B", job_title="Second", responsibilities=["b1"]),
                        Job(company="A", job_title="First", responsibilities=["a1", "a2"]),
                    ],
                )
            ]
        )

        result = renderer.render(record, output_path=tmp_path / "flat.docx")

        lines = _all_text(result.path)
        order = [lines.index(t) for t in ("Second, B", f"{BULLET_GLYPH} b1", "First, A", f"{BULLET_GLYPH} a2")]
        assert order == sorted(order)
