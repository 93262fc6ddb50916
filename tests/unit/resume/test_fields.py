"""Tests for normalizer lookup helpers."""

from datetime import date, datetime

import pytest

from src.resume.fields import (
    bullet_column_index,
    cell_text,
    format_date,
    match_section_title,
    normalize_key,
    split_multiline,
    to_camel_key,
)
from src.resume.models import SectionTitle


class TestMatchSectionTitle:
    """Test section title detection."""

    @pytest.mark.parametrize(
        ("cell", "expected"),
        [
            ("EXPERIENCE", SectionTitle.EXPERIENCE),
            ("Work Experience:", SectionTitle.EXPERIENCE),
            ("personal info", SectionTitle.PERSONAL_INFO),
            ("TECHNICAL SKILLS & CERTIFICATES", SectionTitle.TECHNICAL_SKILLS),
            ("Leadership & University Involvement", SectionTitle.LEADERSHIP),
            ("HONORS & AWARDS", SectionTitle.HONORS),
        ],
    )
    def test_recognizes_titles(self, cell, expected):
        assert match_section_title([cell]) == expected

    def test_prefix_match_requires_blank_rest(self):
        assert match_section_title(["SKILLS & TOOLS"]) == SectionTitle.TECHNICAL_SKILLS
        assert match_section_title(["Experienced mentor", "Globex"]) is None

    def test_data_rows_are_not_titles(self):
        assert match_section_title(["Acme Corp", "Engineer"]) is None
        assert match_section_title([]) is None
        assert match_section_title([""]) is None


class TestKeys:
    def test_normalize_key(self):
        assert normalize_key(" Job Title ") == "jobtitle"
        assert normalize_key("Field-of-Study") == "fieldofstudy"

    def test_to_camel_key(self):
        assert to_camel_key("Twitter Handle") == "twitterHandle"
        assert to_camel_key("  ") == ""

    def test_bullet_column_index(self):
        assert bullet_column_index("Responsibility1", 10) == 1
        assert bullet_column_index("DescriptionBullet 3", 10) == 3
        assert bullet_column_index("Responsibility11", 10) is None
        assert bullet_column_index("Company", 10) is None


class TestCellHelpers:
    def test_cell_text_renders_integral_floats(self):
        assert cell_text(2020.0) == "2020"
        assert cell_text(None) == ""
        assert cell_text("  x ") == "x"

    def test_split_multiline_handles_literal_backslash_n(self):
        assert split_multiline("Python\\nSQL\n\n  Go ") == ["Python", "SQL", "Go"]


class TestFormatDate:
    """Test date display strings."""

    def test_calendar_dates(self):
        assert format_date(date(2021, 5, 1)) == "May 2021"
        assert format_date(datetime(2019, 12, 31, 8, 0)) == "December 2019"
        assert format_date("2021-05-01") == "May 2021"
        assert format_date("03/15/2022") == "March 2022"

    def test_pass_through(self):
        assert format_date("2020") == "2020"
        assert format_date("Jan 2020") == "Jan 2020"
        assert format_date("Summer 2019") == "Summer 2019"

    def test_empty_end_date_is_present(self):
        assert format_date("", is_end_date=True) == "Present"
        assert format_date("") == ""
