"""Tests for selection table entries and flags."""

import pytest
from pydantic import ValidationError

from src.selection.models import (
    NOT_SUITABLE,
    SELECTION_HEADER,
    ScoredItemEntry,
    SelectionTableError,
    entry_from_row,
    error_marker,
    is_error_marker,
    is_selected_flag,
    resolve_columns,
)


def _entry(**overrides) -> ScoredItemEntry:
    values = {
        "unique_id": "EXP-1-1",
        "section_title": "EXPERIENCE",
        "item_identifier": "Acme Corp",
        "original_text": "Built X",
        "relevance_score": 0.5,
    }
    values.update(overrides)
    return ScoredItemEntry(**values)


class TestSelectedFlag:
    @pytest.mark.parametrize("value", ["YES", "yes", " Yes ", "TRUE", "true", "1", "x", "X", 1, True])
    def test_truthy_spellings(self, value):
        assert is_selected_flag(value)

    @pytest.mark.parametrize("value", ["", None, "Y", "no", "0", "selected", "✓", False, 0])
    def test_everything_else_is_not_selected(self, value):
        assert not is_selected_flag(value)


class TestScoredItemEntry:
    def test_score_bounds(self):
        with pytest.raises(ValidationError):
            _entry(relevance_score=1.5)
        with pytest.raises(ValidationError):
            _entry(relevance_score=-0.1)

    def test_final_text_prefers_usable_tailoring(self):
        assert _entry(tailored_text="Built X at scale").final_text() == "Built X at scale"

    @pytest.mark.parametrize("tailored", [None, "", "   ", NOT_SUITABLE, "ERROR: timed out"])
    def test_final_text_falls_back_to_original(self, tailored):
        entry = _entry(tailored_text=tailored)

        assert not entry.has_usable_tailoring()
        assert entry.final_text() == "Built X"

    def test_error_marker_on_justification(self):
        assert _entry(justification=error_marker("bad json")).is_error_marker
        assert not _entry(justification="Strong match").is_error_marker

    def test_is_error_marker_helper(self):
        assert is_error_marker("ERROR: x")
        assert is_error_marker("error: lower case")
        assert not is_error_marker("Errors were reduced by 20%")
        assert not is_error_marker(None)

    def test_to_row_matches_header(self):
        row = _entry(matching_keywords=["Python", "SQL"], user_selected=True).to_row()

        assert len(row) == len(SELECTION_HEADER)
        assert row[SELECTION_HEADER.index("MatchingKeywords")] == "Python, SQL"
        assert row[SELECTION_HEADER.index("Selected")] == "YES"
        assert row[SELECTION_HEADER.index("TailoredText")] == ""


class TestRowParsing:
    def test_columns_resolved_by_name(self):
        header = ["Selected", "OriginalText", "UniqueID", "ItemIdentifier", "Section", "RelevanceScore"]
        columns = resolve_columns(header)

        entry = entry_from_row(["x", "Built X", "EXP-1-1", "Acme", "EXPERIENCE", "0.02"], columns)

        assert entry.unique_id == "EXP-1-1"
        assert entry.user_selected
        assert entry.relevance_score == pytest.approx(0.02)
        assert entry.tailored_text is None

    def test_missing_required_column(self):
        with pytest.raises(SelectionTableError, match="unique_id"):
            resolve_columns(["Section", "ItemIdentifier", "OriginalText"])

    def test_rows_without_id_are_skipped(self):
        columns = resolve_columns(SELECTION_HEADER)
        assert entry_from_row(["", "EXPERIENCE"], columns) is None

    def test_unreadable_score_reads_as_zero(self):
        columns = resolve_columns(SELECTION_HEADER)
        entry = entry_from_row(["EXP-1-1", "EXPERIENCE", "Acme", "Built X", "high"], columns)

        assert entry.relevance_score == 0.0
        assert not entry.user_selected

    @pytest.mark.parametrize("raw", ["nan", "NaN", "inf", "-Infinity"])
    def test_non_finite_score_reads_as_zero(self, raw):
        columns = resolve_columns(SELECTION_HEADER)
        entry = entry_from_row(["EXP-1-1", "EXPERIENCE", "Acme", "Built X", raw, "", "", "x"], columns)

        assert entry.relevance_score == 0.0
        assert entry.user_selected
