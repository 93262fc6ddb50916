"""Data model for the selection table.

One ScoredItemEntry per scorable unit (a single bullet, or a single
skill/certificate). Rows are created by scoring, edited by a human
(selection flag) and by tailoring (tailored text), and read by assembly.
"""

from __future__ import annotations

import logging
import math
from collections.abc import Sequence

from pydantic import BaseModel, Field, field_validator

from src.resume.fields import cell_text, normalize_key

logger = logging.getLogger(__name__)

ERROR_MARKER_PREFIX = "ERROR: "

# Sentinel the tailoring prompt asks the model to return verbatim.
NOT_SUITABLE = "Original bullet not suitable for significant tailoring towards this role."

SELECTED_FLAG_VALUES = frozenset({"YES", "TRUE", "1", "X"})

SELECTION_HEADER = [
    "UniqueID",
    "Section",
    "ItemIdentifier",
    "OriginalText",
    "RelevanceScore",
    "MatchingKeywords",
    "Justification",
    "Selected",
    "TailoredText",
]

# Normalized header name -> entry field
_COLUMN_SYNONYMS = {
    "uniqueid": "unique_id",
    "id": "unique_id",
    "section": "section_title",
    "sectiontitle": "section_title",
    "itemidentifier": "item_identifier",
    "identifier": "item_identifier",
    "originaltext": "original_text",
    "relevancescore": "relevance_score",
    "score": "relevance_score",
    "matchingkeywords": "matching_keywords",
    "keywords": "matching_keywords",
    "justification": "justification",
    "selected": "user_selected",
    "selectbulletyesno": "user_selected",
    "select": "user_selected",
    "include": "user_selected",
    "tailoredtext": "tailored_text",
    "tailoredbullet": "tailored_text",
}

REQUIRED_COLUMNS = ("unique_id", "section_title", "item_identifier", "original_text")


class SelectionTableError(Exception):
    """Raised when the selection table is missing required columns."""


def is_selected_flag(value: object) -> bool:
    """Whether a human-entered selection cell means "selected".

    Exactly YES, TRUE, 1 or X (trimmed, case-insensitive); anything else,
    including blank, is not selected.
    """
    if isinstance(value, bool):
        return value
    return cell_text(value).upper() in SELECTED_FLAG_VALUES


def is_error_marker(text: str | None) -> bool:
    """Whether a cell holds an error marker written by a failed stage."""
    return bool(text) and text.strip().upper().startswith(ERROR_MARKER_PREFIX.strip())


def error_marker(reason: str) -> str:
    return f"{ERROR_MARKER_PREFIX}{reason}"


class ScoredItemEntry(BaseModel):
    """One scored unit in the selection table."""

    unique_id: str = Field(..., description="Stable row identifier")
    section_title: str = Field(..., description="Canonical section title")
    item_identifier: str = Field(..., description="Natural key of the parent item")
    original_text: str = Field(..., description="Bullet or skill text as in master")
    relevance_score: float = Field(default=0.0, ge=0.0, le=1.0)
    matching_keywords: list[str] = Field(default_factory=list)
    justification: str = ""
    user_selected: bool = False
    tailored_text: str | None = None

    @field_validator("tailored_text", mode="before")
    @classmethod
    def blank_to_none(cls, v: object) -> str | None:
        if v is None:
            return None
        text = str(v).strip()
        return text or None

    @property
    def is_error_marker(self) -> bool:
        return is_error_marker(self.justification)

    def has_usable_tailoring(self) -> bool:
        """True when tailored text exists and is neither the sentinel nor an error."""
        text = (self.tailored_text or "").strip()
        return bool(text) and text != NOT_SUITABLE and not is_error_marker(text)

    def final_text(self) -> str:
        """Text to place in the assembled resume."""
        if self.has_usable_tailoring():
            return (self.tailored_text or "").strip()
        return self.original_text

    def to_row(self) -> list[object]:
        """Serialize in SELECTION_HEADER column order."""
        return [
            self.unique_id,
            self.section_title,
            self.item_identifier,
            self.original_text,
            round(self.relevance_score, 3),
            ", ".join(self.matching_keywords),
            self.justification,
            "YES" if self.user_selected else "",
            self.tailored_text or "",
        ]


def resolve_columns(header: Sequence[object]) -> dict[str, int]:
    """Map entry field names to column indexes for a header row.

    Raises:
        SelectionTableError: If a required column is missing.
    """
    columns: dict[str, int] = {}
    for idx, name in enumerate(header):
        field_name = _COLUMN_SYNONYMS.get(normalize_key(name))
        if field_name is not None and field_name not in columns:
            columns[field_name] = idx

    missing = [name for name in REQUIRED_COLUMNS if name not in columns]
    if missing:
        raise SelectionTableError(f"Selection table is missing columns: {missing}")
    return columns


def entry_from_row(row: Sequence[object], columns: dict[str, int]) -> ScoredItemEntry | None:
    """Parse one selection-table row; blank rows and rows without an id yield None."""

    def get(name: str) -> object:
        idx = columns.get(name)
        if idx is None or idx >= len(row):
            return None
        return row[idx]

    unique_id = cell_text(get("unique_id"))
    if not unique_id:
        return None

    raw_score = get("relevance_score")
    try:
        score = float(cell_text(raw_score) or 0.0)
    except ValueError:
        score = math.nan
    if not math.isfinite(score):
        logger.warning(f"Row {unique_id}: unreadable score {raw_score!r}, using 0.0")
        score = 0.0
    score = min(max(score, 0.0), 1.0)

    keywords = [k.strip() for k in cell_text(get("matching_keywords")).split(",") if k.strip()]

    return ScoredItemEntry(
        unique_id=unique_id,
        section_title=cell_text(get("section_title")),
        item_identifier=cell_text(get("item_identifier")),
        original_text=cell_text(get("original_text")),
        relevance_score=score,
        matching_keywords=keywords,
        justification=cell_text(get("justification")),
        user_selected=is_selected_flag(get("user_selected")),
        tailored_text=cell_text(get("tailored_text")) or None,
    )
