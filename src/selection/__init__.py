"""Selection table correlating scored units, human selection and tailoring.

Public API:
    - SelectionStore: Append/update/read the selection table
    - ScoredItemEntry: One row of the table
    - enumerate_scorable_units / ScorableUnit: Unit identity scheme
    - is_selected_flag: Accepted spellings of "selected"
"""

from src.selection.models import (
    ERROR_MARKER_PREFIX,
    NOT_SUITABLE,
    SELECTION_HEADER,
    ScoredItemEntry,
    SelectionTableError,
    error_marker,
    is_error_marker,
    is_selected_flag,
)
from src.selection.store import SelectionStore
from src.selection.units import ScorableUnit, enumerate_scorable_units

__all__ = [
    "SelectionStore",
    "ScoredItemEntry",
    "SelectionTableError",
    "ScorableUnit",
    "enumerate_scorable_units",
    "is_selected_flag",
    "is_error_marker",
    "error_marker",
    "ERROR_MARKER_PREFIX",
    "NOT_SUITABLE",
    "SELECTION_HEADER",
]
