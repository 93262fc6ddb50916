"""Tabular storage for the master resume and the selection table.

Public API:
    - TabularStore: Storage interface (Protocol)
    - SqliteTabularStore: aiosqlite implementation
    - TableNotFoundError: Raised for missing tables
    - import_csv / export_csv: Spreadsheet round-trip helpers
"""

from src.storage.base import Cell, Row, TableNotFoundError, TabularStore
from src.storage.csv_io import export_csv, import_csv
from src.storage.sqlite import SqliteTabularStore

__all__ = [
    "TabularStore",
    "SqliteTabularStore",
    "TableNotFoundError",
    "Cell",
    "Row",
    "import_csv",
    "export_csv",
]
