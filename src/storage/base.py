"""Tabular store interface.

A tabular store holds named tables of rows, each row an ordered list of
cell values. Cells are addressed by position; consumers map header names
to column indexes themselves when they read.
"""

from __future__ import annotations

from collections.abc import Sequence
from typing import Protocol

Cell = str | int | float | bool | None
Row = list[Cell]


class TableNotFoundError(Exception):
    """Raised when reading or writing a table that does not exist."""

    def __init__(self, table: str):
        super().__init__(f"Table not found: {table}")
        self.table = table


class TabularStore(Protocol):
    """Row-oriented storage for the master resume and the selection table."""

    async def read_all_rows(self, table: str) -> list[Row]:
        """Return every row of ``table`` in position order (row 0 first)."""
        ...

    async def write_rows(
        self, table: str, rows: Sequence[Sequence[Cell]], start_row: int
    ) -> None:
        """Write ``rows`` starting at 0-based position ``start_row``, replacing what is there."""
        ...

    async def create_or_replace_table(self, name: str, header_row: Sequence[Cell]) -> None:
        """Create ``name`` (dropping existing content) with ``header_row`` at position 0."""
        ...

    async def table_exists(self, name: str) -> bool:
        """Whether ``name`` exists."""
        ...
