"""SQLite-backed tabular store.

Each table is a set of rows keyed by (table_name, row_index) with the
cells stored as a JSON array, so rows keep their positions and widths
exactly as written.
"""

from __future__ import annotations

import json
from collections.abc import AsyncGenerator, Sequence
from contextlib import asynccontextmanager
from datetime import datetime
from pathlib import Path

import aiosqlite

from src.storage.base import Cell, Row, TableNotFoundError

CREATE_TABLES_SQL = """
CREATE TABLE IF NOT EXISTS tabular_tables (
    name TEXT PRIMARY KEY,
    created_at TEXT NOT NULL
);
CREATE TABLE IF NOT EXISTS tabular_rows (
    table_name TEXT NOT NULL,
    row_index INTEGER NOT NULL,
    cells TEXT NOT NULL,
    PRIMARY KEY (table_name, row_index)
);
"""


class SqliteTabularStore:
    """Async SQLite implementation of the TabularStore interface."""

    def __init__(self, db_path: Path | str):
        """Initialize the store.

        Args:
            db_path: Path to the SQLite database file.
        """
        self.db_path = Path(db_path)
        self._connection: aiosqlite.Connection | None = None

    @asynccontextmanager
    async def _get_connection(self) -> AsyncGenerator[aiosqlite.Connection, None]:
        if self._connection is None:
            self._connection = await aiosqlite.connect(self.db_path)
            self._connection.row_factory = aiosqlite.Row
        yield self._connection

    async def initialize(self) -> None:
        """Create the backing tables if needed."""
        self.db_path.parent.mkdir(parents=True, exist_ok=True)

        async with self._get_connection() as conn:
            await conn.executescript(CREATE_TABLES_SQL)
            await conn.commit()

    async def close(self) -> None:
        """Close the database connection."""
        if self._connection is not None:
            await self._connection.close()
            self._connection = None

    async def table_exists(self, name: str) -> bool:
        async with self._get_connection() as conn:
            cursor = await conn.execute(
                "SELECT 1 FROM tabular_tables WHERE name = ?", (name,)
            )
            return await cursor.fetchone() is not None

    async def list_tables(self) -> list[str]:
        async with self._get_connection() as conn:
            cursor = await conn.execute("SELECT name FROM tabular_tables ORDER BY name")
            rows = await cursor.fetchall()
        return [row["name"] for row in rows]

    async def create_or_replace_table(self, name: str, header_row: Sequence[Cell]) -> None:
        async with self._get_connection() as conn:
            await conn.execute("DELETE FROM tabular_rows WHERE table_name = ?", (name,))
            await conn.execute(
                "INSERT OR REPLACE INTO tabular_tables (name, created_at) VALUES (?, ?)",
                (name, datetime.now().isoformat()),
            )
            await conn.execute(
                "INSERT INTO tabular_rows (table_name, row_index, cells) VALUES (?, 0, ?)",
                (name, _encode_row(header_row)),
            )
            await conn.commit()

    async def read_all_rows(self, table: str) -> list[Row]:
        if not await self.table_exists(table):
            raise TableNotFoundError(table)

        async with self._get_connection() as conn:
            cursor = await conn.execute(
                "SELECT row_index, cells FROM tabular_rows "
                "WHERE table_name = ? ORDER BY row_index",
                (table,),
            )
            stored = await cursor.fetchall()

        # Unwritten positions read back as empty rows
        rows: list[Row] = []
        for record in stored:
            while len(rows) < record["row_index"]:
                rows.append([])
            rows.append(json.loads(record["cells"]))
        return rows

    async def write_rows(
        self, table: str, rows: Sequence[Sequence[Cell]], start_row: int
    ) -> None:
        if start_row < 0:
            raise ValueError(f"start_row must be >= 0 (got {start_row})")
        if not await self.table_exists(table):
            raise TableNotFoundError(table)

        async with self._get_connection() as conn:
            await conn.executemany(
                "INSERT OR REPLACE INTO tabular_rows (table_name, row_index, cells) "
                "VALUES (?, ?, ?)",
                [
                    (table, start_row + offset, _encode_row(row))
                    for offset, row in enumerate(rows)
                ],
            )
            await conn.commit()

    async def row_count(self, table: str) -> int:
        """Number of positions in use (highest row index + 1)."""
        if not await self.table_exists(table):
            raise TableNotFoundError(table)

        async with self._get_connection() as conn:
            cursor = await conn.execute(
                "SELECT MAX(row_index) AS last FROM tabular_rows WHERE table_name = ?",
                (table,),
            )
            result = await cursor.fetchone()
        last = result["last"] if result else None
        return 0 if last is None else last + 1


def _encode_row(row: Sequence[Cell]) -> str:
    return json.dumps(list(row), default=str, ensure_ascii=False)
