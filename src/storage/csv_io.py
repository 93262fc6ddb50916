"""CSV import/export for tabular store tables.

Lets the master resume and the selection table round-trip through any
spreadsheet application.
"""

from __future__ import annotations

import csv
import logging
from pathlib import Path

from src.storage.base import TabularStore

logger = logging.getLogger(__name__)


async def import_csv(store: TabularStore, table: str, csv_path: Path | str) -> int:
    """Replace ``table`` with the rows of a CSV file.

    The first CSV row lands at position 0 and the rest follow in order.

    Returns:
        Number of rows written.
    """
    csv_path = Path(csv_path)
    with csv_path.open(newline="", encoding="utf-8-sig") as f:
        rows = [list(row) for row in csv.reader(f)]

    header = rows[0] if rows else []
    await store.create_or_replace_table(table, header)
    if len(rows) > 1:
        await store.write_rows(table, rows[1:], start_row=1)

    logger.info(f"Imported {len(rows)} rows from {csv_path} into '{table}'")
    return len(rows)


async def export_csv(store: TabularStore, table: str, csv_path: Path | str) -> int:
    """Write every row of ``table`` to a CSV file.

    Returns:
        Number of rows written.
    """
    rows = await store.read_all_rows(table)
    csv_path = Path(csv_path)
    csv_path.parent.mkdir(parents=True, exist_ok=True)
    with csv_path.open("w", newline="", encoding="utf-8") as f:
        writer = csv.writer(f)
        for row in rows:
            writer.writerow(["" if cell is None else cell for cell in row])

    logger.info(f"Exported {len(rows)} rows from '{table}' to {csv_path}")
    return len(rows)
