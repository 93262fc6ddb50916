"""Selection table on top of a tabular store.

Stage 1 appends scored rows, a human marks rows as selected, stage 2
writes tailored text onto selected rows, and stage 3 reads everything.
Column positions are resolved from the header row on every read.
"""

from __future__ import annotations

import logging
from collections.abc import Callable, Sequence

from src.selection.models import (
    SELECTION_HEADER,
    ScoredItemEntry,
    SelectionTableError,
    entry_from_row,
    is_selected_flag,
    resolve_columns,
)
from src.storage.base import TabularStore

logger = logging.getLogger(__name__)


class SelectionStore:
    """Reads and writes ScoredItemEntry rows in one table."""

    def __init__(self, store: TabularStore, table: str):
        """Initialize the selection store.

        Args:
            store: Backing tabular store.
            table: Name of the selection table.
        """
        self.store = store
        self.table = table

    async def reset(self) -> None:
        """Replace the table with an empty one holding only the header."""
        await self.store.create_or_replace_table(self.table, SELECTION_HEADER)

    async def record(self, entries: Sequence[ScoredItemEntry]) -> None:
        """Append entries after the existing rows."""
        if not entries:
            return
        if not await self.store.table_exists(self.table):
            await self.reset()

        rows = await self.store.read_all_rows(self.table)
        header = rows[0] if rows else SELECTION_HEADER
        columns = resolve_columns(header)
        width = max(len(header), max(columns.values()) + 1)

        encoded = []
        for entry in entries:
            values = dict(zip(SELECTION_HEADER, entry.to_row()))
            row: list[object] = [""] * width
            for name, value in values.items():
                idx = _column_for_header(name, columns)
                if idx is not None:
                    row[idx] = value
            encoded.append(row)

        await self.store.write_rows(self.table, encoded, start_row=max(len(rows), 1))
        logger.info(f"Recorded {len(entries)} entries in '{self.table}'")

    async def all_entries(self) -> list[ScoredItemEntry]:
        """Read every entry in table order."""
        if not await self.store.table_exists(self.table):
            return []

        rows = await self.store.read_all_rows(self.table)
        if not rows:
            return []

        columns = resolve_columns(rows[0])
        entries = []
        for row in rows[1:]:
            entry = entry_from_row(row, columns)
            if entry is not None:
                entries.append(entry)
        return entries

    async def mark_tailored(
        self,
        unique_id: str,
        text: str,
        predicate: Callable[[object], bool] = is_selected_flag,
    ) -> bool:
        """Write tailored text onto a row, only if its selection cell passes ``predicate``.

        Returns:
            True if the row was updated.
        """
        return await self._update_cell(
            unique_id, "tailored_text", text, predicate=predicate
        )

    async def set_selected(self, unique_id: str, selected: bool) -> bool:
        """Set or clear the human selection flag on a row."""
        return await self._update_cell(
            unique_id, "user_selected", "YES" if selected else ""
        )

    async def _update_cell(
        self,
        unique_id: str,
        field_name: str,
        value: object,
        predicate: Callable[[object], bool] | None = None,
    ) -> bool:
        rows = await self.store.read_all_rows(self.table)
        if not rows:
            return False

        columns = resolve_columns(rows[0])
        target_idx = columns.get(field_name)
        if target_idx is None:
            raise SelectionTableError(
                f"Selection table has no column for '{field_name}'"
            )
        id_idx = columns["unique_id"]
        flag_idx = columns.get("user_selected")

        for position, row in enumerate(rows[1:], start=1):
            if id_idx >= len(row) or str(row[id_idx]).strip() != unique_id:
                continue

            if predicate is not None:
                flag = row[flag_idx] if flag_idx is not None and flag_idx < len(row) else None
                if not predicate(flag):
                    logger.debug(f"Skipping {unique_id}: selection predicate not met")
                    return False

            updated = list(row) + [""] * (target_idx + 1 - len(row))
            updated[target_idx] = value
            await self.store.write_rows(self.table, [updated], start_row=position)
            return True

        logger.warning(f"No selection row with id {unique_id}")
        return False


def _column_for_header(header_name: str, columns: dict[str, int]) -> int | None:
    field_by_header = {
        "UniqueID": "unique_id",
        "Section": "section_title",
        "ItemIdentifier": "item_identifier",
        "OriginalText": "original_text",
        "RelevanceScore": "relevance_score",
        "MatchingKeywords": "matching_keywords",
        "Justification": "justification",
        "Selected": "user_selected",
        "TailoredText": "tailored_text",
    }
    return columns.get(field_by_header[header_name])
