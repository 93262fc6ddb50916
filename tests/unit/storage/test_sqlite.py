"""Tests for SqliteTabularStore."""

import pytest
import pytest_asyncio

from src.storage.base import TableNotFoundError
from src.storage.sqlite import SqliteTabularStore


@pytest_asyncio.fixture
async def store(tmp_path):
    store = SqliteTabularStore(tmp_path / "data" / "tables.db")
    await store.initialize()
    yield store
    await store.close()


class TestInitialization:
    @pytest.mark.asyncio
    async def test_creates_database_file(self, tmp_path):
        db_path = tmp_path / "nested" / "tables.db"
        store = SqliteTabularStore(db_path)
        await store.initialize()

        assert db_path.exists()
        await store.close()


class TestTables:
    """Test table creation and reads."""

    @pytest.mark.asyncio
    async def test_create_writes_header_at_zero(self, store):
        await store.create_or_replace_table("Scored Items", ["A", "B"])

        assert await store.table_exists("Scored Items")
        assert await store.read_all_rows("Scored Items") == [["A", "B"]]

    @pytest.mark.asyncio
    async def test_replace_drops_old_rows(self, store):
        await store.create_or_replace_table("t", ["A"])
        await store.write_rows("t", [["1"], ["2"]], start_row=1)

        await store.create_or_replace_table("t", ["B"])

        assert await store.read_all_rows("t") == [["B"]]

    @pytest.mark.asyncio
    async def test_missing_table_raises(self, store):
        with pytest.raises(TableNotFoundError):
            await store.read_all_rows("nope")
        with pytest.raises(TableNotFoundError):
            await store.write_rows("nope", [["x"]], start_row=1)

    @pytest.mark.asyncio
    async def test_list_tables(self, store):
        await store.create_or_replace_table("b", [])
        await store.create_or_replace_table("a", [])

        assert await store.list_tables() == ["a", "b"]


class TestWriteRows:
    """Test positional writes."""

    @pytest.mark.asyncio
    async def test_values_keep_their_types(self, store):
        await store.create_or_replace_table("t", ["id", "score", "flag", "none"])
        await store.write_rows("t", [["EXP-1-1", 0.75, True, None]], start_row=1)

        rows = await store.read_all_rows("t")

        assert rows[1] == ["EXP-1-1", 0.75, True, None]

    @pytest.mark.asyncio
    async def test_overwrite_in_place(self, store):
        await store.create_or_replace_table("t", ["A"])
        await store.write_rows("t", [["1"], ["2"], ["3"]], start_row=1)
        await store.write_rows("t", [["two"]], start_row=2)

        assert await store.read_all_rows("t") == [["A"], ["1"], ["two"], ["3"]]

    @pytest.mark.asyncio
    async def test_gaps_read_as_empty_rows(self, store):
        await store.create_or_replace_table("t", ["A"])
        await store.write_rows("t", [["x"]], start_row=3)

        assert await store.read_all_rows("t") == [["A"], [], [], ["x"]]
        assert await store.row_count("t") == 4

    @pytest.mark.asyncio
    async def test_negative_start_rejected(self, store):
        await store.create_or_replace_table("t", ["A"])
        with pytest.raises(ValueError):
            await store.write_rows("t", [["x"]], start_row=-1)
