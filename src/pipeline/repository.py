"""Database repository for pipeline runs.

Runs are updated with optimistic concurrency: every update names the
version it was based on and fails if another writer got there first.
"""

import json
from collections.abc import AsyncGenerator
from contextlib import asynccontextmanager
from datetime import datetime
from pathlib import Path

import aiosqlite

from src.pipeline.models import OPEN_STATUSES, PipelineRun, RunStatus, can_transition

CREATE_TABLE_SQL = """
CREATE TABLE IF NOT EXISTS pipeline_runs (
    run_id TEXT PRIMARY KEY,
    status TEXT NOT NULL,
    job_title TEXT NOT NULL DEFAULT '',
    company TEXT NOT NULL DEFAULT '',
    analysis TEXT NOT NULL DEFAULT '{}',
    version INTEGER NOT NULL DEFAULT 1,
    created_at TEXT NOT NULL,
    updated_at TEXT NOT NULL,
    output_path TEXT,
    message TEXT
)
"""

CREATE_INDEX_SQL = """
CREATE INDEX IF NOT EXISTS idx_pipeline_runs_created ON pipeline_runs(created_at);
"""

_UPDATABLE_FIELDS = frozenset({"job_title", "company", "analysis", "output_path", "message"})


class RunNotFoundError(Exception):
    """Raised when a run id does not exist."""

    def __init__(self, run_id: str):
        super().__init__(f"Pipeline run not found: {run_id}")
        self.run_id = run_id


class InvalidTransitionError(Exception):
    """Raised when a status change is not allowed."""

    def __init__(self, run_id: str, current: RunStatus, requested: RunStatus):
        super().__init__(
            f"Run {run_id} cannot move from {current.value} to {requested.value}"
        )
        self.run_id = run_id
        self.current = current
        self.requested = requested


class StaleRunError(Exception):
    """Raised when a run changed since the caller read it."""

    def __init__(self, run_id: str, expected_version: int, actual_version: int | None):
        super().__init__(
            f"Run {run_id} was modified concurrently "
            f"(expected version {expected_version}, found {actual_version})"
        )
        self.run_id = run_id
        self.expected_version = expected_version
        self.actual_version = actual_version


class SupersededRunError(Exception):
    """Raised when a newer run has replaced the selection table a run was scored into."""

    def __init__(self, run_id: str):
        super().__init__(
            f"Run {run_id} was superseded by a newer scoring run; "
            "its selection table no longer exists"
        )
        self.run_id = run_id


class PipelineRunRepository:
    """Async SQLite repository for pipeline runs."""

    def __init__(self, db_path: Path | str):
        """Initialize the repository.

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
        """Initialize the database, creating tables if needed."""
        self.db_path.parent.mkdir(parents=True, exist_ok=True)

        async with self._get_connection() as conn:
            await conn.execute(CREATE_TABLE_SQL)
            await conn.executescript(CREATE_INDEX_SQL)
            await conn.commit()

    async def close(self) -> None:
        """Close the database connection."""
        if self._connection is not None:
            await self._connection.close()
            self._connection = None

    async def create(self, run: PipelineRun) -> PipelineRun:
        """Insert a new run.

        Raises:
            sqlite3.IntegrityError: If the run id already exists.
        """
        async with self._get_connection() as conn:
            await conn.execute(
                """
                INSERT INTO pipeline_runs (
                    run_id, status, job_title, company, analysis, version,
                    created_at, updated_at, output_path, message
                ) VALUES (?, ?, ?, ?, ?, ?, ?, ?, ?, ?)
                """,
                (
                    run.run_id,
                    run.status.value,
                    run.job_title,
                    run.company,
                    run.analysis_json(),
                    run.version,
                    run.created_at.isoformat(),
                    run.updated_at.isoformat(),
                    run.output_path,
                    run.message,
                ),
            )
            await conn.commit()
        return run

    async def get(self, run_id: str) -> PipelineRun | None:
        """Get a run by id, or None."""
        async with self._get_connection() as conn:
            cursor = await conn.execute(
                "SELECT * FROM pipeline_runs WHERE run_id = ?", (run_id,)
            )
            row = await cursor.fetchone()

        if row is None:
            return None
        return self._row_to_run(row)

    async def list_recent(self, limit: int = 20) -> list[PipelineRun]:
        """Most recently created runs first."""
        async with self._get_connection() as conn:
            cursor = await conn.execute(
                "SELECT * FROM pipeline_runs ORDER BY created_at DESC LIMIT ?",
                (limit,),
            )
            rows = await cursor.fetchall()

        return [self._row_to_run(row) for row in rows]

    async def transition(
        self,
        run_id: str,
        new_status: RunStatus,
        expected_version: int,
        **fields: object,
    ) -> PipelineRun:
        """Move a run to a new status and update extra fields.

        Args:
            run_id: Run to update.
            new_status: Target status.
            expected_version: Version the caller last read.
            **fields: Any of job_title, company, analysis, output_path, message.

        Returns:
            The updated run.

        Raises:
            RunNotFoundError: If the run does not exist.
            InvalidTransitionError: If the status change is not allowed.
            StaleRunError: If the version no longer matches.
        """
        unknown = set(fields) - _UPDATABLE_FIELDS
        if unknown:
            raise ValueError(f"Cannot update fields: {sorted(unknown)}")

        current = await self.get(run_id)
        if current is None:
            raise RunNotFoundError(run_id)
        if current.version != expected_version:
            raise StaleRunError(run_id, expected_version, current.version)
        if not can_transition(current.status, new_status):
            raise InvalidTransitionError(run_id, current.status, new_status)

        assignments = ["status = ?", "version = version + 1", "updated_at = ?"]
        params: list[object] = [new_status.value, datetime.now().isoformat()]
        for name, value in fields.items():
            assignments.append(f"{name} = ?")
            params.append(json.dumps(value) if name == "analysis" else value)
        params.extend([run_id, expected_version])

        async with self._get_connection() as conn:
            cursor = await conn.execute(
                f"UPDATE pipeline_runs SET {', '.join(assignments)} "
                "WHERE run_id = ? AND version = ?",
                params,
            )
            await conn.commit()
            updated = cursor.rowcount

        if updated == 0:
            latest = await self.get(run_id)
            raise StaleRunError(
                run_id, expected_version, latest.version if latest else None
            )

        refreshed = await self.get(run_id)
        if refreshed is None:
            raise RunNotFoundError(run_id)
        return refreshed

    async def supersede_open_runs(self, current_run_id: str, message: str) -> list[str]:
        """Mark every unfinished run other than current_run_id as superseded.

        Returns:
            Ids of the runs that were superseded.
        """
        statuses = sorted(s.value for s in OPEN_STATUSES)
        placeholders = ", ".join("?" for _ in statuses)
        where = f"run_id != ? AND status IN ({placeholders})"

        async with self._get_connection() as conn:
            cursor = await conn.execute(
                f"SELECT run_id FROM pipeline_runs WHERE {where}",
                (current_run_id, *statuses),
            )
            run_ids = [row["run_id"] for row in await cursor.fetchall()]
            if run_ids:
                await conn.execute(
                    "UPDATE pipeline_runs SET status = ?, version = version + 1, "
                    f"updated_at = ?, message = ? WHERE {where}",
                    (
                        RunStatus.SUPERSEDED.value,
                        datetime.now().isoformat(),
                        message,
                        current_run_id,
                        *statuses,
                    ),
                )
                await conn.commit()

        return run_ids

    def _row_to_run(self, row: aiosqlite.Row) -> PipelineRun:
        return PipelineRun(
            run_id=row["run_id"],
            status=RunStatus(row["status"]),
            job_title=row["job_title"],
            company=row["company"],
            analysis=json.loads(row["analysis"] or "{}"),
            version=row["version"],
            created_at=datetime.fromisoformat(row["created_at"]),
            updated_at=datetime.fromisoformat(row["updated_at"]),
            output_path=row["output_path"],
            message=row["message"],
        )
