"""Data models for pipeline run state."""

import json
import uuid
from dataclasses import dataclass, field
from datetime import datetime
from enum import Enum
from typing import Any


class RunStatus(str, Enum):
    """Where a pipeline run stands between the human-gated stages."""

    SCORED = "scored"
    AWAITING_SELECTION = "awaiting_selection"
    TAILORED = "tailored"
    ASSEMBLED = "assembled"
    SUPERSEDED = "superseded"


# Unfinished runs; a newer stage 1 marks them superseded
OPEN_STATUSES = frozenset(
    {RunStatus.SCORED, RunStatus.AWAITING_SELECTION, RunStatus.TAILORED}
)

ALLOWED_TRANSITIONS: dict[RunStatus, frozenset[RunStatus]] = {
    RunStatus.SCORED: frozenset({RunStatus.AWAITING_SELECTION, RunStatus.SUPERSEDED}),
    RunStatus.AWAITING_SELECTION: frozenset(
        {RunStatus.TAILORED, RunStatus.ASSEMBLED, RunStatus.SUPERSEDED}
    ),
    RunStatus.TAILORED: frozenset(
        {RunStatus.TAILORED, RunStatus.ASSEMBLED, RunStatus.SUPERSEDED}
    ),
    RunStatus.ASSEMBLED: frozenset(),
    RunStatus.SUPERSEDED: frozenset(),
}


def can_transition(current: RunStatus, new: RunStatus) -> bool:
    return new in ALLOWED_TRANSITIONS[current]


def new_run_id() -> str:
    return uuid.uuid4().hex[:12]


@dataclass
class PipelineRun:
    """Durable state of one job-description run.

    Attributes:
        run_id: Short random identifier.
        status: Current stage status.
        job_title: Target job title from the analysis.
        company: Target company from the analysis.
        analysis: Job description analysis as a camelCase dict.
        version: Incremented on every update; used for optimistic locking.
        created_at: When stage 1 started.
        updated_at: When the run was last changed.
        output_path: Rendered document, once assembled.
        message: Human-readable note from the last stage.
    """

    run_id: str
    status: RunStatus
    job_title: str = ""
    company: str = ""
    analysis: dict[str, Any] = field(default_factory=dict)
    version: int = 1
    created_at: datetime = field(default_factory=datetime.now)
    updated_at: datetime = field(default_factory=datetime.now)
    output_path: str | None = None
    message: str | None = None

    def analysis_json(self) -> str:
        return json.dumps(self.analysis, ensure_ascii=False)

    def to_dict(self) -> dict:
        """Serialize the run to a dictionary."""
        return {
            "run_id": self.run_id,
            "status": self.status.value,
            "job_title": self.job_title,
            "company": self.company,
            "analysis": self.analysis,
            "version": self.version,
            "created_at": self.created_at.isoformat(),
            "updated_at": self.updated_at.isoformat(),
            "output_path": self.output_path,
            "message": self.message,
        }
