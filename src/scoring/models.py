"""Result types for relevance scoring."""

from __future__ import annotations

from dataclasses import dataclass, field


@dataclass(frozen=True)
class ScoreResult:
    """Relevance of one resume line to a job analysis."""

    relevance_score: float
    matching_keywords: list[str] = field(default_factory=list)
    justification: str = ""


@dataclass
class ScoringSummary:
    """Outcome of a stage-1 scoring batch."""

    scored: int = 0
    failed: int = 0
    recorded: int = 0
    errors: list[str] = field(default_factory=list)

    @property
    def total(self) -> int:
        return self.scored + self.failed
