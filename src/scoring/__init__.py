"""Relevance scoring of resume lines against a job description.

Public API:
    - RelevanceScorer: Scores one resume line
    - ScoringStage: Stage-1 batch writing the selection table
    - ScoreResult / ScoringSummary: Result types
    - ScoringError / ScoringPreconditionError: Failure types
    - ScoringConfig: Scoring settings
"""

from src.scoring.config import ScoringConfig
from src.scoring.models import ScoreResult, ScoringSummary
from src.scoring.service import (
    RelevanceScorer,
    ScoringError,
    ScoringPreconditionError,
    parse_score_response,
)
from src.scoring.stage import ScoringStage

__all__ = [
    "RelevanceScorer",
    "ScoringStage",
    "ScoreResult",
    "ScoringSummary",
    "ScoringError",
    "ScoringPreconditionError",
    "ScoringConfig",
    "parse_score_response",
]
