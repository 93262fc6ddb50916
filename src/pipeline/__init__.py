"""Pipeline orchestration and durable run state.

Public API:
    - ResumePipeline: The three stage entry points
    - StageResult: Structured stage outcome
    - PipelineRun / RunStatus: Run state
    - PipelineRunRepository: aiosqlite persistence with optimistic locking
"""

from src.pipeline.models import ALLOWED_TRANSITIONS, PipelineRun, RunStatus
from src.pipeline.repository import (
    InvalidTransitionError,
    PipelineRunRepository,
    RunNotFoundError,
    StaleRunError,
)
from src.pipeline.service import ResumePipeline, StageResult

__all__ = [
    "ResumePipeline",
    "StageResult",
    "PipelineRun",
    "RunStatus",
    "ALLOWED_TRANSITIONS",
    "PipelineRunRepository",
    "InvalidTransitionError",
    "RunNotFoundError",
    "StaleRunError",
]
