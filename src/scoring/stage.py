"""Stage 1 batch: score every unit of a record into the selection table."""

from __future__ import annotations

import asyncio
import logging

from src.analysis.models import JobDescriptionAnalysis
from src.llm.client import CompletionError
from src.resume.models import ResumeRecord
from src.scoring.config import ScoringConfig
from src.scoring.models import ScoringSummary
from src.scoring.service import RelevanceScorer, ScoringError
from src.selection.models import ScoredItemEntry, error_marker
from src.selection.store import SelectionStore
from src.selection.units import ScorableUnit, enumerate_scorable_units

logger = logging.getLogger(__name__)


class ScoringAbortedError(Exception):
    """Raised when an unexpected error stops a batch part way through.

    ``summary`` counts the rows recorded before the batch stopped.
    """

    def __init__(self, summary: ScoringSummary, original_error: Exception):
        super().__init__(f"Scoring stopped after {summary.total} units: {original_error}")
        self.summary = summary
        self.original_error = original_error


class ScoringStage:
    """Scores units sequentially and records the rows in the selection store.

    Per-unit failures become marker rows. Whatever was scored before a fatal
    error is still recorded, and the error surfaces as ScoringAbortedError.
    """

    def __init__(
        self,
        scorer: RelevanceScorer,
        selections: SelectionStore,
        config: ScoringConfig | None = None,
    ):
        self.scorer = scorer
        self.selections = selections
        self.config = config or ScoringConfig()

    async def run(
        self, record: ResumeRecord, analysis: JobDescriptionAnalysis
    ) -> ScoringSummary:
        units = enumerate_scorable_units(record)
        logger.info(f"Scoring {len(units)} units")

        summary = ScoringSummary()
        entries: list[ScoredItemEntry] = []
        try:
            for index, unit in enumerate(units, start=1):
                if self.config.inter_call_delay_seconds > 0:
                    await asyncio.sleep(self.config.inter_call_delay_seconds)

                try:
                    result = await self.scorer.score(unit.text, analysis)
                except (ScoringError, CompletionError) as e:
                    reason = getattr(e, "reason", None) or str(e)
                    logger.warning(f"[{index}/{len(units)}] {unit.unique_id} failed: {reason}")
                    entries.append(_marker_entry(unit, reason))
                    summary.failed += 1
                    summary.errors.append(f"{unit.unique_id}: {reason}")
                    continue

                entries.append(
                    ScoredItemEntry(
                        unique_id=unit.unique_id,
                        section_title=unit.section_title.value,
                        item_identifier=unit.item_identifier,
                        original_text=unit.text,
                        relevance_score=result.relevance_score,
                        matching_keywords=result.matching_keywords,
                        justification=result.justification,
                    )
                )
                summary.scored += 1
                logger.info(
                    f"[{index}/{len(units)}] {unit.unique_id} -> {result.relevance_score:.2f}"
                )
        except Exception as e:
            raise ScoringAbortedError(summary, e) from e
        finally:
            if entries:
                await self.selections.record(entries)
            summary.recorded = len(entries)

        return summary


def _marker_entry(unit: ScorableUnit, reason: str) -> ScoredItemEntry:
    return ScoredItemEntry(
        unique_id=unit.unique_id,
        section_title=unit.section_title.value,
        item_identifier=unit.item_identifier,
        original_text=unit.text,
        relevance_score=0.0,
        justification=error_marker(reason),
        user_selected=False,
    )
