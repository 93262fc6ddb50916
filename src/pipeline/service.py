"""Three-stage resume pipeline.

Stage 1 analyzes a job description and scores the master resume into the
selection table. A human then marks rows as selected. Stage 2 tailors the
selected bullets, and stage 3 assembles and renders the final document.
Run state lives in PipelineRunRepository so the stages can be invoked
separately, hours apart.
"""

from __future__ import annotations

import logging
from dataclasses import asdict, dataclass
from pathlib import Path
from typing import Any

from src.analysis.models import JobDescriptionAnalysis
from src.analysis.service import JobDescriptionAnalyzer
from src.assembly.assembler import ResumeAssembler
from src.assembly.summary import SummaryGenerator
from src.config.settings import Settings
from src.llm.client import CompletionClient
from src.pipeline.models import PipelineRun, RunStatus, new_run_id
from src.pipeline.repository import (
    InvalidTransitionError,
    PipelineRunRepository,
    RunNotFoundError,
    SupersededRunError,
)
from src.rendering.renderer import DocxRenderer
from src.resume.models import ResumeRecord
from src.resume.normalizer import ResumeNormalizer
from src.scoring.service import RelevanceScorer
from src.scoring.stage import ScoringAbortedError, ScoringStage
from src.selection.store import SelectionStore
from src.storage.base import TabularStore
from src.tailoring.service import BulletTailor
from src.tailoring.stage import TailoringStage

logger = logging.getLogger(__name__)

_POST_SELECTION = frozenset({RunStatus.AWAITING_SELECTION, RunStatus.TAILORED})


@dataclass
class StageResult:
    """Outcome of one pipeline stage."""

    success: bool
    message: str
    details: dict[str, Any] | None = None
    run: PipelineRun | None = None


class ResumePipeline:
    """Orchestrates the analyze/score, tailor and assemble/render stages."""

    def __init__(
        self,
        store: TabularStore,
        runs: PipelineRunRepository,
        client: CompletionClient,
        settings: Settings | None = None,
        *,
        normalizer: ResumeNormalizer | None = None,
        analyzer: JobDescriptionAnalyzer | None = None,
        scorer: RelevanceScorer | None = None,
        tailor: BulletTailor | None = None,
        assembler: ResumeAssembler | None = None,
        summary_generator: SummaryGenerator | None = None,
        renderer: DocxRenderer | None = None,
    ):
        """Initialize the pipeline.

        Args:
            store: Tabular store holding the master and selection tables.
            runs: Repository for run state.
            client: Completion client shared by every LLM-backed component.
            settings: Optional Settings. Uses defaults if not provided.
        """
        self.settings = settings or Settings()
        self.store = store
        self.runs = runs
        self.selections = SelectionStore(store, self.settings.selection_table)

        self.normalizer = normalizer or ResumeNormalizer()
        self.analyzer = analyzer or JobDescriptionAnalyzer(client)
        self.scorer = scorer or RelevanceScorer(client)
        self.tailor = tailor or BulletTailor(client)
        self.assembler = assembler or ResumeAssembler()
        self.summary_generator = summary_generator or SummaryGenerator(
            client, self.assembler.config
        )
        self.renderer = renderer or DocxRenderer()

    async def load_master(self) -> ResumeRecord:
        """Rebuild the master record from the master table."""
        rows = await self.store.read_all_rows(self.settings.master_table)
        return self.normalizer.normalize(rows)

    async def _require_run(self, run_id: str, target: RunStatus) -> PipelineRun:
        run = await self.runs.get(run_id)
        if run is None:
            raise RunNotFoundError(run_id)
        if run.status == RunStatus.SUPERSEDED:
            raise SupersededRunError(run_id)
        if run.status not in _POST_SELECTION:
            raise InvalidTransitionError(run_id, run.status, target)
        return run

    async def _reopen_after_partial_scoring(
        self, run: PipelineRun, error: ScoringAbortedError
    ) -> PipelineRun:
        """Open a partly scored run for selection so the recorded rows stay usable."""
        message = (
            f"Scoring stopped early with {error.summary.recorded} rows recorded: "
            f"{error.original_error}. Select from the recorded rows or rerun scoring."
        )
        try:
            return await self.runs.transition(
                run.run_id, RunStatus.AWAITING_SELECTION, run.version, message=message
            )
        except Exception as e:
            logger.error(f"Could not open run {run.run_id} for selection: {e}")
            return run

    async def analyze_and_score(self, jd_text: str) -> StageResult:
        """Stage 1: analyze the job description and score the master resume.

        Older unfinished runs are superseded, since their selection table is
        replaced. If scoring stops part way, the run still opens for selection
        over the rows recorded so far, and the result reports failure.
        """
        run: PipelineRun | None = None
        try:
            master = await self.load_master()
            analysis = await self.analyzer.analyze(jd_text)

            run = await self.runs.create(
                PipelineRun(
                    run_id=new_run_id(),
                    status=RunStatus.SCORED,
                    job_title=analysis.job_title,
                    company=analysis.company_name,
                    analysis=analysis.to_dict(),
                )
            )
            logger.info(f"Run {run.run_id}: scoring for {run.job_title or 'untitled role'}")

            superseded = await self.runs.supersede_open_runs(
                run.run_id, f"Superseded by run {run.run_id}"
            )
            if superseded:
                logger.info(f"Run {run.run_id} supersedes {', '.join(superseded)}")

            await self.selections.reset()
            stage = ScoringStage(self.scorer, self.selections, self.scorer.config)
            summary = await stage.run(master, analysis)

            message = (
                f"Scored {summary.scored} items ({summary.failed} failed). "
                f"Mark rows in '{self.settings.selection_table}' and run tailoring."
            )
            run = await self.runs.transition(
                run.run_id, RunStatus.AWAITING_SELECTION, run.version, message=message
            )
            return StageResult(success=True, message=message, details=asdict(summary), run=run)

        except ScoringAbortedError as e:
            logger.error(f"Analyze and score failed: {e}")
            if run is not None and e.summary.recorded:
                run = await self._reopen_after_partial_scoring(run, e)
            return StageResult(
                success=False,
                message=str(e.original_error),
                details={"error_type": type(e.original_error).__name__, **asdict(e.summary)},
                run=run,
            )

        except Exception as e:
            logger.error(f"Analyze and score failed: {e}")
            return StageResult(
                success=False,
                message=str(e),
                details={"error_type": type(e).__name__},
                run=run,
            )

    async def tailor_selected(self, run_id: str) -> StageResult:
        """Stage 2: tailor the bullets a human marked as selected."""
        run: PipelineRun | None = None
        try:
            run = await self._require_run(run_id, RunStatus.TAILORED)
            analysis = JobDescriptionAnalysis.from_dict(run.analysis)

            stage = TailoringStage(self.tailor, self.selections, self.tailor.config)
            summary = await stage.run(analysis, run.job_title)

            message = (
                f"Tailored {summary.rewritten} bullets, {summary.not_suitable} not suitable, "
                f"{summary.failed} failed"
            )
            run = await self.runs.transition(
                run.run_id, RunStatus.TAILORED, run.version, message=message
            )
            return StageResult(success=True, message=message, details=asdict(summary), run=run)

        except Exception as e:
            logger.error(f"Tailoring failed for run {run_id}: {e}")
            return StageResult(
                success=False,
                message=str(e),
                details={"error_type": type(e).__name__},
                run=run,
            )

    async def assemble_and_render(
        self, run_id: str, template_path: Path | str | None = None
    ) -> StageResult:
        """Stage 3: assemble the final record and render it."""
        run: PipelineRun | None = None
        try:
            run = await self._require_run(run_id, RunStatus.ASSEMBLED)
            analysis = JobDescriptionAnalysis.from_dict(run.analysis)

            master = await self.load_master()
            entries = await self.selections.all_entries()
            final = await self.assembler.assemble(
                master, analysis, entries, self.summary_generator
            )
            rendered = self.renderer.render(final, template_path=template_path)

            message = f"Rendered {len(rendered.sections_rendered)} sections to {rendered.path}"
            run = await self.runs.transition(
                run.run_id,
                RunStatus.ASSEMBLED,
                run.version,
                output_path=str(rendered.path),
                message=message,
            )
            return StageResult(
                success=True,
                message=message,
                details={
                    "path": str(rendered.path),
                    "sections_rendered": rendered.sections_rendered,
                    "placeholders_filled": rendered.placeholders_filled,
                },
                run=run,
            )

        except Exception as e:
            logger.error(f"Assembly failed for run {run_id}: {e}")
            return StageResult(
                success=False,
                message=str(e),
                details={"error_type": type(e).__name__},
                run=run,
            )
