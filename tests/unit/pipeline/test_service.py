"""Tests for ResumePipeline stage orchestration."""

from unittest.mock import AsyncMock, MagicMock

import pytest
import pytest_asyncio

from src.config.settings import Settings
from src.pipeline.models import RunStatus
from src.pipeline.repository import PipelineRunRepository
from src.pipeline.service import ResumePipeline
from src.rendering.renderer import RenderedDocument
from src.resume.models import SectionTitle
from src.scoring.config import ScoringConfig
from src.scoring.models import ScoreResult
from src.storage.sqlite import SqliteTabularStore
from src.tailoring.config import TailoringConfig
from src.tailoring.models import Rewritten


@pytest_asyncio.fixture
async def store(tmp_path, master_rows):
    tabular = SqliteTabularStore(tmp_path / "store.db")
    await tabular.initialize()
    await tabular.create_or_replace_table("Master Resume", master_rows[0])
    await tabular.write_rows("Master Resume", master_rows[1:], start_row=1)
    yield tabular
    await tabular.close()


@pytest_asyncio.fixture
async def runs(tmp_path):
    repository = PipelineRunRepository(tmp_path / "store.db")
    await repository.initialize()
    yield repository
    await repository.close()


@pytest.fixture
def pipeline(store, runs, tmp_path, analysis):
    analyzer = MagicMock()
    analyzer.analyze = AsyncMock(return_value=analysis)

    scorer = MagicMock()
    scorer.config = ScoringConfig(inter_call_delay_seconds=0, _env_file=None)
    scorer.score = AsyncMock(return_value=ScoreResult(0.7, ["Python"], "Relevant"))

    tailor = MagicMock()
    tailor.config = TailoringConfig(inter_call_delay_seconds=0, _env_file=None)
    tailor.tailor = AsyncMock(return_value=Rewritten("Tailored bullet"))

    summary_generator = MagicMock()
    summary_generator.generate = AsyncMock(return_value="Tailored summary.")

    renderer = MagicMock()
    renderer.render = MagicMock(
        return_value=RenderedDocument(
            path=tmp_path / "out.docx", sections_rendered=["EXPERIENCE"]
        )
    )

    return ResumePipeline(
        store,
        runs,
        client=MagicMock(),
        settings=Settings(store_path=tmp_path / "store.db", _env_file=None),
        analyzer=analyzer,
        scorer=scorer,
        tailor=tailor,
        summary_generator=summary_generator,
        renderer=renderer,
    )


class TestAnalyzeAndScore:
    @pytest.mark.asyncio
    async def test_creates_run_awaiting_selection(self, pipeline):
        result = await pipeline.analyze_and_score("We need a Data Engineer...")

        assert result.success
        assert result.run.status == RunStatus.AWAITING_SELECTION
        assert result.run.job_title == "Data Engineer"
        assert result.details["scored"] == 9
        entries = await pipeline.selections.all_entries()
        assert len(entries) == 9
        assert not any(e.user_selected for e in entries)

    @pytest.mark.asyncio
    async def test_rescoring_replaces_selection_table(self, pipeline):
        await pipeline.analyze_and_score("JD one")
        await pipeline.analyze_and_score("JD two")

        assert len(await pipeline.selections.all_entries()) == 9

    @pytest.mark.asyncio
    async def test_analysis_failure_is_reported(self, pipeline):
        pipeline.analyzer.analyze = AsyncMock(side_effect=ValueError("Job description text is empty"))

        result = await pipeline.analyze_and_score("")

        assert not result.success
        assert result.run is None
        assert result.details["error_type"] == "ValueError"

    @pytest.mark.asyncio
    async def test_missing_master_table(self, pipeline, store):
        pipeline.settings.master_table = "Nope"

        result = await pipeline.analyze_and_score("JD")

        assert not result.success
        assert "Nope" in result.message


class TestLaterStages:
    @pytest.mark.asyncio
    async def test_tailor_then_assemble(self, pipeline):
        scored = await pipeline.analyze_and_score("JD")
        await pipeline.selections.set_selected("EXP-1-1", True)

        tailored = await pipeline.tailor_selected(scored.run.run_id)

        assert tailored.success
        assert tailored.run.status == RunStatus.TAILORED
        assert tailored.details["rewritten"] == 1

        assembled = await pipeline.assemble_and_render(scored.run.run_id)

        assert assembled.success, assembled.message
        assert assembled.run.status == RunStatus.ASSEMBLED
        assert assembled.run.output_path.endswith("out.docx")
        final = pipeline.renderer.render.call_args.args[0]
        [acme] = final.get_section(SectionTitle.EXPERIENCE).all_items()
        assert acme.bullets == ["Tailored bullet"]
        assert final.summary == "Tailored summary."

    @pytest.mark.asyncio
    async def test_assemble_without_tailoring(self, pipeline):
        scored = await pipeline.analyze_and_score("JD")
        await pipeline.selections.set_selected("EXP-2-2", True)

        assembled = await pipeline.assemble_and_render(scored.run.run_id)

        assert assembled.success
        pipeline.tailor.tailor.assert_not_called()

    @pytest.mark.asyncio
    async def test_assembled_run_cannot_be_tailored(self, pipeline):
        scored = await pipeline.analyze_and_score("JD")
        await pipeline.assemble_and_render(scored.run.run_id)

        result = await pipeline.tailor_selected(scored.run.run_id)

        assert not result.success
        assert result.details["error_type"] == "InvalidTransitionError"

    @pytest.mark.asyncio
    async def test_unknown_run(self, pipeline):
        result = await pipeline.tailor_selected("missing")

        assert not result.success
        assert result.details["error_type"] == "RunNotFoundError"


class TestSupersededRuns:
    """A newer stage 1 replaces the selection table older runs were scored into."""

    @pytest.mark.asyncio
    async def test_older_open_run_is_refused(self, pipeline):
        first = await pipeline.analyze_and_score("JD one")
        second = await pipeline.analyze_and_score("JD two")
        await pipeline.selections.set_selected("EXP-1-1", True)

        tailored = await pipeline.tailor_selected(first.run.run_id)
        assembled = await pipeline.assemble_and_render(first.run.run_id)

        assert not tailored.success
        assert tailored.details["error_type"] == "SupersededRunError"
        assert not assembled.success
        assert assembled.details["error_type"] == "SupersededRunError"
        pipeline.tailor.tailor.assert_not_called()
        pipeline.renderer.render.assert_not_called()

        stale = await pipeline.runs.get(first.run.run_id)
        assert stale.status == RunStatus.SUPERSEDED
        assert second.run.run_id in stale.message
        assert (await pipeline.tailor_selected(second.run.run_id)).success

    @pytest.mark.asyncio
    async def test_tailored_run_is_superseded_too(self, pipeline):
        first = await pipeline.analyze_and_score("JD one")
        await pipeline.tailor_selected(first.run.run_id)

        await pipeline.analyze_and_score("JD two")

        assert (await pipeline.runs.get(first.run.run_id)).status == RunStatus.SUPERSEDED

    @pytest.mark.asyncio
    async def test_assembled_run_keeps_its_status(self, pipeline):
        first = await pipeline.analyze_and_score("JD one")
        await pipeline.assemble_and_render(first.run.run_id)

        await pipeline.analyze_and_score("JD two")

        assert (await pipeline.runs.get(first.run.run_id)).status == RunStatus.ASSEMBLED

    @pytest.mark.asyncio
    async def test_failed_analysis_leaves_open_run_usable(self, pipeline):
        first = await pipeline.analyze_and_score("JD one")
        pipeline.analyzer.analyze = AsyncMock(side_effect=ValueError("Job description text is empty"))

        await pipeline.analyze_and_score("")

        assert (await pipeline.runs.get(first.run.run_id)).status == RunStatus.AWAITING_SELECTION
        assert (await pipeline.tailor_selected(first.run.run_id)).success


class TestPartialScoring:
    """Rows recorded before a fatal stage-1 error stay usable."""

    @pytest.mark.asyncio
    async def test_partial_rows_open_run_for_selection(self, pipeline):
        pipeline.scorer.score = AsyncMock(
            side_effect=[ScoreResult(0.9, ["Python"], "Relevant"), RuntimeError("disk gone")]
        )

        result = await pipeline.analyze_and_score("JD")

        assert not result.success
        assert result.message == "disk gone"
        assert result.details["error_type"] == "RuntimeError"
        assert result.details["recorded"] == 1
        assert result.run.status == RunStatus.AWAITING_SELECTION
        assert "1 rows recorded" in result.run.message

        assert [e.unique_id for e in await pipeline.selections.all_entries()] == ["EXP-1-1"]
        await pipeline.selections.set_selected("EXP-1-1", True)

        tailored = await pipeline.tailor_selected(result.run.run_id)
        assert tailored.success, tailored.message
        assembled = await pipeline.assemble_and_render(result.run.run_id)
        assert assembled.success, assembled.message

    @pytest.mark.asyncio
    async def test_nothing_recorded_keeps_run_scored(self, pipeline):
        pipeline.scorer.score = AsyncMock(side_effect=RuntimeError("disk gone"))

        result = await pipeline.analyze_and_score("JD")

        assert not result.success
        assert result.details["recorded"] == 0
        assert result.run.status == RunStatus.SCORED
        assert not (await pipeline.tailor_selected(result.run.run_id)).success
