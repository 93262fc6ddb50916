"""Stage 2 batch: tailor the human-selected bullets."""

from __future__ import annotations

import asyncio
import logging

from src.analysis.models import JobDescriptionAnalysis
from src.llm.client import CompletionError
from src.resume.models import SectionTitle
from src.selection.models import NOT_SUITABLE, ScoredItemEntry, error_marker, is_error_marker
from src.selection.store import SelectionStore
from src.tailoring.config import TailoringConfig
from src.tailoring.models import NotSuitable, TailoringSummary
from src.tailoring.service import BulletTailor, TailoringError

logger = logging.getLogger(__name__)

# Skills and certificates are names, not sentences; they are never rewritten.
UNTAILORED_SECTIONS = frozenset({SectionTitle.TECHNICAL_SKILLS.value})


class TailoringStage:
    """Walks selected bullets and writes their tailored text back."""

    def __init__(
        self,
        tailor: BulletTailor,
        selections: SelectionStore,
        config: TailoringConfig | None = None,
    ):
        self.tailor = tailor
        self.selections = selections
        self.config = config or TailoringConfig()

    def _needs_tailoring(self, entry: ScoredItemEntry) -> bool:
        if not entry.user_selected or entry.section_title in UNTAILORED_SECTIONS:
            return False
        if entry.tailored_text and not is_error_marker(entry.tailored_text):
            return self.config.retailor_existing
        return True

    async def run(
        self, analysis: JobDescriptionAnalysis, target_role_title: str
    ) -> TailoringSummary:
        entries = await self.selections.all_entries()
        selected = [e for e in entries if e.user_selected]
        pending = [e for e in selected if self._needs_tailoring(e)]

        summary = TailoringSummary(skipped=len(selected) - len(pending))
        logger.info(f"Tailoring {len(pending)} selected bullets")

        for index, entry in enumerate(pending, start=1):
            if self.config.inter_call_delay_seconds > 0:
                await asyncio.sleep(self.config.inter_call_delay_seconds)

            try:
                result = await self.tailor.tailor(
                    entry.original_text, analysis, target_role_title
                )
            except (TailoringError, CompletionError) as e:
                reason = getattr(e, "reason", None) or str(e)
                logger.warning(f"[{index}/{len(pending)}] {entry.unique_id} failed: {reason}")
                await self.selections.mark_tailored(entry.unique_id, error_marker(reason))
                summary.failed += 1
                summary.errors.append(f"{entry.unique_id}: {reason}")
                continue

            if isinstance(result, NotSuitable):
                text = NOT_SUITABLE
                summary.not_suitable += 1
            else:
                text = result.text
                summary.rewritten += 1

            await self.selections.mark_tailored(entry.unique_id, text)
            logger.info(f"[{index}/{len(pending)}] {entry.unique_id} tailored")

        return summary
