"""Tests for SummaryGenerator."""

from unittest.mock import AsyncMock, MagicMock

import pytest

from src.assembly.summary import SummaryError, SummaryGenerator, build_summary_prompt


def _mock_client(response: str) -> MagicMock:
    client = MagicMock()
    client.complete = AsyncMock(return_value=response)
    return client


class TestSummaryGenerator:
    @pytest.mark.asyncio
    async def test_strips_quotes_and_fences(self, analysis):
        client = _mock_client('```\n"Data engineer with Python depth."\n```')

        text = await SummaryGenerator(client).generate("Built X", analysis, "Ada")

        assert text == "Data engineer with Python depth."
        assert client.complete.call_args.kwargs["temperature"] == 0.5

    @pytest.mark.asyncio
    @pytest.mark.parametrize("raw", ["   ", '""', "ERROR: could not comply"])
    async def test_unusable_output(self, analysis, raw):
        with pytest.raises(SummaryError):
            await SummaryGenerator(_mock_client(raw)).generate("Built X", analysis, "Ada")

    @pytest.mark.asyncio
    async def test_summary_starting_with_error_word_is_kept(self, analysis):
        raw = "Error-budget minded data engineer who ships Python pipelines."

        text = await SummaryGenerator(_mock_client(raw)).generate("Built X", analysis, "Ada")

        assert text == raw


class TestBuildSummaryPrompt:
    def test_includes_role_and_highlights(self, analysis):
        prompt = build_summary_prompt("Built X. Led Y.", analysis, "Ada Lovelace")

        assert "Ada Lovelace" in prompt
        assert "Data Engineer at Initech" in prompt
        assert "Python, pipelines, SQL" in prompt
        assert "Built X. Led Y." in prompt
