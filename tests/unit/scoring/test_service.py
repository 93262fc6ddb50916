"""Tests for RelevanceScorer and score response parsing."""

import json
from unittest.mock import AsyncMock, MagicMock

import pytest

from src.analysis.models import JobDescriptionAnalysis
from src.scoring.config import ScoringConfig
from src.scoring.service import (
    RelevanceScorer,
    ScoringError,
    ScoringPreconditionError,
    parse_score_response,
)


def _mock_client(response: str) -> MagicMock:
    client = MagicMock()
    client.complete = AsyncMock(return_value=response)
    return client


def _payload(**overrides) -> str:
    data = {
        "relevanceScore": 0.8,
        "matchingKeywords": ["Python", "pipelines"],
        "justification": "Directly relevant.",
    }
    data.update(overrides)
    return json.dumps(data)


class TestParseScoreResponse:
    def test_valid_response(self):
        result = parse_score_response(_payload())

        assert result.relevance_score == 0.8
        assert result.matching_keywords == ["Python", "pipelines"]
        assert result.justification == "Directly relevant."

    def test_fenced_response_with_commentary(self):
        raw = "Here is my answer:\n" + _payload(relevanceScore=1)

        assert parse_score_response(raw).relevance_score == 1.0
        assert parse_score_response(f"```json\n{_payload()}\n```").relevance_score == 0.8

    @pytest.mark.parametrize("score", [1.2, -0.1, "0.5", True, None])
    def test_bad_scores_are_rejected(self, score):
        with pytest.raises(ScoringError):
            parse_score_response(_payload(relevanceScore=score))

    def test_keywords_must_be_a_list(self):
        with pytest.raises(ScoringError, match="matchingKeywords"):
            parse_score_response(_payload(matchingKeywords="Python, SQL"))

    def test_justification_must_be_a_string(self):
        with pytest.raises(ScoringError, match="justification"):
            parse_score_response(_payload(justification=None))

    def test_not_json(self):
        with pytest.raises(ScoringError) as exc_info:
            parse_score_response("I think it is quite relevant")
        assert exc_info.value.raw_output == "I think it is quite relevant"

    def test_blank_keywords_are_dropped(self):
        result = parse_score_response(_payload(matchingKeywords=["Python", " ", ""]))
        assert result.matching_keywords == ["Python"]


class TestRelevanceScorer:
    @pytest.mark.asyncio
    async def test_score_calls_client_with_config(self, analysis):
        client = _mock_client(_payload())
        scorer = RelevanceScorer(client, ScoringConfig(model="gpt-4o-mini", _env_file=None))

        result = await scorer.score("Built Python pipelines", analysis)

        assert result.relevance_score == 0.8
        kwargs = client.complete.call_args.kwargs
        assert kwargs["model"] == "gpt-4o-mini"
        assert kwargs["temperature"] == 0.1
        assert "Built Python pipelines" in client.complete.call_args.args[0]

    @pytest.mark.asyncio
    async def test_empty_text_fails_before_calling_model(self, analysis):
        client = _mock_client(_payload())

        with pytest.raises(ScoringPreconditionError):
            await RelevanceScorer(client).score("  ", analysis)
        client.complete.assert_not_called()

    @pytest.mark.asyncio
    async def test_empty_analysis_fails_before_calling_model(self):
        client = _mock_client(_payload())

        with pytest.raises(ScoringPreconditionError, match="analysis"):
            await RelevanceScorer(client).score("Built X", JobDescriptionAnalysis())
        client.complete.assert_not_called()
