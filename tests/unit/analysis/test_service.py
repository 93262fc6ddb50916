"""Tests for job description analysis."""

import json
from unittest.mock import AsyncMock, MagicMock

import pytest

from src.analysis.models import JobDescriptionAnalysis
from src.analysis.service import AnalysisError, JobDescriptionAnalyzer, parse_analysis


def _mock_client(response: str) -> MagicMock:
    client = MagicMock()
    client.complete = AsyncMock(return_value=response)
    return client


class TestJobDescriptionAnalysis:
    def test_every_key_present(self):
        data = JobDescriptionAnalysis().to_dict()

        assert set(data) == {
            "jobTitle",
            "companyName",
            "location",
            "keyResponsibilities",
            "requiredTechnicalSkills",
            "requiredSoftSkills",
            "experienceLevel",
            "educationRequirements",
            "primaryKeywords",
            "companyCultureClues",
        }

    def test_coerces_nulls_and_scalars(self):
        analysis = JobDescriptionAnalysis.model_validate(
            {"jobTitle": None, "primaryKeywords": "Python, SQL", "location": ["NYC", "Remote"]}
        )

        assert analysis.job_title == ""
        assert analysis.primary_keywords == ["Python", "SQL"]
        assert analysis.location == "NYC, Remote"

    def test_is_empty(self):
        assert JobDescriptionAnalysis().is_empty()
        assert not JobDescriptionAnalysis(job_title="Engineer").is_empty()


class TestParseAnalysis:
    def test_parses_fenced_json(self):
        raw = '```json\n{"jobTitle": "Data Engineer", "primaryKeywords": ["Python"]}\n```'

        analysis = parse_analysis(raw)

        assert analysis.job_title == "Data Engineer"
        assert analysis.required_soft_skills == []

    def test_invalid_json_keeps_raw_output(self):
        with pytest.raises(AnalysisError) as exc_info:
            parse_analysis("not json at all")
        assert exc_info.value.raw_output == "not json at all"

    def test_array_is_rejected(self):
        with pytest.raises(AnalysisError, match="not a JSON object"):
            parse_analysis('["Python"]')

    def test_unrecognized_object_is_rejected(self):
        with pytest.raises(AnalysisError, match="no recognizable fields"):
            parse_analysis('{"foo": "bar"}')


class TestJobDescriptionAnalyzer:
    @pytest.mark.asyncio
    async def test_empty_text_raises_without_calling_model(self):
        client = _mock_client("{}")
        analyzer = JobDescriptionAnalyzer(client)

        with pytest.raises(AnalysisError, match="empty"):
            await analyzer.analyze("   ")

        client.complete.assert_not_awaited()

    @pytest.mark.asyncio
    async def test_analyze(self):
        client = _mock_client(json.dumps({"jobTitle": "Data Engineer", "companyName": "Initech"}))
        analyzer = JobDescriptionAnalyzer(client)

        analysis = await analyzer.analyze("We are hiring a data engineer")

        assert analysis.company_name == "Initech"
        prompt = client.complete.call_args.args[0]
        assert "We are hiring a data engineer" in prompt
