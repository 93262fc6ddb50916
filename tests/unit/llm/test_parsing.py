"""Tests for model output helpers."""

from src.llm.parsing import extract_json_block, strip_code_fences


class TestStripCodeFences:
    def test_removes_language_fence(self):
        assert strip_code_fences('```json\n{"a": 1}\n```') == '{"a": 1}'

    def test_plain_text_is_trimmed(self):
        assert strip_code_fences("  plain  ") == "plain"

    def test_trailing_fence_only(self):
        assert strip_code_fences("text\n```") == "text"


class TestExtractJsonBlock:
    def test_object_after_preamble(self):
        raw = 'Sure! Here you go: {"relevanceScore": 0.5, "x": {"y": 1}} thanks'
        assert extract_json_block(raw) == '{"relevanceScore": 0.5, "x": {"y": 1}}'

    def test_fenced_object(self):
        assert extract_json_block('```\n{"a": 1}\n```') == '{"a": 1}'

    def test_no_json_returns_content(self):
        assert extract_json_block("no json here") == "no json here"
