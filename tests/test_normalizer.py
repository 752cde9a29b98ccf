"""End-to-end tests for normalize_reply."""

import json

import pytest

from models.pydantic_models import (
    AnalysisVerdict,
    CombinedReport,
    FreeText,
    PayloadReport,
    StructuredMessage,
)
from normalizer import PARSE_FAILURE_HINT, locate_json, normalize_reply, parse_with_repair, sanitize_reply
from normalizer.repair import EXTRACTION_WARNING, FORMATTING_WARNING, TRUNCATION_WARNING


class TestNormalizeReply:
    def test_valid_json_has_no_warning(self):
        outcome = normalize_reply('{"explanation": "hi", "payloads": ["a"]}')
        assert isinstance(outcome, PayloadReport)
        assert outcome.warning is None

    def test_think_block_and_fence(self):
        raw = (
            "<think>I should return a verdict {not json}</think>\n"
            '```json\n{"explanation": "x", "verdict": "success", "confidence": 90}\n```'
        )
        outcome = normalize_reply(raw)
        assert isinstance(outcome, AnalysisVerdict)
        assert outcome.confidence == 90

    def test_fence_wrapping_does_not_change_result(self):
        body = '{"explanation": "e", "injectionPoints": [{"name": "id"}], "payloads": ["1"]}'
        plain = normalize_reply(body)
        fenced = normalize_reply(f"```json\n{body}\n```")
        assert isinstance(plain, CombinedReport)
        assert plain == fenced

    def test_scalar_evidence_reply_is_a_verdict(self):
        raw = '```json\n{"verdict": "success", "confidence": 90, "evidence": "script tag reflected in body"}\n```'
        outcome = normalize_reply(raw)
        assert isinstance(outcome, AnalysisVerdict)
        assert outcome.evidence == ["script tag reflected in body"]
        assert outcome.warning is None

    def test_null_injection_points_reply_is_combined(self):
        outcome = normalize_reply('{"injectionPoints": null, "payloads": ["a", "b"]}')
        assert isinstance(outcome, CombinedReport)
        assert outcome.injection_points == []

    def test_prose_around_object(self):
        outcome = normalize_reply('Here is my answer: {"explanation": "done"} Thanks!')
        assert isinstance(outcome, StructuredMessage)
        assert outcome.explanation == "done"

    def test_truncated_payloads(self):
        outcome = normalize_reply('{"payloads": ["a","b"')
        assert isinstance(outcome, PayloadReport)
        assert outcome.payloads == ["a", "b"]
        assert outcome.warning == TRUNCATION_WARNING

    def test_invalid_escape(self):
        outcome = normalize_reply('{"explanation": "It\\\'s reflected", "verdict": "success"}')
        assert isinstance(outcome, AnalysisVerdict)
        assert outcome.explanation == "It's reflected"
        assert outcome.warning == FORMATTING_WARNING

    def test_inline_request_example(self):
        outcome = normalize_reply('{"explanation": "Send POST (/login {"u":"x"}) again"}')
        assert isinstance(outcome, StructuredMessage)
        assert "POST (example request)" in outcome.explanation

    def test_concatenated_objects(self):
        outcome = normalize_reply('{"verdict": "failure"}\n{"verdict": "success"}')
        assert isinstance(outcome, AnalysisVerdict)
        assert outcome.verdict == "failure"
        assert outcome.warning == EXTRACTION_WARNING

    def test_plain_text_becomes_free_text(self):
        outcome = normalize_reply("hello world, not json")
        assert isinstance(outcome, FreeText)
        assert outcome.message == "hello world, not json"
        assert outcome.parse_error
        assert outcome.hint == PARSE_FAILURE_HINT

    def test_free_text_keeps_raw_reply(self):
        raw = "<think>hmm</think>I cannot help with that."
        outcome = normalize_reply(raw)
        assert isinstance(outcome, FreeText)
        assert outcome.message == raw

    def test_empty_reply(self):
        assert isinstance(normalize_reply(""), FreeText)

    def test_same_input_same_output(self):
        raw = '{"payloads": ["x", "y"'
        assert normalize_reply(raw) == normalize_reply(raw)

    def test_non_string_rejected(self):
        with pytest.raises(TypeError):
            normalize_reply(None)

    def test_wire_shape(self):
        wire = normalize_reply('{"explanation": "e", "injectionPoints": [], "payloads": ["p"]}').to_wire()
        assert wire["kind"] == "combined_report"
        assert wire["injectionPoints"] == []
        assert "warning" not in wire


class TestPipelineProperties:
    def test_fenced_object_in_padding_recovered_exactly(self):
        body = '{"payloads": ["<svg onload=alert(1)>"], "explanation": "x"}'
        text = f"Sure, here it is:\n\n```json\n{body}\n```\n\nLet me know!"
        assert locate_json(sanitize_reply(text)) == body

    def test_reserialized_output_classifies_the_same(self):
        raw = '<think>.</think>{"verdict": "suspicious", "confidence": 55, "evidence": ["slow"'
        first = normalize_reply(raw)
        result = parse_with_repair(locate_json(sanitize_reply(raw)))
        second = normalize_reply(json.dumps(result.data))
        assert first.kind == second.kind == "analysis_verdict"
        assert second.warning is None

    def test_quoted_text_escape(self):
        result = parse_with_repair('{"explanation": "test \\\'quoted\\\' text"}')
        assert result.success
        assert result.data["explanation"] == "test 'quoted' text"
