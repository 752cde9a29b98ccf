"""Tests for normalizer/classifier.py."""

from models.pydantic_models import (
    AnalysisVerdict,
    CombinedReport,
    FreeText,
    InjectionReport,
    PayloadReport,
    StructuredMessage,
)
from normalizer.classifier import classify, payload_advisory, summarize_fields


class TestPrecedence:
    def test_injection_points_and_payloads_is_combined(self):
        data = {
            "explanation": "roadmap",
            "injectionPoints": [{"name": "q", "location": "Query", "risk": "HIGH", "reason": "reflected"}],
            "payloads": ["<script>alert(1)</script>"],
        }
        outcome = classify(data, "raw")
        assert isinstance(outcome, CombinedReport)
        assert outcome.injection_points[0].name == "q"
        assert outcome.payloads == ["<script>alert(1)</script>"]

    def test_combined_wins_over_verdict(self):
        data = {"injectionPoints": [], "payloads": [], "verdict": "success"}
        assert isinstance(classify(data, "raw"), CombinedReport)

    def test_injection_only(self):
        outcome = classify({"explanation": "e", "injectionPoints": []}, "raw")
        assert isinstance(outcome, InjectionReport)

    def test_payloads_only(self):
        outcome = classify({"payloads": ["a", "b"]}, "raw")
        assert isinstance(outcome, PayloadReport)
        assert outcome.advisory is None
        assert outcome.explanation is None

    def test_verdict_keeps_values_verbatim(self):
        data = {"explanation": "x", "verdict": "success", "confidence": 90, "evidence": ["e1"]}
        outcome = classify(data, "raw")
        assert isinstance(outcome, AnalysisVerdict)
        assert outcome.verdict == "success"
        assert outcome.confidence == 90
        assert outcome.evidence == ["e1"]

    def test_out_of_range_confidence_not_clamped(self):
        outcome = classify({"verdict": "SUCCESS", "confidence": 250}, "raw")
        assert outcome.verdict == "SUCCESS"
        assert outcome.confidence == 250
        assert outcome.evidence == []

    def test_unknown_risk_passed_through(self):
        outcome = classify({"injectionPoints": [{"name": "id", "risk": "CRITICAL", "extra": 1}]}, "raw")
        assert outcome.injection_points[0].risk == "CRITICAL"

    def test_non_string_payload_items_serialized(self):
        outcome = classify({"payloads": ["a", {"x": 1}]}, "raw")
        assert outcome.payloads == ["a", '{"x": 1}']


class TestLooseShapes:
    """Field presence alone picks the variant, whatever the value's shape."""

    def test_scalar_evidence_is_still_a_verdict(self):
        data = {"verdict": "success", "confidence": 90, "evidence": "script tag reflected in body"}
        outcome = classify(data, "raw")
        assert isinstance(outcome, AnalysisVerdict)
        assert outcome.evidence == ["script tag reflected in body"]
        assert outcome.confidence == 90

    def test_scalar_payloads_is_still_a_payload_report(self):
        outcome = classify({"explanation": "one payload", "payloads": "' OR 1=1--"}, "raw")
        assert isinstance(outcome, PayloadReport)
        assert outcome.payloads == ["' OR 1=1--"]
        assert outcome.explanation == "one payload"

    def test_non_string_explanation_is_stringified(self):
        outcome = classify({"explanation": 42, "verdict": "failure", "confidence": 10}, "raw")
        assert isinstance(outcome, AnalysisVerdict)
        assert outcome.explanation == "42"
        assert outcome.verdict == "failure"

    def test_null_injection_points_is_still_combined(self):
        outcome = classify({"injectionPoints": None, "payloads": ["a", "b"]}, "raw")
        assert isinstance(outcome, CombinedReport)
        assert outcome.injection_points == []
        assert outcome.payloads == ["a", "b"]

    def test_scalar_injection_points_kept(self):
        outcome = classify({"explanation": "e", "injectionPoints": "not a list"}, "raw")
        assert isinstance(outcome, InjectionReport)
        assert outcome.injection_points == ["not a list"]

    def test_mixed_injection_point_items(self):
        outcome = classify({"injectionPoints": [{"name": "id", "risk": 3}, "X-Token", 7]}, "raw")
        assert isinstance(outcome, InjectionReport)
        assert outcome.injection_points[0].name == "id"
        assert outcome.injection_points[0].risk == "3"
        assert outcome.injection_points[1:] == ["X-Token", 7]

    def test_null_payloads_and_evidence_become_empty(self):
        assert classify({"payloads": None}, "raw").payloads == []
        outcome = classify({"verdict": "suspicious", "evidence": None}, "raw")
        assert isinstance(outcome, AnalysisVerdict)
        assert outcome.evidence == []

    def test_loose_shapes_serialize_on_the_wire(self):
        outcome = classify({"injectionPoints": [{"name": "q"}, "raw item"], "payloads": 5}, "raw")
        wire = outcome.to_wire()
        assert wire["kind"] == "combined_report"
        assert wire["injectionPoints"] == [{"name": "q"}, "raw item"]
        assert wire["payloads"] == ["5"]

    def test_non_string_explanation_in_structured_message(self):
        outcome = classify({"explanation": {"step": 1}}, "raw")
        assert isinstance(outcome, StructuredMessage)
        assert outcome.explanation == '{"step": 1}'
        assert outcome.summary == '{"step": 1}'


class TestFallbacks:
    def test_explanation_only_is_structured_message(self):
        data = {"explanation": "Looks fine", "status": "done", "note": "retry later", "count": 3}
        outcome = classify(data, "raw")
        assert isinstance(outcome, StructuredMessage)
        assert outcome.summary == "Looks fine\n\nStatus: done\nNote: retry later"
        assert outcome.fields == data

    def test_object_without_known_fields_is_free_text(self):
        outcome = classify({"foo": "bar"}, "the raw reply")
        assert isinstance(outcome, FreeText)
        assert outcome.message == "the raw reply"
        assert outcome.parse_error is None

    def test_non_object_is_free_text(self):
        outcome = classify([1, 2, 3], "[1, 2, 3]")
        assert isinstance(outcome, FreeText)

    def test_warning_carried(self):
        outcome = classify({"payloads": ["a"]}, "raw", "repaired")
        assert outcome.warning == "repaired"


class TestAdvisory:
    def test_threshold(self):
        assert payload_advisory(20) is None
        assert payload_advisory(21).startswith("Received 21 payloads")

    def test_large_payload_list_flags_advisory(self):
        outcome = classify({"payloads": [str(i) for i in range(22)]}, "raw")
        assert len(outcome.payloads) == 22
        assert "22" in outcome.advisory

    def test_combined_report_also_advised(self):
        outcome = classify({"injectionPoints": [], "payloads": ["p"] * 25}, "raw")
        assert outcome.advisory is not None


def test_summarize_fields_explanation_first():
    assert summarize_fields({"explanation": "only"}) == "only"
