"""Tests for normalizer/repair.py."""

from normalizer.repair import (
    EXTRACTION_WARNING,
    FORMATTING_WARNING,
    TRUNCATION_WARNING,
    close_truncated,
    extract_first_object,
    parse_with_repair,
)


class TestDirectParse:
    def test_valid_json_has_no_warning(self):
        result = parse_with_repair('{"explanation": "fine"}')
        assert result.success
        assert result.data == {"explanation": "fine"}
        assert result.warning is None
        assert result.strategy == "direct"

    def test_top_level_array_parses(self):
        result = parse_with_repair("[1, 2]")
        assert result.success
        assert result.data == [1, 2]


class TestEscapeRepair:
    def test_backslash_apostrophe(self):
        result = parse_with_repair('{"explanation": "payload alert(\\\'XSS\\\') was reflected"}')
        assert result.success
        assert result.data["explanation"] == "payload alert('XSS') was reflected"
        assert result.warning == FORMATTING_WARNING
        assert result.strategy == "escape"


class TestInlineExampleRepair:
    def test_request_example_in_string(self):
        text = '{"explanation": "Try GET (/search?q="x") to confirm"}'
        result = parse_with_repair(text)
        assert result.success
        assert result.data["explanation"] == "Try GET (example request) to confirm"
        assert result.warning == FORMATTING_WARNING


class TestTruncationRepair:
    def test_unterminated_payload_array(self):
        result = parse_with_repair('{"payloads": ["a","b"')
        assert result.success
        assert result.data == {"payloads": ["a", "b"]}
        assert result.warning == TRUNCATION_WARNING

    def test_unterminated_evidence_array(self):
        result = parse_with_repair('{"verdict": "success", "evidence": ["x"')
        assert result.success
        assert result.data["evidence"] == ["x"]

    def test_closers_appended_in_nesting_order(self):
        text = '{"explanation": "x", "payloads": [{"p": "a"}, {"p": "b"'
        assert close_truncated(text, "") == text + "}]}"

    def test_brackets_inside_strings_ignored(self):
        text = '{"payloads": ["[", "{"'
        assert close_truncated(text, "") == text + "]}"

    def test_not_applied_without_marker(self):
        assert close_truncated('{"explanation": "cut', "") is None


class TestExtractionRepair:
    def test_trailing_second_object(self):
        result = parse_with_repair('{"explanation": "a"} {"explanation": "b"}')
        assert result.success
        assert result.data == {"explanation": "a"}
        assert result.warning == EXTRACTION_WARNING

    def test_braces_in_strings(self):
        assert extract_first_object('{"a": "}"} tail', "") == '{"a": "}"}'

    def test_unbalanced_returns_none(self):
        assert extract_first_object('{"a": {', "") is None


class TestFailure:
    def test_plain_text_fails_with_error(self):
        result = parse_with_repair("hello world, not json")
        assert not result.success
        assert result.data is None
        assert result.error
