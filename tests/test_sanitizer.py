"""Tests for normalizer/sanitizer.py."""

from normalizer.sanitizer import sanitize_reply


class TestThinkBlocks:
    def test_removes_think_block(self):
        raw = '<think>The user wants XSS payloads {"draft": 1}</think>\n{"explanation": "ok"}'
        assert sanitize_reply(raw) == '{"explanation": "ok"}'

    def test_removes_multiline_think_block_case_insensitive(self):
        raw = "<THINK>\nline one\nline two\n</THINK>\n\n{}"
        assert sanitize_reply(raw) == "{}"

    def test_removes_stray_tags(self):
        assert sanitize_reply('</think>{"a": 1}') == '{"a": 1}'

    def test_no_think_left_behind(self):
        raw = "<think>a</think>x<think>b</think>y"
        assert "think" not in sanitize_reply(raw)


class TestFences:
    def test_strips_json_fence(self):
        assert sanitize_reply('```json\n{"a": 1}\n```') == '{"a": 1}'

    def test_strips_plain_fence(self):
        assert sanitize_reply('```\n{"a": 1}\n```  \n') == '{"a": 1}'

    def test_leaves_inner_text_untouched(self):
        assert sanitize_reply("  just words  ") == "just words"

    def test_empty_reply(self):
        assert sanitize_reply("") == ""
