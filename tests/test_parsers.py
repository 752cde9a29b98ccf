"""Tests for tools/parsers.py."""

import json
from urllib.parse import parse_qs, urlsplit

import pytest

from models.pydantic_models import ProxyRequest
from tools.parsers import (
    apply_payload,
    apply_to_parameter,
    normalize_content_type,
    parse_content_type,
    parse_http_request,
    reconstruct_http_request,
)


class TestParseHttpRequest:
    def test_json_request(self, raw_json_request):
        request = parse_http_request(raw_json_request)
        assert request.method == "POST"
        assert request.url == "https://example.com/api/login"
        assert request.headers["Content-Type"] == "application/json"
        assert json.loads(request.body) == {"username": "admin", "password": "x"}

    def test_local_host_defaults_to_http(self, raw_form_request):
        assert parse_http_request(raw_form_request).url == "http://localhost:8080/search"

    def test_http_referer_implies_http(self):
        raw = "GET /a HTTP/1.1\nHost: target.test\nReferer: http://target.test/\n\n"
        assert parse_http_request(raw).url.startswith("http://")

    def test_scheme_override(self, raw_form_request):
        assert parse_http_request(raw_form_request, "https").url.startswith("https://")

    def test_absolute_uri(self):
        request = parse_http_request("GET http://a.test/x?y=1 HTTP/1.1\n\n")
        assert request.url == "http://a.test/x?y=1"
        assert request.body == ""

    def test_crlf_line_endings(self):
        raw = "GET /x HTTP/1.1\r\nHost: a.test\r\nX-Test: 1\r\n\r\n"
        request = parse_http_request(raw)
        assert request.headers == {"Host": "a.test", "X-Test": "1"}

    def test_invalid_request_line(self):
        with pytest.raises(ValueError):
            parse_http_request("garbage")

    def test_missing_host(self):
        with pytest.raises(ValueError):
            parse_http_request("GET /x HTTP/1.1\nAccept: */*\n\n")


class TestReconstruct:
    def test_roundtrip_text(self, raw_json_request):
        text = reconstruct_http_request(parse_http_request(raw_json_request))
        assert text.startswith("POST /api/login HTTP/1.1\nHost: example.com\n")
        assert text.endswith('{"username": "admin", "password": "x"}')

    def test_query_kept(self):
        request = ProxyRequest(method="GET", url="https://a.test/s?q=1", headers={})
        assert reconstruct_http_request(request).startswith("GET /s?q=1 HTTP/1.1")


class TestContentType:
    def test_parse_with_params(self):
        base, params = parse_content_type("application/x-www-form-urlencoded; charset=UTF-8")
        assert base == "application/x-www-form-urlencoded"
        assert params == {"charset": "UTF-8"}

    def test_empty(self):
        assert normalize_content_type(None) == ""


class TestApplyPayload:
    def test_marker_wins(self):
        request = ProxyRequest(method="POST", url="https://a.test/", body='{"q": "[INJECT]", "n": 1}')
        assert apply_payload(request, "<x>", "n").body == '{"q": "<x>", "n": 1}'

    def test_named_json_key(self, raw_json_request):
        request = parse_http_request(raw_json_request)
        result = apply_payload(request, "' OR 1=1--", "password")
        assert json.loads(result.body) == {"username": "admin", "password": "' OR 1=1--"}

    def test_named_form_field(self, raw_form_request):
        request = parse_http_request(raw_form_request)
        result = apply_payload(request, "<script>", "page")
        assert parse_qs(result.body) == {"q": ["shoes"], "page": ["<script>"]}

    def test_named_header_case_insensitive(self, raw_json_request):
        request = parse_http_request(raw_json_request)
        result = apply_to_parameter(request, "evil.test", "host")
        assert result.headers["Host"] == "evil.test"

    def test_named_query_parameter(self):
        request = ProxyRequest(method="GET", url="https://a.test/s?q=1&page=2", headers={})
        result = apply_payload(request, "x y", "q")
        assert parse_qs(urlsplit(result.url).query) == {"q": ["x y"], "page": ["2"]}

    def test_unknown_parameter_leaves_request(self, raw_json_request):
        request = parse_http_request(raw_json_request)
        assert apply_payload(request, "p", "missing") == request

    def test_auto_first_json_key(self, raw_json_request):
        result = apply_payload(parse_http_request(raw_json_request), "PAY")
        assert json.loads(result.body)["username"] == "PAY"

    def test_auto_first_form_field(self, raw_form_request):
        result = apply_payload(parse_http_request(raw_form_request), "PAY")
        assert result.body == "q=PAY&page=1"

    def test_no_body_unchanged(self):
        request = ProxyRequest(method="GET", url="https://a.test/", headers={})
        assert apply_payload(request, "PAY") == request

    def test_input_request_not_mutated(self, raw_json_request):
        request = parse_http_request(raw_json_request)
        before = request.body
        apply_payload(request, "PAY", "username")
        assert request.body == before
