"""Parsing utilities for raw HTTP requests and payload injection."""
from __future__ import annotations
import json
import logging
from typing import Dict, Tuple
from urllib.parse import parse_qsl, urlencode, urlsplit, urlunsplit

from models.pydantic_models import ProxyRequest

logger = logging.getLogger(__name__)

INJECT_MARKER = "[INJECT]"
LOCAL_HOSTS = ("localhost", "127.0.0.1")


def _default_scheme(host: str, headers: Dict[str, str]) -> str:
    """Local targets and http:// Referer/Origin imply http; everything else https."""
    if any(local in host for local in LOCAL_HOSTS):
        return "http"
    for name in ("Referer", "Origin"):
        if _get_header(headers, name).startswith("http://"):
            return "http"
    return "https"


def _get_header(headers: Dict[str, str], name: str) -> str:
    for key, value in headers.items():
        if key.lower() == name.lower():
            return value
    return ""


def parse_http_request(raw: str, scheme_override: str | None = None) -> ProxyRequest:
    """Parse raw HTTP request text into method, url, headers, body."""
    lines = raw.strip().replace("\r\n", "\n").split("\n")
    req_line = lines[0].strip()
    try:
        method, uri, *_ = req_line.split()
    except ValueError:
        raise ValueError(f"Invalid request line {req_line!r}. First line should be: METHOD /path HTTP/1.1")

    headers: Dict[str, str] = {}
    i = 1
    while i < len(lines) and lines[i].strip():
        line = lines[i].strip()
        if line.find(":") > 0:
            k, v = line.split(":", 1)
            headers[k.strip()] = v.strip()
        i += 1
    body = "\n".join(lines[i + 1:]).strip() if i < len(lines) else ""

    if uri.startswith("http://") or uri.startswith("https://"):
        url = uri
    else:
        host = _get_header(headers, "Host")
        if not host:
            raise ValueError("Host header required for relative URI in request line")
        scheme = scheme_override or _default_scheme(host, headers)
        url = f"{scheme}://{host}{uri}"
    return ProxyRequest(method=method.upper(), url=url, headers=headers, body=body)


def reconstruct_http_request(request: ProxyRequest) -> str:
    """Rebuild raw HTTP text from a parsed request (used as analysis context)."""
    parts = urlsplit(request.url)
    path = parts.path or "/"
    if parts.query:
        path += f"?{parts.query}"
    raw = f"{request.method} {path} HTTP/1.1\n"
    for key, value in request.headers.items():
        raw += f"{key}: {value}\n"
    raw += "\n"
    if request.body:
        raw += request.body
    return raw


def parse_content_type(content_type_header):
    """Parse Content-Type header and return base type and parameters.

    Example:
        >>> parse_content_type('application/x-www-form-urlencoded; charset=UTF-8')
        ('application/x-www-form-urlencoded', {'charset': 'UTF-8'})
    """
    if not content_type_header:
        return '', {}

    parts = content_type_header.split(';')
    base_type = parts[0].strip().lower()

    params = {}
    for part in parts[1:]:
        if '=' in part:
            key, value = part.split('=', 1)
            params[key.strip().lower()] = value.strip()

    return base_type, params


def normalize_content_type(content_type_header):
    """Extract just the base media type from a Content-Type header."""
    base_type, _ = parse_content_type(content_type_header)
    return base_type


def _is_form(request: ProxyRequest) -> bool:
    return normalize_content_type(_get_header(request.headers, "Content-Type")) == "application/x-www-form-urlencoded"


def _load_json_object(body: str | None):
    if not body:
        return None
    try:
        parsed = json.loads(body)
    except json.JSONDecodeError:
        return None
    return parsed if isinstance(parsed, dict) else None


def _dump_json(obj) -> str:
    return json.dumps(obj, separators=(',', ':'), ensure_ascii=False)


def _replace_form_param(body: str, name: str | None, payload: str) -> Tuple[bool, str]:
    params = parse_qsl(body, keep_blank_values=True)
    if not params:
        return False, body
    target = name if name is not None else params[0][0]
    if not any(k == target for k, _ in params):
        return False, body
    replaced = [(k, payload if k == target else v) for k, v in params]
    return True, urlencode(replaced)


def apply_to_parameter(request: ProxyRequest, payload: str, param_name: str) -> ProxyRequest:
    """Put the payload into a named JSON key, form field, header or query parameter."""
    body_json = _load_json_object(request.body)
    if body_json is not None and param_name in body_json:
        logger.info("[Inject] %s found in JSON body", param_name)
        body_json[param_name] = payload
        return request.model_copy(update={"body": _dump_json(body_json)})

    if body_json is None and request.body and _is_form(request):
        found, new_body = _replace_form_param(request.body, param_name, payload)
        if found:
            logger.info("[Inject] %s found in form body", param_name)
            return request.model_copy(update={"body": new_body})

    for key in request.headers:
        if key.lower() == param_name.lower():
            logger.info("[Inject] %s found in headers", param_name)
            headers = dict(request.headers)
            headers[key] = payload
            return request.model_copy(update={"headers": headers})

    parts = urlsplit(request.url)
    if parts.query:
        params = parse_qsl(parts.query, keep_blank_values=True)
        if any(k == param_name for k, _ in params):
            logger.info("[Inject] %s found in query string", param_name)
            query = urlencode([(k, payload if k == param_name else v) for k, v in params])
            return request.model_copy(update={"url": urlunsplit(parts._replace(query=query))})

    logger.info("[Inject] Parameter %s not found; request unchanged", param_name)
    return request


def apply_payload(request: ProxyRequest, payload: str, parameter: str | None = None) -> ProxyRequest:
    """Apply a payload at the [INJECT] marker, a named parameter, or the first body parameter."""
    if request.body and INJECT_MARKER in request.body:
        logger.info("[Inject] Using %s marker", INJECT_MARKER)
        return request.model_copy(update={"body": request.body.replace(INJECT_MARKER, payload)})

    if parameter:
        return apply_to_parameter(request, payload, parameter)

    if not request.body:
        return request

    body_json = _load_json_object(request.body)
    if body_json is not None:
        if body_json:
            first_key = next(iter(body_json))
            logger.info("[Inject] Auto-injecting into JSON key %s", first_key)
            body_json[first_key] = payload
        return request.model_copy(update={"body": _dump_json(body_json)})

    if _is_form(request):
        found, new_body = _replace_form_param(request.body, None, payload)
        if found:
            logger.info("[Inject] Auto-injecting into first form field")
            return request.model_copy(update={"body": new_body})

    logger.info("[Inject] Unknown body format; request unchanged")
    return request
