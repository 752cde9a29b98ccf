"""Tools for HTTP request parsing, relaying and endpoint diagnostics."""
from .config import MODEL_ENDPOINT, SMART_MODEL, FAST_MODEL
from .parsers import (
    INJECT_MARKER,
    parse_http_request,
    reconstruct_http_request,
    apply_payload,
    apply_to_parameter,
    parse_content_type,
    normalize_content_type
)
from .proxy import (
    ProxyError,
    send_http_request,
    map_transport_error,
    format_bytes,
    status_class,
    render_response_text
)
from .diagnostics import run_diagnostics, REQUIRED_MODELS

__all__ = [
    'MODEL_ENDPOINT',
    'SMART_MODEL',
    'FAST_MODEL',
    'INJECT_MARKER',
    'parse_http_request',
    'reconstruct_http_request',
    'apply_payload',
    'apply_to_parameter',
    'parse_content_type',
    'normalize_content_type',
    'ProxyError',
    'send_http_request',
    'map_transport_error',
    'format_bytes',
    'status_class',
    'render_response_text',
    'run_diagnostics',
    'REQUIRED_MODELS'
]
