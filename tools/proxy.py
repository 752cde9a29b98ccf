"""Pass-through HTTP relay used to avoid browser CORS restrictions."""
from __future__ import annotations
import logging
import socket
import time
from typing import Optional
from urllib.parse import urlsplit

import httpx

from models.pydantic_models import ErrorBody, ProxyRequest, ProxyResponse
from .config import PROXY_MAX_REDIRECTS, PROXY_TIMEOUT

logger = logging.getLogger(__name__)

BODYLESS_METHODS = {"GET", "HEAD"}
DNS_FAILURE_HINTS = (
    "name or service not known",
    "nodename nor servname",
    "getaddrinfo failed",
    "temporary failure in name resolution",
    "no address associated with hostname",
)


class ProxyError(RuntimeError):
    """Transport failure relaying a request, mapped to a fixed taxonomy."""

    def __init__(self, status_code: int, error: str, message: str, details: str):
        super().__init__(message)
        self.status_code = status_code
        self.error = error
        self.message = message
        self.details = details

    def to_body(self) -> ErrorBody:
        return ErrorBody(error=self.error, message=self.message, details=self.details)


def _is_dns_failure(exc: BaseException) -> bool:
    seen = exc
    while seen is not None:
        if isinstance(seen, socket.gaierror):
            return True
        if any(hint in str(seen).lower() for hint in DNS_FAILURE_HINTS):
            return True
        seen = seen.__cause__ or seen.__context__
    return False


def map_transport_error(exc: Exception, url: str) -> ProxyError:
    """Translate a send failure into host-not-found/refused/timeout/generic."""
    if isinstance(exc, httpx.TimeoutException):
        return ProxyError(408, "Request timeout", "Request took too long to complete",
                          "Server may be slow or unresponsive")
    if isinstance(exc, httpx.ConnectError):
        if _is_dns_failure(exc):
            host = urlsplit(url).hostname or url
            return ProxyError(400, "Host not found", f"Could not resolve hostname: {host}",
                              "Check if the URL is correct")
        return ProxyError(400, "Connection refused", "Target server refused the connection",
                          "Server may be down or blocking connections")
    return ProxyError(500, "Request failed", str(exc) or type(exc).__name__, type(exc).__name__)


def clean_headers(headers: dict) -> dict:
    """Drop Content-Length so the client recomputes it after payload changes."""
    return {k: v for k, v in headers.items() if k.lower() != "content-length"}


async def send_http_request(
    request: ProxyRequest,
    client: Optional[httpx.AsyncClient] = None,
    timeout: float = PROXY_TIMEOUT,
    proxy: str | None = None,
    insecure: bool = False,
) -> ProxyResponse:
    """Relay one request to its target and return status, headers, body, time and size."""
    method = request.method.upper()
    logger.info("[Proxy] %s %s", method, request.url)
    logger.info("[Proxy] Body: %s", (request.body or "(empty)")[:100])

    headers = clean_headers(request.headers)
    if len(headers) != len(request.headers) and request.body:
        logger.info("[Proxy] Removed Content-Length header; body is %d bytes",
                    len(request.body.encode("utf-8")))

    content = request.body if request.body and method not in BODYLESS_METHODS else None

    owns_client = client is None
    if owns_client:
        client_args = {"follow_redirects": True, "max_redirects": PROXY_MAX_REDIRECTS, "timeout": timeout}
        if proxy:
            client_args["proxy"] = proxy
        if insecure:
            client_args["verify"] = False
        client = httpx.AsyncClient(**client_args)

    try:
        start_time = time.perf_counter()
        resp = await client.request(method, request.url, headers=headers, content=content, timeout=timeout)
        elapsed_ms = int((time.perf_counter() - start_time) * 1000)
    except (httpx.HTTPError, httpx.InvalidURL) as exc:
        logger.warning("[Proxy] Request error: %s", exc)
        raise map_transport_error(exc, request.url) from exc
    except Exception as exc:
        # e.g. UnicodeEncodeError for a header value httpx cannot encode
        logger.warning("[Proxy] Could not build or send request: %r", exc)
        raise map_transport_error(exc, request.url) from exc
    finally:
        if owns_client:
            await client.aclose()

    body = resp.text
    return ProxyResponse(
        status=resp.status_code,
        status_text=resp.reason_phrase,
        headers=dict(resp.headers),
        body=body,
        time=elapsed_ms,
        size=len(body.encode("utf-8")),
    )


def format_bytes(size: int) -> str:
    """Human readable size (Bytes/KB/MB)."""
    if size <= 0:
        return "0 Bytes"
    units = ["Bytes", "KB", "MB"]
    value = float(size)
    i = 0
    while value >= 1024 and i < len(units) - 1:
        value /= 1024
        i += 1
    return f"{round(value, 2):g} {units[i]}"


def status_class(status) -> str:
    """success for 2xx, failure for 4xx/5xx, suspicious otherwise."""
    if not isinstance(status, int):
        return "failure"
    if 200 <= status < 300:
        return "success"
    if status >= 400:
        return "failure"
    return "suspicious"


def render_response_text(response: ProxyResponse) -> str:
    """Raw HTTP-style rendering of a relayed response plus timing metadata."""
    text = f"HTTP/1.1 {response.status} {response.status_text}\n"
    for key, value in response.headers.items():
        text += f"{key}: {value}\n"
    text += f"\n{response.body}"
    text += f"\n\n---\n⏱️ Time: {response.time}ms | 📦 Size: {format_bytes(response.size)}"
    return text
