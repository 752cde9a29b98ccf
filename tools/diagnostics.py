"""Checks that a local Ollama server can serve the configured models."""
from __future__ import annotations
import logging
from typing import List, Optional

import httpx

from models.pydantic_models import DiagnosticReport, ModelCheck
from .config import FAST_MODEL, OLLAMA_BASE, SMART_MODEL

logger = logging.getLogger(__name__)

REQUIRED_MODELS = [
    ModelCheck(name=SMART_MODEL, alt="deepseek-r1:8b", purpose="Smart Model (Discovery)", vram="~3.5-4GB"),
    ModelCheck(name=FAST_MODEL, purpose="Fast Model (Analysis)", vram="~1.5GB"),
]


def _matches(installed: List[str], name: Optional[str]) -> bool:
    if not name:
        return False
    return any(m == name or m.startswith(name + ":") for m in installed)


async def check_running(client: httpx.AsyncClient, report: DiagnosticReport) -> None:
    try:
        resp = await client.get("/api/version", timeout=3.0)
        resp.raise_for_status()
        report.running = True
        report.version = resp.json().get("version", "unknown")
    except httpx.ConnectError as exc:
        report.errors.append(f"Ollama is not running ({exc}). Start it with: ollama serve")
    except httpx.HTTPError as exc:
        report.errors.append(f"Version check failed: {exc}")


async def list_models(client: httpx.AsyncClient, report: DiagnosticReport) -> None:
    try:
        resp = await client.get("/api/tags", timeout=5.0)
        resp.raise_for_status()
        report.installed_models = [m["name"] for m in resp.json().get("models", [])]
    except httpx.HTTPError as exc:
        report.errors.append(f"Failed to list models: {exc}")


def check_required_models(report: DiagnosticReport, required: List[ModelCheck]) -> None:
    for model in required:
        check = model.model_copy()
        if _matches(report.installed_models, model.name):
            check.installed = model.name
        elif _matches(report.installed_models, model.alt):
            check.installed = model.alt
        else:
            report.missing.append(check)
        report.required.append(check)


async def check_chat_endpoint(client: httpx.AsyncClient, report: DiagnosticReport) -> None:
    """Ask the first installed required model for a few tokens via /v1/chat/completions."""
    model = next((m.installed for m in report.required if m.installed), None)
    if not model:
        return
    report.chat_model = model
    try:
        resp = await client.post(
            "/v1/chat/completions",
            json={"model": model, "messages": [{"role": "user", "content": "Hi"}], "max_tokens": 5},
            timeout=15.0,
        )
        if resp.status_code == 404:
            report.errors.append(f"Model {model} not found in Ollama. Pull it with: ollama pull {model}")
            return
        resp.raise_for_status()
        choices = resp.json().get("choices") or []
        if choices:
            report.chat_ok = True
            report.chat_reply = choices[0].get("message", {}).get("content", "")
    except httpx.HTTPError as exc:
        report.errors.append(f"API test failed: {exc}")


async def run_diagnostics(
    base_url: str = OLLAMA_BASE,
    required: Optional[List[ModelCheck]] = None,
    transport: Optional[httpx.AsyncBaseTransport] = None,
) -> DiagnosticReport:
    """Run all checks; stops after the first one if the server is down."""
    report = DiagnosticReport()
    async with httpx.AsyncClient(base_url=base_url, transport=transport) as client:
        await check_running(client, report)
        if not report.running:
            return report
        await list_models(client, report)
        check_required_models(report, required or REQUIRED_MODELS)
        if len(report.missing) < len(report.required):
            await check_chat_endpoint(client, report)
    logger.info("[Diagnostics] running=%s missing=%d chat_ok=%s",
                report.running, len(report.missing), report.chat_ok)
    return report
