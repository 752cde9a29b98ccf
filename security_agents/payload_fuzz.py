"""Payload Fuzz Agent: send a batch of payloads and record a session history."""
from __future__ import annotations
import asyncio
import logging
from typing import List, Optional, Tuple, Union

import httpx

from models.pydantic_models import (
    NOT_ANALYZED,
    PAYLOAD_SOFT_CAP,
    AnalysisVerdict,
    HistoryEntry,
    ProxyRequest,
    ProxyResponse,
)
from tools.parsers import apply_payload, parse_http_request, reconstruct_http_request
from tools.proxy import (
    ProxyError,
    format_bytes,
    map_transport_error,
    render_response_text,
    send_http_request,
    status_class,
)
from .agent_sdk import ModelEndpointError, SecurityAgentRunner
from .base import BaseAgent
from .fuzz_verdict import ResponseVerdictAgent

logger = logging.getLogger(__name__)

SendResult = Tuple[str, ProxyRequest, Union[ProxyResponse, ProxyError]]


def format_verdict(verdict, confidence) -> str:
    return f"{verdict} ({confidence}%)"


class PayloadFuzzAgent(BaseAgent):
    """Applies each payload to a raw request, relays them concurrently and optionally judges each response."""

    def __init__(
        self,
        client: httpx.AsyncClient,
        runner: Optional[SecurityAgentRunner] = None,
        analyze: bool = True,
        max_payloads: int = PAYLOAD_SOFT_CAP,
    ):
        super().__init__(client, runner)
        self.analyze = analyze
        self.max_payloads = max_payloads

    async def _send_payloads(
        self, base_request: ProxyRequest, payloads: List[str], parameter: Optional[str]
    ) -> List[SendResult]:
        """Send the payload variants and collect HTTP responses."""
        tasks = []
        for payload in payloads:
            sent = apply_payload(base_request, payload, parameter)
            task = asyncio.create_task(send_http_request(sent, client=self.client))
            tasks.append((payload, sent, task))

        results: List[SendResult] = []
        for payload, sent, task in tasks:
            try:
                resp = await task
                logger.info("[PayloadFuzz] payload=%r, status=%s", payload[:50], resp.status)
                results.append((payload, sent, resp))
            except ProxyError as exc:
                logger.warning("[PayloadFuzz] Request error for payload %r: %s", payload[:50], exc)
                results.append((payload, sent, exc))
            except Exception as exc:
                # One bad variant must not abort the rest of the batch
                logger.error("[PayloadFuzz] Unexpected error for payload %r: %s", payload[:50], exc)
                results.append((payload, sent, map_transport_error(exc, sent.url)))
        return results

    async def _judge(self, sent_request: str, response_text: str) -> str:
        verdict_agent = ResponseVerdictAgent(runner=self.runner)
        try:
            analysis = await verdict_agent.run(sent_request, response_text)
        except ModelEndpointError as exc:
            logger.warning("[PayloadFuzz] Verdict analysis failed: %s", exc)
            return "Analysis failed"
        if isinstance(analysis.data, AnalysisVerdict):
            return format_verdict(analysis.data.verdict, analysis.data.confidence)
        logger.info("[PayloadFuzz] Analysis returned %s instead of a verdict", analysis.data.kind)
        return NOT_ANALYZED

    async def run(
        self,
        raw_request: str,
        payloads: List[str],
        parameter: Optional[str] = None,
        scheme_override: Optional[str] = None,
    ) -> List[HistoryEntry]:
        base_request = parse_http_request(raw_request, scheme_override)
        selected = payloads[: self.max_payloads]
        if len(payloads) > len(selected):
            logger.info("[PayloadFuzz] Using first %d of %d payloads", len(selected), len(payloads))

        sends = await self._send_payloads(base_request, selected, parameter)

        history: List[HistoryEntry] = []
        for index, (payload, sent, result) in enumerate(sends, start=1):
            sent_text = reconstruct_http_request(sent)
            if isinstance(result, ProxyError):
                history.append(HistoryEntry(
                    index=index,
                    payload=payload,
                    request=sent_text,
                    response=f"❌ {result.error}: {result.message}",
                    status="error",
                    status_class="failure",
                    size=format_bytes(0),
                ))
                continue

            response_text = render_response_text(result)
            entry = HistoryEntry(
                index=index,
                payload=payload,
                request=sent_text,
                response=response_text,
                status=result.status,
                status_class=status_class(result.status),
                size=format_bytes(result.size),
            )
            if self.analyze:
                entry.verdict = await self._judge(sent_text, response_text)
            history.append(entry)
        return history
