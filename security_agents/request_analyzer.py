"""Send a prompt plus request/response context to the model and normalize the reply."""
from __future__ import annotations
import logging
from typing import Optional

from models.pydantic_models import AnalyzeRequest, AnalyzeResponse
from normalizer import normalize_reply
from .agent_sdk import SecurityAgentRunner, agent_runner
from .mode_selector import select_mode

logger = logging.getLogger(__name__)


def build_user_input(prompt: str, context: Optional[str] = None) -> str:
    if context:
        return f"{prompt}\n\nContext:\n{context}"
    return prompt


async def analyze_with_ai(request: AnalyzeRequest, runner: Optional[SecurityAgentRunner] = None) -> AnalyzeResponse:
    """Run one prompt through mode selection, the model endpoint and the normalizer."""
    runner = runner or agent_runner
    logger.info("[AI] Analyzing: %s...", request.prompt[:50])

    selection = select_mode(request.prompt, request.context, request.mode)
    reply = await runner.complete(
        build_user_input(request.prompt, request.context),
        selection,
        endpoint=request.endpoint,
        model=request.model,
        api_key=request.api_key,
    )

    outcome = normalize_reply(reply)
    logger.info("[AGENT OUTPUT] kind=%s warning=%s", outcome.kind, outcome.warning)
    return AnalyzeResponse(data=outcome, raw_message=reply, warning=outcome.warning, mode=selection.mode)
