"""Response Verdict Agent for judging whether a tested payload worked."""
from __future__ import annotations
import logging

from models.pydantic_models import AnalyzeRequest, AnalyzeResponse, Mode
from prompts.prompts import ANALYZE_RESPONSE_QUESTION
from .base import BaseAgent
from .request_analyzer import analyze_with_ai

logger = logging.getLogger(__name__)


def build_analysis_context(sent_request: str, response_text: str) -> str:
    return f"Request:\n{sent_request}\n\nResponse:\n{response_text}"


class ResponseVerdictAgent(BaseAgent):
    """Analyzes the request actually sent (payload applied) against its response."""

    async def run(self, sent_request: str, response_text: str) -> AnalyzeResponse:
        if not sent_request:
            raise ValueError("No request found. Send a request before analyzing the response.")
        if not response_text.strip():
            raise ValueError("Send a request first to get a response to analyze.")
        return await analyze_with_ai(
            AnalyzeRequest(
                prompt=ANALYZE_RESPONSE_QUESTION,
                context=build_analysis_context(sent_request, response_text),
                mode=Mode.ANALYSIS,
            ),
            runner=self.runner,
        )
