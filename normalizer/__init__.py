"""Normalization pipeline turning raw model replies into typed outcomes."""
from __future__ import annotations
import logging

from models.pydantic_models import FreeText, NormalizationOutcome
from .sanitizer import sanitize_reply
from .locator import locate_json
from .repair import parse_with_repair
from .classifier import classify

logger = logging.getLogger(__name__)

PARSE_FAILURE_HINT = "The AI response could not be parsed as JSON. The full response is shown above."


def normalize_reply(raw_reply: str) -> NormalizationOutcome:
    """Sanitize, locate, parse/repair and classify one model reply."""
    if not isinstance(raw_reply, str):
        raise TypeError(f"model reply must be str, got {type(raw_reply).__name__}")

    logger.info("[Normalizer] Reply length: %d characters", len(raw_reply))
    candidate = locate_json(sanitize_reply(raw_reply))
    logger.debug("[Normalizer] Candidate preview: %r", candidate[:200])

    result = parse_with_repair(candidate)
    if not result.success:
        logger.info("[Normalizer] Returning reply as free text")
        return FreeText(message=raw_reply, parse_error=result.error, hint=PARSE_FAILURE_HINT)
    return classify(result.data, raw_reply, result.warning)


__all__ = [
    'normalize_reply',
    'sanitize_reply',
    'locate_json',
    'parse_with_repair',
    'classify',
    'PARSE_FAILURE_HINT'
]
