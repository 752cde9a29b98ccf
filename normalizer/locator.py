"""Locate the substring of a model reply most likely to be one JSON object."""
from __future__ import annotations
import logging
import re

logger = logging.getLogger(__name__)

FENCED_JSON_RE = re.compile(r"```json\s*([\s\S]*?)```", re.IGNORECASE)
FENCED_ANY_RE = re.compile(r"```\s*([\s\S]*?)```")
OBJECT_SPAN_RE = re.compile(r"\{[\s\S]*\}")
AI_PREFIX_RE = re.compile(r"^(?:```(?:json)?|json\b)\s*", re.IGNORECASE)
TRAILING_FENCE_RE = re.compile(r"```\s*$")


def locate_json(text: str) -> str:
    """Return the best candidate JSON object text, or the trimmed input if there is none.

    Order: fenced block interior, greedy brace span, AI prefix removal,
    then trimming to the outermost braces.
    """
    fenced = FENCED_JSON_RE.search(text) or FENCED_ANY_RE.search(text)
    candidate = fenced.group(1).strip() if fenced else text.strip()

    if not fenced and not candidate.startswith("{"):
        span = OBJECT_SPAN_RE.search(text)
        if span:
            candidate = span.group(0)

    candidate = AI_PREFIX_RE.sub("", candidate, count=1)
    candidate = TRAILING_FENCE_RE.sub("", candidate, count=1)

    first_brace = candidate.find("{")
    if first_brace == -1:
        return text.strip()
    if first_brace > 0:
        logger.info("[Locator] Removing text before JSON object: %r", candidate[:first_brace][:200])
        candidate = candidate[first_brace:]

    last_brace = candidate.rfind("}")
    if last_brace != -1 and last_brace < len(candidate) - 1:
        logger.info("[Locator] Removing text after JSON object: %r", candidate[last_brace + 1:][:200])
        candidate = candidate[:last_brace + 1]

    return candidate.strip()
