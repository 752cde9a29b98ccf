"""Strip reasoning markup and code fences from raw model output."""
from __future__ import annotations
import logging
import re

logger = logging.getLogger(__name__)

THINK_BLOCK_RE = re.compile(r"<think\b[^>]*>.*?</think\s*>", re.DOTALL | re.IGNORECASE)
STRAY_THINK_TAG_RE = re.compile(r"</?think\b[^>]*>", re.IGNORECASE)
LEADING_FENCE_RE = re.compile(r"^```(?:json)?[ \t]*\n?", re.IGNORECASE)
TRAILING_FENCE_RE = re.compile(r"\n?[ \t]*```\s*$")


def sanitize_reply(raw_reply: str) -> str:
    """Remove <think> blocks and outer markdown fences, then strip whitespace."""
    text = THINK_BLOCK_RE.sub("", raw_reply)
    # Reasoning models sometimes leave an unmatched tag behind
    text = STRAY_THINK_TAG_RE.sub("", text).strip()
    if len(text) < len(raw_reply.strip()):
        logger.debug("[Sanitizer] Removed reasoning markup (%d -> %d chars)", len(raw_reply), len(text))

    text = LEADING_FENCE_RE.sub("", text, count=1)
    text = TRAILING_FENCE_RE.sub("", text, count=1)
    return text.strip()
