"""Choose instructions, model and temperature for an outbound model request."""
from __future__ import annotations
import logging
import re
from typing import Optional

from models.pydantic_models import Mode, ModelRole, ModeSelection
from prompts.prompts import ANALYSIS_PROMPT, DISCOVERY_PROMPT
from tools.config import ANALYSIS_TEMPERATURE, DISCOVERY_TEMPERATURE

logger = logging.getLogger(__name__)

ANALYSIS_KEYWORDS = (
    "analyze",
    "analyse",
    "analysis",
    "verdict",
    "was the attack successful",
    "did the attack work",
    "did it work",
)
RESPONSE_SECTION_RE = re.compile(r"^Response:\s*\n\s*HTTP/\d(?:\.\d)?\s+\d{3}", re.MULTILINE)


def infer_mode(prompt: str, context: Optional[str] = None) -> Mode:
    """Keyword heuristic used only when the caller did not tag the request."""
    lowered = prompt.lower()
    if any(keyword in lowered for keyword in ANALYSIS_KEYWORDS):
        return Mode.ANALYSIS
    if context and RESPONSE_SECTION_RE.search(context):
        return Mode.ANALYSIS
    return Mode.DISCOVERY


def select_mode(prompt: str, context: Optional[str] = None, mode: Optional[Mode] = None) -> ModeSelection:
    """Return the selection for an explicit mode, or infer one from the prompt/context."""
    if mode is None:
        mode = infer_mode(prompt, context)
        logger.info("[ModeSelector] Inferred mode=%s", mode.value)
    else:
        mode = Mode(mode)

    if mode is Mode.ANALYSIS:
        return ModeSelection(
            mode=mode,
            instructions=ANALYSIS_PROMPT,
            model_role=ModelRole.FAST,
            temperature=ANALYSIS_TEMPERATURE,
        )
    return ModeSelection(
        mode=mode,
        instructions=DISCOVERY_PROMPT,
        model_role=ModelRole.SMART,
        temperature=DISCOVERY_TEMPERATURE,
    )
