"""Parse candidate JSON text, falling back to ordered repair strategies.

Each strategy is a pure function ``(text, first_error) -> str | None`` that
returns a repaired copy of the text, or ``None`` when it does not apply.
The chain re-parses after every strategy and stops at the first success.
Strategies marked ``carry`` feed their output to the strategies after them.
"""
from __future__ import annotations
import json
import logging
import re
from dataclasses import dataclass
from typing import Callable, List, Optional, Tuple

from models.pydantic_models import RepairResult

logger = logging.getLogger(__name__)

FORMATTING_WARNING = "Response was auto-repaired due to formatting issues."
TRUNCATION_WARNING = "Response was truncated but repaired. Some data may be incomplete."
EXTRACTION_WARNING = "Extracted first complete JSON object from response."

INVALID_ESCAPE = "\\'"
UNEXPECTED_TOKEN_RE = re.compile(
    r"Expecting (?:',' delimiter|':' delimiter|value|property name)|Extra data"
)
INLINE_EXAMPLE_RE = re.compile(r"\b(GET|POST|PUT|PATCH|DELETE|HEAD|OPTIONS)\s*\([^()]*\)")
TRUNCATION_MARKER_RE = re.compile(r'"(?:payloads|evidence)":\s*\[')

CLOSERS = {"{": "}", "[": "]"}


@dataclass(frozen=True)
class RepairStrategy:
    name: str
    apply: Callable[[str, str], Optional[str]]
    warning: str
    carry: bool = False


def _try_parse(text: str) -> Tuple[bool, object, Optional[str]]:
    try:
        return True, json.loads(text), None
    except json.JSONDecodeError as exc:
        return False, None, str(exc)


def _scan_structure(text: str, start: int = 0):
    """Yield (index, char) for every character outside JSON string literals."""
    in_string = False
    escaped = False
    for idx in range(start, len(text)):
        char = text[idx]
        if in_string:
            if escaped:
                escaped = False
            elif char == "\\":
                escaped = True
            elif char == '"':
                in_string = False
            continue
        if char == '"':
            in_string = True
            continue
        yield idx, char


def repair_escapes(text: str, first_error: str) -> Optional[str]:
    """Replace the invalid ``\\'`` escape with a bare apostrophe."""
    if INVALID_ESCAPE not in text:
        return None
    logger.info("[Repair] Removing invalid \\' escape sequences")
    return text.replace(INVALID_ESCAPE, "'")


def repair_inline_examples(text: str, first_error: str) -> Optional[str]:
    """Collapse ``METHOD (...)`` examples that break string quoting."""
    if not UNEXPECTED_TOKEN_RE.search(first_error or ""):
        return None
    repaired = INLINE_EXAMPLE_RE.sub(lambda m: f"{m.group(1)} (example request)", text)
    if repaired == text:
        return None
    logger.info("[Repair] Collapsed inline request examples")
    return repaired


def close_truncated(text: str, first_error: str) -> Optional[str]:
    """Append the closers needed to balance a reply cut off inside a known array."""
    if not TRUNCATION_MARKER_RE.search(text):
        return None
    stack: List[str] = []
    for _, char in _scan_structure(text):
        if char in CLOSERS:
            stack.append(CLOSERS[char])
        elif char in ("}", "]"):
            if not stack or stack[-1] != char:
                return None
            stack.pop()
    if not stack:
        return None
    logger.info("[Repair] Closing truncated JSON with %r", "".join(reversed(stack)))
    return text + "".join(reversed(stack))


def extract_first_object(text: str, first_error: str) -> Optional[str]:
    """Return the first brace-balanced object, ignoring anything after it."""
    first_brace = text.find("{")
    if first_brace == -1:
        return None
    depth = 0
    for idx, char in _scan_structure(text, first_brace):
        if char == "{":
            depth += 1
        elif char == "}":
            depth -= 1
            if depth == 0:
                return text[first_brace:idx + 1]
    return None


STRATEGIES: Tuple[RepairStrategy, ...] = (
    RepairStrategy("escape", repair_escapes, FORMATTING_WARNING, carry=True),
    RepairStrategy("inline_example", repair_inline_examples, FORMATTING_WARNING, carry=True),
    RepairStrategy("truncation", close_truncated, TRUNCATION_WARNING),
    RepairStrategy("extraction", extract_first_object, EXTRACTION_WARNING),
)


def _join_warnings(warnings: List[str]) -> str:
    return " ".join(dict.fromkeys(warnings))


def parse_with_repair(text: str) -> RepairResult:
    """Run direct parse, then each repair strategy in order; stop at first success."""
    ok, data, first_error = _try_parse(text)
    if ok:
        return RepairResult(success=True, data=data, strategy="direct")

    logger.info("[Repair] Initial JSON parse failed: %s", first_error)
    last_error = first_error
    working = text
    carried: List[str] = []

    for strategy in STRATEGIES:
        candidate = strategy.apply(working, first_error)
        if candidate is None:
            continue
        ok, data, error = _try_parse(candidate)
        if ok:
            logger.info("[Repair] Parsed after %s repair", strategy.name)
            return RepairResult(
                success=True,
                data=data,
                warning=_join_warnings(carried + [strategy.warning]),
                strategy=strategy.name,
            )
        logger.info("[Repair] %s repair did not yield valid JSON: %s", strategy.name, error)
        last_error = error
        if strategy.carry:
            working = candidate
            carried.append(strategy.warning)

    logger.info("[Repair] All repair strategies exhausted")
    return RepairResult(success=False, error=last_error)
