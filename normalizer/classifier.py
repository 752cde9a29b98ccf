"""Classify a parsed model reply into a NormalizationOutcome variant."""
from __future__ import annotations
import json
import logging
from typing import Any, Dict, Optional

from models.pydantic_models import (
    PAYLOAD_ADVISORY_THRESHOLD,
    PAYLOAD_SOFT_CAP,
    AnalysisVerdict,
    CombinedReport,
    FreeText,
    InjectionReport,
    NormalizationOutcome,
    PayloadReport,
    StructuredMessage,
)

logger = logging.getLogger(__name__)


def payload_advisory(count: int) -> Optional[str]:
    """Advisory for payload lists well past the requested size."""
    if count <= PAYLOAD_ADVISORY_THRESHOLD:
        return None
    return (
        f"Received {count} payloads (expected 10-{PAYLOAD_SOFT_CAP}). "
        "The last few might be incomplete due to response size limits. "
        f"Consider using the first {PAYLOAD_SOFT_CAP}-{PAYLOAD_ADVISORY_THRESHOLD} for best results."
    )


def _as_text(value: Any) -> str:
    if value is None:
        return ""
    if isinstance(value, str):
        return value
    return json.dumps(value, ensure_ascii=False)


def summarize_fields(data: Dict[str, Any]) -> str:
    """Concatenate explanation, status and other string fields into one message."""
    message = _as_text(data.get("explanation"))
    if data.get("status"):
        message += f"\n\nStatus: {data['status']}"
    for key, value in data.items():
        if key in ("explanation", "status") or not isinstance(value, str):
            continue
        message += f"\n{key[:1].upper()}{key[1:]}: {value}"
    return message


def classify(data: Any, raw_reply: str, warning: Optional[str] = None) -> NormalizationOutcome:
    """Map a parsed JSON value to an outcome by field presence. Never raises.

    Only the presence of a key decides the variant; the variant models coerce
    whatever shape the model put under it (scalars, nulls, non-string text).
    """
    if not isinstance(data, dict):
        return FreeText(message=raw_reply, warning=warning)

    explanation = data.get("explanation")
    if "injectionPoints" in data and "payloads" in data:
        report = CombinedReport(
            explanation=explanation,
            injection_points=data["injectionPoints"],
            payloads=data["payloads"],
            warning=warning,
        )
        report.advisory = payload_advisory(len(report.payloads))
        return report
    if "injectionPoints" in data:
        return InjectionReport(
            explanation=explanation,
            injection_points=data["injectionPoints"],
            warning=warning,
        )
    if "payloads" in data:
        report = PayloadReport(explanation=explanation, payloads=data["payloads"], warning=warning)
        report.advisory = payload_advisory(len(report.payloads))
        return report
    if "verdict" in data:
        return AnalysisVerdict(
            explanation=explanation,
            verdict=data["verdict"],
            confidence=data.get("confidence"),
            evidence=data.get("evidence"),
            warning=warning,
        )

    if "explanation" in data:
        return StructuredMessage(
            explanation=_as_text(explanation),
            summary=summarize_fields(data),
            fields=data,
            warning=warning,
        )
    logger.debug("[Classifier] No recognised fields in object, keeping raw reply")
    return FreeText(message=raw_reply, warning=warning)
