"""Pydantic models for normalized AI output, proxy traffic and API payloads."""
from __future__ import annotations
import json
from enum import Enum
from typing import Annotated, Any, Dict, List, Literal, Optional, Union

from pydantic import BaseModel, BeforeValidator, ConfigDict, Field
from pydantic.alias_generators import to_camel


# Constants
PAYLOAD_SOFT_CAP = 15
PAYLOAD_ADVISORY_THRESHOLD = 20
NOT_ANALYZED = "Not analyzed"


class WireModel(BaseModel):
    """Base for models exchanged with the browser/CLI (camelCase on the wire)."""
    model_config = ConfigDict(alias_generator=to_camel, populate_by_name=True)

    def to_wire(self) -> Dict[str, Any]:
        return self.model_dump(mode="json", by_alias=True, exclude_none=True)


# Enums
class Mode(str, Enum):
    """Which instruction set accompanies an outbound model request."""
    DISCOVERY = "discovery"
    ANALYSIS = "analysis"


class ModelRole(str, Enum):
    """Which configured model serves a request."""
    SMART = "smart"
    FAST = "fast"


class RiskLevel(str, Enum):
    """Risk levels the discovery prompt asks for (not enforced on parse)."""
    HIGH = "HIGH"
    MEDIUM = "MEDIUM"
    LOW = "LOW"


class VerdictLabel(str, Enum):
    """Verdicts the analysis prompt asks for (not enforced on parse)."""
    SUCCESS = "success"
    FAILURE = "failure"
    SUSPICIOUS = "suspicious"


def _as_list(value: Any) -> List[Any]:
    """None becomes [], a lone value becomes a one-item list."""
    if value is None:
        return []
    if isinstance(value, list):
        return value
    return [value]


def _stringify(value: Any) -> Any:
    if value is None or isinstance(value, str):
        return value
    return json.dumps(value, ensure_ascii=False)


def _stringify_items(value: Any) -> List[str]:
    return [_stringify(item) for item in _as_list(value) if item is not None]


# Model replies are loosely shaped; these accept any JSON value the model sends
StringList = Annotated[List[str], BeforeValidator(_stringify_items)]
OptionalText = Annotated[Optional[str], BeforeValidator(_stringify)]
Text = Annotated[str, BeforeValidator(lambda value: "" if value is None else _stringify(value))]


# Repair chain models
class RepairResult(BaseModel):
    """Outcome of running the parser/repair chain over one candidate string."""
    success: bool = Field(description="Whether any strategy produced valid JSON")
    data: Optional[Any] = Field(default=None, description="Parsed JSON value")
    warning: Optional[str] = Field(default=None, description="Advisory when repair altered the text")
    error: Optional[str] = Field(default=None, description="Last parser error message")
    strategy: Optional[str] = Field(default=None, description="Name of the strategy that succeeded")


# Normalization outcome variants
class InjectionPoint(WireModel):
    """A request parameter reported as a candidate for testing."""
    model_config = ConfigDict(alias_generator=to_camel, populate_by_name=True, extra="allow")

    name: OptionalText = Field(default=None, description="Parameter name")
    location: OptionalText = Field(default=None, description="Body (JSON)/Body (Form)/Header/Query")
    risk: OptionalText = Field(default=None, description="HIGH/MEDIUM/LOW, passed through verbatim")
    reason: OptionalText = Field(default=None, description="Technical justification")


def _injection_points(value: Any) -> List[Any]:
    return [InjectionPoint.model_validate(item) if isinstance(item, dict) else item for item in _as_list(value)]


# Objects become InjectionPoint; anything else the model lists is kept as sent
InjectionPointList = Annotated[List[Any], BeforeValidator(_injection_points)]


class OutcomeBase(WireModel):
    warning: Optional[str] = Field(default=None, description="Repair advisory")


class InjectionReport(OutcomeBase):
    kind: Literal["injection_report"] = "injection_report"
    explanation: OptionalText = None
    injection_points: InjectionPointList


class PayloadReport(OutcomeBase):
    kind: Literal["payload_report"] = "payload_report"
    explanation: OptionalText = None
    payloads: StringList
    advisory: Optional[str] = Field(default=None, description="Soft-cap advisory, never an error")


class CombinedReport(OutcomeBase):
    kind: Literal["combined_report"] = "combined_report"
    explanation: OptionalText = None
    injection_points: InjectionPointList
    payloads: StringList
    advisory: Optional[str] = None


class AnalysisVerdict(OutcomeBase):
    kind: Literal["analysis_verdict"] = "analysis_verdict"
    explanation: OptionalText = None
    verdict: Any = Field(description="success/failure/suspicious, passed through verbatim")
    confidence: Any = Field(default=None, description="0-100, passed through unclamped")
    evidence: StringList = Field(default_factory=list)


class StructuredMessage(OutcomeBase):
    """A parsed object with an explanation but no recognised report fields."""
    kind: Literal["structured_message"] = "structured_message"
    explanation: Text
    summary: str
    fields: Dict[str, Any] = Field(default_factory=dict)


class FreeText(OutcomeBase):
    """Terminal fallback when nothing structured could be recovered."""
    kind: Literal["free_text"] = "free_text"
    message: str
    parse_error: Optional[str] = None
    hint: Optional[str] = None


NormalizationOutcome = Annotated[
    Union[InjectionReport, PayloadReport, CombinedReport, AnalysisVerdict, StructuredMessage, FreeText],
    Field(discriminator="kind"),
]


# Mode selection
class ModeSelection(BaseModel):
    """Instructions and sampling settings chosen for one model request."""
    mode: Mode
    instructions: str
    model_role: ModelRole
    temperature: float


# AI endpoint payloads
class AnalyzeRequest(WireModel):
    prompt: str = Field(default="", description="Natural-language instruction from the user")
    context: Optional[str] = Field(default=None, description="Raw request and/or response text")
    mode: Optional[Mode] = Field(default=None, description="Explicit mode; inferred when absent")
    endpoint: Optional[str] = Field(default=None, description="Override chat-completions URL")
    model: Optional[str] = Field(default=None, description="Override model name")
    api_key: Optional[str] = Field(default=None, description="Override API key")


class AnalyzeResponse(WireModel):
    success: bool = True
    data: NormalizationOutcome
    raw_message: str
    warning: Optional[str] = None
    mode: Optional[Mode] = None


class ConnectionTestRequest(WireModel):
    endpoint: Optional[str] = None
    model: Optional[str] = None
    type: ModelRole = ModelRole.SMART
    api_key: Optional[str] = None


class ConnectionTestResult(WireModel):
    success: bool
    message: str
    model: str
    type: ModelRole


# Proxy models
class ProxyRequest(WireModel):
    """HTTP request to relay to the target."""
    method: str = Field(description="HTTP method")
    url: str = Field(description="Absolute target URL")
    headers: Dict[str, str] = Field(default_factory=dict)
    body: Optional[str] = Field(default="", description="Raw request body")


class ProxyResponse(WireModel):
    """HTTP response information returned to the caller."""
    status: int = Field(description="HTTP status code")
    status_text: str = Field(default="", description="Reason phrase")
    headers: Dict[str, str] = Field(default_factory=dict)
    body: str = Field(default="", description="Response body as text")
    time: int = Field(description="Elapsed milliseconds")
    size: int = Field(description="Body size in UTF-8 bytes")


class ErrorBody(BaseModel):
    """Error payload shared by the proxy and AI endpoints."""
    error: str
    message: str
    details: str


# Session models
class HistoryEntry(WireModel):
    """One row of the per-session test history."""
    index: int
    payload: str
    request: str
    response: str
    status: Union[int, str]
    status_class: str
    size: str
    verdict: str = NOT_ANALYZED


# Diagnostics
class ModelCheck(BaseModel):
    name: str
    alt: Optional[str] = None
    purpose: str
    vram: str
    installed: Optional[str] = Field(default=None, description="Which variant was found")


class DiagnosticReport(BaseModel):
    running: bool = False
    version: Optional[str] = None
    installed_models: List[str] = Field(default_factory=list)
    required: List[ModelCheck] = Field(default_factory=list)
    missing: List[ModelCheck] = Field(default_factory=list)
    chat_ok: bool = False
    chat_model: Optional[str] = None
    chat_reply: Optional[str] = None
    errors: List[str] = Field(default_factory=list)

    @property
    def ready(self) -> bool:
        return self.running and not self.missing
