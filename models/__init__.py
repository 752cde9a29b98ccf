"""Pydantic models for normalized outcomes, proxy traffic and API payloads."""
from .pydantic_models import (
    # Constants
    PAYLOAD_SOFT_CAP,
    PAYLOAD_ADVISORY_THRESHOLD,
    NOT_ANALYZED,

    # Enums
    Mode,
    ModelRole,
    RiskLevel,
    VerdictLabel,

    # Models
    RepairResult,
    InjectionPoint,
    InjectionReport,
    PayloadReport,
    CombinedReport,
    AnalysisVerdict,
    StructuredMessage,
    FreeText,
    NormalizationOutcome,
    ModeSelection,
    AnalyzeRequest,
    AnalyzeResponse,
    ConnectionTestRequest,
    ConnectionTestResult,
    ProxyRequest,
    ProxyResponse,
    ErrorBody,
    HistoryEntry,
    ModelCheck,
    DiagnosticReport
)

__all__ = [
    'PAYLOAD_SOFT_CAP',
    'PAYLOAD_ADVISORY_THRESHOLD',
    'NOT_ANALYZED',
    'Mode',
    'ModelRole',
    'RiskLevel',
    'VerdictLabel',
    'RepairResult',
    'InjectionPoint',
    'InjectionReport',
    'PayloadReport',
    'CombinedReport',
    'AnalysisVerdict',
    'StructuredMessage',
    'FreeText',
    'NormalizationOutcome',
    'ModeSelection',
    'AnalyzeRequest',
    'AnalyzeResponse',
    'ConnectionTestRequest',
    'ConnectionTestResult',
    'ProxyRequest',
    'ProxyResponse',
    'ErrorBody',
    'HistoryEntry',
    'ModelCheck',
    'DiagnosticReport'
]
