"""Model-backed agents for discovery, payload testing and response analysis."""

from .agent_sdk import agent_runner, SecurityAgentRunner, ModelEndpointError
from .base import BaseAgent
from .mode_selector import select_mode, infer_mode
from .request_analyzer import analyze_with_ai, build_user_input
from .fuzz_verdict import ResponseVerdictAgent
from .payload_fuzz import PayloadFuzzAgent

__all__ = [
    'agent_runner',
    'SecurityAgentRunner',
    'ModelEndpointError',
    'BaseAgent',
    'select_mode',
    'infer_mode',
    'analyze_with_ai',
    'build_user_input',
    'ResponseVerdictAgent',
    'PayloadFuzzAgent'
]
