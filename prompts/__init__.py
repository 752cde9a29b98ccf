"""System instructions for model requests."""
from .prompts import (
    DISCOVERY_PROMPT,
    ANALYSIS_PROMPT,
    CONNECTION_TEST_PROMPT,
    ANALYZE_RESPONSE_QUESTION,
    PAYLOAD_GENERATION_QUESTION
)

__all__ = [
    'DISCOVERY_PROMPT',
    'ANALYSIS_PROMPT',
    'CONNECTION_TEST_PROMPT',
    'ANALYZE_RESPONSE_QUESTION',
    'PAYLOAD_GENERATION_QUESTION'
]
