"""OpenAI Agents SDK client for OpenAI-compatible chat-completions endpoints."""
from __future__ import annotations
import logging
from typing import Optional

from agents import Agent, ModelSettings, OpenAIChatCompletionsModel, Runner, set_tracing_disabled  # OpenAI Agents SDK
from agents.exceptions import AgentsException
from openai import APIConnectionError, APIStatusError, APITimeoutError, AsyncOpenAI

from models.pydantic_models import ConnectionTestResult, ErrorBody, ModelRole, ModeSelection
from prompts.prompts import CONNECTION_TEST_PROMPT
from tools.config import (
    FAST_MODEL,
    MAX_TOKENS,
    MODEL_API_KEY,
    MODEL_ENDPOINT,
    MODEL_TIMEOUT,
    SMART_MODEL,
    TRACING_ENABLED,
)

logger = logging.getLogger(__name__)

set_tracing_disabled(not TRACING_ENABLED)

# Local servers such as Ollama ignore the key but the client requires one
PLACEHOLDER_API_KEY = "not-needed"


class ModelEndpointError(RuntimeError):
    """The model endpoint could not produce a reply."""

    def __init__(self, status_code: int, error: str, message: str, details: str = ""):
        super().__init__(message)
        self.status_code = status_code
        self.error = error
        self.message = message
        self.details = details

    def to_body(self) -> ErrorBody:
        return ErrorBody(error=self.error, message=self.message, details=self.details or "Unknown error")


def endpoint_base_url(endpoint: str) -> str:
    """Turn a full ``.../chat/completions`` URL into the client base URL."""
    base = endpoint.rstrip("/")
    for suffix in ("/chat/completions", "/completions"):
        if base.endswith(suffix):
            return base[: -len(suffix)]
    return base


class SecurityAgentRunner:
    """Centralized runner for model requests."""

    def __init__(
        self,
        endpoint: str = MODEL_ENDPOINT,
        api_key: str = MODEL_API_KEY,
        smart_model: str = SMART_MODEL,
        fast_model: str = FAST_MODEL,
        max_tokens: int = MAX_TOKENS,
        timeout: float = MODEL_TIMEOUT,
    ):
        self.endpoint = endpoint
        self.api_key = api_key
        self.models = {ModelRole.SMART: smart_model, ModelRole.FAST: fast_model}
        self.max_tokens = max_tokens
        self.timeout = timeout

    def model_name(self, role: ModelRole, override: Optional[str] = None) -> str:
        return override or self.models[ModelRole(role)]

    def _build_agent(
        self,
        name: str,
        instructions: str,
        model: str,
        settings: ModelSettings,
        endpoint: Optional[str] = None,
        api_key: Optional[str] = None,
    ) -> Agent:
        client = AsyncOpenAI(
            base_url=endpoint_base_url(endpoint or self.endpoint),
            api_key=api_key or self.api_key or PLACEHOLDER_API_KEY,
            timeout=self.timeout,
            max_retries=0,
        )
        return Agent(
            name=name,
            instructions=instructions,
            model=OpenAIChatCompletionsModel(model=model, openai_client=client),
            model_settings=settings,
        )

    async def _run(self, agent: Agent, user_input: str) -> str:
        try:
            result = await Runner.run(agent, user_input)
        except APITimeoutError as e:
            logger.error(f"Model request timed out: {e}")
            raise ModelEndpointError(504, "AI request timeout", "The AI endpoint took too long to respond", str(e)) from e
        except APIConnectionError as e:
            logger.error(f"Model endpoint unreachable: {e}")
            raise ModelEndpointError(
                503, "AI endpoint unreachable", f"Could not connect to {self.endpoint}", str(e)
            ) from e
        except APIStatusError as e:
            logger.error(f"Model endpoint returned {e.status_code}: {e.message}")
            if e.status_code == 401:
                raise ModelEndpointError(401, "Invalid API key", "Please check your AIHT_API_KEY setting", e.message) from e
            raise ModelEndpointError(502, "AI request failed", f"AI endpoint returned HTTP {e.status_code}", e.message) from e
        except AgentsException as e:
            logger.error(f"Model request failed: {e}")
            raise ModelEndpointError(500, "AI request failed", str(e), type(e).__name__) from e
        return str(result.final_output or "")

    async def complete(
        self,
        user_input: str,
        selection: ModeSelection,
        endpoint: Optional[str] = None,
        model: Optional[str] = None,
        api_key: Optional[str] = None,
    ) -> str:
        """Send one prompt with the selected instructions and return the raw reply text."""
        model_name = self.model_name(selection.model_role, model)
        logger.info("[AI] mode=%s model=%s temperature=%s", selection.mode.value, model_name, selection.temperature)
        agent = self._build_agent(
            name=f"{selection.mode.value.title()} Assistant",
            instructions=selection.instructions,
            model=model_name,
            settings=ModelSettings(temperature=selection.temperature, max_tokens=self.max_tokens),
            endpoint=endpoint,
            api_key=api_key,
        )
        reply = await self._run(agent, user_input)
        logger.info("[AI] Response length: %d characters", len(reply))
        logger.info("[AI] Raw response preview: %s", reply[:200])
        return reply

    async def test_connection(
        self,
        role: ModelRole = ModelRole.SMART,
        endpoint: Optional[str] = None,
        model: Optional[str] = None,
        api_key: Optional[str] = None,
    ) -> ConnectionTestResult:
        """Send a 5-token greeting to check the endpoint, model and key."""
        model_name = self.model_name(role, model)
        agent = self._build_agent(
            name="Connection Test",
            instructions=CONNECTION_TEST_PROMPT,
            model=model_name,
            settings=ModelSettings(max_tokens=5),
            endpoint=endpoint,
            api_key=api_key,
        )
        reply = await self._run(agent, "Hi")
        return ConnectionTestResult(success=True, message=reply.strip(), model=model_name, type=ModelRole(role))


# Global agent runner instance
agent_runner = SecurityAgentRunner()
