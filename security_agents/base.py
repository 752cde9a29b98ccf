"""Base Agent class for all security testing agents."""
from __future__ import annotations
from abc import ABC, abstractmethod
from typing import Optional

import httpx

from .agent_sdk import SecurityAgentRunner, agent_runner


class BaseAgent(ABC):
    """Base class for agents that combine HTTP traffic with model calls."""

    def __init__(self, client: Optional[httpx.AsyncClient] = None, runner: Optional[SecurityAgentRunner] = None):
        self.client = client
        self.runner = runner or agent_runner

    @abstractmethod
    async def run(self, *args, **kwargs):
        """Execute agent and return its result."""
        pass
