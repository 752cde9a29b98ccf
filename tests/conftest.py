"""
Test configuration: ensures repo root is in sys.path.

This allows tests to import the top-level packages (normalizer, tools,
security_agents, models) and the aihttp modules.
"""

import asyncio
import functools
import sys
from pathlib import Path
from types import SimpleNamespace

import pytest

REPO_ROOT = Path(__file__).parent.parent
if str(REPO_ROOT) not in sys.path:
    sys.path.insert(0, str(REPO_ROOT))


def async_test(coro):
    """Decorator to run async tests with asyncio.run."""

    @functools.wraps(coro)
    def wrapper(*args, **kwargs):
        return asyncio.run(coro(*args, **kwargs))

    return wrapper


def run_result(text):
    """Stand-in for the object returned by the agents Runner."""
    return SimpleNamespace(final_output=text)


@pytest.fixture
def raw_json_request():
    return (
        "POST /api/login HTTP/1.1\n"
        "Host: example.com\n"
        "Content-Type: application/json\n"
        "Content-Length: 40\n"
        "\n"
        '{"username": "admin", "password": "x"}'
    )


@pytest.fixture
def raw_form_request():
    return (
        "POST /search HTTP/1.1\n"
        "Host: localhost:8080\n"
        "Content-Type: application/x-www-form-urlencoded\n"
        "\n"
        "q=shoes&page=1"
    )
