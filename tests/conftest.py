"""Shared test fixtures for toolchat.

Provides the built-in tool registry, an agent factory wired to a scripted
completion client, and a fixture that disables retry back-off sleeps.
"""

import time

import pytest

from helpers import ScriptedClient
from toolchat import Agent, ToolRegistry, default_registry


@pytest.fixture
def registry() -> ToolRegistry:
    return default_registry()


@pytest.fixture
def make_agent(registry):
    """Factory: ``make_agent(responses, **kwargs) -> (agent, client)``."""

    def _make(responses, system_prompt: str = "You are a personal assistant.", **kwargs):
        client = ScriptedClient(responses)
        agent = Agent(system_prompt, kwargs.pop("registry", registry), client=client, **kwargs)
        return agent, client

    return _make


@pytest.fixture
def no_sleep(monkeypatch):
    """Make tenacity back-off instantaneous."""
    monkeypatch.setattr(time, "sleep", lambda seconds: None)
