"""Agent orchestration: the per-session tool-calling turn loop."""

from toolchat.orchestrator.agent import Agent
from toolchat.orchestrator.config import AgentConfig, AgentState

__all__ = ["Agent", "AgentConfig", "AgentState"]
