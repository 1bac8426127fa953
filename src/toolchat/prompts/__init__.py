"""Prompt text used by the agent."""
