"""Agent configuration types.

Provides AgentState, the per-turn state machine of an agent, and
AgentConfig, the explicit settings passed to an Agent at construction.
"""

from __future__ import annotations

import enum
from dataclasses import dataclass

from toolchat.protocols import DEFAULT_MAX_TOKENS


class AgentState(str, enum.Enum):
    """States an agent moves through during one turn.

    ``IDLE -> AWAITING_FIRST_RESPONSE -> (DIRECT | AWAITING_TOOL_RESULT) -> IDLE``
    """

    IDLE = "idle"
    AWAITING_FIRST_RESPONSE = "awaiting_first_response"
    DIRECT = "direct"
    AWAITING_TOOL_RESULT = "awaiting_tool_result"


@dataclass(frozen=True)
class AgentConfig:
    """Settings forwarded to the completion client on every round.

    Attributes:
        model: Model identifier (None = the client's default).
        max_tokens: Maximum tokens per completion round.
        temperature: Sampling temperature (None = provider default).
        tool_choice: Tool-choice mode sent with the first round.
        extra_llm_kwargs: Additional kwargs (top_p, seed, etc.) forwarded to
            ``client.complete()``.
    """

    model: str | None = None
    max_tokens: int = DEFAULT_MAX_TOKENS
    temperature: float | None = None
    tool_choice: str = "auto"
    extra_llm_kwargs: dict | None = None

    def __post_init__(self) -> None:
        if self.max_tokens <= 0:
            raise ValueError(f"max_tokens must be positive, got {self.max_tokens}")

    def llm_kwargs(self) -> dict:
        """Keyword arguments for ``CompletionClient.complete()``."""
        kwargs: dict = {"max_tokens": self.max_tokens}
        if self.model:
            kwargs["model"] = self.model
        if self.temperature is not None:
            kwargs["temperature"] = self.temperature
        if self.extra_llm_kwargs:
            kwargs.update(self.extra_llm_kwargs)
        return kwargs
