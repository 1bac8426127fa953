"""Tool-calling agent: one conversation session over a completion service.

Provides the Agent class whose ``turn()`` runs the two-round tool protocol:
send the conversation with tool declarations; if the model asks for a tool,
dispatch it, inject the result, and ask again without tools for the reply.
"""

from __future__ import annotations

import logging
import threading
from typing import TYPE_CHECKING, Any

from toolchat.conversation import Conversation, expand_tool_result
from toolchat.exceptions import (
    DispatchError,
    RemoteFailedError,
    ToolDispatchFailedError,
)
from toolchat.llm.errors import LLMResponseError
from toolchat.orchestrator.config import AgentConfig, AgentState
from toolchat.protocols import Completion, Message
from toolchat.toolkit.dispatcher import ToolDispatcher, serialize_result
from toolchat.toolkit.registry import ToolRegistry

if TYPE_CHECKING:
    from collections.abc import Sequence

    from toolchat.protocols import CompletionClient
    from toolchat.toolkit.models import ToolDefinition

logger = logging.getLogger(__name__)


class Agent:
    """A single conversation session with tool calling.

    Turns on one agent are serialized: concurrent ``turn()`` calls queue on
    a per-agent lock. Nothing is appended to the conversation until every
    round of a turn has succeeded, so a failed or interrupted turn leaves
    the log exactly as it was.

    Usage::

        from toolchat import Agent, OpenAIClient, default_registry

        with Agent("You are helpful.", default_registry(), client=OpenAIClient()) as agent:
            print(agent.turn("remember to buy milk"))
    """

    def __init__(
        self,
        system_prompt: str,
        registry: ToolRegistry | None = None,
        *,
        client: CompletionClient,
        config: AgentConfig | None = None,
        owns_client: bool = False,
    ) -> None:
        self._registry = registry if registry is not None else ToolRegistry()
        self._dispatcher = ToolDispatcher(self._registry)
        self._client = client
        self._config = config or AgentConfig()
        self._conversation = Conversation(system_prompt)
        self._state = AgentState.IDLE
        self._turn_lock = threading.Lock()
        self._owns_client = owns_client

    @classmethod
    def open(
        cls,
        system_prompt: str | None = None,
        registry: ToolRegistry | None = None,
        *,
        api_key: str | None = None,
        base_url: str | None = None,
        model: str | None = None,
        config: AgentConfig | None = None,
    ) -> Agent:
        """Create an agent backed by a new OpenAIClient it owns.

        Defaults to the personal-assistant prompt and the built-in tools.

        Raises:
            LLMConfigError: If no API key is given or found in environment.
        """
        from toolchat.llm.client import OpenAIClient
        from toolchat.prompts.assistant import DEFAULT_SYSTEM_PROMPT
        from toolchat.toolkit.definitions import default_registry

        client_kwargs: dict[str, Any] = {"api_key": api_key, "base_url": base_url}
        if model:
            client_kwargs["default_model"] = model
        client = OpenAIClient(**client_kwargs)
        return cls(
            system_prompt if system_prompt is not None else DEFAULT_SYSTEM_PROMPT,
            registry if registry is not None else default_registry(),
            client=client,
            config=config,
            owns_client=True,
        )

    # ------------------------------------------------------------------
    # Public API
    # ------------------------------------------------------------------

    @property
    def state(self) -> AgentState:
        """Return the current turn state."""
        return self._state

    @property
    def messages(self) -> tuple[Message, ...]:
        """Snapshot of the conversation log."""
        return self._conversation.messages

    @property
    def conversation(self) -> Conversation:
        return self._conversation

    @property
    def registry(self) -> ToolRegistry:
        return self._registry

    @property
    def config(self) -> AgentConfig:
        return self._config

    def turn(self, user_text: str) -> str:
        """Run one conversation turn and return the assistant's reply.

        Args:
            user_text: The user's input for this turn.

        Returns:
            The reply text; empty if the model sent no content.

        Raises:
            RemoteFailedError: A completion round failed (transport or parse).
            ToolDispatchFailedError: The requested tool was unknown, got
                invalid arguments, or its handler failed.
        """
        with self._turn_lock:
            try:
                return self._run_turn(user_text)
            finally:
                self._state = AgentState.IDLE

    def close(self) -> None:
        """Close the completion client if this agent created it."""
        if self._owns_client:
            self._client.close()

    def __enter__(self) -> Agent:
        return self

    def __exit__(self, *args: object) -> None:
        self.close()

    def __repr__(self) -> str:
        return (
            f"Agent(messages={len(self._conversation)}, "
            f"tools={self._registry.names()!r}, state={self._state.value})"
        )

    # ------------------------------------------------------------------
    # Internal methods
    # ------------------------------------------------------------------

    def _run_turn(self, user_text: str) -> str:
        user_message = Message.user(user_text)
        self._state = AgentState.AWAITING_FIRST_RESPONSE
        logger.debug("Turn started (%d messages in log)", len(self._conversation))

        first = self._complete(
            self._conversation.render([user_message]),
            tools=self._registry.list_definitions(),
        )

        call = first.tool_call
        if call is None:
            self._state = AgentState.DIRECT
            reply = Message.assistant(first.text)
            self._conversation.extend([user_message, reply])
            logger.debug("Turn answered directly")
            return first.text

        self._state = AgentState.AWAITING_TOOL_RESULT
        try:
            result = self._dispatcher.dispatch(call)
        except DispatchError as exc:
            logger.warning("Tool call %s could not be dispatched: %s", call.name, exc)
            raise ToolDispatchFailedError(exc) from exc

        tool_message = Message.tool(call.name, serialize_result(result))
        second = self._complete(
            self._conversation.render(
                [user_message, *expand_tool_result(tool_message, call)]
            ),
            tools=None,
        )
        if second.tool_call is not None:
            logger.warning(
                "Ignoring tool call %s requested in the reply round",
                second.tool_call.name,
            )

        reply = Message.assistant(second.text)
        self._conversation.extend([user_message, (tool_message, call), reply])
        logger.debug("Turn answered after tool %s", call.name)
        return second.text

    def _complete(
        self,
        messages: Sequence[Message],
        *,
        tools: Sequence[ToolDefinition] | None,
    ) -> Completion:
        """Run one completion round, wrapping any failure as RemoteFailedError.

        Tool declarations (and the tool-choice mode) are only sent when
        ``tools`` is non-empty.
        """
        kwargs = self._config.llm_kwargs()
        if tools:
            kwargs["tool_choice"] = self._config.tool_choice
        try:
            completion = self._client.complete(messages, tools=tools or None, **kwargs)
            if not isinstance(completion, Completion):
                raise LLMResponseError(
                    f"Client returned {type(completion).__name__}, expected Completion",
                    response=completion,
                )
            return completion
        except Exception as exc:
            logger.debug("Completion round failed: %s", exc, exc_info=True)
            raise RemoteFailedError(exc) from exc
