"""Protocol definitions for toolchat.

Defines the conversation data model (Role, Message, ToolCall), the parsed
completion result (Completion), and the pluggable CompletionClient interface
the agent talks to.

Pure domain types -- no HTTP imports allowed in this module.
"""

from __future__ import annotations

import enum
import json as _json
import logging
import uuid
from collections.abc import Mapping, Sequence
from dataclasses import dataclass, field
from typing import TYPE_CHECKING, Any, Protocol, runtime_checkable

if TYPE_CHECKING:
    from toolchat.toolkit.models import ToolDefinition

logger = logging.getLogger(__name__)

DEFAULT_MAX_TOKENS = 512


class Role(str, enum.Enum):
    """Role tag of a conversation message."""

    SYSTEM = "system"
    USER = "user"
    ASSISTANT = "assistant"
    TOOL = "tool"


def _new_call_id() -> str:
    return f"call_{uuid.uuid4().hex[:8]}"


@dataclass(frozen=True)
class ToolCall:
    """A tool invocation requested by the model.

    Transient: extracted from a completion and consumed by the dispatcher.
    ``raw_arguments`` is kept exactly as the provider sent it (usually a JSON
    string); decoding is the dispatcher's job.
    """

    name: str
    raw_arguments: str | Mapping[str, Any] | None = None
    id: str = field(default_factory=_new_call_id)

    def __post_init__(self) -> None:
        if not isinstance(self.name, str):
            raise TypeError(f"tool call name must be a string, got {type(self.name).__name__}")

    @classmethod
    def from_openai(cls, tc: Mapping[str, Any]) -> ToolCall:
        """Parse one entry of an OpenAI ``tool_calls`` array."""
        func = tc["function"]
        return cls(
            name=func["name"],
            raw_arguments=func.get("arguments"),
            id=tc.get("id") or _new_call_id(),
        )

    @classmethod
    def from_function_call(cls, fc: Mapping[str, Any]) -> ToolCall:
        """Parse a legacy OpenAI ``function_call`` object."""
        return cls(name=fc["name"], raw_arguments=fc.get("arguments"))

    @property
    def arguments_json(self) -> str:
        """Arguments as a JSON string, as the wire format expects."""
        if self.raw_arguments is None:
            return "{}"
        if isinstance(self.raw_arguments, str):
            return self.raw_arguments
        return _json.dumps(dict(self.raw_arguments))

    def to_openai(self) -> dict:
        """Serialize to OpenAI wire format."""
        return {
            "id": self.id,
            "type": "function",
            "function": {
                "name": self.name,
                "arguments": self.arguments_json,
            },
        }


@dataclass(frozen=True)
class Message:
    """A single immutable message in a conversation.

    ``tool_call`` is only allowed on assistant messages; ``tool_name`` is
    required on tool messages and forbidden elsewhere.
    """

    role: Role
    content: str | None = None
    tool_call: ToolCall | None = None
    tool_name: str | None = None

    def __post_init__(self) -> None:
        role = Role(self.role)
        object.__setattr__(self, "role", role)
        if self.tool_call is not None and role is not Role.ASSISTANT:
            raise ValueError(f"tool_call is only allowed on assistant messages, not {role.value}")
        if role is Role.TOOL and not self.tool_name:
            raise ValueError("tool messages require tool_name")
        if role is not Role.TOOL and self.tool_name is not None:
            raise ValueError(f"tool_name is only allowed on tool messages, not {role.value}")

    @classmethod
    def system(cls, content: str) -> Message:
        return cls(role=Role.SYSTEM, content=content)

    @classmethod
    def user(cls, content: str) -> Message:
        return cls(role=Role.USER, content=content)

    @classmethod
    def assistant(
        cls, content: str | None = None, *, tool_call: ToolCall | None = None
    ) -> Message:
        return cls(role=Role.ASSISTANT, content=content, tool_call=tool_call)

    @classmethod
    def tool(cls, tool_name: str, content: str) -> Message:
        return cls(role=Role.TOOL, content=content, tool_name=tool_name)

    def to_openai(self, call_id: str | None = None) -> dict:
        """Serialize to an OpenAI chat message dict.

        Args:
            call_id: For tool messages, the id of the tool call being answered.
        """
        if self.role is Role.ASSISTANT and self.tool_call is not None:
            return {
                "role": "assistant",
                "content": self.content,
                "tool_calls": [self.tool_call.to_openai()],
            }
        if self.role is Role.TOOL:
            d: dict[str, Any] = {
                "role": "tool",
                "name": self.tool_name,
                "content": self.content or "",
            }
            if call_id is not None:
                d["tool_call_id"] = call_id
            return d
        return {"role": self.role.value, "content": self.content or ""}


def to_openai_messages(messages: Sequence[Message]) -> list[dict]:
    """Serialize a request's messages, pairing tool results with call ids.

    Each tool message takes the id of the most recent assistant tool call.
    """
    out: list[dict] = []
    last_call: ToolCall | None = None
    for message in messages:
        if message.tool_call is not None:
            last_call = message.tool_call
        call_id = None
        if message.role is Role.TOOL and last_call is not None:
            call_id = last_call.id
        out.append(message.to_openai(call_id=call_id))
    return out


@dataclass(frozen=True)
class Completion:
    """One parsed choice of a chat completion response."""

    content: str | None = None
    tool_call: ToolCall | None = None
    role: Role = Role.ASSISTANT
    usage: dict | None = None

    @property
    def text(self) -> str:
        """The response text, empty when the model sent no content."""
        return self.content or ""

    @classmethod
    def from_openai(cls, response: Mapping[str, Any]) -> Completion:
        """Parse an OpenAI-format chat completion response.

        Uses ``choices[0].message``. Accepts both ``tool_calls`` (only the
        first call is kept) and the legacy ``function_call`` field.

        Raises:
            LLMResponseError: If the response does not have that shape.
        """
        from toolchat.llm.errors import LLMResponseError

        try:
            message = response["choices"][0]["message"]
            content = message.get("content")
            raw_calls = message.get("tool_calls") or []
            function_call = message.get("function_call")

            tool_call: ToolCall | None = None
            if raw_calls:
                if len(raw_calls) > 1:
                    logger.warning(
                        "Completion requested %d tool calls; only %s is served",
                        len(raw_calls),
                        raw_calls[0]["function"]["name"],
                    )
                tool_call = ToolCall.from_openai(raw_calls[0])
            elif function_call:
                tool_call = ToolCall.from_function_call(function_call)

            if content is not None and not isinstance(content, str):
                raise TypeError(f"content must be a string, got {type(content).__name__}")

            return cls(
                content=content,
                tool_call=tool_call,
                role=Role(message.get("role") or "assistant"),
                usage=response.get("usage"),
            )
        except (KeyError, IndexError, TypeError, ValueError, AttributeError) as exc:
            raise LLMResponseError(
                f"Cannot parse completion response: {exc!r}",
                response=response,
            ) from exc


@runtime_checkable
class CompletionClient(Protocol):
    """Protocol for pluggable completion clients.

    Any object with complete() and close() methods matching this signature
    works. ``complete()`` must return a Completion; anything else fails the
    turn with RemoteFailedError. The built-in OpenAIClient implements this
    protocol and does the parsing of raw OpenAI responses itself.
    """

    def complete(
        self,
        messages: Sequence[Message],
        *,
        tools: Sequence[ToolDefinition] | None = None,
        max_tokens: int = DEFAULT_MAX_TOKENS,
        **kwargs: Any,
    ) -> Completion:
        """Send the conversation, return the next assistant turn."""
        ...

    def close(self) -> None:
        """Release underlying resources."""
        ...
