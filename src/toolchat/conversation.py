"""Append-only conversation log owned by a single agent.

The log stores what the user sees: the system prompt, user inputs, tool
results, and assistant replies. The assistant message that requested a tool
is not stored; it is re-synthesised in front of its tool result whenever the
log is rendered into a request, so every request satisfies the protocol rule
that a tool message directly follows the call it answers.
"""

from __future__ import annotations

from typing import TYPE_CHECKING, Union

from toolchat.exceptions import ConversationError
from toolchat.protocols import Message, Role, ToolCall

if TYPE_CHECKING:
    from collections.abc import Iterable, Iterator, Sequence


# A plain message, or a tool-result message paired with the call it answers.
Entry = Union[Message, tuple[Message, ToolCall]]


def expand_tool_result(message: Message, call: ToolCall) -> list[Message]:
    """Request form of a tool result: the requesting call, then the result."""
    return [Message.assistant(tool_call=call), message]


class Conversation:
    """Ordered, append-only message log.

    Usage::

        convo = Conversation("You are helpful.")
        convo.append(Message.user("hi"))
        request = convo.render()
    """

    def __init__(self, system_prompt: str) -> None:
        system = Message.system(system_prompt)
        self._messages: list[Message] = [system]
        # Request form of the log, extended in step with _messages.
        self._rendered: list[Message] = [system]

    # ------------------------------------------------------------------
    # Mutators
    # ------------------------------------------------------------------

    def append(self, message: Message, *, answering: ToolCall | None = None) -> None:
        """Append one message.

        Args:
            message: The message to record.
            answering: For tool messages, the call whose result this is.

        Raises:
            ConversationError: If the message would break ordering rules.
        """
        self._check(message, answering)
        self._record(message, answering)

    def extend(self, entries: Iterable[Entry]) -> None:
        """Append several entries atomically.

        Every entry is validated before any is recorded, so a rejected batch
        leaves the log unchanged.
        """
        pairs = [self._split(entry) for entry in entries]
        for message, answering in pairs:
            self._check(message, answering)
        for message, answering in pairs:
            self._record(message, answering)

    # ------------------------------------------------------------------
    # Views
    # ------------------------------------------------------------------

    @property
    def messages(self) -> tuple[Message, ...]:
        """Snapshot of the stored log."""
        return tuple(self._messages)

    @property
    def system_prompt(self) -> str:
        return self._messages[0].content or ""

    def render(self, pending: Sequence[Message] = ()) -> list[Message]:
        """Build a request: the rendered log followed by ``pending`` messages."""
        return [*self._rendered, *pending]

    def __len__(self) -> int:
        return len(self._messages)

    def __iter__(self) -> Iterator[Message]:
        return iter(tuple(self._messages))

    def __repr__(self) -> str:
        return f"Conversation({len(self._messages)} messages)"

    # ------------------------------------------------------------------
    # Internal
    # ------------------------------------------------------------------

    @staticmethod
    def _split(entry: Entry) -> tuple[Message, ToolCall | None]:
        if isinstance(entry, Message):
            return entry, None
        message, call = entry
        return message, call

    @staticmethod
    def _check(message: Message, answering: ToolCall | None) -> None:
        if message.role is Role.SYSTEM:
            raise ConversationError("The system message is fixed at construction")
        if message.tool_call is not None:
            raise ConversationError(
                "Tool-call messages are not stored; append the tool result "
                "with answering= instead"
            )
        if message.role is Role.TOOL:
            if answering is None:
                raise ConversationError("Tool messages require the call they answer")
            if answering.name != message.tool_name:
                raise ConversationError(
                    f"Tool message for {message.tool_name!r} cannot answer "
                    f"a call to {answering.name!r}"
                )
        elif answering is not None:
            raise ConversationError("Only tool messages can answer a tool call")

    def _record(self, message: Message, answering: ToolCall | None) -> None:
        self._messages.append(message)
        if answering is not None:
            self._rendered.extend(expand_tool_result(message, answering))
        else:
            self._rendered.append(message)
