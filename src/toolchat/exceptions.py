"""toolchat exception hierarchy.

All toolchat-specific exceptions inherit from ToolChatError.
"""


class ToolChatError(Exception):
    """Base exception for all toolchat errors."""


class ToolRegistryError(ToolChatError):
    """Raised when a tool registry is built from inconsistent definitions."""


class ConversationError(ToolChatError):
    """Raised when a message would break the conversation's ordering rules."""


# ---------------------------------------------------------------------------
# Dispatch errors
# ---------------------------------------------------------------------------


class DispatchError(ToolChatError):
    """Base for failures while dispatching a model-emitted tool call."""

    def __init__(self, tool_name: str, message: str) -> None:
        self.tool_name = tool_name
        super().__init__(message)


class ToolNotFoundError(DispatchError):
    """Raised when the model requests a tool the registry does not declare."""

    def __init__(self, tool_name: str) -> None:
        super().__init__(tool_name, f"Tool not found: {tool_name}")


class InvalidArgumentsError(DispatchError):
    """Raised when tool-call arguments do not decode to the tool's shape."""

    def __init__(self, tool_name: str, detail: str) -> None:
        self.detail = detail
        super().__init__(
            tool_name, f"Invalid arguments for tool {tool_name}: {detail}"
        )


class HandlerFailedError(DispatchError):
    """Raised when a tool handler itself fails.

    The original exception is available as ``cause`` and as ``__cause__``.
    """

    def __init__(self, tool_name: str, cause: BaseException) -> None:
        self.cause = cause
        super().__init__(
            tool_name,
            f"Tool {tool_name} failed: {type(cause).__name__}: {cause}",
        )


# ---------------------------------------------------------------------------
# Turn errors
# ---------------------------------------------------------------------------


class TurnError(ToolChatError):
    """Base for failures of a single ``Agent.turn()``.

    A failed turn leaves the conversation unchanged; the agent stays usable.
    """


class RemoteFailedError(TurnError):
    """Raised when talking to the completion service failed.

    Covers transport errors and malformed responses. Retryable by the caller;
    never retried by the agent itself.
    """

    def __init__(self, cause: BaseException) -> None:
        self.cause = cause
        super().__init__(f"Completion request failed: {type(cause).__name__}: {cause}")


class ToolDispatchFailedError(TurnError):
    """Raised when the tool call requested by the model could not be served.

    Wraps the underlying DispatchError as ``error``.
    """

    def __init__(self, error: DispatchError) -> None:
        self.error = error
        super().__init__(str(error))

    @property
    def tool_name(self) -> str:
        return self.error.tool_name
