"""toolchat: a minimal tool-calling conversational agent.

Wraps an OpenAI-compatible chat completion service and lets the model call
host-defined tools mid-conversation.
"""

__version__ = "0.1.0"

# Core entry point
from toolchat.orchestrator import Agent, AgentConfig, AgentState

# Conversation data model
from toolchat.conversation import Conversation
from toolchat.protocols import (
    Completion,
    CompletionClient,
    Message,
    Role,
    ToolCall,
)

# Tools
from toolchat.toolkit import (
    ToolDefinition,
    ToolDispatcher,
    ToolRegistry,
    default_registry,
    get_all_tools,
)

# Completion client
from toolchat.llm import OpenAIClient

# Prompts
from toolchat.prompts.assistant import DEFAULT_SYSTEM_PROMPT

# Exceptions
from toolchat.exceptions import (
    ConversationError,
    DispatchError,
    HandlerFailedError,
    InvalidArgumentsError,
    RemoteFailedError,
    ToolChatError,
    ToolDispatchFailedError,
    ToolNotFoundError,
    ToolRegistryError,
    TurnError,
)

__all__ = [
    "__version__",
    # Core
    "Agent",
    "AgentConfig",
    "AgentState",
    # Conversation
    "Conversation",
    "Completion",
    "CompletionClient",
    "Message",
    "Role",
    "ToolCall",
    # Tools
    "ToolDefinition",
    "ToolDispatcher",
    "ToolRegistry",
    "default_registry",
    "get_all_tools",
    # Client
    "OpenAIClient",
    # Prompts
    "DEFAULT_SYSTEM_PROMPT",
    # Exceptions
    "ToolChatError",
    "ToolRegistryError",
    "ConversationError",
    "DispatchError",
    "ToolNotFoundError",
    "InvalidArgumentsError",
    "HandlerFailedError",
    "TurnError",
    "RemoteFailedError",
    "ToolDispatchFailedError",
]
