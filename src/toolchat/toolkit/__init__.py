"""Agent toolkit: tool definitions, registry, and dispatcher.

Exposes host-implemented functions as function-calling schemas for the
remote model and routes the model's tool calls back to them.
"""

from toolchat.toolkit.definitions import (
    PersistDataArguments,
    WeatherArguments,
    default_registry,
    get_all_tools,
)
from toolchat.toolkit.dispatcher import ToolDispatcher, serialize_result
from toolchat.toolkit.models import ToolDefinition
from toolchat.toolkit.registry import ToolRegistry

__all__ = [
    "ToolDefinition",
    "ToolRegistry",
    "ToolDispatcher",
    "serialize_result",
    "get_all_tools",
    "default_registry",
    "WeatherArguments",
    "PersistDataArguments",
]
