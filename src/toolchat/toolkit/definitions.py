"""Built-in tool definitions for the personal-assistant agent.

Two stub tools: a canned weather lookup and a ``persist_data`` tool that
echoes back the record it would have saved. Neither performs real I/O.
Each tool's JSON schema is derived from its pydantic argument model.
"""

from __future__ import annotations

import logging
from typing import Literal

from pydantic import BaseModel, Field

from toolchat.toolkit.models import ToolDefinition
from toolchat.toolkit.registry import ToolRegistry

logger = logging.getLogger(__name__)

DataType = Literal[
    "task",
    "note",
    "reminder",
    "event",
    "contact",
    "location",
    "link",
    "file",
    "image",
    "video",
    "audio",
]

# No storage backs persist_data; every record gets the same id.
PLACEHOLDER_RECORD_ID = "1234"


class WeatherArguments(BaseModel):
    location: str = Field(description="The city and state, e.g. San Francisco, CA")
    unit: Literal["celsius", "fahrenheit"] = "fahrenheit"


class PersistDataArguments(BaseModel):
    data: str = Field(description="The data to save")
    type: DataType = Field(description="The type of data to save")


def get_current_weather(args: WeatherArguments) -> dict:
    """Return a fixed forecast for ``args.location``."""
    return {
        "location": args.location,
        "temperature": "72",
        "unit": args.unit,
        "forecast": ["sunny", "windy"],
    }


def persist_data(args: PersistDataArguments) -> dict:
    """Pretend to save a record and return it with a placeholder id."""
    logger.info("Saving %s: %r", args.type, args.data)
    return {
        "data": args.data,
        "type": args.type,
        "id": PLACEHOLDER_RECORD_ID,
    }


def get_all_tools() -> list[ToolDefinition]:
    """Build the built-in tool definitions, in advertisement order."""
    return [
        ToolDefinition.from_model(
            name="get_current_weather",
            description="Get the current weather in a given location",
            arguments_model=WeatherArguments,
            handler=get_current_weather,
        ),
        ToolDefinition.from_model(
            name="persist_data",
            description="Persist data into a database",
            arguments_model=PersistDataArguments,
            handler=persist_data,
        ),
    ]


def default_registry() -> ToolRegistry:
    """Registry holding every built-in tool."""
    return ToolRegistry(get_all_tools())
