"""Toolkit data models for toolchat tool definitions.

Frozen dataclass describing one host-implemented tool: its name, the JSON
schema advertised to the model, and the handler plus the pydantic model the
handler's arguments are decoded into.
"""

from __future__ import annotations

from dataclasses import dataclass
from typing import TYPE_CHECKING, Any

from pydantic import BaseModel

if TYPE_CHECKING:
    from collections.abc import Callable


@dataclass(frozen=True)
class ToolDefinition:
    """A single tool definition for LLM consumption.

    Attributes:
        name: Tool name, unique within a registry.
        description: Human-readable description of when/why to use this tool.
        parameters: JSON Schema dict describing tool parameters.
        handler: Callable taking one decoded ``arguments_model`` instance.
            May return a value or an awaitable of one.
        arguments_model: Pydantic model the raw arguments are decoded into.
    """

    name: str
    description: str
    parameters: dict
    handler: Callable[[Any], object]
    arguments_model: type[BaseModel]

    @classmethod
    def from_model(
        cls,
        name: str,
        description: str,
        arguments_model: type[BaseModel],
        handler: Callable[[Any], object],
    ) -> ToolDefinition:
        """Build a definition whose schema is derived from ``arguments_model``.

        Keeps the advertised schema and the decoder in lockstep.
        """
        schema = arguments_model.model_json_schema()
        schema.pop("title", None)
        return cls(
            name=name,
            description=description,
            parameters=schema,
            handler=handler,
            arguments_model=arguments_model,
        )

    def to_openai(self) -> dict:
        """Convert to OpenAI function-calling format.

        Returns:
            Dict with "type": "function" and nested "function" object.
        """
        return {
            "type": "function",
            "function": {
                "name": self.name,
                "description": self.description,
                "parameters": self.parameters,
            },
        }
