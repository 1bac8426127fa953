"""ToolRegistry: the static name -> ToolDefinition table of an agent.

Built once from a sequence of definitions and never mutated afterwards, so a
single registry can be shared read-only by any number of agents.
"""

from __future__ import annotations

from types import MappingProxyType
from typing import TYPE_CHECKING

from toolchat.exceptions import ToolNotFoundError, ToolRegistryError

if TYPE_CHECKING:
    from collections.abc import Iterable, Iterator

    from toolchat.toolkit.models import ToolDefinition


class ToolRegistry:
    """Immutable, ordered collection of tool definitions.

    Usage::

        registry = ToolRegistry([weather_tool, persist_tool])
        tool = registry.resolve("persist_data")
        payload = registry.to_openai()
    """

    __slots__ = ("_definitions", "_by_name")

    def __init__(self, definitions: Iterable[ToolDefinition] = ()) -> None:
        ordered = tuple(definitions)
        by_name: dict[str, ToolDefinition] = {}
        for definition in ordered:
            if not definition.name:
                raise ToolRegistryError("Tool definitions require a non-empty name")
            if definition.name in by_name:
                raise ToolRegistryError(f"Duplicate tool name: {definition.name}")
            by_name[definition.name] = definition
        self._definitions = ordered
        self._by_name = MappingProxyType(by_name)

    def list_definitions(self) -> tuple[ToolDefinition, ...]:
        """Return all definitions in registration order."""
        return self._definitions

    def resolve(self, name: str) -> ToolDefinition:
        """Look up a definition by name.

        Raises:
            ToolNotFoundError: If no tool with that name is registered.
        """
        try:
            return self._by_name[name]
        except KeyError:
            raise ToolNotFoundError(name) from None

    def names(self) -> list[str]:
        return [d.name for d in self._definitions]

    def to_openai(self) -> list[dict]:
        """Render every definition in OpenAI ``tools`` format."""
        return [d.to_openai() for d in self._definitions]

    def __contains__(self, name: object) -> bool:
        return name in self._by_name

    def __iter__(self) -> Iterator[ToolDefinition]:
        return iter(self._definitions)

    def __len__(self) -> int:
        return len(self._definitions)

    def __repr__(self) -> str:
        return f"ToolRegistry({self.names()!r})"
