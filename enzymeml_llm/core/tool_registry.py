"""
Tool Registry for enzymeml-llm

This module maps tool names, as emitted by the model, to handlers.
Lookup is an exact match against the caller-supplied definitions, with a
single fallback: the reserved ``search_databases`` name resolves to the
built-in multi-database search tool.
"""

from dataclasses import dataclass
from typing import Any, Awaitable, Callable, Iterable

from ..errors import ToolRegistrationError
from ..schemas.tools import ToolSpec


# (arguments, abort_signal=None) -> result | awaitable result
ToolHandler = Callable[..., Any | Awaitable[Any]]

DEFAULT_TOOL_NAME = "search_databases"


@dataclass(frozen=True)
class ToolDefinition:
    """A declared tool: the spec shown to the model and its handler."""
    spec: ToolSpec
    handler: ToolHandler

    @property
    def name(self) -> str:
        return self.spec.name


def _default_tool() -> ToolDefinition:
    from ..tools.search_databases import SEARCH_DATABASES_TOOL

    return SEARCH_DATABASES_TOOL


class ToolRegistry:
    """
    Registry of tools available to one chain execution.

    The registry:
    - Stores tool definitions by name
    - Resolves model-emitted names to handlers
    - Provides the specs to declare to the model

    It is read-only while a chain runs.
    """

    def __init__(
        self,
        definitions: Iterable[ToolDefinition] | None = None,
        include_default: bool = True,
    ):
        self._tools: dict[str, ToolDefinition] = {}
        self.include_default = include_default
        for definition in definitions or []:
            self.register(definition)

    def register(self, definition: ToolDefinition) -> None:
        """Register a tool definition."""
        if definition.name in self._tools:
            raise ToolRegistrationError(f"Tool '{definition.name}' is already registered")
        self._tools[definition.name] = definition

    def unregister(self, name: str) -> None:
        """Remove a tool from the registry."""
        self._tools.pop(name, None)

    def get(self, name: str) -> ToolDefinition | None:
        """Get a registered definition by exact name."""
        return self._tools.get(name)

    def resolve(self, name: str) -> ToolHandler | None:
        """
        Resolve a tool name to its handler.

        Returns None for unknown names; the executor turns that into an
        ``unknown_tool`` error result.
        """
        definition = self._tools.get(name)
        if definition is not None:
            return definition.handler
        if self.include_default and name == DEFAULT_TOOL_NAME:
            return _default_tool().handler
        return None

    def get_spec(self, name: str) -> ToolSpec | None:
        definition = self._tools.get(name)
        if definition is not None:
            return definition.spec
        if self.include_default and name == DEFAULT_TOOL_NAME:
            return _default_tool().spec
        return None

    def specs(self) -> list[ToolSpec]:
        """Specs of all registered tools, in registration order."""
        return [definition.spec for definition in self._tools.values()]

    def list_tools(self) -> list[str]:
        """List all registered tool names."""
        return list(self._tools.keys())

    def __len__(self) -> int:
        return len(self._tools)

    def __contains__(self, name: object) -> bool:
        return name in self._tools
