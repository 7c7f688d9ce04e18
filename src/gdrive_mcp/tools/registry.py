"""Tool registry for the Google Drive MCP Server.

This module implements the tool registration system that maps tool names
to their schema and handler. The registry is filled once at startup and
frozen; from then on it only serves lookups and invocations.
"""

import logging
from dataclasses import dataclass
from typing import Any, Awaitable, Callable

from .schemas import ToolSchema

logger = logging.getLogger(__name__)


@dataclass(frozen=True)
class ToolMetadata:
    """Metadata for a registered tool."""

    name: str
    version: str
    handler: Callable[..., Awaitable[dict[str, Any]]]
    schema: dict[str, Any]
    description: str = ""
    category: str = ""


class ToolRegistry:
    """Registry for managing MCP tools.

    This registry provides:
    - Tool registration (until frozen)
    - Tool discovery by name and category
    - Required-parameter checking and handler invocation
    """

    def __init__(self):
        self._tools: dict[str, ToolMetadata] = {}
        self._frozen = False
        logger.debug("Tool registry initialized")

    def register(
        self,
        name: str,
        handler: Callable[..., Awaitable[dict[str, Any]]],
        schema: dict[str, Any],
        version: str = "1.0.0",
        description: str | None = None,
        category: str | None = None,
    ) -> None:
        """Register a tool in the registry.

        Args:
            name: Tool name (must be unique)
            handler: Async function that implements the tool
            schema: Tool schema with an ``inputSchema`` JSON Schema
            version: Tool version (default: "1.0.0")
            description: Tool description (defaults to the schema's)
            category: Tool category (defaults to the schema's)

        Raises:
            RuntimeError: If the registry is frozen
            ValueError: If a tool with that name is already registered
        """
        if self._frozen:
            raise RuntimeError(
                f"Tool registry is frozen; cannot register '{name}'"
            )

        if name in self._tools:
            raise ValueError(
                f"Tool '{name}' already registered "
                f"(v{self._tools[name].version})"
            )

        self._tools[name] = ToolMetadata(
            name=name,
            version=version,
            handler=handler,
            schema=schema,
            description=description or schema.get("description", ""),
            category=category or schema.get("category", ""),
        )
        logger.debug(f"Registered tool: {name} v{version}")

    def freeze(self) -> None:
        """Disallow further registration."""
        self._frozen = True
        logger.info(f"Tool registry frozen with {self.count()} tools")

    @property
    def frozen(self) -> bool:
        return self._frozen

    def get(self, name: str) -> ToolMetadata | None:
        return self._tools.get(name)

    def get_handler(self, name: str) -> Callable[..., Awaitable[dict[str, Any]]] | None:
        tool = self._tools.get(name)
        return tool.handler if tool else None

    def list_tools(self, category: str | None = None) -> list[str]:
        """List registered tool names, optionally for one category."""
        if category is None:
            return list(self._tools.keys())
        return [name for name, tool in self._tools.items() if tool.category == category]

    def categories(self) -> dict[str, int]:
        """Count tools per category."""
        counts: dict[str, int] = {}
        for tool in self._tools.values():
            counts[tool.category] = counts.get(tool.category, 0) + 1
        return counts

    def get_all_schemas(self) -> dict[str, dict[str, Any]]:
        return {name: tool.schema for name, tool in self._tools.items()}

    def count(self) -> int:
        return len(self._tools)

    async def invoke(self, name: str, arguments: dict[str, Any] | None = None) -> dict[str, Any]:
        """Check required parameters and run a tool's handler.

        Args:
            name: Tool name
            arguments: Tool arguments

        Returns:
            The handler's response dictionary

        Raises:
            KeyError: If no tool has that name
            ValueError: If required parameters are missing or unknown ones given
        """
        tool = self._tools.get(name)
        if tool is None:
            raise KeyError(f"Tool '{name}' not found")

        arguments = arguments or {}
        schema = ToolSchema(name, tool.schema)
        is_valid, missing = schema.validate_required(arguments)
        if not is_valid:
            raise ValueError(
                f"Missing required parameters for '{name}': {', '.join(missing)}"
            )
        unknown = schema.unknown_params(arguments)
        if unknown:
            raise ValueError(
                f"Unknown parameters for '{name}': {', '.join(unknown)}"
            )

        logger.debug(f"Invoking tool {name}")
        return await tool.handler(**arguments)
