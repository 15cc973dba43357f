"""
Tool Registry.

Tools are registered once at startup and are immutable during execution.

Usage:
    registry = ToolRegistry()
    registry.register(FinnhubQuoteTool(client))

    tool = registry.get("get_quote")
    schemas = registry.to_llm_schemas()
"""

from __future__ import annotations

import logging
from typing import TYPE_CHECKING, Any

if TYPE_CHECKING:
    from .base import Tool

logger = logging.getLogger(__name__)


class ToolRegistryError(Exception):
    """Error in tool registry operations."""

    pass


class ToolRegistry:
    """Registry of tools available to a function-calling gateway."""

    def __init__(self) -> None:
        self._tools: dict[str, Tool] = {}

    def register(self, tool: Tool) -> None:
        """
        Register a tool.

        Raises:
            ToolRegistryError: If tool name already registered
        """
        if tool.name in self._tools:
            raise ToolRegistryError(
                f"Tool '{tool.name}' already registered. Use a unique name or unregister first."
            )
        if not tool.description:
            raise ToolRegistryError(f"Tool '{tool.name}' must have a description")

        self._tools[tool.name] = tool
        logger.info(f"[tool_registry] Registered tool: {tool.name}")

    def unregister(self, name: str) -> bool:
        if name in self._tools:
            del self._tools[name]
            logger.info(f"[tool_registry] Unregistered tool: {name}")
            return True
        return False

    def get(self, name: str) -> Tool | None:
        return self._tools.get(name)

    def to_llm_schemas(self) -> list[dict[str, Any]]:
        """Function schemas for every registered tool, in registration order."""
        return [tool.to_llm_schema() for tool in self._tools.values()]

    @property
    def names(self) -> list[str]:
        return list(self._tools)

    def __len__(self) -> int:
        return len(self._tools)

    def __contains__(self, name: str) -> bool:
        return name in self._tools

    def __repr__(self) -> str:
        return f"ToolRegistry(tools={self.names})"
