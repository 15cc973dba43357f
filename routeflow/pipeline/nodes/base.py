"""
Node handler abstraction.

A handler executes one node variant. It receives the node record (for its
config) and a context whose ``input`` is the previous node's output, and
returns the node's full textual output.
"""

from __future__ import annotations

from abc import ABC, abstractmethod
from typing import TYPE_CHECKING

from routeflow.errors import ConfigurationError

if TYPE_CHECKING:
    from routeflow.models import Node, NodeType

    from ..context import PipelineContext


class NodeHandler(ABC):
    """
    Base class for node handlers.

    Subclasses must implement:
    - node_type: The NodeType this handler executes
    - execute(): Produce the node's output from ctx.input

    Handlers raise on failure; the executor wraps the error in
    NodeExecutionError and aborts the flow.
    """

    @property
    @abstractmethod
    def node_type(self) -> NodeType:
        ...

    @abstractmethod
    async def execute(self, node: Node, ctx: PipelineContext) -> str:
        ...

    @staticmethod
    def require_config(node: Node, key: str) -> str:
        """Return ``node.config[key]`` or fail with ConfigurationError."""
        value = node.config.get(key)
        if not value:
            raise ConfigurationError(f"Node '{node.name}' is missing config key '{key}'")
        return str(value)

    def __repr__(self) -> str:
        return f"{type(self).__name__}(node_type='{self.node_type.value}')"


__all__ = ["NodeHandler"]
