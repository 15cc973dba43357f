"""
Node handler registry.

Maps node type tags to handlers. Construction fails unless every NodeType
member has exactly one handler, so a new variant cannot ship half-wired.
"""

from __future__ import annotations

import logging
from typing import Iterable

from routeflow.errors import ConfigurationError, UnknownNodeTypeError
from routeflow.models import Node, NodeType

from .base import NodeHandler
from .function_call import FunctionCallNodeHandler
from .image import TextToImageNodeHandler
from .plugin import PluginNodeHandler

logger = logging.getLogger(__name__)


class NodeRegistry:
    """
    Tag-to-handler lookup.

    Example:
        registry = NodeRegistry.default()
        handler = registry.handler_for(node)
    """

    def __init__(self, handlers: Iterable[NodeHandler]):
        self._handlers: dict[NodeType, NodeHandler] = {}
        for handler in handlers:
            if handler.node_type in self._handlers:
                raise ConfigurationError(
                    f"Duplicate handler for node type '{handler.node_type.value}'"
                )
            self._handlers[handler.node_type] = handler

        missing = [t.value for t in NodeType if t not in self._handlers]
        if missing:
            raise ConfigurationError(f"No handler registered for node type(s): {missing}")

    @classmethod
    def default(cls) -> NodeRegistry:
        return cls(
            [
                PluginNodeHandler(),
                TextToImageNodeHandler(),
                FunctionCallNodeHandler(),
            ]
        )

    def handler_for(self, node: Node) -> NodeHandler:
        """
        Raises:
            UnknownNodeTypeError: If the node's tag is not a NodeType
        """
        try:
            node_type = NodeType(node.type)
        except ValueError:
            raise UnknownNodeTypeError(node.type, node.name) from None
        return self._handlers[node_type]

    @property
    def types(self) -> list[str]:
        return [t.value for t in self._handlers]

    def __repr__(self) -> str:
        return f"NodeRegistry(types={self.types})"


__all__ = ["NodeRegistry"]
