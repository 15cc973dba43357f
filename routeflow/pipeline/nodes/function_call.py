"""Function-calling node: one call through a model gateway with tools."""

from __future__ import annotations

import logging
from typing import TYPE_CHECKING

from routeflow.models import NodeType

from .base import NodeHandler

if TYPE_CHECKING:
    from routeflow.models import Node

    from ..context import PipelineContext

logger = logging.getLogger(__name__)


class FunctionCallNodeHandler(NodeHandler):
    """
    Passes the input to a function-calling gateway and returns its answer.

    Config:
        gateway: Registered gateway name, e.g. "mistral" (optional, default gateway otherwise)
        model: Model identifier forwarded to the gateway (optional)
    """

    @property
    def node_type(self) -> NodeType:
        return NodeType.FINNHUB_FUNCTION_CALL

    async def execute(self, node: Node, ctx: PipelineContext) -> str:
        gateway = ctx.require_providers().get_gateway(node.config.get("gateway"))
        model = node.config.get("model")
        logger.debug(f"[node:{node.name}] Calling gateway '{gateway.name}' with model={model}")
        return await gateway.call(model, ctx.input)


__all__ = ["FunctionCallNodeHandler"]
