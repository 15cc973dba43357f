"""Plugin node: runs a sandboxed WebAssembly plugin on the input."""

from __future__ import annotations

import logging
from typing import TYPE_CHECKING

from routeflow.errors import ConfigurationError
from routeflow.models import NodeType

from .base import NodeHandler

if TYPE_CHECKING:
    from routeflow.models import Node

    from ..context import PipelineContext

logger = logging.getLogger(__name__)


class PluginNodeHandler(NodeHandler):
    """
    Loads the plugin named by ``config["plugin_id"]`` and invokes it.

    Config:
        plugin_id: Stored plugin id (required)
        sandbox: Registered sandbox runtime name (optional)
    """

    @property
    def node_type(self) -> NodeType:
        return NodeType.PLUGIN

    async def execute(self, node: Node, ctx: PipelineContext) -> str:
        plugin_id = self.require_config(node, "plugin_id")

        plugin = await ctx.require_store().get_plugin(plugin_id)
        if plugin is None:
            raise ConfigurationError(f"Node '{node.name}' references missing plugin '{plugin_id}'")

        sandbox = ctx.require_providers().get_sandbox(node.config.get("sandbox"))
        logger.debug(f"[node:{node.name}] Invoking plugin '{plugin.name}'")
        return await sandbox.invoke(plugin, ctx.input)


__all__ = ["PluginNodeHandler"]
