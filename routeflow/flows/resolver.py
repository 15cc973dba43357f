"""
Flow Resolver for Routeflow.

Maps a RouteLabel to the Flow a run should execute:

    route has a flow in the routing table -> canonical flow (get-or-create)
    default route / no flow configured    -> the flow already bound to the run

Get-or-create relies on the store's name uniqueness: whoever loses the
creation race gets DuplicateFlowError, re-fetches once and uses the
winner's flow. No locks are held across store calls.
"""

from __future__ import annotations

import logging
from typing import TYPE_CHECKING

from routeflow.errors import DuplicateFlowError, DuplicatePluginError, UnresolvedFlowError
from routeflow.models import NodeSpec, RouteLabel

if TYPE_CHECKING:
    from routeflow.config.routing import FlowSpec, RoutingTable
    from routeflow.models import Flow, Plugin, PluginSpec

    from .store import FlowStore

logger = logging.getLogger(__name__)


class FlowResolver:
    """
    Resolves routes to flows, creating canonical flows on first use.

    Example:
        resolver = FlowResolver(store, table)
        flow = await resolver.resolve(RouteLabel.ZIPCODE, run.flow)
    """

    def __init__(self, store: FlowStore, table: RoutingTable):
        self._store = store
        self._table = table

    async def resolve(self, route: RouteLabel, bound_flow: Flow | None = None) -> Flow:
        """
        Return the Flow to execute for ``route``.

        Raises:
            UnresolvedFlowError: If the route needs the bound flow and the
                run has none, or a canonical flow cannot be read back
        """
        config = self._table.get(route)
        if config is not None and config.is_canned:
            raise UnresolvedFlowError(
                route.value, f"Route '{route.value}' has a canned response, not a flow"
            )

        spec = config.flow if config is not None else None
        if spec is not None:
            return await self.ensure_exists(spec, route=route)

        if bound_flow is None:
            raise UnresolvedFlowError(
                route.value, f"Route '{route.value}' uses the run's flow but none is bound"
            )

        logger.debug(f"[resolver] {route.value} -> bound flow '{bound_flow.name}'")
        return bound_flow

    async def ensure_exists(self, spec: FlowSpec, *, route: RouteLabel | None = None) -> Flow:
        """
        Get-or-create the flow described by ``spec``.

        Safe to call concurrently: every caller receives the same Flow id.
        """
        flow = await self._store.find_by_name(spec.name)
        if flow is not None:
            return flow

        nodes = [await self._materialize(node, spec) for node in spec.nodes]

        try:
            flow = await self._store.create_flow(spec.name, nodes)
            logger.info(f"[resolver] Created canonical flow '{spec.name}'")
            return flow
        except DuplicateFlowError:
            logger.info(f"[resolver] Flow '{spec.name}' created concurrently, re-fetching")

        flow = await self._store.find_by_name(spec.name)
        if flow is None:
            label = route.value if route is not None else spec.name
            raise UnresolvedFlowError(
                label, f"Flow '{spec.name}' reported as duplicate but could not be read back"
            )
        return flow

    async def ensure_plugin(self, spec: PluginSpec) -> Plugin:
        """Get-or-create a plugin by name, with the same conflict protocol."""
        plugin = await self._store.find_plugin_by_name(spec.name)
        if plugin is not None:
            return plugin

        try:
            return await self._store.create_plugin(spec)
        except DuplicatePluginError:
            logger.info(f"[resolver] Plugin '{spec.name}' created concurrently, re-fetching")

        plugin = await self._store.find_plugin_by_name(spec.name)
        if plugin is None:
            raise UnresolvedFlowError(
                spec.name,
                f"Plugin '{spec.name}' reported as duplicate but could not be read back",
            )
        return plugin

    async def _materialize(self, node: NodeSpec, flow: FlowSpec) -> NodeSpec:
        """Swap a ``{"plugin": <name>}`` reference for the stored plugin id."""
        plugin_name = node.config.get("plugin")
        if plugin_name is None:
            return node

        plugin_spec = flow.plugin_spec(plugin_name)
        if plugin_spec is None:
            raise UnresolvedFlowError(
                flow.name, f"Node '{node.name}' references undeclared plugin '{plugin_name}'"
            )

        plugin = await self.ensure_plugin(plugin_spec)
        config = {k: v for k, v in node.config.items() if k != "plugin"}
        config["plugin_id"] = plugin.id
        return node.model_copy(update={"config": config})


__all__ = ["FlowResolver"]
