"""
Flow Store for Routeflow.

Flows, nodes and plugins are shared records looked up by name. Names are
unique: a second create with the same name raises DuplicateFlowError /
DuplicatePluginError, which is what makes get-or-create safe under
concurrent runs.

A flow and its initial nodes are inserted in one atomic operation so no
reader can observe a named flow without its nodes.
"""

from __future__ import annotations

import asyncio
import logging
from typing import Protocol, Sequence, runtime_checkable
from uuid import uuid4

from routeflow.errors import DuplicateFlowError, DuplicatePluginError
from routeflow.models import Flow, Node, NodeSpec, Plugin, PluginSpec

logger = logging.getLogger(__name__)


def new_id() -> str:
    return uuid4().hex


def node_from_spec(spec: NodeSpec) -> Node:
    return Node(
        id=new_id(),
        name=spec.name,
        description=spec.description,
        type=spec.type,
        config=dict(spec.config),
    )


@runtime_checkable
class FlowStore(Protocol):
    """
    Persistence interface for flows and plugins.

    Implementations must enforce name uniqueness for flows and plugins.
    """

    async def find_by_name(self, name: str) -> Flow | None:
        ...

    async def create_flow(self, name: str, nodes: Sequence[NodeSpec] = ()) -> Flow:
        """Insert a flow with its nodes atomically. Raises DuplicateFlowError."""
        ...

    async def append_node(self, flow: Flow, spec: NodeSpec) -> Flow:
        ...

    async def find_plugin_by_name(self, name: str) -> Plugin | None:
        ...

    async def get_plugin(self, plugin_id: str) -> Plugin | None:
        ...

    async def create_plugin(self, spec: PluginSpec) -> Plugin:
        """Insert a plugin. Raises DuplicatePluginError."""
        ...


class InMemoryFlowStore:
    """
    Process-local FlowStore.

    Writes are serialized by an asyncio.Lock; every operation yields to the
    event loop once so concurrent callers interleave as they would against
    a real database.
    """

    def __init__(self) -> None:
        self._flows: dict[str, Flow] = {}
        self._plugins: dict[str, Plugin] = {}
        self._lock = asyncio.Lock()

    @property
    def flows(self) -> list[Flow]:
        return list(self._flows.values())

    @property
    def plugins(self) -> list[Plugin]:
        return list(self._plugins.values())

    # ==================== Flows ====================

    async def find_by_name(self, name: str) -> Flow | None:
        await asyncio.sleep(0)
        return self._flows.get(name)

    async def create_flow(self, name: str, nodes: Sequence[NodeSpec] = ()) -> Flow:
        await asyncio.sleep(0)
        async with self._lock:
            if name in self._flows:
                raise DuplicateFlowError(name)
            flow = Flow(id=new_id(), name=name, nodes=tuple(node_from_spec(n) for n in nodes))
            self._flows[name] = flow

        logger.info(f"[store] Created flow '{name}' with {len(flow.nodes)} node(s)")
        return flow

    async def append_node(self, flow: Flow, spec: NodeSpec) -> Flow:
        await asyncio.sleep(0)
        async with self._lock:
            current = self._flows.get(flow.name)
            if current is None or current.id != flow.id:
                raise KeyError(f"Flow '{flow.name}' ({flow.id}) does not exist")
            updated = current.model_copy(update={"nodes": (*current.nodes, node_from_spec(spec))})
            self._flows[flow.name] = updated
        return updated

    # ==================== Plugins ====================

    async def find_plugin_by_name(self, name: str) -> Plugin | None:
        await asyncio.sleep(0)
        return self._plugins.get(name)

    async def get_plugin(self, plugin_id: str) -> Plugin | None:
        await asyncio.sleep(0)
        return next((p for p in self._plugins.values() if p.id == plugin_id), None)

    async def create_plugin(self, spec: PluginSpec) -> Plugin:
        await asyncio.sleep(0)
        async with self._lock:
            if spec.name in self._plugins:
                raise DuplicatePluginError(spec.name)
            plugin = Plugin(
                id=new_id(),
                name=spec.name,
                description=spec.description,
                wasm_url=spec.wasm_url,
            )
            self._plugins[spec.name] = plugin

        logger.info(f"[store] Created plugin '{spec.name}'")
        return plugin

    def __repr__(self) -> str:
        return f"InMemoryFlowStore(flows={len(self._flows)}, plugins={len(self._plugins)})"


__all__ = ["FlowStore", "InMemoryFlowStore", "new_id", "node_from_spec"]
