"""
MongoDB-backed FlowStore.

Collections:
- flows: one document per flow, nodes embedded in stored order
- plugins: one document per plugin

Both carry a unique index on ``name``; a lost creation race surfaces as
pymongo's DuplicateKeyError and is mapped to DuplicateFlowError /
DuplicatePluginError.
"""

from __future__ import annotations

import logging
from typing import Any, Sequence

from pymongo.errors import DuplicateKeyError

from routeflow.errors import DuplicateFlowError, DuplicatePluginError
from routeflow.models import Flow, Node, NodeSpec, Plugin, PluginSpec

from .store import new_id, node_from_spec

logger = logging.getLogger(__name__)


def _flow_from_doc(doc: dict[str, Any]) -> Flow:
    return Flow(
        id=str(doc["_id"]),
        name=doc["name"],
        nodes=tuple(Node(**n) for n in doc.get("nodes", [])),
    )


def _plugin_from_doc(doc: dict[str, Any]) -> Plugin:
    return Plugin(
        id=str(doc["_id"]),
        name=doc["name"],
        description=doc.get("description", ""),
        wasm_url=doc["wasm_url"],
    )


class MongoFlowStore:
    """
    FlowStore over MongoDB via motor.

    Example:
        store = MongoFlowStore("mongodb://localhost:27017", "routeflow")
        await store.connect()
        await store.ensure_indexes()
    """

    def __init__(
        self,
        mongodb_url: str = "",
        database_name: str = "routeflow",
        *,
        database: Any = None,
    ):
        """
        Initialize the store.

        Args:
            mongodb_url: MongoDB connection URL
            database_name: Database name
            database: Pre-built database handle (skips connect)
        """
        self._mongodb_url = mongodb_url
        self._database_name = database_name
        self._client = None
        self._db = database

    async def connect(self) -> None:
        """Connect to MongoDB."""
        try:
            from motor.motor_asyncio import AsyncIOMotorClient
        except ImportError:
            raise ImportError(
                "motor package is required for MongoDB. Install with: pip install motor"
            )

        self._client = AsyncIOMotorClient(self._mongodb_url)
        self._db = self._client[self._database_name]
        logger.info(f"Connected to MongoDB database: {self._database_name}")

    async def close(self) -> None:
        """Close MongoDB connection."""
        if self._client:
            self._client.close()
            self._client = None
            self._db = None

    async def _ensure_connected(self) -> None:
        if self._db is None:
            await self.connect()

    async def ensure_indexes(self) -> None:
        """Create the unique name indexes that settle creation races."""
        await self._ensure_connected()
        await self._db.flows.create_index("name", unique=True)
        await self._db.plugins.create_index("name", unique=True)

    # ==================== Flows ====================

    async def find_by_name(self, name: str) -> Flow | None:
        await self._ensure_connected()
        doc = await self._db.flows.find_one({"name": name})
        return _flow_from_doc(doc) if doc else None

    async def create_flow(self, name: str, nodes: Sequence[NodeSpec] = ()) -> Flow:
        await self._ensure_connected()

        flow = Flow(id=new_id(), name=name, nodes=tuple(node_from_spec(n) for n in nodes))
        doc = {
            "_id": flow.id,
            "name": flow.name,
            "nodes": [n.model_dump() for n in flow.nodes],
        }

        try:
            await self._db.flows.insert_one(doc)
        except DuplicateKeyError as e:
            raise DuplicateFlowError(name) from e

        logger.info(f"[store] Created flow '{name}' with {len(flow.nodes)} node(s)")
        return flow

    async def append_node(self, flow: Flow, spec: NodeSpec) -> Flow:
        await self._ensure_connected()

        node = node_from_spec(spec)
        result = await self._db.flows.update_one(
            {"_id": flow.id},
            {"$push": {"nodes": node.model_dump()}},
        )
        if result.matched_count == 0:
            raise KeyError(f"Flow '{flow.name}' ({flow.id}) does not exist")

        doc = await self._db.flows.find_one({"_id": flow.id})
        return _flow_from_doc(doc)

    # ==================== Plugins ====================

    async def find_plugin_by_name(self, name: str) -> Plugin | None:
        await self._ensure_connected()
        doc = await self._db.plugins.find_one({"name": name})
        return _plugin_from_doc(doc) if doc else None

    async def get_plugin(self, plugin_id: str) -> Plugin | None:
        await self._ensure_connected()
        doc = await self._db.plugins.find_one({"_id": plugin_id})
        return _plugin_from_doc(doc) if doc else None

    async def create_plugin(self, spec: PluginSpec) -> Plugin:
        await self._ensure_connected()

        plugin = Plugin(
            id=new_id(),
            name=spec.name,
            description=spec.description,
            wasm_url=spec.wasm_url,
        )
        try:
            await self._db.plugins.insert_one(
                {
                    "_id": plugin.id,
                    "name": plugin.name,
                    "description": plugin.description,
                    "wasm_url": plugin.wasm_url,
                }
            )
        except DuplicateKeyError as e:
            raise DuplicatePluginError(spec.name) from e

        logger.info(f"[store] Created plugin '{spec.name}'")
        return plugin

    def __repr__(self) -> str:
        return f"MongoFlowStore(database='{self._database_name}')"


__all__ = ["MongoFlowStore"]
