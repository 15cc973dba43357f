"""
Tests for flow stores and route-to-flow resolution.
"""
import asyncio
from types import SimpleNamespace
from unittest.mock import AsyncMock, MagicMock

import pytest
from pymongo.errors import DuplicateKeyError

from routeflow.errors import DuplicateFlowError, DuplicatePluginError, UnresolvedFlowError
from routeflow.flows import FlowResolver, InMemoryFlowStore
from routeflow.flows.mongo import MongoFlowStore
from routeflow.models import Flow, NodeSpec, NodeType, PluginSpec, RouteLabel

ZIPCODE_PLUGIN = PluginSpec(
    name="World Zipcode Finder",
    wasm_url="https://example.com/zipcode.wasm",
)


def _plugin_node():
    return NodeSpec(name="Zipcode", type=NodeType.PLUGIN.value, config={"plugin_id": "p1"})


# =============================================================================
# InMemoryFlowStore
# =============================================================================


class TestInMemoryFlowStore:
    @pytest.mark.asyncio
    async def test_create_and_find(self, store):
        flow = await store.create_flow("Financial Analysis", [_plugin_node()])

        found = await store.find_by_name("Financial Analysis")
        assert found == flow
        assert [n.name for n in found.nodes] == ["Zipcode"]
        assert found.nodes[0].id

    @pytest.mark.asyncio
    async def test_find_missing(self, store):
        assert await store.find_by_name("Nope") is None

    @pytest.mark.asyncio
    async def test_duplicate_name(self, store):
        await store.create_flow("Financial Analysis")
        with pytest.raises(DuplicateFlowError) as exc_info:
            await store.create_flow("Financial Analysis")
        assert exc_info.value.name == "Financial Analysis"

    @pytest.mark.asyncio
    async def test_append_node_keeps_order(self, store):
        flow = await store.create_flow("Chain", [_plugin_node()])
        second = NodeSpec(name="Image", type=NodeType.STABILITY_TEXT_TO_IMAGE.value)

        updated = await store.append_node(flow, second)

        assert [n.name for n in updated.nodes] == ["Zipcode", "Image"]
        assert (await store.find_by_name("Chain")).nodes == updated.nodes
        # The original value is untouched
        assert len(flow.nodes) == 1

    @pytest.mark.asyncio
    async def test_append_to_unknown_flow(self, store):
        ghost = Flow(id="ghost", name="Ghost")
        with pytest.raises(KeyError):
            await store.append_node(ghost, _plugin_node())

    @pytest.mark.asyncio
    async def test_plugins(self, store):
        plugin = await store.create_plugin(ZIPCODE_PLUGIN)

        assert await store.find_plugin_by_name(ZIPCODE_PLUGIN.name) == plugin
        assert await store.get_plugin(plugin.id) == plugin
        assert await store.get_plugin("missing") is None
        with pytest.raises(DuplicatePluginError):
            await store.create_plugin(ZIPCODE_PLUGIN)

    @pytest.mark.asyncio
    async def test_concurrent_creates_have_one_winner(self, store):
        results = await asyncio.gather(
            *(store.create_flow("Race") for _ in range(5)),
            return_exceptions=True,
        )

        created = [r for r in results if isinstance(r, Flow)]
        assert len(created) == 1
        assert all(isinstance(r, DuplicateFlowError) for r in results if r not in created)
        assert len(store.flows) == 1


# =============================================================================
# MongoFlowStore
# =============================================================================


def _mongo_db():
    db = MagicMock()
    db.flows = AsyncMock()
    db.plugins = AsyncMock()
    return db


class TestMongoFlowStore:
    @pytest.mark.asyncio
    async def test_create_flow_inserts_nodes_atomically(self):
        db = _mongo_db()
        store = MongoFlowStore(database=db)

        flow = await store.create_flow("Financial Analysis", [_plugin_node()])

        db.flows.insert_one.assert_awaited_once()
        doc = db.flows.insert_one.await_args.args[0]
        assert doc["_id"] == flow.id
        assert doc["name"] == "Financial Analysis"
        assert [n["name"] for n in doc["nodes"]] == ["Zipcode"]

    @pytest.mark.asyncio
    async def test_duplicate_key_maps_to_duplicate_flow(self):
        db = _mongo_db()
        db.flows.insert_one.side_effect = DuplicateKeyError("E11000 duplicate key")
        store = MongoFlowStore(database=db)

        with pytest.raises(DuplicateFlowError):
            await store.create_flow("Financial Analysis")

    @pytest.mark.asyncio
    async def test_duplicate_key_maps_to_duplicate_plugin(self):
        db = _mongo_db()
        db.plugins.insert_one.side_effect = DuplicateKeyError("E11000 duplicate key")
        store = MongoFlowStore(database=db)

        with pytest.raises(DuplicatePluginError):
            await store.create_plugin(ZIPCODE_PLUGIN)

    @pytest.mark.asyncio
    async def test_find_by_name(self):
        db = _mongo_db()
        db.flows.find_one.return_value = {
            "_id": "f1",
            "name": "Image Generator",
            "nodes": [
                {
                    "id": "n1",
                    "name": "Stability",
                    "description": "",
                    "type": "stability_text_to_image",
                    "config": {},
                }
            ],
        }
        store = MongoFlowStore(database=db)

        flow = await store.find_by_name("Image Generator")

        db.flows.find_one.assert_awaited_once_with({"name": "Image Generator"})
        assert flow.id == "f1"
        assert flow.nodes[0].type == "stability_text_to_image"

    @pytest.mark.asyncio
    async def test_find_missing(self):
        db = _mongo_db()
        db.flows.find_one.return_value = None
        db.plugins.find_one.return_value = None
        store = MongoFlowStore(database=db)

        assert await store.find_by_name("Nope") is None
        assert await store.get_plugin("p1") is None

    @pytest.mark.asyncio
    async def test_append_node_pushes(self):
        db = _mongo_db()
        db.flows.update_one.return_value = SimpleNamespace(matched_count=1)
        db.flows.find_one.return_value = {"_id": "f1", "name": "Chain", "nodes": []}
        store = MongoFlowStore(database=db)

        await store.append_node(Flow(id="f1", name="Chain"), _plugin_node())

        selector, update = db.flows.update_one.await_args.args
        assert selector == {"_id": "f1"}
        assert update["$push"]["nodes"]["name"] == "Zipcode"

    @pytest.mark.asyncio
    async def test_append_node_to_missing_flow(self):
        db = _mongo_db()
        db.flows.update_one.return_value = SimpleNamespace(matched_count=0)
        store = MongoFlowStore(database=db)

        with pytest.raises(KeyError):
            await store.append_node(Flow(id="f1", name="Chain"), _plugin_node())

    @pytest.mark.asyncio
    async def test_ensure_indexes(self):
        db = _mongo_db()
        store = MongoFlowStore(database=db)

        await store.ensure_indexes()

        db.flows.create_index.assert_awaited_once_with("name", unique=True)
        db.plugins.create_index.assert_awaited_once_with("name", unique=True)


# =============================================================================
# FlowResolver
# =============================================================================


class TestFlowResolver:
    @pytest.mark.asyncio
    async def test_creates_canonical_flow_on_first_use(self, store, routing_table):
        resolver = FlowResolver(store, routing_table)

        flow = await resolver.resolve(RouteLabel.BITCOIN_PRICE)

        assert flow.name == "Financial Analysis"
        assert [n.type for n in flow.nodes] == [NodeType.FINNHUB_FUNCTION_CALL.value]
        assert len(store.flows) == 1

    @pytest.mark.asyncio
    async def test_reuses_existing_flow(self, store, routing_table):
        resolver = FlowResolver(store, routing_table)

        first = await resolver.resolve(RouteLabel.BITCOIN_PRICE)
        second = await resolver.resolve(RouteLabel.FINANCE)

        assert first.id == second.id
        assert len(store.flows) == 1

    @pytest.mark.asyncio
    async def test_concurrent_resolution_creates_one_flow(self, store, routing_table):
        resolver = FlowResolver(store, routing_table)

        flows = await asyncio.gather(
            *(resolver.resolve(RouteLabel.ZIPCODE) for _ in range(8))
        )

        assert len({f.id for f in flows}) == 1
        assert len(store.flows) == 1
        assert len(store.plugins) == 1

    @pytest.mark.asyncio
    async def test_plugin_reference_is_materialized(self, store, routing_table):
        resolver = FlowResolver(store, routing_table)

        flow = await resolver.resolve(RouteLabel.ZIPCODE)

        [node] = flow.nodes
        [plugin] = store.plugins
        assert node.config == {"plugin_id": plugin.id}
        assert plugin.name == "World Zipcode Finder"

    @pytest.mark.asyncio
    async def test_default_route_uses_bound_flow(self, store, routing_table):
        resolver = FlowResolver(store, routing_table)
        bound = Flow(id="mine", name="My Flow")

        assert await resolver.resolve(RouteLabel.BITCOIN, bound) is bound
        assert store.flows == []

    @pytest.mark.asyncio
    async def test_default_route_without_bound_flow(self, store, routing_table):
        resolver = FlowResolver(store, routing_table)

        with pytest.raises(UnresolvedFlowError) as exc_info:
            await resolver.resolve(RouteLabel.BITCOIN)
        assert exc_info.value.route == "bitcoin"

    @pytest.mark.asyncio
    async def test_canned_route_has_no_flow(self, store, routing_table):
        resolver = FlowResolver(store, routing_table)

        with pytest.raises(UnresolvedFlowError):
            await resolver.resolve(RouteLabel.SHITCOINS)

    @pytest.mark.asyncio
    async def test_duplicate_without_readback(self, routing_table):
        store = AsyncMock()
        store.find_by_name.return_value = None
        store.create_flow.side_effect = DuplicateFlowError("Image Generator")
        resolver = FlowResolver(store, routing_table)

        with pytest.raises(UnresolvedFlowError):
            await resolver.resolve(RouteLabel.MAKE_AN_IMAGE_OF)
        assert store.find_by_name.await_count == 2

    @pytest.mark.asyncio
    async def test_lost_race_returns_winner(self, routing_table):
        winner = Flow(id="w", name="Image Generator")
        store = AsyncMock()
        store.find_by_name.side_effect = [None, winner]
        store.create_flow.side_effect = DuplicateFlowError("Image Generator")
        resolver = FlowResolver(store, routing_table)

        assert await resolver.resolve(RouteLabel.MAKE_AN_IMAGE_OF) is winner
