"""
Tests for the HTTP API.

The orchestrator dependency is overridden with one wired to in-memory
fakes; the client is used without entering its context so the lifespan
(which connects to MongoDB) never runs.
"""
import asyncio
import json

import pytest
from fastapi.testclient import TestClient

from routeflow.app.dependencies import get_orchestrator
from routeflow.app.main import app
from routeflow.models import NodeSpec, NodeType
from routeflow.runtime import Orchestrator


def _events(body):
    """Parse a text/event-stream body into (event, data) pairs."""
    events = []
    for block in body.strip().split("\n\n"):
        fields = dict(line.split(": ", 1) for line in block.splitlines())
        events.append((fields["event"], json.loads(fields["data"])))
    return events


@pytest.fixture
def orchestrator(routing_table, providers, store):
    return asyncio.run(Orchestrator.create(routing_table, providers, store))


@pytest.fixture
def client(orchestrator):
    app.dependency_overrides[get_orchestrator] = lambda: orchestrator
    yield TestClient(app)
    app.dependency_overrides.clear()


class TestRunsStreaming:
    def test_streams_chunk_then_result(self, client, gateway):
        response = client.post("/api/v1/runs", json={"input": "What's the bitcoin price today?"})

        assert response.status_code == 200
        assert response.headers["content-type"].startswith("text/event-stream")
        events = _events(response.text)
        assert [name for name, _ in events] == ["chunk", "result"]
        assert events[0][1] == {"node_index": 0, "output": gateway.answer}
        result = events[1][1]
        assert result["route"] == "bitcoin_price"
        assert result["state"] == "completed"
        assert result["output"] == gateway.answer

    def test_canned_route_streams_result_only(self, client):
        response = client.post("/api/v1/runs", json={"input": "Is dogecoin a good investment?"})

        events = _events(response.text)
        assert [name for name, _ in events] == ["result"]
        assert events[0][1]["output"] == "Shitcoins are not supported. Study Bitcoin."

    def test_failure_streams_error_event(self, client):
        response = client.post("/api/v1/runs", json={"input": "Tell me a joke"})

        [(name, data)] = _events(response.text)
        assert name == "error"
        assert data["error_type"] == "UnresolvedFlowError"
        assert data["state"] == "failed"


class TestRunsJSON:
    def test_returns_result(self, client, sandbox):
        response = client.post(
            "/api/v1/runs", json={"input": "Where is zipcode 90210?", "stream": False}
        )

        assert response.status_code == 200
        body = response.json()
        assert body["route"] == "zipcode"
        assert body["state"] == "completed"
        assert body["output"] == sandbox.output

    def test_bound_flow_by_name(self, client, store, image_generator):
        asyncio.run(
            store.create_flow(
                "Agent Images",
                [NodeSpec(name="Draw", type=NodeType.STABILITY_TEXT_TO_IMAGE.value)],
            )
        )

        response = client.post(
            "/api/v1/runs",
            json={"input": "Tell me a joke", "flow_name": "Agent Images", "stream": False},
        )

        assert response.status_code == 200
        assert response.json()["route"] == "bitcoin"
        assert image_generator.prompts == ["Tell me a joke"]

    def test_unknown_flow_name(self, client):
        response = client.post(
            "/api/v1/runs", json={"input": "hi", "flow_name": "Missing", "stream": False}
        )
        assert response.status_code == 404

    def test_unresolved_flow_is_422(self, client):
        response = client.post("/api/v1/runs", json={"input": "Tell me a joke", "stream": False})

        assert response.status_code == 422
        detail = response.json()["detail"]
        assert detail["error_type"] == "UnresolvedFlowError"
        assert detail["state"] == "failed"

    def test_empty_input_rejected(self, client):
        response = client.post("/api/v1/runs", json={"input": ""})
        assert response.status_code == 422


class TestServiceEndpoints:
    def test_root(self):
        response = TestClient(app).get("/")
        assert response.status_code == 200
        assert response.json()["status"] == "running"

    def test_health_unhealthy_before_startup(self):
        response = TestClient(app).get("/health")
        assert response.status_code == 200
        assert response.json()["status"] == "unhealthy"
