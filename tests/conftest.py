"""
Pytest configuration and fixtures for Routeflow tests.
"""

import sys
from pathlib import Path

import pytest

# Add the repository root to path for imports
# This allows `from routeflow.pipeline import ...` to work
repo_root = Path(__file__).parent.parent
if str(repo_root) not in sys.path:
    sys.path.insert(0, str(repo_root))

from routeflow.config import load_routing_table  # noqa: E402
from routeflow.flows import InMemoryFlowStore  # noqa: E402
from routeflow.models import Plugin, RouteLabel  # noqa: E402
from routeflow.providers import ProviderRegistry  # noqa: E402


# =============================================================================
# Fakes
# =============================================================================


class AxisEmbedder:
    """
    Embedding provider that puts each route on its own axis.

    Every reference utterance of a route embeds to that route's one-hot
    vector. Test queries are mapped to a route explicitly; any other text
    embeds to the all-ones vector, which scores 1/sqrt(dim) against every
    route and therefore falls below a 0.7 threshold.
    """

    def __init__(self, table, queries=None):
        self.labels = list(table.labels)
        self._by_text = {}
        for label, texts in table.utterances().items():
            for text in texts:
                self._by_text[text] = label
        self._by_text.update(queries or {})
        self.calls = []

    @property
    def name(self) -> str:
        return "axis"

    @property
    def dimension(self) -> int:
        return len(self.labels)

    def vector_for(self, label):
        return [1.0 if other == label else 0.0 for other in self.labels]

    async def embed(self, text):
        self.calls.append(text)
        label = self._by_text.get(text)
        if label is None:
            return [1.0] * self.dimension
        return self.vector_for(label)

    async def embed_batch(self, texts):
        return [await self.embed(t) for t in texts]


class RecordingSandbox:
    """Sandbox runtime returning a canned answer per plugin."""

    def __init__(self, output="Beverly Hills, CA, United States"):
        self.output = output
        self.calls = []

    async def invoke(self, plugin: Plugin, input: str) -> str:
        self.calls.append((plugin, input))
        return self.output


class RecordingImageGenerator:
    def __init__(self, output="data:image/png;base64,iVBORw0KGgo="):
        self.output = output
        self.prompts = []

    async def generate(self, prompt: str) -> str:
        self.prompts.append(prompt)
        return self.output


class RecordingGateway:
    def __init__(self, answer="Bitcoin is trading at $64,000.", name="mistral"):
        self.answer = answer
        self._name = name
        self.calls = []

    @property
    def name(self) -> str:
        return self._name

    async def call(self, model, input):
        self.calls.append((model, input))
        return self.answer


# =============================================================================
# Fixtures
# =============================================================================


@pytest.fixture
def routing_table():
    """The bundled routing table."""
    return load_routing_table()


@pytest.fixture
def queries():
    """Test inputs and the route each one should embed to."""
    return {
        "What's the bitcoin price today?": RouteLabel.BITCOIN_PRICE,
        "Where is zipcode 90210?": RouteLabel.ZIPCODE,
        "Is dogecoin a good investment?": RouteLabel.SHITCOINS,
        "Craig Wright invented bitcoin": RouteLabel.CRAIG_WRIGHT_SATOSHI,
        "Tell me about BSV please": RouteLabel.BSV,
    }


@pytest.fixture
def embedder(routing_table, queries):
    return AxisEmbedder(routing_table, queries)


@pytest.fixture
def store():
    return InMemoryFlowStore()


@pytest.fixture
def sandbox():
    return RecordingSandbox()


@pytest.fixture
def image_generator():
    return RecordingImageGenerator()


@pytest.fixture
def gateway():
    return RecordingGateway()


@pytest.fixture
def providers(embedder, sandbox, image_generator, gateway):
    registry = ProviderRegistry()
    registry.register_embedding("axis", embedder)
    registry.register_sandbox("default", sandbox)
    registry.register_image("stability", image_generator)
    registry.register_gateway("mistral", gateway)
    return registry
