"""
Simple Run Example

This example shows a run going through the orchestrator without any
external service:
1. Register in-process providers
2. Build the orchestrator from the bundled routing table
3. Trigger runs and print each node output as it streams

Run: python examples/01-simple-run/main.py
"""

import asyncio

from routeflow import Agent, Orchestrator, Run, Thread
from routeflow.config import load_routing_table
from routeflow.flows import InMemoryFlowStore
from routeflow.providers import ProviderRegistry

# =============================================================================
# In-process Providers
# =============================================================================


class KeywordEmbedder:
    """Embeds text as keyword hits, one axis per keyword."""

    KEYWORDS = ["price", "zip", "doge", "craig", "image", "stock"]

    @property
    def name(self) -> str:
        return "keyword"

    @property
    def dimension(self) -> int:
        return len(self.KEYWORDS) + 1

    async def embed(self, text: str) -> list[float]:
        lowered = text.lower()
        hits = [1.0 if k in lowered else 0.0 for k in self.KEYWORDS]
        # Bias axis keeps every vector non-zero
        return hits + [0.1]

    async def embed_batch(self, texts: list[str]) -> list[list[float]]:
        return [await self.embed(t) for t in texts]


class EchoSandbox:
    async def invoke(self, plugin, input: str) -> str:
        return f"[{plugin.name}] looked up: {input}"


class CannedGateway:
    @property
    def name(self) -> str:
        return "canned"

    async def call(self, model, input: str) -> str:
        return f"({model}) Markets are open. You asked: {input}"


class PlaceholderImages:
    async def generate(self, prompt: str) -> str:
        return "data:image/png;base64,iVBORw0KGgo="


# =============================================================================
# Main
# =============================================================================


async def main():
    providers = ProviderRegistry()
    providers.register_embedding("keyword", KeywordEmbedder())
    providers.register_sandbox("default", EchoSandbox())
    providers.register_gateway("mistral", CannedGateway())
    providers.register_image("stability", PlaceholderImages())

    orchestrator = await Orchestrator.create(load_routing_table(), providers, InMemoryFlowStore())
    print(f"Orchestrator: {orchestrator}")
    print()

    agent = Agent(id="agent-1", name="Satoshi")
    thread = Thread(id="thread-1")

    for text in [
        "What's the bitcoin price today?",
        "Where is zipcode 90210?",
        "Is dogecoin a good investment?",
        "make an image of a lighthouse",
    ]:
        run = Run(agent=agent, thread=thread, input=text)
        result = await orchestrator.trigger(run, sink=lambda chunk: print(f"  chunk: {chunk[:60]}"))
        print(f"{text!r} -> {run.route.value} ({run.state.value})")
        print(f"  result: {result[:60]}")
        print()


if __name__ == "__main__":
    asyncio.run(main())
