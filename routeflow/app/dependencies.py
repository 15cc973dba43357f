"""
Dependency Injection for Routeflow.

Provides singleton instances of the provider registry, flow store, routing
table and orchestrator. Everything is built once at startup from
``AppSettings``; endpoints receive the orchestrator through FastAPI's
``Depends(get_orchestrator)`` so tests can override it.
"""

from __future__ import annotations

import logging
from typing import Optional

from routeflow.config import get_settings, load_routing_table
from routeflow.config.routing import RoutingTable
from routeflow.config.schemas import AppSettings
from routeflow.flows.mongo import MongoFlowStore
from routeflow.integrations import FinnhubClient, MistralClient, SandboxClient, StabilityClient
from routeflow.providers import (
    FunctionCallingGateway,
    MistralEmbeddingProvider,
    MistralLLMProvider,
    OpenAILLMProvider,
    ProviderRegistry,
)
from routeflow.runtime import Orchestrator
from routeflow.tools import create_finnhub_tools

logger = logging.getLogger(__name__)


# Global instances (initialized at startup)
_providers: Optional[ProviderRegistry] = None
_store: Optional[MongoFlowStore] = None
_table: Optional[RoutingTable] = None
_orchestrator: Optional[Orchestrator] = None


def build_providers(settings: AppSettings) -> ProviderRegistry:
    """
    Create the provider registry for the configured API keys.

    Registers:
    - embedding "mistral" and gateway "mistral" when a Mistral key is set
    - gateway "openai" when an OpenAI key is set
    - image "stability" when a Stability key is set
    - sandbox "default" always
    """
    registry = ProviderRegistry()
    resilience = {
        "timeout": settings.http_timeout,
        "max_retries": settings.max_retries,
        "retry_delay": settings.retry_delay,
    }

    finnhub = FinnhubClient(settings.finnhub_api_key.get_secret_value(), **resilience)
    registry.track(finnhub)
    tools = create_finnhub_tools(finnhub)

    mistral_key = settings.mistral_api_key.get_secret_value()
    if mistral_key:
        mistral = MistralClient(mistral_key, **resilience)
        registry.track(mistral)
        registry.register_embedding(
            "mistral",
            MistralEmbeddingProvider(
                mistral,
                model=settings.embedding_model,
                dimension=settings.embedding_dimension,
            ),
        )
        registry.register_gateway("mistral", FunctionCallingGateway(MistralLLMProvider(mistral), tools))

    if settings.openai_api_key is not None and settings.openai_api_key.get_secret_value():
        registry.register_gateway(
            "openai",
            FunctionCallingGateway(
                OpenAILLMProvider(
                    api_key=settings.openai_api_key.get_secret_value(),
                    max_retries=settings.max_retries,
                    timeout=settings.http_timeout,
                ),
                tools,
            ),
        )

    stability_key = settings.stability_api_key.get_secret_value()
    if stability_key:
        stability = StabilityClient(stability_key, engine=settings.stability_engine, **resilience)
        registry.track(stability)
        registry.register_image("stability", stability)

    sandbox = SandboxClient(settings.sandbox_url, **resilience)
    registry.track(sandbox)
    registry.register_sandbox("default", sandbox)

    logger.info(f"Providers configured: {registry.list_providers()}")
    return registry


def get_providers() -> ProviderRegistry:
    """Get the provider registry, building it on first call."""
    global _providers
    if _providers is None:
        _providers = build_providers(get_settings())
    return _providers


def get_store() -> MongoFlowStore:
    """Get the MongoDB flow store."""
    global _store
    if _store is None:
        settings = get_settings()
        _store = MongoFlowStore(
            mongodb_url=settings.mongodb_url.get_secret_value(),
            database_name=settings.mongodb_database,
        )
    return _store


def get_routing_table() -> RoutingTable:
    """Get the routing table, loading it on first call."""
    global _table
    if _table is None:
        _table = load_routing_table(get_settings().routing_table_path)
    return _table


def get_orchestrator() -> Orchestrator:
    """
    Get the orchestrator built at startup.

    Raises:
        RuntimeError: If called before initialize_services()
    """
    if _orchestrator is None:
        raise RuntimeError("Orchestrator not initialized; call initialize_services() first")
    return _orchestrator


async def initialize_services() -> None:
    """
    Initialize all services on application startup.

    Called from FastAPI lifespan. Embeds the routing table's reference
    utterances, so a Mistral key is required.
    """
    global _orchestrator
    settings = get_settings()

    providers = get_providers()
    table = get_routing_table()

    store = get_store()
    await store.connect()
    await store.ensure_indexes()

    _orchestrator = await Orchestrator.create(
        table,
        providers,
        store,
        sink_timeout=settings.sink_timeout,
    )


async def shutdown_services() -> None:
    """
    Cleanup all services on application shutdown.

    Called from FastAPI lifespan.
    """
    global _providers, _store, _orchestrator
    if _providers:
        await _providers.close()
        _providers = None
    if _store:
        await _store.close()
        _store = None
    _orchestrator = None


__all__ = [
    "build_providers",
    "get_orchestrator",
    "get_providers",
    "get_routing_table",
    "get_settings",
    "get_store",
    "initialize_services",
    "shutdown_services",
]
