"""
Provider Registry for Routeflow.

Centralized registry for the backends nodes and runs talk to. Node configs
name their backend (e.g. ``{"gateway": "mistral"}``), so every backend kind
is registered by name with an optional default.
"""

from __future__ import annotations

import logging
from dataclasses import dataclass, field
from typing import TYPE_CHECKING, Any, Generic, TypeVar

from routeflow.errors import ConfigurationError

if TYPE_CHECKING:
    from .backends import FunctionCallGateway, ImageGenerator, SandboxRuntime
    from .embedding import EmbeddingProvider

logger = logging.getLogger(__name__)

T = TypeVar("T")


class ProviderNotFoundError(ConfigurationError):
    """Raised when a requested provider is not registered."""

    def __init__(self, kind: str, name: str | None):
        self.kind = kind
        self.name = name
        if name is None:
            super().__init__(f"No {kind} provider registered")
        else:
            super().__init__(f"{kind.capitalize()} provider '{name}' not registered")


@dataclass
class _ProviderSlot(Generic[T]):
    """Named providers of one kind plus the default name."""

    kind: str
    required_methods: tuple[str, ...]
    providers: dict[str, T] = field(default_factory=dict)
    default: str | None = None

    def register(self, name: str, provider: T, *, default: bool = False) -> None:
        for method in self.required_methods:
            if not callable(getattr(provider, method, None)):
                raise ValueError(f"{self.kind.capitalize()} provider must have '{method}' method")
        self.providers[name] = provider
        if default or self.default is None:
            self.default = name
        logger.debug(f"Registered {self.kind} provider: {name}")

    def get(self, name: str | None = None) -> T:
        provider_name = name or self.default
        if provider_name is None or provider_name not in self.providers:
            raise ProviderNotFoundError(self.kind, provider_name)
        return self.providers[provider_name]

    def names(self) -> list[str]:
        return list(self.providers)


class ProviderRegistry:
    """
    Registry for managing and accessing providers.

    Usage:
        registry = ProviderRegistry()
        registry.register_embedding("mistral", MistralEmbeddingProvider(client))
        registry.register_gateway("mistral", FunctionCallingGateway(llm, tools))
        registry.register_image("stability", StabilityClient(api_key))
        registry.register_sandbox("default", SandboxClient(url))

        # In a node handler
        gateway = registry.get_gateway(node.config["gateway"])
    """

    def __init__(self) -> None:
        self._embedding: _ProviderSlot[EmbeddingProvider] = _ProviderSlot(
            "embedding", ("embed", "embed_batch")
        )
        self._gateways: _ProviderSlot[FunctionCallGateway] = _ProviderSlot("gateway", ("call",))
        self._images: _ProviderSlot[ImageGenerator] = _ProviderSlot("image", ("generate",))
        self._sandboxes: _ProviderSlot[SandboxRuntime] = _ProviderSlot("sandbox", ("invoke",))
        self._closeables: list[Any] = []

    # ==================== Registration ====================

    def register_embedding(self, name: str, provider: EmbeddingProvider, *, default: bool = False) -> None:
        self._embedding.register(name, provider, default=default)

    def register_gateway(self, name: str, gateway: FunctionCallGateway, *, default: bool = False) -> None:
        self._gateways.register(name, gateway, default=default)

    def register_image(self, name: str, generator: ImageGenerator, *, default: bool = False) -> None:
        self._images.register(name, generator, default=default)

    def register_sandbox(self, name: str, runtime: SandboxRuntime, *, default: bool = False) -> None:
        self._sandboxes.register(name, runtime, default=default)

    def track(self, resource: Any) -> None:
        """Remember a resource with an async ``close()`` for shutdown."""
        self._closeables.append(resource)

    # ==================== Lookup ====================

    def get_embedding(self, name: str | None = None) -> EmbeddingProvider:
        return self._embedding.get(name)

    def get_gateway(self, name: str | None = None) -> FunctionCallGateway:
        return self._gateways.get(name)

    def get_image(self, name: str | None = None) -> ImageGenerator:
        return self._images.get(name)

    def get_sandbox(self, name: str | None = None) -> SandboxRuntime:
        return self._sandboxes.get(name)

    @property
    def embedding(self) -> EmbeddingProvider:
        """Shorthand for getting the default embedding provider."""
        return self.get_embedding()

    def list_providers(self) -> dict[str, dict[str, Any]]:
        """List registered providers per kind, with defaults."""
        return {
            slot.kind: {"providers": slot.names(), "default": slot.default}
            for slot in (self._embedding, self._gateways, self._images, self._sandboxes)
        }

    async def close(self) -> None:
        """Close tracked resources."""
        for resource in self._closeables:
            try:
                await resource.close()
            except Exception as e:
                logger.error(f"Error closing {resource!r}: {e}")
        self._closeables = []

    def __repr__(self) -> str:
        return f"ProviderRegistry({self.list_providers()})"


__all__ = ["ProviderNotFoundError", "ProviderRegistry"]
