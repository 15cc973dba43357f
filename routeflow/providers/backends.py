"""
Node execution backend protocols.

Each node variant talks to exactly one of these. Implementations raise
GatewayTimeoutError / GatewayUnavailableError for transient failures and
any other exception for fatal ones.
"""

from __future__ import annotations

from typing import TYPE_CHECKING, Protocol, runtime_checkable

if TYPE_CHECKING:
    from routeflow.models import Plugin


@runtime_checkable
class SandboxRuntime(Protocol):
    """Executes a plugin inside an isolated sandbox."""

    async def invoke(self, plugin: Plugin, input: str) -> str:
        ...


@runtime_checkable
class ImageGenerator(Protocol):
    """Text-to-image backend returning an image reference (e.g. a data URI)."""

    async def generate(self, prompt: str) -> str:
        ...


@runtime_checkable
class FunctionCallGateway(Protocol):
    """Model gateway with function calling."""

    @property
    def name(self) -> str:
        ...

    async def call(self, model: str | None, input: str) -> str:
        ...


__all__ = ["FunctionCallGateway", "ImageGenerator", "SandboxRuntime"]
