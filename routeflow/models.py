"""
Domain models for Routeflow.

Flows, nodes and plugins are shared, externally persisted records looked up
by name. They are pydantic models so stores can validate documents on the
way in and out.
"""

from __future__ import annotations

from enum import Enum
from typing import Any

from pydantic import BaseModel, ConfigDict, Field

# =============================================================================
# Enums
# =============================================================================


class RouteLabel(str, Enum):
    """Closed set of route labels the semantic router may produce."""

    BITCOIN = "bitcoin"
    BITCOIN_PRICE = "bitcoin_price"
    FINANCE = "finance"
    ZIPCODE = "zipcode"
    MAKE_AN_IMAGE_OF = "make_an_image_of"
    SHITCOINS = "shitcoins"
    BITCOIN_CASH = "bitcoin_cash"
    BSV = "bsv"
    CRAIG_WRIGHT_SATOSHI = "craig_wright_satoshi"

    @classmethod
    def default(cls) -> RouteLabel:
        return cls.BITCOIN


class NodeType(str, Enum):
    """Known node type tags. Each member needs a registered handler."""

    PLUGIN = "plugin"
    STABILITY_TEXT_TO_IMAGE = "stability_text_to_image"
    FINNHUB_FUNCTION_CALL = "finnhub_function_call"


# =============================================================================
# Creation Payloads
# =============================================================================


class NodeSpec(BaseModel):
    """Payload for creating a node inside a flow."""

    name: str = Field(..., min_length=1)
    description: str = ""
    type: str = Field(..., min_length=1, description="Node type tag")
    config: dict[str, Any] = Field(default_factory=dict)


class PluginSpec(BaseModel):
    """Payload for creating a plugin."""

    name: str = Field(..., min_length=1)
    description: str = ""
    wasm_url: str = Field(..., min_length=1)


# =============================================================================
# Persisted Records
# =============================================================================


class Node(BaseModel):
    """One typed, executable stage of a flow."""

    model_config = ConfigDict(frozen=True)

    id: str
    name: str
    description: str = ""
    type: str
    config: dict[str, Any] = Field(default_factory=dict)

    def __repr__(self) -> str:
        return f"Node(name='{self.name}', type='{self.type}')"


class Flow(BaseModel):
    """A named, ordered sequence of nodes."""

    model_config = ConfigDict(frozen=True)

    id: str
    name: str
    nodes: tuple[Node, ...] = ()

    @property
    def node_names(self) -> list[str]:
        return [n.name for n in self.nodes]

    def __repr__(self) -> str:
        return f"Flow(name='{self.name}', nodes={self.node_names})"


class Plugin(BaseModel):
    """A sandboxed WebAssembly plugin invoked by ``plugin`` nodes."""

    model_config = ConfigDict(frozen=True)

    id: str
    name: str
    description: str = ""
    wasm_url: str


__all__ = [
    "Flow",
    "Node",
    "NodeSpec",
    "NodeType",
    "Plugin",
    "PluginSpec",
    "RouteLabel",
]
