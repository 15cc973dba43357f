"""
Routing Table for Routeflow.

The routing table maps each RouteLabel to what happens when input is
classified to it:

- a canonical Flow (name + default nodes) created on first use,
- a canned response returned without touching any flow, or
- neither, in which case the flow already bound to the run is used.

It also holds the reference utterances the semantic router embeds at
startup and the literal shortcut rules checked before routing.

File Format (routes.yaml):
    version: 1
    default_route: bitcoin
    similarity_threshold: 0.7
    shortcuts:
      - phrase: "make an image of"
        route: make_an_image_of
    routes:
      - label: bitcoin_price
        utterances: ["What's the bitcoin price?"]
        flow:
          name: Financial Analysis
          nodes:
            - name: Finnhub Function Call
              type: finnhub_function_call
              config: {gateway: mistral, model: mistral-large-latest}

The table is loaded once at startup; adding a route is a data change.
"""

from __future__ import annotations

import logging
from pathlib import Path
from typing import Any

import yaml
from pydantic import BaseModel, Field, ValidationError, model_validator

from routeflow.errors import ConfigurationError
from routeflow.models import NodeSpec, PluginSpec, RouteLabel

logger = logging.getLogger(__name__)

SUPPORTED_VERSIONS = frozenset({1})

DEFAULT_ROUTING_TABLE_PATH = Path(__file__).parent / "routes.yaml"


class ShortcutRule(BaseModel):
    """Literal substring rule that forces a route before semantic routing."""

    phrase: str = Field(..., min_length=1)
    route: RouteLabel


class FlowSpec(BaseModel):
    """Canonical flow created for a route on first use."""

    name: str = Field(..., min_length=1)
    nodes: list[NodeSpec] = Field(default_factory=list)
    plugins: list[PluginSpec] = Field(
        default_factory=list,
        description="Plugins referenced by node configs via {'plugin': <name>}",
    )

    def plugin_spec(self, name: str) -> PluginSpec | None:
        return next((p for p in self.plugins if p.name == name), None)

    @model_validator(mode="after")
    def _check_plugin_references(self) -> FlowSpec:
        for node in self.nodes:
            ref = node.config.get("plugin")
            if ref is not None and self.plugin_spec(ref) is None:
                raise ValueError(
                    f"Node '{node.name}' references plugin '{ref}' "
                    f"which is not declared on flow '{self.name}'"
                )
        return self


class RouteConfig(BaseModel):
    """What a single route label resolves to."""

    label: RouteLabel
    utterances: list[str] = Field(default_factory=list)
    flow: FlowSpec | None = None
    canned_response: str | None = None

    @property
    def is_canned(self) -> bool:
        return self.canned_response is not None

    @model_validator(mode="after")
    def _check_target(self) -> RouteConfig:
        if self.flow is not None and self.canned_response is not None:
            raise ValueError(
                f"Route '{self.label.value}' cannot have both a flow and a canned response"
            )
        return self


class RoutingTable(BaseModel):
    """Versioned mapping of RouteLabel to routing behaviour."""

    version: int
    default_route: RouteLabel = RouteLabel.BITCOIN
    similarity_threshold: float = Field(0.0, ge=-1.0, le=1.0)
    shortcuts: list[ShortcutRule] = Field(default_factory=list)
    routes: list[RouteConfig] = Field(default_factory=list)

    @model_validator(mode="after")
    def _check_routes(self) -> RoutingTable:
        if self.version not in SUPPORTED_VERSIONS:
            raise ValueError(
                f"Unsupported routing table version {self.version}, "
                f"expected one of {sorted(SUPPORTED_VERSIONS)}"
            )

        seen: set[RouteLabel] = set()
        for route in self.routes:
            if route.label in seen:
                raise ValueError(f"Route '{route.label.value}' declared more than once")
            seen.add(route.label)

        if self.default_route not in seen:
            raise ValueError(f"Default route '{self.default_route.value}' is not declared")

        default = self.get(self.default_route)
        if default is not None and (default.flow is not None or default.is_canned):
            raise ValueError("Default route must resolve to the run's bound flow")

        return self

    @property
    def labels(self) -> list[RouteLabel]:
        """Route labels in declaration order (the router's tie-break order)."""
        return [r.label for r in self.routes]

    def get(self, label: RouteLabel | str) -> RouteConfig | None:
        for route in self.routes:
            if route.label == label:
                return route
        return None

    def canned_response(self, label: RouteLabel | str) -> str | None:
        route = self.get(label)
        return route.canned_response if route else None

    def flow_spec(self, label: RouteLabel | str) -> FlowSpec | None:
        route = self.get(label)
        return route.flow if route else None

    def utterances(self) -> dict[RouteLabel, list[str]]:
        return {r.label: list(r.utterances) for r in self.routes if r.utterances}


def parse_routing_table(data: dict[str, Any]) -> RoutingTable:
    """Validate a raw mapping into a RoutingTable."""
    try:
        return RoutingTable.model_validate(data)
    except ValidationError as e:
        raise ConfigurationError(f"Invalid routing table: {e}") from e


def load_routing_table(path: str | Path | None = None) -> RoutingTable:
    """
    Load and validate a routing table from YAML.

    Args:
        path: YAML file to read; the bundled routes.yaml when None

    Raises:
        ConfigurationError: If the file is missing or invalid
    """
    table_path = Path(path) if path else DEFAULT_ROUTING_TABLE_PATH

    try:
        with table_path.open(encoding="utf-8") as f:
            data = yaml.safe_load(f)
    except FileNotFoundError as e:
        raise ConfigurationError(f"Routing table not found: {table_path}") from e
    except yaml.YAMLError as e:
        raise ConfigurationError(f"Routing table is not valid YAML: {e}") from e

    if not isinstance(data, dict):
        raise ConfigurationError(f"Routing table must be a mapping: {table_path}")

    table = parse_routing_table(data)
    logger.info(
        f"Loaded routing table v{table.version} from {table_path.name}: "
        f"{len(table.routes)} routes, {len(table.shortcuts)} shortcuts"
    )
    return table


__all__ = [
    "DEFAULT_ROUTING_TABLE_PATH",
    "FlowSpec",
    "RouteConfig",
    "RoutingTable",
    "ShortcutRule",
    "load_routing_table",
    "parse_routing_table",
]
