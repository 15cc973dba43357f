"""
Routeflow Configuration

Environment-driven application settings and the versioned routing table.
"""

from __future__ import annotations

import os
from functools import lru_cache

from .routing import (
    DEFAULT_ROUTING_TABLE_PATH,
    FlowSpec,
    RouteConfig,
    RoutingTable,
    ShortcutRule,
    load_routing_table,
    parse_routing_table,
)
from .schemas import AppSettings


def _env_bool(name: str, default: str = "false") -> bool:
    return os.getenv(name, default).lower() == "true"


@lru_cache()
def get_settings() -> AppSettings:
    """
    Get application settings from environment.

    Uses lru_cache for singleton pattern.
    """
    return AppSettings(
        # Service
        service_name=os.getenv("ROUTEFLOW_SERVICE_NAME", "routeflow"),
        environment=os.getenv("ROUTEFLOW_ENVIRONMENT", "development"),
        debug=_env_bool("ROUTEFLOW_DEBUG"),
        # Logging
        log_level=os.getenv("ROUTEFLOW_LOG_LEVEL", "INFO"),
        log_json=_env_bool("ROUTEFLOW_LOG_JSON"),
        # MongoDB
        mongodb_url=os.getenv("ROUTEFLOW_MONGODB_URL", "mongodb://localhost:27017"),
        mongodb_database=os.getenv("ROUTEFLOW_MONGODB_DATABASE", "routeflow"),
        # Provider API keys
        mistral_api_key=os.getenv("ROUTEFLOW_MISTRAL_API_KEY", ""),
        openai_api_key=os.getenv("ROUTEFLOW_OPENAI_API_KEY"),
        stability_api_key=os.getenv("ROUTEFLOW_STABILITY_API_KEY", ""),
        finnhub_api_key=os.getenv("ROUTEFLOW_FINNHUB_API_KEY", ""),
        # Backends
        sandbox_url=os.getenv("ROUTEFLOW_SANDBOX_URL", "http://localhost:8787"),
        embedding_model=os.getenv("ROUTEFLOW_EMBEDDING_MODEL", "mistral-embed"),
        embedding_dimension=int(os.getenv("ROUTEFLOW_EMBEDDING_DIMENSION", "1024")),
        stability_engine=os.getenv(
            "ROUTEFLOW_STABILITY_ENGINE", "stable-diffusion-xl-1024-v1-0"
        ),
        # Resilience
        http_timeout=float(os.getenv("ROUTEFLOW_HTTP_TIMEOUT", "30")),
        max_retries=int(os.getenv("ROUTEFLOW_MAX_RETRIES", "3")),
        retry_delay=float(os.getenv("ROUTEFLOW_RETRY_DELAY", "1.0")),
        sink_timeout=float(os.getenv("ROUTEFLOW_SINK_TIMEOUT", "5")),
        # Routing
        routing_table_path=os.getenv("ROUTEFLOW_ROUTING_TABLE"),
    )


__all__ = [
    "DEFAULT_ROUTING_TABLE_PATH",
    "AppSettings",
    "FlowSpec",
    "RouteConfig",
    "RoutingTable",
    "ShortcutRule",
    "get_settings",
    "load_routing_table",
    "parse_routing_table",
]
