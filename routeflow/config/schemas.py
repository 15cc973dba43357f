"""
Configuration Schemas for Routeflow.

Security:
    Sensitive fields use SecretStr to prevent accidental logging
    of credentials. Access the value with `.get_secret_value()`.
"""

from __future__ import annotations

from pydantic import BaseModel, Field, SecretStr


class AppSettings(BaseModel):
    """
    Application settings model.

    Built from ``ROUTEFLOW_*`` environment variables by
    ``routeflow.config.get_settings``.
    """

    # Service identity
    service_name: str = "routeflow"
    environment: str = "development"
    debug: bool = False

    # Logging
    log_level: str = "INFO"
    log_json: bool = False

    # MongoDB
    mongodb_url: SecretStr = Field(
        default=SecretStr("mongodb://localhost:27017"), description="MongoDB connection URL"
    )
    mongodb_database: str = "routeflow"

    # Provider API keys (SecretStr prevents accidental logging)
    mistral_api_key: SecretStr = Field(default=SecretStr(""), description="Mistral AI API key")
    openai_api_key: SecretStr | None = None
    stability_api_key: SecretStr = Field(default=SecretStr(""), description="Stability AI API key")
    finnhub_api_key: SecretStr = Field(default=SecretStr(""), description="Finnhub API key")

    # Backends
    sandbox_url: str = Field(default="http://localhost:8787", description="Plugin sandbox runner URL")
    embedding_model: str = "mistral-embed"
    embedding_dimension: int = Field(1024, ge=1)
    stability_engine: str = "stable-diffusion-xl-1024-v1-0"

    # Resilience
    http_timeout: float = Field(30.0, gt=0)
    max_retries: int = Field(3, ge=0)
    retry_delay: float = Field(1.0, ge=0)
    sink_timeout: float = Field(5.0, gt=0)

    # Routing
    routing_table_path: str | None = Field(
        None, description="Path to a routing table YAML; bundled table when unset"
    )
