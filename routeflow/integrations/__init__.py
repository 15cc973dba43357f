"""
Routeflow Integrations

HTTP clients for the external backends a run talks to.

Available Integrations:
- MistralClient: embeddings and chat completions with tools
- StabilityClient: text-to-image generation
- FinnhubClient: market quotes and company profiles
- SandboxClient: plugin sandbox runner
"""

from .base import IntegrationClient, IntegrationConfig
from .finnhub import FinnhubClient
from .mistral import MistralClient
from .sandbox import SandboxClient
from .stability import StabilityClient

__all__ = [
    "FinnhubClient",
    "IntegrationClient",
    "IntegrationConfig",
    "MistralClient",
    "SandboxClient",
    "StabilityClient",
]
