"""
Routeflow Providers

Swappable backends for embeddings, function-calling gateways, image
generation and plugin sandboxes, accessed through ProviderRegistry.
"""

from .backends import FunctionCallGateway, ImageGenerator, SandboxRuntime
from .embedding import EmbeddingProvider, MistralEmbeddingProvider
from .gateway import FunctionCallError, FunctionCallingGateway
from .llm import (
    LLMConfig,
    LLMProvider,
    LLMResponse,
    Message,
    MistralLLMProvider,
    OpenAILLMProvider,
    ToolCall,
)
from .registry import ProviderNotFoundError, ProviderRegistry

__all__ = [
    "EmbeddingProvider",
    "FunctionCallError",
    "FunctionCallGateway",
    "FunctionCallingGateway",
    "ImageGenerator",
    "LLMConfig",
    "LLMProvider",
    "LLMResponse",
    "Message",
    "MistralEmbeddingProvider",
    "MistralLLMProvider",
    "OpenAILLMProvider",
    "ProviderNotFoundError",
    "ProviderRegistry",
    "SandboxRuntime",
    "ToolCall",
]
