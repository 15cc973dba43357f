"""
LLM Providers for Routeflow.

- MistralLLMProvider: Mistral chat completions (default gateway)
- OpenAILLMProvider: OpenAI chat completions
"""

from .base import (
    BaseLLMProvider,
    LLMConfig,
    LLMProvider,
    LLMResponse,
    Message,
    MessageRole,
    ToolCall,
)
from .mistral import MistralLLMProvider
from .openai import OpenAILLMProvider

__all__ = [
    "BaseLLMProvider",
    "LLMConfig",
    "LLMProvider",
    "LLMResponse",
    "Message",
    "MessageRole",
    "MistralLLMProvider",
    "OpenAILLMProvider",
    "ToolCall",
]
