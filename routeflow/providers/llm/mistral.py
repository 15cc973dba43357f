"""
Mistral LLM Provider for Routeflow.

Uses Mistral's chat completions API, including native function calling.
"""

from __future__ import annotations

import logging
from typing import TYPE_CHECKING, Any

from .base import BaseLLMProvider, LLMConfig, LLMResponse, Message, ToolCall

if TYPE_CHECKING:
    from routeflow.integrations.mistral import MistralClient

logger = logging.getLogger(__name__)


class MistralLLMProvider(BaseLLMProvider):
    """
    Mistral-based LLM provider.

    Shares its MistralClient (and so its HTTP pool and retry policy) with
    the embedding provider.
    """

    def __init__(self, client: MistralClient, model: str = "mistral-large-latest"):
        super().__init__(default_model=model)
        self._client = client

    @property
    def name(self) -> str:
        return "mistral"

    async def complete(
        self,
        messages: list[Message],
        config: LLMConfig | None = None,
        tools: list[dict[str, Any]] | None = None,
    ) -> LLMResponse:
        if config is None:
            config = LLMConfig()

        payload = await self._client.chat(
            self._convert_messages(messages),
            model=config.model or self.default_model,
            tools=tools,
            temperature=config.temperature,
            max_tokens=config.max_tokens,
        )

        choice = (payload.get("choices") or [{}])[0]
        message = choice.get("message") or {}
        tool_calls = [ToolCall.from_api(c) for c in message.get("tool_calls") or []]

        usage = {}
        if payload.get("usage"):
            usage = {
                "input_tokens": payload["usage"].get("prompt_tokens", 0),
                "output_tokens": payload["usage"].get("completion_tokens", 0),
            }

        return LLMResponse(
            content=message.get("content") or "",
            model=payload.get("model", config.model or self.default_model),
            usage=usage,
            finish_reason=choice.get("finish_reason") or "stop",
            provider=self.name,
            tool_calls=tool_calls,
        )
