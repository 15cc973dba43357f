"""
OpenAI LLM Provider for Routeflow.

Uses OpenAI's Chat Completions API with function calling. Registered as the
``openai`` gateway so function-call nodes can target it instead of Mistral.
"""

from __future__ import annotations

import logging
from typing import Any

from routeflow.errors import GatewayTimeoutError, GatewayUnavailableError

from .base import BaseLLMProvider, LLMConfig, LLMResponse, Message, ToolCall

logger = logging.getLogger(__name__)


class OpenAILLMProvider(BaseLLMProvider):
    """
    OpenAI-based LLM provider.

    Requirements:
    - openai package
    - ROUTEFLOW_OPENAI_API_KEY environment variable
    """

    def __init__(
        self,
        api_key: str,
        model: str = "gpt-4o-mini",
        organization: str | None = None,
        max_retries: int = 3,
        timeout: float = 30.0,
    ):
        """
        Initialize OpenAI LLM provider.

        Args:
            api_key: OpenAI API key
            model: Default model to use
            organization: Optional OpenAI organization ID
            max_retries: SDK-level retries for transient failures
            timeout: Request timeout in seconds
        """
        super().__init__(default_model=model)
        self._api_key = api_key
        self._organization = organization
        self._max_retries = max_retries
        self._timeout = timeout
        self._client = None  # Lazy initialization

    @property
    def name(self) -> str:
        return "openai"

    def _get_client(self):
        """Lazy initialization of OpenAI client."""
        if self._client is None:
            from openai import AsyncOpenAI

            self._client = AsyncOpenAI(
                api_key=self._api_key,
                organization=self._organization,
                max_retries=self._max_retries,
                timeout=self._timeout,
            )
        return self._client

    async def complete(
        self,
        messages: list[Message],
        config: LLMConfig | None = None,
        tools: list[dict[str, Any]] | None = None,
    ) -> LLMResponse:
        """
        Generate a completion using OpenAI.

        Raises:
            GatewayTimeoutError: Request timed out after SDK retries
            GatewayUnavailableError: Connection or 5xx failure after SDK retries
        """
        import openai

        if config is None:
            config = LLMConfig()

        client = self._get_client()

        params: dict[str, Any] = {
            "model": config.model or self.default_model,
            "messages": self._convert_messages(messages),
            "temperature": config.temperature,
            "max_tokens": config.max_tokens,
        }
        if tools:
            params["tools"] = tools
            params["tool_choice"] = "auto"

        try:
            response = await client.chat.completions.create(**params)
        except openai.APITimeoutError as e:
            raise GatewayTimeoutError(f"Request timeout: {e}", self.name) from e
        except openai.APIConnectionError as e:
            raise GatewayUnavailableError(f"Network error: {e}", self.name) from e
        except openai.InternalServerError as e:
            raise GatewayUnavailableError(
                f"Service unavailable: {e}", self.name, status_code=e.status_code
            ) from e

        choice = response.choices[0]
        tool_calls = [
            ToolCall.from_api(call.model_dump()) for call in (choice.message.tool_calls or [])
        ]

        usage = {}
        if response.usage:
            usage = {
                "input_tokens": response.usage.prompt_tokens,
                "output_tokens": response.usage.completion_tokens,
            }

        return LLMResponse(
            content=choice.message.content or "",
            model=response.model,
            usage=usage,
            finish_reason=choice.finish_reason or "stop",
            provider=self.name,
            tool_calls=tool_calls,
        )
