"""
Mistral AI API client.

Covers the two endpoints Routeflow needs:
- /v1/embeddings for semantic routing
- /v1/chat/completions (with tools) for function-calling nodes
"""

from __future__ import annotations

import logging
from typing import Any

import httpx

from routeflow.errors import IntegrationError

from .base import IntegrationClient, IntegrationConfig

logger = logging.getLogger(__name__)

MISTRAL_BASE_URL = "https://api.mistral.ai"


class MistralClient(IntegrationClient):
    """
    Async client for the Mistral AI REST API.

    Example:
        async with MistralClient(api_key="...") as client:
            vectors = await client.embed(["hello world"])
    """

    def __init__(
        self,
        api_key: str,
        *,
        base_url: str = MISTRAL_BASE_URL,
        timeout: float = 30.0,
        max_retries: int = 3,
        retry_delay: float = 1.0,
        transport: httpx.AsyncBaseTransport | None = None,
    ):
        super().__init__(
            IntegrationConfig(
                api_key=api_key,
                base_url=base_url,
                timeout=timeout,
                max_retries=max_retries,
                retry_delay=retry_delay,
            ),
            transport=transport,
        )

    @property
    def name(self) -> str:
        return "mistral"

    def _get_auth_headers(self) -> dict[str, str]:
        return {"Authorization": f"Bearer {self.config.api_key}"}

    async def embed(self, inputs: list[str], model: str = "mistral-embed") -> list[list[float]]:
        """
        Embed a batch of texts.

        Returns:
            One vector per input, in input order
        """
        response = await self._request(
            "POST",
            "/v1/embeddings",
            json={"model": model, "input": inputs},
        )
        data = response.json().get("data") or []
        if len(data) != len(inputs):
            raise IntegrationError(
                f"Expected {len(inputs)} embeddings, got {len(data)}",
                self.name,
                status_code=response.status_code,
            )
        ordered = sorted(data, key=lambda item: item.get("index", 0))
        return [item["embedding"] for item in ordered]

    async def chat(
        self,
        messages: list[dict[str, Any]],
        *,
        model: str,
        tools: list[dict[str, Any]] | None = None,
        temperature: float = 0.7,
        max_tokens: int = 1024,
    ) -> dict[str, Any]:
        """
        Create a chat completion.

        Returns:
            The raw completion payload
        """
        payload: dict[str, Any] = {
            "model": model,
            "messages": messages,
            "temperature": temperature,
            "max_tokens": max_tokens,
        }
        if tools:
            payload["tools"] = tools
            payload["tool_choice"] = "auto"

        response = await self._request("POST", "/v1/chat/completions", json=payload)
        return response.json()


__all__ = ["MISTRAL_BASE_URL", "MistralClient"]
