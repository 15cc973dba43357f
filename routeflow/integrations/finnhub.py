"""
Finnhub market data client.

Backs the tools exposed to the model during ``finnhub_function_call`` nodes.
"""

from __future__ import annotations

from typing import Any

import httpx

from .base import IntegrationClient, IntegrationConfig

FINNHUB_BASE_URL = "https://finnhub.io/api/v1"


class FinnhubClient(IntegrationClient):
    """Async client for the Finnhub REST API."""

    def __init__(
        self,
        api_key: str,
        *,
        base_url: str = FINNHUB_BASE_URL,
        timeout: float = 15.0,
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
        return "finnhub"

    def _get_auth_headers(self) -> dict[str, str]:
        return {"X-Finnhub-Token": self.config.api_key or ""}

    async def quote(self, symbol: str) -> dict[str, Any]:
        """
        Real-time quote.

        Keys: c (current), d (change), dp (percent change), h, l, o, pc, t
        """
        response = await self._request("GET", "/quote", params={"symbol": symbol.upper()})
        return response.json()

    async def company_profile(self, symbol: str) -> dict[str, Any]:
        """Company profile (name, exchange, industry, market cap, ...)."""
        response = await self._request(
            "GET", "/stock/profile2", params={"symbol": symbol.upper()}
        )
        return response.json()


__all__ = ["FINNHUB_BASE_URL", "FinnhubClient"]
