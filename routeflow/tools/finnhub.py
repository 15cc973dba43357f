"""
Finnhub tools exposed to the model during financial analysis.
"""

from __future__ import annotations

import logging
from abc import abstractmethod
from typing import TYPE_CHECKING, Any

from routeflow.errors import IntegrationError

from .base import Tool, ToolResult
from .registry import ToolRegistry

if TYPE_CHECKING:
    from routeflow.integrations.finnhub import FinnhubClient

logger = logging.getLogger(__name__)

_SYMBOL_SCHEMA = {
    "type": "object",
    "properties": {
        "symbol": {
            "type": "string",
            "description": (
                "Ticker symbol, e.g. AAPL. For crypto use an exchange pair "
                "such as BINANCE:BTCUSDT."
            ),
        }
    },
    "required": ["symbol"],
}


class _FinnhubTool(Tool):
    def __init__(self, client: FinnhubClient):
        self._client = client

    @property
    def input_schema(self) -> dict[str, Any]:
        return _SYMBOL_SCHEMA

    async def execute(self, arguments: dict[str, Any]) -> ToolResult:
        symbol = str(arguments.get("symbol") or "").strip()
        if not symbol:
            return ToolResult.error("Missing required argument: symbol")

        try:
            data = await self._fetch(symbol)
        except IntegrationError as e:
            logger.warning(f"[{self.name}] Finnhub call failed for {symbol}: {e}")
            return ToolResult.error(f"Finnhub request failed: {e}")

        if not data:
            return ToolResult.error(f"No data found for symbol {symbol}")
        return ToolResult.from_data({"symbol": symbol.upper(), **data})

    @abstractmethod
    async def _fetch(self, symbol: str) -> dict[str, Any]:
        """Fetch the Finnhub payload for ``symbol``."""
        ...


class FinnhubQuoteTool(_FinnhubTool):
    """Latest price quote for a symbol."""

    @property
    def name(self) -> str:
        return "get_quote"

    @property
    def description(self) -> str:
        return (
            "Get the latest price quote for a stock or crypto symbol: current price (c), "
            "change (d), percent change (dp), high (h), low (l), open (o), previous close (pc)."
        )

    async def _fetch(self, symbol: str) -> dict[str, Any]:
        quote = await self._client.quote(symbol)
        # Finnhub answers unknown symbols with an all-zero quote
        if not quote or not any(quote.get(k) for k in ("c", "pc", "o")):
            return {}
        return quote


class FinnhubCompanyProfileTool(_FinnhubTool):
    """Company profile for a stock symbol."""

    @property
    def name(self) -> str:
        return "get_company_profile"

    @property
    def description(self) -> str:
        return (
            "Get the company profile for a stock symbol: name, country, exchange, "
            "industry, market capitalization and website."
        )

    async def _fetch(self, symbol: str) -> dict[str, Any]:
        return await self._client.company_profile(symbol)


def create_finnhub_tools(client: FinnhubClient) -> ToolRegistry:
    """Registry holding every Finnhub tool bound to ``client``."""
    registry = ToolRegistry()
    registry.register(FinnhubQuoteTool(client))
    registry.register(FinnhubCompanyProfileTool(client))
    return registry


__all__ = [
    "FinnhubCompanyProfileTool",
    "FinnhubQuoteTool",
    "create_finnhub_tools",
]
