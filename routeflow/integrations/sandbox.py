"""
Plugin sandbox runner client.

Plugins are WebAssembly modules executed by an external sandbox runner.
Routeflow only needs its narrow contract:

    POST /invoke  {"plugin_id", "wasm_url", "input"}  ->  {"output": "..."}
"""

from __future__ import annotations

import logging
from typing import TYPE_CHECKING

import httpx

from routeflow.errors import IntegrationError

from .base import IntegrationClient, IntegrationConfig

if TYPE_CHECKING:
    from routeflow.models import Plugin

logger = logging.getLogger(__name__)


class SandboxClient(IntegrationClient):
    """
    HTTP client for the plugin sandbox runner.

    Implements the SandboxRuntime protocol.
    """

    def __init__(
        self,
        base_url: str,
        *,
        api_key: str | None = None,
        timeout: float = 30.0,
        max_retries: int = 2,
        retry_delay: float = 0.5,
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
        return "sandbox"

    def _get_auth_headers(self) -> dict[str, str]:
        if self.config.api_key:
            return {"Authorization": f"Bearer {self.config.api_key}"}
        return {}

    async def invoke(self, plugin: Plugin, input: str) -> str:
        """Run the plugin on ``input`` and return its textual output."""
        logger.info(f"[sandbox] Invoking plugin '{plugin.name}' ({len(input)} chars)")

        response = await self._request(
            "POST",
            "/invoke",
            json={
                "plugin_id": plugin.id,
                "wasm_url": plugin.wasm_url,
                "input": input,
            },
        )

        payload = response.json()
        if payload.get("error"):
            raise IntegrationError(
                f"Plugin '{plugin.name}' failed: {payload['error']}",
                self.name,
                status_code=response.status_code,
            )

        output = payload.get("output")
        if not isinstance(output, str):
            raise IntegrationError(
                f"Plugin '{plugin.name}' returned no textual output",
                self.name,
                status_code=response.status_code,
            )
        return output


__all__ = ["SandboxClient"]
