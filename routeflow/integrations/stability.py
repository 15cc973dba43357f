"""
Stability AI text-to-image client.

Returns generated images as ``data:image/png;base64,...`` URIs so a node's
output stays a plain string.
"""

from __future__ import annotations

import logging

import httpx

from routeflow.errors import IntegrationError

from .base import IntegrationClient, IntegrationConfig

logger = logging.getLogger(__name__)

STABILITY_BASE_URL = "https://api.stability.ai"


class StabilityClient(IntegrationClient):
    """
    Async client for Stability's v1 text-to-image generation endpoint.

    Implements the ImageGenerator protocol.
    """

    def __init__(
        self,
        api_key: str,
        *,
        engine: str = "stable-diffusion-xl-1024-v1-0",
        base_url: str = STABILITY_BASE_URL,
        timeout: float = 60.0,
        max_retries: int = 2,
        retry_delay: float = 1.0,
        width: int = 1024,
        height: int = 1024,
        steps: int = 30,
        cfg_scale: float = 7.0,
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
        self.engine = engine
        self.width = width
        self.height = height
        self.steps = steps
        self.cfg_scale = cfg_scale

    @property
    def name(self) -> str:
        return "stability"

    def _get_auth_headers(self) -> dict[str, str]:
        return {"Authorization": f"Bearer {self.config.api_key}"}

    async def generate(self, prompt: str) -> str:
        """
        Generate one image for the prompt.

        Returns:
            A data URI holding the base64 PNG
        """
        if not prompt.strip():
            raise ValueError("Image prompt must not be empty")

        response = await self._request(
            "POST",
            f"/v1/generation/{self.engine}/text-to-image",
            json={
                "text_prompts": [{"text": prompt}],
                "cfg_scale": self.cfg_scale,
                "width": self.width,
                "height": self.height,
                "steps": self.steps,
                "samples": 1,
            },
        )

        artifacts = response.json().get("artifacts") or []
        for artifact in artifacts:
            if artifact.get("finishReason", "SUCCESS") == "SUCCESS" and artifact.get("base64"):
                logger.info(f"[stability] Generated image (seed={artifact.get('seed')})")
                return f"data:image/png;base64,{artifact['base64']}"

        reasons = [a.get("finishReason") for a in artifacts]
        raise IntegrationError(
            f"No usable image returned (finish reasons: {reasons})",
            self.name,
            status_code=response.status_code,
        )


__all__ = ["STABILITY_BASE_URL", "StabilityClient"]
