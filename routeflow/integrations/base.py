"""
Base classes for Routeflow integrations.

Every external backend (embedding provider, model gateway, image API,
plugin sandbox, market data) is reached through an IntegrationClient so
that HTTP handling, error mapping and retries stay consistent.

Retry Strategy:
    - Retryable errors: timeouts, network errors, 429, 5xx
    - Non-retryable: 4xx (except 429), auth errors
    - Backoff: exponential with jitter, or Retry-After when the server sends it
"""

from __future__ import annotations

import logging
from abc import ABC, abstractmethod
from dataclasses import dataclass
from typing import Any

import httpx

from routeflow.errors import (
    AuthenticationError,
    GatewayTimeoutError,
    GatewayUnavailableError,
    IntegrationError,
    IntegrationValidationError,
    NotFoundError,
    RateLimitError,
)
from routeflow.pipeline.retry import ExponentialBackoff, RetryPolicy, with_retry

logger = logging.getLogger(__name__)


# =============================================================================
# Configuration
# =============================================================================


@dataclass(frozen=True, slots=True)
class IntegrationConfig:
    """Configuration for an integration client."""

    # Authentication
    api_key: str | None = None

    # Connection
    base_url: str = ""
    timeout: float = 30.0

    # Retries
    max_retries: int = 3
    retry_delay: float = 1.0
    max_retry_delay: float = 60.0

    # Observability
    log_requests: bool = False
    log_responses: bool = False

    def retry_policy(self) -> RetryPolicy:
        """Retry policy for transient failures of this integration."""
        return RetryPolicy(
            max_attempts=self.max_retries + 1,
            backoff=ExponentialBackoff(
                base=self.retry_delay, multiplier=2.0, max_delay=self.max_retry_delay
            ),
            retry_on=(IntegrationError,),
            retry_if=lambda e: getattr(e, "retryable", False),
            delay_for=lambda e: getattr(e, "retry_after", None),
            max_delay=self.max_retry_delay,
        )


# =============================================================================
# Base Client
# =============================================================================


class IntegrationClient(ABC):
    """
    Abstract base class for integration clients.

    Provides common functionality:
    - HTTP client management
    - Authentication header injection
    - Error handling and mapping
    - Request/response logging
    - Retry of transient failures

    Subclasses must implement:
    - name: Integration identifier
    - _get_auth_headers(): Return authentication headers
    """

    def __init__(
        self,
        config: IntegrationConfig,
        *,
        transport: httpx.AsyncBaseTransport | None = None,
    ):
        """
        Initialize the integration client.

        Args:
            config: Integration configuration
            transport: Optional httpx transport (tests pass httpx.MockTransport)
        """
        self.config = config
        self._transport = transport
        self._client: httpx.AsyncClient | None = None
        self._retry_policy = config.retry_policy()

    @property
    @abstractmethod
    def name(self) -> str:
        """Unique name for this integration."""
        ...

    @abstractmethod
    def _get_auth_headers(self) -> dict[str, str]:
        """Return authentication headers for requests."""
        ...

    async def _get_client(self) -> httpx.AsyncClient:
        """Get or create the HTTP client."""
        if self._client is None or self._client.is_closed:
            self._client = httpx.AsyncClient(
                base_url=self.config.base_url,
                timeout=self.config.timeout,
                transport=self._transport,
                headers={
                    "Content-Type": "application/json",
                    "Accept": "application/json",
                    **self._get_auth_headers(),
                },
            )
        return self._client

    async def close(self) -> None:
        """Close the HTTP client."""
        if self._client and not self._client.is_closed:
            await self._client.aclose()
            self._client = None

    async def _request(
        self,
        method: str,
        path: str,
        *,
        params: dict[str, Any] | None = None,
        json: dict[str, Any] | None = None,
        headers: dict[str, str] | None = None,
    ) -> httpx.Response:
        """
        Make an HTTP request, retrying transient failures.

        Raises:
            IntegrationError: On any non-retryable error or after max retries
        """
        result = await with_retry(
            lambda: self._do_request(method, path, params=params, json=json, headers=headers),
            self._retry_policy,
            operation_name=f"[{self.name}] {method} {path}",
        )
        return result.unwrap()

    async def _do_request(
        self,
        method: str,
        path: str,
        *,
        params: dict[str, Any] | None = None,
        json: dict[str, Any] | None = None,
        headers: dict[str, str] | None = None,
    ) -> httpx.Response:
        """Execute a single HTTP request."""
        client = await self._get_client()

        if self.config.log_requests:
            logger.debug(f"[{self.name}] {method} {path} params={params} body={json}")

        try:
            response = await client.request(
                method=method,
                url=path,
                params=params,
                json=json,
                headers=headers,
            )
        except httpx.TimeoutException as e:
            raise GatewayTimeoutError(f"Request timeout: {e}", self.name) from e
        except httpx.TransportError as e:
            raise GatewayUnavailableError(f"Network error: {e}", self.name) from e

        if self.config.log_responses:
            logger.debug(
                f"[{self.name}] Response: status={response.status_code} "
                f"body={response.text[:500] if response.text else 'empty'}"
            )

        self._check_response(response)
        return response

    def _check_response(self, response: httpx.Response) -> None:
        """
        Check response for errors and raise appropriate exceptions.

        Raises:
            AuthenticationError: For 401/403
            RateLimitError: For 429
            NotFoundError: For 404
            IntegrationValidationError: For 400/422
            GatewayTimeoutError: For 504
            GatewayUnavailableError: For other 5xx
            IntegrationError: For other errors
        """
        if response.is_success:
            return

        status = response.status_code
        body = response.text

        if status in (401, 403):
            raise AuthenticationError(
                f"Authentication failed: {body}",
                self.name,
                status_code=status,
                response_body=body,
            )

        if status == 429:
            retry_after = response.headers.get("Retry-After")
            raise RateLimitError(
                "Rate limit exceeded",
                self.name,
                status_code=status,
                response_body=body,
                retry_after=_parse_retry_after(retry_after),
            )

        if status == 404:
            raise NotFoundError(
                f"Resource not found: {body}",
                self.name,
                status_code=status,
                response_body=body,
            )

        if status in (400, 422):
            raise IntegrationValidationError(
                f"Validation error: {body}",
                self.name,
                status_code=status,
                response_body=body,
            )

        if status == 504:
            raise GatewayTimeoutError(
                f"Upstream timeout: {body}",
                self.name,
                status_code=status,
                response_body=body,
            )

        if status >= 500:
            raise GatewayUnavailableError(
                f"Service unavailable: {body}",
                self.name,
                status_code=status,
                response_body=body,
            )

        raise IntegrationError(
            f"Request failed: {body}",
            self.name,
            status_code=status,
            response_body=body,
        )

    async def __aenter__(self) -> IntegrationClient:
        return self

    async def __aexit__(self, exc_type, exc_val, exc_tb) -> None:
        await self.close()

    def __repr__(self) -> str:
        return f"{self.__class__.__name__}(name='{self.name}', base_url='{self.config.base_url}')"


def _parse_retry_after(value: str | None) -> float | None:
    if not value:
        return None
    try:
        return max(0.0, float(value))
    except ValueError:
        return None


__all__ = [
    "IntegrationClient",
    "IntegrationConfig",
]
