"""
Error taxonomy for Routeflow.

Errors fall into three groups:

- Configuration errors (fatal, never retried): InvalidVectorError,
  UnresolvedFlowError, UnknownNodeTypeError, ConfigurationError
- Integration errors raised by HTTP backends. Those flagged ``retryable``
  (timeouts, network failures, 429, 5xx) are retried by the client before
  they surface.
- Run outcomes: NodeExecutionError (a node failed, chain aborted) and
  RunCancelled (caller asked to stop; not an error for logging purposes).
"""

from __future__ import annotations

from typing import Any


class RouteflowError(Exception):
    """Base exception for all Routeflow errors."""


# =============================================================================
# Configuration Errors
# =============================================================================


class ConfigurationError(RouteflowError):
    """Raised when routing table or settings are invalid."""


class InvalidVectorError(RouteflowError):
    """Raised when an embedding vector is empty, non-finite or mis-sized."""

    def __init__(self, message: str, *, expected_dimension: int | None = None, actual_dimension: int | None = None):
        super().__init__(message)
        self.expected_dimension = expected_dimension
        self.actual_dimension = actual_dimension


class UnresolvedFlowError(RouteflowError):
    """Raised when a route cannot be mapped to a Flow."""

    def __init__(self, route: str, message: str | None = None):
        self.route = route
        super().__init__(message or f"No flow could be resolved for route '{route}'")


class UnknownNodeTypeError(RouteflowError):
    """Raised when a node's type tag has no registered handler."""

    def __init__(self, node_type: str, node_name: str = ""):
        self.node_type = node_type
        self.node_name = node_name
        where = f" on node '{node_name}'" if node_name else ""
        super().__init__(f"Unknown node type '{node_type}'{where}")


# =============================================================================
# Store Errors
# =============================================================================


class DuplicateFlowError(RouteflowError):
    """Raised by a store when a flow with the same name already exists."""

    def __init__(self, name: str):
        self.name = name
        super().__init__(f"Flow '{name}' already exists")


class DuplicatePluginError(RouteflowError):
    """Raised by a store when a plugin with the same name already exists."""

    def __init__(self, name: str):
        self.name = name
        super().__init__(f"Plugin '{name}' already exists")


# =============================================================================
# Integration Errors
# =============================================================================


class IntegrationError(RouteflowError):
    """Base exception for errors raised by external backends."""

    def __init__(
        self,
        message: str,
        integration: str,
        *,
        status_code: int | None = None,
        response_body: str | None = None,
        retryable: bool = False,
    ):
        super().__init__(message)
        self.integration = integration
        self.status_code = status_code
        self.response_body = response_body
        self.retryable = retryable

    def __str__(self) -> str:
        parts = [f"[{self.integration}] {self.args[0]}"]
        if self.status_code:
            parts.append(f"(status={self.status_code})")
        return " ".join(parts)


class GatewayTimeoutError(IntegrationError):
    """Raised when a backend call times out."""

    def __init__(self, message: str, integration: str, **kwargs: Any):
        super().__init__(message, integration, retryable=True, **kwargs)


class GatewayUnavailableError(IntegrationError):
    """Raised on network failures and 5xx responses."""

    def __init__(self, message: str, integration: str, **kwargs: Any):
        super().__init__(message, integration, retryable=True, **kwargs)


class RateLimitError(IntegrationError):
    """Raised when rate limit is exceeded (429)."""

    def __init__(
        self,
        message: str,
        integration: str,
        *,
        retry_after: float | None = None,
        **kwargs: Any,
    ):
        super().__init__(message, integration, retryable=True, **kwargs)
        self.retry_after = retry_after


class AuthenticationError(IntegrationError):
    """Raised when authentication fails (401/403)."""

    def __init__(self, message: str, integration: str, **kwargs: Any):
        super().__init__(message, integration, retryable=False, **kwargs)


class NotFoundError(IntegrationError):
    """Raised when a resource is not found (404)."""

    def __init__(self, message: str, integration: str, **kwargs: Any):
        super().__init__(message, integration, retryable=False, **kwargs)


class IntegrationValidationError(IntegrationError):
    """Raised when request validation fails (400/422)."""

    def __init__(self, message: str, integration: str, **kwargs: Any):
        super().__init__(message, integration, retryable=False, **kwargs)


# =============================================================================
# Run Outcomes
# =============================================================================


class NodeExecutionError(RouteflowError):
    """
    Raised when a node fails during pipeline execution.

    The remaining nodes are not run. ``partial_output`` holds whatever was
    aggregated before the failure and is for diagnostics only.
    """

    def __init__(
        self,
        node_name: str,
        node_type: str,
        cause: BaseException,
        *,
        partial_output: str = "",
        flow_name: str = "",
    ):
        self.node_name = node_name
        self.node_type = node_type
        self.cause = cause
        self.partial_output = partial_output
        self.flow_name = flow_name
        super().__init__(
            f"Node '{node_name}' ({node_type}) in flow '{flow_name}' failed: "
            f"{type(cause).__name__}: {cause}"
        )


class RunCancelled(RouteflowError):
    """Raised when a run is cancelled before it completes."""

    def __init__(self, run_id: str = "", stage: str = ""):
        self.run_id = run_id
        self.stage = stage
        super().__init__(f"Run {run_id or '?'} cancelled at {stage or 'unknown stage'}")


TRANSIENT_ERRORS: tuple[type[Exception], ...] = (
    GatewayTimeoutError,
    GatewayUnavailableError,
    RateLimitError,
)


__all__ = [
    "TRANSIENT_ERRORS",
    "AuthenticationError",
    "ConfigurationError",
    "DuplicateFlowError",
    "DuplicatePluginError",
    "GatewayTimeoutError",
    "GatewayUnavailableError",
    "IntegrationError",
    "IntegrationValidationError",
    "InvalidVectorError",
    "NodeExecutionError",
    "NotFoundError",
    "RateLimitError",
    "RouteflowError",
    "RunCancelled",
    "UnknownNodeTypeError",
    "UnresolvedFlowError",
]
