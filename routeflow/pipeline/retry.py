"""
Retry Patterns for Routeflow.

Provides mechanisms for handling transient failures:
- RetryPolicy: Configurable retry behavior for an operation
- BackoffStrategy: Delay calculation between retries

Only transient backend failures (timeouts, network errors, 429, 5xx) are
retried. Configuration errors and node failures are surfaced immediately;
retrying a whole run is the caller's decision.
"""

from __future__ import annotations

import asyncio
import logging
import random
from abc import ABC, abstractmethod
from dataclasses import dataclass, field
from typing import TYPE_CHECKING, Any, TypeVar

if TYPE_CHECKING:
    from collections.abc import Awaitable, Callable

logger = logging.getLogger(__name__)

T = TypeVar("T")


# =============================================================================
# Backoff Strategies
# =============================================================================


class BackoffStrategy(ABC):
    """
    Abstract base for backoff delay calculation.

    Backoff strategies determine how long to wait between retry attempts.
    """

    @abstractmethod
    def get_delay(self, attempt: int) -> float:
        """
        Calculate delay before next retry attempt.

        Args:
            attempt: Current attempt number (1-indexed, first retry is attempt 1)

        Returns:
            Delay in seconds before next attempt
        """
        ...


@dataclass
class NoBackoff(BackoffStrategy):
    """No delay between retries. Use for tests and fail-fast paths."""

    def get_delay(self, attempt: int) -> float:
        return 0.0


@dataclass
class ExponentialBackoff(BackoffStrategy):
    """
    Exponentially increasing delay between retries.

    delay = base * (multiplier ^ (attempt - 1))

    With optional jitter to prevent thundering herd.

    Example:
        backoff = ExponentialBackoff(base=1.0, multiplier=2.0, max_delay=30.0)
        # Attempt 1: 1s, Attempt 2: 2s, Attempt 3: 4s, Attempt 4: 8s, ...
    """

    base: float = 1.0
    multiplier: float = 2.0
    max_delay: float = 60.0
    jitter: bool = True
    jitter_factor: float = 0.25  # +/- 25%

    def get_delay(self, attempt: int) -> float:
        delay = self.base * (self.multiplier ** (attempt - 1))
        delay = min(delay, self.max_delay)

        if self.jitter:
            jitter_range = delay * self.jitter_factor
            delay += random.uniform(-jitter_range, jitter_range)
            delay = max(0, delay)

        return delay


# =============================================================================
# Retry Policy
# =============================================================================


@dataclass
class RetryPolicy:
    """
    Configures retry behavior for an operation.

    Determines:
    - How many times to try
    - Which exceptions trigger retry
    - How long to wait between retries

    Example:
        policy = RetryPolicy(
            max_attempts=3,
            backoff=ExponentialBackoff(base=1.0),
            retry_on=(GatewayTimeoutError, GatewayUnavailableError),
        )
    """

    max_attempts: int = 1  # 1 = no retry (single attempt)
    backoff: BackoffStrategy = field(default_factory=NoBackoff)
    retry_on: tuple[type[Exception], ...] = (Exception,)
    retry_if: Callable[[Exception], bool] | None = None  # Extra predicate on the error
    delay_for: Callable[[Exception], float | None] | None = None  # Server-suggested delay
    max_delay: float | None = None  # Upper bound on a server-suggested delay

    def should_retry(self, attempt: int, error: Exception | None = None) -> bool:
        """
        Determine if retry should be attempted.

        Args:
            attempt: Current attempt number (1-indexed)
            error: Exception that caused failure (if any)

        Returns:
            True if should retry, False otherwise
        """
        if attempt >= self.max_attempts:
            return False

        if error is None or not isinstance(error, self.retry_on):
            return False

        if self.retry_if is not None:
            return self.retry_if(error)

        return True

    def get_delay(self, attempt: int, error: Exception | None = None) -> float:
        """Get delay before next retry attempt."""
        if error is not None and self.delay_for is not None:
            suggested = self.delay_for(error)
            if suggested is not None:
                if self.max_delay is not None:
                    return min(suggested, self.max_delay)
                return suggested
        return self.backoff.get_delay(attempt)


# =============================================================================
# Retry Executor
# =============================================================================


@dataclass
class RetryResult:
    """Result of a retry-wrapped operation."""

    success: bool
    result: Any = None
    attempts: int = 0
    total_delay: float = 0.0
    errors: list[Exception] = field(default_factory=list)

    @property
    def final_error(self) -> Exception | None:
        """Get the last error encountered."""
        return self.errors[-1] if self.errors else None

    def unwrap(self) -> Any:
        """Return the result, or raise the last error."""
        if self.success:
            return self.result
        if self.final_error is not None:
            raise self.final_error
        raise RuntimeError("Retry failed without error")


async def with_retry(
    operation: Callable[[], Awaitable[T]],
    policy: RetryPolicy,
    operation_name: str = "operation",
) -> RetryResult:
    """
    Execute an async operation with retry logic.

    Args:
        operation: Async callable to execute
        policy: Retry policy to apply
        operation_name: Name for logging

    Returns:
        RetryResult with success status and result/errors

    Example:
        result = await with_retry(
            lambda: client.embed(text),
            policy=RetryPolicy(max_attempts=3, backoff=ExponentialBackoff()),
            operation_name="embed",
        )
        vector = result.unwrap()
    """
    errors: list[Exception] = []
    total_delay = 0.0
    attempt = 0

    while True:
        attempt += 1

        try:
            result = await operation()
            return RetryResult(
                success=True,
                result=result,
                attempts=attempt,
                total_delay=total_delay,
                errors=errors,
            )

        except Exception as e:
            errors.append(e)

            if policy.should_retry(attempt, e):
                delay = policy.get_delay(attempt, e)
                total_delay += delay
                logger.warning(
                    f"{operation_name}: Attempt {attempt}/{policy.max_attempts} "
                    f"failed with {type(e).__name__}: {e}, "
                    f"retrying in {delay:.2f}s"
                )
                await asyncio.sleep(delay)
            else:
                if attempt > 1:
                    logger.error(
                        f"{operation_name}: Failed after {attempt} attempts, last error: {e}"
                    )
                return RetryResult(
                    success=False,
                    result=None,
                    attempts=attempt,
                    total_delay=total_delay,
                    errors=errors,
                )


__all__ = [
    "BackoffStrategy",
    "ExponentialBackoff",
    "NoBackoff",
    "RetryPolicy",
    "RetryResult",
    "with_retry",
]
