"""
Tests for Routeflow retry patterns.
"""
import time

import pytest

from routeflow.errors import (
    AuthenticationError,
    GatewayTimeoutError,
    GatewayUnavailableError,
    RateLimitError,
)
from routeflow.integrations.base import IntegrationConfig
from routeflow.pipeline.retry import (
    ExponentialBackoff,
    NoBackoff,
    RetryPolicy,
    RetryResult,
    with_retry,
)


# =============================================================================
# Backoff Strategy Tests
# =============================================================================


class TestNoBackoff:
    """Tests for NoBackoff strategy."""

    def test_always_returns_zero(self):
        backoff = NoBackoff()
        assert backoff.get_delay(1) == 0.0
        assert backoff.get_delay(5) == 0.0
        assert backoff.get_delay(100) == 0.0


class TestExponentialBackoff:
    """Tests for ExponentialBackoff strategy."""

    def test_increases_exponentially(self):
        backoff = ExponentialBackoff(base=1.0, multiplier=2.0, jitter=False)
        assert backoff.get_delay(1) == 1.0
        assert backoff.get_delay(2) == 2.0
        assert backoff.get_delay(3) == 4.0
        assert backoff.get_delay(4) == 8.0

    def test_respects_max_delay(self):
        backoff = ExponentialBackoff(base=1.0, multiplier=10.0, max_delay=5.0, jitter=False)
        assert backoff.get_delay(1) == 1.0
        assert backoff.get_delay(2) == 5.0
        assert backoff.get_delay(3) == 5.0

    def test_jitter_adds_randomness(self):
        backoff = ExponentialBackoff(base=10.0, multiplier=1.0, jitter=True)
        delays = [backoff.get_delay(1) for _ in range(100)]

        assert len(set(delays)) > 1
        assert all(7.5 <= d <= 12.5 for d in delays)

    def test_zero_base_never_sleeps(self):
        backoff = ExponentialBackoff(base=0.0)
        assert backoff.get_delay(3) == 0.0


# =============================================================================
# Retry Policy Tests
# =============================================================================


class TestRetryPolicy:
    """Tests for RetryPolicy."""

    def test_no_retry_by_default(self):
        policy = RetryPolicy()
        assert policy.max_attempts == 1
        assert policy.should_retry(1, RuntimeError()) is False

    def test_should_retry_within_max_attempts(self):
        policy = RetryPolicy(max_attempts=3, retry_on=(RuntimeError,))
        assert policy.should_retry(1, RuntimeError()) is True
        assert policy.should_retry(2, RuntimeError()) is True
        assert policy.should_retry(3, RuntimeError()) is False

    def test_should_retry_checks_exception_type(self):
        policy = RetryPolicy(max_attempts=3, retry_on=(ConnectionError,))
        assert policy.should_retry(1, ConnectionError()) is True
        assert policy.should_retry(1, RuntimeError()) is False

    def test_retry_if_predicate(self):
        policy = RetryPolicy(
            max_attempts=3,
            retry_on=(Exception,),
            retry_if=lambda e: "transient" in str(e),
        )
        assert policy.should_retry(1, RuntimeError("transient glitch")) is True
        assert policy.should_retry(1, RuntimeError("bad config")) is False

    def test_get_delay_uses_backoff(self):
        policy = RetryPolicy(backoff=ExponentialBackoff(base=2.0, jitter=False))
        assert policy.get_delay(1) == 2.0
        assert policy.get_delay(2) == 4.0

    def test_get_delay_prefers_suggested_delay(self):
        policy = RetryPolicy(
            backoff=ExponentialBackoff(base=2.0, jitter=False),
            delay_for=lambda e: getattr(e, "retry_after", None),
        )
        assert policy.get_delay(1, RateLimitError("slow down", "x", retry_after=7.0)) == 7.0
        assert policy.get_delay(1, RateLimitError("slow down", "x")) == 2.0

    def test_suggested_delay_is_capped(self):
        policy = RetryPolicy(
            backoff=NoBackoff(),
            delay_for=lambda e: getattr(e, "retry_after", None),
            max_delay=30.0,
        )
        assert policy.get_delay(1, RateLimitError("slow down", "x", retry_after=86400.0)) == 30.0
        assert policy.get_delay(1, RateLimitError("slow down", "x", retry_after=5.0)) == 5.0


class TestIntegrationRetryPolicy:
    """The policy integrations derive from their config."""

    def test_attempts_are_retries_plus_one(self):
        policy = IntegrationConfig(max_retries=2).retry_policy()
        assert policy.max_attempts == 3

    def test_retries_only_retryable_integration_errors(self):
        policy = IntegrationConfig(max_retries=3).retry_policy()

        assert policy.should_retry(1, GatewayTimeoutError("t", "x")) is True
        assert policy.should_retry(1, GatewayUnavailableError("u", "x")) is True
        assert policy.should_retry(1, RateLimitError("r", "x")) is True
        assert policy.should_retry(1, AuthenticationError("a", "x")) is False
        assert policy.should_retry(1, ValueError("v")) is False

    def test_retry_after_is_bounded(self):
        policy = IntegrationConfig(max_retry_delay=20.0).retry_policy()

        delay = policy.get_delay(1, RateLimitError("r", "x", retry_after=86400.0))

        assert delay == 20.0
        assert policy.get_delay(1, RateLimitError("r", "x", retry_after=3.0)) == 3.0


# =============================================================================
# with_retry Tests
# =============================================================================


class TestWithRetry:
    """Tests for with_retry function."""

    @pytest.mark.asyncio
    async def test_succeeds_on_first_attempt(self):
        call_count = 0

        async def operation():
            nonlocal call_count
            call_count += 1
            return "success"

        result = await with_retry(operation, RetryPolicy(max_attempts=3), operation_name="test")

        assert result.success is True
        assert result.result == "success"
        assert result.attempts == 1
        assert call_count == 1

    @pytest.mark.asyncio
    async def test_retries_on_failure(self):
        call_count = 0

        async def operation():
            nonlocal call_count
            call_count += 1
            if call_count < 3:
                raise ConnectionError("Simulated failure")
            return "success"

        result = await with_retry(
            operation,
            RetryPolicy(max_attempts=5, backoff=NoBackoff()),
            operation_name="test",
        )

        assert result.success is True
        assert result.attempts == 3
        assert len(result.errors) == 2

    @pytest.mark.asyncio
    async def test_fails_after_max_attempts(self):
        call_count = 0

        async def operation():
            nonlocal call_count
            call_count += 1
            raise RuntimeError("Always fails")

        result = await with_retry(
            operation,
            RetryPolicy(max_attempts=3, backoff=NoBackoff()),
            operation_name="test",
        )

        assert result.success is False
        assert result.result is None
        assert result.attempts == 3
        assert call_count == 3
        assert isinstance(result.final_error, RuntimeError)

    @pytest.mark.asyncio
    async def test_respects_retry_on_filter(self):
        call_count = 0

        async def operation():
            nonlocal call_count
            call_count += 1
            if call_count == 1:
                raise ConnectionError("Retryable")
            raise RuntimeError("Not retryable")

        result = await with_retry(
            operation,
            RetryPolicy(max_attempts=5, retry_on=(ConnectionError,), backoff=NoBackoff()),
            operation_name="test",
        )

        assert result.success is False
        assert result.attempts == 2

    @pytest.mark.asyncio
    async def test_applies_backoff_delay(self):
        call_count = 0

        async def operation():
            nonlocal call_count
            call_count += 1
            if call_count < 2:
                raise RuntimeError("Fail once")
            return "success"

        start = time.perf_counter()
        result = await with_retry(
            operation,
            RetryPolicy(max_attempts=3, backoff=ExponentialBackoff(base=0.1, jitter=False)),
            operation_name="test",
        )
        elapsed = time.perf_counter() - start

        assert result.success is True
        assert elapsed >= 0.1
        assert result.total_delay == pytest.approx(0.1)


class TestRetryResult:
    def test_unwrap_returns_result(self):
        assert RetryResult(success=True, result=42).unwrap() == 42

    def test_unwrap_raises_last_error(self):
        result = RetryResult(success=False, errors=[ValueError("first"), KeyError("last")])
        with pytest.raises(KeyError):
            result.unwrap()

    def test_unwrap_without_errors(self):
        with pytest.raises(RuntimeError):
            RetryResult(success=False).unwrap()
