"""
Tests for retry and backoff.
"""

from unittest.mock import AsyncMock, patch

import pytest

from durable_ai.config import RetrySettings
from durable_ai.errors import ErrorKind, ProviderError, rate_limited
from durable_ai.retry import (
    NO_RETRY,
    ConstantBackoff,
    ExponentialBackoff,
    NoBackoff,
    RetryPolicy,
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
        assert backoff.get_delay(100) == 0.0


class TestConstantBackoff:
    """Tests for ConstantBackoff strategy."""

    def test_returns_constant_delay(self):
        backoff = ConstantBackoff(delay=2.5)
        assert backoff.get_delay(1) == 2.5
        assert backoff.get_delay(5) == 2.5


class TestExponentialBackoff:
    """Tests for ExponentialBackoff strategy."""

    def test_doubles(self):
        backoff = ExponentialBackoff(base=1.0, multiplier=2.0, max_delay=100.0)
        assert [backoff.get_delay(n) for n in (1, 2, 3, 4)] == [1.0, 2.0, 4.0, 8.0]

    def test_capped(self):
        backoff = ExponentialBackoff(base=1.0, multiplier=10.0, max_delay=30.0)
        assert backoff.get_delay(5) == 30.0

    def test_jitter_stays_in_range(self):
        backoff = ExponentialBackoff(base=4.0, jitter=True, jitter_factor=0.25)
        for _ in range(20):
            assert 3.0 <= backoff.get_delay(1) <= 5.0


# =============================================================================
# Retry Policy Tests
# =============================================================================


class TestRetryPolicy:
    """Tests for RetryPolicy decisions."""

    def test_no_retry_policy(self):
        assert not NO_RETRY.should_retry(1, rate_limited(1))

    def test_retries_retryable_errors_only(self):
        policy = RetryPolicy(max_retries=2)
        assert policy.should_retry(1, ProviderError(ErrorKind.TIMEOUT, "slow"))
        assert not policy.should_retry(1, ProviderError(ErrorKind.UNAUTHORIZED, "no"))

    def test_stops_after_max_retries(self):
        policy = RetryPolicy(max_retries=2)
        error = ProviderError(ErrorKind.TIMEOUT, "slow")
        assert policy.should_retry(2, error)
        assert not policy.should_retry(3, error)

    def test_retry_after_overrides_backoff(self):
        policy = RetryPolicy(max_retries=1, backoff=ConstantBackoff(delay=1.0))
        assert policy.get_delay(1, rate_limited(7)) == 7.0
        assert policy.get_delay(1, ProviderError(ErrorKind.TIMEOUT)) == 1.0

    def test_retry_after_can_be_ignored(self):
        policy = RetryPolicy(max_retries=1, backoff=NoBackoff(), honor_retry_after=False)
        assert policy.get_delay(1, rate_limited(7)) == 0.0

    def test_from_settings(self):
        policy = RetryPolicy.from_settings(
            RetrySettings(max_retries=4, initial_delay=0.5, multiplier=3.0, max_delay=9.0)
        )
        assert policy.max_retries == 4
        assert policy.backoff.get_delay(1) == 0.5
        assert policy.backoff.get_delay(2) == 1.5
        assert policy.backoff.get_delay(5) == 9.0


# =============================================================================
# with_retry Tests
# =============================================================================


class TestWithRetry:
    """Tests for the with_retry helper."""

    @pytest.mark.asyncio
    async def test_success_first_try(self):
        operation = AsyncMock(return_value="ok")
        assert await with_retry(operation, RetryPolicy(max_retries=3)) == "ok"
        assert operation.call_count == 1

    @pytest.mark.asyncio
    async def test_retries_then_succeeds(self):
        operation = AsyncMock(
            side_effect=[ProviderError(ErrorKind.SERVICE_UNAVAILABLE, "down"), "ok"]
        )
        result = await with_retry(operation, RetryPolicy(max_retries=3, backoff=NoBackoff()))
        assert result == "ok"
        assert operation.call_count == 2

    @pytest.mark.asyncio
    async def test_final_error_raised(self):
        error = ProviderError(ErrorKind.TIMEOUT, "slow")
        operation = AsyncMock(side_effect=error)

        with pytest.raises(ProviderError) as exc_info:
            await with_retry(operation, RetryPolicy(max_retries=2, backoff=NoBackoff()))

        assert exc_info.value is error
        assert operation.call_count == 3

    @pytest.mark.asyncio
    async def test_non_retryable_not_retried(self):
        operation = AsyncMock(side_effect=ProviderError(ErrorKind.FORBIDDEN, "no"))

        with pytest.raises(ProviderError):
            await with_retry(operation, RetryPolicy(max_retries=5, backoff=NoBackoff()))

        assert operation.call_count == 1

    @pytest.mark.asyncio
    async def test_other_exceptions_propagate(self):
        operation = AsyncMock(side_effect=ValueError("bug"))

        with pytest.raises(ValueError):
            await with_retry(operation, RetryPolicy(max_retries=5))

        assert operation.call_count == 1

    @pytest.mark.asyncio
    async def test_sleeps_retry_after(self):
        operation = AsyncMock(side_effect=[rate_limited(7), "ok"])

        with patch("durable_ai.retry.asyncio.sleep", new=AsyncMock()) as sleep:
            await with_retry(operation, RetryPolicy(max_retries=1))

        sleep.assert_awaited_once_with(7.0)
