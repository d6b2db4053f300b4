"""
Retry and backoff for provider adapters.

The durable wrappers never retry; an adapter may retry inside a single
wrapped call, and only the final outcome is journaled.

Provides:
- BackoffStrategy: Delay calculation between retries
- RetryPolicy: How many retries, which errors, which delays
- with_retry: Run an async operation under a policy
"""

from __future__ import annotations

import asyncio
import logging
import random
from abc import ABC, abstractmethod
from dataclasses import dataclass, field
from typing import TYPE_CHECKING, TypeVar

from .errors import ErrorKind, ProviderError

if TYPE_CHECKING:
    from collections.abc import Awaitable, Callable

    from .config import RetrySettings

logger = logging.getLogger(__name__)

T = TypeVar("T")


# =============================================================================
# Backoff Strategies
# =============================================================================


class BackoffStrategy(ABC):
    """Abstract base for backoff delay calculation."""

    @abstractmethod
    def get_delay(self, attempt: int) -> float:
        """
        Calculate delay before the next attempt.

        Args:
            attempt: Retry number (1-indexed, first retry is attempt 1)

        Returns:
            Delay in seconds
        """
        ...


@dataclass
class NoBackoff(BackoffStrategy):
    """No delay between retries. Useful in tests."""

    def get_delay(self, attempt: int) -> float:
        return 0.0


@dataclass
class ConstantBackoff(BackoffStrategy):
    """Fixed delay between retries."""

    delay: float = 1.0

    def get_delay(self, attempt: int) -> float:
        return self.delay


@dataclass
class ExponentialBackoff(BackoffStrategy):
    """
    Exponentially increasing delay between retries.

    delay = base * (multiplier ^ (attempt - 1)), capped at max_delay,
    with optional jitter.

    Example:
        backoff = ExponentialBackoff(base=1.0, multiplier=2.0, max_delay=30.0)
        # Attempt 1: 1s, Attempt 2: 2s, Attempt 3: 4s, Attempt 4: 8s, ...
    """

    base: float = 1.0
    multiplier: float = 2.0
    max_delay: float = 60.0
    jitter: bool = False
    jitter_factor: float = 0.25  # +/- 25%

    def get_delay(self, attempt: int) -> float:
        delay = self.base * (self.multiplier ** (attempt - 1))
        delay = min(delay, self.max_delay)

        if self.jitter:
            jitter_range = delay * self.jitter_factor
            delay += random.uniform(-jitter_range, jitter_range)
            delay = max(0.0, delay)

        return delay


# =============================================================================
# Retry Policy
# =============================================================================


def _is_retryable(error: ProviderError) -> bool:
    return error.retryable


@dataclass
class RetryPolicy:
    """
    Configures retry behavior for an adapter operation.

    Example:
        policy = RetryPolicy(
            max_retries=3,
            backoff=ExponentialBackoff(base=1.0),
        )
    """

    max_retries: int = 0  # 0 = single attempt
    backoff: BackoffStrategy = field(default_factory=NoBackoff)
    retry_on: Callable[[ProviderError], bool] = _is_retryable
    honor_retry_after: bool = True

    @classmethod
    def from_settings(cls, settings: RetrySettings) -> RetryPolicy:
        return cls(
            max_retries=settings.max_retries,
            backoff=ExponentialBackoff(
                base=settings.initial_delay,
                multiplier=settings.multiplier,
                max_delay=settings.max_delay,
            ),
        )

    def should_retry(self, attempt: int, error: ProviderError) -> bool:
        """
        Determine if another attempt should be made.

        Args:
            attempt: Attempts made so far (1-indexed)
            error: Error that caused the failure
        """
        if attempt > self.max_retries:
            return False
        return self.retry_on(error)

    def get_delay(self, attempt: int, error: ProviderError | None = None) -> float:
        """Delay before retry number `attempt`, using Retry-After for 429s."""
        if (
            self.honor_retry_after
            and error is not None
            and error.kind == ErrorKind.RATE_LIMITED
            and error.retry_after is not None
        ):
            return float(error.retry_after)
        return self.backoff.get_delay(attempt)


NO_RETRY = RetryPolicy(max_retries=0)


async def with_retry(
    operation: Callable[[], Awaitable[T]],
    policy: RetryPolicy,
    operation_name: str = "operation",
) -> T:
    """
    Execute an async operation with retry logic.

    Only ProviderError failures are considered for retry; anything else
    propagates immediately. After the last attempt the final error is raised.

    Args:
        operation: Async callable to execute
        policy: Retry policy to apply
        operation_name: Name for logging

    Returns:
        The operation's result
    """
    attempt = 0

    while True:
        attempt += 1
        try:
            return await operation()
        except ProviderError as e:
            if not policy.should_retry(attempt, e):
                if attempt > 1:
                    logger.warning(
                        f"{operation_name}: Failed after {attempt} attempts, last error: {e}"
                    )
                raise

            delay = policy.get_delay(attempt, e)
            logger.info(
                f"{operation_name}: Attempt {attempt}/{policy.max_retries + 1} "
                f"failed with {e.kind.value}, retrying in {delay:.2f}s"
            )
            await asyncio.sleep(delay)


__all__ = [
    "BackoffStrategy",
    "ConstantBackoff",
    "ExponentialBackoff",
    "NO_RETRY",
    "NoBackoff",
    "RetryPolicy",
    "with_retry",
]
