"""Retry configuration and logic for filesystem operations on a synced drive."""

import asyncio
import functools
import logging
from collections.abc import Awaitable, Callable
from dataclasses import dataclass, field
from typing import Optional, TypeVar

from vaultkeeper.core.errors import TRANSIENT_LOCK_ERRNOS, is_transient_lock_error

logger = logging.getLogger(__name__)

T = TypeVar("T")


@dataclass(frozen=True)
class RetryConfig:
    """Configuration for retry behavior.

    Attributes:
        delays: Backoff schedule in seconds; one retry per entry.
        retryable_errnos: OSError codes treated as transient locks.
    """

    delays: tuple[float, ...] = (0.2, 0.4, 0.8, 1.6)
    retryable_errnos: frozenset[int] = field(default_factory=lambda: TRANSIENT_LOCK_ERRNOS)

    @property
    def max_attempts(self) -> int:
        return len(self.delays) + 1

    @classmethod
    def from_milliseconds(cls, delays_ms: list[int] | tuple[int, ...]) -> "RetryConfig":
        """Build a config from a schedule expressed in milliseconds."""
        return cls(delays=tuple(delay / 1000.0 for delay in delays_ms))


async def with_retry(
    operation: Callable[[], Awaitable[T]],
    config: Optional[RetryConfig] = None,
    is_retryable: Optional[Callable[[BaseException], bool]] = None,
) -> T:
    """
    Execute an operation, retrying transient lock errors with backoff.

    Args:
        operation: Async callable to execute
        config: Retry configuration
        is_retryable: Predicate deciding whether an error is worth retrying.
                      Defaults to an OSError code check against the config.

    Returns:
        Result of the operation

    Raises:
        The original exception, immediately for non-retryable errors or
        once the schedule is exhausted.
    """
    config = config or RetryConfig()
    if is_retryable is None:
        def is_retryable(error: BaseException) -> bool:
            return is_transient_lock_error(error, config.retryable_errnos)

    attempt = 0
    while True:
        try:
            return await operation()
        except Exception as e:
            if not is_retryable(e):
                raise
            if attempt >= len(config.delays):
                logger.error(f"All {attempt + 1} attempts failed. Last error: {e}")
                raise

            delay = config.delays[attempt]
            logger.warning(f"Attempt {attempt + 1} failed: {e}. Retrying in {delay:.1f}s...")
            await asyncio.sleep(delay)
            attempt += 1


def retryable(
    config: Optional[RetryConfig] = None,
    is_retryable: Optional[Callable[[BaseException], bool]] = None,
):
    """Decorator form of with_retry for async functions."""

    def decorator(func: Callable[..., Awaitable[T]]) -> Callable[..., Awaitable[T]]:
        @functools.wraps(func)
        async def wrapper(*args, **kwargs) -> T:
            return await with_retry(lambda: func(*args, **kwargs), config, is_retryable)

        return wrapper

    return decorator
