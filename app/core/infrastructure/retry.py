"""
Retry Pattern Implementation

Bounded retry with exponential backoff and jitter for transient failures of
outbound integrations (SMTP, calendar REST API).
"""

import asyncio
import logging
import random
from collections.abc import Awaitable, Callable
from dataclasses import dataclass
from typing import Any, TypeVar

logger = logging.getLogger(__name__)

T = TypeVar("T")


@dataclass(frozen=True)
class RetryConfig:
    """Configuration for retry behavior."""

    max_attempts: int = 3
    initial_delay: float = 0.5  # seconds
    max_delay: float = 10.0  # seconds
    exponential_base: float = 2.0
    jitter: bool = True
    retryable_exceptions: tuple[type[BaseException], ...] = (Exception,)

    def delay_for(self, attempt: int) -> float:
        """Delay to wait after the given (1-based) failed attempt."""
        delay = min(self.initial_delay * (self.exponential_base ** (attempt - 1)), self.max_delay)
        if self.jitter:
            delay += random.uniform(-delay * 0.1, delay * 0.1)
        return max(0.0, delay)


async def retry_async(
    func: Callable[..., Awaitable[T]],
    *args: Any,
    config: RetryConfig | None = None,
    operation: str | None = None,
    **kwargs: Any,
) -> T:
    """
    Call ``func`` until it succeeds or attempts run out.

    Exceptions outside ``retryable_exceptions`` propagate immediately; the
    last retryable exception propagates once attempts are exhausted.
    """
    config = config or RetryConfig()
    name = operation or getattr(func, "__name__", "operation")

    for attempt in range(1, config.max_attempts + 1):
        try:
            return await func(*args, **kwargs)
        except config.retryable_exceptions as e:
            if attempt >= config.max_attempts:
                logger.error(f"{name} failed after {attempt} attempts: {e}")
                raise
            delay = config.delay_for(attempt)
            logger.warning(f"{name} attempt {attempt}/{config.max_attempts} failed: {e}. Retrying in {delay:.2f}s")
            await asyncio.sleep(delay)

    raise RuntimeError(f"{name}: retry loop exited without result")
