"""When to retry a Notion request and how long to wait.

Rate limits (``429``), gateway and server errors (``5xx``) and transport
failures are transient; every other outcome is final.  The wait grows
exponentially from ``base_delay`` up to ``max_delay`` unless the server
sent ``Retry-After``.
"""

from __future__ import annotations

import random
from dataclasses import dataclass

import httpx

from notionsource.config import NotionSourceConfig

RETRYABLE_STATUSES: frozenset[int] = frozenset({429, 500, 502, 503, 504})

RETRYABLE_EXCEPTIONS: tuple[type[Exception], ...] = (
    httpx.TimeoutException,
    httpx.NetworkError,
)


@dataclass(frozen=True)
class RetryPolicy:
    """Retry budget and backoff curve for one transport.

    Attributes
    ----------
    max_attempts:
        Total attempts per request, the first one included.
    base_delay:
        Delay in seconds after the first failed attempt.
    max_delay:
        Cap on the exponential delay.
    jitter:
        Scale each delay to a random 50-100 % of its value.
    """

    max_attempts: int = 3
    base_delay: float = 1.0
    max_delay: float = 30.0
    jitter: bool = True

    @classmethod
    def from_config(cls, config: NotionSourceConfig) -> RetryPolicy:
        return cls(
            max_attempts=config.retry_max_attempts,
            base_delay=config.retry_base_delay,
            max_delay=config.retry_max_delay,
            jitter=config.retry_jitter,
        )

    def should_retry(
        self,
        attempt: int,
        *,
        status_code: int | None = None,
        exception: Exception | None = None,
    ) -> bool:
        """Whether attempt number *attempt* (0-based) may be followed by another.

        Pass the response status, or the exception raised when no response
        arrived.
        """
        if attempt + 1 >= self.max_attempts:
            return False
        if exception is not None:
            return isinstance(exception, RETRYABLE_EXCEPTIONS)
        return status_code in RETRYABLE_STATUSES

    def delay(self, attempt: int, retry_after: float | None = None) -> float:
        """Seconds to sleep after failed attempt number *attempt*."""
        if retry_after is not None:
            return retry_after
        wait = min(self.base_delay * 2**attempt, self.max_delay)
        if self.jitter:
            wait *= random.uniform(0.5, 1.0)
        return wait
