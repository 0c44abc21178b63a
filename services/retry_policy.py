"""
Retry policy for remote catalog calls.

Only CatalogRemoteError (5xx, 429, transport failures) is retried. A 404 is an
answer, not a failure, and is never retried.
"""

from dataclasses import dataclass
from typing import Any, Callable
import time
import structlog

from config.settings import settings
from exceptions import CatalogRemoteError

logger = structlog.get_logger(__name__)


@dataclass(frozen=True)
class RetryPolicy:
    """
    Attempts and exponential backoff for one catalog call.

    max_attempts=1 means a single try with no retry.
    """
    max_attempts: int = 1
    backoff_seconds: float = 0.5
    backoff_multiplier: float = 2.0

    def __post_init__(self):
        if self.max_attempts < 1:
            raise ValueError("max_attempts must be at least 1")

    @classmethod
    def from_settings(cls) -> "RetryPolicy":
        return cls(
            max_attempts=settings.catalog_retry_max_attempts,
            backoff_seconds=settings.catalog_retry_backoff_seconds,
            backoff_multiplier=settings.catalog_retry_backoff_multiplier,
        )

    def delay_for(self, attempt: int) -> float:
        """Sleep after the given failed attempt (1-based)."""
        return self.backoff_seconds * (self.backoff_multiplier ** (attempt - 1))

    def call(
        self,
        fn: Callable[..., Any],
        *args: Any,
        sleep: Callable[[float], None] = time.sleep
    ) -> Any:
        """
        Call fn(*args), retrying CatalogRemoteError up to max_attempts.

        Raises:
            CatalogRemoteError: When the last attempt also fails
            CatalogNotFoundError: Immediately, without retry
        """
        attempt = 1
        while True:
            try:
                return fn(*args)
            except CatalogRemoteError as e:
                if attempt >= self.max_attempts:
                    raise
                delay = self.delay_for(attempt)
                logger.warning(
                    "catalog_call_retrying",
                    attempt=attempt,
                    max_attempts=self.max_attempts,
                    delay_seconds=delay,
                    status=e.status
                )
                sleep(delay)
                attempt += 1
