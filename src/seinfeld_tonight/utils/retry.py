# ABOUTME: Retry and rate-limit policy for the enrichment service using the tenacity library
# ABOUTME: Linear backoff for network-level failures and a fixed pause between sequential calls

import asyncio
from collections.abc import Awaitable, Callable
from dataclasses import dataclass
from typing import Any, TypeVar

import httpx
from tenacity import (
    AsyncRetrying,
    RetryCallState,
    retry_if_exception_type,
    stop_after_attempt,
    wait_incrementing,
)

from seinfeld_tonight.utils.logging import get_logger

T = TypeVar("T")

logger = get_logger(__name__)


class EnrichmentError(Exception):
    """Base exception for enrichment service failures."""

    pass


class EnrichmentTransportError(EnrichmentError):
    """Raised when the request never produced a response (connection, timeout, protocol)."""

    pass


class EnrichmentResponseError(EnrichmentError):
    """Raised when the service answered with a non-success status."""

    def __init__(self, message: str, status_code: int | None = None):
        super().__init__(message)
        self.status_code = status_code


class EnrichmentParseError(EnrichmentError):
    """Raised when the response body cannot be interpreted."""

    pass


@dataclass(frozen=True)
class RateLimitPolicy:
    """Attempt budget, backoff schedule and inter-call delay for sequential enrichment."""

    max_attempts: int = 4
    backoff_step: float = 0.3
    delay_between_calls: float = 0.2

    async def pause(self) -> None:
        """Sleep for the inter-call delay."""
        if self.delay_between_calls > 0:
            await asyncio.sleep(self.delay_between_calls)

    def with_delay(self, delay: float) -> "RateLimitPolicy":
        return RateLimitPolicy(
            max_attempts=self.max_attempts, backoff_step=self.backoff_step, delay_between_calls=delay
        )


def _convert_exception(e: Exception) -> EnrichmentError:
    """Convert transport exceptions to enrichment-specific ones for retry classification."""
    if isinstance(e, httpx.TransportError):
        return EnrichmentTransportError(f"{type(e).__name__}: {e}")
    return EnrichmentError(f"Enrichment call failed: {e}")


def _log_before_sleep(retry_state: RetryCallState) -> None:
    error = retry_state.outcome.exception() if retry_state.outcome else None
    logger.warning(
        "Enrichment attempt failed, backing off",
        attempt=retry_state.attempt_number,
        wait_seconds=round(retry_state.next_action.sleep, 3) if retry_state.next_action else None,
        error=str(error) if error else None,
    )


def enrichment_retry(policy: RateLimitPolicy):
    """Retry decorator for a single enrichment request.

    Only ``EnrichmentTransportError`` is retried; response and parse errors surface
    on the first attempt. The last error is re-raised once the budget is exhausted.
    """

    def decorator(func: Callable[..., Awaitable[T]]) -> Callable[..., Awaitable[T]]:
        async def wrapper(*args: Any, **kwargs: Any) -> T:
            retrying = AsyncRetrying(
                stop=stop_after_attempt(policy.max_attempts),
                wait=wait_incrementing(start=policy.backoff_step, increment=policy.backoff_step),
                retry=retry_if_exception_type(EnrichmentTransportError),
                before_sleep=_log_before_sleep,
                reraise=True,
            )

            async for attempt in retrying:
                with attempt:
                    try:
                        return await func(*args, **kwargs)
                    except EnrichmentError:
                        raise
                    except Exception as e:
                        raise _convert_exception(e) from e

            raise EnrichmentError("Retry loop exited without a result")  # pragma: no cover

        return wrapper

    return decorator
