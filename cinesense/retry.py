"""Retry with exponential backoff for arbitrary request functions."""

import asyncio
from typing import Awaitable, Callable, Optional, TypeVar

import structlog

from cinesense.exceptions import http_status_of

logger = structlog.get_logger(__name__)

T = TypeVar("T")


def is_retryable_status(status: Optional[int]) -> bool:
    """Decide from the HTTP status alone whether a failure is worth retrying.

    4xx responses other than 429 cannot succeed on a second try. Failures
    without a status (timeouts, dropped connections) are retried.
    """
    if status is None:
        return True
    return not (400 <= status < 500 and status != 429)


def backoff_delay_ms(attempt: int, base_delay_ms: int) -> int:
    """Delay before the attempt following ``attempt`` (zero-based)."""
    return base_delay_ms * (2 ** attempt)


async def retry_request(
    request_fn: Callable[[], Awaitable[T]],
    max_retries: int = 3,
    base_delay_ms: int = 1000,
) -> T:
    """Call ``request_fn`` until it succeeds or attempts run out.

    Args:
        request_fn: Zero-argument coroutine function issuing the request
        max_retries: Total number of attempts
        base_delay_ms: Wait before the second attempt; doubles each time

    Returns:
        Whatever ``request_fn`` returns on its first success

    Raises:
        Exception: The last failure, unchanged, once attempts are exhausted,
            or immediately for a non-retryable status
    """
    attempts = max(1, max_retries)

    for attempt in range(attempts):
        try:
            return await request_fn()
        except Exception as e:
            status = http_status_of(e)
            if not is_retryable_status(status):
                logger.debug("retry_skipped", status=status, attempt=attempt)
                raise

            if attempt == attempts - 1:
                logger.warning(
                    "retry_exhausted",
                    attempts=attempts,
                    status=status,
                    error=str(e),
                )
                raise

            delay_ms = backoff_delay_ms(attempt, base_delay_ms)
            logger.info(
                "retry_scheduled",
                attempt=attempt + 1,
                max_attempts=attempts,
                delay_ms=delay_ms,
                status=status,
                error=str(e),
            )
            await asyncio.sleep(delay_ms / 1000)
