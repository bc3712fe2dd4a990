"""
Retry logic with linear backoff for Hansard API calls.

The upstream service answers throttled or momentarily rejected requests
with HTTP 429 or 400; those are retried a fixed number of times with a
delay that grows linearly per attempt. Everything else fails fast.

Responsibility: Provide retry utilities for network operations
"""

import asyncio
from typing import Awaitable, Callable, FrozenSet, Optional, TypeVar
import logging

import httpx

logger = logging.getLogger(__name__)

T = TypeVar('T')

RETRYABLE_STATUS_CODES: FrozenSet[int] = frozenset({400, 429})


class RetryError(Exception):
    """Raised when all retry attempts are exhausted"""

    def __init__(self, message: str, last_exception: Optional[Exception] = None):
        super().__init__(message)
        self.last_exception = last_exception

    @property
    def status_code(self) -> Optional[int]:
        """HTTP status of the final failed attempt, when there was one."""
        return _status_code_of(self.last_exception) if self.last_exception else None


def _status_code_of(exception: Exception) -> Optional[int]:
    if isinstance(exception, httpx.HTTPStatusError):
        return exception.response.status_code
    status = getattr(exception, "status_code", None)
    return status if isinstance(status, int) else None


def calculate_backoff(attempt: int, base_delay: float = 1.0) -> float:
    """
    Calculate backoff delay for retry attempt.

    Formula: base_delay * (attempt + 1)

    Args:
        attempt: Current attempt number (0-indexed)
        base_delay: Base delay in seconds

    Example:
        >>> calculate_backoff(0)
        1.0
        >>> calculate_backoff(2)
        3.0
    """
    return base_delay * (attempt + 1)


def is_retryable_error(
    exception: Exception,
    retryable_status_codes: FrozenSet[int] = RETRYABLE_STATUS_CODES
) -> bool:
    """
    Determine if an exception should trigger a retry.

    Only HTTP responses whose status is in ``retryable_status_codes`` are
    retried; transport errors and other statuses are surfaced immediately.
    """
    status = _status_code_of(exception)
    return status is not None and status in retryable_status_codes


async def retry_async(
    func: Callable[[], Awaitable[T]],
    max_attempts: int = 4,
    base_delay: float = 1.0,
    retryable_status_codes: FrozenSet[int] = RETRYABLE_STATUS_CODES,
    logger_instance: Optional[logging.Logger] = None
) -> T:
    """
    Retry an async function with linear backoff.

    Args:
        func: Async function to retry
        max_attempts: Total attempts including the first (1 = no retries)
        base_delay: Base delay between retries in seconds
        retryable_status_codes: HTTP statuses that trigger a retry
        logger_instance: Logger to use (defaults to module logger)

    Returns:
        Result of successful function call

    Raises:
        RetryError: If all attempts are exhausted
        Exception: The original exception for non-retryable errors

    Example:
        async def fetch_data():
            response = await client.get("https://hansard-api.parliament.uk/...")
            response.raise_for_status()
            return response.json()

        data = await retry_async(fetch_data, max_attempts=4)
    """
    log = logger_instance or logger
    last_exception: Optional[Exception] = None

    for attempt in range(max_attempts):
        try:
            result = await func()

            if attempt > 0:
                log.info(f"Succeeded after {attempt + 1} attempts")

            return result

        except Exception as e:
            last_exception = e

            if not is_retryable_error(e, retryable_status_codes):
                raise

            if attempt + 1 >= max_attempts:
                log.error(
                    f"All {max_attempts} attempts exhausted. "
                    f"Last error: {e}"
                )
                raise RetryError(
                    f"Failed after {max_attempts} attempts",
                    last_exception=e
                ) from e

            delay = calculate_backoff(attempt=attempt, base_delay=base_delay)

            log.warning(
                f"Attempt {attempt + 1}/{max_attempts} failed: {e}. "
                f"Retrying in {delay:.2f}s..."
            )

            await asyncio.sleep(delay)

    # Only reachable when max_attempts < 1
    raise RetryError(
        f"Failed after {max_attempts} attempts",
        last_exception=last_exception
    )
