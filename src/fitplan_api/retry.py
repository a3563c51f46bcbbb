"""Retry utilities for remote catalog calls with exponential backoff."""
import logging
from typing import Any, Callable

from tenacity import (
    AsyncRetrying,
    before_sleep_log,
    retry_if_exception,
    stop_after_attempt,
    wait_exponential,
)

from fitplan_api.errors import RemoteUnavailable

logger = logging.getLogger(__name__)

# Default retry configuration
DEFAULT_MAX_ATTEMPTS = 3
DEFAULT_MIN_WAIT_SECONDS = 1
DEFAULT_MAX_WAIT_SECONDS = 10


def is_retryable_error(exception: BaseException) -> bool:
    """
    Determine if an exception is worth retrying.

    Retryable: connection failures, timeouts and 5xx responses, all of which
    surface as RemoteUnavailable without a 4xx status.

    Not retryable: rate limiting (the caller is told to wait instead), 4xx
    responses and error bodies returned with a success status.
    """
    if not isinstance(exception, RemoteUnavailable):
        return False
    status = exception.status_code
    return status is None or status >= 500


def _retry_kwargs(
    max_attempts: int,
    min_wait_seconds: float,
    max_wait_seconds: float,
) -> dict:
    return dict(
        retry=retry_if_exception(is_retryable_error),
        stop=stop_after_attempt(max_attempts),
        wait=wait_exponential(
            multiplier=1,
            min=min_wait_seconds,
            max=max_wait_seconds,
        ),
        before_sleep=before_sleep_log(logger, logging.WARNING),
        reraise=True,
    )


def async_retrying(
    max_attempts: int = DEFAULT_MAX_ATTEMPTS,
    min_wait_seconds: float = DEFAULT_MIN_WAIT_SECONDS,
    max_wait_seconds: float = DEFAULT_MAX_WAIT_SECONDS,
) -> AsyncRetrying:
    """Create an AsyncRetrying controller for `async for attempt in ...` loops."""
    return AsyncRetrying(**_retry_kwargs(max_attempts, min_wait_seconds, max_wait_seconds))


async def retry_async_call(
    func: Callable[..., Any],
    *args: Any,
    max_attempts: int = DEFAULT_MAX_ATTEMPTS,
    min_wait_seconds: float = DEFAULT_MIN_WAIT_SECONDS,
    max_wait_seconds: float = DEFAULT_MAX_WAIT_SECONDS,
    **kwargs: Any,
) -> Any:
    """
    Execute an async function with retry logic.

    Args:
        func: Async function to execute
        *args: Positional arguments for the function
        max_attempts: Maximum number of attempts
        min_wait_seconds: Minimum wait time between retries
        max_wait_seconds: Maximum wait time between retries
        **kwargs: Keyword arguments for the function

    Returns:
        Result of the function call
    """
    async for attempt in async_retrying(max_attempts, min_wait_seconds, max_wait_seconds):
        with attempt:
            return await func(*args, **kwargs)
