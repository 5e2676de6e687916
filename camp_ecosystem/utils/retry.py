"""Retry utilities for Camp Ecosystem.

A single retry policy for flaky upstream calls: timeouts are retried with
increasing backoff, everything else fails fast.
"""

import asyncio
import logging
from typing import Awaitable, Callable, TypeVar

import httpx

from camp_ecosystem.utils.errors import RpcTimeoutError

T = TypeVar('T')

logger = logging.getLogger(__name__)

TIMEOUT_MARKERS = ("timed out", "timeout", "etimedout")


def is_timeout_error(error: BaseException) -> bool:
    """Return True if ``error`` belongs to the retryable timeout class."""
    if isinstance(error, (asyncio.TimeoutError, httpx.TimeoutException, RpcTimeoutError)):
        return True
    message = str(error).lower()
    return any(marker in message for marker in TIMEOUT_MARKERS)


def is_empty_result(result: object) -> bool:
    """None and empty containers count as "nothing there yet"."""
    if result is None:
        return True
    if isinstance(result, (list, dict, tuple, set)):
        return len(result) == 0
    return False


def retry_budget(max_attempts: int, attempt_timeout: float, base_delay: float) -> float:
    """Worst-case seconds ``with_retries`` needs when every attempt times out."""
    backoff = sum(base_delay * attempt for attempt in range(1, max_attempts))
    return max_attempts * attempt_timeout + backoff


async def with_retries(
    operation: Callable[[], Awaitable[T]],
    max_attempts: int = 3,
    base_delay: float = 1.0,
    retry_on_empty: bool = False,
    is_retryable: Callable[[BaseException], bool] = is_timeout_error,
    operation_name: str = "operation"
) -> T:
    """
    Run ``operation`` with bounded retries.

    Retryable errors wait ``base_delay * attempt`` seconds before the next
    attempt. Non-retryable errors propagate immediately, and the last error
    propagates once attempts are exhausted.

    With ``retry_on_empty`` an empty result is attempted again without
    delay, and returned as-is on the final attempt.

    Args:
        operation: Zero-argument async callable
        max_attempts: Maximum number of attempts (at least 1)
        base_delay: Backoff unit in seconds
        retry_on_empty: Re-attempt when the result is None or empty
        is_retryable: Classifier for errors worth another attempt
        operation_name: Name used in log messages

    Returns:
        The operation result
    """
    if max_attempts < 1:
        raise ValueError("max_attempts must be at least 1")

    for attempt in range(1, max_attempts + 1):
        try:
            result = await operation()
        except Exception as e:
            if not is_retryable(e):
                raise
            if attempt == max_attempts:
                logger.error(f"{operation_name} failed after {max_attempts} attempts: {str(e)}")
                raise
            delay = base_delay * attempt
            logger.warning(
                f"{operation_name} timed out (attempt {attempt}/{max_attempts}), "
                f"retrying in {delay:.2f}s"
            )
            await asyncio.sleep(delay)
            continue

        if retry_on_empty and is_empty_result(result) and attempt < max_attempts:
            logger.debug(f"{operation_name} returned nothing (attempt {attempt}/{max_attempts})")
            continue
        return result

    raise RuntimeError(f"{operation_name} made no attempts")  # pragma: no cover
