"""
Base service class for Camp Ecosystem services.

This module provides a base class for all services, with common
functionality for error handling, timeouts, and logging.
"""

import asyncio
import logging
import time
from functools import wraps
from typing import Any, Awaitable, Callable, Optional, TypeVar

from camp_ecosystem.logging_config import log_with_context
from camp_ecosystem.utils.errors import CampEcosystemError, RpcError, RpcTimeoutError

T = TypeVar('T')

# Configure logger
logger = logging.getLogger(__name__)


def handle_errors(error_type: type = RpcError):
    """
    Decorator to handle errors in service methods.

    Errors already in the Camp Ecosystem hierarchy pass through; timeouts
    become RpcTimeoutError and anything else is wrapped in ``error_type``.

    Args:
        error_type: The type of error to raise if an exception occurs

    Returns:
        Decorated function
    """
    def decorator(func: Callable[..., Any]) -> Callable[..., Any]:
        @wraps(func)
        async def wrapper(*args: Any, **kwargs: Any) -> Any:
            try:
                return await func(*args, **kwargs)
            except CampEcosystemError:
                raise
            except asyncio.TimeoutError as e:
                logger.warning(f"Timeout in {func.__name__}: {str(e)}")
                raise RpcTimeoutError(f"Operation timed out: {func.__name__}") from e
            except Exception as e:
                logger.exception(f"Error in {func.__name__}: {str(e)}")
                raise error_type(f"Error in {func.__name__}: {str(e)}") from e
        return wrapper
    return decorator


class BaseService:
    """
    Base service class with common functionality.

    This class provides:
    - Timeout management
    - Fallback execution
    - Contextual logging
    """

    def __init__(self, timeout: float = 30.0, logger: Optional[logging.Logger] = None):
        """
        Initialize the base service.

        Args:
            timeout: Default timeout for service operations in seconds
            logger: Optional logger instance
        """
        self.timeout = timeout
        self.logger = logger or logging.getLogger(self.__class__.__name__)

    async def with_timeout(self, coro: Awaitable[T], timeout: Optional[float] = None) -> T:
        """
        Await a coroutine with a deadline, ``self.timeout`` by default.

        Raises:
            RpcTimeoutError: If the operation times out
        """
        timeout_value = timeout or self.timeout
        try:
            return await asyncio.wait_for(coro, timeout=timeout_value)
        except asyncio.TimeoutError:
            raise RpcTimeoutError(f"Operation timed out after {timeout_value}s")

    async def execute_with_fallback(
        self,
        coro: Awaitable[T],
        fallback_value: T,
        error_message: str = "Operation failed"
    ) -> T:
        """
        Await a coroutine, returning ``fallback_value`` if it raises.
        """
        try:
            return await coro
        except Exception as e:
            self.logger.warning(f"{error_message}: {str(e)}")
            return fallback_value

    def log_with_context(self, level: str, message: str, **context: Any) -> None:
        """Log a message with structured context attached."""
        log_with_context(self.logger, level, message, **context)

    @staticmethod
    def elapsed_ms(start_time: float) -> int:
        """Milliseconds since ``start_time`` (a ``time.perf_counter`` value)."""
        return int((time.perf_counter() - start_time) * 1000)
