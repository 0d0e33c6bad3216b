"""
Base service class for DeFi trust engine services.

This module provides a base class for all services in the trust engine,
with common functionality for error handling, bounded fan-out and logging.
"""

import asyncio
import logging
import time
from functools import wraps
from typing import Any, Awaitable, Callable, Iterable, List, Optional, Tuple, TypeVar

from defi_trust.utils.errors import TrustEngineError

T = TypeVar('T')

# Configure logger
logger = logging.getLogger(__name__)


def handle_errors(error_factory: Callable[[str], TrustEngineError]):
    """
    Decorator to handle errors in service methods.

    Errors that are already a :class:`TrustEngineError` pass through
    unchanged; anything else is logged and re-raised as the error built by
    ``error_factory``.

    Args:
        error_factory: Callable taking a message and returning the error to raise

    Returns:
        Decorated function
    """
    def decorator(func: Callable[..., Any]) -> Callable[..., Any]:
        @wraps(func)
        async def wrapper(*args: Any, **kwargs: Any) -> Any:
            try:
                return await func(*args, **kwargs)
            except TrustEngineError:
                raise
            except asyncio.CancelledError:
                raise
            except Exception as e:
                logger.exception(f"Error in {func.__name__}: {str(e)}")
                raise error_factory(f"Error in {func.__name__}: {str(e)}") from e
        return wrapper
    return decorator


class BaseService:
    """
    Base service class with common functionality.

    This class provides:
    - Logging
    - Bounded concurrent fan-out
    - Performance tracking
    """

    def __init__(self, concurrency_limit: int = 10, logger: Optional[logging.Logger] = None):
        """
        Initialize the base service.

        Args:
            concurrency_limit: Maximum number of concurrent operations in a batch
            logger: Optional logger instance
        """
        self.concurrency_limit = concurrency_limit
        self.logger = logger or logging.getLogger(self.__class__.__name__)

    async def gather_with_concurrency(
        self,
        *tasks: Awaitable[Any],
        return_exceptions: bool = False
    ) -> List[Any]:
        """
        Execute tasks with a concurrency limit.

        Args:
            tasks: Awaitables to execute
            return_exceptions: Return exceptions in place of results instead of raising

        Returns:
            List of results from the tasks, in input order
        """
        semaphore = asyncio.Semaphore(self.concurrency_limit)

        async def _wrapped_task(task):
            async with semaphore:
                return await task

        return await asyncio.gather(
            *[_wrapped_task(task) for task in tasks],
            return_exceptions=return_exceptions
        )

    async def gather_settled(
        self,
        keys: Iterable[str],
        operation: Callable[[str], Awaitable[T]]
    ) -> Tuple[List[Tuple[str, T]], List[Tuple[str, Exception]]]:
        """
        Run ``operation`` for every key and wait for all of them to settle.

        A failure for one key never cancels or hides the others.

        Args:
            keys: Keys to process
            operation: Coroutine function called once per key

        Returns:
            Tuple of ``(successes, failures)`` as ``(key, value)`` pairs
        """
        keys = list(keys)
        outcomes = await self.gather_with_concurrency(
            *[operation(key) for key in keys],
            return_exceptions=True
        )

        successes: List[Tuple[str, T]] = []
        failures: List[Tuple[str, Exception]] = []
        for key, outcome in zip(keys, outcomes):
            if isinstance(outcome, asyncio.CancelledError):
                raise outcome
            if isinstance(outcome, BaseException):
                failures.append((key, outcome))
            else:
                successes.append((key, outcome))
        return successes, failures

    def log_timing(self, operation_name: str) -> "TimingContextManager":
        """
        Create a context manager to log timing information.

        Args:
            operation_name: Name of the operation

        Returns:
            Timing context manager
        """
        return TimingContextManager(operation_name, self.logger)


class TimingContextManager:
    """Context manager to log timing information."""

    def __init__(self, operation_name: str, logger: logging.Logger):
        """
        Initialize the timing context manager.

        Args:
            operation_name: Name of the operation
            logger: Logger to use for logging
        """
        self.operation_name = operation_name
        self.logger = logger
        self.start_time = 0.0

    async def __aenter__(self) -> "TimingContextManager":
        self.start_time = time.perf_counter()
        return self

    async def __aexit__(self, exc_type, exc_val, exc_tb) -> None:
        elapsed = time.perf_counter() - self.start_time
        if exc_val is not None:
            self.logger.error(
                f"{self.operation_name} failed after {elapsed:.2f}s: {str(exc_val)}"
            )
        else:
            self.logger.info(f"{self.operation_name} completed in {elapsed:.2f}s")
