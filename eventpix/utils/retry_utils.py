"""
Retry utilities for resilient database operations.

Provides an async retry decorator with capped exponential backoff and
jitter. Used around transactional writes that can abort on a concurrent
write (auto-tag propagation, registration, uploads).
"""

import asyncio
import functools
import logging
import random
from typing import Callable, Tuple, Type

from ..domain.exceptions import TransactionConflictError


logger = logging.getLogger(__name__)


def compute_backoff_delay(
    attempt: int,
    initial_delay: float,
    max_delay: float,
    exponential_base: float = 2.0,
    jitter: bool = True,
) -> float:
    """
    Delay before retry number `attempt` (0-based).

    Capped exponential; jitter scales the delay into [0.5, 1.5) of its
    value to prevent thundering herd.
    """
    delay = min(initial_delay * (exponential_base ** attempt), max_delay)
    if jitter:
        delay = delay * (0.5 + random.random())
    return delay


def async_retry_on_exception(
    max_retries: int = 3,
    initial_delay: float = 0.05,
    max_delay: float = 2.0,
    exponential_base: float = 2.0,
    jitter: bool = True,
    exceptions: Tuple[Type[Exception], ...] = (TransactionConflictError,)
) -> Callable:
    """
    Decorator for retrying async functions on specific exceptions.

    Args:
        max_retries: Maximum number of retry attempts
        initial_delay: Initial delay between retries (seconds)
        max_delay: Maximum delay between retries (seconds)
        exponential_base: Base for exponential backoff
        jitter: Whether to add random jitter to delays
        exceptions: Tuple of exception types to retry on

    Returns:
        Decorated async function
    """
    def decorator(func: Callable) -> Callable:
        @functools.wraps(func)
        async def wrapper(*args, **kwargs):
            for attempt in range(max_retries + 1):
                try:
                    return await func(*args, **kwargs)
                except exceptions as e:
                    # Check if exception is retryable
                    if hasattr(e, 'retryable') and not e.retryable:
                        logger.warning(f"{func.__name__}: Non-retryable error: {e}")
                        raise

                    if attempt >= max_retries:
                        logger.error(
                            f"{func.__name__}: All {max_retries + 1} attempts failed. Last error: {e}"
                        )
                        raise

                    delay = compute_backoff_delay(attempt, initial_delay, max_delay, exponential_base, jitter)
                    logger.warning(
                        f"{func.__name__}: Attempt {attempt + 1}/{max_retries + 1} failed: {e}. "
                        f"Retrying in {delay:.2f}s..."
                    )
                    await asyncio.sleep(delay)

        return wrapper
    return decorator
