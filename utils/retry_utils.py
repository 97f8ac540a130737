"""
utils/retry_utils.py

Purpose: Retry with exponential backoff for outbound calls

- Retries only transient transport failures (timeouts, connect errors, resets)
- Never retries HTTP error statuses, validation or authorization failures
"""

import asyncio
import logging
from typing import Awaitable, Callable, Tuple, Type, TypeVar

import httpx


T = TypeVar("T")

TRANSIENT_ERRORS: Tuple[Type[BaseException], ...] = (
    httpx.TimeoutException,
    httpx.ConnectError,
    httpx.ReadError,
    httpx.WriteError,
    httpx.RemoteProtocolError,
)

logger = logging.getLogger("subsplit.utils.retry_utils")


async def retry_async(
    operation: Callable[[], Awaitable[T]],
    *,
    description: str,
    max_attempts: int = 3,
    backoff_seconds: float = 1.0,
    retry_on: Tuple[Type[BaseException], ...] = TRANSIENT_ERRORS,
) -> T:
    """
    Awaits operation, retrying on transient errors.

    Args:
        operation: Zero-argument coroutine factory (called once per attempt)
        description: What is being attempted, for logs
        max_attempts: Total attempts including the first
        backoff_seconds: Delay before the second attempt, doubled afterwards

    Returns:
        Whatever operation returns

    Raises:
        The last transient error once attempts are exhausted, or any
        non-transient error immediately
    """
    retry_delay = backoff_seconds

    for attempt in range(1, max_attempts + 1):
        try:
            return await operation()
        except retry_on as e:
            logger.warning(
                f"{description} failed (attempt {attempt}/{max_attempts}): {type(e).__name__}: {e}"
            )

            if attempt >= max_attempts:
                logger.error(f"{description} failed after {max_attempts} attempts")
                raise

            logger.info(f"Retrying {description} in {retry_delay} seconds...")
            await asyncio.sleep(retry_delay)
            retry_delay *= 2  # Exponential backoff

    raise RuntimeError("max_attempts must be at least 1")
