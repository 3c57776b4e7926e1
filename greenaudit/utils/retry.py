"""Exponential backoff executor for async oracle calls."""

from __future__ import annotations

import asyncio
import logging
from typing import Awaitable, Callable, Optional, Tuple, Type, TypeVar

logger = logging.getLogger(__name__)

T = TypeVar("T")


async def run_with_backoff(
    operation: Callable[[], Awaitable[T]],
    max_retries: int = 2,
    base_delay: float = 1.0,
    operation_name: str = "operation",
    sleep: Callable[[float], Awaitable[None]] = asyncio.sleep,
    non_retryable: Tuple[Type[BaseException], ...] = (),
) -> T:
    """Invoke ``operation`` up to ``max_retries + 1`` times.

    Between attempt k and k+1 (0-indexed) sleeps ``base_delay * 2**k`` seconds.
    No jitter. Attempts are strictly sequential.

    Args:
        operation: Zero-argument callable returning an awaitable.
        max_retries: Retries after the first attempt.
        base_delay: Delay unit in seconds (1.0 → 1s, 2s, 4s, ...).
        operation_name: Label used in log messages.
        sleep: Awaitable sleep function (injectable for tests).
        non_retryable: Exception types raised immediately without another
            attempt (configuration errors).

    Returns:
        The first successful result.

    Raises:
        The exception raised by the final attempt, or the first
        ``non_retryable`` exception.
    """
    if max_retries < 0:
        raise ValueError(f"max_retries must be >= 0, got {max_retries}")

    last_exc: Optional[Exception] = None

    for attempt in range(max_retries + 1):
        try:
            return await operation()
        except Exception as exc:
            if non_retryable and isinstance(exc, non_retryable):
                logger.error("%s: not retrying: %s", operation_name, exc)
                raise
            last_exc = exc
            logger.warning(
                "%s: attempt %d/%d failed: %s",
                operation_name,
                attempt + 1,
                max_retries + 1,
                exc,
            )
            if attempt < max_retries:
                delay = base_delay * (2 ** attempt)
                logger.debug("%s: retrying in %.1fs", operation_name, delay)
                await sleep(delay)

    if last_exc is None:
        raise RuntimeError(f"{operation_name}: no attempt was made")
    raise last_exc
