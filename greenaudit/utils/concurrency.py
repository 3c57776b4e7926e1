"""Bounded-concurrency gate for outstanding oracle calls.

ConcurrencyLimiter is an asyncio semaphore with an explicit FIFO wait-list:
when a slot frees it is handed directly to the longest-waiting caller, so queue
order is preserved and a newly arriving caller can never jump the queue.

The counter and the deque are only touched from the event loop thread, so no
lock is required; only matched admit/release pairs.
"""

from __future__ import annotations

import asyncio
import logging
from collections import deque
from typing import Awaitable, Callable, Deque, TypeVar

logger = logging.getLogger(__name__)

T = TypeVar("T")


class ConcurrencyLimiter:
    """Cap the number of simultaneously admitted async operations.

    Args:
        limit: Maximum number of operations admitted at once (>= 1).
    """

    def __init__(self, limit: int = 10) -> None:
        if limit < 1:
            raise ValueError(f"ConcurrencyLimiter limit must be >= 1, got {limit}")
        self.limit = limit
        self._active = 0
        self._waiters: Deque[asyncio.Future] = deque()

    @property
    def active(self) -> int:
        """Number of operations currently holding a slot."""
        return self._active

    @property
    def queued(self) -> int:
        """Number of callers waiting for a slot."""
        return sum(1 for w in self._waiters if not w.done())

    async def acquire(self, operation: Callable[[], Awaitable[T]]) -> T:
        """Run ``operation`` once a slot is available and return its result.

        The slot is released exactly once when the operation finishes, whether
        it returns, raises, or is cancelled.

        Args:
            operation: Zero-argument callable returning an awaitable.

        Returns:
            Whatever the operation's awaitable resolves to.
        """
        await self._admit()
        try:
            return await operation()
        finally:
            self._release()

    async def _admit(self) -> None:
        if self._active < self.limit and not self._waiters:
            self._active += 1
            return

        waiter = asyncio.get_running_loop().create_future()
        self._waiters.append(waiter)
        logger.debug(
            "ConcurrencyLimiter: queued (active=%d, waiting=%d)",
            self._active,
            len(self._waiters),
        )
        try:
            await waiter
        except asyncio.CancelledError:
            if waiter.done() and not waiter.cancelled():
                # Slot was handed over just before cancellation; pass it on
                self._release()
            elif waiter in self._waiters:
                self._waiters.remove(waiter)
            raise

    def _release(self) -> None:
        # Hand the slot straight to the next live waiter; _active is unchanged
        while self._waiters:
            waiter = self._waiters.popleft()
            if not waiter.done():
                waiter.set_result(None)
                return
        self._active -= 1
