"""
JobQueue - Bounded-concurrency FIFO scheduler for image jobs.
"""

import asyncio
import logging
from collections import deque
from typing import Awaitable, Callable, Deque, List, Optional, TypeVar


T = TypeVar('T')

DEFAULT_CONCURRENCY = 10


def _check_concurrency(concurrency: int) -> int:
    if isinstance(concurrency, bool) or not isinstance(concurrency, int) or concurrency < 1:
        raise ValueError(f"concurrency must be a positive integer, got {concurrency!r}")
    return concurrency


class JobQueue:
    """
    Runs at most `concurrency` jobs at once; further jobs wait in arrival order.

    A failing job only fails its own add() call. Raising concurrency starts
    waiting jobs immediately; lowering it never interrupts running jobs.
    """

    def __init__(self, concurrency: int = DEFAULT_CONCURRENCY, logger: Optional[logging.Logger] = None):
        """
        Initialize queue.

        Args:
            concurrency: Maximum number of jobs running at once
            logger: Optional logger instance
        """
        self._concurrency = _check_concurrency(concurrency)
        self._active = 0
        self._waiters: Deque[asyncio.Future] = deque()
        self._idle_waiters: List[asyncio.Future] = []
        self.logger = logger or logging.getLogger(__name__)

    @property
    def concurrency(self) -> int:
        return self._concurrency

    @concurrency.setter
    def concurrency(self, value: int) -> None:
        self._concurrency = _check_concurrency(value)
        # A raised limit admits waiting jobs right away
        self._wake()

    @property
    def size(self) -> int:
        """Number of jobs waiting to start."""
        return sum(1 for waiter in self._waiters if not waiter.done())

    @property
    def pending(self) -> int:
        """Number of jobs currently running."""
        return self._active

    async def add(self, job: Callable[[], Awaitable[T]]) -> T:
        """
        Queue a job and wait for its result.

        Args:
            job: Zero-argument callable returning an awaitable

        Returns:
            The job's result

        Raises:
            Whatever the job raises
        """
        await self._acquire()
        self.logger.debug(f"Concurrency: {self._concurrency}, Size: {self.size}, Pending: {self._active}")
        try:
            return await job()
        finally:
            self._release()

    async def idle(self) -> None:
        """Wait until no jobs are running or waiting."""
        if self._active == 0 and not self._waiters:
            return
        waiter = asyncio.get_running_loop().create_future()
        self._idle_waiters.append(waiter)
        await waiter

    async def _acquire(self) -> None:
        if self._active < self._concurrency and not self._waiters:
            self._active += 1
            return

        waiter = asyncio.get_running_loop().create_future()
        self._waiters.append(waiter)
        try:
            await waiter
        except asyncio.CancelledError:
            if waiter.done() and not waiter.cancelled():
                # Slot was handed over just before cancellation
                self._release()
            elif waiter in self._waiters:
                self._waiters.remove(waiter)
            raise

    def _release(self) -> None:
        self._active -= 1
        self._wake()

    def _wake(self) -> None:
        while self._waiters and self._active < self._concurrency:
            waiter = self._waiters.popleft()
            if waiter.done():
                continue
            self._active += 1
            waiter.set_result(None)

        if self._active == 0 and not self._waiters:
            idle_waiters, self._idle_waiters = self._idle_waiters, []
            for waiter in idle_waiters:
                if not waiter.done():
                    waiter.set_result(None)
