"""Fixed-window rate limiter for calls to rate-limited external APIs.

Callers queue a ticket (a future) and a single worker task grants tickets in
FIFO order while capacity remains. The first grant after a reset schedules
exactly one timer that restores full capacity when the window elapses.

All state transitions happen between suspension points of the worker task,
so no lock is needed on the event loop.
"""

import asyncio
import logging

logger = logging.getLogger(__name__)


class RateLimiterClosed(RuntimeError):
    """Raised to callers waiting on a limiter that has been shut down."""


class RateLimiter:
    """Grant at most ``limit`` acquisitions per ``window`` seconds."""

    def __init__(self, limit: int, window: float) -> None:
        if limit < 1:
            raise ValueError("limit must be at least 1")
        if window <= 0:
            raise ValueError("window must be positive")
        self._limit = limit
        self._window = window
        self._available = limit
        self._queue: asyncio.Queue[asyncio.Future[None]] = asyncio.Queue()
        self._reset_task: asyncio.Task[None] | None = None
        self._worker: asyncio.Task[None] | None = None
        self._closed = False

    @property
    def available(self) -> int:
        """Capacity left in the current window."""
        return self._available

    async def acquire(self) -> None:
        """Wait until one unit of capacity is granted.

        Cancelling the caller cancels its ticket; the worker drops cancelled
        tickets without charging capacity.
        """
        if self._closed:
            raise RateLimiterClosed("Rate limiter is closed")
        self._ensure_worker()
        ticket: asyncio.Future[None] = asyncio.get_running_loop().create_future()
        self._queue.put_nowait(ticket)
        await ticket

    async def close(self) -> None:
        """Stop the worker and fail every waiting caller."""
        self._closed = True
        tasks = [t for t in (self._worker, self._reset_task) if t is not None]
        for task in tasks:
            task.cancel()
        if tasks:
            await asyncio.gather(*tasks, return_exceptions=True)
        self._worker = None
        self._reset_task = None
        while not self._queue.empty():
            ticket = self._queue.get_nowait()
            if not ticket.done():
                ticket.set_exception(RateLimiterClosed("Rate limiter is closed"))

    def _ensure_worker(self) -> None:
        if self._worker is None or self._worker.done():
            self._worker = asyncio.get_running_loop().create_task(self._run())

    async def _run(self) -> None:
        while True:
            if self._available <= 0:
                reset = self._reset_task
                if reset is not None:
                    await asyncio.shield(reset)
                tickets = await self._take_between(1, self._limit)
            else:
                tickets = await self._take_between(1, self._available)

            live = [ticket for ticket in tickets if not ticket.done()]
            if not live:
                continue
            self._available -= len(live)
            self._schedule_reset()
            for ticket in live:
                ticket.set_result(None)

    async def _take_between(self, minimum: int, maximum: int) -> list[asyncio.Future[None]]:
        """Block until ``minimum`` tickets are queued, then take up to ``maximum``."""
        tickets = [await self._queue.get()]
        while len(tickets) < minimum:
            tickets.append(await self._queue.get())
        while len(tickets) < maximum and not self._queue.empty():
            tickets.append(self._queue.get_nowait())
        return tickets

    def _schedule_reset(self) -> None:
        if self._reset_task is None:
            self._reset_task = asyncio.get_running_loop().create_task(self._reset_after_window())

    async def _reset_after_window(self) -> None:
        await asyncio.sleep(self._window)
        self._available = self._limit
        self._reset_task = None
        logger.debug("Rate limit window reset (limit=%d)", self._limit)
