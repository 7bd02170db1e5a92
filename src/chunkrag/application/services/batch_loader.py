"""Request batching - coalesces concurrent loads into one batch call.

Two flush policies:

- ``window=None``: flush on the next loop iteration. While a batch is in
  flight, new requests accumulate and are flushed together as soon as it
  completes.
- ``window=<seconds>``: the first request of an empty buffer starts a timer;
  everything submitted before it fires goes out as one batch. Reaching
  ``max_batch_size`` flushes early.

The buffer is swapped out before dispatch, so a request submitted after a
flush always lands in the next batch. Requests whose caller has already
given up (cancelled future) are dropped at flush time.
"""

import asyncio
import logging
from collections.abc import Awaitable, Callable, Sequence
from typing import Generic, TypeVar

logger = logging.getLogger(__name__)

K = TypeVar("K")
V = TypeVar("V")


class BatchLoader(Generic[K, V]):
    """Collects keys and resolves them with a single batch function call.

    ``resolve`` receives the keys in submission order and must return one
    value per key in the same order. If it raises, every request in the batch
    fails with that exception.
    """

    def __init__(
        self,
        resolve: Callable[[list[K]], Awaitable[Sequence[V]]],
        *,
        window: float | None = None,
        max_batch_size: int | None = None,
        name: str = "batch",
    ) -> None:
        if window is not None and window < 0:
            raise ValueError("window must be non-negative")
        if max_batch_size is not None and max_batch_size < 1:
            raise ValueError("max_batch_size must be at least 1")
        self._resolve = resolve
        self._window = window
        self._max_batch_size = max_batch_size
        self._name = name
        self._pending: list[tuple[K, asyncio.Future[V]]] = []
        self._handle: asyncio.Handle | None = None
        self._in_flight = 0
        self._tasks: set[asyncio.Task[None]] = set()

    @property
    def pending(self) -> int:
        return len(self._pending)

    def submit(self, key: K) -> asyncio.Future[V]:
        """Queue ``key`` and return the future its value will be set on."""
        loop = asyncio.get_running_loop()
        future: asyncio.Future[V] = loop.create_future()
        self._pending.append((key, future))
        if (
            self._window is not None
            and self._max_batch_size is not None
            and len(self._pending) >= self._max_batch_size
        ):
            self._flush()
        else:
            self._schedule(loop)
        return future

    async def load(self, key: K) -> V:
        return await self.submit(key)

    async def close(self) -> None:
        """Cancel the pending flush and any batch still in flight."""
        if self._handle is not None:
            self._handle.cancel()
            self._handle = None
        for _, future in self._pending:
            future.cancel()
        self._pending = []
        tasks = list(self._tasks)
        for task in tasks:
            task.cancel()
        if tasks:
            await asyncio.gather(*tasks, return_exceptions=True)

    def _schedule(self, loop: asyncio.AbstractEventLoop) -> None:
        if self._handle is not None:
            return
        if self._window is None:
            if self._in_flight:
                return
            self._handle = loop.call_soon(self._flush)
        else:
            self._handle = loop.call_later(self._window, self._flush)

    def _flush(self) -> None:
        if self._handle is not None:
            self._handle.cancel()
            self._handle = None
        batch = [(key, future) for key, future in self._pending if not future.done()]
        self._pending = []
        if not batch:
            return
        size = self._max_batch_size or len(batch)
        loop = asyncio.get_running_loop()
        for start in range(0, len(batch), size):
            self._in_flight += 1
            task = loop.create_task(self._dispatch(batch[start : start + size]))
            self._tasks.add(task)
            task.add_done_callback(self._tasks.discard)

    async def _dispatch(self, batch: list[tuple[K, asyncio.Future[V]]]) -> None:
        logger.debug("Dispatching %s batch of %d", self._name, len(batch))
        try:
            results = await self._resolve([key for key, _ in batch])
            if len(results) != len(batch):
                raise ValueError(
                    f"{self._name} resolver returned {len(results)} results "
                    f"for {len(batch)} requests"
                )
        except asyncio.CancelledError:
            for _, future in batch:
                future.cancel()
            raise
        except Exception as exc:
            logger.warning(
                "%s batch of %d failed: %s", self._name, len(batch), exc
            )
            for _, future in batch:
                if not future.done():
                    future.set_exception(exc)
        else:
            for (_, future), result in zip(batch, results, strict=True):
                if not future.done():
                    future.set_result(result)
        finally:
            self._in_flight -= 1
            if self._window is None and self._pending and not self._in_flight:
                self._flush()
