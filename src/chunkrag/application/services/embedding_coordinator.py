"""Embedding request coordination - caching, coalescing and batching."""

import asyncio
import logging
from functools import partial

from tenacity import (
    AsyncRetrying,
    before_sleep_log,
    stop_after_attempt,
    wait_fixed,
)

from chunkrag.application.ports import EmbeddingProvider
from chunkrag.application.services.batch_loader import BatchLoader
from chunkrag.application.services.rate_limiter import RateLimiter
from chunkrag.application.services.request_cache import RequestCache
from chunkrag.domain.exceptions import UpstreamServiceError

logger = logging.getLogger(__name__)


class EmbeddingCoordinator:
    """Front for a batch-capable embedding provider.

    ``single`` serves latency-sensitive lookups: results are cached by exact
    input, and lookups arriving while a call is in flight are coalesced into
    the next call. ``batched`` serves bulk ingestion: requests are collected
    for ``batch_window`` seconds and sent as one call, without caching.

    Both paths share one batch executor. A batch is retried as a whole and
    either every request in it succeeds or every request fails with the same
    error.
    """

    def __init__(
        self,
        provider: EmbeddingProvider,
        *,
        rate_limiter: RateLimiter | None = None,
        cache_capacity: int = 5000,
        cache_ttl: float = 24 * 60 * 60,
        batch_window: float = 0.5,
        max_batch_size: int | None = 2048,
        max_attempts: int = 3,
        retry_delay: float = 0.1,
    ) -> None:
        self._provider = provider
        self._rate_limiter = rate_limiter
        self._max_attempts = max_attempts
        self._retry_delay = retry_delay
        self._cache: RequestCache[str, asyncio.Future[list[float]]] = RequestCache(
            capacity=cache_capacity, ttl=cache_ttl
        )
        self._immediate: BatchLoader[str, list[float]] = BatchLoader(
            self._create_embeddings,
            window=None,
            max_batch_size=max_batch_size,
            name="embeddings.single",
        )
        self._windowed: BatchLoader[str, list[float]] = BatchLoader(
            self._create_embeddings,
            window=batch_window,
            max_batch_size=max_batch_size,
            name="embeddings.batched",
        )

    async def single(self, text: str) -> list[float]:
        """Embed one text, served from cache when possible."""
        future = self._cache.get(text)
        if future is None:
            future = self._immediate.submit(text)
            self._cache.set(text, future)
            future.add_done_callback(partial(self._evict_failed, text))
        # Shielded: the cached future is shared with other callers.
        return await asyncio.shield(future)

    async def batched(self, text: str) -> list[float]:
        """Embed one text as part of the current debounce window."""
        return await self._windowed.load(text)

    async def close(self) -> None:
        await self._immediate.close()
        await self._windowed.close()
        self._cache.clear()

    def _evict_failed(self, text: str, future: asyncio.Future[list[float]]) -> None:
        if future.cancelled() or future.exception() is not None:
            self._cache.invalidate(text, future)

    async def _create_embeddings(self, texts: list[str]) -> list[list[float]]:
        try:
            async for attempt in AsyncRetrying(
                stop=stop_after_attempt(self._max_attempts),
                wait=wait_fixed(self._retry_delay),
                before_sleep=before_sleep_log(logger, logging.WARNING),
                reraise=True,
            ):
                with attempt:
                    if self._rate_limiter is not None:
                        await self._rate_limiter.acquire()
                    embeddings = await self._provider.embed(texts)
                    if len(embeddings) != len(texts):
                        raise UpstreamServiceError(
                            f"Expected {len(texts)} embeddings, got {len(embeddings)}"
                        )
                    return embeddings
        except UpstreamServiceError:
            raise
        except Exception as e:
            raise UpstreamServiceError(f"Embedding request failed: {e}", error=e) from e
