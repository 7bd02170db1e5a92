"""Chunk store - deduplicated persistence, embedding generation and search."""

import logging
from collections.abc import Collection

from chunkrag.application.ports import UnitOfWorkFactory
from chunkrag.application.services.batch_loader import BatchLoader
from chunkrag.application.services.embedding_coordinator import EmbeddingCoordinator
from chunkrag.domain.entities import Chunk, ChunkForInsert
from chunkrag.domain.exceptions import EmbeddingDimensionError, RepositoryError

logger = logging.getLogger(__name__)


class ChunkStore:
    """Persists chunks keyed by content hash and retrieves them by similarity.

    Upserts arriving within ``upsert_window`` seconds are written with one
    multi-row insert of at most ``max_upsert_batch_size`` rows. A chunk whose
    hash is already stored comes back unchanged, with its existing id and
    embedding. If the multi-row insert fails, each row is retried on its own
    so only the rows that fail again are reported to their callers.
    """

    def __init__(
        self,
        unit_of_work_factory: UnitOfWorkFactory,
        embeddings: EmbeddingCoordinator,
        *,
        upsert_window: float = 0.5,
        max_upsert_batch_size: int = 1000,
        search_limit: int = 35,
        embedding_dimensions: int | None = None,
    ) -> None:
        self._uow_factory = unit_of_work_factory
        self._embeddings = embeddings
        self._search_limit = search_limit
        self._dimensions = embedding_dimensions
        self._upserts: BatchLoader[ChunkForInsert, Chunk | RepositoryError] = BatchLoader(
            self._insert_batch,
            window=upsert_window,
            max_batch_size=max_upsert_batch_size,
            name="chunks.upsert",
        )

    async def upsert(self, chunk: ChunkForInsert) -> Chunk:
        """Persist ``chunk`` (or find its existing row) and make sure it has an embedding."""
        stored = await self._upserts.load(chunk)
        if isinstance(stored, RepositoryError):
            raise stored
        if stored.embedding is not None:
            return stored

        logger.info("Generating embeddings for chunk %d (%s)", stored.id, stored.path)
        embedding = await self._embeddings.batched(stored.content)
        self._check_dimensions(embedding)
        async with self._uow_factory() as uow:
            return await uow.chunks.set_embedding(stored.id, embedding)

    async def prune_extraneous(self, path: str, hashes: Collection[str]) -> int:
        """Delete chunks of ``path`` whose hash is not in ``hashes``."""
        async with self._uow_factory() as uow:
            deleted = await uow.chunks.delete_extraneous(path, set(hashes))
        if deleted:
            logger.info("Pruned %d stale chunks of %s", deleted, path)
        return deleted

    async def search(self, query: str, limit: int | None = None) -> list[Chunk]:
        """Chunks nearest to ``query``, most similar first."""
        embedding = await self._embeddings.single(query)
        self._check_dimensions(embedding)
        async with self._uow_factory() as uow:
            return await uow.chunks.nearest(embedding, limit or self._search_limit)

    async def close(self) -> None:
        await self._upserts.close()

    async def _insert_batch(
        self, chunks: list[ChunkForInsert]
    ) -> list[Chunk | RepositoryError]:
        # One row per hash; ON CONFLICT cannot touch the same row twice.
        unique: dict[str, ChunkForInsert] = {}
        for chunk in chunks:
            unique.setdefault(chunk.content_hash, chunk)
        rows = list(unique.values())
        by_hash: dict[str, Chunk | RepositoryError]
        try:
            async with self._uow_factory() as uow:
                stored = await uow.chunks.upsert_many(rows)
            by_hash = {c.content_hash: c for c in stored}
        except RepositoryError as e:
            if len(rows) == 1:
                raise
            logger.warning(
                "Upsert of %d chunks failed, retrying row by row: %s", len(rows), e
            )
            by_hash = {}
            for row in rows:
                by_hash[row.content_hash] = await self._insert_one(row)
        return [by_hash[chunk.content_hash] for chunk in chunks]

    async def _insert_one(self, chunk: ChunkForInsert) -> Chunk | RepositoryError:
        try:
            async with self._uow_factory() as uow:
                (stored,) = await uow.chunks.upsert_many([chunk])
        except RepositoryError as e:
            return e
        return stored

    def _check_dimensions(self, embedding: list[float]) -> None:
        if self._dimensions is not None and len(embedding) != self._dimensions:
            raise EmbeddingDimensionError(self._dimensions, len(embedding))
