"""Chunk repository port."""

from collections.abc import Collection
from typing import Protocol

from chunkrag.domain.entities import Chunk, ChunkForInsert


class ChunkRepository(Protocol):
    """Port for chunk persistence and nearest-neighbour lookup."""

    async def upsert_many(self, chunks: list[ChunkForInsert]) -> list[Chunk]: ...

    async def set_embedding(self, chunk_id: int, embedding: list[float]) -> Chunk: ...

    async def delete_extraneous(self, path: str, hashes: Collection[str]) -> int: ...

    async def nearest(self, embedding: list[float], limit: int) -> list[Chunk]: ...
