"""Pytest fixtures for chunkrag tests."""

from __future__ import annotations

import math
from collections.abc import AsyncIterator, Collection
from contextlib import asynccontextmanager
from dataclasses import replace
from datetime import UTC, datetime
from unittest.mock import AsyncMock

import pytest

from chunkrag.domain.entities import Chunk, ChunkForInsert
from chunkrag.domain.exceptions import NotFound


# --- Fake repositories ---


class FakeChunkRepository:
    """In-memory chunk repository keyed by content hash."""

    def __init__(self) -> None:
        self._by_hash: dict[str, Chunk] = {}
        self._next_id = 1
        self.upsert_batches: list[list[str]] = []

    @property
    def rows(self) -> list[Chunk]:
        return sorted(self._by_hash.values(), key=lambda c: c.id)

    def add(self, chunk: ChunkForInsert) -> Chunk:
        """Helper to seed a stored chunk directly (for tests)."""
        now = datetime.now(UTC)
        stored = Chunk(
            id=self._next_id,
            path=chunk.path,
            title=chunk.title,
            subtitle=chunk.subtitle,
            content=chunk.content,
            content_hash=chunk.content_hash,
            token_count=chunk.token_count,
            embedding=chunk.embedding,
            created_at=now,
            updated_at=now,
        )
        self._next_id += 1
        self._by_hash[stored.content_hash] = stored
        return stored

    async def upsert_many(self, chunks: list[ChunkForInsert]) -> list[Chunk]:
        self.upsert_batches.append([c.content_hash for c in chunks])
        result = []
        for c in chunks:
            existing = self._by_hash.get(c.content_hash)
            result.append(existing if existing is not None else self.add(c))
        return result

    async def set_embedding(self, chunk_id: int, embedding: list[float]) -> Chunk:
        for content_hash, chunk in self._by_hash.items():
            if chunk.id == chunk_id:
                updated = replace(chunk, embedding=list(embedding))
                self._by_hash[content_hash] = updated
                return updated
        raise NotFound(f"Chunk {chunk_id} not found")

    async def delete_extraneous(self, path: str, hashes: Collection[str]) -> int:
        stale = [
            h
            for h, c in self._by_hash.items()
            if c.path == path and h not in hashes
        ]
        for h in stale:
            del self._by_hash[h]
        return len(stale)

    async def nearest(self, embedding: list[float], limit: int) -> list[Chunk]:
        candidates = [c for c in self._by_hash.values() if c.embedding is not None]
        candidates.sort(key=lambda c: math.dist(c.embedding, embedding))
        return candidates[:limit]


# --- Fake UnitOfWork ---


class FakeUnitOfWork:
    """In-memory Unit of Work with fake repositories."""

    def __init__(self, chunks: FakeChunkRepository | None = None) -> None:
        self.chunks = chunks or FakeChunkRepository()
        self.commits = 0

    async def commit(self) -> None:
        self.commits += 1

    async def rollback(self) -> None:
        pass


def make_uow_factory(uow: FakeUnitOfWork):
    """Factory yielding the same FakeUnitOfWork on every call."""

    @asynccontextmanager
    async def _factory() -> AsyncIterator[FakeUnitOfWork]:
        yield uow
        await uow.commit()

    return _factory


class FakeTokenizer:
    """Counts whitespace-separated words as tokens."""

    def count(self, text: str) -> int:
        return len(text.split())


def make_chunk(
    chunk_id: int,
    content: str = "",
    token_count: int = 0,
    path: str = "docs/a.md",
    embedding: list[float] | None = None,
) -> Chunk:
    """Build a persisted chunk for tests that do not go through a store."""
    now = datetime.now(UTC)
    return Chunk(
        id=chunk_id,
        path=path,
        title=None,
        subtitle=None,
        content=content or f"chunk {chunk_id}",
        content_hash=f"{chunk_id:032x}",
        token_count=token_count,
        embedding=embedding,
        created_at=now,
        updated_at=now,
    )


# --- Fixtures ---


@pytest.fixture
def fake_uow() -> FakeUnitOfWork:
    """Fresh in-memory UnitOfWork for each test."""
    return FakeUnitOfWork()


@pytest.fixture
def uow_factory(fake_uow: FakeUnitOfWork):
    """Factory returning async context manager with the test's FakeUnitOfWork."""
    return make_uow_factory(fake_uow)


@pytest.fixture
def tokenizer() -> FakeTokenizer:
    return FakeTokenizer()


@pytest.fixture
def mock_embedding_provider():
    """AsyncMock for EmbeddingProvider - returns fixed vectors per text."""

    async def _embed(texts: list[str]) -> list[list[float]]:
        return [[0.1] * 1536 for _ in texts]

    mock = AsyncMock()
    mock.embed = AsyncMock(side_effect=_embed)
    return mock
