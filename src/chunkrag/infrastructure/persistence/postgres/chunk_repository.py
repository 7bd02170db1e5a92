"""PostgreSQL chunk repository implementation (pgvector)."""

from collections.abc import Collection, Iterator
from contextlib import contextmanager

import psycopg
from psycopg import AsyncConnection

from chunkrag.domain.entities import Chunk, ChunkForInsert
from chunkrag.domain.exceptions import NotFound, RepositoryError
from chunkrag.domain.value_objects import format_embedding, parse_embedding

_COLUMNS = (
    "id, path, title, subtitle, content, content_hash, token_count, "
    "embedding::text, created_at, updated_at"
)

_INSERT_ROW = "(%s, %s, %s, %s, %s, %s, %s::vector, now(), now())"


@contextmanager
def _translate_errors(method: str) -> Iterator[None]:
    """Wrap driver errors as RepositoryError tagged with the failing method."""
    try:
        yield
    except psycopg.Error as e:
        raise RepositoryError(method, e) from e


def _row_to_chunk(r: tuple) -> Chunk:
    return Chunk(
        id=r[0],
        path=r[1],
        title=r[2],
        subtitle=r[3],
        content=r[4],
        content_hash=r[5],
        token_count=r[6],
        embedding=parse_embedding(r[7]) if r[7] is not None else None,
        created_at=r[8],
        updated_at=r[9],
    )


class PostgresChunkRepository:
    """Chunk repository with content-hash conflict key and vector search."""

    def __init__(self, conn: AsyncConnection) -> None:
        self._conn = conn

    async def upsert_many(self, chunks: list[ChunkForInsert]) -> list[Chunk]:
        """Insert chunks; rows whose content_hash already exists are returned unchanged."""
        if not chunks:
            return []
        params: list[object] = []
        for c in chunks:
            params.extend(
                (
                    c.path,
                    c.title,
                    c.subtitle,
                    c.content,
                    c.content_hash,
                    c.token_count,
                    format_embedding(c.embedding) if c.embedding is not None else None,
                )
            )
        values = ", ".join([_INSERT_ROW] * len(chunks))
        with _translate_errors("upsert_many"):
            cur = await self._conn.execute(
                "INSERT INTO document_chunk "
                "(path, title, subtitle, content, content_hash, token_count, embedding, "
                "created_at, updated_at) "
                f"VALUES {values} "
                "ON CONFLICT (content_hash) DO UPDATE "
                "SET content_hash = EXCLUDED.content_hash "
                f"RETURNING {_COLUMNS}",
                params,
            )
            rows = await cur.fetchall()
        return [_row_to_chunk(r) for r in rows]

    async def set_embedding(self, chunk_id: int, embedding: list[float]) -> Chunk:
        """Store embedding for chunk and return the updated row."""
        with _translate_errors("set_embedding"):
            cur = await self._conn.execute(
                "UPDATE document_chunk SET embedding = %s::vector, updated_at = now() "
                f"WHERE id = %s RETURNING {_COLUMNS}",
                (format_embedding(embedding), chunk_id),
            )
            row = await cur.fetchone()
        if row is None:
            raise NotFound(f"Chunk {chunk_id} not found")
        return _row_to_chunk(row)

    async def delete_extraneous(self, path: str, hashes: Collection[str]) -> int:
        """Delete chunks of path whose hash is not in hashes. Returns deleted count."""
        with _translate_errors("delete_extraneous"):
            cur = await self._conn.execute(
                "DELETE FROM document_chunk "
                "WHERE path = %s AND NOT (content_hash = ANY(%s))",
                (path, list(hashes)),
            )
        return cur.rowcount

    async def nearest(self, embedding: list[float], limit: int) -> list[Chunk]:
        """k nearest chunks by L2 distance, closest first. Unembedded chunks are skipped."""
        with _translate_errors("nearest"):
            cur = await self._conn.execute(
                f"SELECT {_COLUMNS} FROM document_chunk "
                "WHERE embedding IS NOT NULL "
                "ORDER BY embedding <-> %s::vector "
                "LIMIT %s",
                (format_embedding(embedding), limit),
            )
            rows = await cur.fetchall()
        return [_row_to_chunk(r) for r in rows]
