"""Chunk entity - titled slice of a source document."""

from dataclasses import dataclass
from datetime import datetime


@dataclass
class ParsedChunk:
    """Chunk as produced by a splitter, before it is tied to a document."""

    title: str | None
    subtitle: str | None
    content: str


@dataclass
class ChunkForInsert:
    """Chunk ready for persistence; identity is assigned by the store."""

    path: str
    title: str | None
    subtitle: str | None
    content: str
    content_hash: str
    token_count: int
    embedding: list[float] | None = None


@dataclass
class Chunk:
    """Persisted chunk. ``embedding`` stays None until it has been generated."""

    id: int
    path: str
    title: str | None
    subtitle: str | None
    content: str
    content_hash: str
    token_count: int
    embedding: list[float] | None
    created_at: datetime
    updated_at: datetime
