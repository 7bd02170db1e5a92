"""Repository ports."""

from chunkrag.application.ports.repositories.chunk_repository import ChunkRepository

__all__ = [
    "ChunkRepository",
]
