"""Domain entities."""

from chunkrag.domain.entities.chunk import Chunk, ChunkForInsert, ParsedChunk
from chunkrag.domain.entities.document import Document

__all__ = [
    "Chunk",
    "ChunkForInsert",
    "Document",
    "ParsedChunk",
]
