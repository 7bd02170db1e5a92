"""Domain value objects."""

from chunkrag.domain.value_objects.content_hash import ContentHash
from chunkrag.domain.value_objects.embedding import format_embedding, parse_embedding

__all__ = [
    "ContentHash",
    "format_embedding",
    "parse_embedding",
]
