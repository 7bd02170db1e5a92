"""Chunker port - splits raw document text into structural chunks."""

from typing import Protocol

from chunkrag.domain.entities import ParsedChunk


class Chunker(Protocol):
    """Port for splitting text into chunks."""

    def split(self, content: str) -> list[ParsedChunk]: ...
