"""Embedding provider port - OpenAI compatible API."""

from typing import Protocol


class EmbeddingProvider(Protocol):
    """Port for generating text embeddings.

    Returns one vector per input, in input order.
    """

    async def embed(self, texts: list[str]) -> list[list[float]]: ...
