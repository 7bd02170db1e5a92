"""Application ports - interfaces for external adapters."""

from chunkrag.application.ports.chunker import Chunker
from chunkrag.application.ports.completion_provider import CompletionProvider
from chunkrag.application.ports.embedding_provider import EmbeddingProvider
from chunkrag.application.ports.tokenizer import Tokenizer
from chunkrag.application.ports.unit_of_work import UnitOfWork, UnitOfWorkFactory

__all__ = [
    "Chunker",
    "CompletionProvider",
    "EmbeddingProvider",
    "Tokenizer",
    "UnitOfWork",
    "UnitOfWorkFactory",
]
