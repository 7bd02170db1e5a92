"""Ingest document use case."""

import asyncio
import logging

from chunkrag.application.dto.document_dto import ChunkFailure, IngestResult
from chunkrag.application.ports import Chunker, Tokenizer
from chunkrag.application.services.chunk_store import ChunkStore
from chunkrag.domain.entities import Chunk, ChunkForInsert, Document
from chunkrag.domain.exceptions import ChunkRAGError
from chunkrag.domain.value_objects import ContentHash

logger = logging.getLogger(__name__)


class IngestDocumentUseCase:
    """Split document, upsert chunks (dedup by content hash), embed, prune stale chunks."""

    def __init__(
        self,
        chunker: Chunker,
        tokenizer: Tokenizer,
        chunk_store: ChunkStore,
        concurrency: int = 20,
    ) -> None:
        self._chunker = chunker
        self._tokenizer = tokenizer
        self._chunk_store = chunk_store
        self._concurrency = concurrency

    async def execute(self, document: Document) -> IngestResult:
        """Ingest one document. Chunk failures are reported, not raised."""
        parsed = self._chunker.split(document.content)
        chunks = [
            ChunkForInsert(
                path=document.path,
                title=p.title,
                subtitle=p.subtitle,
                content=p.content,
                content_hash=ContentHash.of(p.content).value,
                token_count=self._tokenizer.count(p.content),
            )
            for p in parsed
        ]

        outcomes = await asyncio.gather(
            *(self._chunk_store.upsert(chunk) for chunk in chunks),
            return_exceptions=True,
        )

        result = IngestResult(path=document.path)
        for chunk, outcome in zip(chunks, outcomes, strict=True):
            if isinstance(outcome, Chunk):
                result.chunks.append(outcome)
                continue
            if not isinstance(outcome, Exception):
                raise outcome
            logger.warning(
                "Failed to ingest chunk %s of %s: %s",
                chunk.content_hash,
                document.path,
                outcome,
            )
            result.failures.append(
                ChunkFailure(
                    content_hash=chunk.content_hash,
                    title=chunk.title,
                    subtitle=chunk.subtitle,
                    error=str(outcome),
                )
            )

        result.pruned = await self._chunk_store.prune_extraneous(
            document.path, [c.content_hash for c in chunks]
        )
        return result

    async def execute_many(self, documents: list[Document]) -> list[IngestResult]:
        """Ingest documents with bounded concurrency, one result per document."""
        semaphore = asyncio.Semaphore(self._concurrency)

        async def _ingest(document: Document) -> IngestResult:
            async with semaphore:
                try:
                    return await self.execute(document)
                except ChunkRAGError as e:
                    logger.warning("Failed to ingest %s: %s", document.path, e)
                    return IngestResult(path=document.path, error=str(e))

        return await asyncio.gather(*(_ingest(d) for d in documents))
