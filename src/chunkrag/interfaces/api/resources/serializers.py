"""JSON shapes for API responses."""

from chunkrag.application.dto.completion_dto import ContextBundle
from chunkrag.application.dto.document_dto import IngestResult
from chunkrag.domain.entities import Chunk


def chunk_to_dict(chunk: Chunk) -> dict:
    return {
        "id": chunk.id,
        "path": chunk.path,
        "title": chunk.title,
        "subtitle": chunk.subtitle,
        "content": chunk.content,
        "content_hash": chunk.content_hash,
        "token_count": chunk.token_count,
        "has_embedding": chunk.embedding is not None,
        "created_at": chunk.created_at.isoformat(),
        "updated_at": chunk.updated_at.isoformat(),
    }


def ingest_result_to_dict(result: IngestResult) -> dict:
    return {
        "path": result.path,
        "ok": result.ok,
        "chunk_ids": [c.id for c in result.chunks],
        "pruned": result.pruned,
        "failures": [
            {
                "content_hash": f.content_hash,
                "title": f.title,
                "subtitle": f.subtitle,
                "error": f.error,
            }
            for f in result.failures
        ],
        "error": result.error,
    }


def bundle_to_dict(bundle: ContextBundle) -> dict:
    return {
        "content": bundle.content,
        "token_count": bundle.token_count,
        "budget": bundle.budget,
        "chunks": [chunk_to_dict(c) for c in bundle.chunks],
    }
