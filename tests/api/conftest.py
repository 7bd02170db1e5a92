"""Fixtures for API tests."""

import pytest
from falcon.testing import TestClient

from chunkrag.application.services.chunk_store import ChunkStore
from chunkrag.application.services.context_assembler import ContextAssembler
from chunkrag.application.services.embedding_coordinator import EmbeddingCoordinator
from chunkrag.application.use_cases.completion.answer_prompt import AnswerPromptUseCase
from chunkrag.application.use_cases.document.ingest_document import IngestDocumentUseCase
from chunkrag.domain.exceptions import UpstreamServiceError
from chunkrag.infrastructure.chunking.markdown_splitter import MarkdownSplitter
from chunkrag.interfaces.api.app import create_app
from chunkrag.interfaces.api.resources.completions import CompletionsResource
from chunkrag.interfaces.api.resources.context import ContextResource
from chunkrag.interfaces.api.resources.documents import (
    DocumentsBatchResource,
    DocumentsResource,
)
from chunkrag.interfaces.api.resources.health import HealthResource
from chunkrag.interfaces.api.resources.search import SearchResource

from tests.conftest import FakeTokenizer


class ScriptedCompletionProvider:
    """Streams fixed fragments; fails mid-stream when ``fail`` is set."""

    def __init__(self) -> None:
        self.fragments = ["Deploy ", "with ", "make."]
        self.fail = False

    async def stream(self, system, messages, model, max_tokens):
        for fragment in self.fragments:
            yield fragment
        if self.fail:
            raise UpstreamServiceError("Completion failed: stream reset")


@pytest.fixture
def completion_provider() -> ScriptedCompletionProvider:
    return ScriptedCompletionProvider()


@pytest.fixture
def app(uow_factory, mock_embedding_provider, completion_provider):
    """Falcon ASGI app wired to in-memory fakes."""
    embeddings = EmbeddingCoordinator(
        mock_embedding_provider, batch_window=0.01, retry_delay=0
    )
    chunk_store = ChunkStore(
        uow_factory, embeddings, upsert_window=0.01, embedding_dimensions=1536
    )
    tokenizer = FakeTokenizer()
    assembler = ContextAssembler(chunk_store, tokenizer)
    ingest_document = IngestDocumentUseCase(
        chunker=MarkdownSplitter(), tokenizer=tokenizer, chunk_store=chunk_store
    )
    answer_prompt = AnswerPromptUseCase(
        assembler,
        completion_provider,
        default_model="gpt-4-1106-preview",
        max_output_tokens=256,
        target_tokens=4000,
        max_tokens=4000,
    )
    return create_app(
        documents_resource=DocumentsResource(ingest_document),
        documents_batch_resource=DocumentsBatchResource(ingest_document),
        search_resource=SearchResource(chunk_store),
        context_resource=ContextResource(assembler, target_tokens=4000, max_tokens=4000),
        completions_resource=CompletionsResource(answer_prompt),
        health_resource=HealthResource(),
    )


@pytest.fixture
def client(app) -> TestClient:
    """Falcon ASGI test client."""
    return TestClient(app)
