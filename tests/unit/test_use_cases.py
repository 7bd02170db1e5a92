"""Unit tests for use cases."""

import asyncio
from unittest.mock import AsyncMock

import pytest

from chunkrag.application.dto.completion_dto import (
    CompletionRequest,
    ContextBundle,
    Message,
)
from chunkrag.application.services.chunk_store import ChunkStore
from chunkrag.application.services.embedding_coordinator import EmbeddingCoordinator
from chunkrag.application.use_cases.completion.answer_prompt import AnswerPromptUseCase
from chunkrag.application.use_cases.document.ingest_document import IngestDocumentUseCase
from chunkrag.domain.entities import Document
from chunkrag.domain.exceptions import ValidationError
from chunkrag.domain.value_objects import ContentHash
from chunkrag.infrastructure.chunking.markdown_splitter import MarkdownSplitter

from tests.conftest import FakeTokenizer, make_chunk

GUIDE = "# Guide\nintro text\n## Install\nrun the installer\n## Use\ncall the api"


class FlakyEmbeddingProvider:
    """Fails for texts containing ``fail``; records every call."""

    def __init__(self) -> None:
        self.calls: list[list[str]] = []

    async def embed(self, texts: list[str]) -> list[list[float]]:
        self.calls.append(list(texts))
        if any("fail" in t for t in texts):
            raise RuntimeError("embedding endpoint unavailable")
        return [[0.5, 0.5] for _ in texts]


def _ingest(uow_factory, provider) -> tuple[IngestDocumentUseCase, ChunkStore]:
    embeddings = EmbeddingCoordinator(
        provider, batch_window=0.01, max_attempts=1, retry_delay=0
    )
    store = ChunkStore(uow_factory, embeddings, upsert_window=0.01)
    use_case = IngestDocumentUseCase(
        chunker=MarkdownSplitter(),
        tokenizer=FakeTokenizer(),
        chunk_store=store,
        concurrency=2,
    )
    return use_case, store


# --- IngestDocumentUseCase ---


@pytest.mark.asyncio
async def test_ingest_stores_embedded_chunks(uow_factory, fake_uow) -> None:
    provider = FlakyEmbeddingProvider()
    use_case, store = _ingest(uow_factory, provider)

    result = await use_case.execute(Document(path="docs/guide.md", content=GUIDE))

    assert result.ok
    assert [c.subtitle for c in result.chunks] == [None, "Install", "Use"]
    assert all(c.embedding == [0.5, 0.5] for c in fake_uow.chunks.rows)
    stored = fake_uow.chunks.rows[1]
    assert stored.content_hash == ContentHash.of("run the installer").value
    assert stored.token_count == 3
    assert stored.title == "Guide"
    assert len(provider.calls) == 1
    await store.close()


@pytest.mark.asyncio
async def test_reingesting_unchanged_document_is_idempotent(uow_factory, fake_uow) -> None:
    provider = FlakyEmbeddingProvider()
    use_case, store = _ingest(uow_factory, provider)
    document = Document(path="docs/guide.md", content=GUIDE)

    first = await use_case.execute(document)
    second = await use_case.execute(document)

    assert [c.id for c in first.chunks] == [c.id for c in second.chunks]
    assert second.pruned == 0
    assert len(fake_uow.chunks.rows) == 3
    assert len(provider.calls) == 1
    await store.close()


@pytest.mark.asyncio
async def test_reingest_prunes_removed_sections(uow_factory, fake_uow) -> None:
    provider = FlakyEmbeddingProvider()
    use_case, store = _ingest(uow_factory, provider)
    await use_case.execute(Document(path="docs/guide.md", content=GUIDE))

    edited = "# Guide\nintro text\n## Use\ncall the api v2"
    result = await use_case.execute(Document(path="docs/guide.md", content=edited))

    assert result.pruned == 2
    assert sorted(c.content for c in fake_uow.chunks.rows) == [
        "call the api v2",
        "intro text",
    ]
    await store.close()


@pytest.mark.asyncio
async def test_chunk_failures_are_reported(uow_factory, fake_uow) -> None:
    provider = FlakyEmbeddingProvider()
    use_case, store = _ingest(uow_factory, provider)

    result = await use_case.execute(
        Document(path="docs/bad.md", content="# Bad\nthis will fail")
    )

    assert not result.ok
    assert len(result.failures) == 1
    assert result.failures[0].title == "Bad"
    assert "embedding endpoint unavailable" in result.failures[0].error
    # Row is kept without an embedding; the next ingest retries it.
    assert fake_uow.chunks.rows[0].embedding is None
    await store.close()


@pytest.mark.asyncio
async def test_execute_many_returns_result_per_document(uow_factory) -> None:
    provider = FlakyEmbeddingProvider()
    use_case, store = _ingest(uow_factory, provider)
    documents = [
        Document(path="docs/a.md", content="# A\nalpha"),
        Document(path="docs/b.md", content="# B\nbeta"),
        Document(path="docs/c.md", content="# C\ngamma"),
    ]

    results = await use_case.execute_many(documents)

    assert [r.path for r in results] == ["docs/a.md", "docs/b.md", "docs/c.md"]
    assert all(r.ok for r in results)
    await store.close()


# --- AnswerPromptUseCase ---


class FakeCompletionProvider:
    def __init__(self, fragments: list[str]) -> None:
        self.fragments = fragments
        self.calls: list[dict] = []

    async def stream(self, system, messages, model, max_tokens):
        self.calls.append(
            {"system": system, "messages": messages, "model": model, "max_tokens": max_tokens}
        )
        for fragment in self.fragments:
            await asyncio.sleep(0)
            yield fragment


def _answer(bundle: ContextBundle, provider: FakeCompletionProvider):
    assembler = AsyncMock()
    assembler.generate = AsyncMock(return_value=bundle)
    use_case = AnswerPromptUseCase(
        assembler,
        provider,
        default_model="gpt-4-1106-preview",
        max_output_tokens=1024,
        target_tokens=4000,
        max_tokens=4000,
    )
    return use_case, assembler


@pytest.mark.asyncio
async def test_answer_streams_completion_with_context() -> None:
    bundle = ContextBundle(chunks=[make_chunk(7)], content="PREFIX\n\nchunk 7", token_count=2)
    provider = FakeCompletionProvider(["Hel", "lo"])
    use_case, assembler = _answer(bundle, provider)
    messages = [
        Message(role="user", content="first question"),
        Message(role="assistant", content="first answer"),
        Message(role="user", content="follow up"),
    ]

    context, stream = await use_case.execute(CompletionRequest(messages=messages))
    text = "".join([fragment async for fragment in stream])

    assert context is bundle
    assert text == "Hello"
    assembler.generate.assert_awaited_once_with(
        prompt="follow up", target_tokens=4000, max_tokens=4000, prefix=None
    )
    assert provider.calls == [
        {
            "system": "PREFIX\n\nchunk 7",
            "messages": messages,
            "model": "gpt-4-1106-preview",
            "max_tokens": 1024,
        }
    ]


@pytest.mark.asyncio
async def test_answer_uses_requested_model() -> None:
    provider = FakeCompletionProvider([])
    use_case, _ = _answer(ContextBundle(), provider)

    _, stream = await use_case.execute(
        CompletionRequest(messages=[Message(role="user", content="q")], model="gpt-4o")
    )
    assert [f async for f in stream] == []
    assert provider.calls[0]["model"] == "gpt-4o"


@pytest.mark.asyncio
async def test_answer_requires_user_message() -> None:
    use_case, assembler = _answer(ContextBundle(), FakeCompletionProvider([]))

    with pytest.raises(ValidationError):
        await use_case.execute(
            CompletionRequest(messages=[Message(role="assistant", content="hi")])
        )
    assembler.generate.assert_not_awaited()
