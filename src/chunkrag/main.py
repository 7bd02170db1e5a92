"""Application entry point and composition root."""

import logging

import falcon

from chunkrag import __version__
from chunkrag.application.services.chunk_store import ChunkStore
from chunkrag.application.services.context_assembler import ContextAssembler
from chunkrag.application.services.embedding_coordinator import EmbeddingCoordinator
from chunkrag.application.services.rate_limiter import RateLimiter
from chunkrag.application.use_cases.completion.answer_prompt import AnswerPromptUseCase
from chunkrag.application.use_cases.document.ingest_document import IngestDocumentUseCase
from chunkrag.config import get_settings
from chunkrag.infrastructure.chunking.markdown_splitter import MarkdownSplitter
from chunkrag.infrastructure.completion.openai_provider import OpenAICompletionProvider
from chunkrag.infrastructure.embedding.openai_provider import OpenAIEmbeddingProvider
from chunkrag.infrastructure.persistence.postgres.connection import (
    check_connection,
    create_pool,
)
from chunkrag.infrastructure.persistence.postgres.unit_of_work import (
    create_uow_factory,
)
from chunkrag.infrastructure.tokenizer.tiktoken_tokenizer import TiktokenTokenizer
from chunkrag.interfaces.api.app import create_app
from chunkrag.interfaces.api.middleware.pool_lifespan import PoolLifespanMiddleware
from chunkrag.interfaces.api.resources.completions import CompletionsResource
from chunkrag.interfaces.api.resources.context import ContextResource
from chunkrag.interfaces.api.resources.documents import (
    DocumentsBatchResource,
    DocumentsResource,
)
from chunkrag.interfaces.api.resources.health import HealthResource
from chunkrag.interfaces.api.resources.search import SearchResource
from chunkrag.logging_config import configure_logging

logger = logging.getLogger(__name__)


def main() -> None:
    """CLI entry point."""
    run_server()


def create_chunkrag_app():
    """Composition root - build Falcon app with all dependencies."""
    settings = get_settings()
    configure_logging(settings.log_level)
    logger.info("ChunkRAG v%s starting (%s)", __version__, settings.environment)

    pool = create_pool(settings.database_url)
    uow_factory = create_uow_factory(pool)

    rate_limiter = RateLimiter(
        limit=settings.embedding_rate_limit,
        window=settings.embedding_rate_window_seconds,
    )
    embedding_provider = OpenAIEmbeddingProvider(
        base_url=settings.openai_api_url,
        api_key=settings.openai_api_key,
        model=settings.embedding_model,
        organization=settings.openai_organization,
    )
    completion_provider = OpenAICompletionProvider(
        base_url=settings.openai_api_url,
        api_key=settings.openai_api_key,
        organization=settings.openai_organization,
    )
    embeddings = EmbeddingCoordinator(
        embedding_provider,
        rate_limiter=rate_limiter,
        cache_capacity=settings.embedding_cache_capacity,
        cache_ttl=settings.embedding_cache_ttl_seconds,
        batch_window=settings.embedding_batch_window_seconds,
        max_batch_size=settings.embedding_max_batch_size,
        max_attempts=settings.embedding_retry_attempts,
        retry_delay=settings.embedding_retry_delay_seconds,
    )
    chunk_store = ChunkStore(
        uow_factory,
        embeddings,
        upsert_window=settings.chunk_upsert_window_seconds,
        max_upsert_batch_size=settings.chunk_upsert_max_batch_size,
        search_limit=settings.search_limit,
        embedding_dimensions=settings.embedding_dimensions,
    )
    tokenizer = TiktokenTokenizer()
    context_assembler = ContextAssembler(chunk_store, tokenizer)

    ingest_document = IngestDocumentUseCase(
        chunker=MarkdownSplitter(),
        tokenizer=tokenizer,
        chunk_store=chunk_store,
        concurrency=settings.ingest_concurrency,
    )
    answer_prompt = AnswerPromptUseCase(
        context_assembler,
        completion_provider,
        default_model=settings.completion_model,
        max_output_tokens=settings.completion_max_tokens,
        target_tokens=settings.context_target_tokens,
        max_tokens=settings.context_max_tokens,
    )

    async def ready() -> bool:
        return await check_connection(pool)

    app = create_app(
        documents_resource=DocumentsResource(ingest_document),
        documents_batch_resource=DocumentsBatchResource(ingest_document),
        search_resource=SearchResource(chunk_store),
        context_resource=ContextResource(
            context_assembler,
            target_tokens=settings.context_target_tokens,
            max_tokens=settings.context_max_tokens,
        ),
        completions_resource=CompletionsResource(answer_prompt),
        health_resource=HealthResource(ready_check=ready),
        middleware=[
            PoolLifespanMiddleware(
                pool,
                on_shutdown=[chunk_store.close, embeddings.close, rate_limiter.close],
            ),
        ],
    )

    async def log_exception(req, resp, ex, params):
        logger.error("Unhandled error on %s %s", req.method, req.path, exc_info=ex)
        resp.status = falcon.HTTP_500
        resp.media = {"title": "500 Internal Server Error"}

    app.add_error_handler(Exception, log_exception)
    return app


def run_server() -> None:
    """Run uvicorn server."""
    import uvicorn

    app = create_chunkrag_app()
    uvicorn.run(app, host="0.0.0.0", port=8000)
