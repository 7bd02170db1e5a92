"""Context assembly - fills a token budget with the most relevant chunks."""

from typing import Protocol

from chunkrag.application.dto.completion_dto import ContextBundle
from chunkrag.application.ports import Tokenizer
from chunkrag.domain.entities import Chunk
from chunkrag.domain.exceptions import ContextBudgetError

DEFAULT_PREFIX = """You are a very enthusiastic documentation assistant who loves to help people!

Answer any questions in Markdown format, from the following documentation sections:
---"""

CHUNK_SEPARATOR = "\n\n--\n\n"

MIN_CONTEXT_TOKENS = 1000


class ChunkSearch(Protocol):
    async def search(self, query: str, limit: int | None = None) -> list[Chunk]: ...


class ContextAssembler:
    """Greedy, budget-bounded selection of ranked chunks."""

    def __init__(
        self,
        chunk_store: ChunkSearch,
        tokenizer: Tokenizer,
        *,
        default_prefix: str = DEFAULT_PREFIX,
        min_tokens: int = MIN_CONTEXT_TOKENS,
    ) -> None:
        self._chunk_store = chunk_store
        self._tokenizer = tokenizer
        self._default_prefix = default_prefix
        self._min_tokens = min_tokens

    async def generate(
        self,
        prompt: str,
        target_tokens: int,
        max_tokens: int,
        prefix: str | None = None,
    ) -> ContextBundle:
        """Build the context block for ``prompt``.

        The budget is ``target_tokens`` reduced by however far ``max_tokens``
        exceeds it. Candidates are taken in rank order until the first one
        that does not fit; later, smaller candidates are not considered.

        Raises
        ------
        ContextBudgetError
            If the budget is below the minimum usable context size.
        """
        if prefix is None:
            prefix = self._default_prefix
        overflow = max(0, max_tokens - target_tokens)
        budget = target_tokens - overflow
        if budget < self._min_tokens:
            raise ContextBudgetError(
                required_tokens=self._tokenizer.count(f"{prefix}\n\n{prompt}"),
                max_tokens=max_tokens,
                budget=budget,
            )

        candidates = await self._chunk_store.search(prompt)

        total = 0
        selected: list[Chunk] = []
        for chunk in candidates:
            if total + chunk.token_count > budget:
                break
            total += chunk.token_count
            selected.append(chunk)

        body = CHUNK_SEPARATOR.join(chunk.content.strip() for chunk in selected)
        return ContextBundle(
            chunks=selected,
            content=f"{prefix}\n\n{body}",
            token_count=total,
            budget=budget,
        )
