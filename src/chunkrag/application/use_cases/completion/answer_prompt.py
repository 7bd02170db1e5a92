"""Answer prompt use case - retrieval-augmented streaming completion."""

from collections.abc import AsyncIterator

from chunkrag.application.dto.completion_dto import CompletionRequest, ContextBundle
from chunkrag.application.ports import CompletionProvider
from chunkrag.application.services.context_assembler import ContextAssembler
from chunkrag.domain.exceptions import ValidationError


class AnswerPromptUseCase:
    """Assemble context for the latest user message and stream the completion."""

    def __init__(
        self,
        context_assembler: ContextAssembler,
        completion_provider: CompletionProvider,
        *,
        default_model: str,
        max_output_tokens: int,
        target_tokens: int,
        max_tokens: int,
    ) -> None:
        self._assembler = context_assembler
        self._completions = completion_provider
        self._default_model = default_model
        self._max_output_tokens = max_output_tokens
        self._target_tokens = target_tokens
        self._max_tokens = max_tokens

    async def execute(
        self, request: CompletionRequest
    ) -> tuple[ContextBundle, AsyncIterator[str]]:
        """Return the context used and the stream of generated text.

        Budget and retrieval errors surface here, before any text is streamed.
        """
        prompt = request.prompt
        if not prompt.strip():
            raise ValidationError("Completion request has no user message")

        bundle = await self._assembler.generate(
            prompt=prompt,
            target_tokens=self._target_tokens,
            max_tokens=self._max_tokens,
            prefix=request.prefix,
        )
        stream = self._completions.stream(
            system=bundle.content,
            messages=request.messages,
            model=request.model or self._default_model,
            max_tokens=self._max_output_tokens,
        )
        return bundle, stream
