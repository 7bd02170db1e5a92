"""OpenAI-compatible streaming completion provider."""

from collections.abc import AsyncIterator

import openai
from openai import AsyncOpenAI

from chunkrag.application.dto.completion_dto import Message
from chunkrag.domain.exceptions import UpstreamServiceError
from chunkrag.infrastructure.embedding.openai_provider import error_payload


class OpenAICompletionProvider:
    """Chat completions streamed as text fragments."""

    def __init__(
        self,
        base_url: str,
        api_key: str,
        organization: str | None = None,
        temperature: float = 0.1,
        client: AsyncOpenAI | None = None,
    ) -> None:
        self._client = client or AsyncOpenAI(
            base_url=base_url, api_key=api_key, organization=organization
        )
        self._temperature = temperature

    async def stream(
        self,
        system: str,
        messages: list[Message],
        model: str,
        max_tokens: int,
    ) -> AsyncIterator[str]:
        """Yield content deltas. Upstream failures end the stream with UpstreamServiceError."""
        try:
            response = await self._client.chat.completions.create(
                model=model,
                temperature=self._temperature,
                max_tokens=max_tokens,
                messages=[
                    {"role": "system", "content": system},
                    *({"role": m.role, "content": m.content} for m in messages),
                ],
                stream=True,
            )
            async for chunk in response:
                if not chunk.choices:
                    continue
                content = chunk.choices[0].delta.content
                if content:
                    yield content
        except openai.OpenAIError as e:
            raise UpstreamServiceError(f"Completion failed: {e}", error=error_payload(e)) from e
