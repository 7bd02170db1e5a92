"""OpenAI-compatible embedding provider."""

import openai
from openai import AsyncOpenAI

from chunkrag.domain.exceptions import UpstreamServiceError


def error_payload(error: openai.OpenAIError) -> object:
    """API error body if the server returned one, otherwise the exception."""
    body = getattr(error, "body", None)
    if isinstance(body, dict) and "error" in body:
        return body["error"]
    return body if body is not None else error


class OpenAIEmbeddingProvider:
    """Embedding provider using OpenAI-compatible API."""

    def __init__(
        self,
        base_url: str,
        api_key: str,
        model: str,
        organization: str | None = None,
        client: AsyncOpenAI | None = None,
    ) -> None:
        self._client = client or AsyncOpenAI(
            base_url=base_url, api_key=api_key, organization=organization
        )
        self._model = model

    async def embed(self, texts: list[str]) -> list[list[float]]:
        """Generate embeddings for texts, ordered like the input."""
        if not texts:
            return []
        try:
            response = await self._client.embeddings.create(
                model=self._model,
                input=texts,
            )
        except openai.OpenAIError as e:
            raise UpstreamServiceError(f"Embedding request failed: {e}", error=error_payload(e)) from e
        data = sorted(response.data, key=lambda d: d.index)
        return [d.embedding for d in data]
