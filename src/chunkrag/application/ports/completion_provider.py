"""Completion provider port - streaming chat completions."""

from collections.abc import AsyncIterator
from typing import Protocol

from chunkrag.application.dto.completion_dto import Message


class CompletionProvider(Protocol):
    """Port for streaming text generation."""

    def stream(
        self,
        system: str,
        messages: list[Message],
        model: str,
        max_tokens: int,
    ) -> AsyncIterator[str]: ...
