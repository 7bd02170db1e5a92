"""Completion DTOs."""

from dataclasses import dataclass, field
from typing import Literal

from chunkrag.domain.entities import Chunk


@dataclass(frozen=True)
class Message:
    """Single chat message."""

    role: Literal["user", "assistant"]
    content: str


@dataclass
class CompletionRequest:
    """Input for a retrieval-augmented completion."""

    messages: list[Message]
    model: str | None = None
    prefix: str | None = None

    @property
    def prompt(self) -> str:
        """Latest user message; used as the retrieval query."""
        for message in reversed(self.messages):
            if message.role == "user":
                return message.content
        return ""


@dataclass
class ContextBundle:
    """Chunks selected for a prompt and the assembled context text."""

    chunks: list[Chunk] = field(default_factory=list)
    content: str = ""
    token_count: int = 0
    budget: int = 0
