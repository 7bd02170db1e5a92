"""Document DTOs."""

from dataclasses import dataclass, field

from chunkrag.domain.entities import Chunk


@dataclass
class ChunkFailure:
    """A chunk that could not be persisted or embedded."""

    content_hash: str
    title: str | None
    subtitle: str | None
    error: str


@dataclass
class IngestResult:
    """Outcome of ingesting one document."""

    path: str
    chunks: list[Chunk] = field(default_factory=list)
    failures: list[ChunkFailure] = field(default_factory=list)
    pruned: int = 0
    error: str | None = None

    @property
    def ok(self) -> bool:
        return self.error is None and not self.failures
