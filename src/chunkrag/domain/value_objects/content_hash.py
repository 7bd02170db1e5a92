"""Content hash - deduplication key for chunks."""

import hashlib
from dataclasses import dataclass


@dataclass(frozen=True)
class ContentHash:
    """MD5 hex digest of trimmed chunk content."""

    value: str

    def __post_init__(self) -> None:
        if len(self.value) != 32:
            raise ValueError("Content hash must be 32 hex characters")
        try:
            int(self.value, 16)
        except ValueError:
            raise ValueError("Content hash must be 32 hex characters") from None

    @classmethod
    def of(cls, content: str) -> "ContentHash":
        """Hash normalized content. Stable across processes."""
        return cls(hashlib.md5(content.strip().encode("utf-8")).hexdigest())

    def __str__(self) -> str:
        return self.value
