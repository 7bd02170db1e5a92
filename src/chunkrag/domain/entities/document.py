"""Document entity - raw source text identified by its path."""

from dataclasses import dataclass


@dataclass(frozen=True)
class Document:
    """Source document to be split and indexed."""

    path: str
    content: str
