"""Tokenizer port."""

from typing import Protocol


class Tokenizer(Protocol):
    """Port for counting model tokens."""

    def count(self, text: str) -> int: ...
