"""Tokenizer backed by tiktoken."""

import tiktoken


class TiktokenTokenizer:
    """Counts tokens with the encoding of an OpenAI model."""

    def __init__(self, model: str = "gpt-3.5-turbo") -> None:
        self._encoding = tiktoken.encoding_for_model(model)

    def count(self, text: str) -> int:
        """Number of tokens in ``text``. Special tokens are counted as plain text."""
        return len(self._encoding.encode(text, disallowed_special=()))
