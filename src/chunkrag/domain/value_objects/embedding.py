"""Embedding vector text encoding, as stored in pgvector columns."""

import json
import math

from chunkrag.domain.exceptions import DeserializationError


def format_embedding(embedding: list[float]) -> str:
    """Encode vector as a pgvector text literal, e.g. ``[0.1,0.2]``."""
    return "[" + ",".join(repr(float(x)) for x in embedding) + "]"


def parse_embedding(raw: str) -> list[float]:
    """Parse a pgvector text literal back into a list of floats."""
    try:
        values = json.loads(raw)
    except (TypeError, ValueError) as e:
        raise DeserializationError("Could not parse embedding", raw=raw) from e
    if not isinstance(values, list):
        raise DeserializationError("Embedding must be an array of numbers", raw=raw)
    result: list[float] = []
    for value in values:
        if isinstance(value, bool) or not isinstance(value, (int, float)):
            raise DeserializationError("Embedding must be an array of numbers", raw=raw)
        if not math.isfinite(value):
            raise DeserializationError("Embedding contains non-finite values", raw=raw)
        result.append(float(value))
    return result
