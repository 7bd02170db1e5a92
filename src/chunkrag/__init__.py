"""Retrieval-augmented generation over chunked documents."""

__version__ = "0.1.0"
