"""Domain exceptions."""


class ChunkRAGError(Exception):
    """Base exception for chunkrag."""

    pass


class NotFound(ChunkRAGError):
    """Requested resource was not found."""

    pass


class ValidationError(ChunkRAGError):
    """Validation failed for input data."""

    pass


class UpstreamServiceError(ChunkRAGError):
    """Embedding or completion API call failed.

    ``error`` carries the API error payload when the provider returned one,
    otherwise the raw exception.
    """

    def __init__(self, message: str, error: object | None = None) -> None:
        super().__init__(message)
        self.error = error


class DeserializationError(ChunkRAGError):
    """Persisted embedding could not be parsed into a numeric vector."""

    def __init__(self, message: str, raw: object | None = None) -> None:
        super().__init__(message)
        self.raw = raw


class ContextBudgetError(ChunkRAGError):
    """Token budget for retrieved context is below the usable minimum."""

    def __init__(self, required_tokens: int, max_tokens: int, budget: int) -> None:
        super().__init__(
            f"Context budget too small: {budget} tokens available "
            f"(required {required_tokens}, max {max_tokens})"
        )
        self.required_tokens = required_tokens
        self.max_tokens = max_tokens
        self.budget = budget


class RepositoryError(ChunkRAGError):
    """Persistence failure, tagged with the repository method that failed."""

    def __init__(self, method: str, error: BaseException) -> None:
        super().__init__(f"{method} failed: {error}")
        self.method = method
        self.error = error


class EmbeddingDimensionError(ChunkRAGError):
    """Embedding vector length does not match the configured index dimension."""

    def __init__(self, expected: int, actual: int) -> None:
        super().__init__(
            f"Embedding has {actual} dimensions, index expects {expected}"
        )
        self.expected = expected
        self.actual = actual
