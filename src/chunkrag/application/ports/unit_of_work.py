"""Unit of Work port - transactional boundary."""

from contextlib import AbstractAsyncContextManager
from typing import Protocol

from chunkrag.application.ports.repositories.chunk_repository import ChunkRepository


class UnitOfWork(Protocol):
    """Unit of Work - manages transaction and repository access."""

    @property
    def chunks(self) -> ChunkRepository: ...

    async def commit(self) -> None: ...

    async def rollback(self) -> None: ...


class UnitOfWorkFactory(Protocol):
    """Factory for creating UnitOfWork instances."""

    def __call__(self) -> AbstractAsyncContextManager[UnitOfWork]: ...
