"""Pool lifespan middleware - opens pool on startup, closes services on shutdown."""

from collections.abc import Awaitable, Callable, Sequence
from typing import Any

from psycopg_pool import AsyncConnectionPool


class PoolLifespanMiddleware:
    """Middleware that opens the connection pool on startup and closes it on shutdown.

    ``on_shutdown`` callbacks run before the pool is closed, so services can
    flush pending work that still needs a connection.
    """

    def __init__(
        self,
        pool: AsyncConnectionPool,
        on_shutdown: Sequence[Callable[[], Awaitable[None]]] = (),
    ) -> None:
        self._pool = pool
        self._on_shutdown = list(on_shutdown)

    async def process_startup(
        self, scope: dict[str, Any], event: dict[str, Any]
    ) -> None:
        """Open pool when ASGI server starts."""
        await self._pool.open()

    async def process_shutdown(
        self, scope: dict[str, Any], event: dict[str, Any]
    ) -> None:
        """Close services, then the pool, when ASGI server shuts down."""
        for close in self._on_shutdown:
            await close()
        await self._pool.close()
