"""Search API resource."""

import falcon.asgi

from chunkrag.application.services.chunk_store import ChunkStore
from chunkrag.domain.exceptions import UpstreamServiceError
from chunkrag.interfaces.api.resources.serializers import chunk_to_dict


class SearchResource:
    """POST /v1/search - nearest-neighbour chunk search."""

    def __init__(self, chunk_store: ChunkStore) -> None:
        self._chunk_store = chunk_store

    async def on_post(self, req: falcon.asgi.Request, resp: falcon.asgi.Response) -> None:
        """Execute similarity search."""
        try:
            body = await req.get_media()
            query = body.get("query", "")
            limit = body.get("limit")
        except Exception:
            resp.status = falcon.HTTP_400
            resp.media = {"error": "Invalid request body"}
            return

        if not isinstance(query, str) or not query.strip():
            resp.status = falcon.HTTP_400
            resp.media = {"error": "'query' is required"}
            return
        if limit is not None and (not isinstance(limit, int) or limit < 1):
            resp.status = falcon.HTTP_400
            resp.media = {"error": "'limit' must be a positive integer"}
            return

        try:
            chunks = await self._chunk_store.search(query, limit)
        except UpstreamServiceError as e:
            resp.status = falcon.HTTP_502
            resp.media = {"error": str(e)}
            return
        resp.media = {"results": [chunk_to_dict(c) for c in chunks]}
        resp.status = falcon.HTTP_200
