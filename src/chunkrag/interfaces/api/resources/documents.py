"""Document API resources."""

import falcon.asgi

from chunkrag.application.use_cases.document.ingest_document import IngestDocumentUseCase
from chunkrag.domain.entities import Document
from chunkrag.interfaces.api.resources.serializers import ingest_result_to_dict


def _parse_document(body: object) -> Document:
    if not isinstance(body, dict):
        raise ValueError("Document must be an object")
    path = body.get("path")
    content = body.get("content")
    if not isinstance(path, str) or not path.strip():
        raise ValueError("'path' is required")
    if not isinstance(content, str):
        raise ValueError("'content' must be a string")
    return Document(path=path.strip(), content=content)


class DocumentsResource:
    """POST /v1/documents - ingest one document."""

    def __init__(self, ingest_document: IngestDocumentUseCase) -> None:
        self._ingest_document = ingest_document

    async def on_post(self, req: falcon.asgi.Request, resp: falcon.asgi.Response) -> None:
        """Split, store and embed a document; reports per-chunk failures."""
        try:
            document = _parse_document(await req.get_media())
        except (falcon.MediaMalformedError, ValueError) as e:
            resp.status = falcon.HTTP_400
            resp.media = {"error": str(e)}
            return

        result = await self._ingest_document.execute(document)
        resp.media = ingest_result_to_dict(result)
        resp.status = falcon.HTTP_200 if result.ok else falcon.HTTP_207


class DocumentsBatchResource:
    """POST /v1/documents/batch - ingest several documents concurrently."""

    def __init__(self, ingest_document: IngestDocumentUseCase) -> None:
        self._ingest_document = ingest_document

    async def on_post(self, req: falcon.asgi.Request, resp: falcon.asgi.Response) -> None:
        """Ingest documents; one result per document in request order."""
        try:
            body = await req.get_media()
            items = body.get("documents") if isinstance(body, dict) else None
            if not isinstance(items, list) or not items:
                raise ValueError("'documents' must be a non-empty list")
            documents = [_parse_document(item) for item in items]
        except (falcon.MediaMalformedError, ValueError) as e:
            resp.status = falcon.HTTP_400
            resp.media = {"error": str(e)}
            return

        results = await self._ingest_document.execute_many(documents)
        resp.media = {"results": [ingest_result_to_dict(r) for r in results]}
        resp.status = (
            falcon.HTTP_200 if all(r.ok for r in results) else falcon.HTTP_207
        )
