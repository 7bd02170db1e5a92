"""Falcon ASGI application."""

from collections.abc import Sequence

import falcon.asgi
from falcon.asgi import App

from chunkrag.interfaces.api.resources.completions import CompletionsResource
from chunkrag.interfaces.api.resources.context import ContextResource
from chunkrag.interfaces.api.resources.documents import (
    DocumentsBatchResource,
    DocumentsResource,
)
from chunkrag.interfaces.api.resources.health import HealthResource
from chunkrag.interfaces.api.resources.search import SearchResource


def create_app(
    documents_resource: DocumentsResource,
    documents_batch_resource: DocumentsBatchResource,
    search_resource: SearchResource,
    context_resource: ContextResource,
    completions_resource: CompletionsResource,
    health_resource: HealthResource,
    middleware: Sequence[object] = (),
) -> App:
    """Create Falcon ASGI app with routes."""
    app = falcon.asgi.App(middleware=list(middleware))
    app.add_route("/v1/health", health_resource)
    app.add_route("/v1/health/ready", health_resource, suffix="ready")
    app.add_route("/v1/documents", documents_resource)
    app.add_route("/v1/documents/batch", documents_batch_resource)
    app.add_route("/v1/search", search_resource)
    app.add_route("/v1/context", context_resource)
    app.add_route("/v1/completions", completions_resource)
    return app
