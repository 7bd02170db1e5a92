"""Completion API resource - Server-Sent Events stream."""

import json
import logging
from collections.abc import AsyncIterator

import falcon.asgi

from chunkrag.application.dto.completion_dto import CompletionRequest, Message
from chunkrag.application.use_cases.completion.answer_prompt import AnswerPromptUseCase
from chunkrag.domain.exceptions import (
    ContextBudgetError,
    UpstreamServiceError,
    ValidationError,
)
from chunkrag.interfaces.api.resources.context import budget_error_to_dict

logger = logging.getLogger(__name__)


def _sse_event(event: str, data: dict) -> bytes:
    """Format one Server-Sent Event (event + data)."""
    payload = json.dumps(data, ensure_ascii=False)
    return f"event: {event}\ndata: {payload}\n\n".encode("utf-8")


def _parse_request(body: object) -> CompletionRequest:
    if not isinstance(body, dict):
        raise ValueError("Request body must be an object")
    if "messages" in body:
        raw = body["messages"]
        if not isinstance(raw, list):
            raise ValueError("'messages' must be a list")
        messages = []
        for m in raw:
            if not isinstance(m, dict) or m.get("role") not in ("user", "assistant"):
                raise ValueError("Each message needs role 'user' or 'assistant'")
            if not isinstance(m.get("content"), str):
                raise ValueError("Message content must be a string")
            messages.append(Message(role=m["role"], content=m["content"]))
    elif isinstance(body.get("prompt"), str):
        messages = [Message(role="user", content=body["prompt"])]
    else:
        raise ValueError("'messages' or 'prompt' is required")
    model = body.get("model")
    prefix = body.get("prefix")
    return CompletionRequest(
        messages=messages,
        model=model if isinstance(model, str) else None,
        prefix=prefix if isinstance(prefix, str) else None,
    )


class CompletionsResource:
    """POST /v1/completions - retrieval-augmented completion, streamed as SSE."""

    def __init__(self, answer_prompt: AnswerPromptUseCase) -> None:
        self._answer_prompt = answer_prompt

    async def on_post(self, req: falcon.asgi.Request, resp: falcon.asgi.Response) -> None:
        """Stream ``context``, ``token``... then ``done`` (or ``error``) events."""
        try:
            request = _parse_request(await req.get_media())
        except (falcon.MediaMalformedError, ValueError) as e:
            resp.status = falcon.HTTP_400
            resp.media = {"error": str(e)}
            return

        try:
            bundle, stream = await self._answer_prompt.execute(request)
        except ValidationError as e:
            resp.status = falcon.HTTP_400
            resp.media = {"error": str(e)}
            return
        except ContextBudgetError as e:
            resp.status = falcon.HTTP_422
            resp.media = budget_error_to_dict(e)
            return
        except UpstreamServiceError as e:
            resp.status = falcon.HTTP_502
            resp.media = {"error": str(e)}
            return

        async def events() -> AsyncIterator[bytes]:
            yield _sse_event(
                "context",
                {"chunk_ids": [c.id for c in bundle.chunks], "token_count": bundle.token_count},
            )
            try:
                async for fragment in stream:
                    yield _sse_event("token", {"text": fragment})
            except UpstreamServiceError as e:
                logger.warning("Completion stream failed: %s", e)
                yield _sse_event("error", {"error": str(e)})
                return
            yield _sse_event("done", {})

        resp.content_type = "text/event-stream"
        resp.status = falcon.HTTP_200
        resp.stream = events()
