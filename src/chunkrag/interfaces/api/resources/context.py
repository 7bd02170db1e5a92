"""Context assembly API resource."""

import falcon.asgi

from chunkrag.application.services.context_assembler import ContextAssembler
from chunkrag.domain.exceptions import ContextBudgetError, UpstreamServiceError
from chunkrag.interfaces.api.resources.serializers import bundle_to_dict


def budget_error_to_dict(error: ContextBudgetError) -> dict:
    return {
        "error": str(error),
        "required_tokens": error.required_tokens,
        "max_tokens": error.max_tokens,
        "budget": error.budget,
    }


class ContextResource:
    """POST /v1/context - assemble the context block for a prompt."""

    def __init__(
        self,
        context_assembler: ContextAssembler,
        target_tokens: int,
        max_tokens: int,
    ) -> None:
        self._assembler = context_assembler
        self._target_tokens = target_tokens
        self._max_tokens = max_tokens

    async def on_post(self, req: falcon.asgi.Request, resp: falcon.asgi.Response) -> None:
        """Return selected chunks and assembled text."""
        try:
            body = await req.get_media()
            prompt = body["prompt"]
            target_tokens = int(body.get("target_tokens", self._target_tokens))
            max_tokens = int(body.get("max_tokens", self._max_tokens))
            prefix = body.get("prefix")
            if not isinstance(prompt, str) or not prompt.strip():
                raise ValueError("'prompt' is required")
        except (
            falcon.MediaMalformedError,
            AttributeError,
            KeyError,
            TypeError,
            ValueError,
        ) as e:
            resp.status = falcon.HTTP_400
            resp.media = {"error": str(e)}
            return

        try:
            bundle = await self._assembler.generate(
                prompt=prompt,
                target_tokens=target_tokens,
                max_tokens=max_tokens,
                prefix=prefix,
            )
        except ContextBudgetError as e:
            resp.status = falcon.HTTP_422
            resp.media = budget_error_to_dict(e)
            return
        except UpstreamServiceError as e:
            resp.status = falcon.HTTP_502
            resp.media = {"error": str(e)}
            return
        resp.media = bundle_to_dict(bundle)
        resp.status = falcon.HTTP_200
