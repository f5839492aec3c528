"""orjson-backed response class.

Every route and every error handler answers with ``ORJSONResponse``, so
error bodies are ``application/json`` regardless of the client's Accept.
"""

from typing import Any

import orjson
from fastapi.responses import JSONResponse
from pydantic import BaseModel

from request_envelope.api.schemas.errors import ErrorEnvelope


class ORJSONResponse(JSONResponse):
    """JSON response rendered by orjson with sorted keys.

    Sorting makes the bytes a function of the content alone, so the same
    envelope always produces the same body.
    """

    media_type = "application/json"

    def render(self, content: Any) -> bytes:  # noqa: ANN401 - any JSON-ready content
        if isinstance(content, ErrorEnvelope):
            content = content.to_wire()
        elif isinstance(content, BaseModel):
            content = content.model_dump(mode="json")
        return orjson.dumps(content, option=orjson.OPT_SORT_KEYS)
