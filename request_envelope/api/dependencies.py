"""Content negotiation for JSON resources.

FastAPI does not enforce ``Accept`` or ``Content-Type``. The helpers here
reject requests the resource cannot serve by raising typed failures, which
the exception handlers turn into error envelopes.

The Accept check runs in ``JSONResponseRoute`` so it happens before FastAPI
reads the body; the Content-Type check is a regular dependency.

Usage:
    router = APIRouter(route_class=JSONResponseRoute)

    @router.post("", dependencies=[Depends(require_json_body)])
    async def create(...): ...
"""

from collections.abc import Callable, Coroutine
from typing import Any, Final

from fastapi import Request, Response
from fastapi.routing import APIRoute

from request_envelope.api.constants import (
    JSON_CONTENT_TYPES,
    JSON_MEDIA_TYPE,
    JSON_SUFFIX,
)
from request_envelope.core.exceptions import (
    MediaTypeNotAcceptableError,
    MediaTypeNotSupportedError,
)

# Accept ranges a JSON response satisfies
ACCEPTABLE_RANGES: Final = frozenset({"*", "*/*", "application/*", JSON_MEDIA_TYPE})


def _essence(media_type: str) -> str:
    """Return the lowercased ``type/subtype`` without parameters."""
    return media_type.split(";", 1)[0].strip().lower()


def _quality(media_range: str) -> float:
    for parameter in media_range.split(";")[1:]:
        key, _, value = parameter.partition("=")
        if key.strip().lower() == "q":
            try:
                return float(value.strip())
            except ValueError:
                return 0.0
    return 1.0


def is_json_media_type(media_type: str | None) -> bool:
    """Whether a media type denotes JSON (``application/json`` or ``+json``).

    Args:
        media_type: A Content-Type style value, parameters allowed.

    Returns:
        bool: True for JSON media types.
    """
    if not media_type:
        return False
    essence = _essence(media_type)
    return essence in JSON_CONTENT_TYPES or essence.endswith(JSON_SUFFIX)


def accepts_json(accept: str | None) -> bool:
    """Whether an Accept header allows a JSON response.

    A missing or blank header accepts anything. Ranges with ``q=0`` are
    explicit refusals and never match.

    Args:
        accept: The raw Accept header value.

    Returns:
        bool: True when ``application/json`` is acceptable.
    """
    if accept is None or not accept.strip():
        return True

    for media_range in accept.split(","):
        if _quality(media_range) <= 0:
            continue
        if _essence(media_range) in ACCEPTABLE_RANGES:
            return True
    return False


async def require_json_response(request: Request) -> None:
    """Reject requests whose Accept header excludes JSON.

    Args:
        request: The incoming request.

    Raises:
        MediaTypeNotAcceptableError: If JSON is not acceptable to the client.
    """
    accept = request.headers.get("accept")
    if not accepts_json(accept):
        raise MediaTypeNotAcceptableError(accept)


async def require_json_body(request: Request) -> None:
    """Reject request bodies that are not declared as JSON.

    Args:
        request: The incoming request.

    Raises:
        MediaTypeNotSupportedError: If the Content-Type is missing or not JSON.
    """
    content_type = request.headers.get("content-type")
    if not is_json_media_type(content_type):
        raise MediaTypeNotSupportedError(content_type)


class JSONResponseRoute(APIRoute):
    """Route that refuses non-JSON Accept headers before reading the body.

    Routing has already matched path and method, so 404 and 405 still take
    precedence over 406.
    """

    def get_route_handler(self) -> Callable[[Request], Coroutine[Any, Any, Response]]:
        handler = super().get_route_handler()

        async def json_response_handler(request: Request) -> Response:
            await require_json_response(request)
            return await handler(request)

        return json_response_handler
