"""Global exception handlers for the FastAPI application.

Every exception raised while processing a request, whether by routing,
content negotiation, parameter binding, body validation or an endpoint,
ends up in ``request_failure_handler``. The handler translates the
exception into a typed failure, classifies it with the ordered chain and
responds with the error envelope as JSON.
"""

from fastapi import FastAPI, Request
from fastapi.exceptions import RequestValidationError
from fastapi.responses import Response
from loguru import logger
from starlette.exceptions import HTTPException

from request_envelope.api.binding import to_request_failure
from request_envelope.api.classification import DEFAULT_CHAIN, ClassificationChain
from request_envelope.api.classification.chain import category_of
from request_envelope.api.constants import ALLOW_HEADER
from request_envelope.api.utils.responses import ORJSONResponse
from request_envelope.core.config import get_settings
from request_envelope.core.exceptions import (
    FailureCategory,
    MethodNotAllowedError,
    RequestFailure,
)


def _response_headers(failure: BaseException) -> dict[str, str] | None:
    if isinstance(failure, MethodNotAllowedError) and failure.allowed:
        return {ALLOW_HEADER: ", ".join(failure.allowed)}
    return None


def build_error_response(
    request: Request,
    exc: Exception,
    chain: ClassificationChain = DEFAULT_CHAIN,
) -> Response:
    """Classify an exception and build the JSON error response.

    Recognized failures are logged at the configured handled level. Anything
    else is logged with its traceback; its details never reach the client.

    Args:
        request: The request that caused the exception
        exc: The exception raised while processing the request
        chain: The classification chain to use

    Returns:
        Response: ORJSONResponse with the error envelope
    """
    failure = to_request_failure(exc, request)
    category = category_of(failure)
    classification = chain.classify(failure)

    if category is FailureCategory.UNCAUGHT:
        logger.opt(exception=exc).error(
            "Uncaught exception in request processing: {exception_type}",
            exception_type=type(exc).__name__,
            method=request.method,
            path=request.url.path,
            status_code=classification.status_code,
        )
    else:
        logger.log(
            get_settings().error_handling.handled_log_level,
            "Handling request failure: {message}",
            message=getattr(failure, "message", str(failure)),
            category=category.value,
            method=request.method,
            path=request.url.path,
            status_code=classification.status_code,
        )

    return ORJSONResponse(
        status_code=classification.status_code,
        content=classification.envelope,
        headers=_response_headers(failure),
    )


async def request_failure_handler(request: Request, exc: Exception) -> Response:
    """Handle any exception raised during request processing.

    Args:
        request: The FastAPI request that caused the exception
        exc: The exception to handle

    Returns:
        Response: ORJSONResponse with the error envelope
    """
    return build_error_response(request, exc)


def register_exception_handlers(app: FastAPI) -> None:
    """Register the request failure handler with the FastAPI application.

    The same handler is bound to every exception type FastAPI dispatches
    separately, replacing FastAPI's default validation and HTTP handlers.
    Classification order is decided by the chain alone.

    Args:
        app: The FastAPI application instance
    """
    app.add_exception_handler(RequestFailure, request_failure_handler)
    app.add_exception_handler(RequestValidationError, request_failure_handler)
    app.add_exception_handler(HTTPException, request_failure_handler)
    app.add_exception_handler(Exception, request_failure_handler)

    logger.info("Exception handlers registered")
