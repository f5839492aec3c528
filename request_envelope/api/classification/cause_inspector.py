"""Refinement of unreadable request body failures.

The immediate cause of an ``UnreadableBodyError`` selects a more specific
error item. Only one level of cause is inspected; nested causes are ignored.
"""

from request_envelope.api.schemas.errors import ErrorItem
from request_envelope.core.exceptions import (
    BodyParseError,
    ErrorCode,
    InvalidFormatError,
    PathElement,
    UnrecognizedPropertyError,
    UnreadableBodyError,
)

INVALID_JSON_MESSAGE = "The request body is not valid JSON."
INVALID_BODY_MESSAGE = "The request body is invalid."


def join_path(path: tuple[PathElement, ...]) -> str:
    """Join a property access path from the schema root with dots.

    List indices are rendered as their decimal representation, so
    ``("items", 0, "sku")`` becomes ``items.0.sku``.
    """
    return ".".join(str(element) for element in path)


def inspect_cause(failure: UnreadableBodyError) -> ErrorItem:
    """Build the error item for an unreadable request body.

    Args:
        failure: The body failure, whose ``cause`` may be None.

    Returns:
        ErrorItem: The most specific item the immediate cause allows.
    """
    cause = failure.cause

    if isinstance(cause, BodyParseError):
        return ErrorItem(
            code=ErrorCode.INVALID_REQUEST_BODY.value, message=INVALID_JSON_MESSAGE
        )

    if isinstance(cause, UnrecognizedPropertyError):
        return ErrorItem(
            field=cause.property_name, code=ErrorCode.UNEXPECTED_PROPERTY.value
        )

    if isinstance(cause, InvalidFormatError):
        return ErrorItem(
            field=join_path(cause.path) or None, code=ErrorCode.INVALID_VALUE.value
        )

    return ErrorItem(
        code=ErrorCode.INVALID_REQUEST_BODY.value, message=INVALID_BODY_MESSAGE
    )
