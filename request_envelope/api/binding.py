"""Translation of framework binding failures into typed request failures.

FastAPI and Starlette report request problems with their own exception
types. This module converts them into the failures of
``request_envelope.core.exceptions`` so a single classification chain can
handle everything.

A ``RequestValidationError`` may report several problems at once (pydantic
collects every error). The translation keeps the one the classification
table ranks highest:

1. Malformed JSON
2. Structural body problems (unknown property, unconvertible value, a body
   that is missing or not an object)
3. Declarative constraint violations of the body, where a required value
   sent as null counts as missing
4. Path parameter conversion errors
5. Query, header and cookie parameter errors
"""

from collections.abc import Mapping, Sequence
from typing import Any, Final

from fastapi import Request, status
from fastapi.exceptions import RequestValidationError
from starlette.exceptions import HTTPException as StarletteHTTPException

from request_envelope.core.exceptions import (
    BodyParseError,
    InvalidFormatError,
    MediaTypeNotAcceptableError,
    MediaTypeNotSupportedError,
    MethodNotAllowedError,
    ParameterLocation,
    ParameterTypeMismatchError,
    RequestFailure,
    RouteNotFoundError,
    UnrecognizedPropertyError,
    UnreadableBodyError,
)
from request_envelope.core.validation import ReportedErrorsEngine, constraint_failure

type ErrorDict = Mapping[str, Any]

BODY_SOURCE: Final[str] = "body"

JSON_INVALID_TYPES: Final = frozenset({"json_invalid"})

UNRECOGNIZED_PROPERTY_TYPES: Final = frozenset({"extra_forbidden"})

# Scalar conversions: the value is present but cannot become the declared type
INVALID_FORMAT_TYPES: Final = frozenset(
    {
        "bool_parsing",
        "bool_type",
        "bytes_type",
        "date_from_datetime_inexact",
        "date_from_datetime_parsing",
        "date_parsing",
        "date_type",
        "datetime_from_date_parsing",
        "datetime_parsing",
        "datetime_type",
        "decimal_parsing",
        "decimal_type",
        "enum",
        "float_parsing",
        "float_type",
        "int_from_float",
        "int_out_of_range",
        "int_parsing",
        "int_parsing_size",
        "int_type",
        "literal_error",
        "string_type",
        "string_unicode",
        "time_parsing",
        "time_type",
        "timedelta_parsing",
        "timedelta_type",
        "url_parsing",
        "url_type",
        "uuid_parsing",
        "uuid_type",
    }
)

# Shape mismatches: a container was expected where something else was given
MISMATCHED_INPUT_TYPES: Final = frozenset(
    {
        "dict_type",
        "frozen_set_type",
        "list_type",
        "model_attributes_type",
        "model_type",
        "set_type",
        "tuple_type",
    }
)

# Errors raised by model-level validators, reported at the body root
GLOBAL_VIOLATION_TYPES: Final = frozenset({"value_error", "assertion_error"})

PARAMETER_SOURCES: Final = frozenset(location.value for location in ParameterLocation)

# A required value sent as null is reported like an omitted one
MISSING_TYPE: Final[str] = "missing"
MISSING_MESSAGE: Final[str] = "Field required"

BODY_ENGINE: Final = ReportedErrorsEngine(loc_offset=1)


def _loc(error: ErrorDict) -> tuple[Any, ...]:
    return tuple(error.get("loc", ()))


def _source(error: ErrorDict) -> str | None:
    loc = _loc(error)
    return str(loc[0]) if loc else None


def _is_body_root(error: ErrorDict) -> bool:
    return len(_loc(error)) <= 1


def _is_unreadable(error: ErrorDict) -> bool:
    error_type = error.get("type")
    if _is_body_root(error):
        return error_type not in GLOBAL_VIOLATION_TYPES
    return (
        error_type in UNRECOGNIZED_PROPERTY_TYPES
        or error_type in INVALID_FORMAT_TYPES
        or error_type in MISMATCHED_INPUT_TYPES
    )


def _is_null_value(error: ErrorDict) -> bool:
    return (
        not _is_body_root(error)
        and error.get("input") is None
        and (
            error.get("type") in INVALID_FORMAT_TYPES
            or error.get("type") in MISMATCHED_INPUT_TYPES
        )
    )


def _as_missing(error: ErrorDict) -> ErrorDict:
    return {**error, "type": MISSING_TYPE, "msg": MISSING_MESSAGE}


def body_cause(error: ErrorDict) -> BaseException | None:
    """Build the cause of an unreadable body from one pydantic error.

    Args:
        error: A body error that makes the body unreadable.

    Returns:
        BaseException | None: The cause, None when the body itself is missing.
    """
    error_type = error.get("type")
    loc = _loc(error)
    message = str(error.get("msg", ""))

    if error_type in JSON_INVALID_TYPES:
        position = loc[1] if len(loc) > 1 and isinstance(loc[1], int) else None
        return BodyParseError(message, position)
    if _is_body_root(error):
        return None if error_type == "missing" else ValueError(message)
    if error_type in UNRECOGNIZED_PROPERTY_TYPES:
        return UnrecognizedPropertyError(str(loc[-1]), loc[1:-1])
    # A JSON boolean where a scalar is declared is a mismatched input
    if error_type in INVALID_FORMAT_TYPES and not isinstance(error.get("input"), bool):
        return InvalidFormatError(loc[1:], message)
    return ValueError(message)


def _parameter_failure(error: ErrorDict) -> ParameterTypeMismatchError:
    loc = _loc(error)
    name = str(loc[1]) if len(loc) > 1 else ""
    return ParameterTypeMismatchError(
        name,
        ParameterLocation(loc[0]),
        value=error.get("input"),
        cause=ValueError(error.get("msg", "Invalid value")),
    )


def failure_from_errors(errors: Sequence[ErrorDict]) -> RequestFailure | None:
    """Select the highest-priority failure among request validation errors.

    Args:
        errors: Errors as returned by ``RequestValidationError.errors()``.

    Returns:
        RequestFailure | None: The failure to classify, None when no error
            comes from a known request location.
    """
    body_errors = [
        _as_missing(error) if _is_null_value(error) else error
        for error in errors
        if _source(error) == BODY_SOURCE
    ]
    parameter_errors = [
        error for error in errors if _source(error) in PARAMETER_SOURCES
    ]

    for error in body_errors:
        if error.get("type") in JSON_INVALID_TYPES:
            return UnreadableBodyError(body_cause(error))

    for error in body_errors:
        if _is_unreadable(error):
            return UnreadableBodyError(body_cause(error))

    if body_errors and (failure := constraint_failure(BODY_ENGINE, body_errors)):
        return failure

    for error in parameter_errors:
        if _source(error) == ParameterLocation.PATH.value:
            return _parameter_failure(error)

    if parameter_errors:
        return _parameter_failure(parameter_errors[0])

    return None


def failure_from_http_exception(
    exc: StarletteHTTPException, request: Request | None = None
) -> BaseException:
    """Translate a Starlette HTTP exception raised by routing or body reading.

    Args:
        exc: The HTTP exception.
        request: The request being processed, when available.

    Returns:
        BaseException: The typed failure, or the exception itself when its
            status has no failure category.
    """
    method = request.method if request is not None else None

    # FastAPI chains body decoding errors other than malformed JSON to a 400
    if exc.status_code == status.HTTP_400_BAD_REQUEST and exc.__cause__ is not None:
        cause = exc.__cause__
        if isinstance(cause, UnicodeDecodeError):
            return UnreadableBodyError(BodyParseError(str(cause), cause.start))
        return UnreadableBodyError(cause)
    if exc.status_code == status.HTTP_404_NOT_FOUND:
        path = request.url.path if request is not None else None
        return RouteNotFoundError(path)
    if exc.status_code == status.HTTP_405_METHOD_NOT_ALLOWED:
        allow = (exc.headers or {}).get("Allow", "")
        allowed = [m.strip() for m in allow.split(",") if m.strip()]
        return MethodNotAllowedError(method, allowed)
    if exc.status_code == status.HTTP_406_NOT_ACCEPTABLE:
        accept = request.headers.get("accept") if request is not None else None
        return MediaTypeNotAcceptableError(accept)
    if exc.status_code == status.HTTP_415_UNSUPPORTED_MEDIA_TYPE:
        content_type = (
            request.headers.get("content-type") if request is not None else None
        )
        return MediaTypeNotSupportedError(content_type)
    return exc


def to_request_failure(
    exc: BaseException, request: Request | None = None
) -> BaseException:
    """Translate any exception raised during request processing.

    Args:
        exc: The exception to translate.
        request: The request being processed, when available.

    Returns:
        BaseException: A ``RequestFailure`` for every recognized problem,
            otherwise the original exception.
    """
    if isinstance(exc, RequestFailure):
        return exc
    if isinstance(exc, RequestValidationError):
        return failure_from_errors(list(exc.errors())) or exc
    if isinstance(exc, StarletteHTTPException):
        return failure_from_http_exception(exc, request)
    return exc
