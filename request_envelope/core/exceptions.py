"""Failure taxonomy for request processing errors.

This module defines every failure the request-error layer knows how to
classify, independent of the web framework that raised it.

Key components:
- **ErrorCode enum**: Stable, machine-matchable codes sent to clients
- **FailureCategory enum**: The fixed set of categories the classifier dispatches on
- **ParameterLocation enum**: Where a mismatched request parameter was read from
- **Body causes**: The closed set of reasons a request body could not be read
- **RequestFailure**: Base exception tagged with a category and optional cause
- **Specialized failures**: One subclass per recognized category
- **Violation**: A single record produced by the declarative validation engine

Anything raised during request processing that is not a ``RequestFailure``
belongs to the ``UNCAUGHT`` category.
"""

from collections.abc import Sequence
from dataclasses import dataclass
from enum import Enum
from typing import ClassVar


class ErrorCode(Enum):
    """Error codes placed in the ``code`` field of an error item.

    These values are part of the public contract and never change meaning.
    """

    UNSUPPORTED_TYPE = "UNSUPPORTED_TYPE"
    """The response cannot be produced in any media type the client accepts."""

    INVALID_CONTENT_TYPE = "INVALID_CONTENT_TYPE"
    """The request body was sent with a content type the resource does not accept."""

    INVALID_REQUEST_BODY = "INVALID_REQUEST_BODY"
    """The request body is missing, malformed, or otherwise unreadable."""

    UNEXPECTED_PROPERTY = "UNEXPECTED_PROPERTY"
    """The request body contains a property the resource does not define."""

    INVALID_VALUE = "INVALID_VALUE"
    """A known body property holds a value of the wrong type or format."""

    METHOD_NOT_ALLOWED = "METHOD_NOT_ALLOWED"
    """The resource exists but does not support the HTTP method used."""

    INVALID_RESOURCE = "INVALID_RESOURCE"
    """The requested resource does not exist."""

    BAD_QUERY_PARAMETER = "BAD_QUERY_PARAMETER"
    """A query parameter could not be converted to the expected type."""

    INTERNAL_SERVER_ERROR = "INTERNAL_SERVER_ERROR"
    """An unexpected failure occurred while processing the request."""


class FailureCategory(Enum):
    """Categories of request processing failures."""

    MEDIA_TYPE_NOT_ACCEPTABLE = "media_type_not_acceptable"
    MEDIA_TYPE_NOT_SUPPORTED = "media_type_not_supported"
    BODY_UNREADABLE = "body_unreadable"
    METHOD_NOT_ALLOWED = "method_not_allowed"
    VALIDATION_FAILED = "validation_failed"
    PARAMETER_TYPE_MISMATCH = "parameter_type_mismatch"
    ROUTE_NOT_FOUND = "route_not_found"
    UNCAUGHT = "uncaught"


class ParameterLocation(Enum):
    """Request location a parameter was bound from."""

    PATH = "path"
    QUERY = "query"
    HEADER = "header"
    COOKIE = "cookie"


type PathElement = str | int


@dataclass(frozen=True, slots=True)
class Violation:
    """A single violation reported by the validation engine.

    Attributes:
        code: The engine's rule identifier (e.g. ``missing``)
        message: Human-readable explanation supplied by the engine
        field: Dotted name of the violated field, ``None`` for object-level rules
    """

    code: str
    message: str | None = None
    field: str | None = None

    @property
    def is_global(self) -> bool:
        """Whether the violation applies to the object as a whole."""
        return self.field is None


# Body causes


class BodyParseError(ValueError):
    """The request body is not syntactically valid JSON.

    Args:
        message: Parser error description
        position: Character offset where parsing failed, when known
    """

    def __init__(self, message: str, position: int | None = None) -> None:
        super().__init__(message)
        self.position = position


class UnrecognizedPropertyError(ValueError):
    """The request body contains a property the target schema does not define.

    Args:
        property_name: Name of the unrecognized property
        path: Access path of the enclosing object, from the schema root
    """

    def __init__(
        self, property_name: str, path: Sequence[PathElement] = ()
    ) -> None:
        super().__init__(f"Unrecognized property '{property_name}'")
        self.property_name = property_name
        self.path = tuple(path)


class InvalidFormatError(ValueError):
    """A known body property holds a value that cannot be converted.

    Args:
        path: Access path from the schema root to the failing value
        reason: Converter error description
    """

    def __init__(self, path: Sequence[PathElement], reason: str = "") -> None:
        super().__init__(reason or "Invalid value")
        self.path = tuple(path)
        self.reason = reason


# Failures


class RequestFailure(Exception):
    """Base exception for every classified request processing failure.

    Args:
        message: Description of the failure, for logs only
        cause: The underlying exception, chained as ``__cause__``
    """

    category: ClassVar[FailureCategory] = FailureCategory.UNCAUGHT

    def __init__(self, message: str, cause: BaseException | None = None) -> None:
        super().__init__(message)
        self.message = message
        self.cause = cause
        if cause is not None:
            self.__cause__ = cause

    def __repr__(self) -> str:
        return (
            f"{self.__class__.__name__}(category={self.category.value}, "
            f"message='{self.message}')"
        )


class MediaTypeNotAcceptableError(RequestFailure):
    """The client's Accept header cannot be satisfied."""

    category = FailureCategory.MEDIA_TYPE_NOT_ACCEPTABLE

    def __init__(self, accept: str | None = None) -> None:
        super().__init__(f"Cannot produce a response acceptable to '{accept}'")
        self.accept = accept


class MediaTypeNotSupportedError(RequestFailure):
    """The request body content type is not accepted by the resource."""

    category = FailureCategory.MEDIA_TYPE_NOT_SUPPORTED

    def __init__(self, content_type: str | None = None) -> None:
        super().__init__(f"Content type '{content_type}' is not supported")
        self.content_type = content_type


class UnreadableBodyError(RequestFailure):
    """The request body could not be read into the target schema.

    The cause, when present, is one of the body causes defined above or
    any other exception raised by the body reader.
    """

    category = FailureCategory.BODY_UNREADABLE

    def __init__(self, cause: BaseException | None = None) -> None:
        super().__init__("The request body could not be read", cause)


class MethodNotAllowedError(RequestFailure):
    """The matched route does not support the request method.

    Args:
        method: The HTTP method used by the request
        allowed: Methods the route does support
    """

    category = FailureCategory.METHOD_NOT_ALLOWED

    def __init__(self, method: str | None = None, allowed: Sequence[str] = ()) -> None:
        super().__init__(f"Method '{method}' is not allowed")
        self.method = method
        self.allowed = tuple(allowed)


class ConstraintViolationError(RequestFailure):
    """Declarative validation of the bound request failed.

    Args:
        global_violations: Object-level violations, in engine order
        field_violations: Field-level violations, in engine order
    """

    category = FailureCategory.VALIDATION_FAILED

    def __init__(
        self,
        global_violations: Sequence[Violation] = (),
        field_violations: Sequence[Violation] = (),
    ) -> None:
        count = len(global_violations) + len(field_violations)
        super().__init__(f"Request validation failed with {count} violation(s)")
        self.global_violations = tuple(global_violations)
        self.field_violations = tuple(field_violations)


class ParameterTypeMismatchError(RequestFailure):
    """A path or query parameter could not be converted to its declared type.

    Args:
        name: Name of the parameter as it appears in the request
        location: Where the parameter was read from
        value: The raw value that failed conversion, when known
        cause: The conversion error
    """

    category = FailureCategory.PARAMETER_TYPE_MISMATCH

    def __init__(
        self,
        name: str,
        location: ParameterLocation,
        value: object = None,
        cause: BaseException | None = None,
    ) -> None:
        super().__init__(
            f"{location.value.capitalize()} parameter '{name}' has an invalid value",
            cause,
        )
        self.name = name
        self.location = location
        self.value = value

    @property
    def is_path_parameter(self) -> bool:
        """Whether the parameter is a segment of the request path."""
        return self.location is ParameterLocation.PATH


class RouteNotFoundError(RequestFailure):
    """No route matches the request path."""

    category = FailureCategory.ROUTE_NOT_FOUND

    def __init__(self, path: str | None = None) -> None:
        super().__init__(f"No route matches '{path}'")
        self.path = path
