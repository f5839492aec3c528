"""Error envelope returned by every classified error response.

Wire shape:

    {"errors": [{"field": "id", "code": "INVALID_VALUE"}, ...]}

- **ErrorItem**: One error, optionally attributed to a request field
- **ErrorEnvelope**: The ordered, non-empty list of error items

Both models are immutable. The builder classmethods always return new
envelopes. On the wire, absent ``field`` and ``message`` values are omitted
rather than sent as ``null``; clients must treat a missing key as absent.
"""

from typing import Any

from pydantic import BaseModel, ConfigDict, Field

from request_envelope.core.exceptions import ErrorCode


class ErrorItem(BaseModel):
    """A single error attributed to a request field or to the request as a whole."""

    model_config = ConfigDict(frozen=True)

    field: str | None = Field(
        default=None,
        description="Offending request field or query parameter, absent for global errors",
        examples=["id", "address.city", "includeAddress"],
    )

    code: str = Field(
        ...,
        min_length=1,
        description="Stable machine-readable error code",
        examples=["INVALID_VALUE", "UNEXPECTED_PROPERTY", "missing"],
    )

    message: str | None = Field(
        default=None,
        description="Human-readable explanation",
        examples=["The request body is not valid JSON."],
    )


class ErrorEnvelope(BaseModel):
    """Error response body containing one or more error items."""

    model_config = ConfigDict(
        frozen=True,
        json_schema_extra={
            "examples": [
                {
                    "errors": [
                        {
                            "code": "INVALID_REQUEST_BODY",
                            "message": "The request body is not valid JSON.",
                        }
                    ]
                },
                {"errors": [{"field": "id", "code": "INVALID_VALUE"}]},
                {
                    "errors": [
                        {"field": "id", "code": "missing", "message": "Field required"},
                        {
                            "field": "name",
                            "code": "missing",
                            "message": "Field required",
                        },
                    ]
                },
            ]
        },
    )

    errors: tuple[ErrorItem, ...] = Field(
        ...,
        min_length=1,
        description="Errors in the order they were discovered",
    )

    @classmethod
    def of(cls, *items: ErrorItem) -> "ErrorEnvelope":
        """Build an envelope from error items, keeping their order."""
        return cls(errors=items)

    @classmethod
    def global_error(
        cls, code: str | ErrorCode, message: str | None = None
    ) -> "ErrorEnvelope":
        """Build an envelope holding a single error not tied to a field."""
        return cls.of(ErrorItem(code=_code_value(code), message=message))

    @classmethod
    def field_error(
        cls, field: str, code: str | ErrorCode, message: str | None = None
    ) -> "ErrorEnvelope":
        """Build an envelope holding a single error for one field."""
        return cls.of(ErrorItem(field=field, code=_code_value(code), message=message))

    def to_wire(self) -> dict[str, Any]:
        """Return the JSON-ready representation with absent values omitted."""
        return self.model_dump(mode="json", exclude_none=True)


def _code_value(code: str | ErrorCode) -> str:
    return code.value if isinstance(code, ErrorCode) else code
