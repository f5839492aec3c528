"""Unit tests for the failure taxonomy."""

import pytest

from request_envelope.core.exceptions import (
    BodyParseError,
    ConstraintViolationError,
    ErrorCode,
    FailureCategory,
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
    Violation,
)


@pytest.mark.unit
class TestErrorCode:
    """Test suite for the wire error codes."""

    def test_values_match_names(self) -> None:
        """Every code is sent on the wire exactly as it is named."""
        for code in ErrorCode:
            assert code.value == code.name

    def test_expected_codes_exist(self) -> None:
        """All codes used by the classification table are defined."""
        assert {code.value for code in ErrorCode} == {
            "UNSUPPORTED_TYPE",
            "INVALID_CONTENT_TYPE",
            "INVALID_REQUEST_BODY",
            "UNEXPECTED_PROPERTY",
            "INVALID_VALUE",
            "METHOD_NOT_ALLOWED",
            "INVALID_RESOURCE",
            "BAD_QUERY_PARAMETER",
            "INTERNAL_SERVER_ERROR",
        }


@pytest.mark.unit
class TestRequestFailures:
    """Test suite for typed request failures."""

    @pytest.mark.parametrize(
        ("failure", "expected_category"),
        [
            (
                MediaTypeNotAcceptableError("application/xml"),
                FailureCategory.MEDIA_TYPE_NOT_ACCEPTABLE,
            ),
            (
                MediaTypeNotSupportedError("text/plain"),
                FailureCategory.MEDIA_TYPE_NOT_SUPPORTED,
            ),
            (UnreadableBodyError(), FailureCategory.BODY_UNREADABLE),
            (MethodNotAllowedError("PUT", ["POST"]), FailureCategory.METHOD_NOT_ALLOWED),
            (ConstraintViolationError(), FailureCategory.VALIDATION_FAILED),
            (
                ParameterTypeMismatchError("id", ParameterLocation.PATH),
                FailureCategory.PARAMETER_TYPE_MISMATCH,
            ),
            (RouteNotFoundError("/blah"), FailureCategory.ROUTE_NOT_FOUND),
            (RequestFailure("untyped"), FailureCategory.UNCAUGHT),
        ],
    )
    def test_each_failure_carries_its_category(
        self, failure: RequestFailure, expected_category: FailureCategory
    ) -> None:
        """Test every failure class is tagged with its category."""
        assert failure.category is expected_category
        assert isinstance(failure, Exception)

    def test_cause_is_chained(self) -> None:
        """Test the cause is stored and chained as __cause__."""
        cause = BodyParseError("Expecting value", 0)

        failure = UnreadableBodyError(cause)

        assert failure.cause is cause
        assert failure.__cause__ is cause

    def test_missing_cause_is_not_chained(self) -> None:
        """Test a failure without cause leaves __cause__ unset."""
        failure = UnreadableBodyError()

        assert failure.cause is None
        assert failure.__cause__ is None

    def test_message_and_repr(self) -> None:
        """Test message and repr expose the category."""
        failure = RouteNotFoundError("/blah/blah")

        assert str(failure) == "No route matches '/blah/blah'"
        assert failure.message == str(failure)
        assert repr(failure) == (
            "RouteNotFoundError(category=route_not_found, "
            "message='No route matches '/blah/blah'')"
        )

    def test_method_not_allowed_keeps_allowed_methods(self) -> None:
        """Test allowed methods are stored as a tuple."""
        failure = MethodNotAllowedError("PUT", ["POST", "GET"])

        assert failure.method == "PUT"
        assert failure.allowed == ("POST", "GET")

    def test_constraint_violation_keeps_groups(self) -> None:
        """Test global and field violations are stored separately and in order."""
        global_violation = Violation(code="value_error", message="Bad sum")
        field_violations = [
            Violation(code="missing", field="id"),
            Violation(code="missing", field="name"),
        ]

        failure = ConstraintViolationError([global_violation], field_violations)

        assert failure.global_violations == (global_violation,)
        assert failure.field_violations == tuple(field_violations)
        assert "3 violation(s)" in failure.message

    @pytest.mark.parametrize(
        ("location", "expected"),
        [
            (ParameterLocation.PATH, True),
            (ParameterLocation.QUERY, False),
            (ParameterLocation.HEADER, False),
            (ParameterLocation.COOKIE, False),
        ],
    )
    def test_parameter_mismatch_path_detection(
        self, location: ParameterLocation, expected: bool
    ) -> None:
        """Test only path segments are reported as path parameters."""
        failure = ParameterTypeMismatchError("id", location, value="abc")

        assert failure.is_path_parameter is expected
        assert failure.value == "abc"


@pytest.mark.unit
class TestBodyCauses:
    """Test suite for unreadable body causes."""

    def test_causes_are_value_errors(self) -> None:
        """Test every body cause is a ValueError."""
        assert issubclass(BodyParseError, ValueError)
        assert issubclass(UnrecognizedPropertyError, ValueError)
        assert issubclass(InvalidFormatError, ValueError)

    def test_body_parse_error_position(self) -> None:
        """Test the parse position is kept."""
        error = BodyParseError("Expecting value", 3)

        assert error.position == 3
        assert str(error) == "Expecting value"

    def test_unrecognized_property(self) -> None:
        """Test property name and enclosing path are kept."""
        error = UnrecognizedPropertyError("extra", ["address"])

        assert error.property_name == "extra"
        assert error.path == ("address",)

    def test_invalid_format_path(self) -> None:
        """Test the access path is stored as a tuple."""
        error = InvalidFormatError(["items", 0, "sku"], "Input should be a valid string")

        assert error.path == ("items", 0, "sku")
        assert error.reason == "Input should be a valid string"


@pytest.mark.unit
class TestViolation:
    """Test suite for validation engine records."""

    def test_global_violation(self) -> None:
        """Test a violation without field is global."""
        assert Violation(code="value_error").is_global is True

    def test_field_violation(self) -> None:
        """Test a violation with a field is not global."""
        violation = Violation(code="missing", message="Field required", field="name")

        assert violation.is_global is False

    def test_violation_is_immutable(self) -> None:
        """Test violations cannot be modified."""
        violation = Violation(code="missing", field="name")

        with pytest.raises(AttributeError):
            violation.code = "other"  # type: ignore[misc]
