"""Boundary with the declarative validation engine.

The classification layer never inspects how violations were derived. It only
consumes ``Violation`` records produced by an object satisfying the
``ValidationEngine`` protocol.

Two engines are provided:
- ``ReportedErrorsEngine`` reads the pydantic errors FastAPI collected while
  binding a request; the request binding layer uses it for body violations
- ``PydanticValidationEngine`` validates a payload against a model, for
  payloads that do not go through FastAPI's request binding
"""

from collections.abc import Iterable, Mapping, Sequence
from typing import Any, Protocol, cast

from pydantic import BaseModel
from pydantic import ValidationError as PydanticValidationError

from request_envelope.core.exceptions import ConstraintViolationError, Violation

# Location entries pydantic uses for object-level (model validator) errors
ROOT_LOCATIONS = frozenset({"__root__"})


class ValidationEngine(Protocol):
    """Protocol for engines that validate a payload into violation records."""

    def validate(self, payload: object) -> Sequence[Violation]:
        """Validate the payload.

        Args:
            payload: The already-deserialized request payload.

        Returns:
            Sequence[Violation]: Violations in engine order, empty when valid.
        """
        ...


def field_name_from_loc(loc: Iterable[str | int]) -> str | None:
    """Join a pydantic location into a dotted field name.

    Args:
        loc: Location entries below the payload root.

    Returns:
        str | None: The dotted name, or None for a location at the root.
    """
    parts = [str(part) for part in loc if part not in ROOT_LOCATIONS]
    return ".".join(parts) if parts else None


def violation_from_error(error: Mapping[str, Any], *, loc_offset: int = 0) -> Violation:
    """Convert one pydantic error dictionary into a violation.

    Args:
        error: A pydantic error as returned by ``ValidationError.errors()``.
        loc_offset: Number of leading location entries to drop (e.g. ``body``).

    Returns:
        Violation: The rule identifier, message and field of the error.
    """
    loc = tuple(error.get("loc", ()))
    return Violation(
        code=str(error.get("type", "value_error")),
        message=error.get("msg"),
        field=field_name_from_loc(loc[loc_offset:]),
    )


def violations_from_errors(
    errors: Iterable[Mapping[str, Any]], *, loc_offset: int = 0
) -> list[Violation]:
    """Convert pydantic errors into violations, preserving their order."""
    return [violation_from_error(error, loc_offset=loc_offset) for error in errors]


def split_violations(
    violations: Iterable[Violation],
) -> tuple[list[Violation], list[Violation]]:
    """Partition violations into object-level and field-level groups.

    Args:
        violations: Violations in engine order.

    Returns:
        tuple[list[Violation], list[Violation]]: Global and field violations,
            each group keeping its input order.
    """
    global_violations: list[Violation] = []
    field_violations: list[Violation] = []
    for violation in violations:
        if violation.is_global:
            global_violations.append(violation)
        else:
            field_violations.append(violation)
    return global_violations, field_violations


class ReportedErrorsEngine:
    """Validation engine over errors pydantic already reported.

    FastAPI validates request bodies before any handler runs, so the errors
    exist by the time a failure is classified. The payload given to
    ``validate`` is that error list.

    Args:
        loc_offset: Number of leading location entries to drop (e.g. ``body``).
    """

    def __init__(self, loc_offset: int = 0) -> None:
        self.loc_offset = loc_offset

    def validate(self, payload: object) -> Sequence[Violation]:
        """Convert the reported errors into violations, keeping their order."""
        errors = cast("Iterable[Mapping[str, Any]]", payload)
        return violations_from_errors(errors, loc_offset=self.loc_offset)


class PydanticValidationEngine:
    """Validation engine backed by a pydantic model.

    Args:
        model: The pydantic model whose constraints define validity.
    """

    def __init__(self, model: type[BaseModel]) -> None:
        self.model = model

    def validate(self, payload: object) -> Sequence[Violation]:
        """Validate the payload against the model.

        Args:
            payload: The payload to validate (typically a decoded JSON object).

        Returns:
            Sequence[Violation]: Violations in the order pydantic reported them.
        """
        try:
            self.model.model_validate(payload)
        except PydanticValidationError as exc:
            return violations_from_errors(exc.errors())
        return []


def constraint_failure(
    engine: ValidationEngine, payload: object
) -> ConstraintViolationError | None:
    """Validate a payload and group the engine's violations into a failure.

    Args:
        engine: The validation engine to apply.
        payload: The payload to validate.

    Returns:
        ConstraintViolationError | None: The failure, None when the payload
            is valid.
    """
    violations = engine.validate(payload)
    if not violations:
        return None
    global_violations, field_violations = split_violations(violations)
    return ConstraintViolationError(global_violations, field_violations)


def validate_or_raise(engine: ValidationEngine, payload: object) -> None:
    """Validate a payload and raise when the engine reports violations.

    Args:
        engine: The validation engine to apply.
        payload: The payload to validate.

    Raises:
        ConstraintViolationError: If at least one violation was reported.
    """
    if failure := constraint_failure(engine, payload):
        raise failure
