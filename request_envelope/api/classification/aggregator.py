"""Flattening of validation engine violations into an error envelope."""

from collections.abc import Iterable

from request_envelope.api.schemas.errors import ErrorEnvelope, ErrorItem
from request_envelope.core.exceptions import Violation


def aggregate(
    global_violations: Iterable[Violation],
    field_violations: Iterable[Violation],
) -> ErrorEnvelope:
    """Build one envelope holding every violation.

    Global violations come first, then field violations. Each group keeps
    its input order and nothing is sorted or deduplicated.

    Args:
        global_violations: Object-level violations.
        field_violations: Field-level violations.

    Returns:
        ErrorEnvelope: One item per violation.

    Raises:
        ValueError: If there are no violations at all.
    """
    items = [
        ErrorItem(field=None, code=violation.code, message=violation.message)
        for violation in global_violations
    ]
    items.extend(
        ErrorItem(field=violation.field, code=violation.code, message=violation.message)
        for violation in field_violations
    )
    if not items:
        raise ValueError("Cannot build an error envelope without violations")
    return ErrorEnvelope.of(*items)
