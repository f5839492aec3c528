"""Unit tests for the violation aggregator."""

import pytest

from request_envelope.api.classification.aggregator import aggregate
from request_envelope.api.schemas.errors import ErrorItem
from request_envelope.core.exceptions import Violation
from request_envelope.core.validation import split_violations


@pytest.mark.unit
class TestAggregate:
    """Test suite for aggregate."""

    def test_global_violations_come_first(self) -> None:
        """Test global violations precede field violations."""
        envelope = aggregate(
            [Violation(code="sum_exceeded", message="Sum too large")],
            [Violation(code="missing", message="Field required", field="id")],
        )

        assert envelope.errors == (
            ErrorItem(code="sum_exceeded", message="Sum too large"),
            ErrorItem(field="id", code="missing", message="Field required"),
        )

    def test_order_is_preserved_within_groups(self) -> None:
        """Test items are neither sorted nor deduplicated."""
        field_violations = [
            Violation(code="missing", field="name"),
            Violation(code="missing", field="id"),
            Violation(code="missing", field="name"),
        ]

        envelope = aggregate([], field_violations)

        assert [item.field for item in envelope.errors] == ["name", "id", "name"]

    def test_global_violation_field_is_dropped(self) -> None:
        """Test items from the global group never carry a field."""
        envelope = aggregate([Violation(code="x", field="ignored")], [])

        assert envelope.errors[0].field is None

    def test_only_global(self) -> None:
        """Test global violations alone build an envelope."""
        envelope = aggregate([Violation(code="a"), Violation(code="b")], [])

        assert [item.code for item in envelope.errors] == ["a", "b"]

    def test_no_violations_rejected(self) -> None:
        """Test an envelope cannot be built from nothing."""
        with pytest.raises(ValueError, match="without violations"):
            aggregate([], [])

    def test_split_then_aggregate(self) -> None:
        """Test engine output can be split and aggregated in one pass."""
        violations = [
            Violation(code="missing", field="id"),
            Violation(code="value_error", message="Dates out of order"),
        ]

        envelope = aggregate(*split_violations(violations))

        assert [(item.field, item.code) for item in envelope.errors] == [
            (None, "value_error"),
            ("id", "missing"),
        ]
