"""Ordered classification of request failures into status and envelope.

The chain is a single table of rules, one per failure category, listed from
most to least specific. A failure is matched against the rules once, in
order, and the first rule for its category builds the response. The last
rule matches every category and turns anything unrecognized into an
internal server error.

Priority:
1. Unacceptable response media type       406 UNSUPPORTED_TYPE
2. Unsupported request content type       400 INVALID_CONTENT_TYPE
3. Unreadable request body                400 (refined by the cause inspector)
4. Method not allowed                     405 METHOD_NOT_ALLOWED
5. Declarative validation failed          422 (one item per violation)
6. Parameter type mismatch                404 INVALID_RESOURCE for path segments,
                                          400 BAD_QUERY_PARAMETER otherwise
7. Route not found                        404 INVALID_RESOURCE
8. Anything else                          500 INTERNAL_SERVER_ERROR

Rules are immutable and hold no state, so one chain serves all concurrent
requests.
"""

from collections.abc import Callable, Iterable
from dataclasses import dataclass

from fastapi import status
from loguru import logger

from request_envelope.api.classification.aggregator import aggregate
from request_envelope.api.classification.cause_inspector import inspect_cause
from request_envelope.api.schemas.errors import ErrorEnvelope
from request_envelope.core.exceptions import (
    ConstraintViolationError,
    ErrorCode,
    FailureCategory,
    ParameterTypeMismatchError,
    RequestFailure,
    UnreadableBodyError,
)

UNSUPPORTED_TYPE_MESSAGE = "The resource cannot return the requested content type."
INVALID_CONTENT_TYPE_MESSAGE = "The resource does not accept the provided content type."
METHOD_NOT_ALLOWED_MESSAGE = "This method is not allowed for the requested resource."
INVALID_RESOURCE_MESSAGE = "The requested resource does not exist."
BAD_QUERY_PARAMETER_MESSAGE = "The query parameter has an invalid value."


@dataclass(frozen=True, slots=True)
class Classification:
    """HTTP status and error envelope chosen for a failure."""

    status_code: int
    envelope: ErrorEnvelope


type RuleBuilder = Callable[[BaseException], Classification]


@dataclass(frozen=True, slots=True)
class ClassificationRule:
    """A failure category paired with the function that builds its response.

    Attributes:
        category: Category the rule handles, None to match every category
        build: Pure function from the failure to its classification
    """

    category: FailureCategory | None
    build: RuleBuilder

    def matches(self, category: FailureCategory) -> bool:
        """Whether the rule handles failures of the given category."""
        return self.category is None or self.category is category


def category_of(exc: BaseException) -> FailureCategory:
    """Return the failure category of any exception.

    Args:
        exc: The exception raised while processing a request.

    Returns:
        FailureCategory: The tagged category, UNCAUGHT for untyped exceptions.
    """
    if isinstance(exc, RequestFailure):
        return exc.category
    return FailureCategory.UNCAUGHT


def _expect[T: BaseException](exc: BaseException, expected: type[T]) -> T:
    if not isinstance(exc, expected):
        raise TypeError(f"Expected {expected.__name__}, got {type(exc).__name__}")
    return exc


def _media_type_not_acceptable(_: BaseException) -> Classification:
    return Classification(
        status.HTTP_406_NOT_ACCEPTABLE,
        ErrorEnvelope.global_error(ErrorCode.UNSUPPORTED_TYPE, UNSUPPORTED_TYPE_MESSAGE),
    )


def _media_type_not_supported(_: BaseException) -> Classification:
    return Classification(
        status.HTTP_400_BAD_REQUEST,
        ErrorEnvelope.global_error(
            ErrorCode.INVALID_CONTENT_TYPE, INVALID_CONTENT_TYPE_MESSAGE
        ),
    )


def _body_unreadable(exc: BaseException) -> Classification:
    failure = _expect(exc, UnreadableBodyError)
    return Classification(
        status.HTTP_400_BAD_REQUEST, ErrorEnvelope.of(inspect_cause(failure))
    )


def _method_not_allowed(_: BaseException) -> Classification:
    return Classification(
        status.HTTP_405_METHOD_NOT_ALLOWED,
        ErrorEnvelope.global_error(
            ErrorCode.METHOD_NOT_ALLOWED, METHOD_NOT_ALLOWED_MESSAGE
        ),
    )


def _validation_failed(exc: BaseException) -> Classification:
    failure = _expect(exc, ConstraintViolationError)
    return Classification(
        status.HTTP_422_UNPROCESSABLE_ENTITY,
        aggregate(failure.global_violations, failure.field_violations),
    )


def _parameter_type_mismatch(exc: BaseException) -> Classification:
    failure = _expect(exc, ParameterTypeMismatchError)
    # A malformed path segment cannot name an existing resource
    if failure.is_path_parameter:
        return Classification(
            status.HTTP_404_NOT_FOUND,
            ErrorEnvelope.global_error(
                ErrorCode.INVALID_RESOURCE, INVALID_RESOURCE_MESSAGE
            ),
        )
    return Classification(
        status.HTTP_400_BAD_REQUEST,
        ErrorEnvelope.field_error(
            failure.name, ErrorCode.BAD_QUERY_PARAMETER, BAD_QUERY_PARAMETER_MESSAGE
        ),
    )


def _route_not_found(_: BaseException) -> Classification:
    return Classification(
        status.HTTP_404_NOT_FOUND,
        ErrorEnvelope.global_error(ErrorCode.INVALID_RESOURCE, INVALID_RESOURCE_MESSAGE),
    )


def _uncaught(_: BaseException) -> Classification:
    return Classification(
        status.HTTP_500_INTERNAL_SERVER_ERROR,
        ErrorEnvelope.global_error(ErrorCode.INTERNAL_SERVER_ERROR),
    )


CATCH_ALL_RULE = ClassificationRule(None, _uncaught)

DEFAULT_RULES: tuple[ClassificationRule, ...] = (
    ClassificationRule(
        FailureCategory.MEDIA_TYPE_NOT_ACCEPTABLE, _media_type_not_acceptable
    ),
    ClassificationRule(
        FailureCategory.MEDIA_TYPE_NOT_SUPPORTED, _media_type_not_supported
    ),
    ClassificationRule(FailureCategory.BODY_UNREADABLE, _body_unreadable),
    ClassificationRule(FailureCategory.METHOD_NOT_ALLOWED, _method_not_allowed),
    ClassificationRule(FailureCategory.VALIDATION_FAILED, _validation_failed),
    ClassificationRule(
        FailureCategory.PARAMETER_TYPE_MISMATCH, _parameter_type_mismatch
    ),
    ClassificationRule(FailureCategory.ROUTE_NOT_FOUND, _route_not_found),
    CATCH_ALL_RULE,
)


class ClassificationChain:
    """Ordered rules mapping a failure to exactly one classification.

    Args:
        rules: Rules in priority order. The catch-all rule is used when
            none of them matches.
    """

    def __init__(self, rules: Iterable[ClassificationRule] = DEFAULT_RULES) -> None:
        self.rules = tuple(rules)

    def rule_for(self, exc: BaseException) -> ClassificationRule:
        """Return the first rule matching the failure's category."""
        category = category_of(exc)
        for rule in self.rules:
            if rule.matches(category):
                return rule
        return CATCH_ALL_RULE

    def classify(self, exc: BaseException) -> Classification:
        """Classify a failure into a status code and a non-empty envelope.

        Never raises: a rule that fails to build its response is logged and
        the failure is reported as an internal server error.

        Args:
            exc: The failure raised while processing the request.

        Returns:
            Classification: The status code and envelope for the response.
        """
        rule = self.rule_for(exc)
        try:
            return rule.build(exc)
        except Exception as rule_error:  # noqa: BLE001 - the chain is the terminal handler
            logger.opt(exception=rule_error).error(
                "Classification rule for {category} failed",
                category=category_of(exc).value,
                exception_type=type(exc).__name__,
            )
            return CATCH_ALL_RULE.build(exc)


DEFAULT_CHAIN = ClassificationChain()
