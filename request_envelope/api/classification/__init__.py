"""Classification of request failures into error responses.

- **chain**: The ordered rule table mapping a failure to status and envelope
- **cause_inspector**: Refines unreadable body failures by their immediate cause
- **aggregator**: Flattens validation violations into one envelope
"""

from request_envelope.api.classification.chain import (
    DEFAULT_CHAIN,
    Classification,
    ClassificationChain,
    ClassificationRule,
)

__all__ = [
    "DEFAULT_CHAIN",
    "Classification",
    "ClassificationChain",
    "ClassificationRule",
]
