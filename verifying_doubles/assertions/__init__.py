from .expectation import (
    CountConstraint,
    CountKind,
    Expectation,
    ExpectationMode,
    ExpectationState,
)
from .matchers import HaveReceivedMatcher, ReceiveMatcher, have_received, received

__all__ = [
    "CountConstraint",
    "CountKind",
    "Expectation",
    "ExpectationMode",
    "ExpectationState",
    "HaveReceivedMatcher",
    "ReceiveMatcher",
    "have_received",
    "received",
]
