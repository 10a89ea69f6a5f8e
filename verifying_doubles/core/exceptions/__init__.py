from .base import (
    ArgumentCountError,
    DoublesBaseException,
    ExpectationViolated,
    OrderViolationError,
    UnconfiguredMethodError,
    UnknownReferenceError,
    VerificationError,
)

__all__ = [
    "ArgumentCountError",
    "DoublesBaseException",
    "ExpectationViolated",
    "OrderViolationError",
    "UnconfiguredMethodError",
    "UnknownReferenceError",
    "VerificationError",
]
