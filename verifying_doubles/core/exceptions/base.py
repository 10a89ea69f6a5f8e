"""
Exception classes raised by doubles, spies and expectations.

Every error carries enough context (target, method, expected vs actual) to fix
the failing test from the message alone.
"""
from typing import Optional, Sequence


class DoublesBaseException(Exception):
    """Base exception for all verifying-doubles errors"""

    def __init__(
        self,
        message: str,
        error_code: str = None,
        *,
        target: Optional[str] = None,
        method: Optional[str] = None,
    ):
        super().__init__(message)
        self.message = message
        self.error_code = error_code or self.__class__.__name__
        self.target = target
        self.method = method


class UnknownReferenceError(DoublesBaseException):
    """The class or instance named for a verifying double cannot be resolved"""

    def __init__(self, reference: str, searched: Sequence[str] = ()):
        where = f" (searched: {', '.join(searched)})" if searched else ""
        super().__init__(f"Unable to resolve reference {reference!r}{where}", target=reference)
        self.reference = reference
        self.searched = list(searched)


class VerificationError(DoublesBaseException):
    """A stubbed, expected or called method name does not exist on the real reference"""

    def __init__(self, target: str, method: str, suggestions: Sequence[str] = ()):
        message = f"{target} does not implement: {method}"
        if suggestions:
            message += f". Did you mean: {', '.join(suggestions)}?"
        super().__init__(message, target=target, method=method)
        self.suggestions = list(suggestions)


class ArgumentCountError(DoublesBaseException):
    """Call-time arguments do not fit the real method's signature"""

    def __init__(self, target: str, method: str, expected: str, actual: int, detail: str = ""):
        message = (
            f"Wrong number of arguments for {target}.{method}: "
            f"expected {expected}, got {actual}"
        )
        if detail:
            message += f" ({detail})"
        super().__init__(message, target=target, method=method)
        self.expected = expected
        self.actual = actual


class UnconfiguredMethodError(DoublesBaseException):
    """A non-permissive double received a call it was never told to handle"""

    def __init__(self, target: str, method: str, reason: str = "received unexpected message"):
        super().__init__(f"{target} {reason} {method!r}", target=target, method=method)


class ExpectationViolated(DoublesBaseException, AssertionError):
    """A pre-declared or post-hoc expectation's count or argument constraints are unmet"""

    def __init__(self, message: str, *, target: Optional[str] = None, method: Optional[str] = None):
        super().__init__(message, target=target, method=method)


class OrderViolationError(ExpectationViolated):
    """Ordered expectations were observed out of sequence"""

    def __init__(
        self,
        message: str,
        *,
        target: Optional[str] = None,
        method: Optional[str] = None,
        expected_after: Optional[int] = None,
        actual_sequence: Optional[int] = None,
    ):
        super().__init__(message, target=target, method=method)
        self.expected_after = expected_after
        self.actual_sequence = actual_sequence
