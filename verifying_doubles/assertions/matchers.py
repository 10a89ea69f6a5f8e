from __future__ import annotations

from typing import Any, Callable, Optional

from verifying_doubles.arguments import ArgumentList
from verifying_doubles.assertions.expectation import CountConstraint, Expectation, ExpectationMode
from verifying_doubles.doubles.responses import CALL_ORIGINAL, Response, calls, raises, returns


class _MessageMatcher:
    """Fluent description of the calls a target should get for one method."""

    mode: ExpectationMode
    default_count: CountConstraint

    def __init__(self, method: str) -> None:
        if not method or not isinstance(method, str):
            raise ValueError("method name must be a non-empty string")
        self.method = method
        self.arguments: Optional[ArgumentList] = None
        self.count: Optional[CountConstraint] = None
        self.is_ordered = False

    def with_args(self, *args: Any, **kwargs: Any):
        self.arguments = ArgumentList(args, kwargs)
        return self

    def with_no_args(self):
        return self.with_args()

    def times(self, n: int):
        self.count = CountConstraint.exactly(n)
        return self

    def once(self):
        return self.times(1)

    def twice(self):
        return self.times(2)

    def never(self):
        return self.times(0)

    def at_least(self, n: int):
        self.count = CountConstraint.at_least(n)
        return self

    def at_most(self, n: int):
        self.count = CountConstraint.at_most(n)
        return self

    def ordered(self):
        self.is_ordered = True
        return self

    def build(self, target_label: str, negated: bool = False) -> Expectation:
        count = self.count or self.default_count
        if negated:
            if self.count is not None:
                raise ValueError(f"not_to({self.method!r}) cannot be combined with a call count")
            count = CountConstraint.exactly(0)
        return Expectation(
            target_label,
            self.method,
            self.arguments,
            count,
            ordered=self.is_ordered,
            mode=self.mode,
        )

    def __repr__(self) -> str:
        args = repr(self.arguments) if self.arguments is not None else ""
        return f"{type(self).__name__}({self.method}{args})"


class ReceiveMatcher(_MessageMatcher):
    """
    ``received(name)``: a pre-declared expectation (with ``expect``) or a plain
    stub (with ``allow``). Carries the response the target should give.
    """

    mode = ExpectationMode.PRE_DECLARED
    default_count = CountConstraint.exactly(1)

    def __init__(self, method: str) -> None:
        super().__init__(method)
        self.response: Optional[Response] = None

    def and_return(self, value: Any) -> "ReceiveMatcher":
        self.response = returns(value)
        return self

    def and_raise(self, exc: BaseException | type) -> "ReceiveMatcher":
        self.response = raises(exc)
        return self

    def and_call(self, fn: Callable) -> "ReceiveMatcher":
        self.response = calls(fn)
        return self

    def and_call_original(self) -> "ReceiveMatcher":
        self.response = CALL_ORIGINAL
        return self

    @property
    def calls_original(self) -> bool:
        return self.response is CALL_ORIGINAL


class HaveReceivedMatcher(_MessageMatcher):
    """``have_received(name)``: checked immediately against the calls recorded so far."""

    mode = ExpectationMode.POST_HOC
    default_count = CountConstraint.at_least(1)


def received(method: str) -> ReceiveMatcher:
    return ReceiveMatcher(method)


def have_received(method: str) -> HaveReceivedMatcher:
    return HaveReceivedMatcher(method)
