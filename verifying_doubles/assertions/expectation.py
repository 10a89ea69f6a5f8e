from __future__ import annotations

import logging
from enum import Enum
from typing import Iterable, List, Optional

from pydantic import BaseModel, ConfigDict, Field

from verifying_doubles.arguments import ArgumentList
from verifying_doubles.core.exceptions import ExpectationViolated, OrderViolationError
from verifying_doubles.records import InvocationRecord
from verifying_doubles.registry import suggest_names

logger = logging.getLogger(__name__)


class ExpectationMode(str, Enum):
    PRE_DECLARED = "pre_declared"
    POST_HOC = "post_hoc"


class ExpectationState(str, Enum):
    PENDING = "pending"
    SATISFIED = "satisfied"
    VIOLATED = "violated"


class CountKind(str, Enum):
    EXACTLY = "exactly"
    AT_LEAST = "at_least"
    AT_MOST = "at_most"


def _calls(n: int) -> str:
    return f"{n} call" if n == 1 else f"{n} calls"


class CountConstraint(BaseModel):
    model_config = ConfigDict(frozen=True)

    kind: CountKind = CountKind.EXACTLY
    n: int = Field(default=1, ge=0)

    @classmethod
    def exactly(cls, n: int) -> "CountConstraint":
        return cls(kind=CountKind.EXACTLY, n=n)

    @classmethod
    def at_least(cls, n: int) -> "CountConstraint":
        return cls(kind=CountKind.AT_LEAST, n=n)

    @classmethod
    def at_most(cls, n: int) -> "CountConstraint":
        return cls(kind=CountKind.AT_MOST, n=n)

    def satisfied_by(self, count: int) -> bool:
        if self.kind is CountKind.EXACTLY:
            return count == self.n
        if self.kind is CountKind.AT_LEAST:
            return count >= self.n
        return count <= self.n

    def describe(self) -> str:
        if self.kind is CountKind.EXACTLY:
            return _calls(self.n)
        return f"{self.kind.value.replace('_', ' ')} {_calls(self.n)}"


class Expectation:
    """
    One assertion about calls to ``method`` on one target.

    Starts Pending and is resolved exactly once, to Satisfied or Violated.
    Later ``resolve`` calls return the first verdict unchanged.
    """

    def __init__(
        self,
        target_label: str,
        method: str,
        arguments: Optional[ArgumentList] = None,
        count: Optional[CountConstraint] = None,
        ordered: bool = False,
        mode: ExpectationMode = ExpectationMode.POST_HOC,
    ) -> None:
        self.target_label = target_label
        self.method = method
        self.arguments = arguments
        self.count = count or CountConstraint.exactly(1)
        self.ordered = ordered
        self.mode = mode
        self.state = ExpectationState.PENDING
        self.matched: List[InvocationRecord] = []
        self.error: Optional[ExpectationViolated] = None

    @property
    def resolved(self) -> bool:
        return self.state is not ExpectationState.PENDING

    @property
    def satisfied(self) -> bool:
        return self.state is ExpectationState.SATISFIED

    @property
    def first_sequence(self) -> Optional[int]:
        return self.matched[0].sequence if self.matched else None

    @property
    def last_sequence(self) -> Optional[int]:
        return self.matched[-1].sequence if self.matched else None

    def describe(self) -> str:
        args = repr(self.arguments) if self.arguments is not None else "(*any args)"
        return f"{self.target_label}.{self.method}{args}"

    def matches(self, record: InvocationRecord) -> bool:
        if record.failed or record.method != self.method:
            return False
        return self.arguments is None or self.arguments.matches(record.args, record.kwargs)

    def resolve(
        self,
        history: Iterable[InvocationRecord],
        after_sequence: Optional[int] = None,
        after_label: Optional[str] = None,
    ) -> ExpectationState:
        """
        Judge the expectation against ``history`` (every call the target got).

        ``after_sequence`` is the last sequence number claimed by the previous
        ordered expectation on the same target; ordered expectations must
        start after it.
        """
        if self.resolved:
            return self.state

        records = list(history)
        self.matched = [r for r in records if self.matches(r)]
        actual = len(self.matched)

        if not self.count.satisfied_by(actual):
            return self._violate(
                ExpectationViolated(
                    self._count_message(actual, records),
                    target=self.target_label,
                    method=self.method,
                )
            )

        if self.ordered and after_sequence is not None and self.matched:
            if self.first_sequence <= after_sequence:
                return self._violate(
                    OrderViolationError(
                        f"{self.describe()} received out of order: expected after call "
                        f"#{after_sequence}{f' ({after_label})' if after_label else ''}, "
                        f"but it was received as call #{self.first_sequence}.\n"
                        f"{self._history_text(records)}",
                        target=self.target_label,
                        method=self.method,
                        expected_after=after_sequence,
                        actual_sequence=self.first_sequence,
                    )
                )

        self.state = ExpectationState.SATISFIED
        logger.debug(f"Satisfied: {self.describe()} ({self.mode.value})")
        return self.state

    def _violate(self, error: ExpectationViolated) -> ExpectationState:
        self.state = ExpectationState.VIOLATED
        self.error = error
        logger.warning(f"Violated: {error.message.splitlines()[0]}")
        return self.state

    def _count_message(self, actual: int, records: List[InvocationRecord]) -> str:
        lines = [f"{self.describe()}: expected {self.count.describe()}, got {actual}"]

        same_name = [r for r in records if r.method == self.method and not self.matches(r)]
        if same_name and self.arguments is not None:
            lines.append(f"  calls to {self.method} with other arguments:")
            lines.extend(f"    {r.describe()}" for r in same_name)

        if not any(r.method == self.method for r in records):
            suggestions = suggest_names(self.method, {r.method for r in records})
            if suggestions:
                lines.append(f"  Did you mean: {', '.join(suggestions)}?")

        lines.append(self._history_text(records))
        return "\n".join(lines)

    def _history_text(self, records: List[InvocationRecord]) -> str:
        if not records:
            return f"  {self.target_label} received no calls."
        body = "\n".join(f"    {r.describe()}" for r in records)
        return f"  calls received by {self.target_label}:\n{body}"

    def __repr__(self) -> str:
        return f"<Expectation {self.describe()} {self.count.describe()} [{self.state.value}]>"
