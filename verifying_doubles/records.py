from __future__ import annotations

import itertools
import logging
from enum import Enum
from typing import Any, Dict, Iterator, List, Optional, Tuple

from pydantic import BaseModel, ConfigDict, Field

from verifying_doubles.arguments import format_call
from verifying_doubles.core.config import settings

logger = logging.getLogger(__name__)


class CallOutcome(str, Enum):
    OK = "ok"
    FAILED = "failed"


class InvocationRecord(BaseModel):
    """One received call. Immutable once recorded."""

    model_config = ConfigDict(frozen=True, arbitrary_types_allowed=True)

    method: str
    args: Tuple[Any, ...] = ()
    kwargs: Dict[str, Any] = Field(default_factory=dict)
    sequence: int = Field(ge=1)
    outcome: CallOutcome = CallOutcome.OK
    error: Optional[str] = Field(default=None, description="Exception class name for failed calls")

    @property
    def failed(self) -> bool:
        return self.outcome is CallOutcome.FAILED

    def describe(self) -> str:
        text = f"#{self.sequence} {self.method}{format_call(self.args, self.kwargs)}"
        if self.failed:
            text += f" [failed: {self.error}]"
        return text


class CallHistory:
    """
    Lazy, restartable view over the calls a recorder held when it was queried.

    Iterating twice yields the same records; calls made after the query are
    not part of it.
    """

    def __init__(
        self,
        records: Tuple[InvocationRecord, ...],
        method: Optional[str] = None,
        include_failed: bool = False,
    ):
        self._records = records
        self.method = method
        self.include_failed = include_failed

    def __iter__(self) -> Iterator[InvocationRecord]:
        return (
            r
            for r in self._records
            if (self.method is None or r.method == self.method) and (self.include_failed or not r.failed)
        )

    def __len__(self) -> int:
        return sum(1 for _ in self)

    def __bool__(self) -> bool:
        return any(True for _ in self)

    def __getitem__(self, index: int) -> InvocationRecord:
        return list(self)[index]

    def __repr__(self) -> str:
        return f"CallHistory({[r.describe() for r in self]})"


class CallRecorder:
    """Append-only log of (method, args, kwargs) with per-recorder sequence numbers."""

    def __init__(self, target_label: str) -> None:
        self.target_label = target_label
        self._records: List[InvocationRecord] = []
        self._sequence = itertools.count(1)

    def record(
        self,
        method: str,
        args: Tuple[Any, ...] = (),
        kwargs: Optional[Dict[str, Any]] = None,
        outcome: CallOutcome = CallOutcome.OK,
        error: Optional[BaseException] = None,
    ) -> Optional[InvocationRecord]:
        if outcome is CallOutcome.FAILED and not settings.RECORD_FAILED_CALLS:
            return None
        entry = InvocationRecord(
            method=method,
            args=tuple(args),
            kwargs=dict(kwargs or {}),
            sequence=next(self._sequence),
            outcome=outcome,
            error=type(error).__name__ if error is not None else None,
        )
        self._records.append(entry)
        logger.debug(f"{self.target_label} recorded {entry.describe()}")
        return entry

    def calls_to(self, method: Optional[str] = None, include_failed: bool = False) -> CallHistory:
        return CallHistory(tuple(self._records), method, include_failed)

    @property
    def received_calls(self) -> List[Tuple[str, tuple, dict]]:
        """Successful calls as (method_name, args, kwargs) tuples."""
        return [(r.method, r.args, r.kwargs) for r in self._records if not r.failed]

    def __len__(self) -> int:
        return len(self._records)
