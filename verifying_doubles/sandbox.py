"""
Per-test owner of doubles, spies, patches and expectations.

A Sandbox is created for one test case, verifies its pre-declared
expectations at teardown and then puts every patched target back, even when
the test body raised.
"""
from __future__ import annotations

import logging
from typing import Any, Dict, List, Optional, Tuple

from verifying_doubles.assertions.expectation import Expectation
from verifying_doubles.assertions.matchers import HaveReceivedMatcher, ReceiveMatcher
from verifying_doubles.core.exceptions import ExpectationViolated, VerificationError
from verifying_doubles.doubles.double import (
    Double,
    StubTable,
    as_null_object,
    class_double,
    double,
    instance_double,
    object_double,
    state_of,
)
from verifying_doubles.doubles.responses import Returns
from verifying_doubles.patching import ScopedPatch
from verifying_doubles.records import CallHistory
from verifying_doubles.spies.wrapping import SpyHandle, SpyMode, SpyRegistry, descriptor_for, target_label

logger = logging.getLogger(__name__)


class _OrderCursor:
    """Last sequence number claimed by an ordered expectation, per target."""

    def __init__(self) -> None:
        self._last: Dict[int, Tuple[int, str]] = {}

    def position(self, target: Any) -> Tuple[Optional[int], Optional[str]]:
        return self._last.get(id(target), (None, None))

    def advance(self, target: Any, expectation: Expectation) -> None:
        if expectation.last_sequence is not None:
            self._last[id(target)] = (expectation.last_sequence, expectation.method)


class AllowTarget:
    def __init__(self, sandbox: "Sandbox", target: Any) -> None:
        self._sandbox = sandbox
        self._target = target

    def to(self, matcher: ReceiveMatcher) -> ReceiveMatcher:
        if not isinstance(matcher, ReceiveMatcher):
            raise TypeError("allow(...).to() takes received(...)")
        self._sandbox._install(self._target, matcher)
        return matcher


class ExpectTarget:
    def __init__(self, sandbox: "Sandbox", target: Any) -> None:
        self._sandbox = sandbox
        self._target = target

    def to(self, matcher):
        return self._sandbox._expect(self._target, matcher, negated=False)

    def not_to(self, matcher):
        return self._sandbox._expect(self._target, matcher, negated=True)

    to_not = not_to


class Sandbox:
    def __init__(self) -> None:
        self.spies = SpyRegistry()
        self._tables: Dict[Tuple[int, str], StubTable] = {}
        self._patches: List[ScopedPatch] = []
        self._expectations: List[Tuple[Any, Expectation]] = []
        self._post_hoc_order = _OrderCursor()
        self.verified = False

    # ---- doubles ---------------------------------------------------------

    def double(self, name: Optional[str] = None, /, **stubs: Any) -> Double:
        return double(name, **stubs)

    def instance_double(self, reference: Any, /, **stubs: Any) -> Double:
        return instance_double(reference, **stubs)

    def class_double(self, reference: Any, /, **stubs: Any) -> Double:
        return class_double(reference, **stubs)

    def object_double(self, obj: Any, /, **stubs: Any) -> Double:
        return object_double(obj, **stubs)

    def null_double(self, name: Optional[str] = None, /, **stubs: Any) -> Double:
        return as_null_object(double(name, **stubs))

    # ---- spies -----------------------------------------------------------

    def spy(self, target: Any, name: str, mode: SpyMode = SpyMode.FORWARD, response: Any = None) -> SpyHandle:
        self._tables.pop((id(target), name), None)
        return self.spies.wrap(target, name, mode, response)

    def unwrap(self, target: Any, name: str) -> None:
        self._tables.pop((id(target), name), None)
        self.spies.unwrap(target, name)

    def calls_to(self, target: Any, name: Optional[str] = None, include_failed: bool = False) -> CallHistory:
        return self.spies.calls_to(target, name, include_failed)

    def patch(self, target: Any, name: str, value: Any) -> ScopedPatch:
        """Set ``target.name`` to ``value`` until the sandbox resets."""
        scoped = ScopedPatch(target, name, value).apply()
        self._patches.append(scoped)
        return scoped

    # ---- matchers --------------------------------------------------------

    def allow(self, target: Any) -> AllowTarget:
        return AllowTarget(self, target)

    def expect(self, target: Any) -> ExpectTarget:
        return ExpectTarget(self, target)

    def _install(self, target: Any, matcher: ReceiveMatcher) -> None:
        response = matcher.response if matcher.response is not None else Returns(None)
        if isinstance(target, Double):
            state_of(target).add_stub(matcher.method, response, matcher.arguments)
            return

        if matcher.arguments is not None and matcher.arguments.is_concrete:
            descriptor_for(target).check_arguments(matcher.method, matcher.arguments.args, matcher.arguments.kwargs)
        key = (id(target), matcher.method)
        table = self._tables.get(key)
        if table is None or not self.spies.is_wrapped(target, matcher.method):
            table = StubTable(target_label(target), matcher.method)
            self.spies.wrap(target, matcher.method, SpyMode.SUPPRESS, table)
            self._tables[key] = table
        table.add(response, matcher.arguments)

    def _expect(self, target: Any, matcher, negated: bool) -> Expectation:
        if not isinstance(matcher, (ReceiveMatcher, HaveReceivedMatcher)):
            raise TypeError("expect(...).to() takes received(...) or have_received(...)")
        label = target_label(target)
        expectation = matcher.build(label, negated=negated)

        if isinstance(matcher, ReceiveMatcher):
            self._install(target, matcher)
            self._expectations.append((target, expectation))
            logger.debug(f"Pre-declared {expectation!r}")
            return expectation

        self._check_spied(target, matcher.method, label)
        after, after_method = self._post_hoc_order.position(target) if expectation.ordered else (None, None)
        expectation.resolve(self.calls_to(target, include_failed=True), after, after_method)
        if expectation.error is not None:
            raise expectation.error
        if expectation.ordered:
            self._post_hoc_order.advance(target, expectation)
        return expectation

    def _check_spied(self, target: Any, method: str, label: str) -> None:
        if isinstance(target, Double):
            state_of(target).verify_name(method)
            return
        descriptor = descriptor_for(target)
        if not descriptor.has(method):
            raise VerificationError(label, method, descriptor.suggest(method))
        if not self.spies.is_wrapped(target, method):
            raise ExpectationViolated(
                f"{label}.{method} is not being spied on; "
                f"call spy(target, {method!r}) or allow(target).to(received({method!r})) first",
                target=label,
                method=method,
            )

    # ---- lifecycle -------------------------------------------------------

    @property
    def expectations(self) -> List[Expectation]:
        return [e for _, e in self._expectations]

    def verify(self) -> None:
        """
        Resolve every pre-declared expectation.

        Ordered expectations are checked per target in declaration order.
        Raises the violation when there is one, or an ExpectationViolated
        listing all of them when there are several.
        """
        self.verified = True
        cursor = _OrderCursor()
        violations: List[ExpectationViolated] = []

        for target, expectation in self._expectations:
            after, after_method = cursor.position(target) if expectation.ordered else (None, None)
            expectation.resolve(self.calls_to(target, include_failed=True), after, after_method)
            if expectation.error is not None:
                violations.append(expectation.error)
            elif expectation.ordered:
                cursor.advance(target, expectation)

        if not violations:
            return
        if len(violations) == 1:
            raise violations[0]
        message = "\n\n".join(f"{i}) {v.message}" for i, v in enumerate(violations, 1))
        raise ExpectationViolated(f"{len(violations)} expectations were not met:\n\n{message}")

    def reset(self) -> None:
        """Undo every spy, stub and patch installed on live objects."""
        self.spies.restore_all()
        self._tables.clear()
        while self._patches:
            self._patches.pop().release()

    def __enter__(self) -> "Sandbox":
        return self

    def __exit__(self, exc_type, exc, tb) -> None:
        try:
            if exc_type is None:
                self.verify()
        finally:
            self.reset()
