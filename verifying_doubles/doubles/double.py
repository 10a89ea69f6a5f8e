from __future__ import annotations

import logging
from typing import Any, Dict, List, Mapping, Optional

from verifying_doubles.arguments import ArgumentList, format_call
from verifying_doubles.core.config import settings
from verifying_doubles.core.exceptions import (
    ArgumentCountError,
    UnconfiguredMethodError,
    VerificationError,
)
from verifying_doubles.doubles.responses import NO_OP, Response, Returns, as_response, respond_async
from verifying_doubles.registry import (
    ReferenceDescriptor,
    ReferenceLevel,
    describe_class,
    describe_instance,
    resolve_reference,
)
from verifying_doubles.records import CallOutcome, CallRecorder

logger = logging.getLogger(__name__)


def _is_dunder(name: str) -> bool:
    return name.startswith("__") and name.endswith("__")


class StubEntry:
    def __init__(self, response: Response, arguments: Optional[ArgumentList] = None):
        self.response = response
        self.arguments = arguments

    def accepts(self, args, kwargs) -> bool:
        return self.arguments is None or self.arguments.matches(args, kwargs)


class StubTable(Response):
    """Responses for one method, newest first, each optionally tied to expected arguments."""

    def __init__(self, label: str, name: str) -> None:
        self.label = label
        self.name = name
        self.entries: List[StubEntry] = []

    def add(self, response: Any, arguments: Optional[ArgumentList] = None) -> StubEntry:
        entry = StubEntry(as_response(response), arguments)
        # later stubs override earlier ones
        self.entries.insert(0, entry)
        return entry

    def remove(self, entry: StubEntry) -> None:
        if entry in self.entries:
            self.entries.remove(entry)

    def find(self, args, kwargs) -> Optional[StubEntry]:
        for entry in self.entries:
            if entry.accepts(args, kwargs):
                return entry
        return None

    def admits(self, args, kwargs) -> None:
        if self.find(args, kwargs) is not None:
            return
        expected = ", ".join(repr(e.arguments) for e in self.entries if e.arguments is not None)
        raise UnconfiguredMethodError(
            self.label,
            self.name,
            f"received unexpected arguments {format_call(args, kwargs)} (expected {expected or 'nothing'}) for",
        )

    def __call__(self, args, kwargs, original=None):
        entry = self.find(args, kwargs)
        if entry is None:
            self.admits(args, kwargs)
        return entry.response(args, kwargs, original)

    def __repr__(self) -> str:
        return f"StubTable({self.name!r}, {len(self.entries)} entries)"


class DoubleState:
    """Everything a Double knows, kept off the double itself so no doubled name is shadowed."""

    def __init__(
        self,
        label: str,
        descriptor: Optional[ReferenceDescriptor] = None,
        permissive: bool = False,
        original: Any = None,
    ) -> None:
        self.label = label
        self.descriptor = descriptor
        self.permissive = permissive
        self.original = original
        self.stubs: Dict[str, StubTable] = {}
        self.recorder = CallRecorder(label)

    def verify_name(self, name: str) -> None:
        if self.descriptor is not None and not self.descriptor.has(name):
            raise VerificationError(self.label, name, self.descriptor.suggest(name))

    def verify_arguments(self, name: str, args, kwargs) -> None:
        if self.descriptor is not None and settings.VERIFY_ARITY:
            try:
                self.descriptor.check_arguments(name, args, kwargs)
            except ArgumentCountError as e:
                # relabel with the double, not the reference
                raise ArgumentCountError(self.label, name, e.expected, e.actual) from e

    def add_stub(self, name: str, response: Any, arguments: Optional[ArgumentList] = None) -> StubEntry:
        self.verify_name(name)
        if arguments is not None and arguments.is_concrete:
            self.verify_arguments(name, arguments.args, arguments.kwargs)
        table = self.stubs.get(name)
        if table is None:
            table = self.stubs[name] = StubTable(self.label, name)
        entry = table.add(response, arguments)
        logger.debug(f"{self.label} stubbed {name} -> {entry.response!r}")
        return entry

    def find_stub(self, name: str, args, kwargs) -> Optional[StubEntry]:
        table = self.stubs.get(name)
        if table is None or not table.entries:
            if self.permissive:
                return None
            raise UnconfiguredMethodError(self.label, name)
        entry = table.find(args, kwargs)
        if entry is None and not self.permissive:
            table.admits(args, kwargs)
        return entry

    def original_callable(self, name: str):
        if self.original is None:
            return None
        member = self.descriptor.get(name) if self.descriptor is not None else None
        if member is not None and not member.is_callable:
            return lambda: getattr(self.original, name)
        return getattr(self.original, name, None)

    def is_async(self, name: str) -> bool:
        member = self.descriptor.get(name) if self.descriptor is not None else None
        return bool(member and member.is_async)


class _MethodProxy:
    __slots__ = ("_double", "_name")

    def __init__(self, double: "Double", name: str):
        self._double = double
        self._name = name

    def __call__(self, *args, **kwargs):
        return invoke(self._double, self._name, *args, **kwargs)

    def __repr__(self) -> str:
        return f"<stubbed {self._name} of {_state(self._double).label}>"


class Double:
    """
    A stand-in object that answers only what it was told to.

    Attribute access returns a callable that routes through ``invoke``;
    members the reference declares as properties or attributes are answered
    on access instead.
    """

    __slots__ = ("_double_state",)

    def __init__(self, state: DoubleState):
        object.__setattr__(self, "_double_state", state)

    def __getattr__(self, name: str):
        if _is_dunder(name):
            raise AttributeError(name)
        state = _state(self)
        member = state.descriptor.get(name) if state.descriptor is not None else None
        if member is not None and not member.is_callable:
            return invoke(self, name)
        return _MethodProxy(self, name)

    def __setattr__(self, name: str, value: Any) -> None:
        raise AttributeError(f"{_state(self).label} is read-only; use stub() to configure {name!r}")

    def __repr__(self) -> str:
        return f"#<{_state(self).label}>"


def _state(double: Double) -> DoubleState:
    return object.__getattribute__(double, "_double_state")


def state_of(double: Double) -> DoubleState:
    if not isinstance(double, Double):
        raise TypeError(f"Expected a Double, got {type(double).__name__}")
    return _state(double)


def create(
    descriptor: Optional[ReferenceDescriptor] = None,
    stubs: Optional[Mapping[str, Any]] = None,
    name: Optional[str] = None,
    permissive: bool = False,
    original: Any = None,
) -> Double:
    """
    Build a double, optionally verified against ``descriptor``.

    Stubs are checked in declaration order; the first name the descriptor does
    not know raises VerificationError.
    """
    if name is None:
        name = f"Double {descriptor.reference_name!r}" if descriptor is not None else "Double (anonymous)"
    state = DoubleState(name, descriptor, permissive, original)
    for method, response in (stubs or {}).items():
        state.add_stub(method, response)
    return Double(state)


def stub(double: Double, name: str, response: Any = None, args: Optional[ArgumentList] = None) -> None:
    state_of(double).add_stub(name, response, args)


def invoke(double: Double, name: str, /, *args, **kwargs) -> Any:
    """Dispatch one call: verify, record, respond."""
    state = state_of(double)
    try:
        state.verify_name(name)
        state.verify_arguments(name, args, kwargs)
        entry = state.find_stub(name, args, kwargs)
    except (VerificationError, ArgumentCountError, UnconfiguredMethodError) as e:
        state.recorder.record(name, args, kwargs, CallOutcome.FAILED, e)
        logger.debug(f"{state.label} rejected {name}{format_call(args, kwargs)}: {e.error_code}")
        raise

    state.recorder.record(name, args, kwargs)
    response = entry.response if entry is not None else Returns(NO_OP)
    original = state.original_callable(name)
    if state.is_async(name):
        return respond_async(response, args, kwargs, original)
    return response(args, kwargs, original)


def as_null_object(double: Double) -> Double:
    """Make unconfigured calls return NO_OP instead of failing."""
    state_of(double).permissive = True
    return double


def double(name: Optional[str] = None, /, **stubs: Any) -> Double:
    label = f"Double {name!r}" if name else "Double (anonymous)"
    return create(stubs=stubs, name=label)


def instance_double(reference: Any, /, **stubs: Any) -> Double:
    cls = resolve_reference(reference)
    descriptor = describe_class(cls, ReferenceLevel.INSTANCE)
    return create(descriptor, stubs, name=f"InstanceDouble({cls.__qualname__})")


def class_double(reference: Any, /, **stubs: Any) -> Double:
    cls = resolve_reference(reference)
    descriptor = describe_class(cls, ReferenceLevel.CLASS)
    return create(descriptor, stubs, name=f"ClassDouble({cls.__qualname__})", original=cls)


def object_double(obj: Any, /, **stubs: Any) -> Double:
    if isinstance(obj, type):
        descriptor = describe_class(obj, ReferenceLevel.CLASS)
    else:
        descriptor = describe_instance(obj)
    return create(descriptor, stubs, name=f"ObjectDouble({descriptor.label})", original=obj)


def is_double(obj: Any) -> bool:
    return isinstance(obj, Double)
