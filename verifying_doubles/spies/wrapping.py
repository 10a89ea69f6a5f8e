from __future__ import annotations

import functools
import inspect
import logging
from dataclasses import dataclass, field
from enum import Enum
from typing import Any, Callable, Dict, Optional, Tuple

from verifying_doubles.core.config import settings
from verifying_doubles.core.exceptions import (
    ArgumentCountError,
    DoublesBaseException,
    UnconfiguredMethodError,
    VerificationError,
)
from verifying_doubles.doubles.double import Double, StubEntry, state_of
from verifying_doubles.doubles.responses import Response, as_response
from verifying_doubles.patching import ScopedPatch
from verifying_doubles.records import CallHistory, CallOutcome, CallRecorder
from verifying_doubles.registry import (
    ReferenceDescriptor,
    ReferenceLevel,
    describe_class,
    describe_instance,
)

logger = logging.getLogger(__name__)


class SpyMode(str, Enum):
    FORWARD = "forward"
    SUPPRESS = "suppress"


def target_label(target: Any) -> str:
    if isinstance(target, Double):
        return state_of(target).label
    if isinstance(target, type):
        return f"{target.__qualname__} class"
    return f"{type(target).__qualname__} instance"


def descriptor_for(target: Any) -> Optional[ReferenceDescriptor]:
    """The members a target exposes: class-level for classes, instance-level otherwise."""
    if isinstance(target, Double):
        return state_of(target).descriptor
    if isinstance(target, type):
        return describe_class(target, ReferenceLevel.CLASS)
    return describe_instance(target)


@dataclass(eq=False)
class SpyHandle:
    """An installed spy. ``restore`` puts the target back exactly as it was."""

    target: Any
    name: str
    mode: SpyMode
    recorder: CallRecorder
    response: Optional[Response] = None
    patch: Optional[ScopedPatch] = field(default=None, repr=False)
    stub_entry: Optional[StubEntry] = field(default=None, repr=False)

    @property
    def active(self) -> bool:
        if self.patch is not None:
            return self.patch.active
        return self.stub_entry is not None

    def calls(self, include_failed: bool = False) -> CallHistory:
        return self.recorder.calls_to(self.name, include_failed)

    @property
    def call_count(self) -> int:
        return len(self.calls())

    def restore(self) -> None:
        if self.patch is not None:
            self.patch.release()
        if self.stub_entry is not None:
            table = state_of(self.target).stubs.get(self.name)
            if table is not None:
                table.remove(self.stub_entry)
            self.stub_entry = None


class SpyRegistry:
    """
    Per-test bookkeeping for recorders and installed spies.

    One recorder per target object, so calls to different methods of the same
    target share one sequence and can be ordered against each other.
    """

    def __init__(self) -> None:
        self._recorders: Dict[int, Tuple[Any, CallRecorder]] = {}
        self._handles: Dict[Tuple[int, str], SpyHandle] = {}

    def recorder_for(self, target: Any) -> CallRecorder:
        if isinstance(target, Double):
            return state_of(target).recorder
        key = id(target)
        if key not in self._recorders:
            # hold the target so its id cannot be reused while the recorder lives
            self._recorders[key] = (target, CallRecorder(target_label(target)))
        return self._recorders[key][1]

    def is_wrapped(self, target: Any, name: str) -> bool:
        return (id(target), name) in self._handles

    def handle_for(self, target: Any, name: str) -> Optional[SpyHandle]:
        return self._handles.get((id(target), name))

    def wrap(
        self,
        target: Any,
        name: str,
        mode: SpyMode = SpyMode.FORWARD,
        response: Any = None,
    ) -> SpyHandle:
        """
        Record every call to ``target.name``.

        FORWARD keeps the real behaviour; SUPPRESS answers with ``response``
        instead. Wrapping the same (target, name) again replaces the previous
        spy rather than stacking on top of it.
        """
        mode = SpyMode(mode)
        self.unwrap(target, name)
        recorder = self.recorder_for(target)

        if isinstance(target, Double):
            handle = self._wrap_double(target, name, mode, response, recorder)
        else:
            handle = self._wrap_live(target, name, mode, response, recorder)

        self._handles[(id(target), name)] = handle
        logger.debug(f"Spying on {recorder.target_label}.{name} ({mode.value})")
        return handle

    def unwrap(self, target: Any, name: str) -> None:
        """Put ``target.name`` back. Safe to call when nothing is wrapped."""
        handle = self._handles.pop((id(target), name), None)
        if handle is not None:
            handle.restore()

    def calls_to(self, target: Any, name: Optional[str] = None, include_failed: bool = False) -> CallHistory:
        return self.recorder_for(target).calls_to(name, include_failed)

    def restore_all(self) -> None:
        for key in list(self._handles):
            self._handles.pop(key).restore()

    def _wrap_double(self, target: Double, name, mode, response, recorder) -> SpyHandle:
        # doubles record every call already; a spy only checks the name and maybe stubs it
        state = state_of(target)
        state.verify_name(name)
        handle = SpyHandle(target=target, name=name, mode=mode, recorder=recorder)
        if mode is SpyMode.SUPPRESS:
            handle.response = as_response(response)
            handle.stub_entry = state.add_stub(name, handle.response)
        return handle

    def _wrap_live(self, target: Any, name, mode, response, recorder) -> SpyHandle:
        label = target_label(target)
        descriptor = descriptor_for(target)
        member = descriptor.get(name)
        if member is None:
            raise VerificationError(label, name, descriptor.suggest(name))
        if not member.is_callable:
            raise DoublesBaseException(
                f"{label}.{name} is a {member.kind.value}, not a method; only methods can be spied on",
                target=label,
                method=name,
            )

        real = getattr(target, name)
        handle = SpyHandle(
            target=target,
            name=name,
            mode=mode,
            recorder=recorder,
            response=as_response(response) if mode is SpyMode.SUPPRESS else None,
        )
        wrapper = self._make_wrapper(handle, real, descriptor)
        installed = staticmethod(wrapper) if isinstance(target, type) else wrapper
        handle.patch = ScopedPatch(target, name, installed).apply()
        return handle

    @staticmethod
    def _make_wrapper(handle: SpyHandle, real: Callable, descriptor: ReferenceDescriptor) -> Callable:
        name = handle.name

        def record(args, kwargs) -> None:
            try:
                if settings.VERIFY_ARITY:
                    descriptor.check_arguments(name, args, kwargs)
                if handle.mode is SpyMode.SUPPRESS:
                    handle.response.admits(args, kwargs)
            except (ArgumentCountError, UnconfiguredMethodError) as e:
                handle.recorder.record(name, args, kwargs, CallOutcome.FAILED, e)
                raise
            handle.recorder.record(name, args, kwargs)

        if inspect.iscoroutinefunction(real):

            @functools.wraps(real)
            async def async_wrapper(*args, **kwargs):
                record(args, kwargs)
                if handle.mode is SpyMode.FORWARD:
                    return await real(*args, **kwargs)
                result = handle.response(args, kwargs, real)
                if inspect.isawaitable(result):
                    return await result
                return result

            return async_wrapper

        @functools.wraps(real)
        def wrapper(*args, **kwargs):
            record(args, kwargs)
            if handle.mode is SpyMode.FORWARD:
                return real(*args, **kwargs)
            return handle.response(args, kwargs, real)

        return wrapper
