from .arguments import ArgumentList, any_args, anything, instance_of
from .assertions import (
    CountConstraint,
    Expectation,
    ExpectationMode,
    ExpectationState,
    have_received,
    received,
)
from .core.config import DoublesSettings, LogLevel, configure_logging, settings
from .core.exceptions import (
    ArgumentCountError,
    DoublesBaseException,
    ExpectationViolated,
    OrderViolationError,
    UnconfiguredMethodError,
    UnknownReferenceError,
    VerificationError,
)
from .doubles import (
    CALL_ORIGINAL,
    NO_OP,
    Double,
    as_null_object,
    calls,
    class_double,
    create,
    double,
    instance_double,
    invoke,
    object_double,
    raises,
    returns,
    stub,
)
from .patching import ScopedPatch
from .records import CallHistory, CallOutcome, CallRecorder, InvocationRecord
from .registry import (
    MemberKind,
    MethodSignature,
    ReferenceDescriptor,
    ReferenceLevel,
    describe_class,
    describe_instance,
    register_reference,
    resolve_reference,
)
from .sandbox import Sandbox
from .spies import SpyHandle, SpyMode, SpyRegistry


__all__ = [

    # arguments
    "ArgumentList",
    "any_args",
    "anything",
    "instance_of",

    # assertions/
    "CountConstraint",
    "Expectation",
    "ExpectationMode",
    "ExpectationState",
    "have_received",
    "received",

    # core/
    "DoublesSettings",
    "LogLevel",
    "configure_logging",
    "settings",
    "ArgumentCountError",
    "DoublesBaseException",
    "ExpectationViolated",
    "OrderViolationError",
    "UnconfiguredMethodError",
    "UnknownReferenceError",
    "VerificationError",

    # doubles/
    "CALL_ORIGINAL",
    "NO_OP",
    "Double",
    "as_null_object",
    "calls",
    "class_double",
    "create",
    "double",
    "instance_double",
    "invoke",
    "object_double",
    "raises",
    "returns",
    "stub",

    # recording, patching, spies/
    "CallHistory",
    "CallOutcome",
    "CallRecorder",
    "InvocationRecord",
    "ScopedPatch",
    "SpyHandle",
    "SpyMode",
    "SpyRegistry",

    # registry/
    "MemberKind",
    "MethodSignature",
    "ReferenceDescriptor",
    "ReferenceLevel",
    "describe_class",
    "describe_instance",
    "register_reference",
    "resolve_reference",

    "Sandbox",
]
