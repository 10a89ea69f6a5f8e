from verifying_doubles.records import CallHistory, CallOutcome, CallRecorder, InvocationRecord
from .wrapping import SpyHandle, SpyMode, SpyRegistry, descriptor_for, target_label

__all__ = [
    "CallHistory",
    "CallOutcome",
    "CallRecorder",
    "InvocationRecord",
    "SpyHandle",
    "SpyMode",
    "SpyRegistry",
    "descriptor_for",
    "target_label",
]
