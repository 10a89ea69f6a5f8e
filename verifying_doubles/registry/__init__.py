from .descriptor import MemberKind, MethodSignature, ReferenceDescriptor, ReferenceLevel, suggest_names
from .lookup import describe_class, describe_instance, register_reference, resolve_reference

__all__ = [
    "MemberKind",
    "MethodSignature",
    "ReferenceDescriptor",
    "ReferenceLevel",
    "describe_class",
    "describe_instance",
    "register_reference",
    "resolve_reference",
    "suggest_names",
]
