from __future__ import annotations

import importlib
import inspect
import logging
from functools import lru_cache
from typing import Any, Dict, Optional

from verifying_doubles.core.config import settings
from verifying_doubles.core.exceptions import UnknownReferenceError
from verifying_doubles.registry.descriptor import (
    MemberKind,
    MethodSignature,
    ReferenceDescriptor,
    ReferenceLevel,
)

logger = logging.getLogger(__name__)

_known_references: Dict[str, type] = {}


def _is_dunder(name: str) -> bool:
    return name.startswith("__") and name.endswith("__")


def register_reference(cls: type, name: Optional[str] = None) -> type:
    """Make ``cls`` resolvable by bare name. Usable as a class decorator."""
    _known_references[name or cls.__name__] = cls
    return cls


def resolve_reference(ref: Any) -> type:
    """
    Turn a class, a dotted path (``"bookstore.book_order.BookOrder"``) or a bare
    class name into the class itself.

    Bare names are looked up in the registered references first, then in the
    modules listed in ``DoublesSettings.REFERENCE_MODULES``.
    """
    if isinstance(ref, type):
        return ref
    if not isinstance(ref, str) or not ref:
        raise UnknownReferenceError(repr(ref))

    if "." in ref:
        module_name, _, attr = ref.rpartition(".")
        try:
            found = getattr(importlib.import_module(module_name), attr)
        except (ImportError, AttributeError) as e:
            raise UnknownReferenceError(ref, [module_name]) from e
        if not isinstance(found, type):
            raise UnknownReferenceError(ref, [module_name])
        return found

    if ref in _known_references:
        return _known_references[ref]

    for module_name in settings.REFERENCE_MODULES:
        try:
            module = importlib.import_module(module_name)
        except ImportError:
            logger.warning(f"Reference module {module_name!r} could not be imported")
            continue
        found = getattr(module, ref, None)
        if isinstance(found, type):
            return found

    raise UnknownReferenceError(ref, ["registered references", *settings.REFERENCE_MODULES])


def _signature_of(func: Any, drop_receiver: bool) -> Optional[inspect.Signature]:
    try:
        sig = inspect.signature(func)
    except (TypeError, ValueError):
        return None
    if drop_receiver:
        params = list(sig.parameters.values())
        if params and params[0].kind in (
            inspect.Parameter.POSITIONAL_ONLY,
            inspect.Parameter.POSITIONAL_OR_KEYWORD,
        ):
            sig = sig.replace(parameters=params[1:])
    return sig


def _member(name: str, kind: MemberKind, func: Any = None, drop_receiver: bool = False) -> MethodSignature:
    if func is None:
        return MethodSignature(name=name, kind=kind, min_args=0, max_args=0)
    sig = _signature_of(func, drop_receiver)
    if sig is None:
        return MethodSignature.unchecked(name, kind)
    return MethodSignature.from_signature(name, kind, sig, is_async=inspect.iscoroutinefunction(func))


def _instance_member(name: str, raw: Any) -> MethodSignature:
    if isinstance(raw, staticmethod):
        return _member(name, MemberKind.STATICMETHOD, raw.__func__)
    if isinstance(raw, classmethod):
        return _member(name, MemberKind.CLASSMETHOD, raw.__func__, drop_receiver=True)
    if isinstance(raw, property):
        return _member(name, MemberKind.PROPERTY)
    if inspect.isfunction(raw):
        return _member(name, MemberKind.METHOD, raw, drop_receiver=True)
    if inspect.ismethoddescriptor(raw) or callable(raw):
        return _member(name, MemberKind.METHOD, raw, drop_receiver=inspect.ismethoddescriptor(raw))
    return _member(name, MemberKind.ATTRIBUTE)


def _class_member(name: str, raw: Any) -> Optional[MethodSignature]:
    if isinstance(raw, staticmethod):
        return _member(name, MemberKind.STATICMETHOD, raw.__func__)
    if isinstance(raw, classmethod):
        return _member(name, MemberKind.CLASSMETHOD, raw.__func__, drop_receiver=True)
    if inspect.isfunction(raw) or isinstance(raw, property) or inspect.ismethoddescriptor(raw):
        # only reachable through an instance
        return None
    if callable(raw):
        return _member(name, MemberKind.STATICMETHOD, raw)
    return _member(name, MemberKind.ATTRIBUTE)


@lru_cache(maxsize=None)
def describe_class(cls: type, level: ReferenceLevel = ReferenceLevel.INSTANCE) -> ReferenceDescriptor:
    """
    Introspect ``cls`` and list the members a caller may use at ``level``.

    Instance level covers regular methods, properties, class/static methods and
    annotated or plain class attributes. Class level covers only what is
    usable on the class itself: class methods, static methods and attributes.
    The result is cached and must be treated as read-only.
    """
    level = ReferenceLevel(level)
    members: Dict[str, MethodSignature] = {}

    for name in dir(cls):
        if _is_dunder(name):
            continue
        raw = inspect.getattr_static(cls, name)
        if level is ReferenceLevel.INSTANCE:
            members[name] = _instance_member(name, raw)
        else:
            member = _class_member(name, raw)
            if member is not None:
                members[name] = member

    if level is ReferenceLevel.INSTANCE:
        for klass in reversed(cls.__mro__):
            for name in getattr(klass, "__annotations__", {}):
                if not _is_dunder(name) and name not in members:
                    members[name] = _member(name, MemberKind.ATTRIBUTE)

    logger.debug(f"Described {cls.__qualname__} at {level.value} level: {sorted(members)}")
    return ReferenceDescriptor(reference_name=cls.__qualname__, level=level, members=members)


def describe_instance(obj: Any) -> ReferenceDescriptor:
    """Instance-level descriptor of ``type(obj)`` plus the object's own attributes."""
    if isinstance(obj, type):
        raise UnknownReferenceError(f"{obj.__qualname__} (a class, expected an instance)")
    base = describe_class(type(obj), ReferenceLevel.INSTANCE)
    members = dict(base.members)
    for name, value in getattr(obj, "__dict__", {}).items():
        if _is_dunder(name) or name in members:
            continue
        if callable(value):
            members[name] = _member(name, MemberKind.METHOD, value)
        else:
            members[name] = _member(name, MemberKind.ATTRIBUTE)
    return ReferenceDescriptor(reference_name=base.reference_name, level=ReferenceLevel.INSTANCE, members=members)
