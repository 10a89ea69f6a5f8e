"""
Argument constraints shared by stubs and expectations.

Plain values compare by equality; the helpers below loosen that for a single
position (``anything()``, ``instance_of(cls)``) or for the whole tail of the
call (``any_args()``).
"""
from typing import Any, Dict, Optional, Tuple


class ArgumentMatcher:
    def matches(self, value: Any) -> bool:
        raise NotImplementedError

    def __eq__(self, other: Any) -> bool:
        return self.matches(other)

    def __ne__(self, other: Any) -> bool:
        return not self.matches(other)

    __hash__ = None


class _Anything(ArgumentMatcher):
    def matches(self, value: Any) -> bool:
        return True

    def __repr__(self) -> str:
        return "anything"


class InstanceOf(ArgumentMatcher):
    def __init__(self, cls: type):
        self.cls = cls

    def matches(self, value: Any) -> bool:
        return isinstance(value, self.cls)

    def __repr__(self) -> str:
        return f"instance_of({self.cls.__qualname__})"


class _AnyArgs:
    def __repr__(self) -> str:
        return "*any_args"


ANYTHING = _Anything()
ANY_ARGS = _AnyArgs()


def anything() -> ArgumentMatcher:
    return ANYTHING


def instance_of(cls: type) -> ArgumentMatcher:
    return InstanceOf(cls)


def any_args() -> _AnyArgs:
    """Matches any remaining positional and keyword arguments. Only valid last."""
    return ANY_ARGS


def _match(expected: Any, actual: Any) -> bool:
    if isinstance(expected, ArgumentMatcher):
        return expected.matches(actual)
    return expected == actual


def format_call(args: Tuple[Any, ...] = (), kwargs: Optional[Dict[str, Any]] = None) -> str:
    parts = [repr(a) for a in args]
    parts.extend(f"{k}={v!r}" for k, v in (kwargs or {}).items())
    return f"({', '.join(parts)})"


class ArgumentList:
    """The expected arguments of one call."""

    def __init__(self, args: Tuple[Any, ...] = (), kwargs: Optional[Dict[str, Any]] = None):
        args = tuple(args)
        if any(a is ANY_ARGS for a in args[:-1]):
            raise ValueError("any_args() must be the last positional argument")
        self.args = args
        self.kwargs = dict(kwargs or {})

    @property
    def open_ended(self) -> bool:
        return bool(self.args) and self.args[-1] is ANY_ARGS

    @property
    def is_concrete(self) -> bool:
        """True when the constraint is a literal call the real signature can be checked against."""
        values = list(self.args) + list(self.kwargs.values())
        return not any(v is ANY_ARGS or isinstance(v, ArgumentMatcher) for v in values)

    def matches(self, args: Tuple[Any, ...], kwargs: Dict[str, Any]) -> bool:
        if self.open_ended:
            fixed = self.args[:-1]
            if len(args) < len(fixed):
                return False
            if not all(_match(e, a) for e, a in zip(fixed, args)):
                return False
            return all(k in kwargs and _match(v, kwargs[k]) for k, v in self.kwargs.items())

        if len(args) != len(self.args) or set(kwargs) != set(self.kwargs):
            return False
        if not all(_match(e, a) for e, a in zip(self.args, args)):
            return False
        return all(_match(v, kwargs[k]) for k, v in self.kwargs.items())

    def __repr__(self) -> str:
        return format_call(self.args, self.kwargs)
