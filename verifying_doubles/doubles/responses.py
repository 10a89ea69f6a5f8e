from __future__ import annotations

import inspect
from typing import Any, Callable, Dict, Optional, Tuple


class _NoOp:
    """What a permissive double returns for calls nobody configured."""

    _instance: Optional["_NoOp"] = None

    def __new__(cls) -> "_NoOp":
        if cls._instance is None:
            cls._instance = super().__new__(cls)
        return cls._instance

    def __bool__(self) -> bool:
        return False

    def __repr__(self) -> str:
        return "<no-op>"


NO_OP = _NoOp()


class Response:
    def admits(self, args: Tuple[Any, ...], kwargs: Dict[str, Any]) -> None:
        """Raise if this response refuses the call. Checked before the call is recorded."""

    def __call__(self, args: Tuple[Any, ...], kwargs: Dict[str, Any], original: Optional[Callable] = None) -> Any:
        raise NotImplementedError


class Returns(Response):
    def __init__(self, value: Any):
        self.value = value

    def __call__(self, args, kwargs, original=None):
        return self.value

    def __repr__(self) -> str:
        return f"returns({self.value!r})"


class Raises(Response):
    """Pre-wired exception for one method."""

    def __init__(self, exc: BaseException | type):
        self.exc = exc

    def __call__(self, args, kwargs, original=None):
        raise self.exc

    def __repr__(self) -> str:
        return f"raises({self.exc!r})"


class Calls(Response):
    def __init__(self, fn: Callable):
        self.fn = fn

    def __call__(self, args, kwargs, original=None):
        return self.fn(*args, **kwargs)

    def __repr__(self) -> str:
        return f"calls({getattr(self.fn, '__name__', self.fn)!r})"


class CallOriginal(Response):
    def __call__(self, args, kwargs, original=None):
        if original is None:
            raise TypeError("and_call_original() needs a real object behind the double")
        return original(*args, **kwargs)

    def __repr__(self) -> str:
        return "call_original"


CALL_ORIGINAL = CallOriginal()


def returns(value: Any) -> Returns:
    """Return ``value`` verbatim, even when it is callable."""
    return Returns(value)


def raises(exc: BaseException | type) -> Raises:
    return Raises(exc)


def calls(fn: Callable) -> Calls:
    return Calls(fn)


def as_response(value: Any) -> Response:
    """Callables compute the response from the call's arguments; anything else is returned as is."""
    if isinstance(value, Response):
        return value
    if callable(value):
        return Calls(value)
    return Returns(value)


async def respond_async(response: Response, args, kwargs, original=None) -> Any:
    result = response(args, kwargs, original)
    if inspect.isawaitable(result):
        return await result
    return result
