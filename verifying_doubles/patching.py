from __future__ import annotations

import logging
from typing import Any

from verifying_doubles.core.exceptions import DoublesBaseException

logger = logging.getLogger(__name__)

_MISSING = object()


class ScopedPatch:
    """
    Replace ``target.name`` with ``value`` until released.

    Only the target's own ``__dict__`` entry is touched: an attribute that was
    inherited is deleted again on release, one that was set directly (including
    class-level descriptors such as ``classmethod``) is put back verbatim.
    Releasing twice is a no-op.
    """

    def __init__(self, target: Any, name: str, value: Any) -> None:
        self.target = target
        self.name = name
        self.value = value
        self.original = _MISSING
        self.active = False

    @property
    def owned(self) -> bool:
        return self.original is not _MISSING

    def apply(self) -> "ScopedPatch":
        if self.active:
            return self
        own = getattr(self.target, "__dict__", None)
        if own is None:
            raise DoublesBaseException(
                f"Cannot patch {self._where()}: {type(self.target).__qualname__} instances use __slots__ "
                f"and have no __dict__; patch the class instead",
                target=f"{type(self.target).__qualname__} instance",
                method=self.name,
            )
        self.original = own[self.name] if self.name in own else _MISSING
        setattr(self.target, self.name, self.value)
        self.active = True
        logger.debug(f"Patched {self._where()}")
        return self

    def release(self) -> None:
        if not self.active:
            return
        self.active = False
        if self.owned:
            setattr(self.target, self.name, self.original)
        else:
            delattr(self.target, self.name)
        logger.debug(f"Restored {self._where()}")

    def _where(self) -> str:
        owner = self.target.__qualname__ if isinstance(self.target, type) else type(self.target).__qualname__
        return f"{owner}.{self.name}"

    def __enter__(self) -> "ScopedPatch":
        return self.apply()

    def __exit__(self, exc_type, exc, tb) -> None:
        self.release()
