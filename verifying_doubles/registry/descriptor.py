from __future__ import annotations

import difflib
import inspect
from enum import Enum
from typing import Any, Dict, List, Mapping, Optional, Tuple

from pydantic import BaseModel, ConfigDict, Field

from verifying_doubles.core.config import settings
from verifying_doubles.core.exceptions import ArgumentCountError


class ReferenceLevel(str, Enum):
    INSTANCE = "instance"
    CLASS = "class"


class MemberKind(str, Enum):
    METHOD = "method"
    CLASSMETHOD = "classmethod"
    STATICMETHOD = "staticmethod"
    PROPERTY = "property"
    ATTRIBUTE = "attribute"


_POSITIONAL = (
    inspect.Parameter.POSITIONAL_ONLY,
    inspect.Parameter.POSITIONAL_OR_KEYWORD,
)


class MethodSignature(BaseModel):
    """What a real member accepts, as seen from the caller (receiver already stripped)."""

    model_config = ConfigDict(frozen=True, arbitrary_types_allowed=True)

    name: str
    kind: MemberKind = MemberKind.METHOD
    min_args: int = 0
    max_args: Optional[int] = Field(default=0, description="None when the member takes *args")
    keyword_only: Tuple[str, ...] = ()
    accepts_var_keywords: bool = False
    is_async: bool = False
    signature: Optional[inspect.Signature] = None

    @classmethod
    def from_signature(
        cls, name: str, kind: MemberKind, sig: inspect.Signature, is_async: bool = False
    ) -> "MethodSignature":
        params = list(sig.parameters.values())
        positional = [p for p in params if p.kind in _POSITIONAL]
        return cls(
            name=name,
            kind=kind,
            min_args=sum(1 for p in positional if p.default is inspect.Parameter.empty),
            max_args=None
            if any(p.kind is inspect.Parameter.VAR_POSITIONAL for p in params)
            else len(positional),
            keyword_only=tuple(p.name for p in params if p.kind is inspect.Parameter.KEYWORD_ONLY),
            accepts_var_keywords=any(p.kind is inspect.Parameter.VAR_KEYWORD for p in params),
            is_async=is_async,
            signature=sig,
        )

    @classmethod
    def unchecked(cls, name: str, kind: MemberKind) -> "MethodSignature":
        # Members whose signature cannot be introspected take anything.
        return cls(name=name, kind=kind, min_args=0, max_args=None, accepts_var_keywords=True)

    @property
    def is_callable(self) -> bool:
        return self.kind not in (MemberKind.PROPERTY, MemberKind.ATTRIBUTE)

    @property
    def arity(self) -> str:
        if not self.is_callable:
            return "0 (attribute access)"
        if self.max_args is None:
            return f"{self.min_args} or more"
        if self.min_args == self.max_args:
            return str(self.min_args)
        return f"{self.min_args} to {self.max_args}"


class ReferenceDescriptor(BaseModel):
    """
    Immutable view of the members a real class or object exposes at one level.

    Built once by introspection when a verifying double is created and never
    changed afterwards.
    """

    model_config = ConfigDict(frozen=True, arbitrary_types_allowed=True)

    reference_name: str
    level: ReferenceLevel
    members: Mapping[str, MethodSignature] = Field(default_factory=dict)

    @property
    def names(self) -> List[str]:
        return sorted(self.members)

    @property
    def label(self) -> str:
        if self.level is ReferenceLevel.CLASS:
            return f"{self.reference_name} class"
        return f"{self.reference_name} instance"

    def has(self, name: str) -> bool:
        return name in self.members

    def get(self, name: str) -> Optional[MethodSignature]:
        return self.members.get(name)

    def suggest(self, name: str) -> List[str]:
        return suggest_names(name, self.members)

    def check_arguments(self, name: str, args: Tuple[Any, ...], kwargs: Dict[str, Any]) -> None:
        """Raise ArgumentCountError if ``args``/``kwargs`` cannot bind to the real member."""
        member = self.members.get(name)
        if member is None:
            return
        actual = len(args) + len(kwargs)
        if not member.is_callable:
            if actual:
                raise ArgumentCountError(self.label, name, member.arity, actual, "attributes take no arguments")
            return
        if member.signature is None:
            return
        try:
            member.signature.bind(*args, **kwargs)
        except TypeError as e:
            raise ArgumentCountError(self.label, name, member.arity, actual, str(e)) from e


def suggest_names(name: str, candidates) -> List[str]:
    """Close matches for a mistyped member name, best first."""
    if settings.MAX_SUGGESTIONS <= 0:
        return []
    return difflib.get_close_matches(
        name, list(candidates), n=settings.MAX_SUGGESTIONS, cutoff=settings.SUGGESTION_CUTOFF
    )
