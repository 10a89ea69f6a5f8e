from .double import (
    Double,
    as_null_object,
    class_double,
    create,
    double,
    instance_double,
    invoke,
    is_double,
    object_double,
    state_of,
    stub,
)
from .responses import CALL_ORIGINAL, NO_OP, calls, raises, returns

__all__ = [
    "CALL_ORIGINAL",
    "Double",
    "NO_OP",
    "as_null_object",
    "calls",
    "class_double",
    "create",
    "double",
    "instance_double",
    "invoke",
    "is_double",
    "object_double",
    "raises",
    "returns",
    "state_of",
    "stub",
]
