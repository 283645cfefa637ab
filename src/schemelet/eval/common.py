from __future__ import annotations

from ..runtime import (
    ScmBool,
    ScmClosure,
    ScmInt,
    ScmNil,
    ScmPair,
    ScmPrimitive,
    ScmString,
    ScmSymbol,
    ScmUnspecified,
    ScmValue,
)

def stringify(value: ScmValue) -> str:
    """Display form: strings raw (also inside lists), unspecified as nothing, everything else as repr."""
    match value:
        case ScmString(value=s):
            return s
        case ScmUnspecified():
            return ""
        case ScmPair():
            return "(" + " ".join(stringify(item) for item in value) + ")"
        case ScmInt() | ScmBool() | ScmSymbol() | ScmNil() | ScmClosure() | ScmPrimitive():
            return repr(value)
        case _:
            return str(value)

def is_truthy(val: ScmValue) -> bool:
    match val:
        case ScmBool(value=b):
            return b
        case _:
            return True
