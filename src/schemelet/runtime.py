from __future__ import annotations

import importlib
import logging
from typing import List, Optional

from .types import (
    ScmUnspecified, ScmInt, ScmString, ScmBool, ScmSymbol, ScmNil, ScmPair,
    ScmList, ScmClosure, ScmPrimitive,
    ScmValue, Binding, Frame, Builtins, PrimitiveFn,
    SchemeRuntimeError, SchemeTypeError, SchemeSyntaxError,
    UnboundVariable, ArityError, NotCallable, RecursionDepthExceeded,
    UNSPECIFIED, TRUE, FALSE, NIL,
    is_procedure, is_scm_value, ensure_scm_value, make_list,
)

logger = logging.getLogger(__name__)

_STDLIB_INITIALIZED = False

# Nested closure applications allowed before RecursionDepthExceeded.
MAX_CALL_DEPTH = 1000
_call_depth = 0

def init_stdlib() -> None:
    """Load stdlib modules (idempotent) so register_primitive hooks run."""
    global _STDLIB_INITIALIZED

    if _STDLIB_INITIALIZED:
        return

    importlib.import_module("schemelet.stdlib")
    _STDLIB_INITIALIZED = True

def register_primitive(name: str, *, arity: Optional[int] = None, variadic: bool = False):
    def dec(fn: PrimitiveFn):
        Builtins.primitives[name] = ScmPrimitive(name=name, fn=fn, arity=arity, variadic=variadic)
        logger.debug("registered primitive %s", name)
        return fn

    return dec

def make_root_frame(source: Optional[str] = None) -> Frame:
    """Fresh global frame holding every registered primitive."""
    init_stdlib()
    return Frame(source=source)

def call_value(fn: ScmValue, args: List[ScmValue], caller_frame: Frame) -> ScmValue:
    match fn:
        case ScmPrimitive():
            return call_primitive(fn, args, caller_frame)
        case ScmClosure():
            return call_closure(fn, args)
        case _:
            raise NotCallable(fn)

def call_primitive(prim: ScmPrimitive, args: List[ScmValue], caller_frame: Frame) -> ScmValue:
    if prim.arity is not None:
        if prim.variadic and len(args) < prim.arity:
            raise ArityError(prim.name, prim.arity, len(args), at_least=True)
        if not prim.variadic and len(args) != prim.arity:
            raise ArityError(prim.name, prim.arity, len(args))

    return ensure_scm_value(prim.fn(caller_frame, args))

def call_closure(fn: ScmClosure, args: List[ScmValue]) -> ScmValue:
    """
    Apply a closure:
    - arity is checked before any frame exists, so a bad call has no effects
    - the new frame extends the closure's captured frame, not the caller's
    - body forms run in order; the last value is the result
    - more than MAX_CALL_DEPTH nested applications raise RecursionDepthExceeded
    """
    from .evaluator import eval_sequence  # local import to avoid cycle
    global _call_depth

    if len(args) != len(fn.params):
        raise ArityError(fn.name, len(fn.params), len(args))

    if _call_depth >= MAX_CALL_DEPTH:
        raise RecursionDepthExceeded(MAX_CALL_DEPTH)

    logger.debug("apply %r with %d arg(s)", fn, len(args))
    callee_frame = fn.frame.extend(dict(zip(fn.params, args)))

    _call_depth += 1
    try:
        return eval_sequence(fn.body, callee_frame)
    finally:
        _call_depth -= 1

__all__ = [
    "ScmUnspecified", "ScmInt", "ScmString", "ScmBool", "ScmSymbol", "ScmNil", "ScmPair",
    "ScmList", "ScmClosure", "ScmPrimitive",
    "ScmValue", "Binding", "Frame", "Builtins",
    "SchemeRuntimeError", "SchemeTypeError", "SchemeSyntaxError",
    "UnboundVariable", "ArityError", "NotCallable", "RecursionDepthExceeded",
    "UNSPECIFIED", "TRUE", "FALSE", "NIL",
    "is_procedure", "is_scm_value", "ensure_scm_value", "make_list", "MAX_CALL_DEPTH",
    "init_stdlib", "register_primitive", "make_root_frame",
    "call_value", "call_primitive", "call_closure",
]
