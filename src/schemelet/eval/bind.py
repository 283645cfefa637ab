from __future__ import annotations

from ..runtime import Frame, ScmClosure, ScmValue, UNSPECIFIED
from ..tree import Define, SetBang
from .blocks import EvalFn

def eval_define(n: Define, frame: Frame, eval_func: EvalFn) -> ScmValue:
    value = eval_func(n.value, frame)

    if isinstance(value, ScmClosure) and value.name is None:
        # First binding names the procedure; the object itself is what gets bound.
        value.name = n.name

    frame.define(n.name, value)

    return UNSPECIFIED

def eval_set(n: SetBang, frame: Frame, eval_func: EvalFn) -> ScmValue:
    value = eval_func(n.value, frame)
    frame.assign(n.name, value)

    return UNSPECIFIED
