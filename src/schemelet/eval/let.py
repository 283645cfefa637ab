from __future__ import annotations

from typing import Dict

from ..runtime import Frame, ScmValue
from ..tree import Let
from .blocks import EvalFn, eval_program

def eval_let(n: Let, frame: Frame, eval_func: EvalFn) -> ScmValue:
    # Every initializer sees the enclosing frame only.
    values: Dict[str, ScmValue] = {}

    for name, init in n.bindings:
        values[name] = eval_func(init, frame)

    let_frame = frame.extend(values)

    return eval_program(n.body.body, let_frame, eval_func)
