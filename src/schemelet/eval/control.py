from __future__ import annotations

from ..runtime import Frame, ScmValue, UNSPECIFIED
from ..tree import Cond, If
from .blocks import EvalFn, eval_program
from .common import is_truthy

def eval_if(n: If, frame: Frame, eval_func: EvalFn) -> ScmValue:
    if is_truthy(eval_func(n.test, frame)):
        return eval_func(n.consequent, frame)

    if n.alternative is None:
        return UNSPECIFIED

    return eval_func(n.alternative, frame)

def eval_cond(n: Cond, frame: Frame, eval_func: EvalFn) -> ScmValue:
    """First clause whose test is true (or `else`) runs; later tests are skipped."""
    for test, body in n.clauses:
        if test is None or is_truthy(eval_func(test, frame)):
            return eval_program(body.body, frame, eval_func)

    return UNSPECIFIED
