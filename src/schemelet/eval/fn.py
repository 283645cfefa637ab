from __future__ import annotations

from typing import List

from ..runtime import Frame, ScmClosure, ScmValue, NotCallable, call_value, is_procedure
from ..tree import Application, Lambda
from .blocks import EvalFn

def eval_lambda(n: Lambda, frame: Frame) -> ScmClosure:
    return ScmClosure(params=n.params, body=n.body, frame=frame)

def eval_application(n: Application, frame: Frame, eval_func: EvalFn) -> ScmValue:
    fn = eval_func(n.operator, frame)

    if not is_procedure(fn):
        raise NotCallable(fn)

    args: List[ScmValue] = [eval_func(operand, frame) for operand in n.operands]

    return call_value(fn, args, frame)
