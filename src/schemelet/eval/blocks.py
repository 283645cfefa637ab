from __future__ import annotations

from typing import Callable, Iterable

from ..runtime import Frame, ScmValue, UNSPECIFIED
from ..tree import Node

EvalFn = Callable[[Node, Frame], ScmValue]

def eval_program(children: Iterable[Node], frame: Frame, eval_func: EvalFn) -> ScmValue:
    result: ScmValue = UNSPECIFIED

    for child in children:
        result = eval_func(child, frame)

    return result
