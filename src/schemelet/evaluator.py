from __future__ import annotations

from typing import Iterable, Optional
from typing_extensions import assert_never

from .runtime import (
    Frame,
    RecursionDepthExceeded,
    ScmValue,
    SchemeRuntimeError,
    make_root_frame,
)
from .tree import (
    Application,
    Cond,
    Define,
    If,
    Lambda,
    Let,
    Literal,
    Node,
    Sequence,
    SetBang,
    Var,
    node_meta,
)

from .eval.bind import eval_define, eval_set
from .eval.blocks import eval_program
from .eval.control import eval_cond, eval_if
from .eval.fn import eval_application, eval_lambda
from .eval.let import eval_let
from .utils import ensure_recursion_limit


def _maybe_attach_location(exc: SchemeRuntimeError, node: Node) -> None:
    # Innermost node with a position wins; outer frames leave it alone.
    if exc.meta is not None:
        return

    meta = node_meta(node)
    if meta is not None:
        exc.meta = meta

# ---------------- Public API ----------------

def eval_expr(ast: Node, frame: Optional[Frame]=None, source: Optional[str]=None) -> ScmValue:
    if frame is None:
        frame = make_root_frame(source)
    elif source is not None:
        frame.source = source

    return eval_forms([ast], frame)

def eval_forms(forms: Iterable[Node], frame: Frame) -> ScmValue:
    """Evaluate top-level forms in order against one persistent frame."""
    ensure_recursion_limit()

    try:
        return eval_program(forms, frame, eval_node)
    except RecursionError as exc:
        # Python ran out of stack before the call-depth guard fired.
        raise RecursionDepthExceeded() from exc

def eval_sequence(seq: Sequence, frame: Frame) -> ScmValue:
    return eval_program(seq.body, frame, eval_node)

# ---------------- Core evaluator ----------------

def eval_node(n: Node, frame: Frame) -> ScmValue:
    try:
        return _eval_node_inner(n, frame)
    except SchemeRuntimeError as e:
        _maybe_attach_location(e, n)
        raise


def _eval_node_inner(n: Node, frame: Frame) -> ScmValue:
    match n:
        case Literal(value=value):
            return value
        case Var(name=name):
            return frame.get(name)
        case Define():
            return eval_define(n, frame, eval_node)
        case Let():
            return eval_let(n, frame, eval_node)
        case Lambda():
            return eval_lambda(n, frame)
        case SetBang():
            return eval_set(n, frame, eval_node)
        case If():
            return eval_if(n, frame, eval_node)
        case Cond():
            return eval_cond(n, frame, eval_node)
        case Application():
            return eval_application(n, frame, eval_node)
        case Sequence(body=body):
            return eval_program(body, frame, eval_node)
        case _:
            assert_never(n)
