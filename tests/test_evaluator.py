from __future__ import annotations

import pytest

from tests.support.harness import (
    ArityError,
    Frame,
    NotCallable,
    ScmClosure,
    ScmInt,
    UnboundVariable,
    new_global_frame,
)
from schemelet.evaluator import eval_expr, eval_forms
from schemelet.runtime import FALSE, UNSPECIFIED, make_root_frame
from schemelet.tree import (
    Application,
    Define,
    If,
    Lambda,
    Let,
    Literal,
    Sequence,
    SetBang,
    SourceMeta,
    Var,
)


def _int(n: int) -> Literal:
    return Literal(ScmInt(n))


def _add(*operands) -> Application:
    return Application(Var("+"), tuple(operands))


COUNTER_TREE = Define(
    "c",
    Let(
        (("n", _int(0)),),
        Sequence(
            (
                Lambda(
                    (),
                    Sequence((SetBang("n", _add(Var("n"), _int(1))), Var("n"))),
                ),
            )
        ),
    ),
)


def test_hand_built_counter() -> None:
    frame = make_root_frame()
    eval_expr(COUNTER_TREE, frame)
    call = Application(Var("c"), ())

    assert [eval_expr(call, frame) for _ in range(3)] == [ScmInt(1), ScmInt(2), ScmInt(3)]


def test_eval_expr_makes_root_frame() -> None:
    assert eval_expr(_add(_int(2), _int(3))) == ScmInt(5)


def test_eval_forms_returns_last_value() -> None:
    frame = make_root_frame()

    assert eval_forms([Define("x", _int(4)), _add(Var("x"), Var("x"))], frame) == ScmInt(8)
    assert eval_forms([], frame) is UNSPECIFIED


def test_lambda_captures_current_frame() -> None:
    frame = make_root_frame().extend()

    closure = eval_expr(Lambda(("x",), Sequence((Var("x"),))), frame)

    assert isinstance(closure, ScmClosure)
    assert closure.frame is frame
    assert closure.name is None


def test_define_names_anonymous_closure() -> None:
    frame = make_root_frame()
    eval_expr(Define("ident", Lambda(("x",), Sequence((Var("x"),)))), frame)

    assert frame.get("ident").name == "ident"


def test_if_without_alternative_yields_unspecified() -> None:
    assert eval_expr(If(Literal(FALSE), _int(1))) is UNSPECIFIED


def test_if_evaluates_only_chosen_branch() -> None:
    frame = make_root_frame()
    node = If(Literal(FALSE), Var("never-bound"), _int(2))

    assert eval_expr(node, frame) == ScmInt(2)


def test_let_evaluates_inits_in_outer_frame() -> None:
    frame = make_root_frame()
    frame.define("x", ScmInt(1))
    node = Let((("x", _int(2)), ("y", Var("x"))), Sequence((Var("y"),)))

    assert eval_expr(node, frame) == ScmInt(1)


def test_innermost_location_is_attached() -> None:
    inner = Var("missing", SourceMeta(4, 9))
    outer = Application(Var("+"), (inner,), SourceMeta(4, 1))

    with pytest.raises(UnboundVariable) as exc_info:
        eval_expr(outer)

    assert exc_info.value.meta == SourceMeta(4, 9)


def test_outer_location_used_when_inner_has_none() -> None:
    outer = Application(Var("+"), (Var("missing"),), SourceMeta(2, 3))

    with pytest.raises(UnboundVariable) as exc_info:
        eval_expr(outer)

    assert exc_info.value.meta == SourceMeta(2, 3)


def test_not_callable_before_operands() -> None:
    frame = make_root_frame()
    node = Application(_int(3), (Var("unbound-operand"),))

    with pytest.raises(NotCallable):
        eval_expr(node, frame)


def test_arity_checked_before_frame_extension(root_frame: Frame) -> None:
    eval_expr(Define("f", Lambda(("a",), Sequence((Var("a"),)))), root_frame)

    with pytest.raises(ArityError) as exc_info:
        eval_expr(Application(Var("f"), ()), root_frame)

    assert exc_info.value.proc_name == "f"
    assert exc_info.value.actual == 0


def test_closures_from_one_frame_see_each_other_mutations() -> None:
    frame = new_global_frame()
    shared = frame.extend({"n": ScmInt(0)})
    bump = eval_expr(Lambda((), Sequence((SetBang("n", _add(Var("n"), _int(5))),))), shared)
    read = eval_expr(Lambda((), Sequence((Var("n"),))), shared)
    frame.define("bump", bump)
    frame.define("read", read)

    eval_expr(Application(Var("bump"), ()), frame)

    assert eval_expr(Application(Var("read"), ()), frame) == ScmInt(5)
