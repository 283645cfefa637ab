from __future__ import annotations

from textwrap import dedent

import pytest

from tests.support.harness import (
    ArityError,
    Frame,
    NotCallable,
    SchemeRuntimeError,
    SchemeTypeError,
    ScmInt,
    UnboundVariable,
    repl_eval,
    run_capturing,
    run_program,
    run_runtime_case,
)

SCENARIOS = [
    pytest.param("undefined-name", None, UnboundVariable, id="unbound-reference"),
    pytest.param("(set! nowhere 1)", None, UnboundVariable, id="unbound-assignment"),
    pytest.param("(+ 1 \"2\")", None, SchemeTypeError, id="add-string"),
    pytest.param("(+ 1 #t)", None, SchemeTypeError, id="add-bool"),
    pytest.param("(1 2)", None, NotCallable, id="call-integer"),
    pytest.param("(\"f\")", None, NotCallable, id="call-string"),
    pytest.param("(display)", None, ArityError, id="display-no-args"),
    pytest.param("(display 1 2)", None, ArityError, id="display-two-args"),
    pytest.param("(-)", None, ArityError, id="minus-no-args"),
    pytest.param("(eq? 1)", None, ArityError, id="eq-one-arg"),
    pytest.param(
        dedent(
            """\
            (define (f x) x)
            (f)
        """
        ),
        None,
        SchemeRuntimeError,
        id="arity-is-runtime-error",
    ),
]


@pytest.mark.parametrize("source, expectation, expected_exc", SCENARIOS)
def test_error_kinds(source: str, expectation, expected_exc) -> None:
    run_runtime_case(source, expectation, expected_exc)


def test_unbound_reports_name() -> None:
    with pytest.raises(UnboundVariable) as exc_info:
        run_capturing("(+ 1 missing-thing)")

    assert exc_info.value.name == "missing-thing"


def test_arity_error_reports_counts() -> None:
    with pytest.raises(ArityError) as exc_info:
        run_capturing("(define (pair a b) a)\n(pair 1 2 3)")

    err = exc_info.value
    assert err.proc_name == "pair"
    assert err.expected == 2
    assert err.actual == 3
    assert "expected 2 argument(s), got 3" in str(err)


def test_variadic_arity_error_says_at_least() -> None:
    with pytest.raises(ArityError) as exc_info:
        run_capturing("(<)")

    assert exc_info.value.at_least
    assert "at least 1" in str(exc_info.value)


def test_not_callable_keeps_value() -> None:
    with pytest.raises(NotCallable) as exc_info:
        run_capturing("(define x 5)\n(x)")

    assert exc_info.value.value == ScmInt(5)


def test_error_location_points_at_innermost_form() -> None:
    source = "(define x 1)\n(display\n  (+ x nope))"

    with pytest.raises(UnboundVariable) as exc_info:
        run_capturing(source)

    meta = exc_info.value.meta
    assert meta is not None
    assert (meta.line, meta.column) == (3, 8)
    assert "(line 3, col 8)" in str(exc_info.value)


def test_arity_error_runs_no_body(root_frame: Frame) -> None:
    repl_eval("(define hits 0)\n(define (touch a) (set! hits (+ hits 1)) a)", root_frame)

    with pytest.raises(ArityError):
        repl_eval("(touch 1 2)", root_frame)

    assert root_frame.get("hits") == ScmInt(0)


def test_arity_error_prints_nothing(capsys: pytest.CaptureFixture[str]) -> None:
    with pytest.raises(ArityError):
        run_program('(define (say x) (display "side effect") x)\n(say)')

    assert capsys.readouterr().out == ""


def test_not_callable_skips_operands(root_frame: Frame) -> None:
    repl_eval("(define hits 0)\n(define (bump) (set! hits (+ hits 1)) hits)", root_frame)

    with pytest.raises(NotCallable):
        repl_eval("(5 (bump))", root_frame)

    assert root_frame.get("hits") == ScmInt(0)


def test_failed_form_keeps_earlier_defines(root_frame: Frame) -> None:
    with pytest.raises(UnboundVariable):
        repl_eval("(define kept 1)\n(define lost (+ kept oops))", root_frame)

    assert root_frame.get("kept") == ScmInt(1)
    assert not root_frame.is_bound("lost")


def test_failed_let_leaves_no_bindings(root_frame: Frame) -> None:
    with pytest.raises(SchemeTypeError):
        repl_eval('(let ((a 1) (b (+ 1 "x"))) a)', root_frame)

    assert not root_frame.is_bound("a")
    assert not root_frame.is_bound("b")


def test_failed_set_keeps_old_value(root_frame: Frame) -> None:
    repl_eval("(define v 1)", root_frame)

    with pytest.raises(SchemeTypeError):
        repl_eval('(set! v (+ v "x"))', root_frame)

    assert root_frame.get("v") == ScmInt(1)


def test_environment_usable_after_failure(root_frame: Frame) -> None:
    repl_eval("(define c (let ((n 0)) (lambda () (set! n (+ n 1)) n)))", root_frame)
    repl_eval("(c)", root_frame)

    with pytest.raises(ArityError):
        repl_eval("(c 1)", root_frame)

    assert repl_eval("(c)", root_frame) == ScmInt(2)
