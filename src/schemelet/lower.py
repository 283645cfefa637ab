from __future__ import annotations

from typing import Callable, Dict, Iterable, List, Optional, Tuple

from lark import Token, Tree

from .runtime import (
    ScmBool,
    ScmInt,
    ScmNil,
    ScmPair,
    ScmString,
    ScmSymbol,
    ScmValue,
    SchemeSyntaxError,
    make_list,
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
    SourceMeta,
    Var,
)

_ESCAPES = {"n": "\n", "t": "\t", "\\": "\\", '"': '"'}


def lower_program(datums: Iterable[Tree]) -> List[Node]:
    """Turn top-level datums into expression nodes, in source order."""
    return [lower(datum) for datum in datums]


def lower(datum: Tree) -> Node:
    meta = _meta(datum)

    match datum.data:
        case "integer" | "string" | "boolean" | "value":
            return Literal(value_from_datum(datum), meta)
        case "symbol":
            return Var(str(_token(datum)), meta)
        case "quoted":
            return Literal(value_from_datum(datum.children[0]), meta)
        case "list":
            return _lower_list(datum, meta)

    raise SchemeSyntaxError(f"Unknown datum {datum.data!r}")


def value_from_datum(datum: Tree) -> ScmValue:
    """The quoted value of a datum: symbols stay symbols, lists become pairs."""
    match datum.data:
        case "integer":
            return ScmInt(int(_token(datum)))
        case "string":
            return ScmString(_unescape(_token(datum), _meta(datum)))
        case "boolean":
            return ScmBool(_token(datum) in ("#t", "#true"))
        case "symbol":
            return ScmSymbol(str(_token(datum)))
        case "list":
            return make_list(value_from_datum(child) for child in datum.children)
        case "quoted":
            return make_list([ScmSymbol("quote"), value_from_datum(datum.children[0])])
        case "value":
            return datum.children[0]

    raise SchemeSyntaxError(f"Unknown datum {datum.data!r}")


def datum_from_value(value: ScmValue) -> Tree:
    """Inverse of value_from_datum, so data can be lowered and evaluated."""
    match value:
        case ScmInt(value=n):
            return Tree("integer", [Token("INT", str(n))])
        case ScmString():
            return Tree("string", [Token("STRING", repr(value))])
        case ScmBool():
            return Tree("boolean", [Token("BOOLEAN", repr(value))])
        case ScmSymbol(name=name):
            return Tree("symbol", [Token("SYMBOL", name)])
        case ScmNil() | ScmPair():
            return Tree("list", [datum_from_value(item) for item in value])
        case _:
            # procedures and unspecified evaluate to themselves
            return Tree("value", [value])


def _lower_list(datum: Tree, meta: Optional[SourceMeta]) -> Node:
    items: List[Tree] = list(datum.children)

    if not items:
        raise _syntax_error("Empty application ()", meta)

    head, *rest = items
    if head.data == "symbol":
        special = _SPECIAL_FORMS.get(str(_token(head)))
        if special is not None:
            return special(rest, meta)

    return Application(lower(head), tuple(lower(item) for item in rest), meta)


# ---------------- special forms ----------------

def _lower_define(args: List[Tree], meta: Optional[SourceMeta]) -> Node:
    if not args:
        raise _syntax_error("define expects a name", meta)

    target, *rest = args

    if target.data == "symbol":
        if len(rest) != 1:
            raise _syntax_error("define expects exactly one expression after the name", meta)
        return Define(str(_token(target)), lower(rest[0]), meta)

    # (define (name param ...) body ...)
    if target.data == "list" and target.children:
        name_datum, *param_datums = target.children
        name = _symbol_name(name_datum, "define: procedure name")
        params = _param_names(param_datums, "define")
        body = _lower_body(rest, "define", meta)
        return Define(name, Lambda(params, body, meta), meta)

    raise _syntax_error("define expects a symbol or (name param ...)", meta)


def _lower_lambda(args: List[Tree], meta: Optional[SourceMeta]) -> Node:
    if not args or args[0].data != "list":
        raise _syntax_error("lambda expects a parameter list", meta)

    params_datum, *body = args
    params = _param_names(params_datum.children, "lambda")

    return Lambda(params, _lower_body(body, "lambda", meta), meta)


def _lower_let(args: List[Tree], meta: Optional[SourceMeta]) -> Node:
    if not args or args[0].data != "list":
        raise _syntax_error("let expects a binding list", meta)

    bindings_datum, *body = args
    bindings: List[Tuple[str, Node]] = []
    seen: set[str] = set()

    for entry in bindings_datum.children:
        if entry.data != "list" or len(entry.children) != 2:
            raise _syntax_error("let binding must look like (name expr)", _meta(entry) or meta)
        name = _symbol_name(entry.children[0], "let: binding name")
        if name in seen:
            raise _syntax_error(f"let: duplicate binding {name!r}", _meta(entry) or meta)
        seen.add(name)
        bindings.append((name, lower(entry.children[1])))

    return Let(tuple(bindings), _lower_body(body, "let", meta), meta)


def _lower_set(args: List[Tree], meta: Optional[SourceMeta]) -> Node:
    if len(args) != 2:
        raise _syntax_error("set! expects a name and an expression", meta)

    return SetBang(_symbol_name(args[0], "set!: target"), lower(args[1]), meta)


def _lower_if(args: List[Tree], meta: Optional[SourceMeta]) -> Node:
    if len(args) not in (2, 3):
        raise _syntax_error("if expects a test, a consequent and an optional alternative", meta)

    alternative = lower(args[2]) if len(args) == 3 else None

    return If(lower(args[0]), lower(args[1]), alternative, meta)


def _lower_begin(args: List[Tree], meta: Optional[SourceMeta]) -> Node:
    return Sequence(tuple(lower(arg) for arg in args), meta)


def _lower_quote(args: List[Tree], meta: Optional[SourceMeta]) -> Node:
    if len(args) != 1:
        raise _syntax_error("quote expects exactly one datum", meta)

    return Literal(value_from_datum(args[0]), meta)


def _lower_cond(args: List[Tree], meta: Optional[SourceMeta]) -> Node:
    clauses: List[Tuple[Optional[Node], Sequence]] = []

    for index, clause in enumerate(args):
        clause_meta = _meta(clause) or meta
        if clause.data != "list" or len(clause.children) < 2:
            raise _syntax_error("cond clause must look like (test expr ...)", clause_meta)

        test_datum, *body = clause.children
        if test_datum.data == "symbol" and str(_token(test_datum)) == "else":
            if index != len(args) - 1:
                raise _syntax_error("cond: else must be the last clause", clause_meta)
            test: Optional[Node] = None
        else:
            test = lower(test_datum)

        clauses.append((test, _lower_body(body, "cond", clause_meta)))

    return Cond(tuple(clauses), meta)


_SPECIAL_FORMS: Dict[str, Callable[[List[Tree], Optional[SourceMeta]], Node]] = {
    "define": _lower_define,
    "lambda": _lower_lambda,
    "let": _lower_let,
    "set!": _lower_set,
    "if": _lower_if,
    "begin": _lower_begin,
    "quote": _lower_quote,
    "cond": _lower_cond,
}

SPECIAL_FORM_NAMES = frozenset(_SPECIAL_FORMS)


# ---------------- helpers ----------------

def _lower_body(body: List[Tree], form: str, meta: Optional[SourceMeta]) -> Sequence:
    if not body:
        raise _syntax_error(f"{form} expects at least one body expression", meta)

    return Sequence(tuple(lower(item) for item in body), meta)


def _param_names(datums: Iterable[Tree], form: str) -> Tuple[str, ...]:
    names: List[str] = []

    for datum in datums:
        name = _symbol_name(datum, f"{form}: parameter")
        if name in names:
            raise _syntax_error(f"{form}: duplicate parameter {name!r}", _meta(datum))
        names.append(name)

    return tuple(names)


def _symbol_name(datum: Tree, context: str) -> str:
    if datum.data != "symbol":
        raise _syntax_error(f"{context} must be a symbol", _meta(datum))

    return str(_token(datum))


def _token(datum: Tree) -> Token:
    tok = datum.children[0]
    assert isinstance(tok, Token)
    return tok


def _unescape(raw: str, meta: Optional[SourceMeta]) -> str:
    body = raw[1:-1]
    out: List[str] = []
    i = 0

    while i < len(body):
        ch = body[i]
        if ch == "\\":
            nxt = body[i + 1]
            if nxt not in _ESCAPES:
                raise _syntax_error(f"Unknown string escape \\{nxt}", meta)
            out.append(_ESCAPES[nxt])
            i += 2
            continue
        out.append(ch)
        i += 1

    return "".join(out)


def _meta(datum: Tree) -> Optional[SourceMeta]:
    meta = datum.meta

    if getattr(meta, "empty", True):
        return None

    return SourceMeta(
        line=meta.line,
        column=meta.column,
        start_pos=getattr(meta, "start_pos", None),
        end_pos=getattr(meta, "end_pos", None),
    )


def _syntax_error(message: str, meta: Optional[SourceMeta]) -> SchemeSyntaxError:
    err = SchemeSyntaxError(message)
    err.meta = meta
    return err
