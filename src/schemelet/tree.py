"""Expression tree evaluated by the runtime.

The node set is closed: one dataclass per evaluator case. The reader produces
these through `lower`, but nothing here depends on how source text is parsed,
so tests and embedders may build trees by hand.
"""
from __future__ import annotations

from dataclasses import dataclass, field
from typing import TYPE_CHECKING, Optional, Tuple, Union
from typing_extensions import TypeAlias

if TYPE_CHECKING:
    from .types import ScmValue


@dataclass(frozen=True)
class SourceMeta:
    """Source position of a node (1-based line/column, 0-based offsets)."""
    line: int
    column: int
    start_pos: Optional[int] = None
    end_pos: Optional[int] = None


@dataclass(frozen=True)
class Literal:
    value: 'ScmValue'
    meta: Optional[SourceMeta] = field(default=None, compare=False)


@dataclass(frozen=True)
class Var:
    name: str
    meta: Optional[SourceMeta] = field(default=None, compare=False)


@dataclass(frozen=True)
class Define:
    name: str
    value: 'Node'
    meta: Optional[SourceMeta] = field(default=None, compare=False)


@dataclass(frozen=True)
class Let:
    bindings: Tuple[Tuple[str, 'Node'], ...]
    body: 'Sequence'
    meta: Optional[SourceMeta] = field(default=None, compare=False)


@dataclass(frozen=True)
class Lambda:
    params: Tuple[str, ...]
    body: 'Sequence'
    meta: Optional[SourceMeta] = field(default=None, compare=False)


@dataclass(frozen=True)
class SetBang:
    name: str
    value: 'Node'
    meta: Optional[SourceMeta] = field(default=None, compare=False)


@dataclass(frozen=True)
class If:
    test: 'Node'
    consequent: 'Node'
    alternative: Optional['Node'] = None
    meta: Optional[SourceMeta] = field(default=None, compare=False)


@dataclass(frozen=True)
class Cond:
    # a None test is the trailing `else` clause
    clauses: Tuple[Tuple[Optional['Node'], 'Sequence'], ...]
    meta: Optional[SourceMeta] = field(default=None, compare=False)


@dataclass(frozen=True)
class Application:
    operator: 'Node'
    operands: Tuple['Node', ...]
    meta: Optional[SourceMeta] = field(default=None, compare=False)


@dataclass(frozen=True)
class Sequence:
    body: Tuple['Node', ...]
    meta: Optional[SourceMeta] = field(default=None, compare=False)


Node: TypeAlias = Union[Literal, Var, Define, Let, Lambda, SetBang, If, Cond, Application, Sequence]


def node_meta(node: Node) -> Optional[SourceMeta]:
    return node.meta


def pretty(node: Node, indent: str = '  ') -> str:
    """Return an indented outline of `node`, one line per node."""
    def _pretty(n: Node, level: int) -> str:
        pad = indent * level
        match n:
            case Literal(value=value):
                return f'{pad}literal {value!r}\n'
            case Var(name=name):
                return f'{pad}var {name}\n'
            case Define(name=name, value=value):
                return f'{pad}define {name}\n' + _pretty(value, level + 1)
            case SetBang(name=name, value=value):
                return f'{pad}set! {name}\n' + _pretty(value, level + 1)
            case Lambda(params=params, body=body):
                return f'{pad}lambda ({" ".join(params)})\n' + _pretty(body, level + 1)
            case Let(bindings=bindings, body=body):
                out = f'{pad}let\n'
                for name, init in bindings:
                    out += f'{pad}{indent}{name} =\n' + _pretty(init, level + 2)
                return out + _pretty(body, level + 1)
            case If(test=test, consequent=consequent, alternative=alternative):
                out = f'{pad}if\n' + _pretty(test, level + 1) + _pretty(consequent, level + 1)
                if alternative is not None:
                    out += _pretty(alternative, level + 1)
                return out
            case Cond(clauses=clauses):
                out = f'{pad}cond\n'
                for test, body in clauses:
                    if test is None:
                        out += f'{pad}{indent}else\n'
                    else:
                        out += f'{pad}{indent}when\n' + _pretty(test, level + 2)
                    out += _pretty(body, level + 2)
                return out
            case Application(operator=operator, operands=operands):
                out = f'{pad}apply\n' + _pretty(operator, level + 1)
                for operand in operands:
                    out += _pretty(operand, level + 1)
                return out
            case Sequence(body=body):
                out = f'{pad}sequence\n'
                for child in body:
                    out += _pretty(child, level + 1)
                return out
        raise TypeError(f"not an expression node: {n!r}")

    return _pretty(node, 0)
