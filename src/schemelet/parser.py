"""
S-expression reader built on lark.

Produces a datum tree (lark `Tree`s labelled integer/string/boolean/symbol/list/quoted)
with positions attached; `lower` turns datums into evaluator nodes.
"""

from __future__ import annotations

from functools import lru_cache
from typing import List, Optional

from lark import Lark, Token, Tree, UnexpectedCharacters, UnexpectedEOF, UnexpectedInput, UnexpectedToken

GRAMMAR = r"""
start: _datum*

_datum: integer
      | string
      | boolean
      | symbol
      | list
      | quoted

list: "(" _datum* ")"
quoted: "'" _datum

integer: INT
string: STRING
boolean: BOOLEAN
symbol: SYMBOL

INT.2: /[+-]?\d+(?![^\s()";])/
BOOLEAN.2: /#(t|f|true|false)(?![^\s()";])/
STRING: /"(\\.|[^"\\])*"/
SYMBOL: /[^\s()"';#][^\s()";]*/
COMMENT: /;[^\n]*/

%import common.WS
%ignore WS
%ignore COMMENT
"""

class ParseError(Exception):
    """Parse error with position info"""
    def __init__(self, message: str, line: Optional[int] = None, column: Optional[int] = None):
        self.message = message
        self.line = line
        self.column = column
        super().__init__(
            f"{message} at line {line}, col {column}" if line is not None else message
        )

@lru_cache(maxsize=1)
def build_parser() -> Lark:
    return Lark(
        GRAMMAR,
        parser="lalr",
        lexer="basic",
        start="start",
        maybe_placeholders=False,
        propagate_positions=True,
    )

def _describe(exc: UnexpectedInput) -> str:
    match exc:
        case UnexpectedEOF():
            return "Unexpected end of input (unbalanced parentheses?)"
        case UnexpectedToken(token=token) if token.type == "$END":
            return "Unexpected end of input (unbalanced parentheses?)"
        case UnexpectedToken(token=token):
            return f"Unexpected {token.value!r}"
        case UnexpectedCharacters(char=char):
            return f"Unexpected character {char!r}"
        case _:
            return "Invalid syntax"

def parse_source(source: str) -> List[Tree]:
    """Read every datum in `source`; raise ParseError on malformed text."""
    try:
        tree = build_parser().parse(source)
    except UnexpectedInput as exc:
        line = getattr(exc, "line", None)
        column = getattr(exc, "column", None)
        if line is None or line < 0:
            line, column = _end_position(source)
        raise ParseError(_describe(exc), line, column) from exc

    return list(tree.children)

def _end_position(source: str) -> tuple[int, int]:
    lines = source.split("\n")
    return len(lines), len(lines[-1]) + 1

def tokenize(source: str) -> List[Token]:
    """Lex without parsing, keeping comments; used for highlighting."""
    return list(build_parser().lex(source, dont_ignore=True))

def paren_depth(source: str) -> int:
    """Net count of open parentheses, ignoring strings and comments."""
    depth = 0
    in_string = False
    escaped = False
    in_comment = False

    for ch in source:
        if in_comment:
            if ch == "\n":
                in_comment = False
            continue

        if in_string:
            if escaped:
                escaped = False
            elif ch == "\\":
                escaped = True
            elif ch == '"':
                in_string = False
            continue

        if ch == '"':
            in_string = True
        elif ch == ";":
            in_comment = True
        elif ch == "(":
            depth += 1
        elif ch == ")":
            depth -= 1

    return depth
