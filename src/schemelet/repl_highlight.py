"""prompt_toolkit lexer for live schemelet syntax highlighting in the REPL."""

from __future__ import annotations

from typing import Callable

from lark import Token, UnexpectedInput
from prompt_toolkit.document import Document
from prompt_toolkit.formatted_text import StyleAndTextTuples
from prompt_toolkit.lexers import Lexer

from .lower import SPECIAL_FORM_NAMES
from .parser import tokenize
from .runtime import Builtins, init_stdlib

# Map highlight groups to prompt_toolkit style strings.
GROUP_STYLE = {
    "keyword": "bold ansicyan",
    "boolean": "ansicyan",
    "number": "ansimagenta",
    "string": "ansigreen",
    "builtin": "bold ansiyellow",
    "identifier": "",
    "punctuation": "",
    "comment": "italic ansigray",
}

_TOKEN_GROUP = {
    "INT": "number",
    "STRING": "string",
    "BOOLEAN": "boolean",
    "COMMENT": "comment",
    "LPAR": "punctuation",
    "RPAR": "punctuation",
    "QUOTE": "punctuation",
}


def _group_for(tok: Token) -> str:
    if tok.type == "SYMBOL":
        if tok.value in SPECIAL_FORM_NAMES or tok.value == "else":
            return "keyword"
        if tok.value in Builtins.primitives:
            return "builtin"
        return "identifier"

    return _TOKEN_GROUP.get(tok.type, "")


def _highlight_line(text: str) -> StyleAndTextTuples:
    """Tokenize a single line and return styled fragments."""
    if not text:
        return [("", "")]

    try:
        tokens = tokenize(text)
    except UnexpectedInput:
        return [("", text)]

    result: StyleAndTextTuples = []
    pos = 0

    for tok in tokens:
        start = tok.start_pos
        end = tok.end_pos
        if start is None or end is None or start < pos:
            continue

        # Unstyled gap (whitespace) before token.
        if start > pos:
            result.append(("", text[pos:start]))

        result.append((GROUP_STYLE.get(_group_for(tok), ""), text[start:end]))
        pos = end

    # Trailing unstyled text.
    if pos < len(text):
        result.append(("", text[pos:]))

    return result if result else [("", text)]


class SchemeletLexer(Lexer):
    """prompt_toolkit Lexer that highlights source using the lark lexer."""

    def __init__(self) -> None:
        init_stdlib()

    def lex_document(self, document: Document) -> Callable[[int], StyleAndTextTuples]:
        lines = document.lines
        cache: dict[int, StyleAndTextTuples] = {}

        def get_line(lineno: int) -> StyleAndTextTuples:
            if lineno not in cache:
                if lineno < len(lines):
                    cache[lineno] = _highlight_line(lines[lineno])
                else:
                    cache[lineno] = []
            return cache[lineno]

        return get_line
