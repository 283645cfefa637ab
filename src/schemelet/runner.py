from __future__ import annotations

import logging
import sys
import traceback
from pathlib import Path
from typing import List, Optional, Sequence

from .evaluator import eval_forms
from .lower import lower_program
from .parser import ParseError, parse_source
from .runtime import Frame, ScmValue, SchemeRuntimeError, make_root_frame
from .tree import Node, pretty
from .utils import configure_logging, debug_py_trace_enabled, ensure_recursion_limit

logger = logging.getLogger(__name__)

USAGE = "usage: schemelet [--no-prelude] [--ast] [--log-level LEVEL] [FILE | SOURCE | -]"

def parse_program(src: str) -> List[Node]:
    return lower_program(parse_source(src))

def new_global_frame(source: Optional[str]=None, prelude: bool=True) -> Frame:
    frame = make_root_frame(source)

    if prelude:
        from .prelude import load_prelude
        load_prelude(frame)

    return frame

def run(src: str, frame: Optional[Frame]=None, prelude: bool=True) -> ScmValue:
    """Evaluate a whole program; every top-level form shares one root frame."""
    if frame is None:
        frame = new_global_frame(src, prelude=prelude)

    # Parse everything first so a syntax error runs nothing.
    forms = parse_program(src)
    logger.debug("evaluating %d top-level form(s)", len(forms))

    return eval_forms(forms, frame)

def repl_eval(text: str, frame: Frame) -> ScmValue:
    return eval_forms(parse_program(text), frame)

def _load_source(arg: Optional[str]) -> str:
    """
    Resolve CLI input into source text.
    - None or "-" => read stdin.
    - Existing path => read file contents.
    - Otherwise treat the argument as literal source.
    """

    if arg is None or arg == "-":
        return sys.stdin.read()

    candidate = Path(arg)
    if candidate.exists():
        return candidate.read_text(encoding="utf-8")

    return arg

def _usage_error(message: str) -> int:
    print(message, file=sys.stderr)
    print(USAGE, file=sys.stderr)
    return 2

def _report(exc: Exception) -> None:
    print(f"Error: {exc}", file=sys.stderr)

    if debug_py_trace_enabled():
        print("\nPython traceback:", file=sys.stderr)
        print("".join(traceback.format_exception(exc)), file=sys.stderr, end="")

def main(argv: Optional[Sequence[str]]=None) -> int:
    prelude = True
    dump_ast = False
    log_level: Optional[str] = None
    arg = None
    it = iter(sys.argv[1:] if argv is None else argv)

    for token in it:
        if token == "--no-prelude":
            prelude = False
            continue

        if token == "--ast":
            dump_ast = True
            continue

        if token.startswith("--log-level="):
            log_level = token.split("=", 1)[1]
            continue

        if token == "--log-level":
            try:
                log_level = next(it)
            except StopIteration:
                return _usage_error("--log-level flag requires a level")
            continue

        if token in ("-h", "--help"):
            print(USAGE)
            return 0

        if arg is None:
            arg = token
        else:
            return _usage_error(f"Unexpected argument: {token}")

    try:
        configure_logging(log_level)
    except ValueError as exc:
        return _usage_error(str(exc))

    ensure_recursion_limit()

    if arg is None and sys.stdin.isatty():
        from .repl import repl  # prompt_toolkit only needed interactively
        repl(prelude=prelude)
        return 0

    source = _load_source(arg)

    try:
        if dump_ast:
            for form in parse_program(source):
                print(pretty(form), end="")
            return 0

        run(source, prelude=prelude)
    except (ParseError, SchemeRuntimeError) as exc:
        _report(exc)
        return 1

    return 0

if __name__ == "__main__":
    sys.exit(main())
