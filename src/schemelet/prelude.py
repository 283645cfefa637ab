"""Definitions written in schemelet itself, loaded into the root frame."""

from __future__ import annotations

from .runtime import Frame

PRELUDE = r"""
(define (newline) (display "\n"))
(define (println x) (display x) (newline))
"""

def load_prelude(frame: Frame) -> None:
    from .runner import repl_eval  # runner depends on the evaluator stack

    repl_eval(PRELUDE, frame)
