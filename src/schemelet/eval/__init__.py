"""Evaluator helper modules for the schemelet runtime."""

__all__ = [
    "bind",
    "blocks",
    "common",
    "control",
    "fn",
    "let",
]
