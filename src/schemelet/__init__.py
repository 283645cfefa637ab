"""schemelet: a small lexically scoped Scheme evaluator with closures over mutable state."""

__version__ = "0.1.0"
