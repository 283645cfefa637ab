from __future__ import annotations

import logging
import os
import sys
from typing import Optional

DEBUG_PY_TRACE_ENV = "SCHEMELET_DEBUG_PY_TRACE"
LOG_LEVEL_ENV = "SCHEMELET_LOG_LEVEL"

_TRUTHY = {"1", "true", "yes", "on"}

# Python frames needed for MAX_CALL_DEPTH nested applications, with headroom.
RECURSION_LIMIT = 25000


def debug_py_trace_enabled() -> bool:
    """Whether failures should also print the Python traceback."""
    return os.environ.get(DEBUG_PY_TRACE_ENV, "").strip().lower() in _TRUTHY


def set_debug_py_trace(enabled: bool) -> None:
    if enabled:
        os.environ[DEBUG_PY_TRACE_ENV] = "1"
    else:
        os.environ.pop(DEBUG_PY_TRACE_ENV, None)


def ensure_recursion_limit(limit: int = RECURSION_LIMIT) -> None:
    """Raise the interpreter recursion limit; never lowers it."""
    if sys.getrecursionlimit() < limit:
        sys.setrecursionlimit(limit)


def log_level_from_env(default: str = "WARNING") -> str:
    return os.environ.get(LOG_LEVEL_ENV, default).strip().upper() or default


def configure_logging(level: Optional[str] = None) -> int:
    """Route the package loggers to stderr at `level` (env var when None)."""
    name = (level or log_level_from_env()).upper()
    numeric = logging.getLevelName(name)

    if not isinstance(numeric, int):
        raise ValueError(f"Unknown log level: {name}")

    logger = logging.getLogger("schemelet")
    logger.setLevel(numeric)

    if not logger.handlers:
        handler = logging.StreamHandler(sys.stderr)
        handler.setFormatter(logging.Formatter("%(levelname)s %(name)s: %(message)s"))
        logger.addHandler(handler)

    return numeric
