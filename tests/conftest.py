from __future__ import annotations

import logging
import sys
from pathlib import Path
from typing import Dict, List

import pytest

BASE_DIR = Path(__file__).resolve().parent.parent
SRC_DIR = (BASE_DIR / "src").resolve()

if str(BASE_DIR) not in sys.path:
    sys.path.append(str(BASE_DIR))
if str(SRC_DIR) not in sys.path:
    sys.path.append(str(SRC_DIR))

from schemelet.runner import new_global_frame
from schemelet.runtime import Frame
from schemelet.utils import DEBUG_PY_TRACE_ENV, LOG_LEVEL_ENV


@pytest.fixture
def root_frame() -> Frame:
    """Global frame with primitives and the prelude loaded."""
    return new_global_frame()


@pytest.fixture
def bare_frame() -> Frame:
    """Global frame with primitives only."""
    return new_global_frame(prelude=False)


@pytest.fixture
def restore_logger():
    """Undo handler and level changes made by configure_logging."""
    logger = logging.getLogger("schemelet")
    level = logger.level
    handlers = list(logger.handlers)
    logger.handlers.clear()
    yield logger
    logger.handlers[:] = handlers
    logger.setLevel(level)


@pytest.fixture(autouse=True)
def _clean_env(monkeypatch: pytest.MonkeyPatch) -> None:
    monkeypatch.delenv(DEBUG_PY_TRACE_ENV, raising=False)
    monkeypatch.delenv(LOG_LEVEL_ENV, raising=False)


def pytest_collection_modifyitems(
    session: pytest.Session,
    config: pytest.Config,
    items: List[pytest.Item],
) -> None:
    """Fail fast if pytest ever generates duplicate node IDs."""
    del session
    del config

    seen: Dict[str, int] = {}
    duplicates: List[str] = []
    for item in items:
        nodeid = item.nodeid
        if nodeid in seen:
            duplicates.append(nodeid)
            continue
        seen[nodeid] = 1

    if not duplicates:
        return

    lines = "\n".join(f"- {nodeid}" for nodeid in sorted(set(duplicates)))
    raise pytest.UsageError(
        "Duplicate pytest nodeids detected during collection:\n" f"{lines}"
    )
