"""Pytest configuration for test isolation.

The package reads its rule tables, alias tables, headcount and worker cap from
``COST_ANALYSIS_*`` environment variables, and the CLI additionally loads a
``.env`` from the current working directory. A developer's shell or a stray
``.env`` would otherwise leak into assertions, so every test starts from a
clean environment inside its own temporary working directory.
"""

from __future__ import annotations

import logging
import os
import sys
from collections.abc import Iterator
from pathlib import Path

import pytest

# Make the workspace `packages/` dir importable when pytest runs without an install.
_PKG_DIR = Path(__file__).resolve().parents[1] / "packages"
if str(_PKG_DIR) not in sys.path:
    sys.path.insert(0, str(_PKG_DIR))

_ENV_VARS = (
    "COST_ANALYSIS_RULES",
    "COST_ANALYSIS_ALIASES",
    "COST_ANALYSIS_HEADCOUNT",
    "COST_ANALYSIS_MAX_WORKERS",
    "COST_ANALYSIS_LOG_LEVEL",
)


@pytest.fixture(autouse=True)
def _isolate_env(tmp_path: Path, monkeypatch: pytest.MonkeyPatch) -> None:
    """Clear package env vars and run each test from its own temp directory."""

    for name in _ENV_VARS:
        monkeypatch.delenv(name, raising=False)
    work = tmp_path / "cwd"
    work.mkdir(parents=True, exist_ok=True)
    monkeypatch.chdir(os.fspath(work))


@pytest.fixture(autouse=True)
def _reset_package_logging() -> Iterator[None]:
    """Undo ``configure_logging`` after CLI tests so ``caplog`` keeps working.

    The CLI attaches a handler to the ``cost_analysis`` logger and stops
    propagation; later tests rely on records reaching the root logger.
    """

    yield
    import cost_analysis.logging_setup as logging_setup

    pkg_logger = logging.getLogger("cost_analysis")
    for h in list(pkg_logger.handlers):
        pkg_logger.removeHandler(h)
    pkg_logger.propagate = True
    pkg_logger.setLevel(logging.NOTSET)
    logging_setup._CONFIGURED = False
