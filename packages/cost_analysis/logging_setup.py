"""Logging for the ``cost_analysis`` package.

Modules log through ``get_logger("cost_analysis.<module>")`` and stay silent
until an entrypoint calls :func:`configure_logging`, which gives the package
logger one stderr handler. The level comes from the ``level`` argument, then
``COST_ANALYSIS_LOG_LEVEL``, then ``INFO``.
"""

from __future__ import annotations

import logging
import os
import sys
from typing import IO

_PKG_LOGGER_NAME = "cost_analysis"
_LEVEL_ENV = "COST_ANALYSIS_LOG_LEVEL"
_FORMAT = "%(asctime)s %(levelname)s %(name)s: %(message)s"
_CONFIGURED = False


def _as_level(value: int | str | None) -> int | None:
    if isinstance(value, int):
        return value
    if not value:
        return None
    text = value.strip().upper()
    if text.isdigit():
        return int(text)
    return logging.getLevelNamesMapping().get(text)


def configure_logging(level: int | str | None = None, *, stream: IO[str] = sys.stderr) -> None:
    """Attach the package's stream handler; later calls are no-ops."""

    global _CONFIGURED
    if _CONFIGURED:
        return

    resolved = _as_level(level) or _as_level(os.getenv(_LEVEL_ENV)) or logging.INFO
    pkg_logger = logging.getLogger(_PKG_LOGGER_NAME)
    for h in [h for h in pkg_logger.handlers if isinstance(h, logging.NullHandler)]:
        pkg_logger.removeHandler(h)

    handler = logging.StreamHandler(stream)
    handler.setFormatter(logging.Formatter(_FORMAT))
    pkg_logger.addHandler(handler)
    pkg_logger.setLevel(resolved)
    pkg_logger.propagate = False
    _CONFIGURED = True


def get_logger(name: str) -> logging.Logger:
    pkg_logger = logging.getLogger(_PKG_LOGGER_NAME)
    if not _CONFIGURED and not pkg_logger.handlers:
        pkg_logger.addHandler(logging.NullHandler())
    return logging.getLogger(name)


__all__ = ["configure_logging", "get_logger"]
