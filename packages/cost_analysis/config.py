"""Environment-driven configuration.

Variables (a local ``.env`` is loaded by the CLI before these are read):

- ``COST_ANALYSIS_RULES``: path to a JSON :class:`~cost_analysis.rules.RuleSet`
  replacing the built-in keyword tables.
- ``COST_ANALYSIS_ALIASES``: path to a JSON
  :class:`~cost_analysis.aliases.AliasTable` replacing the built-in aliases.
- ``COST_ANALYSIS_HEADCOUNT``: default staff headcount for per-head metrics.
- ``COST_ANALYSIS_MAX_WORKERS``: worker cap for batch normalization.
- ``COST_ANALYSIS_LOG_LEVEL``: read by :mod:`cost_analysis.logging_setup`.

JSON overrides may be partial: omitted fields keep their defaults.
"""

from __future__ import annotations

import os
from os import PathLike
from pathlib import Path
from typing import TypeVar

from pydantic import BaseModel, ValidationError

from .aliases import DEFAULT_ALIASES, AliasTable
from .logging_setup import get_logger
from .rules import DEFAULT_RULES, RuleSet

RULES_ENV = "COST_ANALYSIS_RULES"
ALIASES_ENV = "COST_ANALYSIS_ALIASES"
HEADCOUNT_ENV = "COST_ANALYSIS_HEADCOUNT"
MAX_WORKERS_ENV = "COST_ANALYSIS_MAX_WORKERS"

DEFAULT_HEADCOUNT = 5

_logger = get_logger("cost_analysis.config")

ModelT = TypeVar("ModelT", bound=BaseModel)


def _load_model(
    path: str | PathLike[str] | None, env: str, model: type[ModelT], default: ModelT
) -> ModelT:
    if path is None:
        env_val = os.getenv(env)
        path = env_val.strip() if env_val and env_val.strip() else None
    if path is None:
        return default

    p = Path(path).expanduser()
    try:
        text = p.read_text(encoding="utf-8")
    except OSError as exc:
        raise ValueError(f"cannot read {model.__name__} file {p}: {exc}") from exc
    try:
        loaded = model.model_validate_json(text)
    except ValidationError as exc:
        raise ValueError(f"invalid {model.__name__} file {p}: {exc}") from exc
    _logger.info("loaded %s overrides from %s", model.__name__, p)
    return loaded


def load_rule_set(path: str | PathLike[str] | None = None) -> RuleSet:
    """Return the rule set from ``path``, ``$COST_ANALYSIS_RULES``, or the default."""

    return _load_model(path, RULES_ENV, RuleSet, DEFAULT_RULES)


def load_alias_table(path: str | PathLike[str] | None = None) -> AliasTable:
    """Return the alias table from ``path``, ``$COST_ANALYSIS_ALIASES``, or the default."""

    return _load_model(path, ALIASES_ENV, AliasTable, DEFAULT_ALIASES)


def resolve_headcount(value: int | None = None) -> int:
    """Explicit value, else ``$COST_ANALYSIS_HEADCOUNT``, else 5.

    Raises ``ValueError`` for a negative value or a non-integer env setting.
    """

    if value is None:
        env_val = os.getenv(HEADCOUNT_ENV)
        if env_val and env_val.strip():
            try:
                value = int(env_val.strip())
            except ValueError as exc:
                raise ValueError(f"{HEADCOUNT_ENV} must be an integer, got {env_val!r}") from exc
        else:
            value = DEFAULT_HEADCOUNT
    if value < 0:
        raise ValueError(f"headcount must not be negative, got {value}")
    return value


def resolve_max_workers(n_batches: int) -> int:
    """Worker count for batch normalization.

    Honors ``$COST_ANALYSIS_MAX_WORKERS`` when it is a positive integer, caps
    at ``n_batches`` and 32, and never returns less than 1.
    """

    env_val = os.getenv(MAX_WORKERS_ENV)
    try:
        max_workers = int(env_val) if env_val else None
    except ValueError:
        _logger.warning("ignoring non-integer %s=%r", MAX_WORKERS_ENV, env_val)
        max_workers = None

    if max_workers is not None and max_workers > 0:
        return max(1, min(max_workers, n_batches, 32))
    return max(1, min(8, n_batches))


__all__ = [
    "RULES_ENV",
    "ALIASES_ENV",
    "HEADCOUNT_ENV",
    "MAX_WORKERS_ENV",
    "DEFAULT_HEADCOUNT",
    "load_rule_set",
    "load_alias_table",
    "resolve_headcount",
    "resolve_max_workers",
]
