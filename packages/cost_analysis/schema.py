"""Header detection and alias-based column lookup.

Source sheets often carry a title block or notes above the real header, and
column names vary freely between files. This module finds the header row in a
decoded cell grid and resolves canonical fields against alias lists.
"""

from __future__ import annotations

import json
import re
from collections.abc import Iterable, Sequence
from typing import Any

from .logging_setup import get_logger
from .models import RawRow

# Only the top of a sheet is searched for a header.
HEADER_SCAN_LIMIT = 20

# Aliases shorter than this never match as substrings of a column name.
MIN_SUBSTRING_ALIAS_LEN = 2

_WS_RE = re.compile(r"\s+")

_logger = get_logger("cost_analysis.schema")


def serialize_row(row: Any) -> str:
    """Return a JSON text rendering of a row, used for keyword scans."""

    return json.dumps(row, ensure_ascii=False, default=str)


def _normalize_key(key: str) -> str:
    return _WS_RE.sub("", key).lower()


def is_blank(value: Any) -> bool:
    return value is None or str(value).strip() == ""


def resolve_header_row(rows: Sequence[Any], candidate_keywords: Iterable[str]) -> int:
    """Return the index of the header row within the first 20 rows.

    The first row whose serialized content contains any keyword wins. Keywords
    match literally and case matters, so a title such as "updated weekly" is
    not mistaken for a "Date" column. When nothing matches, a warning is
    logged and ``0`` is returned.
    """

    keywords = [k for k in candidate_keywords if k]
    for i, row in enumerate(rows[:HEADER_SCAN_LIMIT]):
        text = serialize_row(row)
        if any(k in text for k in keywords):
            _logger.debug("header row found at index %d", i)
            return i
    _logger.warning(
        "header row not found in first %d rows; defaulting to row 0", HEADER_SCAN_LIMIT
    )
    return 0


def lookup_alias(row: RawRow, aliases: Sequence[str]) -> Any | None:
    """Return the first non-empty value for any of ``aliases`` in ``row``.

    Resolution order:

    1. exact pass: aliases in order, as literal keys;
    2. normalized pass: whitespace removed and lowercased on both sides; for
       each alias in order, the first row key that equals it or (aliases of
       two or more characters) contains it.

    Blank values (``None`` or whitespace-only text) never match.
    """

    for alias in aliases:
        if alias in row and not is_blank(row[alias]):
            return row[alias]

    normalized_keys = [(_normalize_key(str(k)), k) for k in row.keys()]
    for alias in aliases:
        clean_alias = _normalize_key(alias)
        if not clean_alias:
            continue
        for clean_key, key in normalized_keys:
            if clean_key == clean_alias or (
                len(clean_alias) >= MIN_SUBSTRING_ALIAS_LEN and clean_alias in clean_key
            ):
                val = row[key]
                if not is_blank(val):
                    return val
    return None


def lookup_text(row: RawRow, aliases: Sequence[str]) -> str:
    """Like :func:`lookup_alias` but always returns stripped text (``""`` if absent)."""

    val = lookup_alias(row, aliases)
    return str(val).strip() if val is not None else ""


def _header_names(header: Sequence[Any]) -> list[str]:
    names: list[str] = []
    seen: dict[str, int] = {}
    for idx, cell in enumerate(header):
        name = str(cell).strip() if not is_blank(cell) else f"column_{idx}"
        if name in seen:
            seen[name] += 1
            name = f"{name}_{seen[name]}"
        else:
            seen[name] = 0
        names.append(name)
    return names


def records_from_grid(grid: Sequence[Sequence[Any]], header_index: int = 0) -> list[RawRow]:
    """Turn a decoded cell grid into raw rows keyed by the header row.

    Blank header cells are named ``column_<n>``; repeated names get ``_1``,
    ``_2`` suffixes. Empty cells are left out of each row and fully blank
    rows are skipped.
    """

    if header_index >= len(grid):
        return []
    names = _header_names(grid[header_index])
    records: list[RawRow] = []
    for line in grid[header_index + 1 :]:
        record: dict[str, Any] = {}
        for idx, cell in enumerate(line):
            if is_blank(cell):
                continue
            key = names[idx] if idx < len(names) else f"column_{idx}"
            record[key] = cell
        if record:
            records.append(record)
    return records


def records_from_sheet(
    grid: Sequence[Sequence[Any]], candidate_keywords: Iterable[str]
) -> list[RawRow]:
    """Locate the header in ``grid`` and return the rows beneath it."""

    return records_from_grid(grid, resolve_header_row(grid, candidate_keywords))


__all__ = [
    "HEADER_SCAN_LIMIT",
    "MIN_SUBSTRING_ALIAS_LEN",
    "serialize_row",
    "is_blank",
    "resolve_header_row",
    "lookup_alias",
    "lookup_text",
    "records_from_grid",
    "records_from_sheet",
]
