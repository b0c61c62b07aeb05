"""CSV loading for the command line.

Decoding lives outside the pipeline: this helper only turns a CSV file into a
cell grid and hands it to :func:`cost_analysis.schema.records_from_sheet`,
which finds the header row (tolerating a preamble above it).
"""

from __future__ import annotations

import csv
from collections.abc import Iterable
from os import PathLike
from pathlib import Path

from .models import RawRow
from .schema import records_from_sheet


def read_csv_grid(csv_path: str | PathLike[str]) -> list[list[str]]:
    """Read a CSV file (UTF-8, optional BOM) into a list of rows."""

    p = Path(csv_path)
    with p.open(encoding="utf-8-sig", newline="") as f:
        return [row for row in csv.reader(f)]


def load_csv_records(
    csv_path: str | PathLike[str], header_keywords: Iterable[str]
) -> list[RawRow]:
    """Read ``csv_path`` and return raw rows keyed by its detected header."""

    return records_from_sheet(read_csv_grid(csv_path), header_keywords)


__all__ = ["read_csv_grid", "load_csv_records"]
