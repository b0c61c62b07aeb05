"""Cell value coercion: numbers and calendar dates.

Both helpers are total. Garbage becomes ``0`` (numbers) or is passed through
untouched (dates) so a single odd cell never aborts a whole sheet.
"""

from __future__ import annotations

import math
import re
from datetime import date, datetime, timedelta
from decimal import Decimal
from typing import Any

# Spreadsheet day zero. Serial 1 is 1899-12-31, and 25569 is 1970-01-01.
SPREADSHEET_EPOCH = datetime(1899, 12, 30)

_NON_NUMERIC_RE = re.compile(r"[^0-9.\-]")
_LEADING_NUMBER_RE = re.compile(r"-?(?:[0-9]+(?:\.[0-9]*)?|\.[0-9]+)")

# Tried in order after ISO 8601. Formats carrying a time of day are covered by
# falling back to the first whitespace-delimited token.
_DATE_FORMATS: tuple[str, ...] = (
    "%Y-%m-%d",
    "%Y/%m/%d",
    "%Y.%m.%d",
    "%Y.%m.%d.",
    "%Y. %m. %d",
    "%Y. %m. %d.",
    "%Y년 %m월 %d일",
    "%Y년%m월%d일",
    "%m/%d/%Y",
    "%m/%d/%y",
    "%m-%d-%Y",
    "%d %b %Y",
    "%d %B %Y",
    "%b %d, %Y",
    "%B %d, %Y",
    "%b %d %Y",
    "%Y-%m",
    "%Y/%m",
)


def _is_number(value: Any) -> bool:
    return isinstance(value, (int, float, Decimal)) and not isinstance(value, bool)


def parse_number(value: Any) -> float:
    """Coerce a cell to a number; anything unparseable is ``0``.

    Numbers pass through unchanged (non-finite values become ``0``). Text
    keeps only ASCII digits, ``.`` and ``-`` and then parses the leading
    numeric prefix, so ``"₩1,234.5"`` is ``1234.5`` and ``"1.2.3"`` is ``1.2``.
    """

    if _is_number(value):
        if isinstance(value, Decimal):
            value = float(value)
        return value if math.isfinite(value) else 0
    if isinstance(value, str):
        cleaned = _NON_NUMERIC_RE.sub("", value)
        m = _LEADING_NUMBER_RE.match(cleaned)
        if m is None:
            return 0
        try:
            return float(m.group(0))
        except ValueError:
            return 0
    return 0


def serial_to_date(serial: float) -> date | None:
    """Convert a spreadsheet date serial to a calendar date.

    The fractional (time of day) part is dropped. Out-of-range serials yield
    ``None``.
    """

    try:
        return (SPREADSHEET_EPOCH + timedelta(days=float(serial))).date()
    except (OverflowError, ValueError):
        return None


def _parse_date_text(text: str) -> date | None:
    candidates = [text]
    first = text.split()[0]
    if first != text:
        candidates.append(first)
    for candidate in candidates:
        try:
            return datetime.fromisoformat(candidate).date()
        except ValueError:
            pass
        for fmt in _DATE_FORMATS:
            try:
                return datetime.strptime(candidate, fmt).date()
            except ValueError:
                continue
    return None


def parse_date(value: Any) -> str | None:
    """Return ``YYYY-MM-DD`` for a date-like cell.

    - numbers are spreadsheet serials;
    - ``date``/``datetime`` objects are formatted directly;
    - text is parsed with ISO 8601 and a list of common formats; text that
      cannot be parsed is returned unchanged;
    - ``None`` and blank text return ``None`` (callers substitute
      :data:`cost_analysis.models.UNKNOWN_DATE`).
    """

    if value is None:
        return None
    if isinstance(value, datetime):
        return value.date().isoformat()
    if isinstance(value, date):
        return value.isoformat()
    if _is_number(value):
        # Serial 0 is what an empty formatted date cell decodes to.
        if not value or not math.isfinite(float(value)):
            return None
        d = serial_to_date(float(value))
        return d.isoformat() if d is not None else str(value)
    text = str(value).strip()
    if not text:
        return None
    parsed = _parse_date_text(text)
    return parsed.isoformat() if parsed is not None else text


__all__ = ["parse_number", "parse_date", "serial_to_date", "SPREADSHEET_EPOCH"]
