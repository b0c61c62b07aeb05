"""Time-bucketed and per-counterparty aggregation of transactions."""

from __future__ import annotations

from collections import defaultdict
from collections.abc import Iterable, Sequence
from datetime import date
from typing import Protocol, TypeVar

from .logging_setup import get_logger
from .models import (
    GENERAL_COUNTERPARTY,
    AggregationBucket,
    CanonicalTransaction,
    CounterpartyTotals,
    Granularity,
)

# Periods up to this many days are shown day by day; longer ones by month.
DAILY_SPAN_LIMIT_DAYS = 62

_logger = get_logger("cost_analysis.aggregate")


class _Dated(Protocol):
    @property
    def date(self) -> str: ...


DatedT = TypeVar("DatedT", bound=_Dated)


def _to_date(text: str) -> date | None:
    try:
        return date.fromisoformat(text[:10])
    except ValueError:
        return None


def date_span_days(transactions: Iterable[_Dated]) -> int | None:
    """Days between the earliest and latest parseable dates (``None`` if none)."""

    dates = [d for d in (_to_date(t.date) for t in transactions) if d is not None]
    if not dates:
        return None
    return (max(dates) - min(dates)).days


def choose_granularity(transactions: Iterable[_Dated]) -> Granularity:
    span = date_span_days(transactions)
    if span is None or span <= DAILY_SPAN_LIMIT_DAYS:
        return Granularity.DAY
    return Granularity.MONTH


def period_key(date_text: str, granularity: Granularity) -> str:
    """Bucket key for a date: the date itself, or ``YYYY-MM`` by month.

    Text that is not a calendar date (``"Unknown Date"``) keeps its own key.
    """

    if granularity is Granularity.MONTH and _to_date(date_text) is not None:
        return date_text[:7]
    return date_text


def aggregate_by_period(
    transactions: Sequence[CanonicalTransaction],
    granularity: Granularity | None = None,
) -> list[AggregationBucket]:
    """Sum revenue, expense and profit per day or month, sorted by key.

    When ``granularity`` is omitted it is chosen from the date span
    (see :func:`choose_granularity`).
    """

    if granularity is None:
        granularity = choose_granularity(transactions)

    sums: dict[str, list[float]] = defaultdict(lambda: [0.0, 0.0, 0.0])
    for tx in transactions:
        acc = sums[period_key(tx.date, granularity)]
        acc[0] += tx.revenue
        acc[1] += tx.expense
        acc[2] += tx.profit

    return [
        AggregationBucket(period_key=key, revenue=rev, expense=exp, profit=prf)
        for key, (rev, exp, prf) in sorted(sums.items())
    ]


def _desc(totals: dict[str, float]) -> dict[str, float]:
    return dict(sorted(totals.items(), key=lambda kv: kv[1], reverse=True))


def aggregate_by_counterparty(
    transactions: Iterable[CanonicalTransaction],
) -> CounterpartyTotals:
    """Revenue and expense per counterparty (blank names become ``"General"``)."""

    revenue: dict[str, float] = defaultdict(float)
    expense: dict[str, float] = defaultdict(float)
    for tx in transactions:
        name = tx.counterparty.strip() or GENERAL_COUNTERPARTY
        if tx.revenue > 0:
            revenue[name] += tx.revenue
        if tx.expense > 0:
            expense[name] += tx.expense
    return CounterpartyTotals(revenue=_desc(revenue), expense=_desc(expense))


def filter_by_date_range(
    records: Iterable[DatedT], start: str | None, end: str | None
) -> list[DatedT]:
    """Keep records with ``start <= date <= end`` (ISO text comparison).

    Returns everything when both bounds are missing; undated records are
    excluded otherwise. A single bound is not a range: it is ignored with a
    warning and everything is returned.
    """

    items = list(records)
    if not start or not end:
        if start or end:
            _logger.warning(
                "date range needs both start and end (got start=%r, end=%r); not filtering",
                start,
                end,
            )
        return items
    return [r for r in items if _to_date(r.date) is not None and start <= r.date <= end]


def filter_by_month(records: Iterable[DatedT], month: str) -> list[DatedT]:
    """Keep records whose date falls in ``month`` (``YYYY-MM``)."""

    return [r for r in records if r.date.startswith(month)]


__all__ = [
    "DAILY_SPAN_LIMIT_DAYS",
    "date_span_days",
    "choose_granularity",
    "period_key",
    "aggregate_by_period",
    "aggregate_by_counterparty",
    "filter_by_date_range",
    "filter_by_month",
]
