"""Raw rows → :class:`~cost_analysis.models.CanonicalTransaction` records.

A sheet may describe money flow in three different shapes, and a row is read
with the first one that yields a signal:

1. a type column (``구분``, ``Type``...) plus one amount column, where the
   type text says whether the amount is an expense or revenue;
2. dedicated revenue/expense columns (``매출액`` / ``지출금액``...), then a
   looser secondary set;
3. a lone amount with no type: the serialized row is scanned for revenue or
   expense words, and if nothing is found the amount is taken as
   ``rules.ambiguous_default`` (revenue unless configured otherwise).

Rows that end up with no revenue, no expense and no profit are dropped. The
result is sorted by date text, which orders ISO dates chronologically.
"""

from __future__ import annotations

from collections.abc import Iterable, Sequence
from concurrent.futures import ThreadPoolExecutor

from .aliases import DEFAULT_ALIASES, AliasTable
from .coercion import parse_date, parse_number
from .config import resolve_max_workers
from .logging_setup import get_logger
from .models import (
    GENERAL_COUNTERPARTY,
    NO_PAYMENT_METHOD,
    UNKNOWN_DATE,
    CanonicalTransaction,
    RawRow,
)
from .rules import DEFAULT_RULES, RuleSet, contains_any
from .schema import lookup_alias, lookup_text, serialize_row

_logger = get_logger("cost_analysis.normalize")


def _num(row: RawRow, aliases: Sequence[str]) -> float:
    return parse_number(lookup_alias(row, aliases))


def _split_amounts(
    row: RawRow, *, aliases: AliasTable, rules: RuleSet
) -> tuple[float, float]:
    """Return ``(revenue, expense)`` for a row, before sign normalization."""

    amount = _num(row, aliases.amount)
    type_text = lookup_text(row, aliases.type)

    if type_text and contains_any(type_text, rules.expense_type_keywords):
        return 0.0, amount
    if type_text and contains_any(type_text, rules.revenue_type_keywords):
        return amount, 0.0

    revenue = _num(row, aliases.revenue)
    expense = _num(row, aliases.expense)
    if revenue == 0:
        revenue = _num(row, aliases.revenue_secondary)
    if expense == 0:
        expense = _num(row, aliases.expense_secondary)
    if revenue != 0 or expense != 0 or amount == 0:
        return revenue, expense

    if amount < 0:
        # A signed single-amount column: outflows carry the minus sign.
        return 0.0, -amount

    row_text = serialize_row(row)
    if contains_any(row_text, rules.row_revenue_keywords):
        return amount, 0.0
    if contains_any(row_text, rules.row_expense_keywords):
        return 0.0, amount
    _logger.debug("ambiguous amount %s treated as %s", amount, rules.ambiguous_default)
    if rules.ambiguous_default == "expense":
        return 0.0, amount
    return amount, 0.0


def _non_negative(revenue: float, expense: float) -> tuple[float, float]:
    # A negative value on one side is money moving the other way.
    return max(revenue, 0) + max(-expense, 0), max(expense, 0) + max(-revenue, 0)


def normalize_row(
    row: RawRow,
    *,
    aliases: AliasTable = DEFAULT_ALIASES,
    rules: RuleSet = DEFAULT_RULES,
) -> CanonicalTransaction | None:
    """Normalize a single raw row; ``None`` when it is not a real transaction."""

    date = parse_date(lookup_alias(row, aliases.date)) or UNKNOWN_DATE

    revenue, expense = _split_amounts(row, aliases=aliases, rules=rules)
    revenue, expense = _non_negative(revenue, expense)

    if expense == 0:
        fixed = _num(row, aliases.fixed_cost)
        variable = _num(row, aliases.variable_cost)
        if fixed > 0 or variable > 0:
            expense = max(fixed, 0) + max(variable, 0)

    profit = _num(row, aliases.profit)
    if profit == 0:
        profit = revenue - expense

    if revenue == 0 and expense == 0 and profit == 0:
        return None

    return CanonicalTransaction(
        date=date,
        revenue=revenue,
        expense=expense,
        profit=profit,
        counterparty=lookup_text(row, aliases.counterparty) or GENERAL_COUNTERPARTY,
        category_raw=lookup_text(row, aliases.category),
        memo=lookup_text(row, aliases.memo),
        payment_method=lookup_text(row, aliases.payment_method) or NO_PAYMENT_METHOD,
    )


def _normalize_unsorted(
    rows: Iterable[RawRow], *, aliases: AliasTable, rules: RuleSet
) -> list[CanonicalTransaction]:
    out: list[CanonicalTransaction] = []
    dropped = 0
    for row in rows:
        tx = normalize_row(row, aliases=aliases, rules=rules)
        if tx is None:
            dropped += 1
            continue
        out.append(tx)
    if dropped:
        _logger.debug("dropped %d rows without revenue, expense or profit", dropped)
    return out


def sort_by_date(transactions: Iterable[CanonicalTransaction]) -> list[CanonicalTransaction]:
    return sorted(transactions, key=lambda t: t.date)


def normalize_transactions(
    rows: Iterable[RawRow],
    *,
    aliases: AliasTable = DEFAULT_ALIASES,
    rules: RuleSet = DEFAULT_RULES,
) -> list[CanonicalTransaction]:
    """Normalize raw rows into canonical transactions sorted by date."""

    items = sort_by_date(_normalize_unsorted(rows, aliases=aliases, rules=rules))
    _logger.info("normalized %d transactions", len(items))
    return items


def normalize_transaction_batches(
    batches: Iterable[Iterable[RawRow]],
    *,
    aliases: AliasTable = DEFAULT_ALIASES,
    rules: RuleSet = DEFAULT_RULES,
    max_workers: int | None = None,
) -> list[CanonicalTransaction]:
    """Normalize several independent row batches (e.g. files) concurrently.

    Batches are processed on a thread pool; their results are merged and
    sorted by date once at the end, so the output equals
    ``normalize_transactions`` over the concatenated rows.
    """

    batch_list = [list(b) for b in batches]
    if not batch_list:
        return []
    if max_workers is None:
        max_workers = resolve_max_workers(len(batch_list))

    def _one(batch: list[RawRow]) -> list[CanonicalTransaction]:
        return _normalize_unsorted(batch, aliases=aliases, rules=rules)

    with ThreadPoolExecutor(max_workers=max_workers, thread_name_prefix="ca-batch") as ex:
        parts = list(ex.map(_one, batch_list))

    merged = sort_by_date(tx for part in parts for tx in part)
    _logger.info("normalized %d transactions from %d batches", len(merged), len(batch_list))
    return merged


__all__ = [
    "normalize_row",
    "normalize_transactions",
    "normalize_transaction_batches",
    "sort_by_date",
]
