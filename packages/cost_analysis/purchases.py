"""Purchase line items: normalization and purchase-side analyses.

Purchase sheets (ingredient orders, marketplace receipts) list one item per
row with a vendor, quantity, unit price and line total. Rows are normalized
into :class:`~cost_analysis.models.PurchaseRecord` values and tagged with a
major category (FOOD / SUPPLY / OTHER).
"""

from __future__ import annotations

import re
from collections import defaultdict
from collections.abc import Iterable, Sequence
from dataclasses import replace

from .aliases import DEFAULT_ALIASES, AliasTable
from .classify import classify_purchase
from .coercion import parse_date, parse_number
from .logging_setup import get_logger
from .models import (
    OTHER_VENDOR,
    UNKNOWN_DATE,
    UNKNOWN_ITEM,
    MajorCategory,
    MajorCategoryGroup,
    PriceTrend,
    PurchaseRecord,
    RawRow,
    VendorTotal,
)
from .rules import DEFAULT_RULES, RuleSet
from .schema import lookup_alias, lookup_text

_logger = get_logger("cost_analysis.purchases")

_ISO_DATE_RE = re.compile(r"\d{4}-\d{2}-\d{2}")


def normalize_purchase_row(
    row: RawRow,
    *,
    aliases: AliasTable = DEFAULT_ALIASES,
    rules: RuleSet = DEFAULT_RULES,
) -> PurchaseRecord | None:
    """Normalize one purchase row; ``None`` when the row carries nothing."""

    unit_price = parse_number(lookup_alias(row, aliases.unit_price))
    quantity = parse_number(lookup_alias(row, aliases.quantity))
    line_total = parse_number(lookup_alias(row, aliases.line_total))
    if line_total == 0 and unit_price > 0 and quantity > 0:
        line_total = unit_price * quantity

    item_name = lookup_text(row, aliases.item_name) or UNKNOWN_ITEM
    if line_total <= 0 and quantity <= 0 and item_name == UNKNOWN_ITEM:
        return None

    category = lookup_text(row, aliases.purchase_category)
    sub_category = lookup_text(row, aliases.sub_category)
    record = PurchaseRecord(
        date=parse_date(lookup_alias(row, aliases.purchase_date)) or UNKNOWN_DATE,
        vendor=lookup_text(row, aliases.vendor) or OTHER_VENDOR,
        item_name=item_name,
        spec=lookup_text(row, aliases.spec),
        unit=lookup_text(row, aliases.unit),
        quantity=quantity,
        unit_price=unit_price,
        line_total=line_total,
        category_raw=category,
        major_category=MajorCategory.OTHER,
        sub_category=sub_category,
    )
    # Reports fall back to the category text when no subcategory exists.
    return replace(
        record,
        major_category=classify_purchase(record, rules=rules),
        sub_category=sub_category or category,
    )


def normalize_purchases(
    rows: Iterable[RawRow],
    *,
    aliases: AliasTable = DEFAULT_ALIASES,
    rules: RuleSet = DEFAULT_RULES,
) -> list[PurchaseRecord]:
    """Normalize purchase rows, sorted by date."""

    out = [
        rec
        for rec in (normalize_purchase_row(r, aliases=aliases, rules=rules) for r in rows)
        if rec is not None
    ]
    out.sort(key=lambda r: r.date)
    _logger.info("normalized %d purchase records", len(out))
    return out


# ---------------------------------------------------------------------------
# Analyses
# ---------------------------------------------------------------------------


def analyze_by_major_category(
    records: Iterable[PurchaseRecord],
) -> dict[MajorCategory, MajorCategoryGroup]:
    """Group records by major category with totals and counts (all keys present)."""

    grouped: dict[MajorCategory, list[PurchaseRecord]] = {m: [] for m in MajorCategory}
    for rec in records:
        grouped[rec.major_category].append(rec)
    return {
        m: MajorCategoryGroup(
            items=tuple(items),
            total_amount=sum(r.line_total for r in items),
            count=len(items),
        )
        for m, items in grouped.items()
    }


def analyze_by_vendor(records: Iterable[PurchaseRecord]) -> list[VendorTotal]:
    """Total spend per vendor, largest first."""

    totals: dict[str, float] = defaultdict(float)
    counts: dict[str, int] = defaultdict(int)
    for rec in records:
        vendor = rec.vendor or OTHER_VENDOR
        totals[vendor] += rec.line_total
        counts[vendor] += 1
    rows = [VendorTotal(v, totals[v], counts[v]) for v in totals]
    rows.sort(key=lambda r: r.total_amount, reverse=True)
    return rows


def analyze_price_trends(records: Iterable[PurchaseRecord]) -> list[PriceTrend]:
    """Unit-price movement for items bought at least twice.

    Change is measured between the two most recent purchases (by date) as a
    percentage of the earlier price; ``0`` when the earlier price is zero.
    Sorted by absolute change, largest first.
    """

    by_name: dict[str, list[PurchaseRecord]] = defaultdict(list)
    for rec in records:
        if rec.item_name and rec.item_name != UNKNOWN_ITEM:
            by_name[rec.item_name].append(rec)

    trends: list[PriceTrend] = []
    for name, items in by_name.items():
        if len(items) < 2:
            continue
        ordered = sorted(items, key=lambda r: r.date)
        latest, previous = ordered[-1], ordered[-2]
        change = (
            (latest.unit_price - previous.unit_price) / previous.unit_price * 100
            if previous.unit_price
            else 0.0
        )
        trends.append(
            PriceTrend(
                name=name,
                latest_price=latest.unit_price,
                previous_price=previous.unit_price,
                price_change=change,
                purchase_count=len(items),
                total_spent=sum(r.line_total for r in items),
                latest_date=latest.date,
            )
        )
    trends.sort(key=lambda t: abs(t.price_change), reverse=True)
    return trends


def available_months(records: Sequence[PurchaseRecord]) -> list[str]:
    """Sorted distinct ``YYYY-MM`` months among records with a calendar date."""

    return sorted({r.month for r in records if _ISO_DATE_RE.match(r.date)})


__all__ = [
    "normalize_purchase_row",
    "normalize_purchases",
    "analyze_by_major_category",
    "analyze_by_vendor",
    "analyze_price_trends",
    "available_months",
]
