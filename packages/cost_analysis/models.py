"""Canonical record types produced and consumed by the pipeline.

Records are frozen ``dataclass`` values with an explicit field order, so they
compare by value in tests and can be shared freely between stages. Amounts are
plain floats: the reporting side works with approximate ratios and the source
spreadsheets carry no reliable precision to preserve.

Field defaults that stand in for missing data live here as module constants
(``UNKNOWN_DATE``, ``GENERAL_COUNTERPARTY`` ...), because several stages need
to recognize them.
"""

from __future__ import annotations

from collections.abc import Mapping, Sequence
from dataclasses import dataclass
from enum import StrEnum
from typing import Any, TypeAlias

# A single decoded spreadsheet row: arbitrary column names mapped to raw cell
# values (text, numbers, or nothing at all).
RawRow: TypeAlias = Mapping[str, Any]

UNKNOWN_DATE = "Unknown Date"
GENERAL_COUNTERPARTY = "General"
NO_PAYMENT_METHOD = "-"
UNKNOWN_ITEM = "Unknown Item"
OTHER_VENDOR = "Other"


class CostType(StrEnum):
    FIXED = "FIXED"
    VARIABLE = "VARIABLE"


class MajorCategory(StrEnum):
    FOOD = "FOOD"
    SUPPLY = "SUPPLY"
    OTHER = "OTHER"


class Granularity(StrEnum):
    DAY = "day"
    MONTH = "month"


class Status(StrEnum):
    GOOD = "good"
    CAUTION = "caution"
    RISK = "risk"


@dataclass(frozen=True, slots=True)
class CanonicalTransaction:
    """One revenue/expense line after normalization.

    ``revenue`` and ``expense`` are never negative. ``date`` is ``YYYY-MM-DD``
    when the source cell could be parsed, the raw text when it could not, and
    :data:`UNKNOWN_DATE` when the row had no date at all.
    """

    date: str
    revenue: float
    expense: float
    profit: float
    counterparty: str = GENERAL_COUNTERPARTY
    category_raw: str = ""
    memo: str = ""
    payment_method: str = NO_PAYMENT_METHOD


@dataclass(frozen=True, slots=True)
class CostClassification:
    type: CostType
    category: str


@dataclass(frozen=True, slots=True)
class PurchaseRecord:
    """A purchased line item (ingredients, consumables, equipment)."""

    date: str
    vendor: str
    item_name: str
    spec: str
    unit: str
    quantity: float
    unit_price: float
    line_total: float
    category_raw: str
    major_category: MajorCategory
    sub_category: str

    @property
    def month(self) -> str:
        return self.date[:7]


@dataclass(frozen=True, slots=True)
class AggregationBucket:
    period_key: str
    revenue: float = 0.0
    expense: float = 0.0
    profit: float = 0.0


@dataclass(frozen=True, slots=True)
class CounterpartyTotals:
    """Revenue and expense per counterparty, each ordered by value (desc)."""

    revenue: dict[str, float]
    expense: dict[str, float]


@dataclass(frozen=True, slots=True)
class CostStructure:
    total_fixed: float
    total_variable: float
    fixed_breakdown: dict[str, float]
    variable_breakdown: dict[str, float]


@dataclass(frozen=True, slots=True)
class Summary:
    total_revenue: float
    total_expense: float
    total_profit: float
    profit_margin: float


@dataclass(frozen=True, slots=True)
class FinancialSnapshot:
    """Derived ratios for a set of transactions; recomputed per query."""

    total_revenue: float
    total_expense: float
    fixed_cost: float
    variable_cost: float
    food_cost: float
    labor_cost: float
    utility_cost: float
    supplies_cost: float
    fl_cost: float
    fl_ratio: float
    prime_cost: float
    contribution_margin: float
    cm_ratio: float
    break_even_point: float
    bep_reached: bool
    headcount: int
    revenue_per_head: float
    labor_ratio: float
    fl_status: Status
    overall_status: Status


@dataclass(frozen=True, slots=True)
class MajorCategoryGroup:
    items: Sequence[PurchaseRecord]
    total_amount: float
    count: int


@dataclass(frozen=True, slots=True)
class VendorTotal:
    vendor: str
    total_amount: float
    item_count: int


@dataclass(frozen=True, slots=True)
class PriceTrend:
    name: str
    latest_price: float
    previous_price: float
    price_change: float
    purchase_count: int
    total_spent: float
    latest_date: str


__all__ = [
    "RawRow",
    "UNKNOWN_DATE",
    "GENERAL_COUNTERPARTY",
    "NO_PAYMENT_METHOD",
    "UNKNOWN_ITEM",
    "OTHER_VENDOR",
    "CostType",
    "MajorCategory",
    "Granularity",
    "Status",
    "CanonicalTransaction",
    "CostClassification",
    "PurchaseRecord",
    "AggregationBucket",
    "CounterpartyTotals",
    "CostStructure",
    "Summary",
    "FinancialSnapshot",
    "MajorCategoryGroup",
    "VendorTotal",
    "PriceTrend",
]
