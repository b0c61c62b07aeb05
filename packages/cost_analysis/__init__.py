"""Public interface for the ``cost_analysis`` package.

This module exposes the pipeline entry points and record types as the stable
import surface. There is no runtime logic here, only symbol re-exports.
"""

from .aggregate import (
    aggregate_by_counterparty,
    aggregate_by_period,
    choose_granularity,
    filter_by_date_range,
    filter_by_month,
)
from .aliases import DEFAULT_ALIASES, AliasTable
from .classify import (
    classify_by_explicit_category,
    classify_by_heuristic,
    classify_cost,
    classify_purchase,
    has_explicit_major_category,
)
from .coercion import parse_date, parse_number
from .metrics import compute_snapshot, cost_structure, summarize
from .models import (
    AggregationBucket,
    CanonicalTransaction,
    CostClassification,
    CostStructure,
    CostType,
    CounterpartyTotals,
    FinancialSnapshot,
    Granularity,
    MajorCategory,
    MajorCategoryGroup,
    PriceTrend,
    PurchaseRecord,
    RawRow,
    Status,
    Summary,
    VendorTotal,
)
from .normalize import normalize_transaction_batches, normalize_transactions
from .purchases import (
    analyze_by_major_category,
    analyze_by_vendor,
    analyze_price_trends,
    available_months,
    normalize_purchases,
)
from .rules import DEFAULT_RULES, CategoryRule, RuleSet
from .schema import lookup_alias, records_from_grid, records_from_sheet, resolve_header_row

__all__ = [
    # Schema resolution
    "resolve_header_row",
    "lookup_alias",
    "records_from_grid",
    "records_from_sheet",
    "parse_number",
    "parse_date",
    # Normalization
    "normalize_transactions",
    "normalize_transaction_batches",
    "normalize_purchases",
    # Classification
    "classify_cost",
    "classify_purchase",
    "has_explicit_major_category",
    "classify_by_explicit_category",
    "classify_by_heuristic",
    # Aggregation / metrics
    "aggregate_by_period",
    "aggregate_by_counterparty",
    "choose_granularity",
    "filter_by_date_range",
    "filter_by_month",
    "compute_snapshot",
    "cost_structure",
    "summarize",
    "analyze_by_major_category",
    "analyze_by_vendor",
    "analyze_price_trends",
    "available_months",
    # Configuration
    "AliasTable",
    "DEFAULT_ALIASES",
    "CategoryRule",
    "RuleSet",
    "DEFAULT_RULES",
    # Models / types
    "RawRow",
    "CanonicalTransaction",
    "CostClassification",
    "CostType",
    "PurchaseRecord",
    "MajorCategory",
    "MajorCategoryGroup",
    "VendorTotal",
    "PriceTrend",
    "AggregationBucket",
    "CounterpartyTotals",
    "CostStructure",
    "Summary",
    "FinancialSnapshot",
    "Granularity",
    "Status",
]
