"""Financial ratios derived from classified transactions.

Definitions
-----------
- FL cost: food + labor. FL ratio is FL cost as a percentage of revenue.
- Prime cost: FL cost + utilities.
- Contribution margin: revenue - variable cost; its ratio is over revenue.
- Break-even point (BEP): fixed cost / contribution-margin ratio, the revenue
  at which the margin exactly covers fixed cost.
- Revenue per head: revenue / headcount.

Every division is guarded; an empty transaction set yields a zeroed snapshot.
"""

from __future__ import annotations

from collections import defaultdict
from collections.abc import Iterable, Sequence

from .classify import classify_cost
from .models import (
    CanonicalTransaction,
    CostStructure,
    CostType,
    FinancialSnapshot,
    PurchaseRecord,
    Status,
    Summary,
)
from .rules import DEFAULT_RULES, RuleSet, contains_any

# FL ratio tiers (percent of revenue).
FL_GOOD_MAX = 65.0
FL_CAUTION_MAX = 70.0


def fl_status(fl_ratio: float) -> Status:
    if fl_ratio <= FL_GOOD_MAX:
        return Status.GOOD
    if fl_ratio <= FL_CAUTION_MAX:
        return Status.CAUTION
    return Status.RISK


def overall_status(fl_ratio: float, bep_reached: bool) -> Status:
    status = fl_status(fl_ratio)
    if status is Status.GOOD and bep_reached:
        return Status.GOOD
    if status is Status.RISK:
        return Status.RISK
    return Status.CAUTION


def compute_snapshot(
    transactions: Sequence[CanonicalTransaction],
    headcount: int,
    *,
    rules: RuleSet = DEFAULT_RULES,
    purchases: Sequence[PurchaseRecord] | None = None,
) -> FinancialSnapshot:
    """Compute the financial snapshot for ``transactions``.

    Each expense is classified with :func:`~cost_analysis.classify.classify_cost`
    and added to fixed or variable cost. Its category is then tagged as food,
    labor, utility or supplies, first match only, in that order.

    When no food cost was found among the transactions but ``purchases`` are
    given, the purchases' line totals stand in for food cost (and are added to
    variable cost).
    """

    total_revenue = sum(t.revenue for t in transactions)
    total_expense = sum(t.expense for t in transactions)

    fixed_cost = variable_cost = 0.0
    food_cost = labor_cost = utility_cost = supplies_cost = 0.0

    for tx in transactions:
        if tx.expense <= 0:
            continue
        cls = classify_cost(tx.category_raw, tx.counterparty, rules=rules)
        amount = tx.expense
        if cls.type is CostType.FIXED:
            fixed_cost += amount
        else:
            variable_cost += amount

        category = cls.category
        if contains_any(category, rules.food_tags):
            food_cost += amount
        elif contains_any(category, rules.labor_tags):
            labor_cost += amount
        elif contains_any(category, rules.utility_tags):
            utility_cost += amount
        elif contains_any(category, rules.supplies_tags):
            supplies_cost += amount

    if food_cost == 0 and purchases:
        purchase_total = sum(p.line_total for p in purchases)
        if purchase_total > 0:
            food_cost = purchase_total
            variable_cost += purchase_total

    fl_cost = food_cost + labor_cost
    fl_ratio = fl_cost / total_revenue * 100 if total_revenue > 0 else 0.0
    prime_cost = fl_cost + utility_cost

    contribution_margin = total_revenue - variable_cost
    cm_ratio = contribution_margin / total_revenue if total_revenue > 0 else 0.0
    break_even_point = fixed_cost / cm_ratio if cm_ratio > 0 and fixed_cost > 0 else 0.0
    bep_reached = total_revenue >= break_even_point

    return FinancialSnapshot(
        total_revenue=total_revenue,
        total_expense=total_expense,
        fixed_cost=fixed_cost,
        variable_cost=variable_cost,
        food_cost=food_cost,
        labor_cost=labor_cost,
        utility_cost=utility_cost,
        supplies_cost=supplies_cost,
        fl_cost=fl_cost,
        fl_ratio=fl_ratio,
        prime_cost=prime_cost,
        contribution_margin=contribution_margin,
        cm_ratio=cm_ratio,
        break_even_point=break_even_point,
        bep_reached=bep_reached,
        headcount=headcount,
        revenue_per_head=total_revenue / headcount if headcount > 0 else 0.0,
        labor_ratio=labor_cost / total_revenue * 100 if total_revenue > 0 else 0.0,
        fl_status=fl_status(fl_ratio),
        overall_status=overall_status(fl_ratio, bep_reached),
    )


def cost_structure(
    transactions: Iterable[CanonicalTransaction], *, rules: RuleSet = DEFAULT_RULES
) -> CostStructure:
    """Fixed vs variable totals with per-category breakdowns (largest first)."""

    fixed: dict[str, float] = defaultdict(float)
    variable: dict[str, float] = defaultdict(float)
    for tx in transactions:
        if tx.expense <= 0:
            continue
        cls = classify_cost(tx.category_raw, tx.counterparty, rules=rules)
        target = fixed if cls.type is CostType.FIXED else variable
        target[cls.category] += tx.expense

    def _desc(d: dict[str, float]) -> dict[str, float]:
        return dict(sorted(d.items(), key=lambda kv: kv[1], reverse=True))

    return CostStructure(
        total_fixed=sum(fixed.values()),
        total_variable=sum(variable.values()),
        fixed_breakdown=_desc(fixed),
        variable_breakdown=_desc(variable),
    )


def summarize(transactions: Iterable[CanonicalTransaction]) -> Summary:
    """Headline totals: revenue, expense, profit and profit margin (%)."""

    items = list(transactions)
    revenue = sum(t.revenue for t in items)
    expense = sum(t.expense for t in items)
    profit = sum(t.profit for t in items)
    return Summary(
        total_revenue=revenue,
        total_expense=expense,
        total_profit=profit,
        profit_margin=profit / revenue * 100 if revenue > 0 else 0.0,
    )


__all__ = [
    "FL_GOOD_MAX",
    "FL_CAUTION_MAX",
    "fl_status",
    "overall_status",
    "compute_snapshot",
    "cost_structure",
    "summarize",
]
