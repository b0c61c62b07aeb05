"""Rule-table classification of expenses and purchased line items.

Both classifiers read the same :class:`~cost_analysis.rules.RuleSet` value, so
one edit to the keyword data changes every report consistently.
"""

from __future__ import annotations

import re
from collections.abc import Iterable

from .models import CostClassification, CostType, MajorCategory, PurchaseRecord
from .rules import DEFAULT_RULES, CategoryRule, RuleSet, contains_any


def _strip_tags(label: str, tags: Iterable[str]) -> str:
    for tag in tags:
        label = re.sub(rf"\(\s*{re.escape(tag)}\s*\)", "", label, flags=re.IGNORECASE)
    return label.strip()


def _first_match(text: str, table: Iterable[CategoryRule]) -> str | None:
    for rule in table:
        if rule.matches(text):
            return rule.label
    return None


def classify_cost(
    category_raw: str | None,
    counterparty: str | None,
    *,
    rules: RuleSet = DEFAULT_RULES,
) -> CostClassification:
    """Return the cost type and category for an expense line.

    1. An explicit tag in the category cell (``"Rent(Fixed)"``,
       ``"식자재(변동비)"``) decides the type; the tag is stripped from the label.
    2. Otherwise ``"<category> <counterparty>"`` is tested against the FIXED
       table, then the VARIABLE table; the first category whose keywords match
       wins.
    3. Anything else is a variable cost labelled with its own category text,
       the counterparty, or ``rules.fallback_variable_category``.
    """

    raw_cat = (category_raw or "").strip()
    raw_name = (counterparty or "").strip()
    all_tags = (*rules.fixed_tags, *rules.variable_tags)

    if raw_cat:
        if contains_any(raw_cat, rules.fixed_tags):
            label = _strip_tags(raw_cat, all_tags) or rules.fallback_fixed_category
            return CostClassification(CostType.FIXED, label)
        if contains_any(raw_cat, rules.variable_tags):
            label = _strip_tags(raw_cat, all_tags) or rules.fallback_variable_category
            return CostClassification(CostType.VARIABLE, label)

    search = f"{raw_cat} {raw_name}"
    fixed = _first_match(search, rules.fixed_rules)
    if fixed is not None:
        return CostClassification(CostType.FIXED, fixed)
    variable = _first_match(search, rules.variable_rules)
    if variable is not None:
        return CostClassification(CostType.VARIABLE, variable)

    fallback = _strip_tags(raw_cat or raw_name, all_tags)
    return CostClassification(CostType.VARIABLE, fallback or rules.fallback_variable_category)


# ---------------------------------------------------------------------------
# Purchase line items
# ---------------------------------------------------------------------------


def _is_label(value: str, labels: Iterable[str]) -> bool:
    v = value.strip().casefold()
    return bool(v) and any(v == label.casefold() for label in labels)


def has_explicit_major_category(record: PurchaseRecord, *, rules: RuleSet = DEFAULT_RULES) -> bool:
    """``True`` when the category cell holds a food, supply or facility label.

    A bare "other" label is not treated as reliable: such items still go
    through the keyword heuristic.
    """

    cat = record.category_raw
    return any(
        _is_label(cat, labels)
        for labels in (rules.food_labels, rules.supply_labels, rules.facility_labels)
    )


def classify_by_explicit_category(
    record: PurchaseRecord, *, rules: RuleSet = DEFAULT_RULES
) -> MajorCategory:
    """Strict switch on the major-category label carried by the source."""

    if _is_label(record.category_raw, rules.food_labels):
        return MajorCategory.FOOD
    if _is_label(record.category_raw, rules.supply_labels):
        return MajorCategory.SUPPLY
    return MajorCategory.OTHER


def classify_by_heuristic(
    record: PurchaseRecord, *, rules: RuleSet = DEFAULT_RULES
) -> MajorCategory:
    """Classify a purchase whose major category is missing or unreliable.

    Explicit labels in the category/subcategory cells are checked first
    (facility investment, then supplies, then food). Then the combined
    ``"<category> <item> <subcategory>"`` text is tested against the food and
    supply keyword lists. Items still unmatched fall back to
    ``rules.unmatched_purchase_default`` unless explicitly labelled "other".
    """

    cat = record.category_raw
    sub = record.sub_category
    name = record.item_name

    if (
        _is_label(cat, rules.facility_labels)
        or _is_label(sub, rules.facility_labels)
        or contains_any(name, rules.facility_keywords)
    ):
        return MajorCategory.OTHER
    if _is_label(cat, rules.supply_labels) or _is_label(sub, rules.supply_labels):
        return MajorCategory.SUPPLY
    if _is_label(cat, rules.food_labels) or _is_label(sub, rules.food_labels):
        return MajorCategory.FOOD

    target = f"{cat} {name} {sub}"
    if contains_any(target, rules.food_keywords):
        return MajorCategory.FOOD
    if contains_any(target, rules.supply_keywords):
        return MajorCategory.SUPPLY
    if _is_label(cat, rules.other_labels):
        return MajorCategory.OTHER
    return rules.unmatched_purchase_default


def classify_purchase(record: PurchaseRecord, *, rules: RuleSet = DEFAULT_RULES) -> MajorCategory:
    """Use the explicit label when the source carries one, else the heuristic."""

    if has_explicit_major_category(record, rules=rules):
        return classify_by_explicit_category(record, rules=rules)
    return classify_by_heuristic(record, rules=rules)


__all__ = [
    "classify_cost",
    "classify_by_explicit_category",
    "classify_by_heuristic",
    "classify_purchase",
    "has_explicit_major_category",
]
