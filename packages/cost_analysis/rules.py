"""Keyword rule tables shared by every classifier.

A single :class:`RuleSet` value drives:

- expense cost-type classification (ordered FIXED and VARIABLE tables of
  :class:`CategoryRule`; first matching category wins);
- purchase line-item classification (food / supply / facility keyword lists
  and the explicit major-category labels);
- revenue-vs-expense disambiguation keywords used by the transaction
  normalizer;
- the food / labor / utility / supplies tags used by the metrics engine.

Keywords written in Hangul (or any non-Latin script) match as plain
substrings, since Korean words take particles and compounds without spaces.
Keywords that begin or end with a Latin letter only match at a word edge on
that side, ignoring case, with an optional plural "s"/"es": "Tax" matches
"Taxes" but not "Taxi", and "Rice" does not match "Price". Keep the tables
short: classification cost is linear in the number of keywords.

Two fallbacks are business assumptions rather than verified rules and are
kept configurable: ``ambiguous_default`` (a row with a single positive amount
and no signal is revenue) and ``unmatched_purchase_default`` (an uncategorized
purchase is food).
"""

from __future__ import annotations

import re
from collections.abc import Iterable
from functools import lru_cache
from typing import Literal

from pydantic import BaseModel, ConfigDict, field_validator

from .models import MajorCategory

Keywords = tuple[str, ...]


def _is_latin_letter(ch: str) -> bool:
    return ch.isascii() and ch.isalpha()


@lru_cache(maxsize=4096)
def _keyword_pattern(keyword: str) -> re.Pattern[str] | None:
    """Compiled word-edge pattern for a Latin keyword, ``None`` for the rest."""

    head, tail = _is_latin_letter(keyword[0]), _is_latin_letter(keyword[-1])
    if not (head or tail):
        return None
    pattern = re.escape(keyword)
    if head:
        pattern = r"(?<![A-Za-z])" + pattern
    if tail:
        pattern += r"(?:e?s)?(?![A-Za-z])"
    return re.compile(pattern, re.IGNORECASE)


def keyword_in(keyword: str, text: str) -> bool:
    if not keyword:
        return False
    pattern = _keyword_pattern(keyword)
    if pattern is None:
        return keyword in text
    return pattern.search(text) is not None


def contains_any(text: str, keywords: Iterable[str]) -> bool:
    """Return ``True`` when any keyword occurs in ``text``."""

    return any(keyword_in(k, text) for k in keywords if k)


class CategoryRule(BaseModel):
    model_config = ConfigDict(frozen=True, extra="forbid", str_strip_whitespace=True)

    label: str
    keywords: Keywords

    @field_validator("label")
    @classmethod
    def _label_not_blank(cls, v: str) -> str:
        if not v:
            raise ValueError("category label must not be empty")
        return v

    def matches(self, text: str) -> bool:
        return contains_any(text, self.keywords)


def _rules(*pairs: tuple[str, Keywords]) -> tuple[CategoryRule, ...]:
    return tuple(CategoryRule(label=label, keywords=kws) for label, kws in pairs)


DEFAULT_FIXED_RULES = _rules(
    (
        "Rent & Maintenance",
        ("임대", "월세", "관리비", "보증금", "부동산", "Rent", "Lease", "Space"),
    ),
    (
        "Taxes & Insurance",
        ("세금", "국세", "지방세", "보험", "부가세", "Tax", "Insurance"),
    ),
    (
        "Communications",
        (
            "통신", "인터넷", "전화", "KT", "LG U+", "SK텔레콤", "SK브로드밴드", "유플러스",
            "Internet", "Phone", "Telecom",
        ),
    ),
    (
        "Contracted Services",
        ("세스코", "보안", "경비", "캡스", "정수기", "렌탈", "청소", "Service", "Security"),
    ),
    (
        "Financing & Other",
        (
            "이자", "대출", "상환", "카드대금", "협회", "회비", "고정", "감가상각",
            "Interest", "Loan", "Depreciation",
        ),
    ),
)

DEFAULT_VARIABLE_RULES = _rules(
    (
        "Food",
        (
            "식자재", "농산", "축산", "수산", "유통", "푸드", "청과", "미트", "웰스토리",
            "프레시", "마트", "시장", "상회", "고기", "쌀", "야채", "식품",
            "Food", "Meat", "Rice", "Grocery", "Groceries", "Produce",
        ),
    ),
    (
        "Beverages",
        (
            "주류", "주사", "음료", "하이트", "오비", "칠성", "코카", "와인",
            "Liquor", "Beer", "Wine", "Beverage",
        ),
    ),
    (
        "Labor",
        (
            "급여", "인건비", "알바", "아르바이트", "월급", "직원", "매니저", "스탭",
            "Part-time", "Salary", "Salaries", "Payroll", "Wages", "Labor", "Staff",
        ),
    ),
    (
        "Utilities",
        (
            "수도", "가스", "전기", "한전", "삼천리", "예스코", "도시가스",
            "Utility", "Utilities", "Gas", "Electric", "Electricity", "Water",
        ),
    ),
    (
        "Operating Supplies",
        (
            "쿠팡", "다이소", "비닐", "포장", "용기", "소모품", "잡화", "네이버", "생활",
            "Supplies", "Packaging", "Consumable",
        ),
    ),
    (
        "Delivery & Fees",
        (
            "배민", "요기요", "토스", "카드", "수수료", "퀵", "라이더", "부릉", "바로고",
            "Delivery", "Commission", "Platform Fee", "Card Fee",
        ),
    ),
    (
        "Marketing",
        (
            "광고", "홍보", "마케팅", "인스타", "페이스북", "블로그",
            "Marketing", "Advertising", "Promotion",
        ),
    ),
)

DEFAULT_FOOD_KEYWORDS: Keywords = (
    "육류", "소고기", "돼지고기", "닭고기", "채소", "야채", "과일", "식용유", "소스",
    "파우더", "가루", "면", "쌀", "김치", "해산물", "생선", "냉동", "유제품", "우유",
    "치즈", "계란", "음료", "주류", "커피", "원두", "빵", "베이커리", "밀가루", "설탕",
    "소금", "조미료", "양념", "육수", "토핑", "시럽", "퓨레", "농축액", "파스타", "떡",
    "meat", "beef", "pork", "chicken", "vegetable", "fruit", "sauce", "flour", "rice",
    "seafood", "fish", "dairy", "milk", "cheese", "egg", "coffee", "bread", "sugar",
    "salt", "syrup", "pasta",
)

DEFAULT_SUPPLY_KEYWORDS: Keywords = (
    "공산품", "생활용품", "소모품", "주방용품", "잡화", "비품", "포장", "용기",
    "세제", "위생", "타올", "티슈", "휴지", "장갑", "봉투", "호일", "랩",
    "수세미", "부탄", "가스", "세정", "락스", "행주", "컵", "빨대", "캐리어",
    "홀더", "유산지", "이쑤시개", "철수세미", "마스크", "앞치마", "세탁",
    "린스", "샴푸", "비누", "치약", "칫솔", "테이프", "일회용", "종이", "플라스틱",
    "detergent", "tissue", "napkin", "glove", "foil", "wrap", "straw", "cup",
    "container", "packaging", "disposable", "mask", "apron", "soap", "tape",
)

DEFAULT_FACILITY_KEYWORDS: Keywords = (
    "시설", "공사", "인테리어", "설비", "Facility", "Construction", "Interior", "Equipment",
)


class RuleSet(BaseModel):
    """Every keyword table used by classification, as one injectable value."""

    model_config = ConfigDict(frozen=True, extra="forbid")

    fixed_rules: tuple[CategoryRule, ...] = DEFAULT_FIXED_RULES
    variable_rules: tuple[CategoryRule, ...] = DEFAULT_VARIABLE_RULES

    # Explicit cost-type tags written into a category cell, e.g. "Rent(Fixed)".
    fixed_tags: Keywords = ("고정비", "Fixed")
    variable_tags: Keywords = ("변동비", "Variable")
    fallback_fixed_category: str = "Other Fixed Cost"
    fallback_variable_category: str = "Other Variable Cost"

    # Transaction type disambiguation
    expense_type_keywords: Keywords = (
        "지출", "비용", "출금", "차변", "expense", "output", "cost", "outflow", "debit",
    )
    revenue_type_keywords: Keywords = (
        "매출", "수입", "입금", "대변", "revenue", "income", "input", "sales", "inflow",
        "credit",
    )
    row_revenue_keywords: Keywords = ("매출", "수입", "입금", "revenue", "income", "sales")
    row_expense_keywords: Keywords = ("지출", "비용", "출금", "expense")
    ambiguous_default: Literal["revenue", "expense"] = "revenue"

    # Metrics tags, tested in this order; a transaction gets at most one.
    food_tags: Keywords = ("식자재", "Food", "Meat")
    labor_tags: Keywords = ("인건비", "급여", "Salary", "Wages", "Labor")
    utility_tags: Keywords = ("수도", "가스", "전기", "광열", "Utility", "Utilities")
    supplies_tags: Keywords = ("운영용품", "소모품", "잡화", "Supplies")

    # Purchases
    food_labels: Keywords = ("식자재", "Food", "Ingredients")
    supply_labels: Keywords = ("생활용품", "운용용품", "운영용품", "소모품", "Supplies", "Supply")
    facility_labels: Keywords = ("시설투자", "Facility Investment", "Capex")
    other_labels: Keywords = ("기타", "Other", "Etc")
    food_keywords: Keywords = DEFAULT_FOOD_KEYWORDS
    supply_keywords: Keywords = DEFAULT_SUPPLY_KEYWORDS
    facility_keywords: Keywords = DEFAULT_FACILITY_KEYWORDS
    unmatched_purchase_default: MajorCategory = MajorCategory.FOOD


DEFAULT_RULES = RuleSet()


__all__ = [
    "Keywords",
    "CategoryRule",
    "RuleSet",
    "DEFAULT_RULES",
    "DEFAULT_FIXED_RULES",
    "DEFAULT_VARIABLE_RULES",
    "DEFAULT_FOOD_KEYWORDS",
    "DEFAULT_SUPPLY_KEYWORDS",
    "DEFAULT_FACILITY_KEYWORDS",
    "contains_any",
    "keyword_in",
]
