import logging

import pytest

from cost_analysis import DEFAULT_ALIASES, lookup_alias, records_from_grid, records_from_sheet
from cost_analysis import resolve_header_row
from cost_analysis.schema import lookup_text, serialize_row


# ---- Header detection ----------------------------------------------------------


def test_header_on_first_row():
    rows = [["Date", "Revenue", "Expense"], ["2024-01-01", 100, 0]]
    assert resolve_header_row(rows, ["Revenue"]) == 0


def test_header_below_preamble():
    grid = [
        ["2024년 1월 손익 보고서"],
        [],
        ["작성자", "홍길동"],
        ["날짜", "구분", "금액"],
        ["2024-01-01", "매출", "100000"],
    ]
    assert resolve_header_row(grid, DEFAULT_ALIASES.transaction_header_keywords) == 3


def test_header_keywords_match_case_sensitively():
    rows = [["notes"], ["DATE", "AMOUNT"], ["Date", "Amount"]]
    assert resolve_header_row(rows, ["Date"]) == 2


def test_lowercase_words_in_title_do_not_claim_the_header():
    grid = [
        ["Monthly report, updated weekly"],
        ["Date", "Revenue"],
        ["2024-01-01", "100"],
    ]
    assert resolve_header_row(grid, DEFAULT_ALIASES.transaction_header_keywords) == 1


@pytest.mark.parametrize(
    ("table", "keyword"),
    [("transaction_header_keywords", k) for k in DEFAULT_ALIASES.transaction_header_keywords]
    + [("purchase_header_keywords", k) for k in DEFAULT_ALIASES.purchase_header_keywords],
)
def test_every_header_keyword_finds_the_header(table: str, keyword: str):
    grid = [["notes"], ["", keyword, ""], ["2024-01-01", "1", ""]]
    assert resolve_header_row(grid, getattr(DEFAULT_ALIASES, table)) == 1


def test_header_not_found_defaults_to_zero_with_warning(caplog: pytest.LogCaptureFixture):
    rows = [["a", "b"], ["c", "d"]]
    with caplog.at_level(logging.WARNING, logger="cost_analysis.schema"):
        assert resolve_header_row(rows, ["매출"]) == 0
    assert any("header row not found" in r.getMessage() for r in caplog.records)


def test_header_scan_stops_after_twenty_rows():
    rows = [["filler"]] * 20 + [["Date", "Revenue"]]
    assert resolve_header_row(rows, ["Revenue"]) == 0


def test_header_in_twentieth_row_is_found():
    rows = [["filler"]] * 19 + [["Date", "Revenue"]]
    assert resolve_header_row(rows, ["Revenue"]) == 19


def test_header_works_on_mapping_rows():
    rows = [{"title": "report"}, {"c0": "일자", "c1": "합계"}]
    assert resolve_header_row(rows, ["일자"]) == 1


def test_serialize_row_keeps_non_ascii_text():
    assert "매출" in serialize_row({"구분": "매출"})


# ---- Alias lookup ----------------------------------------------------------------


def test_exact_alias_wins_in_alias_order():
    row = {"Amount": 10, "금액": 20}
    assert lookup_alias(row, ["금액", "Amount"]) == 20
    assert lookup_alias(row, ["Amount", "금액"]) == 10


def test_normalized_pass_ignores_whitespace_and_case():
    row = {" total  EXPENSE ": 500}
    assert lookup_alias(row, ["Total Expense"]) == 500


def test_substring_match_inside_longer_header():
    row = {"지출 금액(원)": "12,000"}
    assert lookup_alias(row, ["금액"]) == "12,000"


def test_single_character_alias_never_matches_as_substring():
    row = {"Total": 5}
    assert lookup_alias(row, ["T"]) is None
    assert lookup_alias({"t": 7}, ["T"]) == 7


def test_blank_values_are_skipped():
    row = {"금액": "  ", "Amount": None, "총 금액": 30}
    assert lookup_alias(row, ["금액", "Amount"]) == 30


def test_missing_alias_returns_none():
    assert lookup_alias({"foo": 1}, ["bar", "baz"]) is None
    assert lookup_text({"foo": 1}, ["bar"]) == ""


def test_lookup_text_strips_and_stringifies():
    assert lookup_text({"거래처": "  A상회 "}, ["거래처"]) == "A상회"
    assert lookup_text({"Qty": 3}, ["Qty"]) == "3"


@pytest.mark.parametrize("alias", DEFAULT_ALIASES.date)
def test_every_date_alias_resolves(alias: str):
    assert lookup_alias({alias: "2024-01-01"}, DEFAULT_ALIASES.date) == "2024-01-01"


@pytest.mark.parametrize("alias", DEFAULT_ALIASES.revenue)
def test_every_revenue_alias_resolves(alias: str):
    assert lookup_alias({alias: 1}, DEFAULT_ALIASES.revenue) == 1


@pytest.mark.parametrize("alias", DEFAULT_ALIASES.expense)
def test_every_expense_alias_resolves(alias: str):
    assert lookup_alias({alias: 1}, DEFAULT_ALIASES.expense) == 1


_OTHER_FIELDS = (
    "amount",
    "type",
    "revenue_secondary",
    "expense_secondary",
    "fixed_cost",
    "variable_cost",
    "profit",
    "counterparty",
    "category",
    "memo",
    "payment_method",
    "purchase_date",
    "item_name",
    "vendor",
    "purchase_category",
    "sub_category",
    "spec",
    "unit",
    "quantity",
    "unit_price",
    "line_total",
)


@pytest.mark.parametrize(
    ("field", "alias"),
    [(field, alias) for field in _OTHER_FIELDS for alias in getattr(DEFAULT_ALIASES, field)],
)
def test_every_field_alias_resolves(field: str, alias: str):
    aliases = getattr(DEFAULT_ALIASES, field)
    assert lookup_alias({alias: "v"}, aliases) == "v"
    # Spacing and case in the sheet header do not matter.
    assert lookup_alias({f" {alias.upper()} ": "v"}, aliases) == "v"


# ---- Grid → records ----------------------------------------------------------------


def test_records_from_grid_keys_rows_by_header():
    grid = [
        ["날짜", "", "금액", "금액"],
        ["2024-01-01", "x", "100", "200"],
        ["", "", "", ""],
        ["2024-01-02", None, "300"],
    ]
    assert records_from_grid(grid) == [
        {"날짜": "2024-01-01", "column_1": "x", "금액": "100", "금액_1": "200"},
        {"날짜": "2024-01-02", "금액": "300"},
    ]


def test_records_from_grid_extra_cells_get_positional_names():
    grid = [["a"], ["1", "2"]]
    assert records_from_grid(grid) == [{"a": "1", "column_1": "2"}]


def test_records_from_grid_header_past_end_is_empty():
    assert records_from_grid([["a"]], header_index=5) == []
    assert records_from_grid([]) == []


def test_records_from_sheet_skips_preamble():
    grid = [
        ["매입 내역"],
        ["구매일", "구매처", "식재료명", "단가"],
        ["2024-01-05", "A상회", "양파", "15,000"],
    ]
    records = records_from_sheet(grid, DEFAULT_ALIASES.purchase_header_keywords)
    assert records == [
        {"구매일": "2024-01-05", "구매처": "A상회", "식재료명": "양파", "단가": "15,000"}
    ]
