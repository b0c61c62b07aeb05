import logging

import pytest

from cost_analysis import (
    CanonicalTransaction,
    RuleSet,
    normalize_transaction_batches,
    normalize_transactions,
)
from cost_analysis.normalize import normalize_row


def test_korean_type_column_expense():
    rows = [{"날짜": "2024-01-03", "구분": "지출", "금액": "50,000", "항목": "식자재"}]
    assert normalize_transactions(rows) == [
        CanonicalTransaction(
            date="2024-01-03",
            revenue=0,
            expense=50000,
            profit=-50000,
            counterparty="지출",
            category_raw="식자재",
        )
    ]


def test_english_type_column_expense_and_revenue():
    rows = [
        {"Date": "2024-01-02", "Type": "Expense", "Amount": 50000, "Vendor": "Fresh Mart"},
        {"Date": "2024-01-01", "Type": "Sales", "Amount": 120000, "Client": "Hall"},
    ]
    out = normalize_transactions(rows)
    assert [(t.date, t.revenue, t.expense, t.counterparty) for t in out] == [
        ("2024-01-01", 120000, 0, "Hall"),
        ("2024-01-02", 0, 50000, "Fresh Mart"),
    ]


def test_dedicated_revenue_and_expense_columns():
    rows = [
        {
            "일자": "2024-02-01",
            "매출액": "300,000",
            "지출금액": "120,000",
            "거래처": "본점",
            "적요": "2월 정산",
            "결제수단": "카드",
        }
    ]
    (tx,) = normalize_transactions(rows)
    assert tx == CanonicalTransaction(
        date="2024-02-01",
        revenue=300000,
        expense=120000,
        profit=180000,
        counterparty="본점",
        category_raw="",
        memo="2월 정산",
        payment_method="카드",
    )


def test_secondary_columns_are_used_when_primary_are_empty():
    rows = [{"날짜": "2024-02-02", "입금액": "10,000", "출금": "4,000"}]
    (tx,) = normalize_transactions(rows)
    assert (tx.revenue, tx.expense, tx.profit) == (10000, 4000, 6000)


def test_untyped_amount_uses_row_keywords():
    expense_row = {"Date": "2024-03-01", "Amount": 900, "Memo": "monthly expense"}
    revenue_row = {"Date": "2024-03-01", "Amount": 700, "Memo": "card sales"}
    assert normalize_row(expense_row).expense == 900
    assert normalize_row(revenue_row).revenue == 700


def test_ambiguous_amount_defaults_to_revenue(caplog: pytest.LogCaptureFixture):
    row = {"Date": "2024-03-01", "Amount": 800}
    with caplog.at_level(logging.DEBUG, logger="cost_analysis.normalize"):
        tx = normalize_row(row)
    assert (tx.revenue, tx.expense) == (800, 0)
    assert any("ambiguous amount" in r.getMessage() for r in caplog.records)


def test_ambiguous_default_is_configurable():
    rules = RuleSet(ambiguous_default="expense")
    tx = normalize_row({"Date": "2024-03-01", "Amount": 800}, rules=rules)
    assert (tx.revenue, tx.expense) == (0, 800)


def test_negative_single_amount_is_an_expense():
    tx = normalize_row({"Date": "2024-03-01", "Amount": "-20,000"})
    assert (tx.revenue, tx.expense, tx.profit) == (0, 20000, -20000)


def test_negative_revenue_column_moves_to_expense():
    tx = normalize_row({"Date": "2024-03-01", "Revenue": -100})
    assert (tx.revenue, tx.expense) == (0, 100)


def test_negative_amount_with_expense_type_becomes_revenue():
    # A refund booked as a negative expense.
    tx = normalize_row({"Date": "2024-03-01", "Type": "expense", "Amount": -300})
    assert (tx.revenue, tx.expense) == (300, 0)


def test_fixed_and_variable_cost_columns_fill_missing_expense():
    row = {"날짜": "2024-01-31", "매출액": 100000, "고정비": 20000, "변동비": "30,000"}
    tx = normalize_row(row)
    assert (tx.revenue, tx.expense, tx.profit) == (100000, 50000, 50000)


def test_explicit_profit_column_wins():
    row = {"Date": "2024-01-31", "Revenue": 1000, "Expense": 400, "Net Profit": 550}
    assert normalize_row(row).profit == 550


def test_profit_only_row_is_kept():
    row = {"Date": "2024-01-31", "Profit": -75}
    tx = normalize_row(row)
    assert (tx.revenue, tx.expense, tx.profit) == (0, 0, -75)


def test_rows_without_money_are_dropped():
    rows = [
        {"Date": "2024-01-01", "Memo": "opening note"},
        {"Date": "2024-01-02", "Amount": "0"},
        {"Date": "2024-01-03", "Revenue": "n/a"},
    ]
    assert normalize_transactions(rows) == []


def test_defaults_for_missing_fields():
    tx = normalize_row({"Revenue": 5000})
    assert tx.date == "Unknown Date"
    assert tx.counterparty == "General"
    assert tx.category_raw == ""
    assert tx.memo == ""
    assert tx.payment_method == "-"


def test_serial_and_unparseable_dates():
    out = normalize_transactions(
        [
            {"Date": 45292, "Revenue": 1},
            {"Date": 0, "Revenue": 2},
            {"Date": "last week", "Revenue": 3},
        ]
    )
    assert sorted(t.date for t in out) == ["2024-01-01", "Unknown Date", "last week"]


def test_output_is_sorted_by_date():
    rows = [
        {"Date": "2024-01-03", "Revenue": 3},
        {"Date": "2024-01-01", "Revenue": 1},
        {"Date": "2024-01-02", "Revenue": 2},
    ]
    assert [t.revenue for t in normalize_transactions(rows)] == [1, 2, 3]


def test_amounts_are_never_negative():
    rows = [
        {"Date": "2024-01-01", "Revenue": -5, "Expense": -7},
        {"Date": "2024-01-02", "Amount": -9},
        {"Date": "2024-01-03", "Type": "income", "Amount": -11},
        {"Date": "2024-01-04", "구분": "지출", "금액": "-13"},
    ]
    for tx in normalize_transactions(rows):
        assert tx.revenue >= 0
        assert tx.expense >= 0


def test_empty_input():
    assert normalize_transactions([]) == []
    assert normalize_transaction_batches([]) == []


def test_batches_equal_single_pass():
    batch_a = [
        {"Date": "2024-01-05", "Type": "expense", "Amount": 100, "Category": "Rent"},
        {"Date": "2024-01-01", "Revenue": 1000},
    ]
    batch_b = [
        {"Date": "2024-01-03", "Revenue": 300},
        {"Date": "2024-01-04", "Memo": "nothing"},
    ]
    batch_c: list[dict] = []
    merged = normalize_transaction_batches([batch_a, batch_b, batch_c], max_workers=2)
    assert merged == normalize_transactions(batch_a + batch_b)
    assert [t.date for t in merged] == ["2024-01-01", "2024-01-03", "2024-01-05"]


def test_batches_honor_worker_env(monkeypatch: pytest.MonkeyPatch):
    monkeypatch.setenv("COST_ANALYSIS_MAX_WORKERS", "1")
    batches = [[{"Date": f"2024-01-0{i}", "Revenue": i}] for i in range(1, 6)]
    out = normalize_transaction_batches(batches)
    assert [t.revenue for t in out] == [1, 2, 3, 4, 5]
