"""Column alias tables for the canonical fields.

Spreadsheets arrive with Korean and English headers, with or without spaces
and units (``"지출 금액(원)"``, ``"Total Expense"``). Each canonical field owns
an ordered alias list; :func:`cost_analysis.schema.lookup_alias` walks it with
the exact → normalized → substring contract. Order matters: earlier aliases
win, and short aliases match inside longer headers.

The tables are data. ``DEFAULT_ALIASES`` is what the pipeline uses unless a
caller injects another :class:`AliasTable` (for example one loaded from JSON
through :func:`cost_analysis.config.load_alias_table`).
"""

from __future__ import annotations

from pydantic import BaseModel, ConfigDict

Aliases = tuple[str, ...]


class AliasTable(BaseModel):
    model_config = ConfigDict(frozen=True, extra="forbid", str_strip_whitespace=True)

    # Header detection
    transaction_header_keywords: Aliases = (
        "매출", "Revenue", "날짜", "Date", "일자", "금액", "합계",
    )
    purchase_header_keywords: Aliases = (
        "식재료명", "구매처", "단가", "Item", "Vendor", "Price", "품목", "명칭",
    )

    # Transactions
    date: Aliases = ("날짜", "일자", "Date", "date", "Day", "day", "거래일", "승인일")
    amount: Aliases = (
        "금액", "합계", "Amount", "Total", "Price",
        "거래금액", "입금금액", "출금금액", "입금액", "출금액",
    )
    type: Aliases = (
        "매출/지출", "구분", "Type", "Category", "Class", "Kind", "InOut",
        "매출구분", "지출구분", "매출/지출구분", "거래처", "항목",
    )
    revenue: Aliases = ("매출액", "Revenue", "Sales", "입금합계", "수입금액", "수입액")
    expense: Aliases = (
        "지출총액", "비용", "Expense", "Total Expense",
        "출금합계", "지출금액", "지출액", "지출합계",
    )
    revenue_secondary: Aliases = ("매출", "입금액")
    expense_secondary: Aliases = ("지출", "출금액", "출금")
    fixed_cost: Aliases = ("고정비", "임대료/인건비", "FixedCost", "Fixed Cost")
    variable_cost: Aliases = ("변동비", "식자재비", "VariableCost", "Variable Cost")
    profit: Aliases = ("순이익", "영업이익", "Profit", "Net Profit")
    counterparty: Aliases = (
        "거래처", "공급사", "입점사", "Vendor", "Client", "Customer",
        "매출구분", "구분", "Type",
    )
    category: Aliases = (
        "지출구분", "비용구분", "항목", "계정과목", "품명",
        "Item", "Category", "Classification", "Account",
    )
    memo: Aliases = ("내역", "적요", "세부내용", "Details", "description", "Memo")
    payment_method: Aliases = (
        "결제수단", "결제방법", "수단", "PaymentMethod", "Payment", "Method",
    )

    # Purchases
    purchase_date: Aliases = ("구매일", "날짜", "일자", "Date", "date", "거래일")
    item_name: Aliases = (
        "식재료명", "품목명", "품목", "품명", "자재명", "상품명",
        "Name", "Item", "Ingredient", "내역", "적요",
    )
    vendor: Aliases = (
        "구매처", "거래처", "매입처", "공급사", "Vendor", "Supplier", "Source",
    )
    purchase_category: Aliases = ("대분류", "분류", "카테고리", "구분", "Category", "Type")
    sub_category: Aliases = (
        "소분류", "Sub Category", "SubCategory", "Detail",
        "세부분류", "상세분류", "품목분류", "중분류",
    )
    spec: Aliases = ("규격", "단위규격", "Spec", "Size")
    unit: Aliases = ("단위", "Unit")
    quantity: Aliases = ("수량", "개수", "Qty", "Quantity")
    unit_price: Aliases = ("단가", "가격", "Unit Price", "Price", "cost")
    line_total: Aliases = (
        "합계금액", "총액", "합계", "금액", "Total", "Total Price", "공급가액",
    )


DEFAULT_ALIASES = AliasTable()


__all__ = ["Aliases", "AliasTable", "DEFAULT_ALIASES"]
