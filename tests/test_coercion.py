from datetime import date, datetime
from decimal import Decimal

import pytest

from cost_analysis import parse_date, parse_number
from cost_analysis.coercion import serial_to_date


@pytest.mark.parametrize(
    ("raw", "expected"),
    [
        (42, 42),
        (-3.5, -3.5),
        (Decimal("12.5"), 12.5),
        ("1,234", 1234),
        ("₩1,234.5", 1234.5),
        ("-20,000원", -20000),
        ("  7 ", 7),
        ("1.2.3", 1.2),
        ("12-34", 12),
        (".5", 0.5),
        ("", 0),
        ("-", 0),
        ("abc", 0),
        (None, 0),
        (True, 0),
        (float("nan"), 0),
        (float("inf"), 0),
        ([1, 2], 0),
    ],
)
def test_parse_number(raw, expected):
    assert parse_number(raw) == expected


def test_parse_number_never_raises_on_odd_objects():
    class Weird:
        def __str__(self) -> str:
            raise RuntimeError("boom")

    assert parse_number(Weird()) == 0


@pytest.mark.parametrize(
    ("raw", "expected"),
    [
        (45292, "2024-01-01"),
        (45292.75, "2024-01-01"),
        (1, "1899-12-31"),
        (25569, "1970-01-01"),
        ("2024-01-05", "2024-01-05"),
        ("2024-01-05 13:45:00", "2024-01-05"),
        ("2024-1-5", "2024-01-05"),
        ("2024-1-5 9:30", "2024-01-05"),
        ("2024/1/5", "2024-01-05"),
        ("2024.01.05", "2024-01-05"),
        ("2024. 1. 5.", "2024-01-05"),
        ("2024년 1월 5일", "2024-01-05"),
        ("01/05/2024", "2024-01-05"),
        ("5 Jan 2024", "2024-01-05"),
        ("Jan 5, 2024", "2024-01-05"),
        (date(2024, 2, 29), "2024-02-29"),
        (datetime(2024, 2, 29, 23, 59), "2024-02-29"),
    ],
)
def test_parse_date(raw, expected):
    assert parse_date(raw) == expected


def test_unparseable_date_text_is_returned_unchanged():
    assert parse_date("not a date") == "not a date"
    assert parse_date("  월말 정산 ") == "월말 정산"


@pytest.mark.parametrize("raw", [None, "", "   ", 0, 0.0, float("nan")])
def test_missing_dates_return_none(raw):
    assert parse_date(raw) is None


def test_serial_out_of_range_is_none():
    assert serial_to_date(10**9) is None
