from __future__ import annotations

import datetime as dt

from src.utils.money import format_usd, sum_amounts, to_decimal
from src.utils.time import format_date, parse_date


def test_format_usd():
    assert format_usd(3.5) == "$3.50"
    assert format_usd(1234.567) == "$1,234.57"
    assert format_usd(-2) == "-$2.00"
    assert format_usd(None) == "-"
    assert format_usd(12.4, digits=0) == "$12"


def test_to_decimal_rejects_non_numbers():
    assert to_decimal("1,200.50") == to_decimal(1200.5)
    assert to_decimal("$3") == to_decimal(3)
    assert to_decimal("") is None
    assert to_decimal("inf") is None
    assert to_decimal(True) is None


def test_sum_amounts():
    assert sum_amounts([]) == 0
    assert sum_amounts([0.1, 0.2]) == 0.3
    assert sum_amounts([3.5, None, "1.25"]) == 4.75


def test_parse_date_accepts_dates_and_timestamps():
    assert parse_date("2024-01-01") == dt.date(2024, 1, 1)
    assert parse_date("2024-01-01T10:00:00Z") == dt.date(2024, 1, 1)
    assert parse_date(dt.datetime(2024, 5, 6, 7, 8)) == dt.date(2024, 5, 6)
    assert parse_date("yesterday") is None
    assert parse_date("") is None
    assert format_date(dt.date(2024, 1, 2)) == "2024-01-02"
    assert format_date(None) == "-"
