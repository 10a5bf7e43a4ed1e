"""Tests for report range and month bucketing helpers."""
from datetime import date, datetime

import pytest

from exceptions import InvalidInputError
from utils.date_helpers import (
    month_key,
    month_label,
    range_start,
    start_of_month,
    subtract_months,
    utcnow_naive,
)

NOW = datetime(2025, 3, 31, 12, 0)


def test_subtract_months_clamps_day():
    assert subtract_months(NOW, 1) == datetime(2025, 2, 28, 12, 0)
    assert subtract_months(datetime(2024, 3, 31), 1) == datetime(2024, 2, 29)


def test_subtract_months_crosses_year():
    assert subtract_months(datetime(2025, 1, 15), 3) == datetime(2024, 10, 15)
    assert subtract_months(datetime(2025, 1, 15), 12) == datetime(2024, 1, 15)


@pytest.mark.parametrize("range_name,expected", [
    ("week", datetime(2025, 3, 24, 12, 0)),
    ("month", datetime(2025, 2, 28, 12, 0)),
    ("quarter", datetime(2024, 12, 31, 12, 0)),
    ("year", datetime(2024, 3, 31, 12, 0)),
])
def test_range_start(range_name, expected):
    assert range_start(range_name, now=NOW) == expected


def test_range_start_rejects_unknown_range():
    with pytest.raises(InvalidInputError):
        range_start("fortnight", now=NOW)


def test_start_of_month():
    assert start_of_month(NOW) == datetime(2025, 3, 1)


def test_month_key_and_label():
    assert month_key(date(2025, 1, 9)) == "2025-01"
    assert month_key(datetime(2024, 12, 31, 23, 59)) == "2024-12"
    assert month_label("2025-01") == "Jan 25"


def test_utcnow_naive_has_no_tzinfo():
    assert utcnow_naive().tzinfo is None
