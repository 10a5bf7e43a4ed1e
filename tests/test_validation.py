"""Tests for input coercion and validation helpers."""
from datetime import date, datetime

import pytest

from exceptions import InvalidInputError
from utils.validation import (
    coerce_amount,
    coerce_int,
    optional_string,
    parse_date,
    validate_business_code,
    validate_positive_amount,
)


@pytest.mark.parametrize("raw,expected", [
    (None, 0.0),
    ("", 0.0),
    ("  ", 0.0),
    ("12.5", 12.5),
    (" 7 ", 7.0),
    (3, 3.0),
    (-4.25, -4.25),
])
def test_coerce_amount(raw, expected):
    assert coerce_amount(raw) == expected


@pytest.mark.parametrize("raw", ["abc", "1,000", True, [1], "nan", "inf"])
def test_coerce_amount_rejects(raw):
    with pytest.raises(InvalidInputError):
        coerce_amount(raw, "Price")


def test_coerce_amount_names_field():
    with pytest.raises(InvalidInputError, match="Recovery"):
        coerce_amount("x", "Recovery")


def test_coerce_int():
    assert coerce_int(None) == 0
    assert coerce_int("42") == 42
    assert coerce_int(3.0) == 3

    with pytest.raises(InvalidInputError):
        coerce_int(2.5)
    with pytest.raises(InvalidInputError):
        coerce_int("two")


def test_coerce_int_accepts_integral_strings():
    assert coerce_int("3.0") == 3
    assert coerce_int(" 12.00 ") == 12

    for bad in ("2.5", "nan", "inf"):
        with pytest.raises(InvalidInputError):
            coerce_int(bad)


def test_validate_positive_amount():
    assert validate_positive_amount("10") == 10.0
    assert validate_positive_amount(0, allow_zero=True) == 0.0

    for bad in (None, 0, -1, "-3"):
        with pytest.raises(InvalidInputError):
            validate_positive_amount(bad)


def test_validate_business_code():
    assert validate_business_code("  C-1 ") == "C-1"

    for bad in (None, "", "   ", "x" * 51):
        with pytest.raises(InvalidInputError):
            validate_business_code(bad)


def test_optional_string():
    assert optional_string(None) == ""
    assert optional_string(" Houston ") == "Houston"
    assert optional_string("abcdef", max_length=3) == "abc"


def test_parse_date():
    assert parse_date("2025-01-15") == date(2025, 1, 15)
    assert parse_date("2025-01-15T10:30:00") == date(2025, 1, 15)
    assert parse_date(datetime(2025, 2, 1, 8)) == date(2025, 2, 1)
    assert parse_date(None, default=date(2024, 1, 1)) == date(2024, 1, 1)

    with pytest.raises(InvalidInputError):
        parse_date(None)
    with pytest.raises(InvalidInputError):
        parse_date("15/01/2025")
