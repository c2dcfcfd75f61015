"""Unit tests for amount parsing"""

from decimal import Decimal

import pytest

from demo_bank.domain.exceptions import InvalidAmount, ValidationError
from demo_bank.domain.money import from_cents, to_cents


@pytest.mark.parametrize(
    "amount, expected",
    [
        (Decimal("10.50"), 1050),
        (100, 10000),
        (0.1, 10),
        (19.99, 1999),
        ("25", 2500),
        (" 3.5 ", 350),
        ("1e2", 10000),
    ],
)
def test_to_cents_accepts_positive_amounts(amount, expected):
    assert to_cents(amount) == expected


@pytest.mark.parametrize(
    "amount",
    [0, -5, "-0.01", "abc", "", None, True, float("nan"), float("inf"), "Infinity", "1.005", Decimal("0.001")],
)
def test_to_cents_rejects_invalid_amounts(amount):
    with pytest.raises(InvalidAmount):
        to_cents(amount)


def test_invalid_amount_is_a_validation_error():
    """Bad amounts are reported as client-recoverable 400s"""
    with pytest.raises(ValidationError) as exc_info:
        to_cents(-1)
    assert exc_info.value.http_status == 400
    assert exc_info.value.to_dict() == {"error": "Positive amount required", "kind": "validation"}


def test_from_cents_has_two_decimal_places():
    assert from_cents(1050) == Decimal("10.50")
    assert str(from_cents(100000)) == "1000.00"
    assert str(from_cents(1)) == "0.01"


def test_to_cents_rejects_amounts_beyond_column_range():
    with pytest.raises(InvalidAmount):
        to_cents("1e30")


@pytest.mark.parametrize(
    "amount",
    ["1e999999", "1e-9999999", "1e99999999999999999999", Decimal("1e-30"), "0.0100000000000000000000000000001"],
)
def test_to_cents_rejects_extreme_exponents_and_precision(amount):
    """Out-of-range magnitudes and digits finer than a cent never become a cents value"""
    with pytest.raises(InvalidAmount):
        to_cents(amount)


def test_to_cents_accepts_largest_amount():
    assert to_cents("9999999999999.99") == 999_999_999_999_999
