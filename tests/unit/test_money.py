from decimal import Decimal as D

import pytest

from taxcalc.core.errors import InvalidInputError
from taxcalc.core.money import MAX_MAGNITUDE, non_negative, ratio, round_cents, round_rate, to_decimal


@pytest.mark.parametrize(
    ("raw", "expected"),
    [
        (100, D("100")),
        (0.1, D("0.1")),
        ("1,250.50", D("1250.50")),
        (" 42 ", D("42")),
        (D("3.14"), D("3.14")),
    ],
)
def test_to_decimal_accepts_numbers_and_numeric_strings(raw, expected):
    assert to_decimal(raw) == expected


@pytest.mark.parametrize("raw", [None, True, "abc", "", float("nan"), float("inf"), "Infinity", [1]])
def test_to_decimal_rejects_non_numbers(raw):
    with pytest.raises(InvalidInputError) as excinfo:
        to_decimal(raw, "gross_amount")
    assert excinfo.value.field == "gross_amount"


def test_non_negative_rejects_negative_amounts():
    with pytest.raises(InvalidInputError, match="cannot be negative"):
        non_negative(-0.01, "amount")
    assert non_negative(0) == D("0")


def test_rounding_helpers():
    assert round_cents(D("2.345")) == D("2.35")
    assert round_cents(D("2.344")) == D("2.34")
    assert round_rate(D("1") / D("3")) == D("0.333333")
    assert ratio(D("5"), D("0")) == D("0")
    assert ratio(D("1"), D("8")) == D("0.125000")


@pytest.mark.parametrize("raw", ["1,2,3,4,5", "12,34", "1,,000", ",100", "1,000,00", "1.000,50"])
def test_malformed_thousands_grouping_rejected(raw):
    with pytest.raises(InvalidInputError):
        to_decimal(raw)


@pytest.mark.parametrize("raw", ["1e19", "-1e19", 10**27, D("1E28")])
def test_magnitudes_beyond_bound_rejected(raw):
    with pytest.raises(InvalidInputError, match="must not exceed") as excinfo:
        to_decimal(raw, "base")
    assert excinfo.value.field == "base"
    assert to_decimal(MAX_MAGNITUDE) == MAX_MAGNITUDE


def test_ratio_with_tiny_denominator_does_not_overflow():
    result = ratio(D("5000000000000000"), D("1E-20"))
    assert result == D("5E+35")
    assert result.as_tuple().exponent == -6
