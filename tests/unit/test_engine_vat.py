from decimal import Decimal as D

import pytest

from taxcalc.core.engine import calculate_proportional_tax, calculate_vat_return
from taxcalc.core.errors import InvalidInputError
from taxcalc.rates import NG_2026, UK_2024


def test_standard_rate_vat():
    result = calculate_proportional_tax(100, "standard", UK_2024)
    assert result.total_tax == D("20.00")
    assert result.gross_amount == D("120.00")
    assert result.net_amount == result.taxable_amount == D("100")
    assert result.effective_rate == D("0.200000")
    assert result.details["category"] == "standard"


def test_default_category_used_when_selector_missing():
    assert calculate_proportional_tax(1000, None, NG_2026).total_tax == D("100.00")


@pytest.mark.parametrize(("category", "expected"), [("reduced", D("5.00")), ("zero", D("0.00")), ("REDUCED", D("5.00"))])
def test_other_categories(category, expected):
    assert calculate_proportional_tax(100, category, UK_2024).total_tax == expected


def test_vat_rounds_half_up():
    assert calculate_proportional_tax("0.125", "standard", UK_2024).total_tax == D("0.03")


def test_zero_amount():
    result = calculate_proportional_tax(0, "standard", UK_2024)
    assert result.total_tax == D("0.00")
    assert result.effective_rate == D("0")


def test_unknown_category_rejected():
    with pytest.raises(InvalidInputError) as excinfo:
        calculate_proportional_tax(100, "luxury", UK_2024)
    assert excinfo.value.field == "rate_selector"


def test_negative_amount_rejected():
    with pytest.raises(InvalidInputError):
        calculate_proportional_tax(-5, "standard", UK_2024)


def test_vat_return_payable():
    result = calculate_vat_return(UK_2024, 100000, 40000)
    assert result.output_vat == D("20000.00")
    assert result.input_vat == D("8000.00")
    assert result.net_vat_payable == D("12000.00")
    assert result.vat_credit == D("0")
    assert result.total_sales == D("100000")
    assert result.registration_required


def test_vat_return_credit_and_exempt_sales():
    result = calculate_vat_return(UK_2024, 10000, 30000, zero_rated_sales=5000, exempt_sales=2000)
    assert result.net_vat_payable == D("0")
    assert result.vat_credit == D("4000.00")
    assert result.total_sales == D("17000")
    assert not result.registration_required
    payload = result.to_dict()
    assert payload["registration_threshold"] == D("90000")


def test_vat_return_registration_at_threshold():
    result = calculate_vat_return(NG_2026, 20_000_000, 0, zero_rated_sales=5_000_000)
    assert result.registration_required
    assert result.output_vat == D("2000000.00")


def test_out_of_range_amount_rejected():
    with pytest.raises(InvalidInputError) as excinfo:
        calculate_proportional_tax("1e28", "standard", UK_2024)
    assert excinfo.value.field == "amount"
