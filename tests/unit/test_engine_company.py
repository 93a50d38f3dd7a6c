from decimal import Decimal as D

import pytest

from taxcalc.core.engine import calculate_flat_or_tiered_tax
from taxcalc.core.errors import InvalidInputError
from taxcalc.rates import NG_2026, UK_2024


def test_small_profits_rate():
    result = calculate_flat_or_tiered_tax("corporation_tax", 40000, UK_2024)
    assert result.total_tax == D("7600.00")
    assert result.description == "Small Profits Rate"
    assert result.rate == D("0.190000")
    assert not result.marginal_relief_applied
    assert result.breakdown[0].amount == D("40000")


def test_main_rate():
    result = calculate_flat_or_tiered_tax("corporation_tax", 300000, UK_2024)
    assert result.total_tax == D("75000.00")
    assert result.description == "Main Rate"
    assert result.net_amount == D("225000.00")


def test_marginal_relief_zone():
    result = calculate_flat_or_tiered_tax("corporation_tax", 150000, UK_2024)
    assert result.marginal_relief_applied
    assert result.description == "Marginal Relief Applied"
    assert result.total_tax == D("33900.00")
    assert result.details["marginal_relief"] == D("3600.00")
    assert D("28500") < result.total_tax < D("37500")
    assert result.rate == D("0.226000")


@pytest.mark.parametrize(("profit", "expected"), [(50000, D("9500.00")), (250000, D("62500.00"))])
def test_marginal_relief_thresholds(profit, expected):
    assert calculate_flat_or_tiered_tax("corporation_tax", profit, UK_2024).total_tax == expected


def test_capital_allowances_reduce_chargeable_profit():
    result = calculate_flat_or_tiered_tax(
        "corporation_tax", 100000, UK_2024, {"capital_allowances": 60000}
    )
    assert result.relief == D("60000")
    assert result.taxable_amount == D("40000")
    assert result.total_tax == D("7600.00")
    assert result.effective_rate == D("0.076000")


def test_unknown_auxiliary_base_rejected():
    with pytest.raises(InvalidInputError) as excinfo:
        calculate_flat_or_tiered_tax("corporation_tax", 1000, UK_2024, {"payroll": 10})
    assert excinfo.value.field == "auxiliary_bases"


def test_negative_auxiliary_base_rejected():
    with pytest.raises(InvalidInputError) as excinfo:
        calculate_flat_or_tiered_tax("cit", 1000, NG_2026, {"turnover": -1})
    assert excinfo.value.field == "turnover"


def test_tiered_rate_by_turnover():
    result = calculate_flat_or_tiered_tax("cit", 10_000_000, NG_2026, {"turnover": 30_000_000})
    assert result.description == "Medium Company Rate (20%)"
    assert result.details["income_tax"] == D("2000000.00")
    assert result.details["education_tax"] == D("200000.00")
    assert result.details["minimum_tax_on_turnover"] == D("150000.00")
    assert result.details["minimum_tax"] == D("150000.00")
    assert result.total_tax == D("2200000.00")
    assert not result.minimum_tax_applied
    assert result.effective_rate == D("0.220000")


def test_standard_rate_for_large_turnover():
    result = calculate_flat_or_tiered_tax("cit", 10_000_000, NG_2026, {"turnover": 200_000_000})
    assert result.rate == D("0.300000")
    assert result.total_tax == D("3200000.00")


def test_tier_boundary_moves_to_next_tier():
    result = calculate_flat_or_tiered_tax("cit", 1_000_000, NG_2026, {"turnover": 25_000_000})
    assert result.description == "Medium Company Rate (20%)"
    below = calculate_flat_or_tiered_tax("cit", 1_000_000, NG_2026, {"turnover": "24999999.99"})
    assert below.description == "Small Company Rate (20%)"


def test_minimum_tax_floor_applies():
    result = calculate_flat_or_tiered_tax(
        "cit", 100000, NG_2026, {"turnover": 50_000_000, "gross_profit": 5_000_000}
    )
    assert result.minimum_tax_applied
    assert result.description == "Minimum Tax Applied"
    assert result.details["income_tax"] == D("250000.00")
    assert result.total_tax == D("252000.00")


def test_reliefs_and_education_tax_on_assessable_profit():
    result = calculate_flat_or_tiered_tax(
        "cit",
        1_000_000,
        NG_2026,
        {"turnover": 10_000_000, "capital_allowances": 200000, "losses_carried_forward": 100000},
    )
    assert result.relief == D("300000")
    assert result.taxable_amount == D("700000")
    assert result.details["education_tax"] == D("20000.00")
    assert result.total_tax == D("160000.00")


def test_zero_profit_still_pays_minimum_tax():
    result = calculate_flat_or_tiered_tax("cit", 0, NG_2026, {"turnover": 1_000_000})
    assert result.total_tax == D("5000.00")
    assert result.effective_rate == D("0")
    assert result.breakdown == ()


def test_turnover_required_for_tiered_schedule():
    with pytest.raises(InvalidInputError) as excinfo:
        calculate_flat_or_tiered_tax("cit", 1000, NG_2026)
    assert excinfo.value.field == "turnover"


def test_banded_tax_type_rejected():
    with pytest.raises(InvalidInputError):
        calculate_flat_or_tiered_tax("income_tax", 1000, UK_2024)


def test_tiny_profit_under_large_floor_reports_rate():
    result = calculate_flat_or_tiered_tax("cit", "1E-20", NG_2026, {"turnover": "1E18"})
    assert result.minimum_tax_applied
    assert result.total_tax == D("5000000000000000.00")
    assert result.effective_rate > D("1E30")


@pytest.mark.parametrize(
    ("profit", "bases", "field"),
    [
        ("1e27", None, "base"),
        (1000, {"turnover": "1e28"}, "turnover"),
    ],
)
def test_out_of_range_amounts_rejected(profit, bases, field):
    table, tax_type = (UK_2024, "corporation_tax") if bases is None else (NG_2026, "cit")
    with pytest.raises(InvalidInputError) as excinfo:
        calculate_flat_or_tiered_tax(tax_type, profit, table, bases)
    assert excinfo.value.field == field
