from decimal import Decimal as D

from taxcalc.core.reliefs import (
    consolidated_relief,
    contribution_relief,
    personal_allowance,
    resolve_reliefs,
    taxable_after_relief,
)
from taxcalc.core.tables import ConsolidatedRelief, ContributionRelief, PersonalAllowance

CRA = ConsolidatedRelief("0.01", "200000", "0.20")
PENSION = ContributionRelief("0.08")


def test_consolidated_relief_takes_higher_formula():
    assert consolidated_relief(CRA, D("5000000")) == D("1200000")
    assert consolidated_relief(CRA, D("0")) == D("200000")
    huge = ConsolidatedRelief("0.5", "0", "0.1")
    assert consolidated_relief(huge, D("1000")) == D("500")


def test_personal_allowance_tapers_to_zero():
    allowance = PersonalAllowance("12570", taper_start="100000")
    assert personal_allowance(allowance, D("90000")) == D("12570")
    assert personal_allowance(allowance, D("110000")) == D("7570")
    assert personal_allowance(allowance, D("200000")) == D("0")


def test_contribution_relief_defaults_to_rate_of_gross():
    assert contribution_relief(PENSION, D("5000000")) == D("400000")


def test_override_replaces_only_its_own_component():
    components, total = resolve_reliefs(D("5000000"), (CRA, PENSION), {"pension_contribution": D("0")})
    assert components == {"consolidated_relief": D("1200000"), "pension_contribution": D("0")}
    assert total == D("1200000")

    components, total = resolve_reliefs(D("5000000"), (CRA, PENSION))
    assert total == D("1600000")


def test_taxable_never_negative():
    assert taxable_after_relief(D("100"), D("250")) == D("0")
    assert taxable_after_relief(D("300"), D("250")) == D("50")
