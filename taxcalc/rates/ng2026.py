from __future__ import annotations

from decimal import Decimal

from taxcalc.core.tables import (
    BandedSchedule,
    CompanySchedule,
    ConsolidatedRelief,
    ContributionRelief,
    Levy,
    MinimumTaxBase,
    MinimumTaxRule,
    ProportionalSchedule,
    RateTable,
    RateTier,
    TaxBand,
    WithholdingRate,
    WithholdingSchedule,
)

D = Decimal

# ------------------------------ 2026 ------------------------------------
# PAYE bands apply to income after consolidated relief and pension.
PAYE_BANDS_2026 = (
    TaxBand(D("0"),       D("300000"),  D("0.07"), "First ₦300,000"),
    TaxBand(D("300000"),  D("600000"),  D("0.11"), "Next ₦300,000"),
    TaxBand(D("600000"),  D("1100000"), D("0.15"), "Next ₦500,000"),
    TaxBand(D("1100000"), D("1600000"), D("0.19"), "Next ₦500,000"),
    TaxBand(D("1600000"), D("3200000"), D("0.21"), "Next ₦1,600,000"),
    TaxBand(D("3200000"), None,         D("0.24"), "Above ₦3,200,000"),
)

CRA_MINIMUM_PERCENTAGE_2026 = D("0.01")
CRA_BASE_AMOUNT_2026 = D("200000")
CRA_ADDITIONAL_PERCENTAGE_2026 = D("0.20")
PENSION_EMPLOYEE_RATE_2026 = D("0.08")
PAYE_MINIMUM_TAX_RATE_2026 = D("0.005")
PAYE_MINIMUM_TAX_THRESHOLD_2026 = D("300000")

CIT_TIERS_2026 = (
    RateTier(D("25000000"),  D("0.20"), "Small Company Rate (20%)"),
    RateTier(D("100000000"), D("0.20"), "Medium Company Rate (20%)"),
    RateTier(None,           D("0.30"), "Standard Rate (30%)"),
)
CIT_MINIMUM_TAX_2026 = (
    MinimumTaxBase("turnover", D("0.005")),
    MinimumTaxBase("gross_profit", D("0.025")),
    MinimumTaxBase("net_assets", D("0.005")),
)
EDUCATION_TAX_RATE_2026 = D("0.02")

VAT_RATES_2026 = {
    "standard": D("0.10"),
    "zero": D("0.00"),
    "exempt": D("0.00"),
}
VAT_REGISTRATION_THRESHOLD_2026 = D("25000000")

WHT_RATES_2026 = {
    "dividends": WithholdingRate(D("0.10"), "Dividends paid to individuals and corporates"),
    "interest": WithholdingRate(D("0.10"), "Interest on deposits, loans, etc."),
    "rent": WithholdingRate(D("0.10"), "Rent on land and buildings"),
    "professionalFees": WithholdingRate(D("0.05"), "Fees to consultants, contractors, professionals"),
    "technicalFees": WithholdingRate(D("0.10"), "Technical and management fees"),
    "constructionServices": WithholdingRate(D("0.05"), "Construction contracts and related services"),
    "commission": WithholdingRate(D("0.05"), "Commission to agents and intermediaries"),
    "royalties": WithholdingRate(D("0.10"), "Royalties on intellectual property"),
    "directorsFees": WithholdingRate(D("0.10"), "Fees to company directors"),
}
WHT_EXEMPTION_THRESHOLD_2026 = D("5000")
WHT_FINAL_TAX_TYPES_2026 = frozenset({"dividends", "interest", "rent"})

NG_2026 = RateTable(
    jurisdiction="NG",
    tax_year="2026",
    currency="NGN",
    description="Nigeria 2026",
    schedules={
        "paye": BandedSchedule(
            bands=PAYE_BANDS_2026,
            reliefs=(
                ConsolidatedRelief(
                    minimum_percentage=CRA_MINIMUM_PERCENTAGE_2026,
                    base_amount=CRA_BASE_AMOUNT_2026,
                    additional_percentage=CRA_ADDITIONAL_PERCENTAGE_2026,
                ),
                ContributionRelief(rate=PENSION_EMPLOYEE_RATE_2026),
            ),
            minimum_tax=MinimumTaxRule(
                candidates=(MinimumTaxBase("gross", PAYE_MINIMUM_TAX_RATE_2026),),
                threshold=PAYE_MINIMUM_TAX_THRESHOLD_2026,
            ),
        ),
        "cit": CompanySchedule(
            tiers=CIT_TIERS_2026,
            tier_base="turnover",
            minimum_tax=MinimumTaxRule(candidates=CIT_MINIMUM_TAX_2026),
            levies=(Levy("education_tax", EDUCATION_TAX_RATE_2026, base="assessable_profit"),),
        ),
        "vat": ProportionalSchedule(
            rates=VAT_RATES_2026,
            default="standard",
            registration_threshold=VAT_REGISTRATION_THRESHOLD_2026,
        ),
        "wht": WithholdingSchedule(
            rates=WHT_RATES_2026,
            exemption_threshold=WHT_EXEMPTION_THRESHOLD_2026,
            final_tax_types=WHT_FINAL_TAX_TYPES_2026,
        ),
    },
)

__all__ = ["NG_2026"]
