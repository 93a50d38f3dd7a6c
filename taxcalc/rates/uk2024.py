from __future__ import annotations

from decimal import Decimal

from taxcalc.core.tables import (
    BandedSchedule,
    CompanySchedule,
    MarginalRelief,
    ProportionalSchedule,
    RateTable,
    TaxBand,
)

D = Decimal

# ------------------------------ 2024/25 ---------------------------------
PERSONAL_ALLOWANCE_2024 = D("12570")
BASIC_RATE_LIMIT_2024 = D("50270")
HIGHER_RATE_LIMIT_2024 = D("125140")

INCOME_TAX_BANDS_2024 = (
    TaxBand(D("0"),                      PERSONAL_ALLOWANCE_2024, D("0.00"), "Personal Allowance"),
    TaxBand(PERSONAL_ALLOWANCE_2024,     BASIC_RATE_LIMIT_2024,   D("0.20"), "Basic Rate"),
    TaxBand(BASIC_RATE_LIMIT_2024,       HIGHER_RATE_LIMIT_2024,  D("0.40"), "Higher Rate"),
    TaxBand(HIGHER_RATE_LIMIT_2024,      None,                    D("0.45"), "Additional Rate"),
)

# Employee class 1 contributions
NI_PRIMARY_THRESHOLD_2024 = D("12570")
NI_UPPER_EARNINGS_LIMIT_2024 = D("50270")

NATIONAL_INSURANCE_BANDS_2024 = (
    TaxBand(D("0"),                       NI_PRIMARY_THRESHOLD_2024,    D("0.00"), "Below Threshold"),
    TaxBand(NI_PRIMARY_THRESHOLD_2024,    NI_UPPER_EARNINGS_LIMIT_2024, D("0.12"), "Standard Rate"),
    TaxBand(NI_UPPER_EARNINGS_LIMIT_2024, None,                         D("0.02"), "Additional Rate"),
)

CT_SMALL_PROFITS_RATE_2024 = D("0.19")
CT_MAIN_RATE_2024 = D("0.25")
CT_SMALL_PROFITS_THRESHOLD_2024 = D("50000")
CT_MAIN_RATE_THRESHOLD_2024 = D("250000")

VAT_RATES_2024 = {
    "standard": D("0.20"),
    "reduced": D("0.05"),
    "zero": D("0.00"),
}
VAT_REGISTRATION_THRESHOLD_2024 = D("90000")

UK_2024 = RateTable(
    jurisdiction="UK",
    tax_year="2024/25",
    currency="GBP",
    description="United Kingdom 2024/25",
    schedules={
        "income_tax": BandedSchedule(bands=INCOME_TAX_BANDS_2024),
        "national_insurance": BandedSchedule(bands=NATIONAL_INSURANCE_BANDS_2024),
        "corporation_tax": CompanySchedule(
            marginal_relief=MarginalRelief(
                lower_threshold=CT_SMALL_PROFITS_THRESHOLD_2024,
                upper_threshold=CT_MAIN_RATE_THRESHOLD_2024,
                lower_rate=CT_SMALL_PROFITS_RATE_2024,
                upper_rate=CT_MAIN_RATE_2024,
            ),
        ),
        "vat": ProportionalSchedule(
            rates=VAT_RATES_2024,
            default="standard",
            registration_threshold=VAT_REGISTRATION_THRESHOLD_2024,
        ),
    },
)

__all__ = ["UK_2024"]
