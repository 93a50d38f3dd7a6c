from __future__ import annotations

from typing import Any, Iterable

from taxcalc.core.engine import calculate_banded_tax, calculate_flat_or_tiered_tax
from taxcalc.core.errors import InvalidInputError
from taxcalc.core.models import BusinessTaxSummary, CalculationResult, VatReturn
from taxcalc.core.money import D, ZERO, non_negative, round_cents
from taxcalc.core.tables import RateTable

COMPANY_TYPES = frozenset({"limited_company"})
UNINCORPORATED_TYPES = frozenset({"sole_trader", "partnership"})


def business_tax_summary(
    rate_table: RateTable,
    income: Any,
    expenses: Any,
    vat_collected: Any = 0,
    vat_paid: Any = 0,
    business_type: str = "sole_trader",
    *,
    corporation_tax_type: str = "corporation_tax",
    income_tax_type: str = "income_tax",
    national_insurance_type: str = "national_insurance",
) -> BusinessTaxSummary:
    """Tax position for a business from its period totals.

    Limited companies pay corporation tax on profit. Sole traders and
    partnerships pay income tax and national insurance on the same profit.
    A loss is taxed as zero profit.
    """
    kind = (business_type or "").strip().lower()
    if kind not in COMPANY_TYPES | UNINCORPORATED_TYPES:
        raise InvalidInputError(
            f"Unknown business type {business_type!r}; expected one of "
            f"{sorted(COMPANY_TYPES | UNINCORPORATED_TYPES)}",
            field="business_type",
        )
    income_dec = non_negative(income, "income")
    expenses_dec = non_negative(expenses, "expenses")
    collected = non_negative(vat_collected, "vat_collected")
    paid = non_negative(vat_paid, "vat_paid")
    profit = income_dec - expenses_dec
    chargeable = max(ZERO, profit)

    calculations: dict[str, CalculationResult] = {}
    if kind in COMPANY_TYPES:
        calculations[corporation_tax_type] = calculate_flat_or_tiered_tax(
            corporation_tax_type, chargeable, rate_table
        )
    else:
        calculations[income_tax_type] = calculate_banded_tax(income_tax_type, chargeable, rate_table)
        calculations[national_insurance_type] = calculate_banded_tax(
            national_insurance_type, chargeable, rate_table
        )

    total = sum((calc.total_tax for calc in calculations.values()), ZERO)
    return BusinessTaxSummary(
        business_type=kind,
        income=income_dec,
        expenses=expenses_dec,
        profit=profit,
        vat_collected=collected,
        vat_paid=paid,
        vat_liability=round_cents(collected - paid),
        calculations=calculations,
        total_tax=round_cents(total),
    )


def compliance_summary(
    paye: CalculationResult | None = None,
    cit: CalculationResult | None = None,
    vat: VatReturn | None = None,
    withholdings: Iterable[CalculationResult] = (),
) -> dict[str, D]:
    totals = {
        "paye": paye.total_tax if paye is not None else ZERO,
        "cit": cit.total_tax if cit is not None else ZERO,
        "vat": vat.net_vat_payable if vat is not None else ZERO,
        "wht": sum((item.total_tax for item in withholdings), ZERO),
    }
    totals = {name: round_cents(value) for name, value in totals.items()}
    totals["total_liability"] = round_cents(sum(totals.values(), ZERO))
    return totals


__all__ = ["business_tax_summary", "compliance_summary"]
