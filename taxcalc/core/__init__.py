from taxcalc.core.engine import (
    calculate_banded_tax,
    calculate_flat_or_tiered_tax,
    calculate_proportional_tax,
    calculate_vat_return,
    calculate_withholding,
)
from taxcalc.core.errors import (
    ConfigurationError,
    InvalidInputError,
    TaxCalcError,
    UnknownRateTableError,
)
from taxcalc.core.models import (
    BandContribution,
    BusinessTaxSummary,
    CalculationInput,
    CalculationResult,
    VatReturn,
)
from taxcalc.core.summary import business_tax_summary, compliance_summary

__all__ = [
    "calculate_banded_tax",
    "calculate_flat_or_tiered_tax",
    "calculate_proportional_tax",
    "calculate_vat_return",
    "calculate_withholding",
    "business_tax_summary",
    "compliance_summary",
    "ConfigurationError",
    "InvalidInputError",
    "TaxCalcError",
    "UnknownRateTableError",
    "BandContribution",
    "BusinessTaxSummary",
    "CalculationInput",
    "CalculationResult",
    "VatReturn",
]
