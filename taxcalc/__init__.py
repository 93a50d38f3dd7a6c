"""Multi-jurisdiction tax calculation engine driven by immutable rate tables."""

from taxcalc.core import (
    BandContribution,
    BusinessTaxSummary,
    CalculationInput,
    CalculationResult,
    ConfigurationError,
    InvalidInputError,
    TaxCalcError,
    UnknownRateTableError,
    VatReturn,
    business_tax_summary,
    calculate_banded_tax,
    calculate_flat_or_tiered_tax,
    calculate_proportional_tax,
    calculate_vat_return,
    calculate_withholding,
    compliance_summary,
)
from taxcalc.core.tables import RateTable
from taxcalc.rates import (
    default_rate_table,
    get_rate_table,
    list_rate_tables,
    load_rate_table,
    rate_table_from_mapping,
    register_rate_table,
)

__version__ = "0.1.0"

__all__ = [
    "calculate_banded_tax",
    "calculate_flat_or_tiered_tax",
    "calculate_proportional_tax",
    "calculate_vat_return",
    "calculate_withholding",
    "business_tax_summary",
    "compliance_summary",
    "BandContribution",
    "BusinessTaxSummary",
    "CalculationInput",
    "CalculationResult",
    "VatReturn",
    "RateTable",
    "ConfigurationError",
    "InvalidInputError",
    "TaxCalcError",
    "UnknownRateTableError",
    "default_rate_table",
    "get_rate_table",
    "list_rate_tables",
    "load_rate_table",
    "rate_table_from_mapping",
    "register_rate_table",
]
