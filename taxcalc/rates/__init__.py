from taxcalc.rates.dispatch import (
    default_rate_table,
    get_rate_table,
    list_rate_tables,
    load_rate_directory,
    register_rate_table,
    register_rate_tables,
    supported_jurisdictions,
    unregister_rate_table,
)
from taxcalc.rates.loader import load_rate_table, rate_table_from_mapping
from taxcalc.rates.ng2026 import NG_2026
from taxcalc.rates.uk2024 import UK_2024

__all__ = [
    "default_rate_table",
    "get_rate_table",
    "list_rate_tables",
    "load_rate_directory",
    "register_rate_table",
    "register_rate_tables",
    "supported_jurisdictions",
    "unregister_rate_table",
    "load_rate_table",
    "rate_table_from_mapping",
    "NG_2026",
    "UK_2024",
]
