from __future__ import annotations

from dataclasses import dataclass, field
from types import MappingProxyType
from typing import Any, Mapping

from taxcalc.core.money import D, ZERO


@dataclass(frozen=True)
class CalculationInput:
    tax_type: str
    amounts: Mapping[str, D]
    selector: str | None = None
    overrides: Mapping[str, D] = field(default_factory=dict)

    def __post_init__(self) -> None:
        object.__setattr__(self, "amounts", MappingProxyType(dict(self.amounts)))
        object.__setattr__(self, "overrides", MappingProxyType(dict(self.overrides)))

    def amount(self, name: str) -> D:
        return self.amounts.get(name, ZERO)


@dataclass(frozen=True)
class BandContribution:
    band: str
    amount: D
    rate: D
    tax: D

    def to_dict(self) -> dict[str, Any]:
        return {"band": self.band, "amount": self.amount, "rate": self.rate, "tax": self.tax}


@dataclass(frozen=True)
class CalculationResult:
    tax_type: str
    gross_amount: D
    relief: D
    taxable_amount: D
    total_tax: D
    net_amount: D
    effective_rate: D
    breakdown: tuple[BandContribution, ...] = ()
    minimum_tax_applied: bool = False
    marginal_relief_applied: bool = False
    rate: D | None = None
    description: str = ""
    exempt: bool = False
    final_tax: bool = False
    details: Mapping[str, Any] = field(default_factory=dict)

    def __post_init__(self) -> None:
        object.__setattr__(self, "breakdown", tuple(self.breakdown))
        object.__setattr__(self, "details", MappingProxyType(dict(self.details)))

    @property
    def banded_tax(self) -> D:
        return sum((row.tax for row in self.breakdown), ZERO)

    def to_dict(self) -> dict[str, Any]:
        return {
            "tax_type": self.tax_type,
            "gross_amount": self.gross_amount,
            "relief": self.relief,
            "taxable_amount": self.taxable_amount,
            "total_tax": self.total_tax,
            "net_amount": self.net_amount,
            "effective_rate": self.effective_rate,
            "breakdown": [row.to_dict() for row in self.breakdown],
            "minimum_tax_applied": self.minimum_tax_applied,
            "marginal_relief_applied": self.marginal_relief_applied,
            "rate": self.rate,
            "description": self.description,
            "exempt": self.exempt,
            "final_tax": self.final_tax,
            "details": dict(self.details),
        }


@dataclass(frozen=True)
class VatReturn:
    output_sales: D
    input_purchases: D
    zero_rated_sales: D
    exempt_sales: D
    total_sales: D
    rate: D
    output_vat: D
    input_vat: D
    net_vat_payable: D
    vat_credit: D
    registration_threshold: D | None
    registration_required: bool

    def to_dict(self) -> dict[str, Any]:
        return {
            "output_sales": self.output_sales,
            "input_purchases": self.input_purchases,
            "zero_rated_sales": self.zero_rated_sales,
            "exempt_sales": self.exempt_sales,
            "total_sales": self.total_sales,
            "rate": self.rate,
            "output_vat": self.output_vat,
            "input_vat": self.input_vat,
            "net_vat_payable": self.net_vat_payable,
            "vat_credit": self.vat_credit,
            "registration_threshold": self.registration_threshold,
            "registration_required": self.registration_required,
        }


@dataclass(frozen=True)
class BusinessTaxSummary:
    business_type: str
    income: D
    expenses: D
    profit: D
    vat_collected: D
    vat_paid: D
    vat_liability: D
    calculations: Mapping[str, CalculationResult]
    total_tax: D

    def __post_init__(self) -> None:
        object.__setattr__(self, "calculations", MappingProxyType(dict(self.calculations)))

    def to_dict(self) -> dict[str, Any]:
        return {
            "business_type": self.business_type,
            "financial_summary": {
                "income": self.income,
                "expenses": self.expenses,
                "profit": self.profit,
            },
            "vat": {
                "collected": self.vat_collected,
                "paid": self.vat_paid,
                "liability": self.vat_liability,
            },
            "calculations": {name: calc.to_dict() for name, calc in self.calculations.items()},
            "total_tax": self.total_tax,
        }


__all__ = [
    "CalculationInput",
    "BandContribution",
    "CalculationResult",
    "VatReturn",
    "BusinessTaxSummary",
]
