from __future__ import annotations

from dataclasses import dataclass
from typing import Mapping

from taxcalc.core.money import D, ZERO
from taxcalc.core.tables import MarginalRelief, MinimumTaxRule


@dataclass(frozen=True)
class MinimumTaxOutcome:
    tax: D
    minimum_tax: D
    applied: bool
    candidates: Mapping[str, D]


def minimum_tax_candidates(rule: MinimumTaxRule, bases: Mapping[str, D]) -> dict[str, D]:
    threshold_value = bases.get(rule.threshold_base, ZERO)
    if rule.threshold is not None and threshold_value <= rule.threshold:
        return {}
    return {candidate.base: bases.get(candidate.base, ZERO) * candidate.rate for candidate in rule.candidates}


def apply_minimum_tax(computed_tax: D, rule: MinimumTaxRule | None, bases: Mapping[str, D]) -> MinimumTaxOutcome:
    """Replace ``computed_tax`` with the largest candidate floor when that floor is higher."""
    if rule is None:
        return MinimumTaxOutcome(tax=computed_tax, minimum_tax=ZERO, applied=False, candidates={})
    candidates = minimum_tax_candidates(rule, bases)
    minimum = max(candidates.values(), default=ZERO)
    if minimum > computed_tax:
        return MinimumTaxOutcome(tax=minimum, minimum_tax=minimum, applied=True, candidates=candidates)
    return MinimumTaxOutcome(tax=computed_tax, minimum_tax=minimum, applied=False, candidates=candidates)


@dataclass(frozen=True)
class MarginalReliefOutcome:
    tax: D
    rate: D
    description: str
    relief_applied: bool
    relief: D


def marginal_relief_tax(profit: D, schedule: MarginalRelief) -> MarginalReliefOutcome:
    """Flat lower rate up to the lower threshold, flat upper rate from the upper threshold.

    Between the two the charge is
    ``profit*upper_rate - ((upper - profit)/upper) * (upper_rate - lower_rate) * profit``.
    This interpolation is not the statutory marginal relief fraction; it is
    kept as published by the business rules and awaits review.
    """
    lower, upper = schedule.lower_threshold, schedule.upper_threshold
    if profit <= lower:
        return MarginalReliefOutcome(
            tax=profit * schedule.lower_rate,
            rate=schedule.lower_rate,
            description="Small Profits Rate",
            relief_applied=False,
            relief=ZERO,
        )
    if profit >= upper:
        return MarginalReliefOutcome(
            tax=profit * schedule.upper_rate,
            rate=schedule.upper_rate,
            description="Main Rate",
            relief_applied=False,
            relief=ZERO,
        )
    relief = ((upper - profit) / upper) * (schedule.upper_rate - schedule.lower_rate) * profit
    tax = profit * schedule.upper_rate - relief
    return MarginalReliefOutcome(
        tax=tax,
        rate=tax / profit,
        description="Marginal Relief Applied",
        relief_applied=True,
        relief=relief,
    )


__all__ = [
    "MinimumTaxOutcome",
    "MarginalReliefOutcome",
    "minimum_tax_candidates",
    "apply_minimum_tax",
    "marginal_relief_tax",
]
