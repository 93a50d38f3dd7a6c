from __future__ import annotations

from typing import Callable, Iterable, Mapping

from taxcalc.core.money import D, ZERO
from taxcalc.core.tables import ConsolidatedRelief, ContributionRelief, PersonalAllowance, ReliefRule


def consolidated_relief(rule: ConsolidatedRelief, gross: D) -> D:
    percentage_only = gross * rule.minimum_percentage
    base_plus = rule.base_amount + gross * rule.additional_percentage
    return max(percentage_only, base_plus)


def personal_allowance(rule: PersonalAllowance, gross: D) -> D:
    if rule.taper_start is None or gross <= rule.taper_start:
        return rule.amount
    reduction = (gross - rule.taper_start) * rule.taper_ratio
    return max(ZERO, rule.amount - reduction)


def contribution_relief(rule: ContributionRelief, gross: D) -> D:
    return gross * rule.rate


_EVALUATORS: dict[type, Callable[..., D]] = {
    ConsolidatedRelief: consolidated_relief,
    PersonalAllowance: personal_allowance,
    ContributionRelief: contribution_relief,
}


def resolve_reliefs(
    gross: D,
    rules: Iterable[ReliefRule],
    overrides: Mapping[str, D] | None = None,
) -> tuple[dict[str, D], D]:
    """Evaluate each relief rule against ``gross``.

    An override replaces the computed figure for its own key only; the other
    rules are still evaluated from their formulas. Returns the per-key
    components and their total.
    """
    overrides = overrides or {}
    components: dict[str, D] = {}
    for rule in rules:
        if rule.key in overrides:
            components[rule.key] = overrides[rule.key]
        else:
            components[rule.key] = _EVALUATORS[type(rule)](rule, gross)
    total = sum(components.values(), ZERO)
    return components, total


def taxable_after_relief(gross: D, relief: D) -> D:
    return max(ZERO, gross - relief)


__all__ = [
    "consolidated_relief",
    "personal_allowance",
    "contribution_relief",
    "resolve_reliefs",
    "taxable_after_relief",
]
