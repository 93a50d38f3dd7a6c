from __future__ import annotations

import logging
from typing import Any, Mapping, TypeVar

from taxcalc.core.bands import accumulate_bands
from taxcalc.core.errors import InvalidInputError
from taxcalc.core.models import BandContribution, CalculationInput, CalculationResult, VatReturn
from taxcalc.core.money import D, ZERO, non_negative, ratio, round_cents, round_rate
from taxcalc.core.overlay import apply_minimum_tax, marginal_relief_tax
from taxcalc.core.reliefs import resolve_reliefs, taxable_after_relief
from taxcalc.core.tables import (
    COMPANY_BASES,
    BandedSchedule,
    CompanySchedule,
    ProportionalSchedule,
    RateTable,
    RateTier,
    WithholdingSchedule,
)

logger = logging.getLogger("taxcalc").getChild("engine")

S = TypeVar("S")

_BANDED_OPTIONS = frozenset({"overrides", "pension_contribution"})


def _schedule(rate_table: RateTable, tax_type: str, kind: type[S], operation: str) -> S:
    if not isinstance(rate_table, RateTable):
        raise InvalidInputError(
            f"rate_table must be a RateTable, got {type(rate_table).__name__}", field="rate_table"
        )
    schedule = rate_table.schedule(tax_type)
    if not isinstance(schedule, kind):
        raise InvalidInputError(
            f"Tax type {tax_type!r} is configured as {type(schedule).__name__}, "
            f"which {operation} cannot calculate",
            field="tax_type",
        )
    return schedule


def _normalized_tax_type(tax_type: str) -> str:
    return tax_type.strip().lower()


# ------------------------------------------------------------ banded


def _banded_overrides(schedule: BandedSchedule, options: Mapping[str, Any] | None) -> dict[str, D]:
    if not options:
        return {}
    unknown = set(options) - _BANDED_OPTIONS
    if unknown:
        raise InvalidInputError(f"Unknown options: {sorted(unknown)}", field="options")
    raw: dict[str, Any] = dict(options.get("overrides") or {})
    if options.get("pension_contribution") is not None:
        raw["pension_contribution"] = options["pension_contribution"]
    overrides: dict[str, D] = {}
    for key, value in raw.items():
        normalized = str(key).strip().lower()
        if normalized not in schedule.relief_keys:
            raise InvalidInputError(
                f"No relief named {key!r} to override; expected one of {sorted(schedule.relief_keys)}",
                field="overrides",
            )
        overrides[normalized] = non_negative(value, normalized)
    return overrides


def _compute_banded(request: CalculationInput, schedule: BandedSchedule) -> CalculationResult:
    gross = request.amount("gross")
    components, relief = resolve_reliefs(gross, schedule.reliefs, request.overrides)
    taxable = taxable_after_relief(gross, relief)
    banded_tax, rows = accumulate_bands(taxable, schedule.bands)
    floor = apply_minimum_tax(banded_tax, schedule.minimum_tax, {"gross": gross})

    total_tax = round_cents(floor.tax)
    details: dict[str, Any] = dict(components)
    details["banded_tax"] = round_cents(banded_tax)
    if schedule.minimum_tax is not None:
        details["minimum_tax"] = round_cents(floor.minimum_tax)
    return CalculationResult(
        tax_type=request.tax_type,
        gross_amount=gross,
        relief=relief,
        taxable_amount=taxable,
        total_tax=total_tax,
        net_amount=gross - total_tax,
        effective_rate=ratio(total_tax, gross),
        breakdown=rows,
        minimum_tax_applied=floor.applied,
        description="Minimum Tax Applied" if floor.applied else "Banded",
        details=details,
    )


def calculate_banded_tax(
    tax_type: str,
    gross_amount: Any,
    rate_table: RateTable,
    options: Mapping[str, Any] | None = None,
) -> CalculationResult:
    """Income tax, national insurance and PAYE style taxes.

    ``options`` may carry ``overrides`` (relief key -> amount) or the
    ``pension_contribution`` shorthand. An override replaces the computed
    figure for that relief only.
    """
    schedule = _schedule(rate_table, tax_type, BandedSchedule, "calculate_banded_tax")
    gross = non_negative(gross_amount, "gross_amount")
    request = CalculationInput(
        tax_type=_normalized_tax_type(tax_type),
        amounts={"gross": gross},
        overrides=_banded_overrides(schedule, options),
    )
    result = _compute_banded(request, schedule)
    logger.debug(
        "banded %s %s/%s gross=%s tax=%s minimum_tax=%s",
        request.tax_type,
        rate_table.jurisdiction,
        rate_table.tax_year,
        gross,
        result.total_tax,
        result.minimum_tax_applied,
    )
    return result


# ----------------------------------------------------------- company


def _company_bases(auxiliary_bases: Mapping[str, Any] | None) -> dict[str, D]:
    bases: dict[str, D] = {}
    for key, value in (auxiliary_bases or {}).items():
        normalized = str(key).strip().lower()
        if normalized not in COMPANY_BASES:
            raise InvalidInputError(
                f"Unknown auxiliary base {key!r}; expected one of {sorted(COMPANY_BASES)}",
                field="auxiliary_bases",
            )
        if value is None:
            continue
        bases[normalized] = non_negative(value, normalized)
    return bases


def _select_tier(tiers: tuple[RateTier, ...], measure: D) -> RateTier:
    for tier in tiers:
        if tier.upper is None or measure < tier.upper:
            return tier
    return tiers[-1]  # pragma: no cover - last tier is unbounded


def _compute_company(request: CalculationInput, schedule: CompanySchedule) -> CalculationResult:
    profit = request.amount("base")
    relief = request.amount("capital_allowances") + request.amount("losses_carried_forward")
    chargeable = taxable_after_relief(profit, relief)
    details: dict[str, Any] = {}
    marginal_applied = False

    if schedule.marginal_relief is not None:
        outcome = marginal_relief_tax(chargeable, schedule.marginal_relief)
        charge = outcome.tax
        rate = outcome.rate
        description = outcome.description
        marginal_applied = outcome.relief_applied
        if marginal_applied:
            details["marginal_relief"] = round_cents(outcome.relief)
    else:
        tier = _select_tier(schedule.tiers, request.amount(schedule.tier_base))
        charge = chargeable * tier.rate
        rate = tier.rate
        description = tier.name

    rows: tuple[BandContribution, ...] = ()
    if chargeable > 0:
        rows = (BandContribution(band=description, amount=chargeable, rate=round_rate(rate), tax=charge),)

    bases = {
        "gross": profit,
        "turnover": request.amount("turnover"),
        "gross_profit": request.amount("gross_profit"),
        "net_assets": request.amount("net_assets"),
    }
    floor = apply_minimum_tax(charge, schedule.minimum_tax, bases)
    if schedule.minimum_tax is not None:
        details["minimum_tax"] = round_cents(floor.minimum_tax)
        for base, amount in floor.candidates.items():
            details[f"minimum_tax_on_{base}"] = round_cents(amount)

    levy_bases = dict(bases, assessable_profit=profit, chargeable_profit=chargeable)
    levies = ZERO
    for levy in schedule.levies:
        measure = levy_bases.get(levy.base, ZERO)
        if levy.threshold is not None and measure <= levy.threshold:
            details[levy.name] = round_cents(ZERO)
            continue
        amount = measure * levy.rate
        details[levy.name] = round_cents(amount)
        levies += amount

    details["income_tax"] = round_cents(floor.tax)
    total_tax = round_cents(floor.tax + levies)
    return CalculationResult(
        tax_type=request.tax_type,
        gross_amount=profit,
        relief=relief,
        taxable_amount=chargeable,
        total_tax=total_tax,
        net_amount=profit - total_tax,
        effective_rate=ratio(total_tax, profit),
        breakdown=rows,
        minimum_tax_applied=floor.applied,
        marginal_relief_applied=marginal_applied,
        rate=round_rate(rate),
        description="Minimum Tax Applied" if floor.applied else description,
        details=details,
    )


def calculate_flat_or_tiered_tax(
    tax_type: str,
    base: Any,
    rate_table: RateTable,
    auxiliary_bases: Mapping[str, Any] | None = None,
) -> CalculationResult:
    """Corporation / companies income tax on ``base`` (assessable profit).

    ``auxiliary_bases`` may hold ``turnover``, ``gross_profit``,
    ``net_assets``, ``capital_allowances`` and ``losses_carried_forward``.
    """
    schedule = _schedule(rate_table, tax_type, CompanySchedule, "calculate_flat_or_tiered_tax")
    profit = non_negative(base, "base")
    bases = _company_bases(auxiliary_bases)
    if schedule.tiers and schedule.tier_base not in bases:
        raise InvalidInputError(
            f"{schedule.tier_base} is required to select the {tax_type} rate", field=schedule.tier_base
        )
    request = CalculationInput(tax_type=_normalized_tax_type(tax_type), amounts=dict(bases, base=profit))
    result = _compute_company(request, schedule)
    logger.debug(
        "company %s %s/%s profit=%s tax=%s minimum_tax=%s marginal_relief=%s",
        request.tax_type,
        rate_table.jurisdiction,
        rate_table.tax_year,
        profit,
        result.total_tax,
        result.minimum_tax_applied,
        result.marginal_relief_applied,
    )
    return result


# ------------------------------------------------------ proportional


def _category(schedule: ProportionalSchedule, rate_selector: str | None) -> str:
    if rate_selector is None:
        if schedule.default is None:
            raise InvalidInputError("A rate category is required", field="rate_selector")
        return schedule.default
    if not isinstance(rate_selector, str):
        raise InvalidInputError(f"Rate category must be a string, got {rate_selector!r}", field="rate_selector")
    category = rate_selector.strip().lower()
    if category not in schedule.rates:
        raise InvalidInputError(
            f"Unknown rate category {rate_selector!r}; expected one of {sorted(schedule.rates)}",
            field="rate_selector",
        )
    return category


def calculate_proportional_tax(
    amount: Any,
    rate_selector: str | None,
    rate_table: RateTable,
    tax_type: str = "vat",
) -> CalculationResult:
    """Flat percentage on a net amount: ``net_amount`` in, ``gross_amount = net + tax`` out."""
    schedule = _schedule(rate_table, tax_type, ProportionalSchedule, "calculate_proportional_tax")
    category = _category(schedule, rate_selector)
    net = non_negative(amount, "amount")
    rate = schedule.rates[category]
    tax = round_cents(net * rate)
    logger.debug("proportional %s %s net=%s rate=%s tax=%s", tax_type, category, net, rate, tax)
    return CalculationResult(
        tax_type=_normalized_tax_type(tax_type),
        gross_amount=net + tax,
        relief=ZERO,
        taxable_amount=net,
        total_tax=tax,
        net_amount=net,
        effective_rate=ratio(tax, net),
        rate=rate,
        description=category,
        details={"category": category},
    )


def calculate_vat_return(
    rate_table: RateTable,
    output_sales: Any,
    input_purchases: Any,
    zero_rated_sales: Any = 0,
    exempt_sales: Any = 0,
    *,
    rate_selector: str | None = None,
    tax_type: str = "vat",
) -> VatReturn:
    """Net a period's output VAT against input VAT; a negative balance becomes a credit."""
    schedule = _schedule(rate_table, tax_type, ProportionalSchedule, "calculate_vat_return")
    category = _category(schedule, rate_selector)
    output = non_negative(output_sales, "output_sales")
    purchases = non_negative(input_purchases, "input_purchases")
    zero_rated = non_negative(zero_rated_sales, "zero_rated_sales")
    exempt = non_negative(exempt_sales, "exempt_sales")

    rate = schedule.rates[category]
    output_vat = round_cents(output * rate)
    input_vat = round_cents(purchases * rate)
    balance = output_vat - input_vat
    total_sales = output + zero_rated + exempt
    threshold = schedule.registration_threshold
    return VatReturn(
        output_sales=output,
        input_purchases=purchases,
        zero_rated_sales=zero_rated,
        exempt_sales=exempt,
        total_sales=total_sales,
        rate=rate,
        output_vat=output_vat,
        input_vat=input_vat,
        net_vat_payable=max(ZERO, balance),
        vat_credit=-balance if balance < 0 else ZERO,
        registration_threshold=threshold,
        registration_required=threshold is not None and total_sales >= threshold,
    )


# -------------------------------------------------------- withholding


def _payment_type(schedule: WithholdingSchedule, payment_type: str) -> str:
    if not isinstance(payment_type, str) or not payment_type.strip():
        raise InvalidInputError(f"Payment type must be a string, got {payment_type!r}", field="payment_type")
    wanted = payment_type.strip()
    if wanted in schedule.rates:
        return wanted
    folded = {name.lower(): name for name in schedule.rates}
    try:
        return folded[wanted.lower()]
    except KeyError as exc:
        raise InvalidInputError(
            f"Unknown payment type {payment_type!r}; expected one of {sorted(schedule.rates)}",
            field="payment_type",
        ) from exc


def calculate_withholding(
    payment_type: str,
    amount: Any,
    rate_table: RateTable,
    tax_type: str = "wht",
) -> CalculationResult:
    schedule = _schedule(rate_table, tax_type, WithholdingSchedule, "calculate_withholding")
    resolved = _payment_type(schedule, payment_type)
    payment = non_negative(amount, "amount")
    entry = schedule.rates[resolved]
    details: dict[str, Any] = {
        "payment_type": resolved,
        "exemption_threshold": schedule.exemption_threshold,
    }

    if payment <= schedule.exemption_threshold:
        logger.debug("withholding %s amount=%s exempt", resolved, payment)
        return CalculationResult(
            tax_type=_normalized_tax_type(tax_type),
            gross_amount=payment,
            relief=ZERO,
            taxable_amount=ZERO,
            total_tax=round_cents(ZERO),
            net_amount=payment,
            effective_rate=ratio(ZERO, payment),
            rate=ZERO,
            description=entry.description,
            exempt=True,
            final_tax=False,
            details=details,
        )

    tax = round_cents(payment * entry.rate)
    logger.debug("withholding %s amount=%s rate=%s tax=%s", resolved, payment, entry.rate, tax)
    return CalculationResult(
        tax_type=_normalized_tax_type(tax_type),
        gross_amount=payment,
        relief=ZERO,
        taxable_amount=payment,
        total_tax=tax,
        net_amount=payment - tax,
        effective_rate=ratio(tax, payment),
        rate=entry.rate,
        description=entry.description,
        exempt=False,
        final_tax=resolved in schedule.final_tax_types,
        details=details,
    )


__all__ = [
    "calculate_banded_tax",
    "calculate_flat_or_tiered_tax",
    "calculate_proportional_tax",
    "calculate_vat_return",
    "calculate_withholding",
]
