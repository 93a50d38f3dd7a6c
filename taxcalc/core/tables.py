"""Rate tables: the numeric configuration for one jurisdiction and tax year.

Everything here is immutable once built. Constructors coerce numbers to
``Decimal`` and validate the structure, raising :class:`ConfigurationError`
for anything the engine could not calculate with. A new tax year means a new
:class:`RateTable`, never an edit to an existing one.
"""

from __future__ import annotations

from dataclasses import dataclass, field
from types import MappingProxyType
from typing import Any, Iterable, Mapping, Union

from taxcalc.core.errors import ConfigurationError, InvalidInputError
from taxcalc.core.money import D, ONE, ZERO, to_decimal

COMPANY_BASES = frozenset(
    {"turnover", "gross_profit", "net_assets", "capital_allowances", "losses_carried_forward"}
)
LEVY_BASES = frozenset({"assessable_profit", "chargeable_profit", "turnover", "gross_profit", "net_assets"})
MINIMUM_TAX_BASES = frozenset({"gross", "turnover", "gross_profit", "net_assets"})
BANDED_MINIMUM_TAX_BASES = frozenset({"gross"})


def _decimal(value: Any, what: str) -> D:
    try:
        return to_decimal(value, what)
    except InvalidInputError as exc:
        raise ConfigurationError(str(exc)) from exc


def _optional_decimal(value: Any, what: str) -> D | None:
    if value is None:
        return None
    return _decimal(value, what)


def _rate(value: Any, what: str) -> D:
    rate = _decimal(value, what)
    if rate < ZERO or rate > ONE:
        raise ConfigurationError(f"{what} must be between 0 and 1, got {rate}")
    return rate


def _non_negative(value: Any, what: str) -> D:
    amount = _decimal(value, what)
    if amount < ZERO:
        raise ConfigurationError(f"{what} cannot be negative, got {amount}")
    return amount


def _set(obj: object, name: str, value: Any) -> None:
    object.__setattr__(obj, name, value)


def _key(value: Any, what: str) -> str:
    if not isinstance(value, str) or not value.strip():
        raise ConfigurationError(f"{what} must be a non-empty string, got {value!r}")
    return value.strip().lower()


# ---------------------------------------------------------------- bands


@dataclass(frozen=True)
class TaxBand:
    """One marginal band covering ``[lower, upper)``; ``upper=None`` is unbounded."""

    lower: D
    upper: D | None
    rate: D
    name: str = ""

    def __post_init__(self) -> None:
        label = self.name or "band"
        lower = _non_negative(self.lower, f"{label} lower bound")
        upper = _optional_decimal(self.upper, f"{label} upper bound")
        if upper is not None and upper <= lower:
            raise ConfigurationError(f"{label} upper bound {upper} must exceed lower bound {lower}")
        _set(self, "lower", lower)
        _set(self, "upper", upper)
        _set(self, "rate", _rate(self.rate, f"{label} rate"))
        if not self.name:
            _set(self, "name", f"{lower}+" if upper is None else f"{lower}-{upper}")


def validate_bands(bands: Iterable[TaxBand]) -> tuple[TaxBand, ...]:
    ordered = tuple(bands)
    if not ordered:
        raise ConfigurationError("A banded schedule needs at least one band")
    for item in ordered:
        if not isinstance(item, TaxBand):
            raise ConfigurationError(f"Expected TaxBand, got {type(item).__name__}")
    if ordered[0].lower != ZERO:
        raise ConfigurationError(f"First band must start at 0, got {ordered[0].lower}")
    for previous, current in zip(ordered, ordered[1:]):
        if previous.upper is None:
            raise ConfigurationError(f"Only the last band may be unbounded ({previous.name})")
        if current.lower != previous.upper:
            raise ConfigurationError(
                f"Bands must be contiguous: {previous.name} ends at {previous.upper} "
                f"but {current.name} starts at {current.lower}"
            )
    if ordered[-1].upper is not None:
        raise ConfigurationError(f"Last band must be unbounded ({ordered[-1].name})")
    return ordered


# --------------------------------------------------------------- reliefs


@dataclass(frozen=True)
class ConsolidatedRelief:
    """Higher of ``minimum_percentage * gross`` or ``base_amount + additional_percentage * gross``."""

    minimum_percentage: D
    base_amount: D
    additional_percentage: D
    key: str = "consolidated_relief"

    def __post_init__(self) -> None:
        _set(self, "minimum_percentage", _rate(self.minimum_percentage, "relief minimum percentage"))
        _set(self, "base_amount", _non_negative(self.base_amount, "relief base amount"))
        _set(self, "additional_percentage", _rate(self.additional_percentage, "relief additional percentage"))
        _set(self, "key", _key(self.key, "relief key"))


@dataclass(frozen=True)
class PersonalAllowance:
    # Allowance shrinks by taper_ratio per unit of gross above taper_start.
    amount: D
    taper_start: D | None = None
    taper_ratio: D = D("0.5")
    key: str = "personal_allowance"

    def __post_init__(self) -> None:
        _set(self, "amount", _non_negative(self.amount, "personal allowance"))
        taper_start = self.taper_start
        if taper_start is not None:
            taper_start = _non_negative(taper_start, "personal allowance taper start")
        _set(self, "taper_start", taper_start)
        _set(self, "taper_ratio", _rate(self.taper_ratio, "personal allowance taper ratio"))
        _set(self, "key", _key(self.key, "relief key"))


@dataclass(frozen=True)
class ContributionRelief:
    """Deductible contribution (pension) defaulting to ``rate * gross``."""

    rate: D
    key: str = "pension_contribution"

    def __post_init__(self) -> None:
        _set(self, "rate", _rate(self.rate, "contribution rate"))
        _set(self, "key", _key(self.key, "relief key"))


ReliefRule = Union[ConsolidatedRelief, PersonalAllowance, ContributionRelief]
_RELIEF_TYPES = (ConsolidatedRelief, PersonalAllowance, ContributionRelief)


# ----------------------------------------------------------- overlays


@dataclass(frozen=True)
class MinimumTaxBase:
    base: str
    rate: D

    def __post_init__(self) -> None:
        base = _key(self.base, "minimum tax base")
        if base not in MINIMUM_TAX_BASES:
            raise ConfigurationError(
                f"Unknown minimum tax base {base!r}; expected one of {sorted(MINIMUM_TAX_BASES)}"
            )
        _set(self, "base", base)
        _set(self, "rate", _rate(self.rate, f"minimum tax rate on {base}"))


@dataclass(frozen=True)
class MinimumTaxRule:
    """Floor applied when ``threshold_base`` exceeds ``threshold`` (always, if no threshold)."""

    candidates: tuple[MinimumTaxBase, ...]
    threshold: D | None = None
    threshold_base: str = "gross"

    def __post_init__(self) -> None:
        candidates = tuple(self.candidates)
        if not candidates:
            raise ConfigurationError("Minimum tax rule needs at least one candidate base")
        for candidate in candidates:
            if not isinstance(candidate, MinimumTaxBase):
                raise ConfigurationError(f"Expected MinimumTaxBase, got {type(candidate).__name__}")
        _set(self, "candidates", candidates)
        threshold = self.threshold
        if threshold is not None:
            threshold = _non_negative(threshold, "minimum tax threshold")
        _set(self, "threshold", threshold)
        threshold_base = _key(self.threshold_base, "minimum tax threshold base")
        if threshold_base not in MINIMUM_TAX_BASES:
            raise ConfigurationError(f"Unknown minimum tax threshold base {threshold_base!r}")
        _set(self, "threshold_base", threshold_base)


@dataclass(frozen=True)
class MarginalRelief:
    lower_threshold: D
    upper_threshold: D
    lower_rate: D
    upper_rate: D

    def __post_init__(self) -> None:
        lower = _decimal(self.lower_threshold, "marginal relief lower threshold")
        upper = _decimal(self.upper_threshold, "marginal relief upper threshold")
        if lower <= ZERO or upper <= lower:
            raise ConfigurationError(
                f"Marginal relief needs 0 < lower threshold < upper threshold, got {lower} and {upper}"
            )
        lower_rate = _rate(self.lower_rate, "marginal relief lower rate")
        upper_rate = _rate(self.upper_rate, "marginal relief upper rate")
        if lower_rate > upper_rate:
            raise ConfigurationError(
                f"Marginal relief lower rate {lower_rate} exceeds upper rate {upper_rate}"
            )
        _set(self, "lower_threshold", lower)
        _set(self, "upper_threshold", upper)
        _set(self, "lower_rate", lower_rate)
        _set(self, "upper_rate", upper_rate)


@dataclass(frozen=True)
class RateTier:
    # Selected while tier base < upper; the last tier is unbounded.
    upper: D | None
    rate: D
    name: str = ""

    def __post_init__(self) -> None:
        upper = self.upper
        if upper is not None:
            upper = _non_negative(upper, f"{self.name or 'tier'} upper bound")
        _set(self, "upper", upper)
        _set(self, "rate", _rate(self.rate, f"{self.name or 'tier'} rate"))


@dataclass(frozen=True)
class Levy:
    name: str
    rate: D
    base: str = "assessable_profit"
    threshold: D | None = None

    def __post_init__(self) -> None:
        _set(self, "name", _key(self.name, "levy name"))
        _set(self, "rate", _rate(self.rate, f"{self.name} rate"))
        base = _key(self.base, f"{self.name} base")
        if base not in LEVY_BASES:
            raise ConfigurationError(f"Unknown levy base {base!r}; expected one of {sorted(LEVY_BASES)}")
        _set(self, "base", base)
        threshold = self.threshold
        if threshold is not None:
            threshold = _non_negative(threshold, f"{self.name} threshold")
        _set(self, "threshold", threshold)


# ------------------------------------------------------------ schedules


@dataclass(frozen=True)
class BandedSchedule:
    bands: tuple[TaxBand, ...]
    reliefs: tuple[ReliefRule, ...] = ()
    minimum_tax: MinimumTaxRule | None = None

    def __post_init__(self) -> None:
        _set(self, "bands", validate_bands(self.bands))
        reliefs = tuple(self.reliefs)
        seen: set[str] = set()
        for rule in reliefs:
            if not isinstance(rule, _RELIEF_TYPES):
                raise ConfigurationError(f"Unsupported relief rule {type(rule).__name__}")
            if rule.key in seen:
                raise ConfigurationError(f"Duplicate relief key {rule.key!r}")
            seen.add(rule.key)
        _set(self, "reliefs", reliefs)
        if self.minimum_tax is not None and not isinstance(self.minimum_tax, MinimumTaxRule):
            raise ConfigurationError("minimum_tax must be a MinimumTaxRule")
        if self.minimum_tax is not None:
            bases = {self.minimum_tax.threshold_base} | {c.base for c in self.minimum_tax.candidates}
            if bases - BANDED_MINIMUM_TAX_BASES:
                raise ConfigurationError(
                    f"Banded minimum tax can only use {sorted(BANDED_MINIMUM_TAX_BASES)}, got {sorted(bases)}"
                )

    @property
    def relief_keys(self) -> frozenset[str]:
        return frozenset(rule.key for rule in self.reliefs)


@dataclass(frozen=True)
class CompanySchedule:
    marginal_relief: MarginalRelief | None = None
    tiers: tuple[RateTier, ...] = ()
    tier_base: str = "turnover"
    minimum_tax: MinimumTaxRule | None = None
    levies: tuple[Levy, ...] = ()

    def __post_init__(self) -> None:
        tiers = tuple(self.tiers)
        if (self.marginal_relief is None) == (not tiers):
            raise ConfigurationError("Company schedule needs exactly one of marginal_relief or tiers")
        if self.marginal_relief is not None and not isinstance(self.marginal_relief, MarginalRelief):
            raise ConfigurationError("marginal_relief must be a MarginalRelief")
        if tiers:
            for previous, current in zip(tiers, tiers[1:]):
                if previous.upper is None:
                    raise ConfigurationError(f"Only the last tier may be unbounded ({previous.name})")
                if current.upper is not None and current.upper <= previous.upper:
                    raise ConfigurationError("Rate tiers must be sorted ascending by upper bound")
            if tiers[-1].upper is not None:
                raise ConfigurationError(f"Last rate tier must be unbounded ({tiers[-1].name})")
        _set(self, "tiers", tiers)
        tier_base = _key(self.tier_base, "tier base")
        if tier_base not in COMPANY_BASES:
            raise ConfigurationError(f"Unknown tier base {tier_base!r}")
        _set(self, "tier_base", tier_base)
        if self.minimum_tax is not None and not isinstance(self.minimum_tax, MinimumTaxRule):
            raise ConfigurationError("minimum_tax must be a MinimumTaxRule")
        _set(self, "levies", tuple(self.levies))


@dataclass(frozen=True)
class ProportionalSchedule:
    rates: Mapping[str, D]
    default: str | None = None
    registration_threshold: D | None = None

    def __post_init__(self) -> None:
        if not self.rates:
            raise ConfigurationError("Proportional schedule needs at least one rate category")
        rates = {_key(name, "rate category"): _rate(value, f"{name} rate") for name, value in self.rates.items()}
        _set(self, "rates", MappingProxyType(rates))
        if self.default is not None:
            default = _key(self.default, "default rate category")
            if default not in rates:
                raise ConfigurationError(f"Default rate category {default!r} is not configured")
            _set(self, "default", default)
        threshold = self.registration_threshold
        if threshold is not None:
            threshold = _non_negative(threshold, "registration threshold")
        _set(self, "registration_threshold", threshold)


@dataclass(frozen=True)
class WithholdingRate:
    rate: D
    description: str = ""

    def __post_init__(self) -> None:
        _set(self, "rate", _rate(self.rate, "withholding rate"))


@dataclass(frozen=True)
class WithholdingSchedule:
    rates: Mapping[str, WithholdingRate]
    exemption_threshold: D = ZERO
    final_tax_types: frozenset[str] = field(default_factory=frozenset)

    def __post_init__(self) -> None:
        if not self.rates:
            raise ConfigurationError("Withholding schedule needs at least one payment type")
        rates: dict[str, WithholdingRate] = {}
        for name, value in self.rates.items():
            entry = value if isinstance(value, WithholdingRate) else WithholdingRate(value)
            # payment types keep their configured spelling (e.g. professionalFees)
            if not isinstance(name, str) or not name.strip():
                raise ConfigurationError(f"Payment type must be a non-empty string, got {name!r}")
            rates[name.strip()] = entry
        _set(self, "rates", MappingProxyType(rates))
        _set(self, "exemption_threshold", _non_negative(self.exemption_threshold, "exemption threshold"))
        final = frozenset(self.final_tax_types)
        unknown = final - set(rates)
        if unknown:
            raise ConfigurationError(f"Final tax types not configured as payment types: {sorted(unknown)}")
        _set(self, "final_tax_types", final)


Schedule = Union[BandedSchedule, CompanySchedule, ProportionalSchedule, WithholdingSchedule]
_SCHEDULE_TYPES = (BandedSchedule, CompanySchedule, ProportionalSchedule, WithholdingSchedule)


# ------------------------------------------------------------ the table


@dataclass(frozen=True)
class RateTable:
    jurisdiction: str
    tax_year: str
    schedules: Mapping[str, Schedule]
    currency: str = ""
    description: str = ""

    def __post_init__(self) -> None:
        if not isinstance(self.jurisdiction, str) or not self.jurisdiction.strip():
            raise ConfigurationError("Rate table needs a jurisdiction code")
        _set(self, "jurisdiction", self.jurisdiction.strip().upper())
        tax_year = str(self.tax_year).strip() if self.tax_year is not None else ""
        if not tax_year:
            raise ConfigurationError("Rate table needs a tax year")
        _set(self, "tax_year", tax_year)
        if not self.schedules:
            raise ConfigurationError(f"Rate table {self.jurisdiction} {tax_year} has no schedules")
        schedules: dict[str, Schedule] = {}
        for name, schedule in self.schedules.items():
            if not isinstance(schedule, _SCHEDULE_TYPES):
                raise ConfigurationError(f"Schedule {name!r} has unsupported type {type(schedule).__name__}")
            key = _key(name, "tax type")
            if key in schedules:
                raise ConfigurationError(f"Duplicate schedule for tax type {key!r}")
            schedules[key] = schedule
        _set(self, "schedules", MappingProxyType(schedules))

    @property
    def key(self) -> tuple[str, str]:
        return self.jurisdiction, self.tax_year

    @property
    def tax_types(self) -> tuple[str, ...]:
        return tuple(sorted(self.schedules))

    def schedule(self, tax_type: str) -> Schedule:
        if not isinstance(tax_type, str):
            raise InvalidInputError(f"Tax type must be a string, got {tax_type!r}", field="tax_type")
        try:
            return self.schedules[tax_type.strip().lower()]
        except KeyError as exc:
            raise InvalidInputError(
                f"Unknown tax type {tax_type!r} for {self.jurisdiction} {self.tax_year}; "
                f"expected one of {list(self.tax_types)}",
                field="tax_type",
            ) from exc


__all__ = [
    "TaxBand",
    "validate_bands",
    "ConsolidatedRelief",
    "PersonalAllowance",
    "ContributionRelief",
    "ReliefRule",
    "MinimumTaxBase",
    "MinimumTaxRule",
    "MarginalRelief",
    "RateTier",
    "Levy",
    "BandedSchedule",
    "CompanySchedule",
    "ProportionalSchedule",
    "WithholdingRate",
    "WithholdingSchedule",
    "Schedule",
    "RateTable",
    "COMPANY_BASES",
]
