from __future__ import annotations

import json
from decimal import Decimal
from pathlib import Path
from typing import Annotated, Any, Literal, Mapping, Union

from pydantic import BaseModel, ConfigDict, Field, ValidationError

from taxcalc.core.errors import ConfigurationError
from taxcalc.core.tables import (
    BandedSchedule,
    CompanySchedule,
    ConsolidatedRelief,
    ContributionRelief,
    Levy,
    MarginalRelief,
    MinimumTaxBase,
    MinimumTaxRule,
    PersonalAllowance,
    ProportionalSchedule,
    RateTable,
    RateTier,
    ReliefRule,
    Schedule,
    TaxBand,
    WithholdingRate,
    WithholdingSchedule,
)


class _Document(BaseModel):
    model_config = ConfigDict(frozen=True, extra="forbid")


class BandDocument(_Document):
    lower: Decimal
    upper: Decimal | None = None
    rate: Decimal
    name: str = ""


class ConsolidatedReliefDocument(_Document):
    kind: Literal["consolidated"]
    minimum_percentage: Decimal
    base_amount: Decimal
    additional_percentage: Decimal
    key: str = "consolidated_relief"


class PersonalAllowanceDocument(_Document):
    kind: Literal["personal_allowance"]
    amount: Decimal
    taper_start: Decimal | None = None
    taper_ratio: Decimal = Decimal("0.5")
    key: str = "personal_allowance"


class ContributionReliefDocument(_Document):
    kind: Literal["contribution"]
    rate: Decimal
    key: str = "pension_contribution"


ReliefDocument = Annotated[
    Union[ConsolidatedReliefDocument, PersonalAllowanceDocument, ContributionReliefDocument],
    Field(discriminator="kind"),
]


class MinimumTaxBaseDocument(_Document):
    base: str
    rate: Decimal


class MinimumTaxDocument(_Document):
    candidates: list[MinimumTaxBaseDocument]
    threshold: Decimal | None = None
    threshold_base: str = "gross"


class MarginalReliefDocument(_Document):
    lower_threshold: Decimal
    upper_threshold: Decimal
    lower_rate: Decimal
    upper_rate: Decimal


class TierDocument(_Document):
    upper: Decimal | None = None
    rate: Decimal
    name: str = ""


class LevyDocument(_Document):
    name: str
    rate: Decimal
    base: str = "assessable_profit"
    threshold: Decimal | None = None


class BandedDocument(_Document):
    kind: Literal["banded"]
    bands: list[BandDocument]
    reliefs: list[ReliefDocument] = Field(default_factory=list)
    minimum_tax: MinimumTaxDocument | None = None


class CompanyDocument(_Document):
    kind: Literal["company"]
    marginal_relief: MarginalReliefDocument | None = None
    tiers: list[TierDocument] = Field(default_factory=list)
    tier_base: str = "turnover"
    minimum_tax: MinimumTaxDocument | None = None
    levies: list[LevyDocument] = Field(default_factory=list)


class ProportionalDocument(_Document):
    kind: Literal["proportional"]
    rates: dict[str, Decimal]
    default: str | None = None
    registration_threshold: Decimal | None = None


class WithholdingRateDocument(_Document):
    rate: Decimal
    description: str = ""


class WithholdingDocument(_Document):
    kind: Literal["withholding"]
    rates: dict[str, WithholdingRateDocument]
    exemption_threshold: Decimal = Decimal("0")
    final_tax_types: list[str] = Field(default_factory=list)


ScheduleDocument = Annotated[
    Union[BandedDocument, CompanyDocument, ProportionalDocument, WithholdingDocument],
    Field(discriminator="kind"),
]


class RateTableDocument(_Document):
    jurisdiction: str
    tax_year: str
    currency: str = ""
    description: str = ""
    schedules: dict[str, ScheduleDocument]


def _minimum_tax(doc: MinimumTaxDocument | None) -> MinimumTaxRule | None:
    if doc is None:
        return None
    return MinimumTaxRule(
        candidates=tuple(MinimumTaxBase(item.base, item.rate) for item in doc.candidates),
        threshold=doc.threshold,
        threshold_base=doc.threshold_base,
    )


def _relief(doc: Any) -> ReliefRule:
    if isinstance(doc, ConsolidatedReliefDocument):
        return ConsolidatedRelief(doc.minimum_percentage, doc.base_amount, doc.additional_percentage, key=doc.key)
    if isinstance(doc, PersonalAllowanceDocument):
        return PersonalAllowance(doc.amount, doc.taper_start, doc.taper_ratio, key=doc.key)
    return ContributionRelief(doc.rate, key=doc.key)


def _schedule(doc: Any) -> Schedule:
    if isinstance(doc, BandedDocument):
        return BandedSchedule(
            bands=tuple(TaxBand(b.lower, b.upper, b.rate, b.name) for b in doc.bands),
            reliefs=tuple(_relief(item) for item in doc.reliefs),
            minimum_tax=_minimum_tax(doc.minimum_tax),
        )
    if isinstance(doc, CompanyDocument):
        marginal = doc.marginal_relief
        return CompanySchedule(
            marginal_relief=MarginalRelief(**marginal.model_dump()) if marginal is not None else None,
            tiers=tuple(RateTier(t.upper, t.rate, t.name) for t in doc.tiers),
            tier_base=doc.tier_base,
            minimum_tax=_minimum_tax(doc.minimum_tax),
            levies=tuple(Levy(l.name, l.rate, l.base, l.threshold) for l in doc.levies),
        )
    if isinstance(doc, ProportionalDocument):
        return ProportionalSchedule(
            rates=doc.rates,
            default=doc.default,
            registration_threshold=doc.registration_threshold,
        )
    return WithholdingSchedule(
        rates={name: WithholdingRate(entry.rate, entry.description) for name, entry in doc.rates.items()},
        exemption_threshold=doc.exemption_threshold,
        final_tax_types=frozenset(doc.final_tax_types),
    )


def rate_table_from_mapping(data: Mapping[str, Any]) -> RateTable:
    try:
        document = RateTableDocument.model_validate(data)
    except ValidationError as exc:
        raise ConfigurationError(f"Invalid rate table document: {exc}") from exc
    return RateTable(
        jurisdiction=document.jurisdiction,
        tax_year=document.tax_year,
        currency=document.currency,
        description=document.description,
        schedules={name: _schedule(doc) for name, doc in document.schedules.items()},
    )


def load_rate_table(path: str | Path) -> RateTable:
    source = Path(path)
    try:
        payload = json.loads(source.read_text(encoding="utf-8"), parse_float=Decimal)
    except OSError as exc:
        raise ConfigurationError(f"Unable to read rate table {source}: {exc}") from exc
    except json.JSONDecodeError as exc:
        raise ConfigurationError(f"Rate table {source} is not valid JSON: {exc}") from exc
    if not isinstance(payload, dict):
        raise ConfigurationError(f"Rate table {source} must contain a JSON object")
    return rate_table_from_mapping(payload)


__all__ = ["RateTableDocument", "rate_table_from_mapping", "load_rate_table"]
