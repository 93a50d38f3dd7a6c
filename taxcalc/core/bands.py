from __future__ import annotations

from typing import Iterable

from taxcalc.core.models import BandContribution
from taxcalc.core.money import D, ZERO
from taxcalc.core.tables import TaxBand


def accumulate_bands(taxable: D, bands: Iterable[TaxBand]) -> tuple[D, tuple[BandContribution, ...]]:
    """Walk ``bands`` in order and return the unrounded tax plus one row per non-empty band.

    ``taxable`` must already be non-negative. Amounts sitting exactly on a
    boundary stay in the lower band because each band's share is capped at its
    upper bound.
    """
    tax = ZERO
    cumulative = ZERO
    rows: list[BandContribution] = []
    for band in bands:
        if cumulative >= taxable:
            break
        band_end = taxable if band.upper is None else min(band.upper, taxable)
        in_band = max(ZERO, band_end - cumulative)
        if in_band > 0:
            contribution = in_band * band.rate
            rows.append(BandContribution(band=band.name, amount=in_band, rate=band.rate, tax=contribution))
            tax += contribution
            cumulative += in_band
    return tax, tuple(rows)


__all__ = ["accumulate_bands"]
