from __future__ import annotations

import re
from decimal import ROUND_HALF_UP, Decimal, InvalidOperation, localcontext
from typing import Any

from taxcalc.core.errors import InvalidInputError

D = Decimal

ZERO = D("0")
ONE = D("1")
# Products, band walks and cent rounding stay exact within the default 28 digit context.
MAX_MAGNITUDE = D("1E18")
_CENT = D("0.01")
_RATE_PLACES = D("0.000001")
_GROUPED = re.compile(r"^[+-]?\d{1,3}(,\d{3})+(\.\d*)?$")


def _parse(text: str, value: Any, field: str) -> D:
    if "," in text:
        if not _GROUPED.match(text):
            raise InvalidInputError(f"{field} must be a number, got {value!r}", field=field)
        text = text.replace(",", "")
    try:
        return D(text)
    except (InvalidOperation, ValueError) as exc:
        raise InvalidInputError(f"{field} must be a number, got {value!r}", field=field) from exc


def to_decimal(value: Any, field: str = "amount") -> D:
    """Coerce ``value`` to a finite Decimal, going through ``str`` for floats."""
    if isinstance(value, bool) or value is None:
        raise InvalidInputError(f"{field} must be a number, got {value!r}", field=field)
    if isinstance(value, D):
        result = value
    elif isinstance(value, (int, float, str)):
        result = _parse(str(value).strip(), value, field)
    else:
        raise InvalidInputError(f"{field} must be a number, got {type(value).__name__}", field=field)
    if not result.is_finite():
        raise InvalidInputError(f"{field} must be finite, got {value!r}", field=field)
    if abs(result) > MAX_MAGNITUDE:
        raise InvalidInputError(f"{field} must not exceed {MAX_MAGNITUDE:,.0f} in magnitude, got {value!r}", field=field)
    return result


def non_negative(value: Any, field: str = "amount") -> D:
    amount = to_decimal(value, field)
    if amount < 0:
        raise InvalidInputError(f"{field} cannot be negative, got {amount}", field=field)
    return amount


def round_cents(value: D) -> D:
    return value.quantize(_CENT, rounding=ROUND_HALF_UP)


def round_rate(value: D) -> D:
    return value.quantize(_RATE_PLACES, rounding=ROUND_HALF_UP)


def ratio(numerator: D, denominator: D) -> D:
    if denominator == 0:
        return round_rate(ZERO)
    quotient = numerator / denominator
    # a tiny base under a large floor can give a quotient wider than the context
    with localcontext() as ctx:
        ctx.prec = max(ctx.prec, quotient.adjusted() + 8)
        return round_rate(quotient)


__all__ = [
    "D",
    "ZERO",
    "ONE",
    "MAX_MAGNITUDE",
    "to_decimal",
    "non_negative",
    "round_cents",
    "round_rate",
    "ratio",
]
