from __future__ import annotations


class TaxCalcError(Exception):
    """Base class for every error raised by the calculation engine."""


class ConfigurationError(TaxCalcError, ValueError):
    """A rate table is malformed. Raised while building or loading a table."""


class InvalidInputError(TaxCalcError, ValueError):
    """Caller supplied an amount or key the engine cannot calculate with."""

    def __init__(self, message: str, field: str | None = None) -> None:
        super().__init__(message)
        self.field = field


class UnknownRateTableError(InvalidInputError):
    pass


__all__ = [
    "TaxCalcError",
    "ConfigurationError",
    "InvalidInputError",
    "UnknownRateTableError",
]
