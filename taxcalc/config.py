from __future__ import annotations

import logging
import os
from functools import lru_cache

from pydantic import BaseModel, ConfigDict, Field, field_validator

DEFAULT_JURISDICTION = "UK"
DEFAULT_TAX_YEAR = "2024/25"
LOG_LEVELS = {"CRITICAL", "ERROR", "WARNING", "INFO", "DEBUG"}


def _env_optional(name: str) -> str | None:
    value = os.getenv(name)
    if value is None or not value.strip():
        return None
    return value.strip()


class Settings(BaseModel):
    jurisdiction: str = Field(default_factory=lambda: os.getenv("TAXCALC_JURISDICTION", DEFAULT_JURISDICTION))
    tax_year: str = Field(default_factory=lambda: os.getenv("TAXCALC_TAX_YEAR", DEFAULT_TAX_YEAR))
    rates_dir: str | None = Field(default_factory=lambda: _env_optional("TAXCALC_RATES_DIR"))
    log_level: str = Field(default_factory=lambda: os.getenv("TAXCALC_LOG_LEVEL", "WARNING"))
    log_file: str | None = Field(default_factory=lambda: _env_optional("TAXCALC_LOG_FILE"))

    model_config = ConfigDict(frozen=True, validate_default=True)

    @field_validator("jurisdiction", mode="before")
    @classmethod
    def _normalize_jurisdiction(cls, value: str) -> str:
        normalized = (value or DEFAULT_JURISDICTION).strip().upper()
        if not normalized:
            raise ValueError("TAXCALC_JURISDICTION must not be blank")
        return normalized

    @field_validator("tax_year", mode="before")
    @classmethod
    def _normalize_year(cls, value: str | int) -> str:
        normalized = str(value or DEFAULT_TAX_YEAR).strip()
        if not normalized:
            raise ValueError("TAXCALC_TAX_YEAR must not be blank")
        return normalized

    @field_validator("log_level", mode="before")
    @classmethod
    def _normalize_level(cls, value: str) -> str:
        upper = (value or "WARNING").strip().upper()
        if upper not in LOG_LEVELS:
            raise ValueError(f"TAXCALC_LOG_LEVEL must be one of {sorted(LOG_LEVELS)}, got {upper}")
        return upper

    def logging_level(self) -> int:
        return getattr(logging, self.log_level)


@lru_cache(maxsize=1)
def get_settings() -> Settings:
    return Settings()
