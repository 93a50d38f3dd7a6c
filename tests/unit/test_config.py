import logging

import pytest
from pydantic import ValidationError

from taxcalc.config import Settings, get_settings

pytestmark = pytest.mark.usefixtures("fresh_settings")


def test_defaults(monkeypatch):
    for name in ("TAXCALC_JURISDICTION", "TAXCALC_TAX_YEAR", "TAXCALC_RATES_DIR", "TAXCALC_LOG_LEVEL", "TAXCALC_LOG_FILE"):
        monkeypatch.delenv(name, raising=False)
    settings = Settings()
    assert settings.jurisdiction == "UK"
    assert settings.tax_year == "2024/25"
    assert settings.rates_dir is None
    assert settings.log_level == "WARNING"
    assert settings.logging_level() == logging.WARNING


def test_environment_overrides(monkeypatch):
    monkeypatch.setenv("TAXCALC_JURISDICTION", " ng ")
    monkeypatch.setenv("TAXCALC_TAX_YEAR", "2026")
    monkeypatch.setenv("TAXCALC_LOG_LEVEL", "debug")
    monkeypatch.setenv("TAXCALC_RATES_DIR", "   ")
    get_settings.cache_clear()
    settings = get_settings()
    assert settings.jurisdiction == "NG"
    assert settings.tax_year == "2026"
    assert settings.log_level == "DEBUG"
    assert settings.logging_level() == logging.DEBUG
    assert settings.rates_dir is None
    assert get_settings() is settings


def test_unknown_log_level_rejected(monkeypatch):
    monkeypatch.setenv("TAXCALC_LOG_LEVEL", "chatty")
    with pytest.raises(ValidationError):
        Settings()


def test_settings_are_frozen():
    settings = Settings()
    with pytest.raises(ValidationError):
        settings.jurisdiction = "NG"  # type: ignore[misc]
