from concurrent.futures import ThreadPoolExecutor
from decimal import Decimal as D

import pytest

from taxcalc.core.engine import calculate_banded_tax
from taxcalc.core.errors import ConfigurationError, UnknownRateTableError
from taxcalc.rates import dispatch
from taxcalc.rates.dispatch import (
    default_rate_table,
    get_rate_table,
    list_rate_tables,
    register_rate_table,
    supported_jurisdictions,
    unregister_rate_table,
)
from tests.fixtures.rate_tables import make_rate_document, make_two_band_table

pytestmark = pytest.mark.usefixtures("fresh_settings")


@pytest.fixture
def scratch_table():
    table = make_two_band_table(jurisdiction="XX", tax_year="2030")
    register_rate_table(table)
    yield table
    if ("XX", "2030") in dispatch.registry_snapshot():
        unregister_rate_table("XX", "2030")


def test_builtin_tables_registered():
    assert get_rate_table("uk", "2024/25").currency == "GBP"
    assert get_rate_table("NG", 2026).currency == "NGN"
    assert {"NG", "UK"} <= set(supported_jurisdictions())


def test_unknown_table_raises():
    with pytest.raises(UnknownRateTableError) as excinfo:
        get_rate_table("UK", "1999/00")
    assert excinfo.value.field == "jurisdiction"


def test_list_rate_tables_filters_by_jurisdiction():
    tables = list_rate_tables("ng")
    assert [table.key for table in tables] == [("NG", "2026")]


def test_default_rate_table_follows_settings(monkeypatch):
    assert default_rate_table().key == ("UK", "2024/25")
    monkeypatch.setenv("TAXCALC_JURISDICTION", "ng")
    monkeypatch.setenv("TAXCALC_TAX_YEAR", "2026")
    dispatch.get_settings.cache_clear()
    assert default_rate_table().key == ("NG", "2026")


def test_register_without_replace_rejects_duplicates(scratch_table):
    with pytest.raises(ConfigurationError):
        register_rate_table(make_two_band_table(), replace=False)


def test_swap_leaves_existing_references_untouched(scratch_table):
    held = get_rate_table("XX", "2030")
    snapshot = dispatch.registry_snapshot()
    new_table = make_two_band_table(jurisdiction="XX", tax_year="2030")
    register_rate_table(new_table)

    assert held is scratch_table
    assert snapshot[("XX", "2030")] is scratch_table
    assert get_rate_table("XX", "2030") is new_table
    assert calculate_banded_tax("income_tax", 15000, held).total_tax == D("1000.00")


def test_concurrent_swaps_never_expose_partial_tables(scratch_table):
    alternates = [make_two_band_table(jurisdiction="XX", tax_year="2030") for _ in range(20)]

    def swap(table):
        register_rate_table(table)

    def calculate(_):
        table = get_rate_table("XX", "2030")
        return calculate_banded_tax("income_tax", 15000, table).total_tax

    with ThreadPoolExecutor(max_workers=8) as pool:
        swaps = [pool.submit(swap, table) for table in alternates]
        results = list(pool.map(calculate, range(200)))
        for future in swaps:
            future.result()
    assert set(results) == {D("1000.00")}


def test_unregister_missing_table_raises():
    with pytest.raises(UnknownRateTableError):
        unregister_rate_table("XX", "1900")


def test_rates_dir_loaded_on_first_use(monkeypatch, tmp_path):
    import json

    (tmp_path / "zz.json").write_text(json.dumps(make_rate_document("ZZ", "2031")), encoding="utf-8")
    monkeypatch.setenv("TAXCALC_RATES_DIR", str(tmp_path))
    dispatch.get_settings.cache_clear()
    try:
        table = get_rate_table("ZZ", "2031")
        assert table.currency == "ZZD"
        assert "ZZ" in supported_jurisdictions()
    finally:
        unregister_rate_table("ZZ", "2031")


def test_missing_rates_dir_is_configuration_error(tmp_path):
    with pytest.raises(ConfigurationError):
        dispatch.load_rate_directory(tmp_path / "absent")


def test_failed_rates_dir_load_is_retried(monkeypatch, tmp_path):
    import json

    table_file = tmp_path / "zz.json"
    table_file.write_text("{not json", encoding="utf-8")
    monkeypatch.setenv("TAXCALC_RATES_DIR", str(tmp_path))
    dispatch.get_settings.cache_clear()

    with pytest.raises(ConfigurationError):
        get_rate_table("ZZ", "2031")
    with pytest.raises(ConfigurationError):
        get_rate_table("ZZ", "2031")

    table_file.write_text(json.dumps(make_rate_document("ZZ", "2031")), encoding="utf-8")
    try:
        assert get_rate_table("ZZ", "2031").currency == "ZZD"
    finally:
        unregister_rate_table("ZZ", "2031")
