from __future__ import annotations

import logging
import threading
from pathlib import Path
from types import MappingProxyType
from typing import Iterable, List, Mapping, Tuple

from taxcalc.config import get_settings
from taxcalc.core.errors import ConfigurationError, UnknownRateTableError
from taxcalc.core.tables import RateTable
from taxcalc.rates.loader import load_rate_table
from taxcalc.rates.ng2026 import NG_2026
from taxcalc.rates.uk2024 import UK_2024

logger = logging.getLogger("taxcalc").getChild("rates")

_Key = Tuple[str, str]

_LOCK = threading.Lock()
_REGISTRY: Mapping[_Key, RateTable] = MappingProxyType({})
_LOADED_DIRS: set[str] = set()


def _key(jurisdiction: str, tax_year: int | str) -> _Key:
    return (str(jurisdiction).strip().upper(), str(tax_year).strip())


def register_rate_table(table: RateTable, *, replace: bool = True) -> None:
    register_rate_tables((table,), replace=replace)


def register_rate_tables(tables: Iterable[RateTable], *, replace: bool = True) -> None:
    """Publish ``tables`` in one swap.

    Readers holding the previous mapping (or a table taken from it) keep a
    consistent view; the new mapping becomes visible all at once.
    """

    global _REGISTRY
    incoming = list(tables)
    for table in incoming:
        if not isinstance(table, RateTable):
            raise ConfigurationError(f"Expected RateTable, got {type(table).__name__}")
    with _LOCK:
        updated = dict(_REGISTRY)
        for table in incoming:
            if table.key in updated and not replace:
                raise ConfigurationError(f"Rate table already registered for {table.jurisdiction} {table.tax_year}")
            action = "Replacing" if table.key in updated else "Registering"
            logger.info("%s rate table %s %s", action, table.jurisdiction, table.tax_year)
            updated[table.key] = table
        _REGISTRY = MappingProxyType(updated)


def unregister_rate_table(jurisdiction: str, tax_year: int | str) -> None:
    global _REGISTRY
    key = _key(jurisdiction, tax_year)
    with _LOCK:
        if key not in _REGISTRY:
            raise UnknownRateTableError(
                f"No rate table registered for {key[0]} in {key[1]}", field="jurisdiction"
            )
        updated = dict(_REGISTRY)
        del updated[key]
        _REGISTRY = MappingProxyType(updated)
    logger.info("Removed rate table %s %s", key[0], key[1])


def load_rate_directory(directory: str | Path) -> list[RateTable]:
    path = Path(directory)
    if not path.is_dir():
        raise ConfigurationError(f"Rate table directory {path} does not exist")
    tables = [load_rate_table(item) for item in sorted(path.glob("*.json"))]
    register_rate_tables(tables)
    logger.info("Loaded %d rate table(s) from %s", len(tables), path)
    return tables


def _ensure_configured_tables() -> None:
    rates_dir = get_settings().rates_dir
    if rates_dir is None:
        return
    with _LOCK:
        if rates_dir in _LOADED_DIRS:
            return
    load_rate_directory(rates_dir)
    with _LOCK:
        _LOADED_DIRS.add(rates_dir)


def registry_snapshot() -> Mapping[_Key, RateTable]:
    _ensure_configured_tables()
    return _REGISTRY


def get_rate_table(jurisdiction: str, tax_year: int | str) -> RateTable:
    key = _key(jurisdiction, tax_year)
    try:
        return registry_snapshot()[key]
    except KeyError as exc:
        raise UnknownRateTableError(
            f"No rate table registered for {key[0]} in {key[1]}", field="jurisdiction"
        ) from exc


def list_rate_tables(jurisdiction: str | None = None) -> List[RateTable]:
    snapshot = registry_snapshot()
    target = jurisdiction.strip().upper() if jurisdiction else None
    return [
        table
        for key, table in sorted(snapshot.items())
        if target is None or key[0] == target
    ]


def supported_jurisdictions() -> list[str]:
    return sorted({key[0] for key in registry_snapshot()})


def default_rate_table() -> RateTable:
    settings = get_settings()
    return get_rate_table(settings.jurisdiction, settings.tax_year)


register_rate_tables((UK_2024, NG_2026))


__all__ = [
    "register_rate_table",
    "register_rate_tables",
    "unregister_rate_table",
    "load_rate_directory",
    "registry_snapshot",
    "get_rate_table",
    "list_rate_tables",
    "supported_jurisdictions",
    "default_rate_table",
]
