from __future__ import annotations

import argparse
import json
import os
import sys
from decimal import Decimal
from typing import Any, Literal, Sequence

from rich.console import Console
from rich.table import Table

from taxcalc.config import get_settings
from taxcalc.core.engine import (
    calculate_banded_tax,
    calculate_flat_or_tiered_tax,
    calculate_proportional_tax,
    calculate_vat_return,
    calculate_withholding,
)
from taxcalc.core.errors import TaxCalcError
from taxcalc.core.models import CalculationResult, VatReturn
from taxcalc.core.tables import RateTable
from taxcalc.logs import configure_logging, get_logger
from taxcalc.rates.dispatch import get_rate_table, list_rate_tables, register_rate_table
from taxcalc.rates.loader import load_rate_table

logger = get_logger("cli")

ColorPreference = Literal["auto", "always", "never"]

EXIT_INPUT_ERROR = 2


def _key_value(text: str) -> tuple[str, str]:
    key, sep, value = text.partition("=")
    if not sep or not key.strip():
        raise argparse.ArgumentTypeError(f"expected KEY=AMOUNT, got {text!r}")
    return key.strip(), value.strip()


def _parse_args(argv: Sequence[str] | None = None) -> argparse.Namespace:
    settings = get_settings()
    parser = argparse.ArgumentParser(
        prog="taxcalc",
        description="Calculate taxes from a registered or file-based rate table.",
    )
    parser.add_argument("--jurisdiction", help=f"Jurisdiction code (default: {settings.jurisdiction}).")
    parser.add_argument("--year", help=f"Tax year label (default: {settings.tax_year}).")
    parser.add_argument("--rates-file", help="Path to a JSON rate table to use instead of the registry.")
    parser.add_argument("--format", choices=["json", "table"], default="table", help="Output format.")
    parser.add_argument(
        "--color",
        choices=["auto", "always", "never"],
        default="auto",
        help="Color output preference (default: auto).",
    )
    parser.add_argument(
        "--no-color",
        dest="color",
        action="store_const",
        const="never",
        help="Alias for --color never.",
    )
    parser.add_argument("--log-level", default=settings.log_level, help="Logging verbosity.")
    parser.add_argument("--log-file", default=settings.log_file, help="Optional log file path.")

    commands = parser.add_subparsers(dest="command", required=True)

    banded = commands.add_parser("banded", help="Income tax, national insurance or PAYE.")
    banded.add_argument("tax_type")
    banded.add_argument("gross")
    banded.add_argument(
        "--override",
        action="append",
        type=_key_value,
        default=[],
        metavar="RELIEF=AMOUNT",
        help="Replace a computed relief with a fixed amount (repeatable).",
    )
    banded.add_argument("--pension", help="Pension contribution amount.")

    company = commands.add_parser("company", help="Corporation / companies income tax.")
    company.add_argument("tax_type")
    company.add_argument("profit")
    company.add_argument(
        "--base",
        action="append",
        type=_key_value,
        default=[],
        metavar="NAME=AMOUNT",
        help="Auxiliary base such as turnover=30000000 (repeatable).",
    )

    vat = commands.add_parser("vat", help="Proportional tax on a net amount.")
    vat.add_argument("amount")
    vat.add_argument("--category", help="Rate category (default: the table's default).")
    vat.add_argument("--tax-type", default="vat")

    vat_return = commands.add_parser("vat-return", help="Net output VAT against input VAT.")
    vat_return.add_argument("output_sales")
    vat_return.add_argument("input_purchases")
    vat_return.add_argument("--zero-rated", default="0")
    vat_return.add_argument("--exempt", default="0")
    vat_return.add_argument("--category")
    vat_return.add_argument("--tax-type", default="vat")

    withholding = commands.add_parser("withholding", help="Withholding tax on a payment.")
    withholding.add_argument("payment_type")
    withholding.add_argument("amount")
    withholding.add_argument("--tax-type", default="wht")

    commands.add_parser("tables", help="List registered rate tables.")
    return parser.parse_args(argv)


def _resolve_color_preference(pref: ColorPreference) -> ColorPreference:
    if pref == "auto" and os.getenv("NO_COLOR"):
        return "never"
    return pref


def _get_console(pref: ColorPreference) -> Console:
    resolved = _resolve_color_preference(pref)
    return Console(force_terminal=resolved == "always", no_color=resolved == "never", highlight=False)


def _json_default(value: Any) -> Any:
    if isinstance(value, Decimal):
        return str(value)
    raise TypeError(f"Object of type {type(value).__name__} is not JSON serializable")


def _resolve_table(args: argparse.Namespace) -> RateTable:
    if args.rates_file:
        table = load_rate_table(args.rates_file)
        register_rate_table(table)
        return table
    settings = get_settings()
    return get_rate_table(args.jurisdiction or settings.jurisdiction, args.year or settings.tax_year)


def _run(args: argparse.Namespace) -> CalculationResult | VatReturn | list[RateTable]:
    if args.command == "tables":
        return list_rate_tables()
    table = _resolve_table(args)
    if args.command == "banded":
        options: dict[str, Any] = {}
        if args.override:
            options["overrides"] = dict(args.override)
        if args.pension is not None:
            options["pension_contribution"] = args.pension
        return calculate_banded_tax(args.tax_type, args.gross, table, options or None)
    if args.command == "company":
        return calculate_flat_or_tiered_tax(args.tax_type, args.profit, table, dict(args.base) or None)
    if args.command == "vat":
        return calculate_proportional_tax(args.amount, args.category, table, tax_type=args.tax_type)
    if args.command == "vat-return":
        return calculate_vat_return(
            table,
            args.output_sales,
            args.input_purchases,
            args.zero_rated,
            args.exempt,
            rate_selector=args.category,
            tax_type=args.tax_type,
        )
    return calculate_withholding(args.payment_type, args.amount, table, tax_type=args.tax_type)


def _tables_payload(tables: list[RateTable]) -> list[dict[str, Any]]:
    return [
        {
            "jurisdiction": table.jurisdiction,
            "tax_year": table.tax_year,
            "currency": table.currency,
            "tax_types": list(table.tax_types),
            "description": table.description,
        }
        for table in tables
    ]


def _print_json(outcome: CalculationResult | VatReturn | list[RateTable]) -> None:
    payload = _tables_payload(outcome) if isinstance(outcome, list) else outcome.to_dict()
    print(json.dumps(payload, indent=2, default=_json_default))


def _print_result(console: Console, result: CalculationResult) -> None:
    summary = Table(title=f"{result.tax_type} ({result.description})", expand=False)
    summary.add_column("Field")
    summary.add_column("Value", justify="right")
    for name in ("gross_amount", "relief", "taxable_amount", "total_tax", "net_amount", "effective_rate"):
        summary.add_row(name, str(getattr(result, name)))
    if result.rate is not None:
        summary.add_row("rate", str(result.rate))
    if result.minimum_tax_applied:
        summary.add_row("minimum_tax_applied", "yes")
    if result.marginal_relief_applied:
        summary.add_row("marginal_relief_applied", "yes")
    if result.exempt or result.final_tax:
        summary.add_row("exempt", "yes" if result.exempt else "no")
        summary.add_row("final_tax", "yes" if result.final_tax else "no")
    for name, value in result.details.items():
        summary.add_row(name, str(value))
    console.print(summary)
    if not result.breakdown:
        return
    bands = Table(title="Breakdown", expand=False)
    for column in ("Band", "Amount", "Rate", "Tax"):
        bands.add_column(column, justify="left" if column == "Band" else "right")
    for row in result.breakdown:
        bands.add_row(row.band, str(row.amount), str(row.rate), str(row.tax.quantize(Decimal("0.01"))))
    console.print(bands)


def _print_vat_return(console: Console, vat_return: VatReturn) -> None:
    table = Table(title="VAT return", expand=False)
    table.add_column("Field")
    table.add_column("Value", justify="right")
    for name, value in vat_return.to_dict().items():
        if isinstance(value, bool):
            value = "yes" if value else "no"
        table.add_row(name, "-" if value is None else str(value))
    console.print(table)


def _print_tables(console: Console, tables: list[RateTable]) -> None:
    table = Table(title="Registered rate tables", expand=False)
    for column in ("Jurisdiction", "Tax year", "Currency", "Tax types"):
        table.add_column(column)
    for entry in tables:
        table.add_row(entry.jurisdiction, entry.tax_year, entry.currency, ", ".join(entry.tax_types))
    console.print(table)


def main(argv: Sequence[str] | None = None) -> int:
    args = _parse_args(argv)
    configure_logging(args.log_level, args.log_file)
    try:
        outcome = _run(args)
    except TaxCalcError as exc:
        logger.info("Rejected %s request: %s", args.command, exc)
        field = getattr(exc, "field", None)
        prefix = f"error ({field})" if field else "error"
        print(f"{prefix}: {exc}", file=sys.stderr)
        return EXIT_INPUT_ERROR

    if args.format == "json":
        _print_json(outcome)
        return 0
    console = _get_console(args.color)
    if isinstance(outcome, list):
        _print_tables(console, outcome)
    elif isinstance(outcome, VatReturn):
        _print_vat_return(console, outcome)
    else:
        _print_result(console, outcome)
    return 0


if __name__ == "__main__":  # pragma: no cover
    raise SystemExit(main())
