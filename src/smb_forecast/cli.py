# SMB Forecast - Financial Dashboard & Forecasting for SMBs
# Copyright (c) 2025 Maxence Bernard (maxencebernardhub)
# Licensed under the MIT License. See LICENSE file for details.

"""
Command-Line Interface (CLI) for SMB Forecast.

This module wires together the main building blocks of SMB Forecast:

- application configuration (actuals source, forecast settings, overrides),
- the actuals provider (CSV or seeded sample data),
- baseline derivation,
- scenario modifications (explicit or resolved from text),
- the projection engine,
- summaries and statement views.

The CLI is intentionally thin: it does not implement any financial logic
itself.


Commands
--------

``actuals [--year YEAR] [--view VIEW]``
    Print the monthly statements of one calendar year (latest by default)
    and the year's totals.

``baseline``
    Print the baseline assumptions derived from the trailing window of
    actuals, after applying the [assumptions] overrides of the config.

``forecast [--mod SPEC]... [--ask TEXT] [--view VIEW] [--output CSV]``
    Build a scenario and print the 12-month forecast, its totals and the
    net income variance against the trailing twelve actual months.

    SPEC is ``KIND:CATEGORY:ITEM:VALUE[:YYYY-MM]``, for example:

        --mod percentage:cogs:packaging:-15
        --mod fixed:expenses.labor:wages:500:2025-08

    ``--ask`` runs the offline rule-based resolver on free text
    ("use cheaper packaging", "hire two cooks"). When the resolver needs
    clarification and no explicit --mod is given, its question is printed
    instead of a forecast.


Configuration
-------------

By default the CLI reads ``smb_forecast_config.toml`` in the current
directory; use ``--config PATH`` to point elsewhere. When no file is found
the CLI falls back to sample data and default settings. ``--actuals CSV``
overrides the configured actuals file for one run.

Engine errors (insufficient history, unknown targets, out-of-range
parameters) are reported as usage errors.
"""

import argparse
import logging
from pathlib import Path
from typing import Optional

import pandas as pd

from . import __version__
from .baseline import assumptions_to_frame, derive_baseline
from .config import (
    DEFAULT_CONFIG_FILE,
    AppConfig,
    default_app_config,
    load_app_config,
)
from .errors import ForecastError
from .io import write_series
from .modifications import (
    Modification,
    Scenario,
    make_modification,
    modifications_to_frame,
)
from .projection import project
from .provider import ActualsProvider
from .resolver import RuleBasedResolver
from .series import month_start
from .summary import series_totals, variance_vs_actuals
from .views import VIEW_LEVELS, series_view


def _build_parser() -> argparse.ArgumentParser:
    """Create and configure the argument parser for the CLI."""
    ap = argparse.ArgumentParser(
        prog="python -m smb_forecast.cli",
        description=(
            "SMB Forecast - Financial Dashboard & Forecasting for SMBs. "
            "Renders monthly actuals and projects a 12-month forecast that "
            "can be adjusted with scenario modifications."
        ),
    )

    ap.add_argument(
        "--version",
        action="store_true",
        help="Show the installed version of smb_forecast and exit.",
    )
    ap.add_argument(
        "--config",
        dest="config_path",
        help=(
            "Path to the main TOML configuration file. If omitted, "
            f"'{DEFAULT_CONFIG_FILE}' in the current directory is used when "
            "present; otherwise sample data and defaults are used."
        ),
    )
    ap.add_argument(
        "--actuals",
        dest="actuals_path",
        metavar="CSV_PATH",
        help="Read actuals from this CSV file instead of the configured source.",
    )
    ap.add_argument(
        "--verbose",
        action="store_true",
        help="Enable debug logging.",
    )

    subparsers = ap.add_subparsers(dest="command")

    actuals = subparsers.add_parser("actuals", help="Show monthly actuals.")
    actuals.add_argument(
        "--year",
        type=int,
        help="Calendar year to display (defaults to the most recent year).",
    )
    actuals.add_argument(
        "--view",
        choices=list(VIEW_LEVELS),
        default="regular",
        help="Level of detail of the statement table (default: regular).",
    )

    subparsers.add_parser("baseline", help="Show derived baseline assumptions.")

    forecast = subparsers.add_parser("forecast", help="Project the next 12 months.")
    forecast.add_argument(
        "--mod",
        dest="mods",
        action="append",
        default=[],
        metavar="SPEC",
        help="Modification KIND:CATEGORY:ITEM:VALUE[:YYYY-MM] (repeatable).",
    )
    forecast.add_argument(
        "--ask",
        metavar="TEXT",
        help="Free-text scenario resolved by the rule-based resolver.",
    )
    forecast.add_argument(
        "--view",
        choices=list(VIEW_LEVELS),
        default="simplified",
        help="Level of detail of the forecast table (default: simplified).",
    )
    forecast.add_argument(
        "--output",
        metavar="CSV_PATH",
        help="Write the forecast series to this CSV file.",
    )

    return ap


def parse_modification_spec(spec: str) -> Modification:
    """Parse 'KIND:CATEGORY:ITEM:VALUE[:YYYY-MM]' into a Modification.

    Raises:
        ValueError: for malformed specs (TargetNotFound for unknown targets).
    """
    parts = spec.split(":")
    if len(parts) not in (4, 5):
        raise ValueError(
            f"Invalid modification {spec!r}, "
            "expected KIND:CATEGORY:ITEM:VALUE[:YYYY-MM]."
        )
    kind, category, item, raw_value = parts[:4]
    try:
        value = float(raw_value)
    except ValueError as exc:
        raise ValueError(f"Invalid modification value in {spec!r}.") from exc
    start = month_start(parts[4]) if len(parts) == 5 else None
    return make_modification(
        kind.strip().lower(), category, item, value, start_date=start
    )


def _load_config(args: argparse.Namespace) -> AppConfig:
    if args.config_path:
        return load_app_config(args.config_path)
    if Path(DEFAULT_CONFIG_FILE).is_file():
        return load_app_config()
    return default_app_config()


def _build_provider(args: argparse.Namespace, config: AppConfig) -> ActualsProvider:
    tax_rate = config.forecast.tax_rate
    actuals_path: Optional[Path] = (
        Path(args.actuals_path) if args.actuals_path else config.data.actuals
    )
    if actuals_path is not None:
        return ActualsProvider.from_csv(actuals_path, tax_rate=tax_rate)
    return ActualsProvider.from_sample(
        start=config.data.sample_start,
        end=config.data.sample_end,
        seed=config.data.sample_seed,
        tax_rate=tax_rate,
    )


def _print_frame(df: pd.DataFrame, decimals: int) -> None:
    print()
    print(df.round(decimals).to_string(index=False))


def _handle_actuals(
    args: argparse.Namespace, config: AppConfig, provider: ActualsProvider
) -> None:
    years = provider.years()
    if not years:
        print("No actuals available.")
        return
    year = args.year if args.year is not None else years[0]
    series = provider.for_year(year)
    if not series:
        print(f"No actuals for {year}. Available years: {', '.join(map(str, years))}.")
        return

    print(f"{config.company_name} - actuals {year} ({config.currency})")
    _print_frame(series_view(series, view=args.view), config.decimals)

    totals = series_totals(series)
    print()
    print(
        f"Revenue: {totals.revenue:,.2f} | Gross profit: {totals.gross_profit:,.2f} "
        f"({totals.gross_margin_pct:.1f}%) | Net income: {totals.net_income:,.2f} "
        f"({totals.net_margin_pct:.1f}%)"
    )


def _handle_baseline(config: AppConfig, provider: ActualsProvider) -> None:
    assumptions = derive_baseline(
        provider.actuals,
        window=config.forecast.window,
        allow_flat_growth=config.forecast.allow_flat_growth,
    ).with_overrides(config.assumption_overrides)

    print(
        f"Baseline assumptions from the last {assumptions.window_size} month(s) "
        f"of actuals ({provider.source})"
    )
    _print_frame(assumptions_to_frame(assumptions), 4)


def _handle_forecast(
    args: argparse.Namespace, config: AppConfig, provider: ActualsProvider
) -> None:
    scenario = Scenario(parse_modification_spec(spec) for spec in args.mods)

    if args.ask:
        result = RuleBasedResolver(provider.trailing(config.forecast.window)).resolve(
            args.ask
        )
        if result.is_question:
            print(result.question)
            if not len(scenario):
                return
        else:
            scenario.extend(result.modifications)

    assumptions = derive_baseline(
        provider.actuals,
        window=config.forecast.window,
        allow_flat_growth=config.forecast.allow_flat_growth,
    ).with_overrides(config.assumption_overrides)

    forecast = project(
        provider.actuals,
        assumptions,
        scenario.modifications,
        horizon=config.forecast.horizon,
        tax_rate=config.forecast.tax_rate,
    )

    if len(scenario):
        print("Scenario:")
        scenario_df = modifications_to_frame(scenario)
        _print_frame(
            scenario_df[["kind", "category", "item", "value", "unit", "start_date"]],
            config.decimals,
        )
        for m in scenario:
            print(f"  - {m.description}")
            if m.explanation:
                print(f"    {m.explanation}")
    else:
        print("Scenario: baseline (no modification)")

    print()
    print(
        f"{config.company_name} - forecast {forecast[0].date:%Y-%m} to "
        f"{forecast[-1].date:%Y-%m} ({config.currency})"
    )
    _print_frame(series_view(forecast, view=args.view), config.decimals)

    totals = series_totals(forecast)
    print()
    print(
        f"Forecast revenue: {totals.revenue:,.2f} | Gross profit: "
        f"{totals.gross_profit:,.2f} ({totals.gross_margin_pct:.1f}%) | "
        f"Net income: {totals.net_income:,.2f} ({totals.net_margin_pct:.1f}%)"
    )
    _print_frame(variance_vs_actuals(provider.actuals, forecast), config.decimals)

    if args.output:
        write_series(forecast, args.output, decimals=config.decimals)
        print()
        print(f"Forecast written to {args.output}")


def main(argv: Optional[list[str]] = None) -> None:
    """Entry point for the SMB Forecast CLI.

    Parses command-line arguments, loads the configuration, builds the
    actuals provider once and dispatches to the requested command.
    """
    parser = _build_parser()
    args = parser.parse_args(argv)

    if args.version:
        print(f"smb_forecast version {__version__}")
        return

    if args.verbose:
        logging.basicConfig(
            level=logging.DEBUG, format="%(levelname)s %(name)s: %(message)s"
        )

    try:
        config = _load_config(args)
        provider = _build_provider(args, config)

        if args.command == "actuals":
            _handle_actuals(args, config, provider)
        elif args.command == "baseline":
            _handle_baseline(config, provider)
        elif args.command == "forecast":
            _handle_forecast(args, config, provider)
        else:
            parser.print_help()
    except (ForecastError, KeyError, ValueError, FileNotFoundError) as exc:
        parser.error(str(exc))


if __name__ == "__main__":
    main()
