# Store DRE - Store-level financial consolidation engine
# Copyright (c) 2025 Maxence Bernard (maxencebernardhub)
# Licensed under the MIT License. See LICENSE file for details.

"""
Command-Line Interface (CLI) for Store DRE.

The CLI is intentionally thin: it loads the configuration and the snapshot,
runs one reporting operation through a ReportService and prints the
resulting table. It does not implement any financial logic itself.


High-level pipeline
-------------------

1) Load the main TOML configuration (store_dre_config.toml by default)
   using ``load_app_config()``.
2) Configure logging (``--log-level`` overrides ``[logging].level``).
3) Load the snapshot CSV files described in ``[snapshot]``.
4) Determine the reporting period and the store filter.
5) Run the selected command and print its table(s).


Commands
--------

- ``dre``       : DRE report (revenue, expense, net result per store and
                  consolidated) for the selected period. Movements excluded
                  because of an unknown movement type are listed below
                  the report.
- ``mom``       : month-over-month comparison of the selected month with
                  the previous calendar month.
- ``ranking``   : lifetime ranking of every store (``--sort-by``).
- ``goals``     : progress of the monthly goals of the selected month.
- ``insights``  : store efficiency and payment method breakdown.
- ``reconcile`` : declared cash variation vs. movement-derived result for
                  each closing of the period.


Period and store selection
--------------------------

Period priority: ``--from-date/--to-date``, then ``--month/--year``, then
the current calendar month. ``mom`` and ``goals`` always work on a whole
calendar month.

Store filter: ``--store ID``; otherwise, for ``dre`` and ``mom`` only,
``[reporting].default_store`` and then the catalog's default store.
``--all-stores`` disables the default store.
"""

import argparse
import logging
import sys
from typing import Optional

import pandas as pd

from . import __version__
from .config import AppConfig, load_app_config
from .insights import build_payment_method_breakdown, build_store_efficiency
from .io import load_snapshot
from .models import find_default_store
from .periods import Period, determine_period_from_args, filter_closings_by_period
from .rankings import RANKING_SORT_KEYS, sort_rankings
from .service import ReportService
from .totals import reconcile_closing
from .views import (
    configuration_errors_to_dataframe,
    dre_to_dataframe,
    efficiency_to_dataframe,
    goals_to_dataframe,
    mom_to_dataframe,
    payment_breakdown_to_dataframe,
    rankings_to_dataframe,
    reconciliations_to_dataframe,
)

logger = logging.getLogger(__name__)

LOG_FORMAT = "%(asctime)s - %(name)s - %(levelname)s - %(message)s"


def _add_period_arguments(parser: argparse.ArgumentParser) -> None:
    parser.add_argument(
        "--month",
        type=int,
        choices=range(1, 13),
        metavar="MONTH",
        help="Calendar month (1-12). Defaults to the current month.",
    )
    parser.add_argument(
        "--year",
        type=int,
        help="Calendar year. Defaults to the current year.",
    )


def _add_window_arguments(parser: argparse.ArgumentParser) -> None:
    _add_period_arguments(parser)
    parser.add_argument(
        "--from-date",
        dest="from_date",
        help=(
            "Custom period start date (YYYY-MM-DD). If provided without "
            "--to-date, the end of the selected month is used."
        ),
    )
    parser.add_argument(
        "--to-date",
        dest="to_date",
        help=(
            "Custom period end date (YYYY-MM-DD). If provided without "
            "--from-date, the start of the selected month is used."
        ),
    )


def _add_store_argument(
    parser: argparse.ArgumentParser, with_default: bool = False
) -> None:
    parser.add_argument(
        "--store",
        dest="store_id",
        help="Restrict the report to one store id.",
    )
    if with_default:
        parser.add_argument(
            "--all-stores",
            action="store_true",
            help="Ignore the configured default store and report on all stores.",
        )


def _build_parser() -> argparse.ArgumentParser:
    """Create and configure the argument parser for the CLI."""
    ap = argparse.ArgumentParser(
        prog="python -m store_dre.cli",
        description=(
            "Store DRE - Store-level financial consolidation engine. "
            "Reads daily store closings and renders DRE reports, "
            "month-over-month comparisons, rankings and goal progress."
        ),
    )

    # Generic options
    ap.add_argument(
        "--version",
        action="store_true",
        help="Show the installed version of store_dre and exit.",
    )
    ap.add_argument(
        "--config",
        dest="config_path",
        help=(
            "Path to the main TOML configuration file. "
            "If omitted, 'store_dre_config.toml' in the current directory is used."
        ),
    )
    ap.add_argument(
        "--log-level",
        dest="log_level",
        choices=["DEBUG", "INFO", "WARNING", "ERROR", "CRITICAL"],
        help="Override the [logging].level setting from the configuration file.",
    )

    subparsers = ap.add_subparsers(dest="command", metavar="command")

    dre_parser = subparsers.add_parser(
        "dre", help="DRE report (revenue, expense, net result) for a period."
    )
    _add_window_arguments(dre_parser)
    _add_store_argument(dre_parser, with_default=True)

    mom_parser = subparsers.add_parser(
        "mom", help="Compare a calendar month with the previous one."
    )
    _add_period_arguments(mom_parser)
    _add_store_argument(mom_parser, with_default=True)

    ranking_parser = subparsers.add_parser(
        "ranking", help="Lifetime ranking of every store."
    )
    ranking_parser.add_argument(
        "--sort-by",
        dest="sort_by",
        choices=RANKING_SORT_KEYS,
        default="total_revenue",
        help="Metric used to rank stores (descending). Default: total_revenue.",
    )

    goals_parser = subparsers.add_parser(
        "goals", help="Progress of the monthly revenue goals."
    )
    _add_period_arguments(goals_parser)
    _add_store_argument(goals_parser)

    insights_parser = subparsers.add_parser(
        "insights", help="Store efficiency and payment method breakdown."
    )
    _add_window_arguments(insights_parser)
    _add_store_argument(insights_parser)

    reconcile_parser = subparsers.add_parser(
        "reconcile",
        help="Compare declared cash variation with recorded movements.",
    )
    _add_window_arguments(reconcile_parser)
    _add_store_argument(reconcile_parser)
    reconcile_parser.add_argument(
        "--only-unbalanced",
        action="store_true",
        help="Only list closings whose difference exceeds the tolerance.",
    )

    return ap


def _resolve_store_filter(
    args: argparse.Namespace, config: AppConfig, service: ReportService
) -> Optional[str]:
    """Return the store id to filter on, or None for all stores."""
    if args.store_id:
        return args.store_id
    if getattr(args, "all_stores", True):
        return None
    if config.default_store:
        return config.default_store
    default = find_default_store(service.snapshot.stores)
    return default.id if default is not None else None


def _print_table(title: str, df: pd.DataFrame, empty_message: str) -> None:
    print()
    print(title)
    if df.empty:
        print(empty_message)
        return
    print(df.to_string(index=False))


def _handle_dre(args, config: AppConfig, service: ReportService) -> None:
    period = determine_period_from_args(args)
    store_id = _resolve_store_filter(args, config, service)

    report = service.build_dre_report(period.start, period.end, store_id=store_id)
    df = dre_to_dataframe(report, config.decimals)
    _print_table(
        f"DRE {report.period} ({config.currency})",
        df,
        "No closings found for the given period.",
    )

    if report.configuration_errors:
        _print_table(
            "Configuration errors: movements excluded from the totals "
            "(unknown movement type)",
            configuration_errors_to_dataframe(
                report.configuration_errors, config.decimals
            ),
            "",
        )


def _handle_mom(args, config: AppConfig, service: ReportService) -> None:
    period = determine_period_from_args(args)
    store_id = _resolve_store_filter(args, config, service)
    month, year = period.start.month, period.start.year

    rows = service.build_month_over_month_report(month, year, store_id=store_id)
    df = mom_to_dataframe(rows, config.decimals)
    _print_table(
        f"Month over month {month:02d}/{year} ({config.currency})",
        df,
        "No closings found for the given month.",
    )


def _handle_ranking(args, config: AppConfig, service: ReportService) -> None:
    ranked = sort_rankings(service.build_store_rankings(), args.sort_by)
    df = rankings_to_dataframe(ranked, config.decimals)
    _print_table(
        f"Store ranking by {args.sort_by} ({config.currency})",
        df,
        "No stores in the catalog.",
    )


def _handle_goals(args, config: AppConfig, service: ReportService) -> None:
    period = determine_period_from_args(args)
    month, year = period.start.month, period.start.year

    progress = service.goals_progress(month, year)
    if args.store_id:
        progress = [p for p in progress if p.goal.store_id == args.store_id]

    df = goals_to_dataframe(progress, service.snapshot.stores, config.decimals)
    _print_table(
        f"Goals {month:02d}/{year} ({config.currency})",
        df,
        "No goals defined for the given month.",
    )


def _handle_insights(args, config: AppConfig, service: ReportService) -> None:
    period = determine_period_from_args(args)
    snapshot = service.snapshot

    report = service.build_dre_report(
        period.start, period.end, store_id=args.store_id
    )
    efficiency = build_store_efficiency(report)
    breakdown = build_payment_method_breakdown(
        snapshot.closings,
        snapshot.payment_methods,
        period.start,
        period.end,
        store_id=args.store_id,
    )

    _print_table(
        f"Store efficiency {period.label}",
        efficiency_to_dataframe(efficiency, config.decimals),
        "No closings found for the given period.",
    )
    _print_table(
        f"Payment methods {period.label} ({config.currency})",
        payment_breakdown_to_dataframe(breakdown, config.decimals),
        "No movements found for the given period.",
    )


def _handle_reconcile(args, config: AppConfig, service: ReportService) -> None:
    period: Period = determine_period_from_args(args)
    closings = filter_closings_by_period(
        service.snapshot.closings, period, store_id=args.store_id
    )

    results = [reconcile_closing(c) for c in closings]
    unbalanced = [r for r in results if not r.is_balanced]
    if unbalanced:
        logger.warning(
            "%d of %d closings are not balanced in %s",
            len(unbalanced),
            len(results),
            period.label,
        )
    if args.only_unbalanced:
        results = unbalanced

    _print_table(
        f"Closing reconciliation {period.label} ({config.currency})",
        reconciliations_to_dataframe(results, config.decimals),
        "No closings to reconcile for the given period.",
    )


_HANDLERS = {
    "dre": _handle_dre,
    "mom": _handle_mom,
    "ranking": _handle_ranking,
    "goals": _handle_goals,
    "insights": _handle_insights,
    "reconcile": _handle_reconcile,
}


def main(argv: Optional[list[str]] = None) -> None:
    """Entry point for the Store DRE CLI.

    Parses command-line arguments, loads the configuration and the snapshot,
    runs the selected command and prints its result as console tables.
    """
    parser = _build_parser()
    args = parser.parse_args(argv)

    # --version: short-circuit and exit early.
    if args.version:
        print(f"store_dre version {__version__}")
        return

    if not args.command:
        parser.error("a command is required (" + ", ".join(_HANDLERS) + ").")

    # 1) Load application configuration
    try:
        config = load_app_config(args.config_path)
    except (FileNotFoundError, ValueError) as exc:
        parser.error(str(exc))

    # 2) Logging
    logging.basicConfig(
        level=args.log_level or config.log_level,
        format=LOG_FORMAT,
        datefmt="%Y-%m-%d %H:%M:%S",
    )

    # 3) Snapshot
    try:
        snapshot = load_snapshot(config.snapshot)
    except (FileNotFoundError, ValueError) as exc:
        print(f"Error while loading the snapshot: {exc}", file=sys.stderr)
        sys.exit(1)

    service = ReportService(snapshot, cache_size=config.cache_size)

    # 4) Run the selected command
    try:
        _HANDLERS[args.command](args, config, service)
    except ValueError as exc:
        parser.error(str(exc))


if __name__ == "__main__":
    main()
