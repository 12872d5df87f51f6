"""Command-line interface for serving the API and inspecting expense statistics."""

from __future__ import annotations

import argparse
import os
from collections.abc import Iterable
from pathlib import Path

import pandas as pd

from business_tracker import __version__
from business_tracker.config import CONFIG_ENV, ConfigError, Settings, load_settings
from business_tracker.engine.frames import category_frame, quarterly_frame, yearly_frame
from business_tracker.engine.logging import configure_cli_logging, setup_logger
from business_tracker.utils.io import write_csv

DESCRIPTION = "BusinessTracker expense service"
LOG = setup_logger(__name__)


def _add_serve_subparser(
    subparsers: argparse._SubParsersAction[argparse.ArgumentParser],
) -> None:
    serve = subparsers.add_parser("serve", help="Run the REST API with uvicorn")
    serve.add_argument("--host", default="127.0.0.1", help="Host to bind to")
    serve.add_argument("--port", type=int, default=8000, help="Port to run on")
    serve.add_argument("--reload", action="store_true", help="Reload on source changes")


def _add_stats_subparser(
    subparsers: argparse._SubParsersAction[argparse.ArgumentParser],
) -> None:
    stats = subparsers.add_parser("stats", help="Print quarterly or yearly statistics")
    granularity = stats.add_subparsers(dest="granularity", required=True)

    quarterly = granularity.add_parser("quarterly", help="Four quarters of one year")
    quarterly.add_argument("--year", type=int, help="Calendar year (default: current year)")

    yearly = granularity.add_parser("yearly", help="Every year with recorded expenses")

    for sub in (quarterly, yearly):
        sub.add_argument("--output", type=Path, help="Write the table as CSV to this path")
        sub.add_argument(
            "--breakdown",
            action="store_true",
            help="Also print the category breakdown of every period",
        )


def build_parser() -> argparse.ArgumentParser:
    parser = argparse.ArgumentParser(prog="business-tracker", description=DESCRIPTION)
    parser.add_argument("--version", action="version", version=f"%(prog)s {__version__}")
    parser.add_argument("--config", type=Path, help="YAML settings file")
    parser.add_argument("--log-level", default=None, help="Logging level (default INFO)")
    parser.add_argument("--json-logs", action="store_true", help="Also write JSON-lines logs")

    subparsers = parser.add_subparsers(dest="command", required=True)
    _add_serve_subparser(subparsers)
    subparsers.add_parser("seed", help="Insert sample expenses into an empty database")
    _add_stats_subparser(subparsers)
    return parser


def _print_frame(frame: pd.DataFrame) -> None:
    if frame.empty:
        print("(no data)")
        return
    print(frame.to_string(index=False, float_format=lambda value: f"{value:,.2f}"))


def _print_breakdowns(labelled: Iterable[tuple[str, dict[str, float]]]) -> None:
    for label, breakdown in labelled:
        print(f"\n{label}")
        _print_frame(category_frame(breakdown))


def _open_database(settings: Settings) -> None:
    from backend import database

    database.configure(settings.database_url)
    database.init_db()


def _handle_serve(args: argparse.Namespace, settings: Settings) -> None:
    import uvicorn

    LOG.info("Starting API on http://%s:%d using %s", args.host, args.port, settings.database_url)
    uvicorn.run(
        "backend.server:app",
        host=args.host,
        port=args.port,
        reload=args.reload,
        log_level="info",
    )


def _handle_seed(settings: Settings) -> None:
    from backend import database, sample_data

    _open_database(settings)
    with database.session_scope() as session:
        created = sample_data.seed_sample_data(session, enabled=True)
    print(f"Inserted {created} sample expenses")


def _handle_stats(args: argparse.Namespace, settings: Settings) -> None:
    from backend import crud, database

    _open_database(settings)
    with database.session_scope() as session:
        if args.granularity == "quarterly":
            quarterly = crud.quarterly_statistics(session, args.year)
            frame = quarterly_frame(quarterly)
            labelled = [(bucket.label, bucket.category_breakdown) for bucket in quarterly.quarters]
            footer = (
                f"Year total: {quarterly.year_total:,.2f}  "
                f"Average per quarter: {quarterly.average_per_quarter:,.2f}"
            )
        else:
            yearly = crud.yearly_statistics(session)
            frame = yearly_frame(yearly)
            labelled = [(str(bucket.year), bucket.category_breakdown) for bucket in yearly.years]
            if yearly.grand_total is None:
                footer = "No expenses recorded"
            else:
                footer = (
                    f"Grand total: {yearly.grand_total:,.2f}  "
                    f"Average per year: {yearly.average_per_year:,.2f}"
                )

    _print_frame(frame)
    print(footer)
    if args.breakdown:
        _print_breakdowns(labelled)
    if args.output is not None:
        path = write_csv(frame, args.output)
        LOG.info("Statistics written to %s", path)


def main(argv: list[str] | None = None) -> int:
    parser = build_parser()
    args = parser.parse_args(argv)
    configure_cli_logging(args.json_logs, args.log_level)
    if args.config is not None:
        # The API process and the backend modules resolve settings from the environment.
        os.environ[CONFIG_ENV] = str(args.config)

    try:
        settings = load_settings(args.config)
    except ConfigError as exc:
        parser.error(f"invalid configuration: {exc}")

    if args.command == "serve":
        _handle_serve(args, settings)
    elif args.command == "seed":
        _handle_seed(settings)
    elif args.command == "stats":
        _handle_stats(args, settings)
    return 0


if __name__ == "__main__":  # pragma: no cover
    raise SystemExit(main())
