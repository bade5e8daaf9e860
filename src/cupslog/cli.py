"""Command-line entry point for cupslog."""

from __future__ import annotations

import argparse
import logging
import sys
from collections.abc import Iterable
from datetime import date, datetime
from pathlib import Path

import uvicorn

from . import config
from .analysis.costs import CostConfigStore
from .analysis.filters import filter_by_date_range, sort_jobs_newest_first
from .api import create_app
from .outputs import BOM, ReportContext, list_reports, render_report
from .store import SnapshotStore


def build_arg_parser() -> argparse.ArgumentParser:
    parser = argparse.ArgumentParser(
        prog="cupslog",
        description="cupslog - Serve CUPS page_log usage and cost statistics.",
    )
    parser.add_argument(
        "-c",
        "--config",
        type=Path,
        help="Path to cupslog.conf (defaults to /etc/cupslog/cupslog.conf).",
    )
    parser.add_argument("--host", help="Override the listen address.")
    parser.add_argument("--port", type=int, help="Override the listen port.")
    parser.add_argument(
        "--no-watch",
        action="store_true",
        help="Do not reprocess the page_log when it changes.",
    )
    parser.add_argument(
        "--log-level",
        help="Logging level (DEBUG, INFO, WARNING, ...).",
    )
    parser.add_argument(
        "--dry-run",
        action="store_true",
        help="Parse config and show summary without starting the server.",
    )
    parser.add_argument(
        "--list-reports",
        action="store_true",
        help="List available export reports and exit.",
    )
    parser.add_argument(
        "--export",
        metavar="KIND",
        help="Write one CSV report and exit instead of serving.",
    )
    parser.add_argument(
        "-o",
        "--output",
        type=Path,
        help="Destination for --export (defaults to stdout).",
    )
    parser.add_argument(
        "--start-date",
        type=str,
        help="Only include entries on/after YYYY-MM-DD.",
    )
    parser.add_argument(
        "--end-date",
        type=str,
        help="Only include entries on/before YYYY-MM-DD.",
    )
    return parser


def main(argv: Iterable[str] | None = None) -> int:
    parser = build_arg_parser()
    args = parser.parse_args(argv)

    if args.list_reports:
        print("Available reports: " + ", ".join(list_reports()))
        return 0

    try:
        loaded = config.parse_config(args.config)
    except config.ConfigError as exc:
        parser.error(str(exc))
        return 2

    if args.host:
        loaded.host = args.host
    if args.port:
        loaded.port = args.port
    if args.no_watch:
        loaded.watch = False
    if args.log_level:
        loaded.log_level = args.log_level.upper()

    logging.basicConfig(
        level=loaded.log_level,
        format="%(asctime)s %(levelname)s %(name)s: %(message)s",
    )

    if args.dry_run:
        print("cupslog configuration:")
        print(f"  config file      : {loaded.source_file or '(defaults)'}")
        print(f"  page_log_path    : {loaded.page_log_path}")
        print(f"  fallback_log_path: {loaded.fallback_log_path}")
        print(f"  costs_config_path: {loaded.costs_config_path}")
        print(f"  watch            : {'yes' if loaded.watch else 'no'}")
        print(f"  listen           : {loaded.host}:{loaded.port}")
        print(f"  cors_origins     : {', '.join(loaded.cors_origins)}")
        return 0

    if args.export:
        if args.export not in list_reports():
            parser.error(
                f"Unknown report '{args.export}'. "
                f"Available: {', '.join(list_reports())}"
            )
        start_date = _parse_date(args.start_date) if args.start_date else None
        end_date = _parse_date(args.end_date) if args.end_date else None
        return export_report(
            loaded, args.export, args.output, start_date, end_date
        )

    return serve(loaded)


def export_report(
    loaded: config.Config,
    kind: str,
    output: Path | None = None,
    start_date: date | None = None,
    end_date: date | None = None,
) -> int:
    snapshots = SnapshotStore(
        loaded.page_log_path, loaded.fallback_log_path
    )
    store = snapshots.reload()
    costs = CostConfigStore(loaded.costs_config_path)
    costs.load()

    jobs = filter_by_date_range(store.jobs, start_date, end_date)
    if kind == "jobs":
        jobs = sort_jobs_newest_first(jobs)
    context = ReportContext(
        jobs=jobs,
        cost_config=costs.get(),
        start_date=start_date,
        end_date=end_date,
    )
    text = render_report(kind, context)
    if output is None:
        sys.stdout.write(text)
        return 0
    output.parent.mkdir(parents=True, exist_ok=True)
    output.write_text(BOM + text, encoding="utf-8")
    print(f"Report written to {output}")
    return 0


def serve(loaded: config.Config) -> int:  # pragma: no cover - runs a server
    app = create_app(loaded)
    uvicorn.run(
        app,
        host=loaded.host,
        port=loaded.port,
        log_level=loaded.log_level.lower(),
        log_config=None,
    )
    return 0


def _parse_date(raw: str) -> date:
    try:
        return datetime.strptime(raw, "%Y-%m-%d").date()
    except ValueError as exc:  # pragma: no cover - argument parsing
        raise SystemExit(f"Invalid date '{raw}'. Use YYYY-MM-DD.") from exc


if __name__ == "__main__":  # pragma: no cover
    raise SystemExit(main())
