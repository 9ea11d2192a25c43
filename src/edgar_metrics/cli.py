"""Command-line interface for the metrics pipeline.

Provides subcommands: `process`, `filter`, and `quarters`. Each command
is implemented as a `cmd_*` function that accepts an argparse namespace.
"""
from __future__ import annotations

import argparse
import logging
import os
import sys
from pathlib import Path

from dotenv import load_dotenv

from edgar_metrics.aggregate.build_dataset import records_to_frame
from edgar_metrics.config import get_settings
from edgar_metrics.exceptions import EdgarMetricsError
from edgar_metrics.logging_config import configure_logging
from edgar_metrics.pipeline import load_dataset
from edgar_metrics.query.filter import filter_dataset
from edgar_metrics.query.quarters import build_quarter_axis

log = logging.getLogger(__name__)

BASE_COLUMNS = ["date_string", "quarter_label", "company", "symbol", "form_name"]
METRIC_CHOICES = {"ccp": ["ccp"], "ltd": ["ltd"], "both": ["ccp", "ltd"]}


def _parse_quarter(text: str) -> tuple[int, int]:
    """Parse `2023-Q4` (or `2023Q4`) into ``(2023, 4)``."""
    norm = text.strip().upper().replace("-", "")
    year, sep, quarter = norm.partition("Q")
    if not sep or not year.isdigit() or not quarter.isdigit():
        raise argparse.ArgumentTypeError(f"expected YYYY-Qn, got {text!r}")
    return int(year), int(quarter)


# --------------------------------------------------
# PROCESS
# --------------------------------------------------
def cmd_process(args: argparse.Namespace) -> None:
    """Run the pipeline and log a summary; optionally export combined data.

    Args:
        args: argparse namespace with `output`.
    """
    ds = load_dataset(get_settings())
    q = ds.stats.data_quality

    log.info(
        "companies: %d loaded / %d sanitized",
        q.original_companies,
        q.companies_sanitized,
    )
    log.info("filings: %d loaded / %d sanitized", q.original_filings, q.filings_sanitized)
    log.info("metrics: %d loaded / %d sanitized", q.original_metrics, q.metrics_sanitized)
    log.info(
        "dataset: %d records, %d companies, years %d-%d",
        ds.stats.total_records,
        ds.stats.companies_count,
        ds.date_range.min,
        ds.date_range.max,
    )

    if args.output:
        records_to_frame(ds.combined_data).to_csv(args.output, index=False)
        log.info("Wrote %s", args.output)


# --------------------------------------------------
# FILTER
# --------------------------------------------------
def cmd_filter(args: argparse.Namespace) -> None:
    """Filter the processed dataset and write the result as CSV.

    Args:
        args: argparse namespace with `company`, `start`, `end`, `metric`, `output`.
    """
    ds = load_dataset(get_settings())
    start_year, start_q = args.start or (ds.date_range.min, 1)
    end_year, end_q = args.end or (ds.date_range.max, 4)

    rows = filter_dataset(
        ds.grouped_data,
        args.company or [],
        start_year,
        end_year,
        start_q,
        end_q,
    )
    df = records_to_frame(rows)[BASE_COLUMNS + METRIC_CHOICES[args.metric]]

    if args.output:
        df.to_csv(args.output, index=False)
        log.info("Wrote %d rows to %s", len(df), args.output)
    else:
        df.to_csv(sys.stdout, index=False)


# --------------------------------------------------
# QUARTERS
# --------------------------------------------------
def cmd_quarters(args: argparse.Namespace) -> None:
    """Print the quarter axis for a year range, one `value<TAB>label` per line."""
    for q in build_quarter_axis(args.from_year, args.to_year):
        print(f"{q.value}\t{q.label}")


# --------------------------------------------------
# CLI
# --------------------------------------------------
def build_parser() -> argparse.ArgumentParser:
    """Build and return the top-level argument parser for the CLI.

    Returns:
        Configured argparse.ArgumentParser instance.
    """
    p = argparse.ArgumentParser(prog="edgar-metrics")
    sub = p.add_subparsers(dest="cmd", required=True)

    p_process = sub.add_parser("process")
    p_process.add_argument("--output", type=Path, default=None)

    p_filter = sub.add_parser("filter")
    p_filter.add_argument("--company", action="append", default=None)
    p_filter.add_argument("--start", type=_parse_quarter, default=None)
    p_filter.add_argument("--end", type=_parse_quarter, default=None)
    p_filter.add_argument("--metric", choices=sorted(METRIC_CHOICES), default="both")
    p_filter.add_argument("--output", type=Path, default=None)

    p_quarters = sub.add_parser("quarters")
    p_quarters.add_argument("--from-year", type=int, required=True)
    p_quarters.add_argument("--to-year", type=int, required=True)

    return p


def main(argv: list[str] | None = None) -> None:
    """CLI entry point: parse args, configure logging and dispatch commands."""
    load_dotenv()
    args = build_parser().parse_args(argv)

    # keep stdout clean when CSV or the axis is written there
    quiet = args.cmd != "process" and getattr(args, "output", None) is None
    level = logging.WARNING if quiet else os.getenv("LOG_LEVEL", "INFO")
    configure_logging(Path("logs/pipeline.log"), level)

    commands = {
        "process": cmd_process,
        "filter": cmd_filter,
        "quarters": cmd_quarters,
    }
    try:
        commands[args.cmd](args)
    except EdgarMetricsError as exc:
        log.error("%s", exc)
        raise SystemExit(1) from exc


if __name__ == "__main__":
    main()
