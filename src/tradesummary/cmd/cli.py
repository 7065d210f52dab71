"""
Turn a broker trade ledger CSV into a per-symbol spreadsheet with PLN-converted
totals, using NBP table A mid rates from the last business day before each trade.

This module acts as the CLI orchestrator, delegating responsibilities to SRP modules:
- Ledger reading: tradesummary.model
- Event parsing and trade enrichment: tradesummary.reporting.trade_builder
- Exchange rates: tradesummary.reporting.rates
- Sheet layout: tradesummary.reporting.report_builder
- Output writing: tradesummary.reporting.report_sink

Usage
-----
    python -m tradesummary.cmd.cli ./trades.csv --output ./summary.xlsx -v

    # Keep going past malformed trade rows (they are logged and left out)
    python -m tradesummary.cmd.cli ./trades.csv --skip-invalid-rows
"""

from __future__ import annotations

import argparse
import logging
import sys
from dataclasses import replace
from pathlib import Path

from tradesummary.config import Settings
from tradesummary.errors import LedgerError, RateUnavailable
from tradesummary.logging import configure_logging
from tradesummary.model import LedgerCsvParser
from tradesummary.reporting import (
    CachingRateLookup,
    ExchangeRateResolver,
    ExcelReportSink,
    NbpRateLookup,
    RateLookup,
    build_report,
    default_report_name,
)


def process_file(
    args: argparse.Namespace,
    settings: Settings,
    lookup: RateLookup | None = None,
) -> Path:
    logger = logging.getLogger(__name__)
    logger.info("Reading %s", args.input)

    ledger, parse_report = LedgerCsvParser().parse_file(args.input)
    parse_report.log_with(logger)
    logger.debug("Ledger has %d row(s), header=%s", len(ledger.rows), ledger.header)

    if lookup is None:
        lookup = NbpRateLookup(
            url_template=settings.rate_url_template,
            timeout=settings.request_timeout_seconds,
        )
    resolver = ExchangeRateResolver(
        CachingRateLookup(lookup),
        max_lookback_days=settings.max_lookback_days,
        home_currency=settings.home_currency,
    )

    rb, issues = build_report(ledger, resolver, skip_invalid=args.skip_invalid_rows)
    issues.log_with(logger)
    if issues.errors:
        logger.warning(
            "Left %d invalid trade row(s) out of the report: line(s) %s",
            len(issues.errors),
            ", ".join(str(i.line_no) for i in issues.errors),
        )

    out_path = (
        Path(args.output)
        if args.output
        else settings.output_dir / default_report_name()
    )
    out_path = ExcelReportSink(out_path=out_path).write(rb)
    logger.info("Wrote workbook to %s", out_path)
    return out_path


def build_argparser() -> argparse.ArgumentParser:
    p = argparse.ArgumentParser(
        description="Per-symbol trade summary with PLN conversion from a broker CSV"
    )
    p.add_argument("input", type=str, help="Broker trade ledger CSV path")
    p.add_argument(
        "--output",
        type=str,
        default=None,
        help=(
            "Output filename (e.g., summary.xlsx). If omitted, uses "
            "trades-summary-<epoch-millis>.xlsx in the output directory"
        ),
    )
    p.add_argument(
        "--max-lookback-days",
        type=int,
        default=None,
        help="Give up on a rate after walking back this many calendar days",
    )
    p.add_argument(
        "--timeout",
        type=float,
        default=None,
        help="Per-request timeout for the rate service, in seconds",
    )
    p.add_argument(
        "--rate-url",
        type=str,
        default=None,
        help="Rate service URL template with {currency} and {date} placeholders",
    )
    p.add_argument(
        "--skip-invalid-rows",
        action="store_true",
        help="Leave malformed trade rows out of the report instead of aborting",
    )
    p.add_argument(
        "-v",
        "--verbose",
        action="count",
        default=0,
        help="Increase verbosity: -v (INFO), -vv (DEBUG)",
    )
    return p


def settings_from_args(args: argparse.Namespace, base: Settings) -> Settings:
    overrides: dict[str, object] = {}
    if args.max_lookback_days is not None:
        overrides["max_lookback_days"] = args.max_lookback_days
    if args.timeout is not None:
        overrides["request_timeout_seconds"] = args.timeout
    if args.rate_url is not None:
        overrides["rate_url_template"] = args.rate_url
    return replace(base, **overrides)


def main(argv: list[str] | None = None) -> int:
    parser = build_argparser()
    args = parser.parse_args(argv)

    # Configure logging based on verbosity
    verbosity_map = {
        0: logging.WARNING,  # Default: quiet
        1: logging.INFO,  # -v: informational
        2: logging.DEBUG,  # -vv and above: debug
    }
    level = verbosity_map.get(min(args.verbose, 2), logging.WARNING)
    configure_logging(level=level)
    logger = logging.getLogger(__name__)

    try:
        settings = settings_from_args(args, Settings.from_env())
    except ValueError as exc:
        parser.error(str(exc))

    try:
        process_file(args, settings)
    except LedgerError as exc:
        for failure in exc.failures:
            logger.error("Invalid trade row at line %d: %s", failure.line_no, failure.reason)
        logger.error(
            "Encountered %d invalid trade row(s). "
            "Fix the ledger or rerun with --skip-invalid-rows.",
            len(exc.failures),
        )
        return 2
    except RateUnavailable as exc:
        logger.error("%s", exc)
        return 2
    except (ValueError, OSError) as exc:
        logger.error("Cannot build report from %s: %s", args.input, exc)
        return 2
    return 0


if __name__ == "__main__":
    sys.exit(main())
