from __future__ import annotations

import logging

from tradesummary.errors import LedgerError, RowFailure, TradeRowError
from tradesummary.model import Ledger, ParseReport, Trade

from .rates import ExchangeRateResolver
from .report_builder import ReportBuilder
from .trade_builder import build_trade

logger = logging.getLogger(__name__)


def build_trades(
    ledger: Ledger,
    resolver: ExchangeRateResolver,
    *,
    skip_invalid: bool = False,
) -> tuple[list[Trade], ParseReport]:
    """Enrich every trade row of the ledger, in file order.

    A bad row does not stop the others from being checked; every failure is
    collected with its line number. Unless `skip_invalid` is set, a LedgerError
    listing all of them is raised at the end so no partial report is produced.
    RateUnavailable aborts immediately.
    """
    report = ParseReport()
    trades: list[Trade] = []
    failures: list[RowFailure] = []

    trade_rows = list(ledger.trade_rows())
    for row in trade_rows:
        try:
            trades.append(build_trade(row, resolver))
        except TradeRowError as exc:
            failures.append(RowFailure(exc.line_no, exc.reason))
            report.error(exc.line_no, exc.reason)

    logger.info(
        "Built %d trade(s); %d non-trade row(s) ignored; %d invalid row(s)",
        len(trades),
        len(ledger.rows) - len(trade_rows),
        len(failures),
    )

    if failures and not skip_invalid:
        raise LedgerError(failures)
    return trades, report


def build_report(
    ledger: Ledger,
    resolver: ExchangeRateResolver,
    *,
    skip_invalid: bool = False,
) -> tuple[ReportBuilder, ParseReport]:
    trades, report = build_trades(ledger, resolver, skip_invalid=skip_invalid)
    rb = ReportBuilder()
    rb.add_trades(trades)
    logger.info("Report covers %d symbol(s)", len(rb.symbols))
    return rb, report
