from __future__ import annotations

import datetime as dt
from dataclasses import dataclass
from typing import Sequence


class TradeSummaryError(Exception):
    """Base class for failures that abort a report run."""


class TradeRowError(TradeSummaryError, ValueError):
    """A single ledger row could not be turned into a trade."""

    def __init__(self, line_no: int, reason: str):
        super().__init__(f"line {line_no}: {reason}")
        self.line_no = line_no
        self.reason = reason


@dataclass(frozen=True)
class RowFailure:
    line_no: int
    reason: str


class LedgerError(TradeSummaryError):
    """One or more ledger rows failed; carries every failure, not just the first."""

    def __init__(self, failures: Sequence[RowFailure]):
        self.failures = list(failures)
        preview = "; ".join(f"line {f.line_no}: {f.reason}" for f in self.failures[:5])
        more = len(self.failures) - 5
        if more > 0:
            preview += f"; ... and {more} more"
        super().__init__(f"{len(self.failures)} invalid trade row(s): {preview}")


class RateUnavailable(TradeSummaryError):
    """No published rate was found within the configured lookback window."""

    def __init__(
        self,
        currency: str,
        trade_date: dt.date,
        last_candidate: dt.date,
        attempts: int,
    ):
        super().__init__(
            f"No {currency} rate found for trade on {trade_date.isoformat()} "
            f"after {attempts} lookup(s) back to {last_candidate.isoformat()}"
        )
        self.currency = currency
        self.trade_date = trade_date
        self.last_candidate = last_candidate
        self.attempts = attempts
