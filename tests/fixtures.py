"""Test doubles and row builders.

Production code reads ledger rows from CSV and asks the NBP API for rates.
Tests build LedgerRow objects directly and answer rate queries from a dict.
"""

from __future__ import annotations

import csv
import datetime as dt
import io
from decimal import Decimal

from tradesummary.model import LedgerRow

LEDGER_HEADER = [
    "Type",
    "Event",
    "Trade Date",
    "Instrument",
    "Instrument ISIN",
    "Instrument currency",
    "Exchange Description",
    "Instrument Symbol",
    "Amount",
    "Conversion Rate",
]


class FakeRateLookup:
    """RateLookup answering from a {(currency, date): rate} map; records queries."""

    def __init__(
        self,
        rates: dict[tuple[str, dt.date], Decimal] | None = None,
        default: Decimal | None = None,
    ):
        self.rates = dict(rates or {})
        self.default = default
        self.calls: list[tuple[str, dt.date]] = []

    def get_mid_rate(self, currency: str, date: dt.date) -> Decimal | None:
        self.calls.append((currency, date))
        return self.rates.get((currency, date), self.default)


def trade_fields(**overrides: str) -> dict[str, str]:
    fields = {
        "Type": "Trade",
        "Event": "Buy 10 @ 12.5",
        "Trade Date": "10-Jan-2024",
        "Instrument": "Apple Inc",
        "Instrument ISIN": "US0378331005",
        "Instrument currency": "USD",
        "Exchange Description": "NASDAQ",
        "Instrument Symbol": "AAPL:xnas",
        "Amount": "-125.99",
        "Conversion Rate": "1",
    }
    fields.update(overrides)
    return fields


def trade_row(line_no: int = 2, **overrides: str) -> LedgerRow:
    return LedgerRow(line_no, trade_fields(**overrides))


def ledger_csv(rows: list[dict[str, str]], header: list[str] = LEDGER_HEADER) -> str:
    buf = io.StringIO()
    writer = csv.DictWriter(buf, fieldnames=header, extrasaction="ignore")
    writer.writeheader()
    writer.writerows(rows)
    return buf.getvalue()
