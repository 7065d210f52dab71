from __future__ import annotations

import logging
from collections import defaultdict
from dataclasses import dataclass
from typing import Callable, Literal

from openpyxl.utils import get_column_letter

from tradesummary.conv import date_key
from tradesummary.model import Trade

logger = logging.getLogger(__name__)

CellValue = str | float | int
CellKind = Literal["text", "number"]

ACTION = "Action"
DATE = "Date"
PRICE = "Price"
QUANTITY = "Quantity"
TOTAL = "Total $"
FEE = "Fee $"
ORDER = "Order $"
EXR = "EXR"
EXR_DATE = "EXR Date"
TOTAL_PLN = "Total PLN"
FEE_PLN = "Fee PLN"
ORDER_PLN = "Order PLN"
SUMMARY = "Summary"


@dataclass(frozen=True)
class Column:
    label: str
    kind: CellKind
    extract: Callable[[Trade], object]

    def value(self, trade: Trade) -> CellValue:
        raw = self.extract(trade)
        if self.kind == "text":
            return date_key(raw) if hasattr(raw, "isoformat") else str(raw)
        if isinstance(raw, int):
            return raw
        return float(raw)


COLUMNS: tuple[Column, ...] = (
    Column(ACTION, "text", lambda t: t.event_type),
    Column(DATE, "text", lambda t: t.trade_date),
    Column(PRICE, "number", lambda t: t.price),
    Column(QUANTITY, "number", lambda t: t.quantity),
    Column(TOTAL, "number", lambda t: t.total),
    Column(FEE, "number", lambda t: t.fee),
    Column(ORDER, "number", lambda t: t.amount),
    Column(EXR, "number", lambda t: t.pln_exchange_rate),
    Column(EXR_DATE, "text", lambda t: t.pln_exchange_rate_date),
    Column(TOTAL_PLN, "number", lambda t: t.total_home),
    Column(FEE_PLN, "number", lambda t: t.fee_home),
    Column(ORDER_PLN, "number", lambda t: t.amount_home),
)

SUMMARY_COLUMNS = frozenset(
    {QUANTITY, TOTAL, FEE, ORDER, TOTAL_PLN, FEE_PLN, ORDER_PLN}
)

HEADER_ROW = 1  # 1-based worksheet row of the header


@dataclass(frozen=True)
class SymbolSheet:
    """Everything needed to render one per-symbol worksheet.

    `summary` maps 0-based column index -> cell content for the row below the
    data; column 0 holds the label, the rest are SUM formulas.
    """

    title: str
    header: tuple[str, ...]
    rows: tuple[tuple[CellValue, ...], ...]
    summary: dict[int, str]

    @property
    def first_data_row(self) -> int:
        return HEADER_ROW + 1

    @property
    def last_data_row(self) -> int:
        return HEADER_ROW + len(self.rows)

    @property
    def summary_row(self) -> int:
        return self.last_data_row + 1


def summary_formula(col_idx: int, first_row: int, last_row: int) -> str:
    letter = get_column_letter(col_idx + 1)
    return f"=SUM({letter}{first_row}:{letter}{last_row})"


class ReportBuilder:
    """Group enriched trades by symbol and lay out one sheet per group."""

    def __init__(self, columns: tuple[Column, ...] = COLUMNS):
        self.columns = columns
        self.trades_by_symbol: defaultdict[str, list[Trade]] = defaultdict(list)

    def add_trade(self, trade: Trade) -> None:
        self.trades_by_symbol[trade.symbol].append(trade)

    def add_trades(self, trades: list[Trade]) -> None:
        for trade in trades:
            self.add_trade(trade)

    @property
    def symbols(self) -> list[str]:
        return list(self.trades_by_symbol)

    def sheets(self) -> list[SymbolSheet]:
        return [
            self._build_sheet(symbol, trades)
            for symbol, trades in self.trades_by_symbol.items()
        ]

    def _build_sheet(self, symbol: str, trades: list[Trade]) -> SymbolSheet:
        # sorted() is stable: same-day trades keep ledger order
        ordered = sorted(trades, key=lambda t: t.trade_date)
        rows = tuple(tuple(col.value(t) for col in self.columns) for t in ordered)

        first = HEADER_ROW + 1
        last = HEADER_ROW + len(rows)
        summary: dict[int, str] = {0: SUMMARY}
        for idx, col in enumerate(self.columns):
            if col.label in SUMMARY_COLUMNS:
                summary[idx] = summary_formula(idx, first, last)

        logger.debug("Sheet %s: %d trade row(s)", symbol, len(rows))
        return SymbolSheet(
            title=symbol,
            header=tuple(col.label for col in self.columns),
            rows=rows,
            summary=summary,
        )
