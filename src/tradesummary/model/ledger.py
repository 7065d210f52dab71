from __future__ import annotations

import csv
import io
import logging
from dataclasses import dataclass, field
from pathlib import Path
from typing import Iterable, Iterator, Literal, Sequence

RowDict = dict[str, str]

TRADE_TYPE = "Trade"


@dataclass(frozen=True)
class LedgerRow:
    line_no: int
    fields: RowDict

    @property
    def type(self) -> str:
        return self.fields.get("Type", "")

    def get(self, name: str, default: str = "") -> str:
        return self.fields.get(name, default)


@dataclass(frozen=True)
class Ledger:
    """
    In-memory representation of a broker trade ledger export.

    One header row names the columns; every following row is kept in file order
    together with its CSV line number so failures can be traced back.
    """

    header: tuple[str, ...]
    rows: tuple[LedgerRow, ...]

    def trade_rows(self) -> Iterator[LedgerRow]:
        """Iterate rows whose Type column marks an executed trade."""
        for row in self.rows:
            if row.type == TRADE_TYPE:
                yield row


@dataclass(frozen=True)
class ParseIssue:
    line_no: int
    severity: Literal["warning", "error"]
    message: str
    row_preview: Sequence[str] | None = None


@dataclass
class ParseReport:
    """Diagnostics collected while reading the ledger and building trades."""

    issues: list[ParseIssue] = field(default_factory=list)

    def warn(self, line_no: int, msg: str, row: Sequence[str] | None = None) -> None:
        self.issues.append(ParseIssue(line_no, "warning", msg, row))

    def error(self, line_no: int, msg: str, row: Sequence[str] | None = None) -> None:
        self.issues.append(ParseIssue(line_no, "error", msg, row))

    @property
    def has_errors(self) -> bool:
        return any(i.severity == "error" for i in self.issues)

    @property
    def errors(self) -> list[ParseIssue]:
        return [i for i in self.issues if i.severity == "error"]

    def log_with(self, log: logging.Logger) -> None:
        for i in self.issues:
            prefix = "ERROR" if i.severity == "error" else "WARN"
            if i.row_preview is not None:
                log.warning(
                    "%s: line %d: %s | row=%s",
                    prefix,
                    i.line_no,
                    i.message,
                    i.row_preview,
                )
            else:
                log.warning("%s: line %d: %s", prefix, i.line_no, i.message)


class LedgerCsvParser:
    """
    Maps raw CSV rows -> Ledger (+ ParseReport).

    The first non-empty row is the header. Cells are stripped of surrounding
    whitespace, and a UTF-8 BOM on the first header cell is dropped.
    """

    def parse_file(
        self, path: str | Path, *, encoding: str = "utf-8", newline: str = ""
    ) -> tuple[Ledger, ParseReport]:
        with open(
            path, "r", encoding=encoding, errors="replace", newline=newline
        ) as fp:
            return self.parse_rows(csv.reader(fp))

    def parse_bytes(
        self, data: bytes, *, encoding: str = "utf-8"
    ) -> tuple[Ledger, ParseReport]:
        text = data.decode(encoding, errors="replace")
        return self.parse_rows(csv.reader(io.StringIO(text, newline="")))

    def parse_rows(self, rows: Iterable[Sequence[str]]) -> tuple[Ledger, ParseReport]:
        report = ParseReport()
        header: tuple[str, ...] | None = None
        parsed: list[LedgerRow] = []
        line_no = 0

        for row in rows:
            line_no += 1

            if not row or all(not (cell or "").strip() for cell in row):
                report.warn(line_no, "Empty row; skipped.")
                continue

            cells = [(cell or "").strip() for cell in row]

            if header is None:
                cells[0] = cells[0].lstrip("\ufeff")
                header = tuple(cells)
                continue

            if len(cells) != len(header):
                report.warn(
                    line_no,
                    f"Row has {len(cells)} cells but header has {len(header)}; "
                    "padded/trimmed to header.",
                    row,
                )

            parsed.append(LedgerRow(line_no, _map_row_to_header(cells, header)))

        if header is None:
            raise ValueError("Ledger CSV has no header row")

        return Ledger(header=header, rows=tuple(parsed)), report


def _map_row_to_header(data_vals: Sequence[str], header: Sequence[str]) -> RowDict:
    """Pad/trim data to header length and zip to a row dict."""
    hlen = len(header)
    if len(data_vals) < hlen:
        vals = list(data_vals) + [""] * (hlen - len(data_vals))
    else:
        vals = list(data_vals[:hlen])
    return dict(zip(header, vals))
