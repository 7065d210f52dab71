from __future__ import annotations

import io
import logging
import os
import re
import tempfile
import time
from dataclasses import dataclass
from pathlib import Path
from typing import Protocol

from openpyxl import Workbook
from openpyxl.styles import Alignment, Font
from openpyxl.utils import get_column_letter

from .report_builder import COLUMNS, ReportBuilder, SymbolSheet

logger = logging.getLogger(__name__)

XLSX_MEDIA_TYPE = "application/vnd.openxmlformats-officedocument.spreadsheetml.sheet"
EMPTY_SHEET_TITLE = "No trades"

_INVALID_TITLE_RE = re.compile(r"[\[\]:*?/\\]")
_MAX_TITLE_LEN = 31


class ReportSink(Protocol):
    def write(self, report: ReportBuilder) -> Path:  # returns written file path
        ...


def default_report_name(now_ms: int | None = None) -> str:
    """trades-summary-<epoch-millis>.xlsx"""
    if now_ms is None:
        now_ms = time.time_ns() // 1_000_000
    return f"trades-summary-{now_ms}.xlsx"


def sheet_title(symbol: str, taken: set[str]) -> str:
    """Make a symbol usable as an Excel sheet title, unique within `taken`."""
    base = _INVALID_TITLE_RE.sub("_", symbol).strip("'") or "Sheet"
    base = base[:_MAX_TITLE_LEN]
    title = base
    n = 1
    while title.lower() in taken:
        suffix = f"_{n}"
        title = base[: _MAX_TITLE_LEN - len(suffix)] + suffix
        n += 1
    taken.add(title.lower())
    return title


@dataclass
class ExcelReportSink:
    out_path: Path | None = None
    font_size: int = 12
    column_width: int = 14

    def build_workbook(self, report: ReportBuilder) -> Workbook:
        wb = Workbook()
        ws_default = wb.active
        sheets = report.sheets()

        if not sheets:
            # A workbook needs at least one sheet; keep the default one with headers.
            ws_default.title = EMPTY_SHEET_TITLE
            ws_default.append([col.label for col in COLUMNS])
            return wb

        wb.remove(ws_default)
        taken: set[str] = set()
        for sheet in sheets:
            self._write_sheet(wb, sheet, sheet_title(sheet.title, taken))
        return wb

    def _write_sheet(self, wb: Workbook, sheet: SymbolSheet, title: str) -> None:
        ws = wb.create_sheet(title=title)
        font = Font(size=self.font_size)
        align = Alignment(horizontal="center")

        def styled(row: int, col: int, value) -> None:
            cell = ws.cell(row=row, column=col, value=value)
            cell.font = font
            cell.alignment = align

        for c, label in enumerate(sheet.header, start=1):
            styled(1, c, label)
            ws.column_dimensions[get_column_letter(c)].width = self.column_width
        ws.freeze_panes = "A2"

        for r, values in enumerate(sheet.rows, start=sheet.first_data_row):
            for c, value in enumerate(values, start=1):
                styled(r, c, value)

        for idx, content in sorted(sheet.summary.items()):
            styled(sheet.summary_row, idx + 1, content)

    def render(self, report: ReportBuilder) -> bytes:
        buf = io.BytesIO()
        self.build_workbook(report).save(buf)
        return buf.getvalue()

    def write(self, report: ReportBuilder) -> Path:
        """Save the workbook next to `out_path` and move it into place.

        The final path only ever holds a complete workbook; on failure the
        temporary file is removed and the error propagates.
        """
        if self.out_path is None:
            raise ValueError("ExcelReportSink.write() needs an out_path")
        out_path = Path(self.out_path)
        out_path.parent.mkdir(parents=True, exist_ok=True)
        wb = self.build_workbook(report)

        fd, tmp_name = tempfile.mkstemp(
            dir=out_path.parent, prefix=f".{out_path.name}.", suffix=".tmp"
        )
        os.close(fd)
        try:
            wb.save(tmp_name)
            os.replace(tmp_name, out_path)
        except BaseException:
            Path(tmp_name).unlink(missing_ok=True)
            raise
        logger.debug("Saved %d sheet(s) to %s", len(wb.worksheets), out_path)
        return out_path
