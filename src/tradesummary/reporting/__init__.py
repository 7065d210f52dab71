from .events import EventData, parse_event
from .pipeline import build_report, build_trades
from .rates import (
    CachingRateLookup,
    ExchangeRateResolver,
    NbpRateLookup,
    RateLookup,
    ResolvedRate,
    previous_working_date,
)
from .report_builder import COLUMNS, Column, ReportBuilder, SymbolSheet
from .report_sink import ExcelReportSink, ReportSink, default_report_name
from .trade_builder import build_trade

__all__ = [
    "EventData",
    "parse_event",
    "build_report",
    "build_trades",
    "CachingRateLookup",
    "ExchangeRateResolver",
    "NbpRateLookup",
    "RateLookup",
    "ResolvedRate",
    "previous_working_date",
    "COLUMNS",
    "Column",
    "ReportBuilder",
    "SymbolSheet",
    "ExcelReportSink",
    "ReportSink",
    "default_report_name",
    "build_trade",
]
