import datetime as dt
from decimal import Decimal

import pytest

from fixtures import LEDGER_HEADER, FakeRateLookup, trade_fields
from tradesummary.errors import LedgerError, RateUnavailable
from tradesummary.model import LedgerCsvParser
from tradesummary.reporting.pipeline import build_report, build_trades
from tradesummary.reporting.rates import ExchangeRateResolver


def _ledger(*field_dicts):
    rows = [LEDGER_HEADER] + [[f[h] for h in LEDGER_HEADER] for f in field_dicts]
    ledger, _ = LedgerCsvParser().parse_rows(rows)
    return ledger


def _resolver(lookup=None):
    return ExchangeRateResolver(lookup or FakeRateLookup(default=Decimal("4.0")))


def test_non_trade_rows_never_reach_the_output():
    ledger = _ledger(
        trade_fields(),
        trade_fields(Type="Dividend", Event="Dividend payment", **{"Instrument Symbol": "DIV"}),
        trade_fields(Type="Fee", **{"Instrument Symbol": "FEE"}),
    )
    trades, report = build_trades(ledger, _resolver())
    assert [t.symbol for t in trades] == ["AAPL"]
    assert not report.has_errors


def test_invalid_rows_are_all_collected_before_failing():
    lookup = FakeRateLookup(default=Decimal("4.0"))
    ledger = _ledger(
        trade_fields(**{"Trade Date": "bad"}),
        trade_fields(),
        trade_fields(Amount="x"),
    )
    with pytest.raises(LedgerError) as excinfo:
        build_trades(ledger, _resolver(lookup))

    failures = excinfo.value.failures
    assert [f.line_no for f in failures] == [2, 4]
    assert "Invalid trade date" in failures[0].reason
    # the valid row in between was still processed
    assert len(lookup.calls) == 1


def test_skip_invalid_keeps_good_rows_and_reports_bad_ones():
    ledger = _ledger(trade_fields(Amount="x"), trade_fields())
    trades, report = build_trades(ledger, _resolver(), skip_invalid=True)
    assert len(trades) == 1
    assert [i.line_no for i in report.errors] == [2]


def test_rate_unavailable_aborts_the_run():
    ledger = _ledger(trade_fields(), trade_fields())
    resolver = ExchangeRateResolver(FakeRateLookup(), max_lookback_days=3)
    with pytest.raises(RateUnavailable):
        build_trades(ledger, resolver)


def test_identical_input_gives_identical_trades():
    fields = [
        trade_fields(),
        trade_fields(Event="Sell 5 @ 13.1", Amount="65.12", **{"Trade Date": "15-Jan-2024"}),
    ]
    first, _ = build_trades(_ledger(*fields), _resolver())
    second, _ = build_trades(_ledger(*fields), _resolver())
    assert first == second


def test_build_report_groups_by_symbol():
    ledger = _ledger(
        trade_fields(),
        trade_fields(**{"Instrument Symbol": "MSFT:xnas", "Trade Date": "02-Jan-2024"}),
        trade_fields(**{"Trade Date": "03-Jan-2024"}),
    )
    rb, _ = build_report(ledger, _resolver())
    assert sorted(rb.symbols) == ["AAPL", "MSFT"]
    dates = [t.trade_date for t in rb.trades_by_symbol["AAPL"]]
    assert dates == [dt.date(2024, 1, 10), dt.date(2024, 1, 3)]


def test_out_of_range_numbers_are_collected_as_row_failures():
    ledger = _ledger(
        trade_fields(Event="Buy 10 @ " + "9" * 30),
        trade_fields(),
        trade_fields(**{"Amount": "1e999999", "Conversion Rate": "1e-999999"}),
    )
    with pytest.raises(LedgerError) as excinfo:
        build_trades(ledger, _resolver())
    assert [f.line_no for f in excinfo.value.failures] == [2, 4]
