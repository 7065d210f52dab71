import datetime as dt
from decimal import Decimal

import pytest

from tradesummary.conv import date_key, parse_trade_date, to_dec_strict


def test_to_dec_strict_standard():
    assert to_dec_strict("100") == Decimal("100")
    assert to_dec_strict("1,000.00") == Decimal("1000.00")
    assert to_dec_strict(" -125.99 ") == Decimal("-125.99")
    assert to_dec_strict(10) == Decimal("10")
    assert to_dec_strict(Decimal("5.5")) == Decimal("5.5")


def test_to_dec_strict_raises():
    with pytest.raises(ValueError, match="Value is None"):
        to_dec_strict(None)

    with pytest.raises(ValueError, match="Value is empty string"):
        to_dec_strict("   ")

    with pytest.raises(ValueError, match="Value is a placeholder"):
        to_dec_strict("--")

    with pytest.raises(ValueError, match="Invalid decimal format"):
        to_dec_strict("abc")

    with pytest.raises(ValueError, match="Invalid decimal format"):
        to_dec_strict("NaN")


def test_parse_trade_date_formats():
    assert parse_trade_date("05-Jan-2024") == dt.date(2024, 1, 5)
    assert parse_trade_date("5-jan-2024") == dt.date(2024, 1, 5)
    assert parse_trade_date(" 29-FEB-2024 ") == dt.date(2024, 2, 29)


@pytest.mark.parametrize(
    "value", ["2024-01-05", "05/01/2024", "05-Foo-2024", "31-Feb-2024", ""]
)
def test_parse_trade_date_rejects_malformed(value):
    with pytest.raises(ValueError):
        parse_trade_date(value)


def test_date_key_is_iso():
    assert date_key(dt.date(2024, 1, 5)) == "2024-01-05"
