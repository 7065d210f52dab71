from __future__ import annotations

from decimal import Decimal

from tradesummary.conv import parse_trade_date, to_dec_strict
from tradesummary.errors import TradeRowError
from tradesummary.model import LedgerRow, Trade

from .events import parse_event
from .money import abs_decimal, quantize_money
from .rates import ExchangeRateResolver

NEED_TRADE_COLS = [
    "Event",
    "Trade Date",
    "Instrument",
    "Instrument ISIN",
    "Instrument currency",
    "Exchange Description",
    "Instrument Symbol",
]


def strip_exchange_suffix(symbol: str) -> str:
    """'AAPL:xnas' -> 'AAPL'."""
    return symbol.split(":", 1)[0].strip()


def booked_amount(row: LedgerRow) -> Decimal:
    """Settlement amount in instrument currency, always non-negative.

    Exports carrying `Amount` and `Conversion Rate` report the amount in the
    account currency; it is converted back unless the rate is exactly 1.
    Older exports only carry `Booked Amount`.

    The sign is dropped on every branch, the rate-1 one included, so buys and
    sells both yield the unsigned settlement amount the fee is derived from.
    """
    fields = row.fields
    if "Amount" in fields and "Conversion Rate" in fields:
        amount = to_dec_strict(fields["Amount"])
        conversion_rate = to_dec_strict(fields["Conversion Rate"])
        if conversion_rate == 1:
            return abs_decimal(amount)
        if conversion_rate == 0:
            raise ValueError("Conversion Rate is zero")
        return abs_decimal(amount / conversion_rate)
    if "Booked Amount" in fields:
        return abs_decimal(to_dec_strict(fields["Booked Amount"]))
    raise ValueError("missing 'Amount'/'Conversion Rate' or 'Booked Amount' column")


def build_trade(row: LedgerRow, resolver: ExchangeRateResolver) -> Trade:
    """Turn one `Type == Trade` ledger row into an enriched Trade.

    Raises TradeRowError for missing columns and malformed dates or numbers.
    RateUnavailable from the resolver is left to propagate.
    """
    missing = [c for c in NEED_TRADE_COLS if c not in row.fields]
    if missing:
        raise TradeRowError(row.line_no, f"missing column(s): {', '.join(missing)}")

    currency = row.get("Instrument currency").upper()
    if not currency:
        raise TradeRowError(row.line_no, "empty 'Instrument currency'")

    event = parse_event(row.get("Event"))
    try:
        trade_date = parse_trade_date(row.get("Trade Date"))
        raw_amount = booked_amount(row)
        raw_total = event.price * event.quantity
        total = quantize_money(raw_total)
        amount = quantize_money(raw_amount)
        fee = quantize_money(raw_amount - raw_total)
    except ValueError as exc:
        raise TradeRowError(row.line_no, str(exc)) from exc
    except ArithmeticError as exc:
        # decimal InvalidOperation/Overflow on values too large for 28 digits
        raise TradeRowError(
            row.line_no, f"amount out of range ({type(exc).__name__})"
        ) from exc

    resolved = resolver.resolve(currency, trade_date)

    return Trade(
        trade_date=trade_date,
        instrument=row.get("Instrument"),
        isin=row.get("Instrument ISIN"),
        currency=currency,
        exchange=row.get("Exchange Description"),
        symbol=strip_exchange_suffix(row.get("Instrument Symbol")),
        event_type=event.action,
        quantity=event.quantity,
        price=event.price,
        total=total,
        amount=amount,
        fee=fee,
        pln_exchange_rate=resolved.rate,
        pln_exchange_rate_date=resolved.date,
    )
