from __future__ import annotations

import datetime as dt
from dataclasses import dataclass
from decimal import Decimal


@dataclass(frozen=True)
class Trade:
    """One executed trade enriched with its PLN exchange rate.

    `price`, `total`, `amount` and `fee` are in the instrument currency;
    `pln_exchange_rate` is PLN per 1 unit of that currency, published on
    `pln_exchange_rate_date` (always before `trade_date`).
    """

    trade_date: dt.date
    instrument: str
    isin: str
    currency: str
    exchange: str
    symbol: str
    event_type: str
    quantity: int
    price: Decimal
    total: Decimal
    amount: Decimal
    fee: Decimal
    pln_exchange_rate: Decimal
    pln_exchange_rate_date: dt.date

    @property
    def booked_amount(self) -> Decimal:
        return self.amount

    @property
    def total_home(self) -> Decimal:
        return self.total * self.pln_exchange_rate

    @property
    def fee_home(self) -> Decimal:
        return self.fee * self.pln_exchange_rate

    @property
    def amount_home(self) -> Decimal:
        return self.amount * self.pln_exchange_rate
