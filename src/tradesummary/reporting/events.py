from __future__ import annotations

import re
from decimal import Decimal
from typing import NamedTuple

EVENT_RE = re.compile(r"(Buy|Sell)\s+(\d+)\s+@\s+([\d.]+)")


class EventData(NamedTuple):
    action: str
    quantity: int
    price: Decimal


def parse_event(text: str) -> EventData:
    """Split an event such as 'Buy 10 @ 12.5' into action, quantity and price.

    Anything else (dividends, transfers, ...) comes back as the original text
    with zero quantity and price.
    """
    m = EVENT_RE.search(text)
    if m is None:
        return EventData(text, 0, Decimal("0"))
    action, quantity, price = m.groups()
    try:
        return EventData(action, int(quantity), Decimal(price))
    except ArithmeticError:
        # e.g. '1.2.3' satisfies [\d.]+ but is not a number
        return EventData(text, 0, Decimal("0"))
