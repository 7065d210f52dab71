from __future__ import annotations

import datetime as dt
import re
from decimal import Decimal, InvalidOperation

NUM_CLEAN_RE = re.compile(r"[,\s]")  # remove thousands separators, spaces
TRADE_DATE_RE = re.compile(r"^(\d{1,2})-([A-Za-z]{3})-(\d{4})$")

_MONTHS = {
    "jan": 1,
    "feb": 2,
    "mar": 3,
    "apr": 4,
    "may": 5,
    "jun": 6,
    "jul": 7,
    "aug": 8,
    "sep": 9,
    "oct": 10,
    "nov": 11,
    "dec": 12,
}

_PLACEHOLDERS = {"-", "--", "...", "N/A", "n/a"}


def to_dec_strict(s: str | int | Decimal | None) -> Decimal:
    """Convert ledger numeric strings to Decimal.

    Raises ValueError on invalid/missing data. Every numeric field of a trade
    row is critical, so there is no lenient variant.
    """
    if s is None:
        raise ValueError("Value is None")
    if isinstance(s, Decimal):
        return s
    if isinstance(s, int):
        return Decimal(s)

    s_stripped = s.strip()
    if not s_stripped:
        raise ValueError("Value is empty string")

    if s_stripped in _PLACEHOLDERS:
        raise ValueError(f"Value is a placeholder: {s_stripped!r}")

    try:
        value = Decimal(NUM_CLEAN_RE.sub("", s_stripped))
    except InvalidOperation as e:
        raise ValueError(f"Invalid decimal format: {s!r}") from e
    if not value.is_finite():
        raise ValueError(f"Invalid decimal format: {s!r}")
    return value


def parse_trade_date(d: str) -> dt.date:
    """Parse ledger dates such as '05-Jan-2024' (dd-MMM-yyyy).

    Month names are matched case-insensitively and without the C locale, so
    the result does not depend on the process locale.
    """
    m = TRADE_DATE_RE.match((d or "").strip())
    if m is None:
        raise ValueError(f"Invalid trade date (expected dd-MMM-yyyy): {d!r}")
    day, month_name, year = m.groups()
    month = _MONTHS.get(month_name.lower())
    if month is None:
        raise ValueError(f"Unknown month abbreviation in trade date: {d!r}")
    try:
        return dt.date(int(year), month, int(day))
    except ValueError as e:
        raise ValueError(f"Invalid trade date: {d!r}") from e


def date_key(d: dt.date) -> str:
    """Return YYYY-MM-DD string for a date."""
    return d.isoformat()
