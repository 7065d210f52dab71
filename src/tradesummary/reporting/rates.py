from __future__ import annotations

import datetime as dt
import logging
from dataclasses import dataclass
from decimal import Decimal, InvalidOperation
from typing import Protocol

import requests

from tradesummary.config import (
    DEFAULT_MAX_LOOKBACK_DAYS,
    DEFAULT_RATE_URL_TEMPLATE,
    DEFAULT_REQUEST_TIMEOUT_SECONDS,
    HOME_CURRENCY,
)
from tradesummary.conv import date_key
from tradesummary.errors import RateUnavailable

logger = logging.getLogger(__name__)


class RateLookup(Protocol):
    def get_mid_rate(self, currency: str, date: dt.date) -> Decimal | None:
        """Return the published mid rate (PLN per unit) or None if there is none."""
        ...


class NbpRateLookup:
    """Table A mid rates from the NBP web API.

    Anything other than a successful response carrying a non-empty `rates`
    series is reported as "no rate" so the caller can move on to an earlier day.
    """

    def __init__(
        self,
        session: requests.Session | None = None,
        url_template: str = DEFAULT_RATE_URL_TEMPLATE,
        timeout: float = DEFAULT_REQUEST_TIMEOUT_SECONDS,
    ):
        self.session = session or requests.Session()
        self.url_template = url_template
        self.timeout = timeout

    def get_mid_rate(self, currency: str, date: dt.date) -> Decimal | None:
        ccy = currency.strip().lower()
        url = self.url_template.format(currency=ccy, date=date_key(date))
        logger.debug("Fetching %s rate for %s from %s", currency, date, url)
        try:
            response = self.session.get(
                url, timeout=self.timeout, headers={"Accept": "application/json"}
            )
        except requests.exceptions.RequestException as exc:
            logger.warning("Rate request for %s on %s failed: %s", currency, date, exc)
            return None

        if not response.ok:
            logger.info(
                "No %s rate for %s (HTTP %s)", currency, date, response.status_code
            )
            return None

        try:
            payload = response.json(parse_float=Decimal)
            rates = payload.get("rates") or []
            if not rates:
                logger.info("Empty rate series for %s on %s", currency, date)
                return None
            mid = rates[0]["mid"]
            return mid if isinstance(mid, Decimal) else Decimal(str(mid))
        except (ValueError, KeyError, IndexError, TypeError, AttributeError) as exc:
            # ValueError covers JSONDecodeError
            logger.warning(
                "Malformed rate payload for %s on %s: %s", currency, date, exc
            )
            return None
        except InvalidOperation:
            logger.warning("Non-numeric mid rate for %s on %s", currency, date)
            return None


class CachingRateLookup:
    """Memoize (currency, date) answers, including misses, for one run."""

    def __init__(self, inner: RateLookup):
        self.inner = inner
        self._cache: dict[tuple[str, dt.date], Decimal | None] = {}

    def get_mid_rate(self, currency: str, date: dt.date) -> Decimal | None:
        key = (currency.upper(), date)
        if key not in self._cache:
            self._cache[key] = self.inner.get_mid_rate(currency, date)
        return self._cache[key]


def previous_working_date(date: dt.date) -> dt.date:
    """Step back one day, jumping over Saturday and Sunday."""
    weekday = date.weekday()
    if weekday == 0:  # Monday -> Friday
        return date - dt.timedelta(days=3)
    if weekday == 6:  # Sunday -> Friday
        return date - dt.timedelta(days=2)
    return date - dt.timedelta(days=1)


@dataclass(frozen=True)
class ResolvedRate:
    date: dt.date
    rate: Decimal


class ExchangeRateResolver:
    """Find the latest published rate strictly before a trade date.

    Candidates are visited with `previous_working_date` until the lookup
    answers. The walk stops with RateUnavailable once a candidate would lie more
    than `max_lookback_days` calendar days before the trade.
    """

    def __init__(
        self,
        lookup: RateLookup,
        max_lookback_days: int = DEFAULT_MAX_LOOKBACK_DAYS,
        home_currency: str = HOME_CURRENCY,
    ):
        if max_lookback_days < 1:
            raise ValueError("max_lookback_days must be at least 1")
        self.lookup = lookup
        self.max_lookback_days = max_lookback_days
        self.home_currency = home_currency.upper()

    def resolve(self, currency: str, trade_date: dt.date) -> ResolvedRate:
        candidate = previous_working_date(trade_date)
        if currency.upper() == self.home_currency:
            return ResolvedRate(candidate, Decimal("1"))

        oldest = trade_date - dt.timedelta(days=self.max_lookback_days)
        attempts = 0
        while True:
            attempts += 1
            rate = self.lookup.get_mid_rate(currency, candidate)
            if rate is not None:
                if attempts > 1:
                    logger.info(
                        "Resolved %s rate for %s on %s after %d lookups",
                        currency,
                        trade_date,
                        candidate,
                        attempts,
                    )
                return ResolvedRate(candidate, rate)
            previous = previous_working_date(candidate)
            if previous < oldest:
                raise RateUnavailable(currency, trade_date, candidate, attempts)
            candidate = previous
