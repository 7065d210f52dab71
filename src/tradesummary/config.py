from __future__ import annotations

import os
from dataclasses import dataclass, replace
from decimal import ROUND_HALF_EVEN, getcontext
from pathlib import Path
from typing import Mapping

# Monetary precision and rounding
getcontext().prec = 28
getcontext().rounding = ROUND_HALF_EVEN

DEFAULT_RATE_URL_TEMPLATE = (
    "https://api.nbp.pl/api/exchangerates/rates/a/{currency}/{date}/"
)
DEFAULT_REQUEST_TIMEOUT_SECONDS = 15.0
DEFAULT_MAX_LOOKBACK_DAYS = 14
HOME_CURRENCY = "PLN"

ENV_PREFIX = "TRADESUMMARY_"


@dataclass(frozen=True)
class Settings:
    rate_url_template: str = DEFAULT_RATE_URL_TEMPLATE
    request_timeout_seconds: float = DEFAULT_REQUEST_TIMEOUT_SECONDS
    max_lookback_days: int = DEFAULT_MAX_LOOKBACK_DAYS
    home_currency: str = HOME_CURRENCY
    output_dir: Path = Path(".")

    def __post_init__(self) -> None:
        if self.max_lookback_days < 1:
            raise ValueError("max_lookback_days must be at least 1")
        if self.request_timeout_seconds <= 0:
            raise ValueError("request_timeout_seconds must be positive")

    @classmethod
    def from_env(cls, environ: Mapping[str, str] | None = None) -> Settings:
        """Build settings from TRADESUMMARY_* variables, falling back to defaults."""
        env = os.environ if environ is None else environ
        settings = cls()
        overrides: dict[str, object] = {}
        if f"{ENV_PREFIX}RATE_URL" in env:
            overrides["rate_url_template"] = env[f"{ENV_PREFIX}RATE_URL"]
        if f"{ENV_PREFIX}TIMEOUT" in env:
            overrides["request_timeout_seconds"] = float(env[f"{ENV_PREFIX}TIMEOUT"])
        if f"{ENV_PREFIX}MAX_LOOKBACK_DAYS" in env:
            overrides["max_lookback_days"] = int(env[f"{ENV_PREFIX}MAX_LOOKBACK_DAYS"])
        if f"{ENV_PREFIX}OUTPUT_DIR" in env:
            overrides["output_dir"] = Path(env[f"{ENV_PREFIX}OUTPUT_DIR"])
        return replace(settings, **overrides) if overrides else settings
