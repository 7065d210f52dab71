from __future__ import annotations

from decimal import ROUND_HALF_EVEN, Decimal

MoneyLike = str | Decimal

_MONEY_Q = Decimal("0.01")


def quantize_money(value: Decimal, places: MoneyLike = _MONEY_Q) -> Decimal:
    """Quantize monetary values with banker's rounding (half to even).

    The rounding mode is passed explicitly so results never depend on the
    ambient decimal context.
    """
    quant = Decimal(places)
    return value.quantize(quant, rounding=ROUND_HALF_EVEN)


def abs_decimal(value: Decimal) -> Decimal:
    """Return the absolute value using Decimal.copy_abs for stability."""
    return value.copy_abs()
