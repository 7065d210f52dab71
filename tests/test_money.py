from decimal import Decimal, localcontext, ROUND_HALF_UP

from tradesummary.reporting.money import abs_decimal, quantize_money


def test_quantize_money_half_even_rounds_down_to_even():
    assert quantize_money(Decimal("0.005")) == Decimal("0.00")
    assert quantize_money(Decimal("0.025")) == Decimal("0.02")


def test_quantize_money_half_even_rounds_up_to_even():
    assert quantize_money(Decimal("0.015")) == Decimal("0.02")
    assert quantize_money(Decimal("-0.035")) == Decimal("-0.04")


def test_quantize_money_ignores_ambient_context():
    with localcontext() as ctx:
        ctx.rounding = ROUND_HALF_UP
        assert quantize_money(Decimal("0.005")) == Decimal("0.00")


def test_quantize_money_custom_places():
    assert quantize_money(Decimal("123.4567"), "0.0001") == Decimal("123.4567")


def test_abs_decimal_uses_copy_abs():
    value = Decimal("-10.5")
    assert abs_decimal(value) == Decimal("10.5")
    assert value == Decimal("-10.5")
