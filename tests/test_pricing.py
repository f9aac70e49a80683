from decimal import Decimal

import pytest

from storefront.domain.pricing import line_subtotal, order_total


def test_line_subtotal_is_price_times_quantity():
    assert line_subtotal(Decimal("10.00"), 2) == Decimal("20.00")
    assert line_subtotal("49.50", 3) == Decimal("148.50")


def test_order_total_sums_lines():
    total = order_total([(Decimal("10.00"), 2), (Decimal("5.00"), 1)])
    assert total == Decimal("25.00")


def test_empty_order_total_is_zero():
    assert order_total([]) == Decimal("0.00")


def test_repeated_sums_do_not_drift():
    # 0.1 * 3 in binary floating point is 0.30000000000000004
    total = order_total([(Decimal("0.10"), 1)] * 3)
    assert total == Decimal("0.30")
    assert str(order_total([(Decimal("0.01"), 1)] * 1000)) == "10.00"


def test_result_is_rounded_to_cents():
    assert line_subtotal(Decimal("0.333"), 3) == Decimal("1.00")
    assert line_subtotal(Decimal("0.005"), 1) == Decimal("0.01")


def test_float_prices_are_rejected():
    with pytest.raises(TypeError):
        line_subtotal(10.0, 1)


@pytest.mark.parametrize("price, qty", [(Decimal("-1.00"), 1), (Decimal("1.00"), -1)])
def test_negative_values_are_rejected(price, qty):
    with pytest.raises(ValueError):
        line_subtotal(price, qty)
