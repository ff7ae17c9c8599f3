from decimal import Decimal

import pytest

from biztrack.core.pricing import (
    calculate_totals,
    derive_payment_status,
    format_money,
    to_money,
)


def test_totals_for_mixed_cart():
    totals = calculate_totals([Decimal("10.00"), Decimal("10.00")])

    assert totals.subtotal == Decimal("20.00")
    assert totals.tax == Decimal("1.40")
    assert totals.total == Decimal("21.40")


@pytest.mark.parametrize(
    "lines",
    [
        [],
        [Decimal("0.50")],
        [Decimal("19.99"), Decimal("0.01")],
        [Decimal("3.33"), Decimal("3.33"), Decimal("3.33")],
        [Decimal("1234.56"), Decimal("78.90")],
    ],
)
def test_total_is_subtotal_plus_rounded_tax(lines):
    totals = calculate_totals(lines)

    assert totals.total == totals.subtotal + totals.tax
    assert totals.tax == to_money(totals.subtotal * Decimal("0.07"))


def test_tax_rounds_half_up_to_cents():
    # 0.50 * 0.07 = 0.035
    assert calculate_totals([Decimal("0.50")]).tax == Decimal("0.04")


def test_explicit_tax_rate():
    totals = calculate_totals([Decimal("100")], tax_rate=Decimal("0.13"))

    assert totals.tax == Decimal("13.00")
    assert totals.total == Decimal("113.00")


@pytest.mark.parametrize(
    "paid, expected",
    [
        (100, "paid"),
        (120, "paid"),
        (40, "partial"),
        (Decimal("0.01"), "partial"),
        (0, "unpaid"),
    ],
)
def test_payment_status(paid, expected):
    assert derive_payment_status(paid, 100) == expected


def test_format_money():
    assert format_money(50) == "Rs 50.00"
    assert format_money(Decimal("21.4")) == "Rs 21.40"
