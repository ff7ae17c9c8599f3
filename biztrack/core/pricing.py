# =========================================================
# PRICING HELPERS
# Shared by the billing engine and the bills router so the
# totals a cashier sees are the totals the server stores.
# =========================================================

from dataclasses import dataclass
from decimal import Decimal, ROUND_HALF_UP
from typing import Iterable

from biztrack.core.config import settings

CENTS = Decimal("0.01")

PAYMENT_METHODS = ("cash", "card", "bank_transfer", "other")


def to_money(value) -> Decimal:
    if not isinstance(value, Decimal):
        value = Decimal(str(value))
    return value.quantize(CENTS, rounding=ROUND_HALF_UP)


def format_money(value) -> str:
    return f"{settings.CURRENCY_SYMBOL} {to_money(value):.2f}"


@dataclass(frozen=True)
class Totals:
    subtotal: Decimal
    tax: Decimal
    total: Decimal


def calculate_totals(
    line_totals: Iterable[Decimal],
    tax_rate: Decimal | None = None,
) -> Totals:
    """Subtotal, tax and grand total for a set of line totals.

    Tax is rounded to cents before it is added, so ``total`` always equals
    ``subtotal + tax`` exactly.
    """
    rate = settings.TAX_RATE if tax_rate is None else tax_rate

    subtotal = to_money(sum(line_totals, Decimal("0.00")))
    tax = to_money(subtotal * rate)

    return Totals(subtotal=subtotal, tax=tax, total=subtotal + tax)


def derive_payment_status(paid_amount, total) -> str:
    paid_amount = to_money(paid_amount)
    total = to_money(total)

    if paid_amount >= total:
        return "paid"
    if paid_amount > 0:
        return "partial"
    return "unpaid"
