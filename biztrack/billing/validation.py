# =========================================================
# SALE VALIDATION
#
# Sale lifecycle:
#   BUILDING -> VALIDATING -> VALID -> SUBMITTING -> COMPLETED
#                          -> INVALID              -> FAILED
# INVALID, COMPLETED and FAILED all lead back to BUILDING.
# =========================================================

import re
from decimal import Decimal
from enum import Enum

from biztrack.billing.exceptions import InvalidTransition
from biztrack.billing.models import Customer, NewCustomer
from biztrack.core.pricing import format_money, to_money

EMAIL_PATTERN = re.compile(r"\S+@\S+\.\S+")


class SaleState(str, Enum):
    BUILDING = "building"
    VALIDATING = "validating"
    VALID = "valid"
    INVALID = "invalid"
    SUBMITTING = "submitting"
    COMPLETED = "completed"
    FAILED = "failed"


TRANSITIONS = {
    SaleState.BUILDING: {SaleState.VALIDATING},
    SaleState.VALIDATING: {SaleState.VALID, SaleState.INVALID},
    SaleState.VALID: {SaleState.SUBMITTING},
    SaleState.INVALID: {SaleState.BUILDING},
    SaleState.SUBMITTING: {SaleState.COMPLETED, SaleState.FAILED},
    SaleState.COMPLETED: {SaleState.BUILDING},
    SaleState.FAILED: {SaleState.BUILDING},
}


def check_transition(current: SaleState, target: SaleState) -> SaleState:
    if target not in TRANSITIONS[current]:
        raise InvalidTransition(current, target)
    return target


def paid_amount_error(paid_amount: Decimal, total: Decimal) -> str | None:
    if paid_amount < 0:
        return "Payment amount cannot be negative"
    if paid_amount > total:
        return f"Payment amount cannot exceed total amount of {format_money(total)}"
    return None


def validate_sale(
    customer: Customer | None,
    item_count: int,
    payment_method: str | None,
    paid_amount: Decimal,
    total: Decimal,
) -> dict[str, str]:
    """Every failing check is reported, not just the first one."""
    errors = {}

    if customer is None:
        errors["customer"] = "Please select a customer"

    if item_count == 0:
        errors["cart"] = "Cart cannot be empty"

    if not payment_method:
        errors["payment"] = "Please select a payment method"

    message = paid_amount_error(to_money(paid_amount), to_money(total))
    if message:
        errors["paidAmount"] = message

    return errors


def validate_new_customer(new_customer: NewCustomer) -> dict[str, str]:
    errors = {}

    if not new_customer.name.strip():
        errors["name"] = "Name is required"

    email = new_customer.email.strip()
    if not email:
        errors["email"] = "Email is required"
    elif not EMAIL_PATTERN.search(email):
        errors["email"] = "Invalid email format"

    if not new_customer.phone.strip():
        errors["phone"] = "Phone number is required"

    return errors
