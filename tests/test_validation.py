from decimal import Decimal

import pytest

from biztrack.billing.exceptions import InvalidTransition
from biztrack.billing.models import Customer, NewCustomer
from biztrack.billing.validation import (
    SaleState,
    check_transition,
    validate_new_customer,
    validate_sale,
)

CUSTOMER = Customer(id=1, name="Asha", email="asha@example.com", phone="9800000000")


def test_reports_every_failing_check():
    errors = validate_sale(
        customer=None,
        item_count=0,
        payment_method="cash",
        paid_amount=Decimal("-1"),
        total=Decimal("0"),
    )

    assert set(errors) == {"customer", "cart", "paidAmount"}
    assert errors["paidAmount"] == "Payment amount cannot be negative"


def test_missing_payment_method():
    errors = validate_sale(
        customer=None,
        item_count=0,
        payment_method=None,
        paid_amount=Decimal("0"),
        total=Decimal("0"),
    )

    assert set(errors) == {"customer", "cart", "payment"}


def test_payment_above_total_names_the_total():
    errors = validate_sale(
        customer=CUSTOMER,
        item_count=1,
        payment_method="card",
        paid_amount=Decimal("60"),
        total=Decimal("50"),
    )

    assert list(errors) == ["paidAmount"]
    assert "50.00" in errors["paidAmount"]


def test_valid_sale_has_no_errors():
    errors = validate_sale(
        customer=CUSTOMER,
        item_count=2,
        payment_method="cash",
        paid_amount=Decimal("21.40"),
        total=Decimal("21.40"),
    )

    assert errors == {}


def test_new_customer_required_fields():
    errors = validate_new_customer(NewCustomer(name="  ", email="", phone=""))

    assert errors == {
        "name": "Name is required",
        "email": "Email is required",
        "phone": "Phone number is required",
    }


@pytest.mark.parametrize("email", ["plainaddress", "missing@tld", "@example.com", "a b@c"])
def test_new_customer_rejects_malformed_email(email):
    errors = validate_new_customer(NewCustomer(name="Asha", email=email, phone="1"))

    assert errors == {"email": "Invalid email format"}


def test_new_customer_valid():
    assert validate_new_customer(
        NewCustomer(name="Asha", email="asha@example.com", phone="9800000000")
    ) == {}


@pytest.mark.parametrize(
    "current, target",
    [
        (SaleState.BUILDING, SaleState.SUBMITTING),
        (SaleState.SUBMITTING, SaleState.VALIDATING),
        (SaleState.INVALID, SaleState.SUBMITTING),
        (SaleState.COMPLETED, SaleState.SUBMITTING),
    ],
)
def test_illegal_transitions_raise(current, target):
    with pytest.raises(InvalidTransition):
        check_transition(current, target)


def test_full_lifecycle_is_allowed():
    state = SaleState.BUILDING
    for target in (
        SaleState.VALIDATING,
        SaleState.VALID,
        SaleState.SUBMITTING,
        SaleState.COMPLETED,
        SaleState.BUILDING,
    ):
        state = check_transition(state, target)

    assert state == SaleState.BUILDING
