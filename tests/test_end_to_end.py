from decimal import Decimal

import pytest
import requests

from biztrack.billing.client import BillingClient
from biztrack.billing.exceptions import BillingAPIError, CustomerConflict
from biztrack.billing.models import NewCustomer
from biztrack.billing.session import BillingSession
from biztrack.billing.validation import SaleState


@pytest.fixture
def session(api, notifier):
    return BillingSession(api=api, notifier=notifier)


def test_happy_path_sale(session, api, notifier, make_product):
    make_product("Rice", 10, 5)
    make_product("Soap", 5, 2)
    customer = api.create_customer(
        NewCustomer(name="C1", email="c1@example.com", phone="9800000000")
    )

    session.load_products()
    session.load_customers()
    rice = next(p for p in session.products if p.name == "Rice")
    soap = next(p for p in session.products if p.name == "Soap")

    session.add_to_cart(rice)
    session.add_to_cart(soap)
    session.add_to_cart(soap)

    assert session.totals.subtotal == Decimal("20.00")
    assert session.totals.tax == Decimal("1.40")
    assert session.totals.total == Decimal("21.40")

    session.select_customer(session.customers[0])
    session.set_payment_method("cash")
    session.set_paid_amount("21.40")

    receipt = session.submit_sale()

    assert receipt.invoice_number == "SALE-000001"
    assert receipt.customer.id == customer.id
    assert receipt.total == Decimal("21.40")
    assert receipt.payment_status == "paid"

    assert len(session.cart) == 0
    assert session.state == SaleState.BUILDING

    stock = {p.name: p.stock for p in session.products}
    assert stock == {"Rice": 4, "Soap": 0}

    assert "Soap is now out of stock!" in notifier.titles("error")
    assert "Rice is running low!" in notifier.titles("warning")


def test_server_rejects_stale_stock(session, client, make_product):
    make_product("Soap", 5, 2)
    customer = client.post(
        "/billing/customers",
        json={"name": "C1", "email": "c1@example.com", "phone": "1"},
    ).json()

    session.load_products()
    session.load_customers()
    soap = session.products[0]
    session.add_to_cart(soap)
    session.add_to_cart(soap)
    session.select_customer(session.customers[0])

    # Someone else sells one Soap after the snapshot was taken
    client.put(f"/inventory/{soap.id}", json={"quantity_available": 1})

    assert session.submit_sale() is None

    assert "Insufficient stock for Soap" in session.validation_errors["general"]
    assert session.cart.get(soap.id).quantity == 2
    assert customer["id"] == session.selected_customer.id


def test_duplicate_customer_is_a_conflict(api):
    new_customer = NewCustomer(name="C1", email="c1@example.com", phone="1")
    api.create_customer(new_customer)

    with pytest.raises(CustomerConflict) as exc:
        api.create_customer(new_customer)

    assert exc.value.status_code == 409


def test_validation_errors_are_joined(api):
    with pytest.raises(BillingAPIError) as exc:
        api.create_bill({"items": "not-a-list"})

    assert exc.value.status_code == 422
    assert exc.value.message


def test_search_passes_through(api, make_product):
    make_product("Rice", 10, 5, category="Grocery")
    make_product("Soap", 5, 2, category="Hygiene")

    assert [p.name for p in api.get_billing_products("hyg")] == ["Soap"]


class BrokenSession:
    def request(self, method, url, **kwargs):
        raise requests.ConnectionError("connection refused")


def test_connection_failure_is_reported(notifier):
    session = BillingSession(
        api=BillingClient(base_url="http://localhost:1", session=BrokenSession()),
        notifier=notifier,
    )

    assert session.load_products() == []
    assert notifier.messages == [
        ("error", "Failed to load products", "Failed to fetch - Cannot connect to server"),
    ]
