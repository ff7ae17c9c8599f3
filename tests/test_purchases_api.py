from decimal import Decimal

import pytest

from biztrack.models.inventory import Inventory
from biztrack.models.products import Product


def purchase_body(items, paid_amount="0", **extra):
    body = {
        "supplier_name": "Himal Traders",
        "items": [
            {"product_id": product_id, "quantity": quantity, "cost": cost}
            for product_id, quantity, cost in items
        ],
        "payment_method": "bank_transfer",
        "paid_amount": paid_amount,
    }
    body.update(extra)
    return body


def stock_of(db, product_id):
    db.expire_all()
    inventory = db.query(Inventory).filter(Inventory.product_id == product_id).first()
    return inventory.quantity_available if inventory else None


# =========================================================
# CREATE
# =========================================================
@pytest.mark.parametrize(
    "paid_amount, expected",
    [("0", "unpaid"), ("20.00", "partial"), ("50.00", "paid")],
)
def test_purchase_payment_status(client, make_product, paid_amount, expected):
    rice = make_product("Rice", 10, 5)

    response = client.post(
        "/purchases",
        json=purchase_body([(rice.id, 10, "4.50")], paid_amount=paid_amount, shipping="5.00"),
    )

    assert response.status_code == 201, response.text
    purchase = response.json()
    assert Decimal(purchase["subtotal"]) == Decimal("45.00")
    assert Decimal(purchase["total"]) == Decimal("50.00")
    assert purchase["payment_status"] == expected


def test_received_purchase_adds_stock(client, db, make_product):
    rice = make_product("Rice", 10, 5)

    response = client.post(
        "/purchases",
        json=purchase_body([(rice.id, 10, "4.50")], paid_amount="45"),
    )

    purchase = response.json()
    assert purchase["purchase_number"] == "PO-000001"
    assert purchase["status"] == "received"
    assert [item["name"] for item in purchase["items"]] == ["Rice"]
    assert stock_of(db, rice.id) == 15


def test_purchase_updates_product_prices(client, db, make_product):
    rice = make_product("Rice", 10, 5)

    client.post(
        "/purchases",
        json={
            "supplier_name": "Himal Traders",
            "items": [{"product_id": rice.id, "quantity": 1, "cost": "6.00", "selling_price": "12.00"}],
        },
    )

    db.expire_all()
    product = db.query(Product).filter(Product.id == rice.id).one()
    assert product.cost_price == Decimal("6.00")
    assert product.selling_price == Decimal("12.00")


def test_purchase_creates_missing_inventory(client, db):
    tea = client.post(
        "/products",
        json={"name": "Tea", "cost_price": "1.00", "selling_price": "2.00"},
    ).json()

    client.post("/purchases", json=purchase_body([(tea["id"], 3, "1.00")]))

    assert stock_of(db, tea["id"]) == 3


def test_purchase_rejects_overpayment(client, db, make_product):
    rice = make_product("Rice", 10, 5)

    response = client.post(
        "/purchases",
        json=purchase_body([(rice.id, 1, "4.00")], paid_amount="10"),
    )

    assert response.status_code == 400
    assert "Rs 4.00" in response.json()["detail"]
    assert stock_of(db, rice.id) == 5


def test_purchase_unknown_product(client):
    response = client.post("/purchases", json=purchase_body([(999, 1, "4.00")]))

    assert response.status_code == 404
    assert "999" in response.json()["detail"]


def test_purchase_requires_items(client):
    response = client.post("/purchases", json=purchase_body([]))

    assert response.status_code == 400


# =========================================================
# STATUS
# =========================================================
def test_pending_purchase_adds_stock_when_received(client, db, make_product):
    rice = make_product("Rice", 10, 5)
    purchase = client.post(
        "/purchases",
        json=purchase_body([(rice.id, 10, "4.50")], status="pending"),
    ).json()

    assert stock_of(db, rice.id) == 5

    response = client.put(f"/purchases/{purchase['id']}/status", json={"status": "received"})

    assert response.status_code == 200
    assert response.json()["status"] == "received"
    assert stock_of(db, rice.id) == 15


def test_cancelling_received_purchase_returns_stock(client, db, make_product):
    rice = make_product("Rice", 10, 5)
    purchase = client.post("/purchases", json=purchase_body([(rice.id, 10, "4.50")])).json()

    response = client.put(f"/purchases/{purchase['id']}/status", json={"status": "cancelled"})

    assert response.status_code == 200
    assert stock_of(db, rice.id) == 5


def test_cannot_cancel_when_stock_already_sold(client, db, make_product):
    rice = make_product("Rice", 10, 0)
    purchase = client.post("/purchases", json=purchase_body([(rice.id, 3, "4.50")])).json()
    client.put(f"/inventory/{rice.id}", json={"quantity_available": 1})

    response = client.put(f"/purchases/{purchase['id']}/status", json={"status": "cancelled"})

    assert response.status_code == 400
    assert "Available: 1" in response.json()["detail"]
    assert stock_of(db, rice.id) == 1
    assert client.get(f"/purchases/{purchase['id']}").json()["status"] == "received"


def test_cancelled_purchase_is_final(client, make_product):
    rice = make_product("Rice", 10, 5)
    purchase = client.post(
        "/purchases",
        json=purchase_body([(rice.id, 1, "4.50")], status="pending"),
    ).json()
    client.put(f"/purchases/{purchase['id']}/status", json={"status": "cancelled"})

    response = client.put(f"/purchases/{purchase['id']}/status", json={"status": "received"})

    assert response.status_code == 400


# =========================================================
# PAYMENTS, LISTING & DELETE
# =========================================================
def test_purchase_payment_settles_order(client, make_product):
    rice = make_product("Rice", 10, 5)
    purchase = client.post(
        "/purchases",
        json=purchase_body([(rice.id, 10, "5.00")], paid_amount="20"),
    ).json()
    assert purchase["payment_status"] == "partial"

    response = client.post(f"/purchases/{purchase['id']}/payments", json={"amount": "30"})

    assert response.status_code == 200
    assert response.json()["payment_status"] == "paid"

    again = client.post(f"/purchases/{purchase['id']}/payments", json={"amount": "1"})
    assert again.status_code == 400


def test_list_purchases_by_status(client, make_product):
    rice = make_product("Rice", 10, 5)
    client.post("/purchases", json=purchase_body([(rice.id, 1, "4.50")], status="pending"))
    client.post("/purchases", json=purchase_body([(rice.id, 1, "4.50")]))

    pending = client.get("/purchases", params={"status": "pending"}).json()

    assert [p["purchase_number"] for p in pending] == ["PO-000001"]
    assert len(client.get("/purchases").json()) == 2


def test_delete_received_purchase_returns_stock(client, db, make_product):
    rice = make_product("Rice", 10, 5)
    purchase = client.post("/purchases", json=purchase_body([(rice.id, 4, "4.50")])).json()

    assert client.delete(f"/purchases/{purchase['id']}").status_code == 204
    assert client.get(f"/purchases/{purchase['id']}").status_code == 404
    assert stock_of(db, rice.id) == 5
