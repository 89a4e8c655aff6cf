import pytest

from storefront.models.order import ShippingDetails
from storefront.services import cart as cart_service
from storefront.services import orders as order_service

from .conftest import product_payload, shipping_payload


def _product(client, **overrides):
    res = client.post("/products", json=product_payload(**overrides))
    assert res.status_code == 201, res.text
    return res.json()["_id"]


def _fill_cart(client, user_id, product_id, quantity, potency="30C"):
    res = client.post(f"/cart/{user_id}/items", json={
        "product_id": product_id, "potency": potency, "form": "Dilution", "quantity": quantity
    })
    assert res.status_code == 201, res.text


def _checkout(client, user_id, **overrides):
    body = {"user_id": user_id, "shipping_details": shipping_payload(), "payment_method": "cod"}
    body.update(overrides)
    return client.post("/orders", json=body)


def test_checkout_builds_order_from_cart(client):
    product_id = _product(client, base_price=100.0, stock=10)
    _fill_cart(client, "u1", product_id, 2)

    res = _checkout(client, "u1")
    assert res.status_code == 201, res.text
    order = res.json()

    assert order["subtotal"] == 200.0
    assert order["shipping_fee"] == 50.0
    assert order["total"] == 250.0
    assert order["status"] == "pending"
    assert order["payment_status"] == "pending"
    assert order["status_history"][0]["status"] == "pending"
    assert order["shipping_address"].startswith("Asha Rao, 12 MG Road")
    assert order["items"][0]["name"] == "Arnica Montana"

    assert client.get(f"/products/{product_id}").json()["stock"] == 8
    assert client.get("/cart/u1").json()["items"] == []


def test_free_shipping_above_threshold(client):
    product_id = _product(client, base_price=500.0, stock=10)
    _fill_cart(client, "u1", product_id, 2)

    order = _checkout(client, "u1").json()
    assert order["shipping_fee"] == 0.0
    assert order["total"] == 1000.0


def test_site_settings_change_shipping_rules(client):
    res = client.put("/settings", json={"shipping_fee": 75, "free_shipping_threshold": 2000})
    assert res.status_code == 200, res.text

    product_id = _product(client, base_price=500.0, stock=10)
    _fill_cart(client, "u1", product_id, 2)

    assert _checkout(client, "u1").json()["shipping_fee"] == 75.0


def test_payment_id_marks_order_paid(client):
    product_id = _product(client)
    _fill_cart(client, "u1", product_id, 1)

    order = _checkout(client, "u1", payment_method="online", payment_id="pi_123").json()
    assert order["payment_status"] == "paid"
    assert order["payment_id"] == "pi_123"


def test_empty_cart_cannot_checkout(client):
    res = _checkout(client, "nobody")
    assert res.status_code == 400
    assert res.json()["detail"] == "Cart is empty"


def test_stock_is_checked_across_variants(client):
    product_id = _product(client, stock=3)
    _fill_cart(client, "u1", product_id, 2)
    _fill_cart(client, "u1", product_id, 2, potency="200C")

    res = _checkout(client, "u1")
    assert res.status_code == 400
    assert "Insufficient stock" in res.json()["detail"]
    assert client.get(f"/products/{product_id}").json()["stock"] == 3
    assert len(client.get("/cart/u1").json()["items"]) == 2


def test_invalid_pincode_is_rejected(client):
    res = _checkout(client, "u1", shipping_details=shipping_payload(zip_code="4110"))
    assert res.status_code == 422


def test_user_orders_and_detail(client):
    product_id = _product(client)
    _fill_cart(client, "u1", product_id, 1)
    order_id = _checkout(client, "u1").json()["_id"]

    listed = client.get("/orders/u1")
    assert listed.status_code == 200
    body = listed.json()
    assert body["user_id"] == "u1"
    assert body["pagination"]["total"] == 1
    assert body["orders"][0]["_id"] == order_id

    detail = client.get(f"/orders/detail/{order_id}")
    assert detail.status_code == 200
    assert detail.json()["_id"] == order_id

    assert client.get("/orders", params={"status": "pending"}).json()["pagination"]["total"] == 1
    assert client.get("/orders", params={"status": "shipped"}).json()["pagination"]["total"] == 0


def test_cancelling_restocks_once(client):
    product_id = _product(client, stock=10)
    _fill_cart(client, "u1", product_id, 4)
    order_id = _checkout(client, "u1").json()["_id"]
    assert client.get(f"/products/{product_id}").json()["stock"] == 6

    res = client.patch(f"/orders/{order_id}/status", json={"status": "cancelled", "note": "Customer request"})
    assert res.status_code == 200, res.text
    assert [h["status"] for h in res.json()["status_history"]] == ["pending", "cancelled"]
    assert client.get(f"/products/{product_id}").json()["stock"] == 10

    client.patch(f"/orders/{order_id}/status", json={"status": "refunded"})
    assert client.get(f"/products/{product_id}").json()["stock"] == 10

    repeat = client.patch(f"/orders/{order_id}/status", json={"status": "refunded"})
    assert repeat.status_code == 409


def test_invalid_status_fails_validation(client):
    res = client.patch("/orders/0123456789abcdef01234567/status", json={"status": "lost"})
    assert res.status_code == 422


def test_payment_status_update(client):
    product_id = _product(client)
    _fill_cart(client, "u1", product_id, 1)
    order_id = _checkout(client, "u1").json()["_id"]

    res = client.patch(f"/orders/{order_id}/payment", json={"payment_status": "paid", "payment_id": "pi_9"})
    assert res.status_code == 200
    assert res.json()["payment_status"] == "paid"

    logs = client.get("/audit-logs", params={"entity_type": "order", "entity_id": order_id}).json()
    actions = {log["action"] for log in logs["logs"]}
    assert {"create_order", "update_payment_status"} <= actions


def test_cancelled_order_can_only_be_refunded(client):
    product_id = _product(client, stock=10)
    _fill_cart(client, "u1", product_id, 4)
    order_id = _checkout(client, "u1").json()["_id"]

    client.patch(f"/orders/{order_id}/status", json={"status": "cancelled"})
    assert client.get(f"/products/{product_id}").json()["stock"] == 10

    reopened = client.patch(f"/orders/{order_id}/status", json={"status": "pending"})
    assert reopened.status_code == 409
    assert client.get(f"/orders/detail/{order_id}").json()["status"] == "cancelled"

    assert client.patch(f"/orders/{order_id}/status", json={"status": "refunded"}).status_code == 200


async def test_failed_order_write_returns_stock(db, product, monkeypatch):
    product_id = str(product["_id"])
    await cart_service.add_to_cart(db, "u1", product_id, "30C", "Dilution", 3)

    def broken_dump(self, **kwargs):
        raise RuntimeError("write failed")

    monkeypatch.setattr(order_service.OrderDocument, "model_dump", broken_dump)

    with pytest.raises(RuntimeError):
        await order_service.create_order(db, "u1", ShippingDetails(**shipping_payload()), "cod")

    restored = await db.products.find_one({"_id": product["_id"]})
    assert restored["stock"] == 25
    assert await db.orders.count_documents({}) == 0
    assert len((await cart_service.get_cart(db, "u1"))["items"]) == 1
