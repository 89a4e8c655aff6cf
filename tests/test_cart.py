from bson import ObjectId

from storefront.services import cart as cart_service

from .conftest import product_payload


def _create_product(client, **overrides):
    res = client.post("/products", json=product_payload(**overrides))
    assert res.status_code == 201, res.text
    return res.json()["_id"]


def _add(client, user_id, product_id, **overrides):
    body = {"product_id": product_id, "potency": "30C", "form": "Dilution", "quantity": 1}
    body.update(overrides)
    return client.post(f"/cart/{user_id}/items", json=body)


def test_same_variant_merges_into_one_row(client):
    product_id = _create_product(client)

    _add(client, "u1", product_id, quantity=2)
    res = _add(client, "u1", product_id, quantity=3)
    assert res.status_code == 201, res.text

    cart = res.json()
    assert len(cart["items"]) == 1
    assert cart["items"][0]["quantity"] == 5
    assert cart["item_count"] == 5
    assert cart["subtotal"] == 600.0


def test_different_variants_get_separate_rows(client):
    product_id = _create_product(client)

    _add(client, "u1", product_id)
    _add(client, "u1", product_id, potency="200C")
    res = _add(client, "u1", product_id, packing_size="100ml")

    assert len(res.json()["items"]) == 3


def test_unknown_variant_is_rejected(client):
    product_id = _create_product(client)

    res = _add(client, "u1", product_id, potency="1M")
    assert res.status_code == 400
    assert "1M" in res.json()["detail"]

    res = _add(client, "u1", product_id, packing_size="500ml")
    assert res.status_code == 400


def test_missing_product(client):
    res = _add(client, "u1", str(ObjectId()))
    assert res.status_code == 404


def test_invalid_product_id_fails_validation(client):
    res = _add(client, "u1", "not-an-id")
    assert res.status_code == 422
    assert res.json()["details"][0]["field"].endswith("product_id")


def test_update_quantity_and_remove(client):
    product_id = _create_product(client)
    item_id = _add(client, "u1", product_id).json()["items"][0]["_id"]

    res = client.put(f"/cart/u1/items/{item_id}", json={"quantity": 4})
    assert res.status_code == 200
    assert res.json()["items"][0]["quantity"] == 4

    res = client.put(f"/cart/u1/items/{item_id}", json={"quantity": 0})
    assert res.status_code == 200
    assert res.json()["items"] == []


def test_rows_belong_to_their_user(client):
    product_id = _create_product(client)
    item_id = _add(client, "u1", product_id).json()["items"][0]["_id"]

    res = client.delete(f"/cart/u2/items/{item_id}")
    assert res.status_code == 404


def test_deleted_product_drops_out_of_cart(client):
    keep = _create_product(client, name="Rhus Tox")
    gone = _create_product(client, name="Bryonia")
    _add(client, "u1", keep)
    _add(client, "u1", gone)

    assert client.delete(f"/products/{gone}").status_code == 204

    cart = client.get("/cart/u1").json()
    assert [line["product_id"] for line in cart["items"]] == [keep]


def test_clear_cart(client):
    product_id = _create_product(client)
    _add(client, "u1", product_id)

    assert client.delete("/cart/u1").status_code == 204
    assert client.get("/cart/u1").json()["items"] == []


async def test_orphaned_rows_are_skipped(db, product):
    await cart_service.add_to_cart(db, "u1", str(product["_id"]), "30C", "Dilution", 2)
    await db.products.delete_one({"_id": product["_id"]})

    cart = await cart_service.get_cart(db, "u1")
    assert cart["items"] == []
    assert cart["subtotal"] == 0


def test_repeat_adds_cannot_pass_the_variant_cap(client):
    product_id = _create_product(client)

    assert _add(client, "u1", product_id, quantity=60).status_code == 201
    res = _add(client, "u1", product_id, quantity=60)
    assert res.status_code == 400

    cart = client.get("/cart/u1").json()
    assert cart["items"][0]["quantity"] == 60

    assert _add(client, "u1", product_id, quantity=40).json()["items"][0]["quantity"] == 100
    assert _add(client, "u1", product_id, quantity=1).status_code == 400
