import pytest
from fastapi import HTTPException

from storefront.models.order import ShippingDetails
from storefront.services import cart as cart_service
from storefront.services import orders as order_service
from storefront.services import products as product_service
from storefront.services import reviews as review_service
from storefront.utils.review_checks import analyze_sentiment, check_duplicate, detect_spam, text_similarity

from .conftest import product_payload, shipping_payload

SPAMMY = "Buy now and mail me at deals@cheap.com for more"


def _product(client, **overrides):
    res = client.post("/products", json=product_payload(**overrides))
    assert res.status_code == 201, res.text
    return res.json()["_id"]


def _review(client, product_id, user_id, rating=5, **values):
    body = {"user_id": user_id, "rating": rating, "comment": "Really helped with my bruises after a fall"}
    body.update(values)
    return client.post(f"/products/{product_id}/reviews", json=body)


def test_plain_text_is_not_spam():
    assert detect_spam("Really helped with my bruises after a fall") == {"score": 0, "flags": []}
    assert detect_spam("") == {"score": 0, "flags": []}


def test_links_and_contact_details_score_as_spam():
    result = detect_spam(SPAMMY)
    assert set(result["flags"]) == {"contains_links", "contains_email", "spam_phrase"}
    assert result["score"] == 70

    shouty = detect_spam("THIS IS THE BEST REMEDY EVER!!!!!!")
    assert "excessive_caps" in shouty["flags"]
    assert "excessive_exclamation" in shouty["flags"]


def test_spam_score_is_capped():
    text = "CLICK HERE www.x.com a@b.com 555-123-4567 " + "cheap " * 6 + "!!!!!!"
    assert detect_spam(text)["score"] == 100


def test_sentiment_blends_words_and_rating():
    assert analyze_sentiment("Terrible, a waste of money", 1)["sentiment"] == "negative"
    assert analyze_sentiment("Excellent remedy, works great", 5)["sentiment"] == "positive"
    # Negation pulls a mildly positive text back to neutral
    assert analyze_sentiment("not good", 3)["sentiment"] == "neutral"
    assert analyze_sentiment(None, 3) == {"sentiment": "neutral", "confidence": 0.5}
    assert analyze_sentiment("", 5) == {"sentiment": "positive", "confidence": 0.7}


def test_similarity_ignores_short_words_and_punctuation():
    assert text_similarity("Great remedy for bruises", "great remedy for bruises!") == 100
    assert text_similarity("a b c", "a b c") == 0
    assert text_similarity("Great remedy", None) == 0
    assert text_similarity("great remedy", "great syrup") == 33


def test_duplicates_only_compare_the_same_user():
    earlier = [
        {"_id": "r1", "user_id": "u2", "comment": "Great remedy for bruises"},
        {"_id": "r2", "user_id": "u1", "comment": "Nice packaging, slow delivery"},
    ]
    result = check_duplicate({"user_id": "u1", "comment": "Great remedy for bruises"}, earlier)
    assert result == {"is_duplicate": False, "similarity_score": 0, "duplicate_of": None}

    earlier.append({"_id": "r3", "user_id": "u1", "title": "Great remedy", "comment": "for bruises"})
    result = check_duplicate({"user_id": "u1", "comment": "Great remedy for bruises"}, earlier)
    assert result == {"is_duplicate": True, "similarity_score": 100, "duplicate_of": "r3"}


async def test_approved_reviews_update_product_rating(db, product):
    product_id = str(product["_id"])
    await review_service.submit_review(db, product_id, "u1", 5, comment="Really helped with my bruises")
    review = await review_service.submit_review(db, product_id, "u2", 4, title="Works well for sprains")

    assert review["status"] == "approved"
    assert review["user_name"] == "Anonymous"
    assert review["verified_purchase"] is False

    stored = await db.products.find_one({"_id": product["_id"]})
    assert stored["rating_count"] == 2
    assert stored["average_rating"] == 4.5


async def test_second_review_by_same_user_conflicts(db, product):
    product_id = str(product["_id"])
    await review_service.submit_review(db, product_id, "u1", 5, comment="Really helped with my bruises")

    with pytest.raises(HTTPException) as exc:
        await review_service.submit_review(db, product_id, "u1", 1, comment="Changed my mind")
    assert exc.value.status_code == 409
    assert await db.reviews.count_documents({}) == 1


async def test_spam_review_waits_for_moderation(db, product):
    product_id = str(product["_id"])
    held = await review_service.submit_review(db, product_id, "u1", 5, comment=SPAMMY)

    assert held["status"] == "pending"
    assert held["spam_score"] == 70
    assert await review_service.get_product_reviews(db, product_id) == []
    assert len(await review_service.get_product_reviews(db, product_id, include_hidden=True)) == 1
    assert (await db.products.find_one({"_id": product["_id"]})).get("rating_count") is None

    await review_service.moderate_review(db, str(held["_id"]), "approved", "admin")
    stored = await db.products.find_one({"_id": product["_id"]})
    assert stored["rating_count"] == 1
    assert stored["average_rating"] == 5.0


async def test_repeated_text_on_another_product_is_held(db, product):
    other = await product_service.create_product(db, product_payload(name="Rhus Tox"), "admin")
    first = await review_service.submit_review(db, str(product["_id"]), "u1", 5, comment="Great remedy for bruises and sprains")
    copy = await review_service.submit_review(db, str(other["_id"]), "u1", 5, comment="Great remedy for bruises and sprains")

    assert copy["status"] == "pending"
    assert "duplicate" in copy["spam_flags"]
    assert copy["duplicate_of"] == str(first["_id"])


async def test_review_after_order_is_verified(db, product):
    product_id = str(product["_id"])
    await cart_service.add_to_cart(db, "u1", product_id, "30C", "Dilution", 1)
    await order_service.create_order(db, "u1", ShippingDetails(**shipping_payload()), "cod")

    review = await review_service.submit_review(db, product_id, "u1", 5, comment="Really helped with my bruises")
    assert review["verified_purchase"] is True


async def test_helpful_votes_count_once(db, product):
    product_id = str(product["_id"])
    review = await review_service.submit_review(db, product_id, "u1", 5, comment="Really helped with my bruises")
    review_id = str(review["_id"])

    voted = await review_service.mark_helpful(db, review_id, "u2")
    assert voted["helpful_count"] == 1

    with pytest.raises(HTTPException) as again:
        await review_service.mark_helpful(db, review_id, "u2")
    assert again.value.status_code == 409

    with pytest.raises(HTTPException) as own:
        await review_service.mark_helpful(db, review_id, "u1")
    assert own.value.status_code == 400

    assert (await review_service.verify_review_exists(review_id, db))["helpful_count"] == 1


async def test_deleting_product_removes_its_reviews(db, product):
    product_id = str(product["_id"])
    await review_service.submit_review(db, product_id, "u1", 5, comment="Really helped with my bruises")

    await product_service.delete_product(db, product_id, "admin")
    assert await db.reviews.count_documents({"product_id": product_id}) == 0


def test_review_endpoints(client):
    product_id = _product(client)

    assert _review(client, product_id, "u1", rating=6).status_code == 422
    no_text = client.post(f"/products/{product_id}/reviews", json={"user_id": "u1", "rating": 4})
    assert no_text.status_code == 422

    res = _review(client, product_id, "u1", rating=5, user_name="Asha")
    assert res.status_code == 201, res.text
    review = res.json()
    assert review["status"] == "approved"
    assert review["sentiment"] == "positive"

    listed = client.get(f"/products/{product_id}/reviews").json()
    assert [r["_id"] for r in listed] == [review["_id"]]

    product = client.get(f"/products/{product_id}").json()
    assert product["rating_count"] == 1
    assert product["average_rating"] == 5.0

    unknown = client.post("/products/0123456789abcdef01234567/reviews", json={"user_id": "u1", "rating": 4, "comment": "ok then"})
    assert unknown.status_code == 404


def test_moderation_queue_and_reply(client):
    product_id = _product(client)
    held = _review(client, product_id, "u1", comment=SPAMMY).json()
    _review(client, product_id, "u2")

    queue = client.get("/reviews", params={"status": "pending"}).json()
    assert [r["_id"] for r in queue] == [held["_id"]]

    res = client.patch(f"/reviews/{held['_id']}/status", json={"status": "rejected", "performed_by": "mod1"})
    assert res.status_code == 200
    assert res.json()["status"] == "rejected"
    assert client.get("/reviews", params={"status": "pending"}).json() == []

    reply = client.post(f"/reviews/{held['_id']}/reply", json={"reply": "Thanks for the feedback"})
    assert reply.status_code == 200
    assert reply.json()["admin_reply"] == "Thanks for the feedback"
    assert reply.json()["admin_replied_at"] is not None

    logs = client.get("/audit-logs", params={"entity_type": "review", "entity_id": held["_id"]}).json()
    assert {log["action"] for log in logs["logs"]} == {"moderate_review", "reply_review"}


def test_delete_review_refreshes_rating(client):
    product_id = _product(client)
    first = _review(client, product_id, "u1", rating=5).json()
    _review(client, product_id, "u2", rating=3, comment="Did little for my sprain")

    assert client.post(f"/reviews/{first['_id']}/helpful", json={"user_id": "u2"}).json()["helpful_count"] == 1
    assert client.delete(f"/reviews/{first['_id']}", params={"performed_by": "mod1"}).status_code == 204

    product = client.get(f"/products/{product_id}").json()
    assert product["rating_count"] == 1
    assert product["average_rating"] == 3.0
    assert client.delete(f"/reviews/{first['_id']}").status_code == 404
