"""
Product reviews, moderation and the cached rating on each product.
"""
import logging
from typing import Any, Dict, List, Optional

from fastapi import HTTPException
from motor.motor_asyncio import AsyncIOMotorDatabase
from pymongo import ReturnDocument
from pymongo.errors import DuplicateKeyError

from ..models.review import SPAM_HOLD_SCORE, ReviewDocument
from ..utils.dates import utc_now
from ..utils.dependencies import validate_object_id, verify_document_exists, verify_product_exists
from ..utils.review_checks import analyze_sentiment, check_duplicate, detect_spam
from .audit import record_audit

logger = logging.getLogger(__name__)

# Orders in these states do not count as a purchase
NON_PURCHASE_STATUSES = ["cancelled", "refunded"]


async def verify_review_exists(review_id: str, db: AsyncIOMotorDatabase) -> Dict[str, Any]:
    return await verify_document_exists("reviews", review_id, db, "review")


async def has_purchased(db: AsyncIOMotorDatabase, user_id: str, product_id: str) -> bool:
    order = await db.orders.find_one({
        "user_id": user_id,
        "items.product_id": product_id,
        "status": {"$nin": NON_PURCHASE_STATUSES},
    })
    return order is not None


async def refresh_product_rating(db: AsyncIOMotorDatabase, product_id: str) -> None:
    """Recompute ``rating_count`` and ``average_rating`` from approved reviews."""
    approved = await db.reviews.find({"product_id": product_id, "status": "approved"}).to_list(length=None)
    ratings = [review["rating"] for review in approved]
    average = round(sum(ratings) / len(ratings), 1) if ratings else None
    await db.products.update_one(
        {"_id": validate_object_id(product_id, "product")},
        {"$set": {"rating_count": len(ratings), "average_rating": average}},
    )


async def submit_review(
    db: AsyncIOMotorDatabase,
    product_id: str,
    user_id: str,
    rating: int,
    title: Optional[str] = None,
    comment: Optional[str] = None,
    user_name: Optional[str] = None,
) -> Dict[str, Any]:
    """
    Store a review. One review per user and product.

    Reviews that look like spam, or that repeat one of the user's earlier
    reviews, are held as ``pending``; everything else is approved at once.

    Raises:
        HTTPException: 404 for an unknown product, 409 when the user already
            reviewed it
    """
    await verify_product_exists(product_id, db)
    if await db.reviews.find_one({"product_id": product_id, "user_id": user_id}):
        raise HTTPException(status_code=409, detail="You have already reviewed this product")

    text = f"{title or ''} {comment or ''}".strip()
    spam = detect_spam(text)
    sentiment = analyze_sentiment(text, rating)
    earlier = await db.reviews.find({"user_id": user_id}).to_list(length=None)
    duplicate = check_duplicate({"user_id": user_id, "title": title, "comment": comment}, earlier)

    flags = list(spam["flags"])
    if duplicate["is_duplicate"]:
        flags.append("duplicate")
    held = spam["score"] >= SPAM_HOLD_SCORE or duplicate["is_duplicate"]

    review = ReviewDocument(
        product_id=product_id,
        user_id=user_id,
        user_name=user_name or "Anonymous",
        rating=rating,
        title=title,
        comment=comment,
        verified_purchase=await has_purchased(db, user_id, product_id),
        status="pending" if held else "approved",
        spam_score=spam["score"],
        spam_flags=flags,
        sentiment=sentiment["sentiment"],
        sentiment_confidence=sentiment["confidence"],
        duplicate_of=duplicate["duplicate_of"] if duplicate["is_duplicate"] else None,
        created_at=utc_now(),
    )
    try:
        result = await db.reviews.insert_one(review.model_dump(exclude={"id"}))
    except DuplicateKeyError:
        raise HTTPException(status_code=409, detail="You have already reviewed this product")

    if review.status == "approved":
        await refresh_product_rating(db, product_id)
    else:
        logger.warning(f"Review by {user_id} on {product_id} held for moderation: {', '.join(flags)}")

    logger.info(f"Review created: {result.inserted_id} ({review.status})")
    return await db.reviews.find_one({"_id": result.inserted_id})


async def get_product_reviews(
    db: AsyncIOMotorDatabase, product_id: str, include_hidden: bool = False
) -> List[Dict[str, Any]]:
    """Newest-first reviews of a product; only approved ones unless asked otherwise."""
    await verify_product_exists(product_id, db)
    filter_query: Dict[str, Any] = {"product_id": product_id}
    if not include_hidden:
        filter_query["status"] = "approved"
    return await db.reviews.find(filter_query).sort("created_at", -1).to_list(length=None)


async def get_reviews_by_status(db: AsyncIOMotorDatabase, status: str, limit: int) -> List[Dict[str, Any]]:
    cursor = db.reviews.find({"status": status}).sort("created_at", 1).limit(limit)
    return await cursor.to_list(length=limit)


async def moderate_review(
    db: AsyncIOMotorDatabase, review_id: str, status: str, performed_by: str
) -> Dict[str, Any]:
    review = await verify_review_exists(review_id, db)
    updated = await db.reviews.find_one_and_update(
        {"_id": review["_id"]},
        {"$set": {"status": status, "updated_at": utc_now()}},
        return_document=ReturnDocument.AFTER,
    )
    await refresh_product_rating(db, review["product_id"])
    await record_audit(
        db,
        action="moderate_review",
        entity_type="review",
        entity_id=review_id,
        performed_by=performed_by,
        details=f"Review status changed from {review['status']} to {status}",
    )
    return updated


async def reply_to_review(
    db: AsyncIOMotorDatabase, review_id: str, reply: str, performed_by: str
) -> Dict[str, Any]:
    review = await verify_review_exists(review_id, db)
    now = utc_now()
    updated = await db.reviews.find_one_and_update(
        {"_id": review["_id"]},
        {"$set": {"admin_reply": reply, "admin_replied_at": now, "updated_at": now}},
        return_document=ReturnDocument.AFTER,
    )
    await record_audit(
        db,
        action="reply_review",
        entity_type="review",
        entity_id=review_id,
        performed_by=performed_by,
        details="Replied to review",
    )
    return updated


async def mark_helpful(db: AsyncIOMotorDatabase, review_id: str, user_id: str) -> Dict[str, Any]:
    """Count a user's helpful vote once."""
    review = await verify_review_exists(review_id, db)
    if review["user_id"] == user_id:
        raise HTTPException(status_code=400, detail="You cannot vote on your own review")
    if await db.review_interactions.find_one({"review_id": review_id, "user_id": user_id, "type": "helpful"}):
        raise HTTPException(status_code=409, detail="You already marked this review as helpful")

    try:
        await db.review_interactions.insert_one({
            "review_id": review_id, "user_id": user_id, "type": "helpful", "created_at": utc_now(),
        })
    except DuplicateKeyError:
        raise HTTPException(status_code=409, detail="You already marked this review as helpful")

    return await db.reviews.find_one_and_update(
        {"_id": review["_id"]}, {"$inc": {"helpful_count": 1}}, return_document=ReturnDocument.AFTER
    )


async def delete_review(db: AsyncIOMotorDatabase, review_id: str, performed_by: str) -> None:
    review = await verify_review_exists(review_id, db)
    await db.reviews.delete_one({"_id": review["_id"]})
    await db.review_interactions.delete_many({"review_id": review_id})
    await refresh_product_rating(db, review["product_id"])
    await record_audit(
        db,
        action="delete_review",
        entity_type="review",
        entity_id=review_id,
        performed_by=performed_by,
        details=f"Deleted {review['rating']}-star review on product {review['product_id']}",
    )
    logger.info(f"Review deleted: {review_id}")
