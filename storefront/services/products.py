"""
Product catalog operations.
"""
import logging
import re
from typing import Any, Dict, List, Optional, Tuple

from motor.motor_asyncio import AsyncIOMotorDatabase
from pymongo import ReturnDocument

from ..models.audit import StockHistoryDocument
from ..models.product import ProductDocument, generate_search_text
from ..utils.dates import utc_now
from ..utils.dependencies import verify_product_exists
from .audit import record_audit

logger = logging.getLogger(__name__)

SEARCH_FIELDS = ("name", "brand", "description", "symptoms_tags", "forms", "potencies")


def _search_text_for(product: Dict[str, Any]) -> str:
    return generate_search_text(
        product["name"],
        product.get("brand"),
        product.get("description", ""),
        product.get("symptoms_tags", []),
        product.get("forms", []),
        product.get("potencies", []),
    )


async def create_product(db: AsyncIOMotorDatabase, values: Dict[str, Any], performed_by: str) -> Dict[str, Any]:
    now = utc_now()
    product = ProductDocument(**values, created_at=now, updated_at=now)
    product_doc = product.model_dump(exclude={"id"})
    product_doc["search_text"] = _search_text_for(product_doc)

    result = await db.products.insert_one(product_doc)
    product_id = str(result.inserted_id)

    if product.stock > 0:
        opening = StockHistoryDocument(
            product_id=product_id,
            previous_stock=0,
            new_stock=product.stock,
            change=product.stock,
            reason="initial_stock",
            performed_by=performed_by,
            timestamp=now,
        )
        await db.product_stock_history.insert_one(opening.model_dump(exclude={"id"}))

    await record_audit(
        db,
        action="create_product",
        entity_type="product",
        entity_id=product_id,
        performed_by=performed_by,
        details=f"Created product: {product.name}",
    )

    logger.info(f"Product created: {product.name} (ID: {product_id})")
    return await db.products.find_one({"_id": result.inserted_id})


async def list_products(
    db: AsyncIOMotorDatabase,
    limit: int,
    offset: int,
    q: Optional[str] = None,
    category: Optional[str] = None,
    brand: Optional[str] = None,
    min_price: Optional[float] = None,
    max_price: Optional[float] = None,
    in_stock: Optional[bool] = None,
) -> Tuple[List[Dict[str, Any]], int]:
    filter_query: Dict[str, Any] = {}

    if q:
        filter_query["search_text"] = {"$regex": re.escape(q.lower())}
    if category:
        filter_query["category"] = {"$regex": f"^{re.escape(category)}$", "$options": "i"}
    if brand:
        filter_query["brand"] = {"$regex": re.escape(brand), "$options": "i"}

    if min_price is not None or max_price is not None:
        price_filter = {}
        if min_price is not None:
            price_filter["$gte"] = min_price
        if max_price is not None:
            price_filter["$lte"] = max_price
        filter_query["base_price"] = price_filter

    if in_stock is True:
        filter_query["stock"] = {"$gt": 0}
    elif in_stock is False:
        filter_query["stock"] = {"$eq": 0}

    total = await db.products.count_documents(filter_query)
    cursor = db.products.find(filter_query).sort("created_at", -1).skip(offset).limit(limit)
    return await cursor.to_list(length=limit), total


async def search_products(db: AsyncIOMotorDatabase, query: str) -> List[Dict[str, Any]]:
    """Case-insensitive match on name, description or any symptom tag."""
    products = await db.products.find({}).to_list(length=None)
    if not query:
        return products

    needle = query.lower()
    return [
        product for product in products
        if needle in product["name"].lower()
        or needle in product.get("description", "").lower()
        or any(needle in tag.lower() for tag in product.get("symptoms_tags", []))
    ]


async def update_product(
    db: AsyncIOMotorDatabase, product_id: str, updates: Dict[str, Any], performed_by: str
) -> Dict[str, Any]:
    """
    Patch a product. While a scheduled price is in effect a new ``base_price``
    is stored as the regular price so the override keeps showing.
    """
    product = await verify_product_exists(product_id, db)
    update_doc = dict(updates)

    if "base_price" in update_doc and product.get("regular_price") is not None:
        update_doc["regular_price"] = update_doc.pop("base_price")

    if any(field in update_doc for field in SEARCH_FIELDS):
        update_doc["search_text"] = _search_text_for({**product, **update_doc})

    update_doc["updated_at"] = utc_now()
    updated = await db.products.find_one_and_update(
        {"_id": product["_id"]}, {"$set": update_doc}, return_document=ReturnDocument.AFTER
    )

    changed = sorted(k for k in updates)
    await record_audit(
        db,
        action="update_product",
        entity_type="product",
        entity_id=product_id,
        performed_by=performed_by,
        details=f"Updated product {product['name']}: {', '.join(changed)}",
    )

    logger.info(f"Product updated: {product_id}")
    return updated


async def delete_product(db: AsyncIOMotorDatabase, product_id: str, performed_by: str) -> None:
    product = await verify_product_exists(product_id, db)

    await db.products.delete_one({"_id": product["_id"]})
    removed = await db.cart_items.delete_many({"product_id": product_id})
    await db.reviews.delete_many({"product_id": product_id})
    await record_audit(
        db,
        action="delete_product",
        entity_type="product",
        entity_id=product_id,
        performed_by=performed_by,
        details=f"Deleted product {product['name']} and {removed.deleted_count} cart rows",
    )

    logger.info(f"Product deleted: {product_id}")
