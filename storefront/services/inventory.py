"""
Stock levels, stock history and low-stock detection.

Every change to ``products.stock`` goes through ``adjust_stock`` so that the
history collection stays a complete record of how the level moved.
"""
import logging
from typing import Any, Dict, List, Optional

from fastapi import HTTPException
from motor.motor_asyncio import AsyncIOMotorDatabase
from pymongo import ReturnDocument

from ..config.settings import get_settings
from ..models.audit import StockHistoryDocument
from ..utils.dates import utc_now
from ..utils.dependencies import verify_product_exists
from .audit import record_audit

logger = logging.getLogger(__name__)
settings = get_settings()


def stock_threshold(product: Dict[str, Any]) -> int:
    """Low-stock threshold for a product, falling back to the configured default."""
    return product.get("min_stock") or settings.default_min_stock


def is_low_stock(product: Dict[str, Any]) -> bool:
    return product.get("stock", 0) <= stock_threshold(product)


async def adjust_stock(
    db: AsyncIOMotorDatabase,
    product_id: str,
    reason: str,
    performed_by: str,
    change: Optional[int] = None,
    new_stock: Optional[int] = None,
    audit: bool = True,
) -> Dict[str, Any]:
    """
    Move a product's stock by ``change`` or set it to ``new_stock``.

    Decrements are applied with a guarded ``$inc`` so the level never goes
    below zero even under concurrent writers.

    Raises:
        HTTPException: 400 when the result would be negative
    """
    if (change is None) == (new_stock is None):
        raise ValueError("Exactly one of change or new_stock is required")

    product = await verify_product_exists(product_id, db)
    now = utc_now()

    if change is not None:
        filter_query: Dict[str, Any] = {"_id": product["_id"]}
        if change < 0:
            filter_query["stock"] = {"$gte": -change}
        before = await db.products.find_one_and_update(
            filter_query,
            {"$inc": {"stock": change}, "$set": {"updated_at": now}},
            return_document=ReturnDocument.BEFORE,
        )
        if before is None:
            raise HTTPException(
                status_code=400,
                detail=f"Insufficient stock for product {product_id}. Available: {product.get('stock', 0)}, Requested: {-change}"
            )
        previous_stock = before.get("stock", 0)
        resulting_stock = previous_stock + change
    else:
        if new_stock < 0:
            raise HTTPException(status_code=400, detail="Stock cannot be negative")
        before = await db.products.find_one_and_update(
            {"_id": product["_id"]},
            {"$set": {"stock": new_stock, "updated_at": now}},
            return_document=ReturnDocument.BEFORE,
        )
        previous_stock = before.get("stock", 0)
        resulting_stock = new_stock

    entry = StockHistoryDocument(
        product_id=product_id,
        previous_stock=previous_stock,
        new_stock=resulting_stock,
        change=resulting_stock - previous_stock,
        reason=reason,
        performed_by=performed_by,
        timestamp=now,
    )
    await db.product_stock_history.insert_one(entry.model_dump(exclude={"id"}))

    if audit:
        await record_audit(
            db,
            action="adjust_stock",
            entity_type="product",
            entity_id=product_id,
            performed_by=performed_by,
            details=f"Stock changed from {previous_stock} to {resulting_stock} ({reason})",
        )

    threshold = stock_threshold(product)
    if previous_stock > threshold >= resulting_stock:
        logger.warning(f"⚠️  Product {product_id} ({product.get('name')}) is low on stock: {resulting_stock} <= {threshold}")
        await record_audit(
            db,
            action="low_stock_alert",
            entity_type="product",
            entity_id=product_id,
            performed_by=performed_by,
            details=f"Stock {resulting_stock} at or below threshold {threshold}",
        )

    return await db.products.find_one({"_id": product["_id"]})


async def get_stock_history(db: AsyncIOMotorDatabase, product_id: str, limit: int = 50) -> List[Dict[str, Any]]:
    """Newest-first stock history for one product."""
    await verify_product_exists(product_id, db)
    cursor = db.product_stock_history.find({"product_id": product_id}).sort("timestamp", -1).limit(limit)
    return await cursor.to_list(length=limit)


async def get_all_stock_history(db: AsyncIOMotorDatabase, limit: int = 100) -> List[Dict[str, Any]]:
    """Newest-first stock history across all products."""
    cursor = db.product_stock_history.find({}).sort("timestamp", -1).limit(limit)
    return await cursor.to_list(length=limit)


async def get_low_stock_products(db: AsyncIOMotorDatabase) -> List[Dict[str, Any]]:
    """Products at or below their low-stock threshold, lowest stock first."""
    products = await db.products.find({}).to_list(length=None)
    low = [product for product in products if is_low_stock(product)]
    return sorted(low, key=lambda product: product.get("stock", 0))
