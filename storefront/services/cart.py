"""
Shopping cart operations.

A user's cart holds one row per product variant (potency, form and packing
size). Adding a variant that is already in the cart increases the quantity of
the existing row instead of creating a second one.
"""
import logging
from typing import Any, Dict, List, Optional

from bson import ObjectId
from fastapi import HTTPException
from motor.motor_asyncio import AsyncIOMotorDatabase
from pymongo import ReturnDocument
from pymongo.errors import DuplicateKeyError

from ..config.settings import get_settings
from ..models.cart import CartItemDocument
from ..utils.dates import utc_now
from ..utils.dependencies import validate_object_id, verify_product_exists

logger = logging.getLogger(__name__)
settings = get_settings()


def _check_variant(product: Dict[str, Any], potency: str, form: str, packing_size: Optional[str]) -> None:
    if potency not in product.get("potencies", []):
        raise HTTPException(status_code=400, detail=f"Potency {potency} is not available for {product['name']}")
    if form not in product.get("forms", []):
        raise HTTPException(status_code=400, detail=f"Form {form} is not available for {product['name']}")
    packing_sizes = product.get("packing_sizes") or []
    if packing_size is not None and packing_sizes and packing_size not in packing_sizes:
        raise HTTPException(status_code=400, detail=f"Packing size {packing_size} is not available for {product['name']}")


async def add_to_cart(
    db: AsyncIOMotorDatabase,
    user_id: str,
    product_id: str,
    potency: str,
    form: str,
    quantity: int,
    packing_size: Optional[str] = None,
) -> Dict[str, Any]:
    """Insert a cart row for the variant or add ``quantity`` to the existing one."""
    product = await verify_product_exists(product_id, db)
    _check_variant(product, potency, form, packing_size)

    item = CartItemDocument(
        user_id=user_id,
        product_id=product_id,
        potency=potency,
        form=form,
        packing_size=packing_size,
        quantity=quantity,
    )
    now = utc_now()
    update = {
        "$inc": {"quantity": quantity},
        "$set": {"updated_at": now},
    }

    # Only rows that stay within the per-variant cap after the increment match
    guarded = {**item.variant_key(), "quantity": {"$lte": settings.max_item_quantity - quantity}}

    row = None
    if await db.cart_items.find_one(item.variant_key()) is None:
        try:
            result = await db.cart_items.insert_one(
                {**item.model_dump(exclude={"id"}), "created_at": now, "updated_at": now}
            )
            row = await db.cart_items.find_one({"_id": result.inserted_id})
        except DuplicateKeyError:
            # Lost an insert race on the unique variant index; the row exists now
            pass
    if row is None:
        row = await db.cart_items.find_one_and_update(guarded, update, return_document=ReturnDocument.AFTER)
    if row is None:
        raise HTTPException(
            status_code=400,
            detail=f"At most {settings.max_item_quantity} units of one variant can be in the cart"
        )

    logger.info(f"Cart {user_id}: {product_id} {potency}/{form} now x{row['quantity']}")
    return row


async def get_cart(db: AsyncIOMotorDatabase, user_id: str) -> Dict[str, Any]:
    """Cart rows with their products; rows whose product is gone are left out."""
    rows = await db.cart_items.find({"user_id": user_id}).sort("created_at", 1).to_list(length=None)

    object_ids = [ObjectId(row["product_id"]) for row in rows if ObjectId.is_valid(row["product_id"])]
    products = await db.products.find({"_id": {"$in": object_ids}}).to_list(length=None)
    product_map = {str(product["_id"]): product for product in products}

    items: List[Dict[str, Any]] = []
    subtotal = 0.0
    item_count = 0
    for row in rows:
        product = product_map.get(row["product_id"])
        if product is None:
            continue
        line_total = round(product["base_price"] * row["quantity"], 2)
        subtotal += line_total
        item_count += row["quantity"]
        items.append({**row, "product": product, "line_total": line_total})

    return {
        "user_id": user_id,
        "items": items,
        "subtotal": round(subtotal, 2),
        "item_count": item_count,
    }


async def _find_user_item(db: AsyncIOMotorDatabase, user_id: str, item_id: str) -> Dict[str, Any]:
    object_id = validate_object_id(item_id, "cart item")
    row = await db.cart_items.find_one({"_id": object_id, "user_id": user_id})
    if not row:
        raise HTTPException(status_code=404, detail=f"Cart item {item_id} not found")
    return row


async def update_quantity(
    db: AsyncIOMotorDatabase, user_id: str, item_id: str, quantity: int
) -> Optional[Dict[str, Any]]:
    """Set a row's quantity; zero or less removes the row and returns None."""
    row = await _find_user_item(db, user_id, item_id)

    if quantity <= 0:
        await db.cart_items.delete_one({"_id": row["_id"]})
        logger.info(f"Cart {user_id}: removed {item_id}")
        return None

    return await db.cart_items.find_one_and_update(
        {"_id": row["_id"]},
        {"$set": {"quantity": quantity, "updated_at": utc_now()}},
        return_document=ReturnDocument.AFTER,
    )


async def remove_from_cart(db: AsyncIOMotorDatabase, user_id: str, item_id: str) -> None:
    row = await _find_user_item(db, user_id, item_id)
    await db.cart_items.delete_one({"_id": row["_id"]})
    logger.info(f"Cart {user_id}: removed {item_id}")


async def clear_cart(db: AsyncIOMotorDatabase, user_id: str) -> int:
    result = await db.cart_items.delete_many({"user_id": user_id})
    return result.deleted_count
