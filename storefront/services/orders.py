"""
Checkout and order lifecycle.
"""
import logging
from collections import defaultdict
from typing import Any, Dict, List, Optional, Tuple

from fastapi import HTTPException
from motor.motor_asyncio import AsyncIOMotorDatabase
from pymongo import ReturnDocument

from ..config.settings import get_settings
from ..models.order import OrderDocument, OrderItemDocument, OrderStatusHistory, ShippingDetails
from ..utils.dates import utc_now
from ..utils.dependencies import verify_order_exists
from . import cart as cart_service
from .audit import record_audit
from .inventory import adjust_stock
from .site_settings import shipping_fee_for, shipping_rules

logger = logging.getLogger(__name__)
settings = get_settings()


async def _release_stock(db: AsyncIOMotorDatabase, taken: List[Tuple[str, int]], performed_by: str) -> None:
    for product_id, quantity in taken:
        await adjust_stock(
            db, product_id, reason="order_rollback", performed_by=performed_by,
            change=quantity, audit=False,
        )


async def _reserve_stock(db: AsyncIOMotorDatabase, quantities: Dict[str, int], performed_by: str) -> List[Tuple[str, int]]:
    """Take stock for every product, giving back what was taken if any line fails."""
    taken: List[Tuple[str, int]] = []
    try:
        for product_id, quantity in quantities.items():
            await adjust_stock(
                db, product_id, reason="order_placed", performed_by=performed_by,
                change=-quantity, audit=False,
            )
            taken.append((product_id, quantity))
    except HTTPException:
        await _release_stock(db, taken, performed_by)
        raise
    return taken


async def create_order(
    db: AsyncIOMotorDatabase,
    user_id: str,
    shipping_details: ShippingDetails,
    payment_method: str,
    payment_id: Optional[str] = None,
    notes: Optional[str] = None,
) -> Dict[str, Any]:
    """
    Turn the user's cart into an order.

    Lines are priced at the product's current ``base_price``; stock for every
    product is taken before the order is written and the cart is emptied
    afterwards.
    """
    cart = await cart_service.get_cart(db, user_id)
    rows = cart["items"]
    if not rows:
        raise HTTPException(status_code=400, detail="Cart is empty")
    if len(rows) > settings.max_order_items:
        raise HTTPException(status_code=400, detail=f"An order can hold at most {settings.max_order_items} items")

    # Variants of one product share its stock
    quantities: Dict[str, int] = defaultdict(int)
    for row in rows:
        quantities[row["product_id"]] += row["quantity"]

    for row in rows:
        product = row["product"]
        wanted = quantities[row["product_id"]]
        if product.get("stock", 0) < wanted:
            raise HTTPException(
                status_code=400,
                detail=f"Insufficient stock for {product['name']}. Available: {product.get('stock', 0)}, Requested: {wanted}"
            )

    items = [
        OrderItemDocument(
            product_id=row["product_id"],
            name=row["product"]["name"],
            potency=row["potency"],
            form=row["form"],
            packing_size=row.get("packing_size"),
            quantity=row["quantity"],
            price=row["product"]["base_price"],
            total_price=row["line_total"],
        )
        for row in rows
    ]
    subtotal = cart["subtotal"]
    fee, threshold = await shipping_rules(db)
    shipping_fee = shipping_fee_for(subtotal, fee, threshold)
    now = utc_now()

    order = OrderDocument(
        user_id=user_id,
        items=items,
        subtotal=subtotal,
        shipping_fee=shipping_fee,
        total=round(subtotal + shipping_fee, 2),
        status="pending",
        status_history=[OrderStatusHistory(status="pending", timestamp=now, note="Order placed", updated_by=user_id)],
        shipping_address=shipping_details.as_text(),
        shipping_details=shipping_details,
        payment_method=payment_method,
        payment_status="paid" if payment_id else "pending",
        payment_id=payment_id,
        notes=notes,
        created_at=now,
        updated_at=now,
    )

    taken = await _reserve_stock(db, dict(quantities), performed_by=user_id)

    try:
        result = await db.orders.insert_one(order.model_dump(exclude={"id"}))
    except Exception as e:
        logger.error(f"Failed to save order for user {user_id}, returning stock: {str(e)}")
        await _release_stock(db, taken, performed_by=user_id)
        raise
    await cart_service.clear_cart(db, user_id)
    await record_audit(
        db,
        action="create_order",
        entity_type="order",
        entity_id=str(result.inserted_id),
        performed_by=user_id,
        details=f"Order of {len(items)} items totalling ₹{order.total}",
    )

    logger.info(f"Order created: {result.inserted_id} for user {user_id}")
    return await db.orders.find_one({"_id": result.inserted_id})


async def _list(
    db: AsyncIOMotorDatabase, filter_query: Dict[str, Any], limit: int, offset: int
) -> Tuple[List[Dict[str, Any]], int]:
    total = await db.orders.count_documents(filter_query)
    cursor = db.orders.find(filter_query).sort("created_at", -1).skip(offset).limit(limit)
    return await cursor.to_list(length=limit), total


async def get_user_orders(
    db: AsyncIOMotorDatabase, user_id: str, status: Optional[str], limit: int, offset: int
) -> Tuple[List[Dict[str, Any]], int]:
    filter_query: Dict[str, Any] = {"user_id": user_id}
    if status:
        filter_query["status"] = status.lower()
    return await _list(db, filter_query, limit, offset)


async def list_orders(
    db: AsyncIOMotorDatabase, status: Optional[str], limit: int, offset: int
) -> Tuple[List[Dict[str, Any]], int]:
    filter_query: Dict[str, Any] = {}
    if status:
        filter_query["status"] = status.lower()
    return await _list(db, filter_query, limit, offset)


async def _restock(db: AsyncIOMotorDatabase, order: Dict[str, Any], performed_by: str) -> None:
    quantities: Dict[str, int] = defaultdict(int)
    for item in order["items"]:
        quantities[item["product_id"]] += item["quantity"]

    for product_id, quantity in quantities.items():
        try:
            await adjust_stock(
                db, product_id, reason="order_cancelled", performed_by=performed_by,
                change=quantity, audit=False,
            )
        except HTTPException as e:
            if e.status_code != 404:
                raise
            logger.warning(f"Product {product_id} no longer exists, skipping restock for order {order['_id']}")


async def update_order_status(
    db: AsyncIOMotorDatabase,
    order_id: str,
    status: str,
    performed_by: str,
    note: Optional[str] = None,
) -> Dict[str, Any]:
    """Change the status, append to the status history and restock on cancellation."""
    order = await verify_order_exists(order_id, db)
    previous = order.get("status")
    if previous == status:
        raise HTTPException(status_code=409, detail=f"Order {order_id} is already {status}")
    # Stock of a cancelled order has been given back; it can only be refunded now
    if order.get("stock_restored") and status != "refunded":
        raise HTTPException(status_code=409, detail=f"Order {order_id} was cancelled and can only be refunded")

    now = utc_now()
    entry = OrderStatusHistory(status=status, timestamp=now, note=note, updated_by=performed_by)
    update: Dict[str, Any] = {"status": status, "updated_at": now}

    if status == "cancelled" and not order.get("stock_restored"):
        await _restock(db, order, performed_by)
        update["stock_restored"] = True

    updated = await db.orders.find_one_and_update(
        {"_id": order["_id"]},
        {"$set": update, "$push": {"status_history": entry.model_dump()}},
        return_document=ReturnDocument.AFTER,
    )
    await record_audit(
        db,
        action="update_order_status",
        entity_type="order",
        entity_id=order_id,
        performed_by=performed_by,
        details=f"Order status changed from {previous} to {status}" + (f": {note}" if note else ""),
    )

    logger.info(f"Order status updated: {order_id} {previous} -> {status}")
    return updated


async def update_payment_status(
    db: AsyncIOMotorDatabase,
    order_id: str,
    payment_status: str,
    performed_by: str,
    payment_id: Optional[str] = None,
) -> Dict[str, Any]:
    order = await verify_order_exists(order_id, db)

    update: Dict[str, Any] = {"payment_status": payment_status, "updated_at": utc_now()}
    if payment_id:
        update["payment_id"] = payment_id

    updated = await db.orders.find_one_and_update(
        {"_id": order["_id"]}, {"$set": update}, return_document=ReturnDocument.AFTER
    )
    await record_audit(
        db,
        action="update_payment_status",
        entity_type="order",
        entity_id=order_id,
        performed_by=performed_by,
        details=f"Payment status changed from {order.get('payment_status')} to {payment_status}",
    )
    return updated
