"""
Scheduled pricing.

A product carries a list of scheduled price overrides, each valid inside a
``[start_date, end_date)`` window. A periodic job walks every product, retires
entries whose window has closed and moves ``base_price`` to the override in
effect. The price the product had before the first override is kept in
``regular_price`` and restored once no override applies.
"""
import asyncio
import logging
from datetime import datetime
from typing import Any, Dict, List, NamedTuple, Optional

from fastapi import HTTPException
from motor.motor_asyncio import AsyncIOMotorDatabase

from ..models.audit import SYSTEM_ACTOR
from ..models.product import ScheduledPrice
from ..utils.dates import utc_now
from ..utils.dependencies import verify_product_exists
from .audit import record_audit

logger = logging.getLogger(__name__)


class PriceResolution(NamedTuple):
    price: Optional[float]
    schedule_id: Optional[str]
    scheduled_prices: List[Dict[str, Any]]
    deactivated: int


def format_price(value: float) -> str:
    return f"{value:.2f}".rstrip("0").rstrip(".")


def resolve_scheduled_price(product: Dict[str, Any], now: datetime) -> PriceResolution:
    """
    Work out which scheduled price is in effect at ``now``.

    Active entries whose end date has passed are switched off. Of the entries
    whose window contains ``now`` the one that started last wins; on equal
    start dates the later entry in the list wins. The product is not modified,
    the returned ``scheduled_prices`` is an updated copy.
    """
    schedules = [dict(entry) for entry in product.get("scheduled_prices") or []]
    winner: Optional[Dict[str, Any]] = None
    deactivated = 0

    for entry in schedules:
        if not entry.get("is_active", True):
            continue

        end_date = entry.get("end_date")
        if end_date is not None and now >= end_date:
            entry["is_active"] = False
            deactivated += 1
            continue

        if now >= entry["start_date"]:
            if winner is None or entry["start_date"] >= winner["start_date"]:
                winner = entry

    if winner is None:
        return PriceResolution(None, None, schedules, deactivated)
    return PriceResolution(winner["price"], winner.get("id"), schedules, deactivated)


async def apply_price_to_product(
    db: AsyncIOMotorDatabase,
    product: Dict[str, Any],
    now: datetime,
) -> Optional[str]:
    """
    Bring one product in line with its schedule.

    Returns ``"updated"`` when an override was applied, ``"reverted"`` when the
    regular price was restored, or None when the price did not move.
    """
    resolution = resolve_scheduled_price(product, now)
    base_price = product["base_price"]
    regular_price = product.get("regular_price")
    product_id = str(product["_id"])

    if resolution.price is not None and resolution.price != base_price:
        update: Dict[str, Any] = {
            "base_price": resolution.price,
            "scheduled_prices": resolution.scheduled_prices,
            "updated_at": now,
        }
        if regular_price is None:
            update["regular_price"] = base_price

        await db.products.update_one({"_id": product["_id"]}, {"$set": update})
        await record_audit(
            db,
            action="apply_scheduled_price",
            entity_type="product",
            entity_id=product_id,
            performed_by=SYSTEM_ACTOR,
            details=f"Price automatically updated from ₹{format_price(base_price)} to ₹{format_price(resolution.price)}",
        )
        logger.info(f"Scheduled price {resolution.schedule_id} applied to product {product_id}: {base_price} -> {resolution.price}")
        return "updated"

    if resolution.price is None and regular_price is not None:
        await db.products.update_one(
            {"_id": product["_id"]},
            {
                "$set": {
                    "base_price": regular_price,
                    "scheduled_prices": resolution.scheduled_prices,
                    "updated_at": now,
                },
                "$unset": {"regular_price": ""},
            }
        )
        await record_audit(
            db,
            action="revert_scheduled_price",
            entity_type="product",
            entity_id=product_id,
            performed_by=SYSTEM_ACTOR,
            details=f"Price restored from ₹{format_price(base_price)} to ₹{format_price(regular_price)}",
        )
        logger.info(f"Regular price restored for product {product_id}: {base_price} -> {regular_price}")
        return "reverted"

    if resolution.deactivated:
        await db.products.update_one(
            {"_id": product["_id"]},
            {"$set": {"scheduled_prices": resolution.scheduled_prices, "updated_at": now}}
        )

    return None


async def apply_scheduled_prices(db: AsyncIOMotorDatabase, now: Optional[datetime] = None) -> Dict[str, int]:
    """Walk all products with a schedule and apply or retire their overrides."""
    now = now or utc_now()
    products = await db.products.find({}).to_list(length=None)

    updated_count = 0
    reverted_count = 0
    for product in products:
        if not product.get("scheduled_prices") and product.get("regular_price") is None:
            continue

        outcome = await apply_price_to_product(db, product, now)
        if outcome == "updated":
            updated_count += 1
        elif outcome == "reverted":
            reverted_count += 1

    logger.info(f"[Cron] Applied scheduled prices to {updated_count} products, restored {reverted_count}")
    return {"updated_count": updated_count, "reverted_count": reverted_count}


async def run_price_scheduler(db: AsyncIOMotorDatabase, interval_seconds: int) -> None:
    """Run ``apply_scheduled_prices`` forever, once per interval."""
    while True:
        try:
            await apply_scheduled_prices(db)
        except Exception as e:
            logger.error(f"Scheduled price job failed: {e}")
        await asyncio.sleep(interval_seconds)


async def list_scheduled_prices(db: AsyncIOMotorDatabase, product_id: str) -> List[Dict[str, Any]]:
    product = await verify_product_exists(product_id, db)
    return sorted(product.get("scheduled_prices") or [], key=lambda entry: entry["start_date"])


async def add_scheduled_price(
    db: AsyncIOMotorDatabase,
    product_id: str,
    entry: ScheduledPrice,
    performed_by: str,
) -> Dict[str, Any]:
    """Attach a scheduled price to a product and apply it if its window is already open."""
    product = await verify_product_exists(product_id, db)
    now = utc_now()
    entry.created_at = now

    await db.products.update_one(
        {"_id": product["_id"]},
        {"$push": {"scheduled_prices": entry.model_dump()}, "$set": {"updated_at": now}}
    )
    end_text = f" until {entry.end_date.isoformat()}" if entry.end_date else ""
    await record_audit(
        db,
        action="schedule_price",
        entity_type="product",
        entity_id=product_id,
        performed_by=performed_by,
        details=f"Scheduled ₹{format_price(entry.price)} from {entry.start_date.isoformat()}{end_text}",
    )

    product = await db.products.find_one({"_id": product["_id"]})
    await apply_price_to_product(db, product, now)
    return await db.products.find_one({"_id": product["_id"]})


async def cancel_scheduled_price(
    db: AsyncIOMotorDatabase,
    product_id: str,
    schedule_id: str,
    performed_by: str,
) -> Dict[str, Any]:
    """Switch off one scheduled price; restores the regular price if it was in effect."""
    product = await verify_product_exists(product_id, db)
    schedules = [dict(entry) for entry in product.get("scheduled_prices") or []]

    target = next((entry for entry in schedules if entry.get("id") == schedule_id), None)
    if target is None:
        raise HTTPException(status_code=404, detail=f"Scheduled price {schedule_id} not found")
    if not target.get("is_active", True):
        raise HTTPException(status_code=409, detail=f"Scheduled price {schedule_id} is already inactive")

    target["is_active"] = False
    now = utc_now()
    await db.products.update_one(
        {"_id": product["_id"]},
        {"$set": {"scheduled_prices": schedules, "updated_at": now}}
    )
    await record_audit(
        db,
        action="cancel_scheduled_price",
        entity_type="product",
        entity_id=product_id,
        performed_by=performed_by,
        details=f"Cancelled scheduled price {schedule_id}",
    )

    product = await db.products.find_one({"_id": product["_id"]})
    await apply_price_to_product(db, product, now)
    return await db.products.find_one({"_id": product["_id"]})
