"""
Store-wide settings kept in a single ``site_settings`` document.
"""
import logging
from typing import Any, Dict, Tuple

from motor.motor_asyncio import AsyncIOMotorDatabase
from pymongo import ReturnDocument

from ..config.settings import get_settings
from ..utils.dates import utc_now
from .audit import record_audit

logger = logging.getLogger(__name__)
settings = get_settings()


def default_site_settings() -> Dict[str, Any]:
    return {
        "site_name": settings.app_name,
        "support_email": "support@example.com",
        "support_phone": "",
        "shipping_fee": settings.shipping_fee,
        "free_shipping_threshold": settings.free_shipping_threshold,
        "maintenance_mode": False,
        "banner_message": None,
    }


async def get_site_settings(db: AsyncIOMotorDatabase) -> Dict[str, Any]:
    """Stored settings merged over the configured defaults."""
    stored = await db.site_settings.find_one({}) or {}
    return {**default_site_settings(), **stored}


async def update_site_settings(
    db: AsyncIOMotorDatabase, values: Dict[str, Any], performed_by: str
) -> Dict[str, Any]:
    values = {**values, "updated_at": utc_now()}
    updated = await db.site_settings.find_one_and_update(
        {}, {"$set": values}, upsert=True, return_document=ReturnDocument.AFTER
    )
    await record_audit(
        db,
        action="update_settings",
        entity_type="settings",
        entity_id=str(updated["_id"]),
        performed_by=performed_by,
        details=f"Updated {', '.join(sorted(k for k in values if k != 'updated_at'))}",
    )
    logger.info("Site settings updated")
    return {**default_site_settings(), **updated}


async def shipping_rules(db: AsyncIOMotorDatabase) -> Tuple[float, float]:
    """(shipping fee, free shipping threshold) currently in force."""
    current = await get_site_settings(db)
    return float(current["shipping_fee"]), float(current["free_shipping_threshold"])


def shipping_fee_for(subtotal: float, fee: float, threshold: float) -> float:
    """Flat fee, waived once the order value is above the threshold."""
    return 0.0 if subtotal > threshold else fee
