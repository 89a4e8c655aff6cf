"""
User cohorts and the retention and revenue views computed over them.
"""
import logging
import re
from datetime import datetime, timedelta
from typing import Any, Dict, List, Optional

from bson import ObjectId
from fastapi import HTTPException
from motor.motor_asyncio import AsyncIOMotorDatabase

from ..models.analytics import CohortDocument
from ..utils.dates import utc_now
from ..utils.dependencies import verify_document_exists

logger = logging.getLogger(__name__)

RETENTION_INTERVALS = 12
RECENT_ACTIVITY_DAYS = 30
# Orders in these states never produced revenue
NON_REVENUE_STATUSES = ["cancelled", "refunded"]


def _period_label(interval_days: int, index: int) -> str:
    if interval_days == 7:
        return f"Week {index}"
    if interval_days == 30:
        return f"Month {index}"
    return f"Period {index}"


def compute_retention(
    cohort: Dict[str, Any], activities: List[Dict[str, Any]], interval_days: int = 7
) -> List[Dict[str, Any]]:
    """
    Members active in each period after the cohort start.

    Period ``i`` covers ``[start + i*interval, start + (i+1)*interval)``;
    periods 0 through 12 are reported.
    """
    members = set(cohort.get("user_ids", []))
    user_count = cohort.get("user_count", 0)
    interval = timedelta(days=interval_days)

    retention = []
    for index in range(RETENTION_INTERVALS + 1):
        period_start = cohort["start_date"] + index * interval
        period_end = period_start + interval
        active = {
            activity["user_id"] for activity in activities
            if activity["user_id"] in members and period_start <= activity["timestamp"] < period_end
        }
        percentage = len(active) / user_count * 100 if user_count > 0 else 0.0
        retention.append({
            "interval": _period_label(interval_days, index),
            "period_start": period_start,
            "retained": len(active),
            "percentage": round(percentage, 1),
        })
    return retention


def compute_revenue(cohort: Dict[str, Any], orders: List[Dict[str, Any]]) -> Dict[str, Any]:
    members = set(cohort.get("user_ids", []))
    cohort_orders = [
        order for order in orders
        if order["user_id"] in members and order.get("status") not in NON_REVENUE_STATUSES
    ]

    total_revenue = sum(order["total"] for order in cohort_orders)
    user_count = cohort.get("user_count", 0)

    monthly: Dict[str, float] = {}
    for order in cohort_orders:
        month = order["created_at"].strftime("%Y-%m")
        monthly[month] = monthly.get(month, 0.0) + order["total"]

    return {
        "total_revenue": total_revenue,
        "avg_order_value": total_revenue / len(cohort_orders) if cohort_orders else 0.0,
        "avg_revenue_per_user": total_revenue / user_count if user_count > 0 else 0.0,
        "total_orders": len(cohort_orders),
        "monthly_revenue": [{"month": month, "revenue": monthly[month]} for month in sorted(monthly)],
    }


async def _existing_user_ids(db: AsyncIOMotorDatabase, user_ids: List[str]) -> List[str]:
    object_ids = [ObjectId(user_id) for user_id in user_ids if ObjectId.is_valid(user_id)]
    users = await db.users.find({"_id": {"$in": object_ids}}).to_list(length=None)
    found = {str(user["_id"]) for user in users}
    return [user_id for user_id in user_ids if user_id in found]


async def resolve_members(
    db: AsyncIOMotorDatabase,
    definition_type: str,
    start_date: datetime,
    end_date: datetime,
    location: Optional[str] = None,
    user_ids: Optional[List[str]] = None,
) -> List[str]:
    """User ids matching a cohort definition."""
    if definition_type == "signup_date":
        users = await db.users.find(
            {"created_at": {"$gte": start_date, "$lte": end_date}}
        ).to_list(length=None)
        return [str(user["_id"]) for user in users]

    if definition_type == "first_purchase":
        orders = await db.orders.find({}).to_list(length=None)
        first_orders: Dict[str, datetime] = {}
        for order in orders:
            placed = order["created_at"]
            if order["user_id"] not in first_orders or placed < first_orders[order["user_id"]]:
                first_orders[order["user_id"]] = placed
        candidates = [
            user_id for user_id, placed in first_orders.items()
            if start_date <= placed <= end_date
        ]
        return await _existing_user_ids(db, sorted(candidates))

    if definition_type == "location":
        if not location:
            raise HTTPException(status_code=400, detail="A location cohort needs a location")
        users = await db.users.find(
            {"address": {"$regex": re.escape(location), "$options": "i"}}
        ).to_list(length=None)
        return [str(user["_id"]) for user in users]

    if not user_ids:
        raise HTTPException(status_code=400, detail="A custom cohort needs user_ids")
    return await _existing_user_ids(db, list(dict.fromkeys(user_ids)))


async def verify_cohort_exists(cohort_id: str, db: AsyncIOMotorDatabase) -> Dict[str, Any]:
    return await verify_document_exists("cohorts", cohort_id, db, "cohort")


async def create_cohort(db: AsyncIOMotorDatabase, values: Dict[str, Any]) -> Dict[str, Any]:
    members = await resolve_members(
        db,
        values["definition_type"],
        values["start_date"],
        values["end_date"],
        location=values.get("location"),
        user_ids=values.get("user_ids"),
    )
    cohort = CohortDocument(
        **{**values, "user_ids": members},
        user_count=len(members),
        created_at=utc_now(),
    )
    result = await db.cohorts.insert_one(cohort.model_dump(exclude={"id"}))
    logger.info(f"Cohort created: {cohort.name} with {len(members)} users")
    return await db.cohorts.find_one({"_id": result.inserted_id})


async def get_cohorts(db: AsyncIOMotorDatabase) -> List[Dict[str, Any]]:
    return await db.cohorts.find({}).sort("created_at", -1).to_list(length=None)


async def delete_cohort(db: AsyncIOMotorDatabase, cohort_id: str) -> None:
    cohort = await verify_cohort_exists(cohort_id, db)
    await db.cohorts.delete_one({"_id": cohort["_id"]})


async def get_cohort_retention(
    db: AsyncIOMotorDatabase, cohort_id: str, interval_days: int = 7
) -> List[Dict[str, Any]]:
    cohort = await verify_cohort_exists(cohort_id, db)
    activities = await db.user_activity.find(
        {"user_id": {"$in": cohort.get("user_ids", [])}}
    ).to_list(length=None)
    return compute_retention(cohort, activities, interval_days)


async def get_cohort_revenue(db: AsyncIOMotorDatabase, cohort_id: str) -> Dict[str, Any]:
    cohort = await verify_cohort_exists(cohort_id, db)
    orders = await db.orders.find({"user_id": {"$in": cohort.get("user_ids", [])}}).to_list(length=None)
    return compute_revenue(cohort, orders)


async def compare_cohorts(db: AsyncIOMotorDatabase, cohort_ids: List[str]) -> List[Dict[str, Any]]:
    """Revenue per user and recent retention side by side; unknown ids are skipped."""
    since = utc_now() - timedelta(days=RECENT_ACTIVITY_DAYS)
    comparison = []

    for cohort_id in cohort_ids:
        if not ObjectId.is_valid(cohort_id):
            continue
        cohort = await db.cohorts.find_one({"_id": ObjectId(cohort_id)})
        if cohort is None:
            continue

        members = cohort.get("user_ids", [])
        orders = await db.orders.find({"user_id": {"$in": members}}).to_list(length=None)
        revenue = compute_revenue(cohort, orders)

        recent = await db.user_activity.find(
            {"user_id": {"$in": members}, "timestamp": {"$gte": since}}
        ).to_list(length=None)
        active = {activity["user_id"] for activity in recent}
        user_count = cohort.get("user_count", 0)

        comparison.append({
            "cohort_id": cohort_id,
            "name": cohort["name"],
            "user_count": user_count,
            "total_revenue": revenue["total_revenue"],
            "avg_revenue_per_user": revenue["avg_revenue_per_user"],
            "retention_rate": len(active) / user_count * 100 if user_count > 0 else 0.0,
            "start_date": cohort["start_date"],
        })

    return comparison


async def get_cohort_users(db: AsyncIOMotorDatabase, cohort_id: str, limit: int = 50) -> List[Dict[str, Any]]:
    cohort = await verify_cohort_exists(cohort_id, db)
    member_ids = cohort.get("user_ids", [])[:limit]

    users = []
    for user_id in member_ids:
        user = await db.users.find_one({"_id": ObjectId(user_id)})
        if user is None:
            continue
        orders = await db.orders.find({"user_id": user_id}).to_list(length=None)
        users.append({
            "_id": user_id,
            "name": user.get("name"),
            "email": user.get("email"),
            "order_count": len(orders),
            "total_spent": sum(order["total"] for order in orders),
            "last_active_at": user.get("last_active_at"),
        })
    return users
