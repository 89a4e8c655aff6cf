"""
Users and the activity events the analytics queries read.
"""
import logging
from typing import Any, Dict, List, Optional, Tuple

from fastapi import HTTPException
from motor.motor_asyncio import AsyncIOMotorDatabase
from pymongo import ReturnDocument

from ..models.analytics import ActivityDocument, UserDocument
from ..utils.dates import utc_now
from ..utils.dependencies import verify_document_exists
from .audit import record_audit

logger = logging.getLogger(__name__)


async def verify_user_exists(user_id: str, db: AsyncIOMotorDatabase) -> Dict[str, Any]:
    return await verify_document_exists("users", user_id, db, "user")


async def create_user(db: AsyncIOMotorDatabase, values: Dict[str, Any]) -> Dict[str, Any]:
    email = values.get("email")
    if email and await db.users.find_one({"email": email}):
        raise HTTPException(status_code=409, detail=f"User with email {email} already exists")

    user = UserDocument(**values, created_at=utc_now())
    result = await db.users.insert_one(user.model_dump(exclude={"id"}))
    logger.info(f"User created: {result.inserted_id}")
    return await db.users.find_one({"_id": result.inserted_id})


async def list_users(
    db: AsyncIOMotorDatabase, role: Optional[str], limit: int, offset: int
) -> Tuple[List[Dict[str, Any]], int]:
    filter_query: Dict[str, Any] = {"role": role} if role else {}
    total = await db.users.count_documents(filter_query)
    cursor = db.users.find(filter_query).sort("created_at", -1).skip(offset).limit(limit)
    return await cursor.to_list(length=limit), total


async def update_user_role(
    db: AsyncIOMotorDatabase, user_id: str, role: str, performed_by: str
) -> Dict[str, Any]:
    user = await verify_user_exists(user_id, db)
    updated = await db.users.find_one_and_update(
        {"_id": user["_id"]}, {"$set": {"role": role}}, return_document=ReturnDocument.AFTER
    )
    await record_audit(
        db,
        action="update_user_role",
        entity_type="user",
        entity_id=user_id,
        performed_by=performed_by,
        details=f"Role changed from {user.get('role')} to {role}",
    )
    return updated


async def track_activity(
    db: AsyncIOMotorDatabase, user_id: str, action: str, details: Optional[Dict[str, Any]] = None
) -> Dict[str, Any]:
    """Record an activity event and mark the user as recently active."""
    user = await verify_user_exists(user_id, db)
    now = utc_now()

    event = ActivityDocument(user_id=user_id, action=action, details=details, timestamp=now)
    result = await db.user_activity.insert_one(event.model_dump())
    await db.users.update_one({"_id": user["_id"]}, {"$set": {"last_active_at": now}})

    return await db.user_activity.find_one({"_id": result.inserted_id})
