"""
Conversion funnels: step definitions, per-session step events and the
drop-off and time-to-convert reports built from them.
"""
import logging
import statistics
from datetime import datetime
from typing import Any, Dict, List, Optional

from fastapi import HTTPException
from motor.motor_asyncio import AsyncIOMotorDatabase
from pymongo import ReturnDocument

from ..models.analytics import FunnelDocument
from ..utils.dates import utc_now
from ..utils.dependencies import verify_document_exists

logger = logging.getLogger(__name__)


def _group_sessions(events: List[Dict[str, Any]]) -> Dict[str, Dict[str, Any]]:
    sessions: Dict[str, Dict[str, Any]] = {}
    for event in events:
        session = sessions.setdefault(event["session_id"], {
            "steps": set(),
            "user_id": event.get("user_id"),
            "first_event": event["timestamp"],
            "last_event": event["timestamp"],
        })
        session["steps"].add(event["step_index"])
        session["first_event"] = min(session["first_event"], event["timestamp"])
        session["last_event"] = max(session["last_event"], event["timestamp"])
    return sessions


def _completed(funnel: Dict[str, Any], sessions: Dict[str, Dict[str, Any]]) -> Dict[str, Dict[str, Any]]:
    """Sessions that reached every step of the funnel."""
    required = {step["order"] for step in funnel["steps"]}
    return {sid: data for sid, data in sessions.items() if required <= data["steps"]}


def compute_funnel_data(funnel: Dict[str, Any], events: List[Dict[str, Any]]) -> Dict[str, Any]:
    """Sessions reaching each step, with drop-off to the next step and conversion from the first."""
    sessions = _group_sessions(events)
    steps = sorted(funnel["steps"], key=lambda step: step["order"])

    counts = [
        sum(1 for data in sessions.values() if step["order"] in data["steps"])
        for step in steps
    ]
    first = counts[0] if counts else 0

    step_data = []
    for index, step in enumerate(steps):
        count = counts[index]
        dropoff = count - counts[index + 1] if index + 1 < len(counts) else 0
        step_data.append({
            "step_name": step["name"],
            "step_index": step["order"],
            "count": count,
            "dropoff": dropoff,
            "dropoff_rate": round(dropoff / count * 100, 1) if count > 0 else 0.0,
            "conversion_rate": round(count / first * 100, 1) if first > 0 else 0.0,
        })

    last = counts[-1] if counts else 0
    return {
        "steps": step_data,
        "total_sessions": len(sessions),
        "conversion_rate": round(last / first * 100, 1) if first > 0 else 0.0,
        "completed_sessions": last,
    }


def compute_conversions(funnel: Dict[str, Any], events: List[Dict[str, Any]], limit: int = 50) -> List[Dict[str, Any]]:
    conversions = [
        {
            "session_id": session_id,
            "user_id": data["user_id"],
            "completed_at": data["last_event"],
            "time_to_convert": (data["last_event"] - data["first_event"]).total_seconds(),
        }
        for session_id, data in _completed(funnel, _group_sessions(events)).items()
    ]
    conversions.sort(key=lambda conversion: conversion["completed_at"], reverse=True)
    return conversions[:limit]


def compute_time_to_convert(funnel: Dict[str, Any], events: List[Dict[str, Any]]) -> Dict[str, Any]:
    """Seconds from first to last event over sessions that completed the funnel."""
    durations = sorted(
        (data["last_event"] - data["first_event"]).total_seconds()
        for data in _completed(funnel, _group_sessions(events)).values()
    )
    if not durations:
        return {"avg_time": 0.0, "median_time": 0.0, "min_time": 0.0, "max_time": 0.0, "count": 0}

    return {
        "avg_time": round(statistics.mean(durations), 1),
        "median_time": statistics.median(durations),
        "min_time": durations[0],
        "max_time": durations[-1],
        "count": len(durations),
    }


async def verify_funnel_exists(funnel_id: str, db: AsyncIOMotorDatabase) -> Dict[str, Any]:
    return await verify_document_exists("funnels", funnel_id, db, "funnel")


async def create_funnel(db: AsyncIOMotorDatabase, values: Dict[str, Any]) -> Dict[str, Any]:
    funnel = FunnelDocument(**values, created_at=utc_now())
    result = await db.funnels.insert_one(funnel.model_dump(exclude={"id"}))
    logger.info(f"Funnel created: {funnel.name} ({result.inserted_id})")
    return await db.funnels.find_one({"_id": result.inserted_id})


async def get_funnels(db: AsyncIOMotorDatabase, active_only: bool = False) -> List[Dict[str, Any]]:
    filter_query = {"is_active": True} if active_only else {}
    return await db.funnels.find(filter_query).sort("created_at", -1).to_list(length=None)


async def update_funnel(db: AsyncIOMotorDatabase, funnel_id: str, updates: Dict[str, Any]) -> Dict[str, Any]:
    funnel = await verify_funnel_exists(funnel_id, db)
    return await db.funnels.find_one_and_update(
        {"_id": funnel["_id"]}, {"$set": updates}, return_document=ReturnDocument.AFTER
    )


async def delete_funnel(db: AsyncIOMotorDatabase, funnel_id: str) -> None:
    funnel = await verify_funnel_exists(funnel_id, db)
    await db.funnels.delete_one({"_id": funnel["_id"]})
    await db.funnel_events.delete_many({"funnel_id": funnel_id})


async def track_funnel_step(
    db: AsyncIOMotorDatabase,
    funnel_id: str,
    session_id: str,
    step_index: int,
    step_name: str,
    user_id: Optional[str] = None,
) -> None:
    funnel = await verify_funnel_exists(funnel_id, db)
    if step_index not in {step["order"] for step in funnel["steps"]}:
        raise HTTPException(status_code=400, detail=f"Funnel {funnel_id} has no step {step_index}")

    await db.funnel_events.insert_one({
        "funnel_id": funnel_id,
        "user_id": user_id,
        "session_id": session_id,
        "step_index": step_index,
        "step_name": step_name,
        "timestamp": utc_now(),
    })


async def get_funnel_events(
    db: AsyncIOMotorDatabase,
    funnel_id: str,
    start_date: Optional[datetime] = None,
    end_date: Optional[datetime] = None,
) -> List[Dict[str, Any]]:
    filter_query: Dict[str, Any] = {"funnel_id": funnel_id}
    window: Dict[str, Any] = {}
    if start_date is not None:
        window["$gte"] = start_date
    if end_date is not None:
        window["$lte"] = end_date
    if window:
        filter_query["timestamp"] = window
    return await db.funnel_events.find(filter_query).to_list(length=None)


async def get_funnel_data(
    db: AsyncIOMotorDatabase,
    funnel_id: str,
    start_date: Optional[datetime] = None,
    end_date: Optional[datetime] = None,
) -> Dict[str, Any]:
    funnel = await verify_funnel_exists(funnel_id, db)
    events = await get_funnel_events(db, funnel_id, start_date, end_date)
    return {"funnel": funnel, **compute_funnel_data(funnel, events)}


async def get_funnel_conversions(db: AsyncIOMotorDatabase, funnel_id: str, limit: int = 50) -> List[Dict[str, Any]]:
    funnel = await verify_funnel_exists(funnel_id, db)
    events = await get_funnel_events(db, funnel_id)
    return compute_conversions(funnel, events, limit)


async def get_time_to_convert(db: AsyncIOMotorDatabase, funnel_id: str) -> Dict[str, Any]:
    funnel = await verify_funnel_exists(funnel_id, db)
    events = await get_funnel_events(db, funnel_id)
    return compute_time_to_convert(funnel, events)
