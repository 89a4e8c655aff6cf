"""
Doctor directory and consultation bookings.
"""
import logging
import re
from datetime import date, datetime, time
from typing import Any, Dict, List, Optional

from fastapi import HTTPException
from motor.motor_asyncio import AsyncIOMotorDatabase
from pymongo import ReturnDocument

from ..models.consultation import (
    FINAL_BOOKING_STATUSES,
    BookingDocument,
    BookingStatusHistory,
    DoctorDocument,
)
from ..utils.dates import utc_now
from ..utils.dependencies import verify_document_exists
from .audit import record_audit

logger = logging.getLogger(__name__)

CITY_RESULT_LIMIT = 50
SUGGESTED_LIMIT = 20


async def verify_doctor_exists(doctor_id: str, db: AsyncIOMotorDatabase) -> Dict[str, Any]:
    return await verify_document_exists("consultation_doctors", doctor_id, db, "doctor")


async def verify_booking_exists(booking_id: str, db: AsyncIOMotorDatabase) -> Dict[str, Any]:
    return await verify_document_exists("consultation_bookings", booking_id, db, "booking")


async def create_doctor(db: AsyncIOMotorDatabase, values: Dict[str, Any], performed_by: str) -> Dict[str, Any]:
    doctor = DoctorDocument(**values, created_at=utc_now())
    result = await db.consultation_doctors.insert_one(doctor.model_dump(exclude={"id"}))
    await record_audit(
        db,
        action="create_doctor",
        entity_type="doctor",
        entity_id=str(result.inserted_id),
        performed_by=performed_by,
        details=f"Added {doctor.name} ({doctor.specialization})",
    )
    logger.info(f"Doctor added: {doctor.name} ({result.inserted_id})")
    return await db.consultation_doctors.find_one({"_id": result.inserted_id})


async def list_doctors(
    db: AsyncIOMotorDatabase, city: Optional[str] = None, specialization: Optional[str] = None
) -> List[Dict[str, Any]]:
    """Doctors practising in a city, or a short list of suggestions when no city is given."""
    filter_query: Dict[str, Any] = {}
    if city:
        filter_query["clinic_city"] = {"$regex": re.escape(city), "$options": "i"}
    if specialization:
        filter_query["specialization"] = {"$regex": re.escape(specialization), "$options": "i"}

    limit = CITY_RESULT_LIMIT if city else SUGGESTED_LIMIT
    cursor = db.consultation_doctors.find(filter_query).sort("rating", -1).limit(limit)
    return await cursor.to_list(length=limit)


def _find_mode(doctor: Dict[str, Any], mode: str) -> Dict[str, Any]:
    for option in doctor.get("consultation_modes", []):
        if option["mode"].lower() == mode.lower():
            return option
    offered = ", ".join(option["mode"] for option in doctor.get("consultation_modes", []))
    raise HTTPException(
        status_code=400,
        detail=f"{doctor['name']} does not offer {mode}. Available: {offered}"
    )


async def book_consultation(
    db: AsyncIOMotorDatabase,
    doctor_id: str,
    patient_name: str,
    phone: str,
    preferred_date: date,
    preferred_slot: str,
    consultation_mode: str,
    payment_method: str,
    user_id: Optional[str] = None,
    email: Optional[str] = None,
    concern: Optional[str] = None,
    payment_id: Optional[str] = None,
) -> Dict[str, Any]:
    """
    Book a consultation with a doctor.

    The amount is the doctor's price for the chosen mode. A booking paid online
    carries its payment reference and starts out paid; anything else is
    collected later.
    """
    doctor = await verify_doctor_exists(doctor_id, db)
    mode = _find_mode(doctor, consultation_mode)
    if preferred_date < utc_now().date():
        raise HTTPException(status_code=400, detail="Preferred date cannot be in the past")

    paid = payment_method == "online" and bool(payment_id)
    if payment_method == "online" and not paid:
        raise HTTPException(status_code=400, detail="Online bookings need a payment_id")

    now = utc_now()
    booked_by = user_id or patient_name
    booking = BookingDocument(
        doctor_id=doctor_id,
        user_id=user_id,
        patient_name=patient_name,
        phone=phone,
        email=email,
        preferred_date=datetime.combine(preferred_date, time.min),
        preferred_slot=preferred_slot,
        concern=concern,
        consultation_mode=mode["mode"],
        amount=mode["price"],
        payment_method=payment_method,
        payment_status="paid" if paid else "pending",
        payment_reference=payment_id if paid else None,
        status="confirmed",
        status_history=[BookingStatusHistory(status="confirmed", timestamp=now, note="Booked", updated_by=booked_by)],
        created_at=now,
        updated_at=now,
    )
    result = await db.consultation_bookings.insert_one(booking.model_dump(exclude={"id"}))
    await db.consultation_doctors.update_one({"_id": doctor["_id"]}, {"$inc": {"total_consultations": 1}})

    logger.info(f"Consultation booked: {result.inserted_id} with {doctor['name']} on {preferred_date}")
    return await db.consultation_bookings.find_one({"_id": result.inserted_id})


async def list_bookings(
    db: AsyncIOMotorDatabase,
    user_id: Optional[str] = None,
    doctor_id: Optional[str] = None,
    status: Optional[str] = None,
) -> List[Dict[str, Any]]:
    filter_query: Dict[str, Any] = {}
    if user_id:
        filter_query["user_id"] = user_id
    if doctor_id:
        filter_query["doctor_id"] = doctor_id
    if status:
        filter_query["status"] = status
    return await db.consultation_bookings.find(filter_query).sort("preferred_date", 1).to_list(length=None)


async def update_booking_status(
    db: AsyncIOMotorDatabase,
    booking_id: str,
    status: str,
    performed_by: str,
    note: Optional[str] = None,
) -> Dict[str, Any]:
    """Move a booking along; completed and cancelled bookings are final."""
    booking = await verify_booking_exists(booking_id, db)
    previous = booking["status"]
    if previous == status:
        raise HTTPException(status_code=409, detail=f"Booking {booking_id} is already {status}")
    if previous in FINAL_BOOKING_STATUSES:
        raise HTTPException(status_code=409, detail=f"Booking {booking_id} is {previous} and cannot change")

    now = utc_now()
    entry = BookingStatusHistory(status=status, timestamp=now, note=note, updated_by=performed_by)
    update: Dict[str, Any] = {"status": status, "updated_at": now}
    if note:
        update["notes"] = note

    updated = await db.consultation_bookings.find_one_and_update(
        {"_id": booking["_id"]},
        {"$set": update, "$push": {"status_history": entry.model_dump()}},
        return_document=ReturnDocument.AFTER,
    )
    await record_audit(
        db,
        action="update_booking_status",
        entity_type="consultation",
        entity_id=booking_id,
        performed_by=performed_by,
        details=f"Booking status changed from {previous} to {status}" + (f": {note}" if note else ""),
    )

    logger.info(f"Booking status updated: {booking_id} {previous} -> {status}")
    return updated
