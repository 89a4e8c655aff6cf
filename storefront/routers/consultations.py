"""
Doctor consultation endpoints: the doctor directory and bookings.
"""
from typing import List, Optional
from fastapi import APIRouter, Depends, HTTPException, Query
import logging

from ..config.database import get_database
from ..schemas.consultation import (
    BookConsultationRequest,
    BookingResponse,
    CreateDoctorRequest,
    DoctorResponse,
    UpdateBookingStatusRequest,
)
from ..services import consultations
from ..utils.serializers import serialize_doc, serialize_docs

logger = logging.getLogger(__name__)

router = APIRouter(prefix="/consultations", tags=["Consultations"])


@router.post("/doctors", status_code=201, response_model=DoctorResponse)
async def create_doctor(doctor: CreateDoctorRequest, db=Depends(get_database)):
    try:
        created = await consultations.create_doctor(db, doctor.model_dump(exclude={"performed_by"}), doctor.performed_by)
        return DoctorResponse(**serialize_doc(created))
    except HTTPException:
        raise
    except Exception as e:
        logger.error(f"Failed to add doctor: {str(e)}")
        raise HTTPException(status_code=500, detail=f"Failed to add doctor: {str(e)}")


@router.get("/doctors", status_code=200, response_model=List[DoctorResponse])
async def list_doctors(
    city: Optional[str] = Query(None, description="Clinic city"),
    specialization: Optional[str] = Query(None, description="Filter by specialization"),
    db=Depends(get_database)
):
    try:
        return serialize_docs(await consultations.list_doctors(db, city=city, specialization=specialization))
    except Exception as e:
        logger.error(f"Failed to fetch doctors: {str(e)}")
        raise HTTPException(status_code=500, detail=f"Failed to fetch doctors: {str(e)}")


@router.get("/doctors/{doctor_id}", status_code=200, response_model=DoctorResponse)
async def get_doctor(doctor_id: str, db=Depends(get_database)):
    try:
        doctor = await consultations.verify_doctor_exists(doctor_id, db)
        return DoctorResponse(**serialize_doc(doctor))
    except HTTPException:
        raise
    except Exception as e:
        logger.error(f"Failed to fetch doctor {doctor_id}: {str(e)}")
        raise HTTPException(status_code=500, detail=f"Failed to fetch doctor: {str(e)}")


@router.post("/bookings", status_code=201, response_model=BookingResponse)
async def book_consultation(booking: BookConsultationRequest, db=Depends(get_database)):
    """Book a consultation; the amount is taken from the doctor's price for the mode"""
    try:
        created = await consultations.book_consultation(
            db,
            booking.doctor_id,
            patient_name=booking.patient_name,
            phone=booking.phone,
            preferred_date=booking.preferred_date,
            preferred_slot=booking.preferred_slot,
            consultation_mode=booking.consultation_mode,
            payment_method=booking.payment_method,
            user_id=booking.user_id,
            email=booking.email,
            concern=booking.concern,
            payment_id=booking.payment_id,
        )
        return BookingResponse(**serialize_doc(created))
    except HTTPException:
        raise
    except Exception as e:
        logger.error(f"Failed to book consultation: {str(e)}")
        raise HTTPException(status_code=500, detail=f"Failed to book consultation: {str(e)}")


@router.get("/bookings", status_code=200, response_model=List[BookingResponse])
async def list_bookings(
    user_id: Optional[str] = Query(None),
    doctor_id: Optional[str] = Query(None),
    status: Optional[str] = Query(None),
    db=Depends(get_database)
):
    try:
        return serialize_docs(
            await consultations.list_bookings(db, user_id=user_id, doctor_id=doctor_id, status=status)
        )
    except Exception as e:
        logger.error(f"Failed to fetch bookings: {str(e)}")
        raise HTTPException(status_code=500, detail=f"Failed to fetch bookings: {str(e)}")


@router.get("/bookings/{booking_id}", status_code=200, response_model=BookingResponse)
async def get_booking(booking_id: str, db=Depends(get_database)):
    try:
        booking = await consultations.verify_booking_exists(booking_id, db)
        return BookingResponse(**serialize_doc(booking))
    except HTTPException:
        raise
    except Exception as e:
        logger.error(f"Failed to fetch booking {booking_id}: {str(e)}")
        raise HTTPException(status_code=500, detail=f"Failed to fetch booking: {str(e)}")


@router.patch("/bookings/{booking_id}/status", status_code=200, response_model=BookingResponse)
async def update_booking_status(booking_id: str, update: UpdateBookingStatusRequest, db=Depends(get_database)):
    try:
        updated = await consultations.update_booking_status(
            db, booking_id, update.status, update.performed_by, note=update.note
        )
        return BookingResponse(**serialize_doc(updated))
    except HTTPException:
        raise
    except Exception as e:
        logger.error(f"Failed to update booking {booking_id}: {str(e)}")
        raise HTTPException(status_code=500, detail=f"Failed to update booking: {str(e)}")
