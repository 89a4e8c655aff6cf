"""
Doctor consultation documents: the doctor directory and bookings.
"""
from typing import List, Literal, Optional
from datetime import datetime
from pydantic import BaseModel, ConfigDict, Field

BookingStatus = Literal["pending", "confirmed", "completed", "cancelled"]
CONSULTATION_PAYMENT_METHODS = ["online", "cod", "upi", "clinic"]

# No further status changes once a booking reaches one of these
FINAL_BOOKING_STATUSES = {"completed", "cancelled"}


class ConsultationMode(BaseModel):
    mode: str = Field(..., min_length=1, description="e.g. Clinic Visit, Video Consultation")
    price: float = Field(..., ge=0)
    duration_minutes: int = Field(..., gt=0)
    description: Optional[str] = None


class DoctorDocument(BaseModel):
    model_config = ConfigDict(populate_by_name=True)

    id: Optional[str] = Field(None, alias="_id")
    name: str = Field(..., min_length=1)
    credentials: str
    specialization: str
    bio: str = ""
    experience_years: int = Field(0, ge=0)
    rating: float = Field(0.0, ge=0, le=5)
    total_consultations: int = Field(0, ge=0)
    clinic_address: str
    clinic_city: str
    clinic_phone: str
    availability: List[str] = Field(default_factory=list)
    languages: List[str] = Field(default_factory=list)
    consultation_modes: List[ConsultationMode] = Field(..., min_length=1)
    services: List[str] = Field(default_factory=list)
    image_url: Optional[str] = None
    created_at: Optional[datetime] = None


class BookingStatusHistory(BaseModel):
    status: BookingStatus
    timestamp: datetime
    note: Optional[str] = None
    updated_by: str


class BookingDocument(BaseModel):
    """A patient's consultation booking. ``amount`` comes from the doctor's mode price."""
    model_config = ConfigDict(populate_by_name=True)

    id: Optional[str] = Field(None, alias="_id")
    doctor_id: str
    user_id: Optional[str] = None
    patient_name: str = Field(..., min_length=1)
    phone: str
    email: Optional[str] = None
    preferred_date: datetime = Field(..., description="Requested day, stored at midnight")
    preferred_slot: str
    concern: Optional[str] = None
    consultation_mode: str
    amount: float
    payment_method: str
    payment_status: Literal["pending", "paid"] = "pending"
    payment_reference: Optional[str] = None
    status: BookingStatus = "confirmed"
    status_history: List[BookingStatusHistory] = Field(default_factory=list)
    notes: Optional[str] = None
    created_at: datetime
    updated_at: Optional[datetime] = None
