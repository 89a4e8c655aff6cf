"""
Doctor and consultation booking API schemas.
"""
from typing import List, Optional
from datetime import date, datetime
from pydantic import BaseModel, ConfigDict, Field, field_validator

from ..models.consultation import CONSULTATION_PAYMENT_METHODS, BookingStatus, ConsultationMode


class CreateDoctorRequest(BaseModel):
    name: str = Field(..., min_length=1, max_length=200)
    credentials: str = Field(..., min_length=1)
    specialization: str = Field(..., min_length=1)
    bio: str = ""
    experience_years: int = Field(0, ge=0)
    rating: float = Field(0.0, ge=0, le=5)
    clinic_address: str = Field(..., min_length=1)
    clinic_city: str = Field(..., min_length=1)
    clinic_phone: str = Field(..., min_length=7, max_length=20)
    availability: List[str] = []
    languages: List[str] = []
    consultation_modes: List[ConsultationMode] = Field(..., min_length=1)
    services: List[str] = []
    image_url: Optional[str] = None
    performed_by: str = Field("admin", min_length=1)


class DoctorResponse(BaseModel):
    model_config = ConfigDict(populate_by_name=True)

    id: str = Field(..., alias="_id")
    name: str
    credentials: str
    specialization: str
    bio: str = ""
    experience_years: int
    rating: float
    total_consultations: int
    clinic_address: str
    clinic_city: str
    clinic_phone: str
    availability: List[str] = []
    languages: List[str] = []
    consultation_modes: List[ConsultationMode]
    services: List[str] = []
    image_url: Optional[str] = None


class BookConsultationRequest(BaseModel):
    doctor_id: str = Field(..., min_length=1)
    user_id: Optional[str] = None
    patient_name: str = Field(..., min_length=1, max_length=200)
    phone: str = Field(..., min_length=7, max_length=20)
    email: Optional[str] = Field(None, pattern=r"^[^@\s]+@[^@\s]+\.[^@\s]+$")
    preferred_date: date
    preferred_slot: str = Field(..., min_length=1, description="e.g. 10:00-10:30")
    concern: Optional[str] = Field(None, max_length=2000)
    consultation_mode: str = Field(..., min_length=1)
    payment_method: str = Field("clinic")
    payment_id: Optional[str] = Field(None, description="Payment reference for online bookings")

    @field_validator('payment_method')
    @classmethod
    def validate_payment_method(cls, v):
        if v not in CONSULTATION_PAYMENT_METHODS:
            raise ValueError(f'Payment method must be one of: {", ".join(CONSULTATION_PAYMENT_METHODS)}')
        return v


class UpdateBookingStatusRequest(BaseModel):
    status: BookingStatus
    note: Optional[str] = Field(None, max_length=1000)
    performed_by: str = Field("admin", min_length=1)


class BookingStatusHistoryResponse(BaseModel):
    status: str
    timestamp: datetime
    note: Optional[str] = None
    updated_by: str


class BookingResponse(BaseModel):
    model_config = ConfigDict(populate_by_name=True)

    id: str = Field(..., alias="_id")
    doctor_id: str
    user_id: Optional[str] = None
    patient_name: str
    phone: str
    email: Optional[str] = None
    preferred_date: datetime
    preferred_slot: str
    concern: Optional[str] = None
    consultation_mode: str
    amount: float
    payment_method: str
    payment_status: str
    payment_reference: Optional[str] = None
    status: str
    status_history: List[BookingStatusHistoryResponse] = []
    notes: Optional[str] = None
    created_at: datetime
