"""
Delivery, payment and site settings API schemas.
"""
from typing import List, Optional
from datetime import datetime
from pydantic import BaseModel, Field, field_validator

from ..config.settings import get_settings

settings = get_settings()


# Delivery

class CourierOption(BaseModel):
    courier_name: str
    rate: float
    delivery_days: int
    rating: float
    etd: datetime


class DeliveryCheckResponse(BaseModel):
    """Availability for a pincode; ``error`` is set when ``available`` is false."""
    available: bool
    error: Optional[str] = None
    location: Optional[str] = None
    days: Optional[int] = None
    estimated_date: Optional[datetime] = None
    courier: Optional[str] = None
    shipping_charge: Optional[float] = None
    is_cod_available: Optional[bool] = None
    courier_options: List[CourierOption] = []


# Payments

class PaymentIntentRequest(BaseModel):
    amount: float = Field(..., gt=0, description="Amount in major currency units")
    currency: str = Field(settings.currency, min_length=3, max_length=3)

    @field_validator('currency')
    @classmethod
    def lower_currency(cls, v):
        return v.lower()


class PaymentIntentResponse(BaseModel):
    client_secret: str
    payment_id: str


# Site settings

class SiteSettingsResponse(BaseModel):
    site_name: str
    support_email: Optional[str] = None
    support_phone: Optional[str] = None
    shipping_fee: float
    free_shipping_threshold: float
    maintenance_mode: bool
    banner_message: Optional[str] = None
    updated_at: Optional[datetime] = None


class UpdateSiteSettingsRequest(BaseModel):
    site_name: Optional[str] = Field(None, min_length=1, max_length=200)
    support_email: Optional[str] = Field(None, pattern=r"^[^@\s]+@[^@\s]+\.[^@\s]+$")
    support_phone: Optional[str] = None
    shipping_fee: Optional[float] = Field(None, ge=0)
    free_shipping_threshold: Optional[float] = Field(None, ge=0)
    maintenance_mode: Optional[bool] = None
    banner_message: Optional[str] = Field(None, max_length=500)
    performed_by: str = Field("admin", min_length=1)
