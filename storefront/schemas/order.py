"""
Order API schemas for request/response validation.
These models define the structure of data sent to and from the API.
"""
from typing import List, Optional
from datetime import datetime
from pydantic import BaseModel, ConfigDict, Field, field_validator

from ..models.order import ORDER_STATUSES, PAYMENT_METHODS, PAYMENT_STATUSES, ShippingDetails
from .common import PaginationMeta


# Request Schemas

class CreateOrderRequest(BaseModel):
    """Checkout request; the items come from the user's cart."""
    user_id: str = Field(..., min_length=1, description="User ID placing the order")
    shipping_details: ShippingDetails
    payment_method: str = Field("cod", description="Payment method used")
    payment_id: Optional[str] = Field(None, description="Payment intent ID for online payments")
    notes: Optional[str] = Field(None, max_length=1000)

    @field_validator('payment_method')
    @classmethod
    def validate_payment_method(cls, v):
        if v.lower() not in PAYMENT_METHODS:
            raise ValueError(f'Invalid payment method. Must be one of: {PAYMENT_METHODS}')
        return v.lower()


class UpdateOrderStatusRequest(BaseModel):
    """Request schema for updating order status."""
    status: str = Field(..., description="New order status")
    note: Optional[str] = Field(None, description="Reason for status change")
    performed_by: str = Field("admin", min_length=1)

    @field_validator('status')
    @classmethod
    def validate_status(cls, v):
        if v.lower() not in ORDER_STATUSES:
            raise ValueError(f'Invalid status. Must be one of: {ORDER_STATUSES}')
        return v.lower()


class UpdatePaymentStatusRequest(BaseModel):
    payment_status: str
    payment_id: Optional[str] = None
    performed_by: str = Field("admin", min_length=1)

    @field_validator('payment_status')
    @classmethod
    def validate_payment_status(cls, v):
        if v.lower() not in PAYMENT_STATUSES:
            raise ValueError(f'Invalid payment status. Must be one of: {PAYMENT_STATUSES}')
        return v.lower()


# Response Schemas

class OrderItemResponse(BaseModel):
    product_id: str
    name: str
    potency: str
    form: str
    packing_size: Optional[str] = None
    quantity: int
    price: float
    total_price: float


class StatusHistoryResponse(BaseModel):
    status: str
    timestamp: datetime
    note: Optional[str] = None
    updated_by: Optional[str] = None


class OrderResponse(BaseModel):
    """Response schema for a single order."""
    model_config = ConfigDict(populate_by_name=True)

    id: str = Field(..., alias="_id", description="Order ID")
    user_id: str
    items: List[OrderItemResponse]
    subtotal: float
    shipping_fee: float
    total: float
    status: str
    status_history: List[StatusHistoryResponse] = []
    shipping_address: str
    shipping_details: Optional[ShippingDetails] = None
    payment_method: str
    payment_status: str
    payment_id: Optional[str] = None
    notes: Optional[str] = None
    created_at: datetime
    updated_at: Optional[datetime] = None


class OrderSummaryResponse(BaseModel):
    """Simplified order response for lists."""
    model_config = ConfigDict(populate_by_name=True)

    id: str = Field(..., alias="_id", description="Order ID")
    user_id: str
    total: float
    status: str
    payment_status: str
    created_at: datetime


class OrdersListResponse(BaseModel):
    """Response schema for order list with pagination."""
    orders: List[OrderSummaryResponse]
    pagination: PaginationMeta
    user_id: Optional[str] = Field(None, description="User ID filter applied")
