"""
Order data models for database documents.
These represent the actual structure of documents stored in MongoDB.
"""
from typing import List, Dict, Optional, Any
from datetime import datetime
from pydantic import BaseModel, ConfigDict, Field, field_validator
from bson import ObjectId

ORDER_STATUSES = ['pending', 'confirmed', 'processing', 'shipped', 'delivered', 'cancelled', 'refunded']
PAYMENT_STATUSES = ['pending', 'paid', 'failed', 'refunded']
PAYMENT_METHODS = ['cod', 'online', 'upi', 'credit_card', 'debit_card']


class OrderItemDocument(BaseModel):
    """Order line, priced and named at the time of checkout."""
    product_id: str = Field(..., description="Product ID reference")
    name: str = Field(..., description="Product name at time of order")
    potency: str = Field(..., description="Selected potency")
    form: str = Field(..., description="Selected form")
    packing_size: Optional[str] = Field(None, description="Selected packing size")
    quantity: int = Field(..., gt=0, description="Quantity ordered")
    price: float = Field(..., ge=0, description="Price per item at time of order")
    total_price: float = Field(..., ge=0, description="Total price for this line")

    @field_validator('product_id')
    @classmethod
    def validate_product_id(cls, v):
        if not ObjectId.is_valid(v):
            raise ValueError('Invalid product ID format')
        return v


class ShippingDetails(BaseModel):
    """Structured shipping address."""
    full_name: str = Field(..., min_length=1, description="Recipient name")
    address_line1: str = Field(..., min_length=1, description="Street address")
    address_line2: Optional[str] = Field(None, description="Apartment, landmark")
    city: str = Field(..., min_length=1, description="City")
    state: str = Field(..., min_length=1, description="State")
    zip_code: str = Field(..., pattern=r"^\d{6}$", description="Six digit pincode")
    phone: str = Field(..., min_length=7, max_length=20, description="Contact phone number")

    def as_text(self) -> str:
        """Single-line address as printed on labels."""
        lines = [self.full_name, self.address_line1, self.address_line2, self.city, f"{self.state} {self.zip_code}"]
        return ", ".join(line for line in lines if line)


class OrderStatusHistory(BaseModel):
    """Order status change history entry."""
    status: str = Field(..., description="Status value")
    timestamp: datetime = Field(..., description="When status changed")
    note: Optional[str] = Field(None, description="Reason for status change")
    updated_by: Optional[str] = Field(None, description="Who updated the status")


class OrderDocument(BaseModel):
    """
    Order document model representing the MongoDB document structure.
    This matches how orders are stored in the database.
    """
    model_config = ConfigDict(populate_by_name=True, arbitrary_types_allowed=True)

    id: Optional[str] = Field(None, alias="_id", description="Order ID")
    user_id: str = Field(..., min_length=1, description="User ID who placed the order")
    items: List[OrderItemDocument] = Field(..., min_length=1, description="Order items")
    subtotal: float = Field(..., ge=0, description="Sum of line totals")
    shipping_fee: float = Field(0, ge=0, description="Shipping charged")
    total: float = Field(..., ge=0, description="Total order amount")

    # Order status and tracking
    status: str = Field(default="pending", description="Order status")
    status_history: List[OrderStatusHistory] = Field(default_factory=list)

    # Shipping and payment
    shipping_address: str = Field(..., description="Printable shipping address")
    shipping_details: Optional[ShippingDetails] = None
    payment_method: str = Field("cod", description="Payment method used")
    payment_status: str = Field("pending", description="Payment status")
    payment_id: Optional[str] = Field(None, description="Payment provider reference")

    notes: Optional[str] = Field(None, description="Order notes")
    metadata: Optional[Dict[str, Any]] = Field(None, description="Additional order metadata")

    # Timestamps
    created_at: Optional[datetime] = Field(None, description="Order creation timestamp")
    updated_at: Optional[datetime] = Field(None, description="Last update timestamp")

    @field_validator('status')
    @classmethod
    def validate_status(cls, v):
        if v.lower() not in ORDER_STATUSES:
            raise ValueError(f'Invalid status. Must be one of: {ORDER_STATUSES}')
        return v.lower()

    @field_validator('payment_status')
    @classmethod
    def validate_payment_status(cls, v):
        if v.lower() not in PAYMENT_STATUSES:
            raise ValueError(f'Invalid payment status. Must be one of: {PAYMENT_STATUSES}')
        return v.lower()
