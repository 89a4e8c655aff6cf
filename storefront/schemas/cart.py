"""
Cart API schemas.
"""
from typing import List, Optional
from datetime import datetime
from pydantic import BaseModel, ConfigDict, Field, field_validator
from bson import ObjectId

from ..config.settings import get_settings

settings = get_settings()


class AddToCartRequest(BaseModel):
    product_id: str = Field(..., description="Product ID")
    potency: str = Field(..., min_length=1)
    form: str = Field(..., min_length=1)
    packing_size: Optional[str] = Field(None, min_length=1)
    quantity: int = Field(1, gt=0, le=settings.max_item_quantity)

    @field_validator('product_id')
    @classmethod
    def validate_product_id(cls, v):
        if not ObjectId.is_valid(v):
            raise ValueError('Invalid product ID format')
        return v


class UpdateCartQuantityRequest(BaseModel):
    """Zero or a negative quantity removes the row."""
    quantity: int = Field(..., le=settings.max_item_quantity)


class CartProductResponse(BaseModel):
    model_config = ConfigDict(populate_by_name=True)

    id: str = Field(..., alias="_id")
    name: str
    base_price: float
    stock: int
    images: List[dict] = []


class CartItemResponse(BaseModel):
    model_config = ConfigDict(populate_by_name=True)

    id: str = Field(..., alias="_id")
    user_id: str
    product_id: str
    potency: str
    form: str
    packing_size: Optional[str] = None
    quantity: int
    created_at: Optional[datetime] = None
    updated_at: Optional[datetime] = None


class CartLineResponse(CartItemResponse):
    product: CartProductResponse
    line_total: float


class CartResponse(BaseModel):
    user_id: str
    items: List[CartLineResponse]
    subtotal: float
    item_count: int
