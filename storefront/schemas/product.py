"""
Product API schemas for request/response validation.
These models define the structure of data sent to and from the API.
"""
from typing import List, Optional
from datetime import datetime
from pydantic import BaseModel, ConfigDict, Field, field_validator, model_validator

from ..models.product import DEFAULT_AVAILABILITY, DEFAULT_CATEGORY, DEFAULT_PACKING_SIZES, ProductImage
from ..utils.dates import to_naive_utc
from .common import PaginationMeta


# Request Schemas

class CreateProductRequest(BaseModel):
    """Request schema for creating a new product."""
    name: str = Field(..., min_length=1, max_length=200, description="Product name")
    description: str = Field(..., min_length=1, max_length=5000, description="Product description")
    brand: Optional[str] = Field(None, min_length=1, max_length=100, description="Product brand")
    category: str = Field(DEFAULT_CATEGORY, min_length=1, max_length=100, description="Product category")
    availability: str = Field(DEFAULT_AVAILABILITY, description="Availability label")
    potencies: List[str] = Field(..., min_length=1, description="Available potencies")
    forms: List[str] = Field(..., min_length=1, description="Available forms")
    packing_sizes: List[str] = Field(default_factory=lambda: list(DEFAULT_PACKING_SIZES))
    base_price: float = Field(..., gt=0, description="Product price (must be positive)")
    stock: int = Field(0, ge=0, description="Opening stock")
    min_stock: Optional[int] = Field(None, ge=0, description="Low-stock threshold")
    symptoms_tags: List[str] = Field(default_factory=list)
    key_benefits: List[str] = Field(default_factory=list)
    directions_for_use: Optional[str] = None
    safety_information: Optional[str] = None
    ingredients: Optional[str] = None
    images: List[ProductImage] = Field(default_factory=list)
    performed_by: str = Field("admin", min_length=1, description="Who is making the change")

    @field_validator('images')
    @classmethod
    def validate_images(cls, v):
        if len(v) > 10:
            raise ValueError('Maximum 10 images allowed')
        return v


class UpdateProductRequest(BaseModel):
    """Request schema for updating a product. Stock changes go through the inventory endpoints."""
    name: Optional[str] = Field(None, min_length=1, max_length=200)
    description: Optional[str] = Field(None, min_length=1, max_length=5000)
    brand: Optional[str] = Field(None, min_length=1, max_length=100)
    category: Optional[str] = Field(None, min_length=1, max_length=100)
    availability: Optional[str] = None
    potencies: Optional[List[str]] = Field(None, min_length=1)
    forms: Optional[List[str]] = Field(None, min_length=1)
    packing_sizes: Optional[List[str]] = None
    base_price: Optional[float] = Field(None, gt=0)
    min_stock: Optional[int] = Field(None, ge=0)
    symptoms_tags: Optional[List[str]] = None
    key_benefits: Optional[List[str]] = None
    directions_for_use: Optional[str] = None
    safety_information: Optional[str] = None
    ingredients: Optional[str] = None
    images: Optional[List[ProductImage]] = None
    performed_by: str = Field("admin", min_length=1)


class ScheduledPriceRequest(BaseModel):
    """Request schema for scheduling a price override."""
    price: float = Field(..., gt=0, description="Override price")
    start_date: datetime = Field(..., description="Window start (inclusive)")
    end_date: Optional[datetime] = Field(None, description="Window end (exclusive)")
    performed_by: str = Field("admin", min_length=1)

    @field_validator('start_date', 'end_date')
    @classmethod
    def normalize_dates(cls, v):
        return to_naive_utc(v)

    @model_validator(mode='after')
    def check_window(self):
        if self.end_date is not None and self.end_date <= self.start_date:
            raise ValueError('end_date must be after start_date')
        return self


class StockAdjustmentRequest(BaseModel):
    """Either a relative change or an absolute stock level."""
    change: Optional[int] = Field(None, description="Units to add (positive) or remove (negative)")
    new_stock: Optional[int] = Field(None, ge=0, description="Absolute stock level")
    reason: str = Field("manual_adjustment", min_length=1, max_length=200)
    performed_by: str = Field("admin", min_length=1)

    @model_validator(mode='after')
    def check_one_of(self):
        if (self.change is None) == (self.new_stock is None):
            raise ValueError('Provide exactly one of change or new_stock')
        if self.change == 0:
            raise ValueError('change must not be zero')
        return self


# Response Schemas

class ScheduledPriceResponse(BaseModel):
    id: str
    price: float
    start_date: datetime
    end_date: Optional[datetime] = None
    is_active: bool
    created_at: Optional[datetime] = None


class ProductResponse(BaseModel):
    """Response schema for a single product."""
    model_config = ConfigDict(populate_by_name=True)

    id: str = Field(..., alias="_id", description="Product ID")
    name: str
    description: str
    brand: Optional[str] = None
    category: str
    availability: str
    potencies: List[str]
    forms: List[str]
    packing_sizes: List[str] = []
    base_price: float
    regular_price: Optional[float] = None
    stock: int
    min_stock: Optional[int] = None
    symptoms_tags: List[str] = []
    key_benefits: List[str] = []
    directions_for_use: Optional[str] = None
    safety_information: Optional[str] = None
    ingredients: Optional[str] = None
    images: List[ProductImage] = []
    scheduled_prices: List[ScheduledPriceResponse] = []
    rating_count: Optional[int] = None
    average_rating: Optional[float] = None
    created_at: datetime
    updated_at: Optional[datetime] = None


class ProductSummaryResponse(BaseModel):
    """Simplified product response for lists."""
    model_config = ConfigDict(populate_by_name=True)

    id: str = Field(..., alias="_id", description="Product ID")
    name: str
    brand: Optional[str] = None
    category: str
    base_price: float
    stock: int
    potencies: List[str]
    forms: List[str]
    symptoms_tags: List[str] = []


class ProductsListResponse(BaseModel):
    """Response schema for product list with pagination."""
    products: List[ProductSummaryResponse]
    pagination: PaginationMeta


class StockHistoryResponse(BaseModel):
    model_config = ConfigDict(populate_by_name=True)

    id: str = Field(..., alias="_id")
    product_id: str
    previous_stock: int
    new_stock: int
    change: int
    reason: str
    performed_by: str
    timestamp: datetime


class LowStockProductResponse(BaseModel):
    model_config = ConfigDict(populate_by_name=True)

    id: str = Field(..., alias="_id")
    name: str
    stock: int
    min_stock: Optional[int] = None
    threshold: int
