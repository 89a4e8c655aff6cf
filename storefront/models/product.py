"""
Product data models for database documents.
These represent the actual structure of documents stored in MongoDB.
"""
from typing import List, Optional
from datetime import datetime
from uuid import uuid4
from pydantic import BaseModel, ConfigDict, Field, field_validator, model_validator

from ..utils.dates import to_naive_utc

DEFAULT_CATEGORY = "Classical"
DEFAULT_AVAILABILITY = "in_stock"
DEFAULT_PACKING_SIZES = ["30ml", "100ml"]

# Relevance weights used when building the search text
SEARCH_WEIGHTS = {
    "name": 3,
    "brand": 2,
    "symptoms": 2,
    "forms": 1,
    "potencies": 1,
    "description": 1,
}


class ProductImage(BaseModel):
    """Image attached to a product."""
    url: str = Field(..., min_length=1, description="Public image URL")
    storage_id: Optional[str] = Field(None, description="Storage key of the uploaded file")


class ScheduledPrice(BaseModel):
    """A price override that is only in effect inside a time window."""
    id: str = Field(default_factory=lambda: uuid4().hex, description="Schedule entry ID")
    price: float = Field(..., gt=0, description="Override price")
    start_date: datetime = Field(..., description="Window start (inclusive)")
    end_date: Optional[datetime] = Field(None, description="Window end (exclusive); open-ended when missing")
    is_active: bool = Field(True, description="False once the window has ended or was cancelled")
    created_at: Optional[datetime] = Field(None, description="When the entry was scheduled")

    @field_validator('start_date', 'end_date')
    @classmethod
    def normalize_dates(cls, v):
        return to_naive_utc(v)

    @model_validator(mode='after')
    def check_window(self):
        if self.end_date is not None and self.end_date <= self.start_date:
            raise ValueError('end_date must be after start_date')
        return self


class ProductDocument(BaseModel):
    """
    Product document model representing the MongoDB document structure.
    This matches how products are stored in the database.
    """
    model_config = ConfigDict(populate_by_name=True, arbitrary_types_allowed=True)

    id: Optional[str] = Field(None, alias="_id", description="Product ID")
    name: str = Field(..., min_length=1, max_length=200, description="Product name")
    description: str = Field(..., description="Product description")
    brand: Optional[str] = Field(None, max_length=100, description="Product brand")
    category: str = Field(DEFAULT_CATEGORY, description="Product category")
    availability: str = Field(DEFAULT_AVAILABILITY, description="Availability label")

    # Variants a customer can pick from
    potencies: List[str] = Field(default_factory=list, description="Available potencies, e.g. 30C")
    forms: List[str] = Field(default_factory=list, description="Available forms, e.g. Dilution")
    packing_sizes: List[str] = Field(default_factory=lambda: list(DEFAULT_PACKING_SIZES))

    # Pricing
    base_price: float = Field(..., gt=0, description="Current selling price")
    regular_price: Optional[float] = Field(None, description="Price to restore once scheduled overrides end")
    scheduled_prices: List[ScheduledPrice] = Field(default_factory=list)

    # Inventory
    stock: int = Field(0, ge=0, description="Units on hand")
    min_stock: Optional[int] = Field(None, ge=0, description="Low-stock threshold")

    # Retail content
    symptoms_tags: List[str] = Field(default_factory=list)
    key_benefits: List[str] = Field(default_factory=list)
    directions_for_use: Optional[str] = None
    safety_information: Optional[str] = None
    ingredients: Optional[str] = None
    images: List[ProductImage] = Field(default_factory=list)

    # Cached review stats
    rating_count: Optional[int] = None
    average_rating: Optional[float] = None

    search_text: Optional[str] = Field(None, description="Weighted lowercase text for search")

    # Timestamps
    created_at: Optional[datetime] = Field(None, description="Creation timestamp")
    updated_at: Optional[datetime] = Field(None, description="Last update timestamp")


def generate_search_text(
    name: str,
    brand: Optional[str],
    description: str,
    symptoms_tags: List[str],
    forms: Optional[List[str]] = None,
    potencies: Optional[List[str]] = None,
) -> str:
    """Build the lowercase search text, repeating fields by their relevance weight."""
    parts = [name] * SEARCH_WEIGHTS["name"]
    if brand:
        parts.extend([brand] * SEARCH_WEIGHTS["brand"])
    for tag in symptoms_tags:
        parts.extend([tag] * SEARCH_WEIGHTS["symptoms"])
    for form in forms or []:
        parts.extend([form] * SEARCH_WEIGHTS["forms"])
    for potency in potencies or []:
        parts.extend([potency] * SEARCH_WEIGHTS["potencies"])
    parts.extend([description] * SEARCH_WEIGHTS["description"])
    return " ".join(parts).lower()
