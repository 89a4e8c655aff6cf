"""
Cart data models for database documents.
"""
from typing import Optional
from datetime import datetime
from pydantic import BaseModel, ConfigDict, Field


class CartItemDocument(BaseModel):
    """
    Cart row. A user holds at most one row per
    (product_id, potency, form, packing_size); repeat adds merge into it.
    """
    model_config = ConfigDict(populate_by_name=True)

    id: Optional[str] = Field(None, alias="_id", description="Cart item ID")
    user_id: str = Field(..., min_length=1)
    product_id: str = Field(...)
    potency: str = Field(..., min_length=1)
    form: str = Field(..., min_length=1)
    packing_size: Optional[str] = None
    quantity: int = Field(..., gt=0)
    created_at: Optional[datetime] = None
    updated_at: Optional[datetime] = None

    def variant_key(self) -> dict:
        """Filter matching the unique cart key of this row."""
        return {
            "user_id": self.user_id,
            "product_id": self.product_id,
            "potency": self.potency,
            "form": self.form,
            "packing_size": self.packing_size,
        }
