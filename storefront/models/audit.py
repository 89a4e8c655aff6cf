"""
Append-only log documents: the audit trail and per-product stock history.
"""
from typing import Optional
from datetime import datetime
from pydantic import BaseModel, ConfigDict, Field

SYSTEM_ACTOR = "system"


class AuditLogDocument(BaseModel):
    """A single audit trail entry. Never updated once written."""
    model_config = ConfigDict(populate_by_name=True)

    id: Optional[str] = Field(None, alias="_id")
    action: str = Field(..., min_length=1, description="What happened, e.g. apply_scheduled_price")
    entity_type: str = Field(..., min_length=1, description="Kind of entity touched")
    entity_id: Optional[str] = Field(None, description="ID of the entity touched")
    performed_by: str = Field(..., min_length=1, description="User ID or 'system'")
    details: Optional[str] = None
    timestamp: datetime


class StockHistoryDocument(BaseModel):
    """Stock level change for one product."""
    model_config = ConfigDict(populate_by_name=True)

    id: Optional[str] = Field(None, alias="_id")
    product_id: str
    previous_stock: int
    new_stock: int = Field(..., ge=0)
    change: int
    reason: str
    performed_by: str
    timestamp: datetime
