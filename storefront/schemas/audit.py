"""
Audit log API schemas.
"""
from typing import List, Optional
from datetime import datetime
from pydantic import BaseModel, ConfigDict, Field

from .common import PaginationMeta


class AuditLogResponse(BaseModel):
    model_config = ConfigDict(populate_by_name=True)

    id: str = Field(..., alias="_id")
    action: str
    entity_type: str
    entity_id: Optional[str] = None
    performed_by: str
    details: Optional[str] = None
    timestamp: datetime


class AuditLogListResponse(BaseModel):
    logs: List[AuditLogResponse]
    pagination: PaginationMeta


class PriceJobResponse(BaseModel):
    updated_count: int = Field(..., description="Products moved to a scheduled price")
    reverted_count: int = Field(..., description="Products restored to their regular price")
