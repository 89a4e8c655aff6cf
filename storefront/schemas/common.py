"""
Common schemas used across the API.
"""
from typing import Any, List, Optional
from datetime import datetime
from pydantic import BaseModel, Field

from ..utils.dates import utc_now


class HealthCheckResponse(BaseModel):
    """Response schema for health check endpoint."""
    status: str = Field(..., description="Application health status")
    database: str = Field(..., description="Database connection status")
    timestamp: str = Field(..., description="Health check timestamp")
    version: str = Field(..., description="Application version")


class RootResponse(BaseModel):
    """Response schema for root endpoint."""
    message: str = Field(..., description="Welcome message")
    version: str = Field(..., description="API version")
    docs: str = Field(..., description="Documentation URL")
    health: str = Field(..., description="Health check URL")
    status: str = Field(..., description="Application status")
    timestamp: str = Field(..., description="Response timestamp")


class PaginationMeta(BaseModel):
    """Pagination metadata for list responses."""
    total: int = Field(..., description="Total number of items")
    limit: int = Field(..., description="Items per page")
    offset: int = Field(..., description="Number of items skipped")
    has_more: bool = Field(..., description="Whether there are more items")


class SuccessResponse(BaseModel):
    """Generic success response schema."""
    success: bool = Field(True, description="Operation success status")
    message: str = Field(..., description="Success message")
    data: Optional[Any] = Field(None, description="Response data")
    timestamp: datetime = Field(default_factory=utc_now, description="Response timestamp")


class ValidationErrorDetail(BaseModel):
    """Individual validation error detail."""
    field: str = Field(..., description="Field that failed validation")
    message: str = Field(..., description="Error message")
    input_value: Any = Field(None, description="Value that caused the error")


class ValidationErrorResponse(BaseModel):
    """Response schema for validation errors."""
    error: str = Field(..., description="Error type")
    message: str = Field(..., description="Human-readable error message")
    details: List[ValidationErrorDetail] = Field(..., description="Detailed validation errors")


def pagination(total: int, limit: int, offset: int) -> PaginationMeta:
    return PaginationMeta(total=total, limit=limit, offset=offset, has_more=offset + limit < total)
