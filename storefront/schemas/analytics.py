"""
Analytics API schemas: users and activity, A/B tests, cohorts and funnels.
"""
from typing import Any, Dict, List, Literal, Optional
from datetime import datetime
from pydantic import BaseModel, ConfigDict, Field, field_validator, model_validator

from ..models.analytics import (
    ABTestStatus,
    ABTestType,
    CohortDefinition,
    FunnelStep,
    GoalMetric,
    Variant,
    VariantConfig,
    Winner,
)
from ..utils.dates import to_naive_utc
from .common import PaginationMeta

Role = Literal["admin", "user", "member"]


def _naive(v):
    return to_naive_utc(v)


# Users and activity

class CreateUserRequest(BaseModel):
    name: Optional[str] = Field(None, min_length=1, max_length=200)
    email: Optional[str] = Field(None, pattern=r"^[^@\s]+@[^@\s]+\.[^@\s]+$")
    phone: Optional[str] = Field(None, min_length=7, max_length=20)
    address: Optional[str] = None
    role: Role = "user"


class UpdateUserRoleRequest(BaseModel):
    role: Role
    performed_by: str = Field("admin", min_length=1)


class UserResponse(BaseModel):
    model_config = ConfigDict(populate_by_name=True)

    id: str = Field(..., alias="_id")
    name: Optional[str] = None
    email: Optional[str] = None
    phone: Optional[str] = None
    address: Optional[str] = None
    role: str
    created_at: datetime
    last_active_at: Optional[datetime] = None


class UsersListResponse(BaseModel):
    users: List[UserResponse]
    pagination: PaginationMeta


class TrackActivityRequest(BaseModel):
    action: str = Field(..., min_length=1, max_length=100)
    details: Optional[Dict[str, Any]] = None


class ActivityResponse(BaseModel):
    model_config = ConfigDict(populate_by_name=True)

    id: str = Field(..., alias="_id")
    user_id: str
    action: str
    details: Optional[Dict[str, Any]] = None
    timestamp: datetime


# A/B tests

class CreateABTestRequest(BaseModel):
    name: str = Field(..., min_length=1, max_length=200)
    description: Optional[str] = None
    type: ABTestType
    variant_a: VariantConfig
    variant_b: VariantConfig
    traffic_split: float = Field(50, ge=0, le=100, description="Percentage of traffic for variant A")
    goal_metric: GoalMetric
    start_date: datetime
    end_date: Optional[datetime] = None
    created_by: str = Field(..., min_length=1)

    _normalize = field_validator('start_date', 'end_date')(_naive)


class UpdateABTestRequest(BaseModel):
    name: Optional[str] = Field(None, min_length=1, max_length=200)
    description: Optional[str] = None
    traffic_split: Optional[float] = Field(None, ge=0, le=100)
    end_date: Optional[datetime] = None

    _normalize = field_validator('end_date')(_naive)


class TrackVariantRequest(BaseModel):
    user_id: str = Field(..., min_length=1)
    variant: Optional[Variant] = Field(None, description="Forced variant; chosen from the traffic split when omitted")


class TrackConversionRequest(BaseModel):
    user_id: str = Field(..., min_length=1)
    variant: Optional[Variant] = None
    value: Optional[float] = Field(None, ge=0)


class DeclareWinnerRequest(BaseModel):
    winner: Winner


class VariantAssignmentResponse(BaseModel):
    variant: Variant


class ABTestResponse(BaseModel):
    model_config = ConfigDict(populate_by_name=True)

    id: str = Field(..., alias="_id")
    name: str
    description: Optional[str] = None
    type: ABTestType
    status: ABTestStatus
    variant_a: VariantConfig
    variant_b: VariantConfig
    traffic_split: float
    goal_metric: GoalMetric
    start_date: datetime
    end_date: Optional[datetime] = None
    winner: Optional[Winner] = None
    created_by: str
    created_at: datetime


class VariantStats(BaseModel):
    assignments: int
    conversions: int
    conversion_rate: float
    revenue: float


class ABTestStats(BaseModel):
    variant_a: VariantStats
    variant_b: VariantStats
    z_score: float
    is_significant: bool
    sample_size: int


class ABTestDetailResponse(BaseModel):
    test: ABTestResponse
    stats: ABTestStats


# Cohorts

class CreateCohortRequest(BaseModel):
    name: str = Field(..., min_length=1, max_length=200)
    description: Optional[str] = None
    definition_type: CohortDefinition
    start_date: datetime
    end_date: datetime
    location: Optional[str] = None
    user_ids: Optional[List[str]] = None
    created_by: str = Field(..., min_length=1)

    _normalize = field_validator('start_date', 'end_date')(_naive)

    @model_validator(mode='after')
    def check_window(self):
        if self.end_date < self.start_date:
            raise ValueError('end_date must not be before start_date')
        return self


class CohortResponse(BaseModel):
    model_config = ConfigDict(populate_by_name=True)

    id: str = Field(..., alias="_id")
    name: str
    description: Optional[str] = None
    definition_type: CohortDefinition
    start_date: datetime
    end_date: datetime
    location: Optional[str] = None
    user_ids: List[str]
    user_count: int
    created_by: str
    created_at: datetime


class RetentionPoint(BaseModel):
    interval: str
    period_start: datetime
    retained: int
    percentage: float


class MonthlyRevenue(BaseModel):
    month: str
    revenue: float


class CohortRevenueResponse(BaseModel):
    total_revenue: float
    avg_order_value: float
    avg_revenue_per_user: float
    total_orders: int
    monthly_revenue: List[MonthlyRevenue]


class CohortComparison(BaseModel):
    cohort_id: str
    name: str
    user_count: int
    total_revenue: float
    avg_revenue_per_user: float
    retention_rate: float
    start_date: datetime


class CompareCohortsRequest(BaseModel):
    cohort_ids: List[str] = Field(..., min_length=1)


class CohortUserResponse(BaseModel):
    model_config = ConfigDict(populate_by_name=True)

    id: str = Field(..., alias="_id")
    name: Optional[str] = None
    email: Optional[str] = None
    order_count: int
    total_spent: float
    last_active_at: Optional[datetime] = None


# Funnels

class CreateFunnelRequest(BaseModel):
    name: str = Field(..., min_length=1, max_length=200)
    description: Optional[str] = None
    steps: List[FunnelStep] = Field(..., min_length=1)
    created_by: str = Field(..., min_length=1)

    @field_validator('steps')
    @classmethod
    def unique_orders(cls, v):
        orders = [step.order for step in v]
        if len(orders) != len(set(orders)):
            raise ValueError('Step order values must be unique')
        return v


class UpdateFunnelRequest(BaseModel):
    name: Optional[str] = Field(None, min_length=1, max_length=200)
    description: Optional[str] = None
    steps: Optional[List[FunnelStep]] = Field(None, min_length=1)
    is_active: Optional[bool] = None


class TrackFunnelStepRequest(BaseModel):
    session_id: str = Field(..., min_length=1)
    step_index: int = Field(..., ge=0)
    step_name: str = Field(..., min_length=1)
    user_id: Optional[str] = None


class FunnelResponse(BaseModel):
    model_config = ConfigDict(populate_by_name=True)

    id: str = Field(..., alias="_id")
    name: str
    description: Optional[str] = None
    steps: List[FunnelStep]
    is_active: bool
    created_by: str
    created_at: datetime


class FunnelStepData(BaseModel):
    step_name: str
    step_index: int
    count: int
    dropoff: int
    dropoff_rate: float
    conversion_rate: float


class FunnelDataResponse(BaseModel):
    funnel: FunnelResponse
    steps: List[FunnelStepData]
    total_sessions: int
    conversion_rate: float
    completed_sessions: int


class FunnelConversion(BaseModel):
    session_id: str
    user_id: Optional[str] = None
    completed_at: datetime
    time_to_convert: float


class TimeToConvertResponse(BaseModel):
    avg_time: float
    median_time: float
    min_time: float
    max_time: float
    count: int
