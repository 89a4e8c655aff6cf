"""
Analytics configuration documents: A/B tests, cohorts and funnels, plus
the users and activity events they aggregate over.
"""
from typing import Any, Dict, List, Literal, Optional
from datetime import datetime
from pydantic import BaseModel, ConfigDict, Field


ABTestType = Literal["pricing", "layout", "messaging", "feature"]
ABTestStatus = Literal["draft", "running", "completed", "archived"]
GoalMetric = Literal["conversion", "revenue", "engagement", "retention"]
Variant = Literal["A", "B"]
Winner = Literal["A", "B", "none"]
CohortDefinition = Literal["signup_date", "first_purchase", "location", "custom"]


class UserDocument(BaseModel):
    model_config = ConfigDict(populate_by_name=True)

    id: Optional[str] = Field(None, alias="_id")
    name: Optional[str] = None
    email: Optional[str] = None
    phone: Optional[str] = None
    address: Optional[str] = None
    role: Literal["admin", "user", "member"] = "user"
    created_at: Optional[datetime] = None
    last_active_at: Optional[datetime] = None


class ActivityDocument(BaseModel):
    user_id: str
    action: str
    details: Optional[Dict[str, Any]] = None
    timestamp: datetime


class VariantConfig(BaseModel):
    name: str = Field(..., min_length=1)
    config: Dict[str, Any] = Field(default_factory=dict)


class ABTestDocument(BaseModel):
    """A/B test definition. Results live in the assignment and conversion collections."""
    model_config = ConfigDict(populate_by_name=True)

    id: Optional[str] = Field(None, alias="_id")
    name: str = Field(..., min_length=1)
    description: Optional[str] = None
    type: ABTestType
    status: ABTestStatus = "draft"
    variant_a: VariantConfig
    variant_b: VariantConfig
    traffic_split: float = Field(..., ge=0, le=100, description="Percentage of traffic sent to variant A")
    goal_metric: GoalMetric
    start_date: datetime
    end_date: Optional[datetime] = None
    winner: Optional[Winner] = None
    created_by: str
    created_at: datetime


class CohortDocument(BaseModel):
    model_config = ConfigDict(populate_by_name=True)

    id: Optional[str] = Field(None, alias="_id")
    name: str = Field(..., min_length=1)
    description: Optional[str] = None
    definition_type: CohortDefinition
    start_date: datetime
    end_date: datetime
    location: Optional[str] = None
    user_ids: List[str] = Field(default_factory=list)
    user_count: int = 0
    created_by: str
    created_at: datetime


class FunnelStep(BaseModel):
    name: str = Field(..., min_length=1)
    event_type: str = Field(..., min_length=1)
    order: int = Field(..., ge=0)


class FunnelDocument(BaseModel):
    model_config = ConfigDict(populate_by_name=True)

    id: Optional[str] = Field(None, alias="_id")
    name: str = Field(..., min_length=1)
    description: Optional[str] = None
    steps: List[FunnelStep] = Field(..., min_length=1)
    is_active: bool = True
    created_by: str
    created_at: datetime
