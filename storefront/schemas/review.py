"""
Review API schemas.
"""
from typing import List, Literal, Optional
from datetime import datetime
from pydantic import BaseModel, ConfigDict, Field, model_validator

from ..models.review import ReviewStatus, Sentiment


class CreateReviewRequest(BaseModel):
    user_id: str = Field(..., min_length=1)
    user_name: Optional[str] = Field(None, min_length=1, max_length=100)
    rating: int = Field(..., ge=1, le=5, description="Stars, 1 to 5")
    title: Optional[str] = Field(None, max_length=200)
    comment: Optional[str] = Field(None, max_length=5000)

    @model_validator(mode='after')
    def check_text(self):
        if not (self.title or self.comment):
            raise ValueError('A review needs a title or a comment')
        return self


class ModerateReviewRequest(BaseModel):
    status: Literal["approved", "rejected", "pending"]
    performed_by: str = Field("admin", min_length=1)


class ReviewReplyRequest(BaseModel):
    reply: str = Field(..., min_length=1, max_length=2000)
    performed_by: str = Field("admin", min_length=1)


class HelpfulVoteRequest(BaseModel):
    user_id: str = Field(..., min_length=1)


class ReviewResponse(BaseModel):
    model_config = ConfigDict(populate_by_name=True)

    id: str = Field(..., alias="_id")
    product_id: str
    user_id: str
    user_name: str
    rating: int
    title: Optional[str] = None
    comment: Optional[str] = None
    verified_purchase: bool
    helpful_count: int
    status: ReviewStatus
    spam_score: int = 0
    spam_flags: List[str] = []
    sentiment: Sentiment = "neutral"
    sentiment_confidence: float = 0.0
    duplicate_of: Optional[str] = None
    admin_reply: Optional[str] = None
    admin_replied_at: Optional[datetime] = None
    created_at: datetime
    updated_at: Optional[datetime] = None
