"""
Review data models for database documents.
"""
from typing import List, Literal, Optional
from datetime import datetime
from pydantic import BaseModel, ConfigDict, Field

ReviewStatus = Literal["pending", "approved", "rejected"]
Sentiment = Literal["positive", "neutral", "negative"]

# Reviews scoring at or above this are held for moderation
SPAM_HOLD_SCORE = 50


class ReviewDocument(BaseModel):
    """
    A customer's review of a product. Only approved reviews count toward the
    product's cached ``rating_count`` and ``average_rating``.
    """
    model_config = ConfigDict(populate_by_name=True)

    id: Optional[str] = Field(None, alias="_id")
    product_id: str
    user_id: str = Field(..., min_length=1)
    user_name: str = Field("Anonymous", min_length=1)
    rating: int = Field(..., ge=1, le=5)
    title: Optional[str] = None
    comment: Optional[str] = None
    verified_purchase: bool = False
    helpful_count: int = 0
    status: ReviewStatus = "pending"

    # Moderation signals
    spam_score: int = 0
    spam_flags: List[str] = Field(default_factory=list)
    sentiment: Sentiment = "neutral"
    sentiment_confidence: float = 0.0
    duplicate_of: Optional[str] = None

    admin_reply: Optional[str] = None
    admin_replied_at: Optional[datetime] = None
    created_at: datetime
    updated_at: Optional[datetime] = None
