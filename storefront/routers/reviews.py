"""
Product review endpoints and the moderation queue.
"""
from typing import List
from fastapi import APIRouter, Depends, HTTPException, Query
import logging

from ..config.database import get_database
from ..models.review import ReviewStatus
from ..schemas.review import (
    CreateReviewRequest,
    HelpfulVoteRequest,
    ModerateReviewRequest,
    ReviewReplyRequest,
    ReviewResponse,
)
from ..services import reviews
from ..utils.serializers import serialize_doc, serialize_docs

logger = logging.getLogger(__name__)

router = APIRouter(tags=["Reviews"])


@router.post("/products/{product_id}/reviews", status_code=201, response_model=ReviewResponse)
async def submit_review(product_id: str, review: CreateReviewRequest, db=Depends(get_database)):
    """Submit a review; suspicious ones wait for moderation"""
    try:
        created = await reviews.submit_review(
            db,
            product_id,
            review.user_id,
            review.rating,
            title=review.title,
            comment=review.comment,
            user_name=review.user_name,
        )
        return ReviewResponse(**serialize_doc(created))
    except HTTPException:
        raise
    except Exception as e:
        logger.error(f"Failed to submit review for {product_id}: {str(e)}")
        raise HTTPException(status_code=500, detail=f"Failed to submit review: {str(e)}")


@router.get("/products/{product_id}/reviews", status_code=200, response_model=List[ReviewResponse])
async def get_product_reviews(
    product_id: str,
    include_hidden: bool = Query(False, description="Include pending and rejected reviews"),
    db=Depends(get_database)
):
    try:
        return serialize_docs(await reviews.get_product_reviews(db, product_id, include_hidden))
    except HTTPException:
        raise
    except Exception as e:
        logger.error(f"Failed to fetch reviews for {product_id}: {str(e)}")
        raise HTTPException(status_code=500, detail=f"Failed to fetch reviews: {str(e)}")


@router.get("/reviews", status_code=200, response_model=List[ReviewResponse])
async def get_reviews_by_status(
    status: ReviewStatus = Query("pending", description="Moderation status"),
    limit: int = Query(50, ge=1, le=200),
    db=Depends(get_database)
):
    """Moderation queue, oldest first"""
    try:
        return serialize_docs(await reviews.get_reviews_by_status(db, status, limit))
    except Exception as e:
        logger.error(f"Failed to fetch {status} reviews: {str(e)}")
        raise HTTPException(status_code=500, detail=f"Failed to fetch reviews: {str(e)}")


@router.patch("/reviews/{review_id}/status", status_code=200, response_model=ReviewResponse)
async def moderate_review(review_id: str, request: ModerateReviewRequest, db=Depends(get_database)):
    try:
        updated = await reviews.moderate_review(db, review_id, request.status, request.performed_by)
        return ReviewResponse(**serialize_doc(updated))
    except HTTPException:
        raise
    except Exception as e:
        logger.error(f"Failed to moderate review {review_id}: {str(e)}")
        raise HTTPException(status_code=500, detail=f"Failed to moderate review: {str(e)}")


@router.post("/reviews/{review_id}/reply", status_code=200, response_model=ReviewResponse)
async def reply_to_review(review_id: str, request: ReviewReplyRequest, db=Depends(get_database)):
    try:
        updated = await reviews.reply_to_review(db, review_id, request.reply, request.performed_by)
        return ReviewResponse(**serialize_doc(updated))
    except HTTPException:
        raise
    except Exception as e:
        logger.error(f"Failed to reply to review {review_id}: {str(e)}")
        raise HTTPException(status_code=500, detail=f"Failed to reply to review: {str(e)}")


@router.post("/reviews/{review_id}/helpful", status_code=200, response_model=ReviewResponse)
async def mark_helpful(review_id: str, vote: HelpfulVoteRequest, db=Depends(get_database)):
    try:
        updated = await reviews.mark_helpful(db, review_id, vote.user_id)
        return ReviewResponse(**serialize_doc(updated))
    except HTTPException:
        raise
    except Exception as e:
        logger.error(f"Failed to record helpful vote on {review_id}: {str(e)}")
        raise HTTPException(status_code=500, detail=f"Failed to record vote: {str(e)}")


@router.delete("/reviews/{review_id}", status_code=204)
async def delete_review(review_id: str, performed_by: str = Query("admin", min_length=1), db=Depends(get_database)):
    try:
        await reviews.delete_review(db, review_id, performed_by)
        return None
    except HTTPException:
        raise
    except Exception as e:
        logger.error(f"Failed to delete review {review_id}: {str(e)}")
        raise HTTPException(status_code=500, detail=f"Failed to delete review: {str(e)}")
