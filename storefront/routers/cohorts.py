"""
Cohort endpoints: definitions, retention, revenue and comparison.
"""
from typing import List
from fastapi import APIRouter, Depends, HTTPException, Query
import logging

from ..config.database import get_database
from ..schemas.analytics import (
    CohortComparison,
    CohortResponse,
    CohortRevenueResponse,
    CohortUserResponse,
    CompareCohortsRequest,
    CreateCohortRequest,
    RetentionPoint,
)
from ..services import cohorts
from ..utils.serializers import serialize_doc, serialize_docs

logger = logging.getLogger(__name__)

router = APIRouter(prefix="/cohorts", tags=["Cohorts"])


@router.post("", status_code=201, response_model=CohortResponse)
async def create_cohort(cohort: CreateCohortRequest, db=Depends(get_database)):
    """Create a cohort and resolve its members from the definition"""
    try:
        created = await cohorts.create_cohort(db, cohort.model_dump())
        return CohortResponse(**serialize_doc(created))
    except HTTPException:
        raise
    except Exception as e:
        logger.error(f"Failed to create cohort: {str(e)}")
        raise HTTPException(status_code=500, detail=f"Failed to create cohort: {str(e)}")


@router.get("", status_code=200, response_model=List[CohortResponse])
async def get_cohorts(db=Depends(get_database)):
    try:
        return serialize_docs(await cohorts.get_cohorts(db))
    except Exception as e:
        logger.error(f"Failed to fetch cohorts: {str(e)}")
        raise HTTPException(status_code=500, detail=f"Failed to fetch cohorts: {str(e)}")


@router.post("/compare", status_code=200, response_model=List[CohortComparison])
async def compare_cohorts(request: CompareCohortsRequest, db=Depends(get_database)):
    try:
        return await cohorts.compare_cohorts(db, request.cohort_ids)
    except Exception as e:
        logger.error(f"Failed to compare cohorts: {str(e)}")
        raise HTTPException(status_code=500, detail=f"Failed to compare cohorts: {str(e)}")


@router.get("/{cohort_id}", status_code=200, response_model=CohortResponse)
async def get_cohort(cohort_id: str, db=Depends(get_database)):
    try:
        cohort = await cohorts.verify_cohort_exists(cohort_id, db)
        return CohortResponse(**serialize_doc(cohort))
    except HTTPException:
        raise
    except Exception as e:
        logger.error(f"Failed to fetch cohort {cohort_id}: {str(e)}")
        raise HTTPException(status_code=500, detail=f"Failed to fetch cohort: {str(e)}")


@router.delete("/{cohort_id}", status_code=204)
async def delete_cohort(cohort_id: str, db=Depends(get_database)):
    try:
        await cohorts.delete_cohort(db, cohort_id)
        return None
    except HTTPException:
        raise
    except Exception as e:
        logger.error(f"Failed to delete cohort {cohort_id}: {str(e)}")
        raise HTTPException(status_code=500, detail=f"Failed to delete cohort: {str(e)}")


@router.get("/{cohort_id}/retention", status_code=200, response_model=List[RetentionPoint])
async def get_cohort_retention(
    cohort_id: str,
    interval_days: int = Query(7, ge=1, le=365, description="Length of each retention period in days"),
    db=Depends(get_database)
):
    try:
        return await cohorts.get_cohort_retention(db, cohort_id, interval_days)
    except HTTPException:
        raise
    except Exception as e:
        logger.error(f"Failed to fetch retention for cohort {cohort_id}: {str(e)}")
        raise HTTPException(status_code=500, detail=f"Failed to fetch cohort retention: {str(e)}")


@router.get("/{cohort_id}/revenue", status_code=200, response_model=CohortRevenueResponse)
async def get_cohort_revenue(cohort_id: str, db=Depends(get_database)):
    try:
        return await cohorts.get_cohort_revenue(db, cohort_id)
    except HTTPException:
        raise
    except Exception as e:
        logger.error(f"Failed to fetch revenue for cohort {cohort_id}: {str(e)}")
        raise HTTPException(status_code=500, detail=f"Failed to fetch cohort revenue: {str(e)}")


@router.get("/{cohort_id}/users", status_code=200, response_model=List[CohortUserResponse])
async def get_cohort_users(cohort_id: str, limit: int = Query(50, ge=1, le=500), db=Depends(get_database)):
    try:
        return await cohorts.get_cohort_users(db, cohort_id, limit)
    except HTTPException:
        raise
    except Exception as e:
        logger.error(f"Failed to fetch users for cohort {cohort_id}: {str(e)}")
        raise HTTPException(status_code=500, detail=f"Failed to fetch cohort users: {str(e)}")
