"""
A/B test endpoints.
"""
from typing import List, Optional
from fastapi import APIRouter, Depends, HTTPException, Query
import logging

from ..config.database import get_database
from ..schemas.analytics import (
    ABTestDetailResponse,
    ABTestResponse,
    CreateABTestRequest,
    DeclareWinnerRequest,
    TrackConversionRequest,
    TrackVariantRequest,
    UpdateABTestRequest,
    VariantAssignmentResponse,
)
from ..services import ab_tests
from ..utils.serializers import serialize_doc, serialize_docs

logger = logging.getLogger(__name__)

router = APIRouter(prefix="/ab-tests", tags=["A/B Tests"])


@router.post("", status_code=201, response_model=ABTestResponse)
async def create_test(test: CreateABTestRequest, db=Depends(get_database)):
    """Create a test in draft status"""
    try:
        created = await ab_tests.create_test(db, test.model_dump())
        return ABTestResponse(**serialize_doc(created))
    except HTTPException:
        raise
    except Exception as e:
        logger.error(f"Failed to create A/B test: {str(e)}")
        raise HTTPException(status_code=500, detail=f"Failed to create A/B test: {str(e)}")


@router.get("", status_code=200, response_model=List[ABTestResponse])
async def get_tests(status: Optional[str] = Query(None, description="Filter by status"), db=Depends(get_database)):
    try:
        return serialize_docs(await ab_tests.get_tests(db, status))
    except Exception as e:
        logger.error(f"Failed to fetch A/B tests: {str(e)}")
        raise HTTPException(status_code=500, detail=f"Failed to fetch A/B tests: {str(e)}")


@router.get("/active", status_code=200, response_model=List[ABTestResponse])
async def get_active_tests(db=Depends(get_database)):
    try:
        return serialize_docs(await ab_tests.get_active_tests(db))
    except Exception as e:
        logger.error(f"Failed to fetch active A/B tests: {str(e)}")
        raise HTTPException(status_code=500, detail=f"Failed to fetch active A/B tests: {str(e)}")


@router.get("/{test_id}", status_code=200, response_model=ABTestDetailResponse)
async def get_test(test_id: str, db=Depends(get_database)):
    """Test definition with per-variant results and significance"""
    try:
        result = await ab_tests.get_test_with_stats(db, test_id)
        return ABTestDetailResponse(test=serialize_doc(result["test"]), stats=result["stats"])
    except HTTPException:
        raise
    except Exception as e:
        logger.error(f"Failed to fetch A/B test {test_id}: {str(e)}")
        raise HTTPException(status_code=500, detail=f"Failed to fetch A/B test: {str(e)}")


@router.put("/{test_id}", status_code=200, response_model=ABTestResponse)
async def update_test(test_id: str, update: UpdateABTestRequest, db=Depends(get_database)):
    try:
        updates = update.model_dump(exclude_unset=True)
        if not updates:
            raise HTTPException(status_code=400, detail="No fields to update")
        updated = await ab_tests.update_test(db, test_id, updates)
        return ABTestResponse(**serialize_doc(updated))
    except HTTPException:
        raise
    except Exception as e:
        logger.error(f"Failed to update A/B test {test_id}: {str(e)}")
        raise HTTPException(status_code=500, detail=f"Failed to update A/B test: {str(e)}")


@router.delete("/{test_id}", status_code=204)
async def delete_test(test_id: str, db=Depends(get_database)):
    try:
        await ab_tests.delete_test(db, test_id)
        return None
    except HTTPException:
        raise
    except Exception as e:
        logger.error(f"Failed to delete A/B test {test_id}: {str(e)}")
        raise HTTPException(status_code=500, detail=f"Failed to delete A/B test: {str(e)}")


@router.post("/{test_id}/start", status_code=200, response_model=ABTestResponse)
async def start_test(test_id: str, db=Depends(get_database)):
    try:
        started = await ab_tests.start_test(db, test_id)
        return ABTestResponse(**serialize_doc(started))
    except HTTPException:
        raise
    except Exception as e:
        logger.error(f"Failed to start A/B test {test_id}: {str(e)}")
        raise HTTPException(status_code=500, detail=f"Failed to start A/B test: {str(e)}")


@router.post("/{test_id}/views", status_code=200, response_model=VariantAssignmentResponse)
async def track_variant_view(test_id: str, view: TrackVariantRequest, db=Depends(get_database)):
    """Assign the user to a variant, or return the variant they already have"""
    try:
        variant = await ab_tests.track_variant_view(db, test_id, view.user_id, view.variant)
        return VariantAssignmentResponse(variant=variant)
    except HTTPException:
        raise
    except Exception as e:
        logger.error(f"Failed to track view for A/B test {test_id}: {str(e)}")
        raise HTTPException(status_code=500, detail=f"Failed to track variant view: {str(e)}")


@router.post("/{test_id}/conversions", status_code=201, response_model=VariantAssignmentResponse)
async def track_conversion(test_id: str, conversion: TrackConversionRequest, db=Depends(get_database)):
    try:
        variant = await ab_tests.track_conversion(
            db, test_id, conversion.user_id, variant=conversion.variant, value=conversion.value
        )
        return VariantAssignmentResponse(variant=variant)
    except HTTPException:
        raise
    except Exception as e:
        logger.error(f"Failed to track conversion for A/B test {test_id}: {str(e)}")
        raise HTTPException(status_code=500, detail=f"Failed to track conversion: {str(e)}")


@router.post("/{test_id}/winner", status_code=200, response_model=ABTestResponse)
async def declare_winner(test_id: str, request: DeclareWinnerRequest, db=Depends(get_database)):
    """Complete the test with the chosen winner"""
    try:
        completed = await ab_tests.declare_winner(db, test_id, request.winner)
        return ABTestResponse(**serialize_doc(completed))
    except HTTPException:
        raise
    except Exception as e:
        logger.error(f"Failed to declare winner for A/B test {test_id}: {str(e)}")
        raise HTTPException(status_code=500, detail=f"Failed to declare winner: {str(e)}")
